# app/api/v1/categories.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.crud import category as category_crud
from app.db.session import get_db
from app.schemas.category import Category, CategoryCreate
from app.schemas.common import MessageResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/categories", response_model=List[Category])
def get_categories(db: Session = Depends(get_db)):
    return category_crud.list_categories(db)


@router.post("/categories", response_model=Category, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return category_crud.create_category(db, payload.name)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    category_crud.delete_category(db, category_id)
    return MessageResponse(message="Category deleted successfully.")
