import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.categories import router as categories_router
from app.api.v1.images import router as images_router
from app.api.v1.s3 import router as s3_router
from app.config.settings import settings
from app.core.limiter import limiter
from app.crud.category import ensure_default_category
from app.db import session as db_session
from app.exceptions import (
    MediaLibraryException,
    media_library_exception_handler,
    request_validation_exception_handler,
    sqlalchemy_exception_handler,
    unhandled_exception_handler,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "categories",
        "description": "Create, list and delete image categories.",
    },
    {
        "name": "images",
        "description": "Browse and edit image metadata.",
    },
    {
        "name": "storage",
        "description": "Presigned uploads and deletion of stored objects.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_session.init_db()
    db = db_session.SessionLocal()
    try:
        app.state.default_category_id = ensure_default_category(db).id
    finally:
        db.close()
    logger.info(f"Default category ready (id={app.state.default_category_id})")
    yield


app = FastAPI(
    title="Media Library",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(MediaLibraryException, media_library_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# CORS policy
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(categories_router, prefix="/api/media", tags=["categories"])
app.include_router(images_router, prefix="/api/media", tags=["images"])
app.include_router(s3_router, prefix="/api/media", tags=["storage"])


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
