from sqlalchemy import create_engine, QueuePool
from sqlalchemy.orm import sessionmaker
from app.config.settings import settings
from app.db.base import Base


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # recycle connections every 30 minutes
        pool_pre_ping=True,
    )

engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(bind=None):
    # Register every mapped class before creating tables
    import app.db.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
