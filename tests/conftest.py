# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Sets up the test environment before any application import, then provides
# an in-memory database, a recording fake storage gateway and a TestClient
# wired to both.
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.config.settings builds its Settings instance at import time

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("S3_ENDPOINT_URL", "http://localhost:9000")
os.environ.setdefault("S3_REGION", "us-east-1")
os.environ.setdefault("S3_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("S3_SECRET_ACCESS_KEY", "test-secret-key")
os.environ.setdefault("S3_BUCKET_NAME", "test-media")
os.environ.setdefault("S3_PUBLIC_BASE_URL", "http://cdn.test")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["USE_SSM"] = "false"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import session as db_session
from app.db.models.Category import Category
from app.db.models.Image import Image
from app.exceptions import StorageError
from app.services.storage import PresignedUpload, build_object_key, get_storage


# =============================================================================
# Fakes
# =============================================================================

class FakeStorage:
    """In-memory stand-in for StorageGateway that records every call."""

    def __init__(self):
        self.bucket = "test-media"
        self.issued = []
        self.deleted = []
        self.objects = {}
        self.fail_deletes = set()
        self.fail_issue = False

    def public_url(self, key):
        return f"http://cdn.test/{self.bucket}/{key}"

    def issue_upload_url(self, filename, content_type, size):
        if self.fail_issue:
            raise StorageError("Failed to generate upload URL")
        key = build_object_key(filename)
        self.issued.append({"key": key, "filename": filename, "content_type": content_type, "size": size})
        return PresignedUpload(
            key=key,
            presigned_url=f"http://storage.test/{self.bucket}/{key}?X-Amz-Expires=360",
            public_url=self.public_url(key),
        )

    def delete_object(self, key):
        if key in self.fail_deletes:
            raise StorageError("File deletion failed", details={"key": key})
        self.deleted.append(key)
        self.objects.pop(key, None)
        return key

    def iter_objects(self):
        for key, last_modified in list(self.objects.items()):
            yield key, last_modified


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db_session.init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(engine, session_factory, storage, monkeypatch):
    from main import app

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", session_factory)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[db_session.get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_image(db):
    """Insert an image row directly, with a controllable creation time."""
    base_time = datetime(2024, 1, 1, 12, 0, 0)
    counter = {"n": 0}

    def _make_image(title=None, categories=(), created_at=None, storage_key=None):
        counter["n"] += 1
        n = counter["n"]
        key = storage_key or f"key-{n}-image{n}.webp"
        image = Image(
            title=title or f"image {n}",
            storage_key=key,
            url=f"http://cdn.test/test-media/{key}",
            created_at=created_at or base_time + timedelta(minutes=n),
            categories=list(categories),
        )
        db.add(image)
        db.commit()
        db.refresh(image)
        return image

    return _make_image


@pytest.fixture
def make_category(db):
    def _make_category(name):
        category = Category(name=name)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make_category
