from __future__ import annotations

import io
import os

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import mediabox.models  # noqa: F401
from mediabox.core.config import MediaBoxConfig
from mediabox.core.database import Base, enable_sqlite_foreign_keys
from mediabox.services.boxes import BoxService
from mediabox.storage.local import LocalBackend


class RecordingBackend(LocalBackend):
    """Local backend that remembers every mutating call."""

    def __init__(self, root, base_url="/storage"):
        super().__init__(root, base_url)
        self.calls: list[tuple[str, str]] = []

    def put(self, path, data, content_type=None):
        self.calls.append(("put", path))
        super().put(path, data, content_type)

    def delete(self, path):
        self.calls.append(("delete", path))
        super().delete(path)

    def delete_directory(self, path):
        self.calls.append(("delete_directory", path))
        super().delete_directory(path)


def image_bytes(width: int = 64, height: int = 32, fmt: str = "PNG", noise: bool = False) -> bytes:
    if noise:
        img = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    else:
        img = Image.new("RGB", (width, height), color="white")
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def db_session() -> Session:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def config() -> MediaBoxConfig:
    return MediaBoxConfig(prefix="mbox", default_max_size=10 * 1024 * 1024, uri_salt="test-salt")


@pytest.fixture()
def backend(tmp_path) -> RecordingBackend:
    return RecordingBackend(tmp_path / "storage", base_url="http://media.example.com/storage")


@pytest.fixture()
def boxes(db_session, config, backend) -> BoxService:
    return BoxService(db_session, config, backend)


@pytest.fixture()
def box(boxes):
    return boxes.create("owner-1")
