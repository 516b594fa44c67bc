import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from core.database import Base, create_db_engine, create_session_factory
from services.incident_service import IncidentLifecycleService
from services.photo_storage import PhotoStorage

# Ensure models are registered with SQLAlchemy metadata
import models.incident  # noqa: F401
import models.audit_log  # noqa: F401

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    engine = create_db_engine(TEST_DATABASE_URL)
    TestingSessionLocal = create_session_factory(engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def photo_storage(photo_dir: Path) -> PhotoStorage:
    return PhotoStorage(photo_dir, max_upload_bytes=10 * 1024 * 1024)


@pytest.fixture
def incident_service(db_session, photo_storage) -> IncidentLifecycleService:
    return IncidentLifecycleService(db_session, photo_storage)


@pytest.fixture
def make_image():
    """Write an image file; noise=True produces content JPEG cannot shrink much."""

    def _make_image(path: Path, size=(640, 480), mode="RGB", noise=False, image_format=None) -> Path:
        if noise:
            image = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
            if mode != "RGB":
                image = image.convert(mode)
        else:
            color = (200, 40, 40, 255)[: len(mode)] if mode in ("RGB", "RGBA") else 128
            image = Image.new(mode, size, color)
        image.save(path, format=image_format)
        return path

    return _make_image


@pytest.fixture(scope="function")
def client(tmp_path: Path):
    from main import create_app

    app = create_app(database_url=TEST_DATABASE_URL, upload_dir=tmp_path / "api-uploads")
    with TestClient(app) as test_client:
        yield test_client
