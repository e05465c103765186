import pytest
from sqlalchemy.orm import sessionmaker

from apu_estimator.core.config import settings
from apu_estimator.db import models  # noqa: F401
from apu_estimator.db.base import Base
from apu_estimator.db.session import make_engine
from apu_estimator.services.editor import get_editor
from apu_estimator.services.storage import SqlDocumentStorage
from apu_estimator.services.store import ProjectStore


@pytest.fixture
def storage(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield SqlDocumentStorage(sessionmaker(bind=engine, autoflush=False, expire_on_commit=False))
    engine.dispose()


@pytest.fixture
def store(storage):
    s = ProjectStore(storage, key="test-projects")
    s.load()
    return s


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setattr(settings, "DATABASE_URL", "sqlite://")
    get_editor().discard()
    yield
    get_editor().discard()
