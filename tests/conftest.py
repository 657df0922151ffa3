"""
Test setup: point the app at a throwaway SQLite database and storage
directory before any app module builds its engine or settings.
"""

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="speech_collector_test_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["STORAGE_DIR"] = str(_TMP / "objects")
os.environ["STORIES_DIR"] = str(_TMP / "stories")
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["AUTO_SETUP"] = "false"

import pytest

from app import storage
from app.config import get_settings
from app.object_storage import get_storage


@pytest.fixture
def db():
    """Fresh, empty schema for every test."""
    storage.Base.metadata.drop_all(bind=storage.engine)
    storage.init_db()
    yield
    storage.Base.metadata.drop_all(bind=storage.engine)


@pytest.fixture
def object_store():
    return get_storage()


@pytest.fixture
def stories_dir():
    path = Path(get_settings().stories_dir)
    path.mkdir(parents=True, exist_ok=True)
    for old in path.glob("*.txt"):
        old.unlink()
    return path
