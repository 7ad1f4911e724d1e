# Ensure the src directory is in sys.path for test discovery and imports
import sys
import os

src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if src_path not in sys.path:
    sys.path.insert(0, src_path)

import logging
from pathlib import Path

import pytest
from dotenv import load_dotenv

from filestorage.backends.local_file_storage import LocalFileBucket, LocalFileStorage

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def load_test_env():
    """
    Automatically load .env.test for all tests in this session.
    """
    env_path = Path(__file__).parent.parent / ".env.test"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)


@pytest.fixture
def clean_env(monkeypatch):
    """Clears all FILESTORAGE_ env vars to isolate settings tests."""
    for key in list(os.environ.keys()):
        if key.startswith("FILESTORAGE_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def storage_root(tmp_path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def external_path(tmp_path) -> Path:
    """Directory outside of the storage, used for copying files in and out."""
    path = tmp_path / "external"
    path.mkdir()
    return path


@pytest.fixture
def local_storage(storage_root) -> LocalFileStorage:
    return LocalFileStorage(base_path=str(storage_root), base_url="http://files.test")


@pytest.fixture
def local_bucket(local_storage) -> LocalFileBucket:
    local_storage.add_bucket("test_bucket")
    return local_storage.get_bucket("test_bucket")
