import os
import tempfile

# keep log files out of the working tree; read when filekeeper.core.config is imported
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="filekeeper-logs-"))
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="filekeeper-uploads-"))

import pytest
from fastapi.testclient import TestClient

from filekeeper.core.config import Settings
from filekeeper.main import create_app
from filekeeper.services.filestore import FileRepository
from filekeeper.services.metadata import MetadataStore


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def settings(storage_dir, tmp_path):
    return Settings(STORAGE_DIR=str(storage_dir), LOG_DIR=str(tmp_path / "logs"))


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def repo(storage_dir):
    return FileRepository(storage_dir)


@pytest.fixture
def store():
    return MetadataStore()


@pytest.fixture
def upload(client):
    def _upload(name, content=b"hello", metadata=None):
        data = {"metadata": metadata} if metadata is not None else {}
        resp = client.post("/upload", files={"file": (name, content)}, data=data)
        assert resp.status_code == 200, resp.text
        return resp.json()
    return _upload
