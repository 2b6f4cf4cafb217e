import time
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from webar.core.config import Settings
from webar.main import create_app


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "environment": "test",
        "storage": {
            "upload_dir": tmp_path / "uploads",
            "data_file": tmp_path / "data" / "db.json",
        },
        "upload": {"max_file_size": 64 * 1024, "max_props": 3, "chunk_size": 4096},
        "delivery": {"chunk_size": 1000},
        "optimizer": {"enabled": False},
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def wait_for(predicate: Callable[[], bool], timeout: float = 10.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def model_bytes() -> bytes:
    return bytes(range(256)) * 40
