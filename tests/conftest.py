import pytest
from fastapi.testclient import TestClient

import auth_service
import config
from storage import InMemoryRepository


@pytest.fixture
def repo():
    repository = InMemoryRepository()
    config.set_repository(repository)
    yield repository
    config.set_repository(None)


@pytest.fixture
def alex(repo):
    return auth_service.ensure_user("mock-alex", "alex@campus.edu", "Alex Chen", repo=repo)


@pytest.fixture
def client(repo):
    from api import app
    with TestClient(app) as test_client:
        yield test_client
