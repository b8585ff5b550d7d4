from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from common.models.user import AuthMode
from post_service.app.config import AppConfig, PostServiceConfig, get_app_config
from post_service.app.main import create_app
from post_service.app.services.posts_service import get_post_repository
from post_service.tests.fakes import InMemoryPostRepository


@pytest.fixture
def repo() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
def auth_mode() -> AuthMode:
    return AuthMode.REQUIRED


@pytest.fixture
def app(repo: InMemoryPostRepository, auth_mode: AuthMode) -> FastAPI:
    application = create_app()
    application.dependency_overrides[get_post_repository] = lambda: repo
    application.dependency_overrides[get_app_config] = lambda: AppConfig(
        post_service=PostServiceConfig(auth_mode=auth_mode)
    )
    return application


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client

