from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from _helpers import (
    ALICE_ID,
    BOB_ID,
    TEST_SECRET,
    FakePostRepository,
    FakeUserRepository,
    issue_token,
)
from post_service.app.config import ApiConfig, AppConfig, AuthConfig
from post_service.app.main import create_app
from post_service.app.services.posts_service import PostsService, get_posts_service


@pytest.fixture
def post_repo() -> FakePostRepository:
    return FakePostRepository()


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def service(post_repo: FakePostRepository, user_repo: FakeUserRepository) -> PostsService:
    return PostsService(post_repo, user_repo)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        auth=AuthConfig(jwt_secret=TEST_SECRET),
        api=ApiConfig(prefix="/api"),
    )


@pytest.fixture
def service_factory_calls() -> list[int]:
    return []


@pytest.fixture
def app(
    app_config: AppConfig,
    service: PostsService,
    service_factory_calls: list[int],
) -> FastAPI:
    application = create_app(app_config)

    def _override() -> PostsService:
        service_factory_calls.append(1)
        return service

    application.dependency_overrides[get_posts_service] = _override
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def alice_headers() -> dict[str, str]:
    return {"x-auth-token": issue_token(ALICE_ID)}


@pytest.fixture
def bob_headers() -> dict[str, str]:
    return {"x-auth-token": issue_token(BOB_ID)}
