from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from _helpers import ALICE_ID, BOB_ID, FakePostRepository, build_post, issue_token
from common.mongo import client as mongo_client
from common.mongo.errors import StoreOperationError
from post_service.app.services.posts_service import get_posts_service


PROTECTED_ENDPOINTS = [
    ("post", "/api/posts", {"text": "hello"}),
    ("get", "/api/posts", None),
    ("get", "/api/posts/64b7f0c2a1b2c3d4e5f60aaa", None),
    ("delete", "/api/posts/64b7f0c2a1b2c3d4e5f60aaa", None),
    ("put", "/api/posts/like/64b7f0c2a1b2c3d4e5f60aaa", None),
    ("put", "/api/posts/unlike/64b7f0c2a1b2c3d4e5f60aaa", None),
    ("post", "/api/posts/comment/64b7f0c2a1b2c3d4e5f60aaa", {"text": "hi"}),
    ("delete", "/api/posts/comment/64b7f0c2a1b2c3d4e5f60aaa/64b7f0c2a1b2c3d4e5f60bbb", None),
]


def _call(client: TestClient, method: str, url: str, body, headers=None):
    kwargs = {"headers": headers or {}}
    if body is not None:
        kwargs["json"] = body
    return client.request(method.upper(), url, **kwargs)


@pytest.mark.parametrize("method,url,body", PROTECTED_ENDPOINTS)
def test_missing_token_is_rejected_before_storage(
    client: TestClient,
    service_factory_calls: list[int],
    method: str,
    url: str,
    body,
) -> None:
    response = _call(client, method, url, body)

    assert response.status_code == 401
    assert response.json() == {"msg": "no token, authorization denied"}
    assert service_factory_calls == []


@pytest.mark.parametrize("method,url,body", PROTECTED_ENDPOINTS)
def test_invalid_token_is_rejected_before_storage(
    client: TestClient,
    service_factory_calls: list[int],
    method: str,
    url: str,
    body,
) -> None:
    headers = {"x-auth-token": issue_token(ALICE_ID, secret="wrong-secret")}

    response = _call(client, method, url, body, headers)

    assert response.status_code == 401
    assert response.json() == {"msg": "token is not valid"}
    assert service_factory_calls == []


def test_create_like_and_like_again_scenario(
    client: TestClient, alice_headers: dict[str, str]
) -> None:
    # given
    created = client.post("/api/posts", json={"text": "hello"}, headers=alice_headers)
    assert created.status_code == 200
    post = created.json()
    assert post["text"] == "hello"
    assert post["user"] == ALICE_ID
    assert post["name"] == "Alice"

    # when
    first = client.put(f"/api/posts/like/{post['id']}", headers=alice_headers)
    second = client.put(f"/api/posts/like/{post['id']}", headers=alice_headers)

    # then
    assert first.status_code == 200
    assert [like["user"] for like in first.json()] == [ALICE_ID]
    assert second.status_code == 400
    assert second.json() == {"msg": "post already liked"}

    fetched = client.get(f"/api/posts/{post['id']}", headers=alice_headers).json()
    assert len(fetched["likes"]) == 1


def test_create_post_requires_text(client: TestClient, alice_headers: dict[str, str]) -> None:
    response = client.post("/api/posts", json={"text": ""}, headers=alice_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["errors"][0]["msg"] == "Text is required"
    assert body["errors"][0]["param"] == "text"


def test_create_post_without_body_is_validation_error(
    client: TestClient, alice_headers: dict[str, str]
) -> None:
    response = client.post("/api/posts", json={}, headers=alice_headers)

    assert response.status_code == 400
    assert "errors" in response.json()


def test_list_posts_newest_first(client: TestClient, alice_headers: dict[str, str]) -> None:
    client.post("/api/posts", json={"text": "first"}, headers=alice_headers)
    client.post("/api/posts", json={"text": "second"}, headers=alice_headers)

    response = client.get("/api/posts", headers=alice_headers)

    assert response.status_code == 200
    assert [p["text"] for p in response.json()] == ["second", "first"]


@pytest.mark.parametrize("post_id", ["64b7f0c2a1b2c3d4e5f6ffff", "not-an-id"])
def test_get_unknown_post_is_404(
    client: TestClient, alice_headers: dict[str, str], post_id: str
) -> None:
    response = client.get(f"/api/posts/{post_id}", headers=alice_headers)

    assert response.status_code == 404
    assert response.json() == {"msg": "post not found"}


def test_delete_nonexistent_post_is_404(
    client: TestClient, alice_headers: dict[str, str]
) -> None:
    response = client.delete("/api/posts/64b7f0c2a1b2c3d4e5f6ffff", headers=alice_headers)

    assert response.status_code == 404
    assert response.json() == {"msg": "post not found"}


def test_delete_post_ownership(
    client: TestClient,
    post_repo: FakePostRepository,
    alice_headers: dict[str, str],
    bob_headers: dict[str, str],
) -> None:
    post = post_repo.add(build_post(user=ALICE_ID))

    # when: 작성자가 아닌 유저가 삭제를 시도한다.
    denied = client.delete(f"/api/posts/{post.id}", headers=bob_headers)

    # then
    assert denied.status_code == 401
    assert denied.json() == {"msg": "user not authorized"}
    assert post.id in post_repo.posts

    removed = client.delete(f"/api/posts/{post.id}", headers=alice_headers)
    assert removed.status_code == 200
    assert removed.json() == {"msg": "post removed"}
    assert post.id not in post_repo.posts


def test_unlike_flow(
    client: TestClient, post_repo: FakePostRepository, bob_headers: dict[str, str]
) -> None:
    post = post_repo.add(build_post())

    not_liked = client.put(f"/api/posts/unlike/{post.id}", headers=bob_headers)
    assert not_liked.status_code == 400
    assert not_liked.json() == {"msg": "post has not yet been liked"}

    client.put(f"/api/posts/like/{post.id}", headers=bob_headers)
    unliked = client.put(f"/api/posts/unlike/{post.id}", headers=bob_headers)
    assert unliked.status_code == 200
    assert unliked.json() == []


def test_comment_flow(
    client: TestClient,
    post_repo: FakePostRepository,
    alice_headers: dict[str, str],
    bob_headers: dict[str, str],
) -> None:
    post = post_repo.add(build_post())

    # given
    added = client.post(
        f"/api/posts/comment/{post.id}", json={"text": "nice"}, headers=bob_headers
    )
    assert added.status_code == 200
    comment = added.json()[0]
    assert (comment["text"], comment["user"], comment["name"]) == ("nice", BOB_ID, "Bob")

    # when: 작성자가 아닌 유저의 삭제 시도는 거부된다.
    denied = client.delete(
        f"/api/posts/comment/{post.id}/{comment['id']}", headers=alice_headers
    )
    assert denied.status_code == 401
    assert len(post_repo.posts[post.id].comments) == 1

    # then
    removed = client.delete(
        f"/api/posts/comment/{post.id}/{comment['id']}", headers=bob_headers
    )
    assert removed.status_code == 200
    assert removed.json() == []
    assert post_repo.posts[post.id].comments == []


def test_delete_missing_comment_is_404(
    client: TestClient, post_repo: FakePostRepository, alice_headers: dict[str, str]
) -> None:
    post = post_repo.add(build_post())

    response = client.delete(
        f"/api/posts/comment/{post.id}/64b7f0c2a1b2c3d4e5f60009", headers=alice_headers
    )

    assert response.status_code == 404
    assert response.json() == {"msg": "comment does not exist"}


def test_comment_requires_text(
    client: TestClient, post_repo: FakePostRepository, alice_headers: dict[str, str]
) -> None:
    post = post_repo.add(build_post())

    response = client.post(
        f"/api/posts/comment/{post.id}", json={"text": ""}, headers=alice_headers
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["msg"] == "Text is required"


def test_store_failure_is_plain_text_500(
    client: TestClient, post_repo: FakePostRepository, alice_headers: dict[str, str]
) -> None:
    post_repo.fail_with = StoreOperationError("connection reset")

    response = client.get("/api/posts", headers=alice_headers)

    assert response.status_code == 500
    assert response.text == "Server Error"


def test_response_carries_trace_headers(
    client: TestClient, alice_headers: dict[str, str]
) -> None:
    response = client.get(
        "/api/posts", headers={**alice_headers, "X-Request-Id": "req-1"}
    )

    assert response.headers["X-Request-Id"] == "req-1"
    assert response.headers["X-Span-Id"] == "0"


def test_health_does_not_require_token(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("reachable,status", [(True, 200), (False, 503)])
def test_readiness_reflects_database_ping(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, reachable: bool, status: int
) -> None:
    monkeypatch.setattr(mongo_client, "ping", lambda: reachable)

    response = client.get("/health/ready")

    assert response.status_code == status


class _BrokenPostsService:
    def list_posts(self):
        raise KeyError("likes")


def test_unexpected_error_is_plain_text_500_with_trace_headers(
    app: FastAPI, alice_headers: dict[str, str]
) -> None:
    # given: 서비스가 도메인 오류가 아닌 예외를 던진다.
    app.dependency_overrides[get_posts_service] = _BrokenPostsService
    client = TestClient(app, raise_server_exceptions=False)

    # when
    response = client.get(
        "/api/posts", headers={**alice_headers, "X-Request-Id": "req-500"}
    )

    # then
    assert response.status_code == 500
    assert response.text == "Server Error"
    assert response.headers["X-Request-Id"] == "req-500"
    assert response.headers["X-Span-Id"] == "0"
