from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from common.models.post import Post
from common.models.user import AuthMode
from post_service.app.exceptions import StoreUnavailableError
from post_service.tests.fakes import InMemoryPostRepository


USER_A = {"X-User-Code": "user-a", "X-User-Name": "Alice"}
USER_B = {"X-User-Code": "user-b"}
ADMIN = {"X-User-Code": "admin-1", "X-User-Role": "user,Admin"}

POSTS_URL = "/api/v1/posts"


def _create(client: TestClient, title: str, body: str, headers: dict) -> dict:
    response = client.post(POSTS_URL, json={"title": title, "body": body}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_does_not_require_identity(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_hello_world_ownership_scenario(client: TestClient) -> None:
    # given: user A 가 포스트를 만든다.
    response = client.post(
        POSTS_URL, json={"title": "Hello World", "body": "First post"}, headers=USER_A
    )
    assert response.status_code == 201
    created = response.json()
    post_id = created["id"]
    assert created["owner"] == {"user_code": "user-a", "name": "Alice"}
    assert response.headers["Location"].endswith(f"{POSTS_URL}/{post_id}")

    fetched = client.get(f"{POSTS_URL}/{post_id}", headers=USER_A).json()
    assert fetched["title"] == "Hello World"
    assert fetched["body"] == "First post"

    update_body = {"id": post_id, "title": "Hello Universe", "body": "First post"}

    # when: 소유자가 아닌 user B 가 수정하면 403 이고 내용은 그대로다.
    response = client.put(f"{POSTS_URL}/{post_id}", json=update_body, headers=USER_B)
    assert response.status_code == 403
    assert client.get(f"{POSTS_URL}/{post_id}", headers=USER_B).json()["title"] == "Hello World"

    # when: 소유자가 수정하면 204
    response = client.put(f"{POSTS_URL}/{post_id}", json=update_body, headers=USER_A)
    assert response.status_code == 204
    assert client.get(f"{POSTS_URL}/{post_id}", headers=USER_A).json()["title"] == "Hello Universe"

    # then: 삭제 후 조회하면 404
    response = client.delete(f"{POSTS_URL}/{post_id}", headers=USER_A)
    assert response.status_code == 204
    response = client.get(f"{POSTS_URL}/{post_id}", headers=USER_A)
    assert response.status_code == 404
    assert response.json() == {"detail": "post not found"}


def test_create_with_two_character_title_is_rejected(
    client: TestClient, repo: InMemoryPostRepository
) -> None:
    response = client.post(POSTS_URL, json={"title": "Hi", "body": "First post"}, headers=USER_A)

    assert response.status_code == 400
    payload = response.json()
    assert [e["field"] for e in payload["errors"]] == ["title"]
    assert repo.list_all() == []


def test_create_lists_every_failing_field(client: TestClient) -> None:
    response = client.post(POSTS_URL, json={"title": " "}, headers=USER_A)

    assert response.status_code == 400
    payload = response.json()
    assert payload["detail"] == "one or more validation errors occurred"
    assert {e["field"] for e in payload["errors"]} == {"title", "body"}


def test_malformed_json_is_bad_request(client: TestClient) -> None:
    response = client.post(
        POSTS_URL,
        content=b"{not json",
        headers={**USER_A, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["errors"]


def test_non_integer_id_is_bad_request(client: TestClient) -> None:
    response = client.get(f"{POSTS_URL}/abc", headers=USER_A)

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "post_id"


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", POSTS_URL),
        ("GET", f"{POSTS_URL}/1"),
        ("GET", f"{POSTS_URL}/search?title=hello"),
        ("DELETE", f"{POSTS_URL}/1"),
    ],
)
def test_requests_without_identity_are_unauthorized(
    client: TestClient, repo: InMemoryPostRepository, method: str, path: str
) -> None:
    repo.seed("Hello World", "First post")

    response = client.request(method, path)

    assert response.status_code == 401
    assert response.json() == {"detail": "authentication required"}


def test_create_without_identity_is_unauthorized(client: TestClient) -> None:
    response = client.post(POSTS_URL, json={"title": "Hello", "body": "body"})

    assert response.status_code == 401


def test_update_path_and_body_id_mismatch(
    client: TestClient, repo: InMemoryPostRepository
) -> None:
    post = repo.seed("Hello World", "First post")

    response = client.put(
        f"{POSTS_URL}/{post.id}",
        json={"id": (post.id or 0) + 1, "title": "Hello", "body": "body"},
        headers=USER_A,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "id in the url does not match the id in the request body"


def test_update_missing_post_is_not_found(client: TestClient) -> None:
    response = client.put(
        f"{POSTS_URL}/42", json={"id": 42, "title": "Hello", "body": "body"}, headers=USER_A
    )

    assert response.status_code == 404


def test_update_conflict_is_409(client: TestClient, repo: InMemoryPostRepository) -> None:
    post = repo.seed("Hello World", "First post")
    original_update = repo.update

    def racing_update(p: Post) -> None:
        repo.touch(p.id or 0)
        original_update(p)

    repo.update = racing_update  # type: ignore[method-assign]

    response = client.put(
        f"{POSTS_URL}/{post.id}",
        json={"id": post.id, "title": "Hello Universe", "body": "First post"},
        headers=USER_A,
    )

    assert response.status_code == 409
    assert "modified by another user" in response.json()["detail"]


def test_admin_can_delete_other_users_post(
    client: TestClient, repo: InMemoryPostRepository
) -> None:
    post = repo.seed("Hello World", "First post", owner_id="user-a")

    assert client.delete(f"{POSTS_URL}/{post.id}", headers=USER_B).status_code == 403
    assert client.delete(f"{POSTS_URL}/{post.id}", headers=ADMIN).status_code == 204
    assert not repo.exists(post.id or 0)


def test_deleted_post_is_not_listed(client: TestClient) -> None:
    keep = _create(client, "Keep me", "body", USER_A)
    drop = _create(client, "Drop me", "body", USER_A)

    client.delete(f"{POSTS_URL}/{drop['id']}", headers=USER_A)

    ids = [p["id"] for p in client.get(POSTS_URL, headers=USER_B).json()]
    assert ids == [keep["id"]]


def test_search_requires_a_parameter(client: TestClient) -> None:
    response = client.get(f"{POSTS_URL}/search", params={"title": " "}, headers=USER_A)

    assert response.status_code == 400
    assert response.json()["detail"] == (
        "at least one search parameter (title or content) is required"
    )
    assert [e["field"] for e in response.json()["errors"]] == ["title"]


def test_list_with_blank_filters_is_validated_like_search(client: TestClient) -> None:
    response = client.get(POSTS_URL, params={"title": "", "content": ""}, headers=USER_A)

    assert response.status_code == 400


def test_search_and_filtered_list_return_newest_first(
    client: TestClient, repo: InMemoryPostRepository
) -> None:
    now = datetime.now(timezone.utc)
    old = repo.seed("Hello World", "First post", created_at=now - timedelta(hours=2))
    new = repo.seed("Another hello", "Second post", created_at=now - timedelta(hours=1))
    repo.seed("Unrelated", "Nothing", created_at=now)

    searched = client.get(f"{POSTS_URL}/search", params={"title": "HELLO"}, headers=USER_A)
    listed = client.get(POSTS_URL, params={"title": "hello"}, headers=USER_A)

    assert searched.status_code == 200
    assert [p["id"] for p in searched.json()] == [new.id, old.id]
    assert [p["id"] for p in listed.json()] == [new.id, old.id]


def test_internal_cascade_deletes_users_posts(
    client: TestClient, repo: InMemoryPostRepository
) -> None:
    repo.seed("Post one", "body", owner_id="user-a")
    repo.seed("Post two", "body", owner_id="user-b")

    response = client.delete("/api/v1/internal/users/user-a/posts")

    assert response.status_code == 200
    assert response.json() == {"deleted": 1}
    assert [p.owner_id for p in repo.list_all()] == ["user-b"]


def test_store_failure_is_generic_500(
    client: TestClient, repo: InMemoryPostRepository
) -> None:
    def broken_list_all() -> list[Post]:
        raise StoreUnavailableError("post store unavailable during list_all: host db-1 down")

    repo.list_all = broken_list_all  # type: ignore[method-assign]

    response = client.get(POSTS_URL, headers=USER_A)

    assert response.status_code == 500
    assert response.json() == {"detail": "an error occurred while processing your request"}


def test_request_id_is_echoed(client: TestClient) -> None:
    response = client.get(POSTS_URL, headers={**USER_A, "X-Request-Id": "req-123"})

    assert response.headers["X-Request-Id"] == "req-123"


@pytest.mark.parametrize("auth_mode", [AuthMode.NONE])
def test_anonymous_mode_allows_full_crud_without_identity(
    client: TestClient, auth_mode: AuthMode
) -> None:
    created = _create(client, "Anonymous post", "body", headers={})
    assert "owner" not in created or created["owner"] is None

    post_id = created["id"]
    response = client.put(
        f"{POSTS_URL}/{post_id}",
        json={"id": post_id, "title": "Still anonymous", "body": "body"},
    )
    assert response.status_code == 204
    assert client.get(f"{POSTS_URL}/{post_id}").json()["title"] == "Still anonymous"
    assert client.delete(f"{POSTS_URL}/{post_id}").status_code == 204
