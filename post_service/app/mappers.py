"""DTO <-> 도메인 Post 변환.

검증은 하지 않는다. 입력은 이미 ``validation`` 규칙을 통과했다고 가정한다.
"""

from __future__ import annotations

from collections.abc import Iterable

from common.models.post import Post

from .api.schemas.posts import (
    CreatePostRequest,
    OwnerSummary,
    PostResponse,
    UpdatePostRequest,
)


def to_entity(request: CreatePostRequest) -> Post:
    """저장 전 Post 를 만든다. id/created_at/owner 는 비워 둔다."""

    return Post(title=request.title or "", body=request.body or "")


def apply_update(request: UpdatePostRequest, post: Post) -> Post:
    """title/body 만 덮어쓴다. id, created_at, owner, version 은 건드리지 않는다."""

    post.title = request.title or ""
    post.body = request.body or ""
    return post


def to_response(post: Post) -> PostResponse:
    owner = None
    if post.owner_id is not None:
        owner = OwnerSummary(user_code=post.owner_id, name=post.owner_name)

    assert post.id is not None and post.created_at is not None, "post is not persisted"
    return PostResponse(
        id=post.id,
        title=post.title,
        body=post.body,
        created_at=post.created_at,
        owner=owner,
    )


def to_responses(posts: Iterable[Post]) -> list[PostResponse]:
    return [to_response(post) for post in posts]
