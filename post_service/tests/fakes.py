from __future__ import annotations

from datetime import datetime, timezone

from common.models.post import ListPostsFilter, Post
from post_service.app.exceptions import ConcurrencyConflictError
from post_service.app.repositories.interfaces import PostRepositoryInterface


class InMemoryPostRepository(PostRepositoryInterface):
    """dict 기반 PostRepository. Mongo 구현과 같은 version 규칙을 따른다."""

    def __init__(self) -> None:
        self._rows: dict[int, Post] = {}
        self._seq = 0

    def _copy(self, post: Post) -> Post:
        return post.model_copy(deep=True)

    def list_all(self) -> list[Post]:
        return [self._copy(p) for p in self._rows.values()]

    def list_ordered_by_created_desc(
        self, flt: ListPostsFilter | None = None
    ) -> list[Post]:
        normalized = (flt or ListPostsFilter()).normalized()
        rows = list(self._rows.values())
        if normalized.title is not None:
            needle = normalized.title.lower()
            rows = [p for p in rows if needle in p.title.lower()]
        if normalized.content is not None:
            needle = normalized.content.lower()
            rows = [p for p in rows if needle in p.body.lower()]
        rows.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return [self._copy(p) for p in rows]

    def find_by_id(self, id_value: int) -> Post | None:
        found = self._rows.get(id_value)
        return self._copy(found) if found is not None else None

    def insert(self, post: Post) -> Post:
        self._seq += 1
        post.id = self._seq
        post.version = 1
        self._rows[post.id] = self._copy(post)
        return post

    def update(self, post: Post) -> None:
        current = self._rows.get(post.id or 0)
        if current is None or current.version != post.version:
            raise ConcurrencyConflictError(
                "the record you attempted to update was modified by another user"
            )
        current.title = post.title
        current.body = post.body
        current.version += 1
        post.version = current.version

    def delete_by_id(self, id_value: int) -> bool:
        return self._rows.pop(id_value, None) is not None

    def exists(self, id_value: int) -> bool:
        return id_value in self._rows

    def delete_by_owner(self, owner_id: str) -> int:
        ids = [pid for pid, p in self._rows.items() if p.owner_id == owner_id]
        for pid in ids:
            del self._rows[pid]
        return len(ids)

    # --- test helpers ------------------------------------------------------------
    def seed(
        self,
        title: str,
        body: str,
        owner_id: str | None = "user-a",
        created_at: datetime | None = None,
    ) -> Post:
        post = Post(
            title=title,
            body=body,
            owner_id=owner_id,
            created_at=created_at or datetime.now(timezone.utc),
        )
        return self.insert(post)

    def touch(self, post_id: int) -> None:
        """다른 요청이 먼저 수정한 상황을 흉내낸다."""
        self._rows[post_id].version += 1
