from __future__ import annotations

from common.models.post import Post
from common.mongo.types import BaseDocument


class PostDocument(BaseDocument):
    """MongoDB posts 컬렉션 도큐먼트 모델."""

    title: str
    body: str
    owner_id: str | None = None
    owner_name: str | None = None
    version: int = 1

    @classmethod
    def from_domain(cls, post: Post) -> "PostDocument":
        data = post.model_dump()
        _id = data.pop("id", None)
        if _id is not None:
            data["_id"] = _id

        return cls.model_validate(data)

    def to_domain(self) -> Post:
        return Post(
            id=self.id,
            title=self.title,
            body=self.body,
            created_at=self.created_at,
            owner_id=self.owner_id,
            owner_name=self.owner_name,
            version=self.version,
        )
