from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from common.models.post import ListPostsFilter, Post
from common.mongo.client import COUNTERS_COLLECTION, POSTS_COLLECTION
from common.types.datetime import utc_now

from ..exceptions import ConcurrencyConflictError, StoreUnavailableError
from .documents.post_document import PostDocument
from .interfaces import PostRepositoryInterface


POST_ID_SEQUENCE = "posts"


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """pymongo 예외를 StoreUnavailableError 로 감싼다. 도메인 예외는 그대로 통과한다."""

    try:
        yield
    except PyMongoError as exc:
        raise StoreUnavailableError(f"post store unavailable during {operation}") from exc


class PostRepository(PostRepositoryInterface):
    """posts 컬렉션에 대한 MongoDB 접근 레이어.

    - _id 는 counters 컬렉션의 시퀀스로 발급한 정수이다.
    - version 필드로 낙관적 동시성 제어를 한다.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database[POSTS_COLLECTION]
        self._counters = database[COUNTERS_COLLECTION]

    # --- helpers -----------------------------------------------------------------
    @staticmethod
    def _from_document(doc: dict) -> Post:
        return PostDocument.model_validate(doc).to_domain()

    @staticmethod
    def _build_filter(flt: ListPostsFilter | None) -> dict:
        """제목/본문 부분 일치 조건. 사용자 입력은 정규식이 아닌 리터럴로 취급한다."""

        filter_doc: dict = {}
        if flt is None:
            return filter_doc

        normalized = flt.normalized()
        if normalized.title is not None:
            filter_doc["title"] = {"$regex": re.escape(normalized.title), "$options": "i"}
        if normalized.content is not None:
            filter_doc["body"] = {"$regex": re.escape(normalized.content), "$options": "i"}
        return filter_doc

    def _next_id(self) -> int:
        counter = self._counters.find_one_and_update(
            {"_id": POST_ID_SEQUENCE},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    # --- queries -----------------------------------------------------------------
    def list_all(self) -> list[Post]:
        with _store_errors("list_all"):
            return [self._from_document(doc) for doc in self._col.find({})]

    def list_ordered_by_created_desc(
        self, flt: ListPostsFilter | None = None
    ) -> list[Post]:
        filter_doc = self._build_filter(flt)
        with _store_errors("list_ordered_by_created_desc"):
            cursor = self._col.find(
                filter_doc,
                sort=[("created_at", -1), ("_id", -1)],
            )
            return [self._from_document(doc) for doc in cursor]

    def find_by_id(self, id_value: int) -> Post | None:
        with _store_errors("find_by_id"):
            doc = self._col.find_one({"_id": id_value})
        if not doc:
            return None
        return self._from_document(doc)

    def exists(self, id_value: int) -> bool:
        with _store_errors("exists"):
            found = self._col.find_one({"_id": id_value}, {"_id": 1})
        return found is not None

    # --- commands ----------------------------------------------------------------
    def insert(self, post: Post) -> Post:
        """새 포스트를 삽입한다. 발급된 id 와 version 을 post 에 채워 반환한다."""

        if post.created_at is None:
            post.created_at = utc_now()

        with _store_errors("insert"):
            post.id = self._next_id()
            post.version = 1
            doc = PostDocument.from_domain(post).to_mongo_record()
            self._col.insert_one(doc)
        return post

    def update(self, post: Post) -> None:
        with _store_errors("update"):
            result = self._col.update_one(
                {"_id": post.id, "version": post.version},
                {
                    "$set": {"title": post.title, "body": post.body},
                    "$inc": {"version": 1},
                },
            )
        if result.matched_count == 0:
            raise ConcurrencyConflictError(
                "the record you attempted to update was modified by another user",
            )
        post.version += 1

    def delete_by_id(self, id_value: int) -> bool:
        with _store_errors("delete_by_id"):
            result = self._col.delete_one({"_id": id_value})
        return result.deleted_count > 0

    def delete_by_owner(self, owner_id: str) -> int:
        with _store_errors("delete_by_owner"):
            result = self._col.delete_many({"owner_id": owner_id})
        return int(result.deleted_count)
