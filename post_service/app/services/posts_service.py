from __future__ import annotations

import logging

from fastapi import Depends
from pymongo.database import Database

from common.models.post import ListPostsFilter, Post
from common.models.user import ActingUser, AuthMode
from common.mongo.client import get_database
from common.types.datetime import utc_now

from .. import mappers
from ..api.schemas.posts import CreatePostRequest, UpdatePostRequest
from ..authorization import ADMIN_ROLE, can_mutate
from ..config import AppConfig, get_app_config
from ..exceptions import (
    ConcurrencyConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ..repositories.interfaces import PostRepositoryInterface
from ..repositories.post_repository import PostRepository
from ..validation import (
    CREATE_POST_RULES,
    SEARCH_RULES,
    UPDATE_POST_RULES,
    FieldViolation,
    validate,
)

logger = logging.getLogger(__name__)


POST_NOT_FOUND_MESSAGE = "post not found"


class PostsService:
    """포스트 CRUD/검색 비즈니스 로직.

    - Repository(PostRepositoryInterface)에만 의존하고, Mongo 세부 구현은 알지 않는다.
    - 각 연산은 검증 -> 인가 -> 매핑 -> 저장 순서의 단일 파이프라인이며, 첫 실패에서 바로 예외를 던진다.
    - auth_mode 가 REQUIRED 면 모든 연산에 acting user 가 필요하고, 수정/삭제는 소유자 또는 관리자만 가능하다.
      NONE 이면 익명 접근을 허용하고 소유권 검사를 하지 않는다.
    - 인스턴스에는 요청 간 공유 상태가 없다. 상태는 저장소에만 있다.
    """

    def __init__(
        self,
        post_repo: PostRepositoryInterface,
        auth_mode: AuthMode = AuthMode.REQUIRED,
        admin_role: str = ADMIN_ROLE,
    ) -> None:
        self._post_repo = post_repo
        self._auth_mode = auth_mode
        self._admin_role = admin_role

    # --- queries -----------------------------------------------------------------
    def list_posts(
        self,
        acting_user: ActingUser | None,
        title: str | None = None,
        content: str | None = None,
    ) -> list[Post]:
        """전체 목록. 검색 파라미터가 하나라도 넘어오면 search_posts 와 동일하게 처리한다."""

        if title is None and content is None:
            self._resolve_user(acting_user, "list")
            logger.info("fetching all posts")
            return self._post_repo.list_all()
        return self.search_posts(acting_user, title=title, content=content)

    def search_posts(
        self,
        acting_user: ActingUser | None,
        title: str | None = None,
        content: str | None = None,
    ) -> list[Post]:
        """제목/본문 부분 문자열 검색. 둘 다 비어 있으면 ValidationError."""

        violations = validate({"title": title, "content": content}, SEARCH_RULES)
        if violations:
            logger.warning("search called without any search parameters")
            raise ValidationError.from_violations(violations)

        self._resolve_user(acting_user, "search")

        posts = self._post_repo.list_ordered_by_created_desc(
            ListPostsFilter(title=title, content=content)
        )
        logger.info("search completed. found %d matching posts", len(posts))
        return posts

    def get_post(self, acting_user: ActingUser | None, post_id: int) -> Post:
        self._resolve_user(acting_user, "get")

        logger.info("fetching post with id: %s", post_id)
        return self._load(post_id, "get")

    # --- commands ----------------------------------------------------------------
    def create_post(
        self, request: CreatePostRequest, acting_user: ActingUser | None
    ) -> Post:
        """포스트를 생성한다. owner 는 acting user, created_at 은 현재 UTC 시각이다."""

        self._ensure_valid(validate(request, CREATE_POST_RULES), "create")
        user = self._resolve_user(acting_user, "create")

        post = mappers.to_entity(request)
        post.created_at = utc_now()
        if user is not None:
            post.owner_id = user.user_code
            post.owner_name = user.name

        created = self._post_repo.insert(post)
        logger.info(
            "created new post with id: %s",
            created.id,
            extra={"post_id": created.id, "operation": "create"},
        )
        return created

    def update_post(
        self,
        post_id: int,
        request: UpdatePostRequest,
        acting_user: ActingUser | None,
    ) -> None:
        self._ensure_valid(validate(request, UPDATE_POST_RULES), "update")
        if request.id != post_id:
            logger.warning(
                "id mismatch in update request. url id: %s, body id: %s",
                post_id,
                request.id,
            )
            raise ValidationError.from_violations(
                [
                    FieldViolation(
                        field="id",
                        message="id in the url does not match the id in the request body",
                    )
                ]
            )

        post = self._load(post_id, "update")
        user = self._resolve_user(acting_user, "update")
        self._authorize_mutation(user, post, "update")

        mappers.apply_update(request, post)
        try:
            self._post_repo.update(post)
        except ConcurrencyConflictError:
            # 그 사이 삭제되었는지, 다른 요청이 먼저 수정했는지를 구분한다.
            if not self._post_repo.exists(post_id):
                logger.warning("concurrency conflict: post with id %s not found", post_id)
                raise NotFoundError(POST_NOT_FOUND_MESSAGE) from None
            logger.error("concurrency error while updating post with id: %s", post_id)
            raise

        logger.info(
            "updated post with id: %s",
            post_id,
            extra={"post_id": post_id, "operation": "update"},
        )

    def delete_post(self, post_id: int, acting_user: ActingUser | None) -> None:
        post = self._load(post_id, "delete")
        user = self._resolve_user(acting_user, "delete")
        self._authorize_mutation(user, post, "delete")

        if not self._post_repo.delete_by_id(post_id):
            logger.warning("post with id %s was deleted concurrently", post_id)
            raise NotFoundError(POST_NOT_FOUND_MESSAGE)

        logger.info(
            "deleted post with id: %s",
            post_id,
            extra={"post_id": post_id, "operation": "delete"},
        )

    def delete_posts_by_owner(self, user_code: str) -> int:
        """유저 삭제 시 해당 유저의 모든 포스트를 삭제한다. (내부용)"""

        deleted = self._post_repo.delete_by_owner(user_code)
        logger.info("deleted %d posts owned by %s", deleted, user_code)
        return deleted

    # --- helpers -----------------------------------------------------------------
    def _load(self, post_id: int, operation: str) -> Post:
        post = self._post_repo.find_by_id(post_id)
        if post is None:
            logger.warning(
                "post with id %s not found for %s",
                post_id,
                operation,
                extra={"post_id": post_id, "operation": operation},
            )
            raise NotFoundError(POST_NOT_FOUND_MESSAGE)
        return post

    def _ensure_valid(self, violations: list[FieldViolation], operation: str) -> None:
        if not violations:
            return
        logger.warning(
            "invalid %s request: %s",
            operation,
            ", ".join(v.field for v in violations),
        )
        raise ValidationError.from_violations(violations)

    def _resolve_user(
        self, acting_user: ActingUser | None, operation: str
    ) -> ActingUser | None:
        if acting_user is None and self._auth_mode is AuthMode.REQUIRED:
            logger.warning("unauthenticated %s request rejected", operation)
            raise UnauthorizedError("authentication required")
        return acting_user

    def _authorize_mutation(
        self, user: ActingUser | None, post: Post, operation: str
    ) -> None:
        if self._auth_mode is AuthMode.NONE:
            return
        # REQUIRED 모드에서는 _resolve_user 가 이미 None 을 걸러냈다.
        assert user is not None
        if not can_mutate(user, post, self._admin_role):
            logger.warning(
                "user %s is not allowed to %s post %s",
                user.user_code,
                operation,
                post.id,
                extra={"post_id": post.id, "operation": operation},
            )
            raise ForbiddenError(f"you are not allowed to {operation} this post")


def get_post_repository(
    db: Database = Depends(get_database),
) -> PostRepositoryInterface:
    """FastAPI DI용 PostRepository 팩토리."""

    return PostRepository(db)


def get_posts_service(
    repo: PostRepositoryInterface = Depends(get_post_repository),
    config: AppConfig = Depends(get_app_config),
) -> PostsService:
    """FastAPI DI용 PostsService 팩토리."""

    return PostsService(
        repo,
        auth_mode=config.post_service.auth_mode,
        admin_role=config.post_service.admin_role,
    )
