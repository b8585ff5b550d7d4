from __future__ import annotations

from typing import Protocol

from common.models.post import ListPostsFilter, Post


class PostRepositoryInterface(Protocol):
    """PostRepository가 따라야 할 최소한의 계약.

    - Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo, 인메모리 등)은 모른다.
    - 모든 메서드는 인프라 장애 시 StoreUnavailableError 를 발생시킬 수 있다.
    - 각 쓰기 연산은 단일 레코드 단위로 원자적이다.
    """

    def list_all(self) -> list[Post]:  # pragma: no cover - Protocol
        """저장소 기본 순서로 전체 포스트를 반환한다."""
        ...

    def list_ordered_by_created_desc(
        self, flt: ListPostsFilter | None = None
    ) -> list[Post]:  # pragma: no cover - Protocol
        """제목/본문 부분 문자열(대소문자 무시)로 거른 뒤 최신순으로 반환한다."""
        ...

    def find_by_id(self, id_value: int) -> Post | None:  # pragma: no cover - Protocol
        ...

    def insert(self, post: Post) -> Post:  # pragma: no cover - Protocol
        """id 를 발급하고 version=1 로 저장한 뒤 같은 객체를 반환한다."""
        ...

    def update(self, post: Post) -> None:  # pragma: no cover - Protocol
        """로드 시점의 version 과 일치할 때만 title/body 를 덮어쓴다.

        일치하는 레코드가 없으면(그 사이 수정/삭제됨) ConcurrencyConflictError.
        """
        ...

    def delete_by_id(self, id_value: int) -> bool:  # pragma: no cover - Protocol
        ...

    def exists(self, id_value: int) -> bool:  # pragma: no cover - Protocol
        ...

    def delete_by_owner(self, owner_id: str) -> int:  # pragma: no cover - Protocol
        """유저 삭제 cascade. 삭제된 포스트 수를 반환한다."""
        ...
