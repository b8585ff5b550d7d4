from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


DEFAULT_ROLE = "user"


class AuthMode(StrEnum):
    """posts API 의 인증 모드.

    - NONE: 익명 접근. 누구나 생성/조회/수정/삭제할 수 있고 소유권 검사를 하지 않는다.
    - REQUIRED: 모든 요청에 acting user 가 필요하며, 수정/삭제는 소유자 또는 관리자만 가능하다.
    """

    NONE = "none"
    REQUIRED = "required"


class ActingUser(BaseModel):
    """현재 요청을 보낸 유저.

    - API Gateway 가 인증 후 전달한 헤더에서 만들어지며, 이 서비스는 유저를 저장하지 않는다.
    - user_code 는 user-service 의 내부 식별자("<provider>:<uuid>")와 같다.
    """

    user_code: str
    roles: tuple[str, ...] = Field(default=(DEFAULT_ROLE,))
    name: str | None = None

    def has_role(self, role: str) -> bool:
        """역할 보유 여부 (대소문자 무시)."""

        wanted = role.strip().lower()
        return any(r.strip().lower() == wanted for r in self.roles)
