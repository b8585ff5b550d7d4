from __future__ import annotations

from fastapi import Header

from common.models.user import DEFAULT_ROLE, ActingUser


def resolve_acting_user(
    user_code: str | None,
    role: str | None = None,
    name: str | None = None,
) -> ActingUser | None:
    """API Gateway 가 전달한 유저 헤더 값으로 ActingUser 를 만든다.

    - user_code 가 없거나 공백이면 None (식별 불가).
    - role 은 콤마로 여러 개를 받을 수 있고, 비어 있으면 기본 역할(user)을 사용한다.
    """

    code = (user_code or "").strip()
    if not code:
        return None

    roles = tuple(r.strip() for r in (role or "").split(",") if r.strip())
    return ActingUser(
        user_code=code,
        roles=roles or (DEFAULT_ROLE,),
        name=(name or "").strip() or None,
    )


def get_acting_user(
    x_user_code: str | None = Header(default=None, description="인증된 유저 코드"),
    x_user_role: str | None = Header(default=None, description="유저 역할 (콤마 구분)"),
    x_user_name: str | None = Header(default=None, description="유저 표시 이름"),
) -> ActingUser | None:
    """FastAPI DI용 acting user 리졸버. 인증 필요 여부는 PostsService 가 판단한다."""

    return resolve_acting_user(x_user_code, x_user_role, x_user_name)
