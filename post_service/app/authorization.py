from __future__ import annotations

from common.models.post import Post
from common.models.user import ActingUser


ADMIN_ROLE = "admin"


def can_mutate(acting_user: ActingUser, post: Post, admin_role: str = ADMIN_ROLE) -> bool:
    """포스트 수정/삭제 권한: 소유자이거나 관리자 역할을 가진 경우에만 True."""

    if post.owner_id is not None and acting_user.user_code == post.owner_id:
        return True
    return acting_user.has_role(admin_role)
