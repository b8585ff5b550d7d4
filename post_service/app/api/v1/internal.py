from __future__ import annotations

from fastapi import APIRouter, Depends

from ...services.posts_service import PostsService, get_posts_service
from ..schemas.posts import DeletedPostsResponse


router = APIRouter()


@router.delete(
    "/users/{user_code}/posts",
    response_model=DeletedPostsResponse,
    summary="유저 포스트 일괄 삭제 (내부용)",
    description="user-service 가 유저를 삭제할 때 호출한다. 해당 유저 소유 포스트를 모두 삭제한다.",
)
def delete_user_posts(
    user_code: str,
    service: PostsService = Depends(get_posts_service),
) -> DeletedPostsResponse:
    """유저 식별 없이 동작한다. API Gateway 는 /api/v1/internal 경로를 외부에 노출하지 않아야 한다."""

    deleted = service.delete_posts_by_owner(user_code)
    return DeletedPostsResponse(deleted=deleted)
