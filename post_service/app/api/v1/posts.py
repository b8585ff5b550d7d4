from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from common.models.user import ActingUser

from ... import mappers
from ...identity import get_acting_user
from ...services.posts_service import PostsService, get_posts_service
from ..schemas.posts import (
    CreatePostRequest,
    ErrorResponse,
    PostResponse,
    UpdatePostRequest,
)


router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "잘못된 요청"},
    401: {"model": ErrorResponse, "description": "인증 필요"},
    403: {"model": ErrorResponse, "description": "소유자/관리자 아님"},
    404: {"model": ErrorResponse, "description": "포스트 없음"},
    409: {"model": ErrorResponse, "description": "동시 수정 충돌"},
    500: {"model": ErrorResponse, "description": "서버 오류"},
}


def _responses(*codes: int) -> dict:
    return {code: _ERROR_RESPONSES[code] for code in codes}


@router.get(
    "",
    response_model=list[PostResponse],
    summary="포스트 목록 조회",
    description=(
        "전체 포스트를 반환한다. title/content 가 하나라도 주어지면 "
        "검색과 동일하게 동작한다 (최신순, 하나 이상 non-blank 필수)."
    ),
    responses=_responses(400, 401, 500),
)
def list_posts(
    title: Optional[str] = Query(default=None, description="제목 부분 일치 (대소문자 무시)"),
    content: Optional[str] = Query(default=None, description="본문 부분 일치 (대소문자 무시)"),
    acting_user: ActingUser | None = Depends(get_acting_user),
    service: PostsService = Depends(get_posts_service),
) -> list[PostResponse]:
    posts = service.list_posts(acting_user, title=title, content=content)
    return mappers.to_responses(posts)


@router.get(
    "/search",
    response_model=list[PostResponse],
    summary="포스트 검색",
    description="제목/본문 부분 문자열로 검색하여 최신순으로 반환한다.",
    responses=_responses(400, 401, 500),
)
def search_posts(
    title: Optional[str] = Query(default=None, description="제목 부분 일치 (대소문자 무시)"),
    content: Optional[str] = Query(default=None, description="본문 부분 일치 (대소문자 무시)"),
    acting_user: ActingUser | None = Depends(get_acting_user),
    service: PostsService = Depends(get_posts_service),
) -> list[PostResponse]:
    posts = service.search_posts(acting_user, title=title, content=content)
    return mappers.to_responses(posts)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    summary="단일 포스트 조회",
    responses=_responses(401, 404, 500),
)
def get_post(
    post_id: int,
    acting_user: ActingUser | None = Depends(get_acting_user),
    service: PostsService = Depends(get_posts_service),
) -> PostResponse:
    return mappers.to_response(service.get_post(acting_user, post_id))


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="포스트 생성",
    description="acting user 를 소유자로 포스트를 생성하고 Location 헤더로 조회 경로를 알려준다.",
    responses=_responses(400, 401, 500),
)
def create_post(
    body: CreatePostRequest,
    request: Request,
    response: Response,
    acting_user: ActingUser | None = Depends(get_acting_user),
    service: PostsService = Depends(get_posts_service),
) -> PostResponse:
    post = service.create_post(body, acting_user)
    response.headers["Location"] = str(request.url_for("get_post", post_id=post.id))
    return mappers.to_response(post)


@router.put(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="포스트 수정",
    description="title/body 만 수정한다. 소유자 또는 관리자만 가능하다.",
    responses=_responses(400, 401, 403, 404, 409, 500),
)
def update_post(
    post_id: int,
    body: UpdatePostRequest,
    acting_user: ActingUser | None = Depends(get_acting_user),
    service: PostsService = Depends(get_posts_service),
) -> Response:
    service.update_post(post_id, body, acting_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="포스트 삭제",
    description="소유자 또는 관리자만 가능하다.",
    responses=_responses(401, 403, 404, 500),
)
def delete_post(
    post_id: int,
    acting_user: ActingUser | None = Depends(get_acting_user),
    service: PostsService = Depends(get_posts_service),
) -> Response:
    service.delete_post(post_id, acting_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
