from __future__ import annotations

from pydantic import BaseModel

from common.types.datetime import UtcDateTime


class CreatePostRequest(BaseModel):
    """포스트 생성 요청 DTO.

    필드 누락도 400 + 필드별 메시지로 응답하기 위해 pydantic 단계에서는 None 을 허용하고,
    실제 규칙은 ``validation.CREATE_POST_RULES`` 가 검사한다.
    """

    title: str | None = None
    body: str | None = None


class UpdatePostRequest(BaseModel):
    """포스트 수정 요청 DTO. id 는 경로의 post_id 와 같아야 한다."""

    id: int | None = None
    title: str | None = None
    body: str | None = None


class OwnerSummary(BaseModel):
    user_code: str
    name: str | None = None


class PostResponse(BaseModel):
    """포스트 응답 DTO.

    도메인 모델(Post)을 그대로 노출하지 않는다. version 같은 저장소 내부 필드는 빠진다.
    """

    id: int
    title: str
    body: str
    created_at: UtcDateTime
    owner: OwnerSummary | None = None


class DeletedPostsResponse(BaseModel):
    deleted: int


class ErrorItem(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """모든 에러 응답의 공통 형태."""

    detail: str
    errors: list[ErrorItem] | None = None
