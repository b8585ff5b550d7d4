from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.middleware.request_trace import trace_extra

from ..exceptions import PostServiceError, StoreUnavailableError, ValidationError
from .schemas.posts import ErrorItem, ErrorResponse


logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "an error occurred while processing your request"

# RequestValidationError 의 loc 앞부분(body/query/path)은 필드 이름이 아니므로 제외한다.
_LOC_SOURCES = {"body", "query", "path", "header"}


def _error_response(status_code: int, payload: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(exclude_none=True),
    )


async def handle_post_service_error(request: Request, exc: PostServiceError) -> JSONResponse:
    if isinstance(exc, StoreUnavailableError) or exc.status_code >= 500:
        # 내부 원인은 로그에만 남기고 응답에는 노출하지 않는다.
        logger.error(
            "store failure while handling %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
            extra=trace_extra(request),
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(detail=GENERIC_ERROR_MESSAGE),
        )

    errors = None
    if isinstance(exc, ValidationError) and exc.violations:
        errors = [ErrorItem(field=v.field, message=v.message) for v in exc.violations]
    return _error_response(exc.status_code, ErrorResponse(detail=exc.message, errors=errors))


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """깨진 JSON, 잘못된 타입 등 pydantic 단계 실패도 400 + 필드 목록으로 응답한다."""

    errors: list[ErrorItem] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in _LOC_SOURCES]
        errors.append(ErrorItem(field=".".join(loc) or "request", message=str(err.get("msg", ""))))

    logger.warning(
        "malformed request: %s",
        ", ".join(e.field for e in errors),
        extra=trace_extra(request),
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(detail="one or more validation errors occurred", errors=errors),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unexpected error while handling %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
        extra=trace_extra(request),
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(detail=GENERIC_ERROR_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PostServiceError, handle_post_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)
