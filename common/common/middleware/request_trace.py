import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response


REQUEST_ID_HEADER = "X-Request-Id"
SPAN_ID_HEADER = "X-Span-Id"
USER_CODE_HEADER = "X-User-Code"

# 헬스체크처럼 노이즈만 만드는 경로는 access 로그에서 제외한다.
IGNORED_LOG_PATHS: frozenset[str] = frozenset({"/health"})

MAX_LOGGED_BODY_LENGTH = 1024


def trace_extra(request: Request) -> dict[str, object]:
    """에러 핸들러 등에서 요청 컨텍스트를 로그 extra 로 붙일 때 사용한다."""

    extra: dict[str, object] = {
        "method": request.method,
        "path": request.url.path,
    }
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        extra["request_id"] = request_id
    span_id = getattr(request.state, "span_id", None)
    if span_id:
        extra["span_id"] = span_id
    user_code = request.headers.get(USER_CODE_HEADER)
    if user_code:
        extra["user_code"] = user_code
    return extra


class RequestTraceMiddleware(BaseHTTPMiddleware):
    """Request/Span ID 전파 및 access 로그 미들웨어.

    - X-Request-Id 가 없으면 새로 만들고, X-Span-Id 가 없으면 "0" 을 사용한다.
    - request.state 에 저장해 핸들러/에러 로그에서 같은 ID 를 쓰도록 한다.
    - 응답 헤더에 같은 값을 돌려준다.
    - 쓰기 요청은 바디 앞부분을 함께 기록한다.
    """

    def __init__(self, app, logger: logging.Logger | None = None) -> None:  # type: ignore[override]
        super().__init__(app)
        self._logger = logger or logging.getLogger("request_trace")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        span_id = request.headers.get(SPAN_ID_HEADER) or "0"
        request.state.request_id = request_id
        request.state.span_id = span_id
        request.state.request_body = await self._read_body_snippet(request)

        should_log = request.url.path not in IGNORED_LOG_PATHS
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception:
            if should_log:
                self._logger.exception(
                    "request failed",
                    extra=self._build_extra(request, duration=time.monotonic() - start),
                )
            raise

        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        response.headers.setdefault(SPAN_ID_HEADER, span_id)

        if should_log:
            self._logger.info(
                "completed request",
                extra=self._build_extra(
                    request,
                    status=response.status_code,
                    duration=time.monotonic() - start,
                ),
            )

        return response

    async def _read_body_snippet(self, request: Request) -> str | None:
        if request.method not in {"POST", "PUT", "PATCH", "DELETE"}:
            return None
        body_bytes = await request.body()
        if not body_bytes:
            return None
        return body_bytes.decode("utf-8", errors="replace")[:MAX_LOGGED_BODY_LENGTH]

    def _build_extra(
        self,
        request: Request,
        status: int | None = None,
        duration: float | None = None,
    ) -> dict[str, object]:
        extra = trace_extra(request)

        if request.query_params:
            extra["query_params"] = dict(request.query_params)

        body = getattr(request.state, "request_body", None)
        if body:
            extra["body"] = body

        if status is not None:
            extra["status"] = status

        if duration is not None:
            extra["duration"] = f"{duration * 1000:.3f}ms"

        return extra
