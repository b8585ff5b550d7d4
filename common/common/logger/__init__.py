import json
import logging
import os
import sys


# extra 로 넘어오면 JSON 필드로 그대로 옮겨 적는 키
_EXTRA_KEYS: tuple[str, ...] = (
    "request_id",
    "span_id",
    "user_code",
    "post_id",
    "operation",
    "method",
    "path",
    "query_params",
    "status",
    "body",
    "duration",
)

# uvicorn 기본 access 로그는 RequestTraceMiddleware 로그와 중복되므로 레벨을 올린다.
_NOISY_LOGGERS: tuple[str, ...] = ("uvicorn.access", "pymongo")


def resolve_log_level(level: str | None = None) -> int:
    """문자열 레벨(또는 LOG_LEVEL 환경변수)을 logging 상수로 바꾼다. 모르는 값은 INFO."""

    raw = level if level is not None else os.getenv("LOG_LEVEL", "INFO")
    return getattr(logging, raw.strip().upper(), logging.INFO)


def setup_logger(name: str = "post-service", level: str | None = None) -> logging.Logger:
    """서비스 로거에 stdout JSON 핸들러를 붙이고 반환한다.

    SERVICE_NAME 환경변수가 있으면 name 대신 사용한다. 여러 번 호출해도 핸들러는 하나만 유지된다.
    """
    log_level = resolve_log_level(level)
    service_name = os.getenv("SERVICE_NAME", name)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter(service_name=service_name))

    service_logger = logging.getLogger(service_name)
    service_logger.handlers = [handler]
    service_logger.setLevel(log_level)
    service_logger.propagate = False

    # app.* 모듈 로거는 루트로 전파된다.
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    return service_logger


class JsonFormatter(logging.Formatter):
    """레코드 하나를 JSON 한 줄로 출력한다.

    기본 필드: datetime, level, logger, message (+ service_name, exc_info)
    """

    def __init__(self, service_name: str | None = None) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "datetime": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            {key: getattr(record, key) for key in _EXTRA_KEYS if hasattr(record, key)}
        )

        service_name = getattr(record, "service_name", None) or self._service_name
        if service_name:
            payload["service_name"] = service_name

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)
