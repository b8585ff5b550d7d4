from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import BeforeValidator


def utc_now() -> datetime:
    """tz-aware 현재 UTC 시각."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """datetime 을 UTC 로 정규화한다.

    - tzinfo 가 없으면 UTC 로 간주한다. (pymongo 는 기본적으로 naive UTC 를 돌려준다)
    - tzinfo 가 있으면 UTC 로 변환한다.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def serialize_datetime_to_utc_iso8601(value: datetime) -> str:
    return ensure_utc(value).isoformat()


def _ensure_utc_if_datetime(value: object) -> object:
    if isinstance(value, datetime):
        return ensure_utc(value)
    return value


# 입력 시 UTC 로 정규화하고, JSON 직렬화 시 ISO8601(+00:00) 문자열로 내보낸다.
UtcDateTime = Annotated[
    datetime,
    BeforeValidator(_ensure_utc_if_datetime),
    PlainSerializer(
        serialize_datetime_to_utc_iso8601,
        return_type=str,
        when_used="json",
    ),
]
