"""요청 DTO 필드 검증 규칙.

규칙은 (field, check, message) 로 선언하고, ``validate`` 하나로 평가한다.
필드별로 첫 번째 위반만 보고하므로 "required" 가 실패하면 길이 규칙은 건너뛴다.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200


@dataclass(frozen=True, slots=True)
class FieldViolation:
    field: str
    message: str


@dataclass(frozen=True, slots=True)
class FieldRule:
    """payload 전체를 받아 통과 여부를 돌려주는 단일 규칙."""

    field: str
    check: Callable[[Mapping[str, Any]], bool]
    message: str


def _is_not_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def required(field: str) -> FieldRule:
    return FieldRule(
        field=field,
        check=lambda payload: payload.get(field) is not None,
        message=f"{field} is required",
    )


def not_blank(field: str) -> FieldRule:
    return FieldRule(
        field=field,
        check=lambda payload: _is_not_blank(payload.get(field)),
        message=f"{field} is required",
    )


def length_between(field: str, minimum: int, maximum: int) -> FieldRule:
    def check(payload: Mapping[str, Any]) -> bool:
        value = payload.get(field)
        return isinstance(value, str) and minimum <= len(value) <= maximum

    return FieldRule(
        field=field,
        check=check,
        message=(
            f"{field} must be a string with a minimum length of {minimum} "
            f"and a maximum length of {maximum}"
        ),
    )


def any_not_blank(field: str, *fields: str, message: str) -> FieldRule:
    """여러 필드 중 하나라도 공백이 아니면 통과한다. 위반은 ``field`` 이름으로 보고한다."""

    names = (field, *fields)
    return FieldRule(
        field=field,
        check=lambda payload: any(_is_not_blank(payload.get(n)) for n in names),
        message=message,
    )


CREATE_POST_RULES: tuple[FieldRule, ...] = (
    not_blank("title"),
    length_between("title", TITLE_MIN_LENGTH, TITLE_MAX_LENGTH),
    not_blank("body"),
)

UPDATE_POST_RULES: tuple[FieldRule, ...] = (required("id"), *CREATE_POST_RULES)

SEARCH_RULES: tuple[FieldRule, ...] = (
    any_not_blank(
        "title",
        "content",
        message="at least one search parameter (title or content) is required",
    ),
)


def validate(
    payload: Mapping[str, Any] | BaseModel,
    rules: tuple[FieldRule, ...],
) -> list[FieldViolation]:
    """모든 규칙을 평가해 위반 목록을 반환한다. 비어 있으면 유효한 입력이다."""

    data = payload.model_dump() if isinstance(payload, BaseModel) else payload

    violations: list[FieldViolation] = []
    failed_fields: set[str] = set()
    for rule in rules:
        if rule.field in failed_fields:
            continue
        if not rule.check(data):
            violations.append(FieldViolation(field=rule.field, message=rule.message))
            failed_fields.add(rule.field)
    return violations
