from __future__ import annotations

from typing import Sequence

from .validation import FieldViolation


class PostServiceError(Exception):
    """Base exception for all post-service errors.

    ``status_code`` is the HTTP status the API layer answers with.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PostServiceError):
    """Malformed or missing input. Carries every failing field."""

    status_code = 400

    def __init__(
        self,
        message: str,
        violations: Sequence[FieldViolation] = (),
    ) -> None:
        super().__init__(message)
        self.violations = list(violations)

    @classmethod
    def from_violations(cls, violations: Sequence[FieldViolation]) -> "ValidationError":
        if len(violations) == 1:
            return cls(violations[0].message, violations)
        return cls("one or more validation errors occurred", violations)


class UnauthorizedError(PostServiceError):
    """No acting user could be resolved from the request."""

    status_code = 401


class ForbiddenError(PostServiceError):
    """Acting user is known but is neither the owner nor an admin."""

    status_code = 403


class NotFoundError(PostServiceError):
    """No such post."""

    status_code = 404


class ConcurrencyConflictError(PostServiceError):
    """The post changed between load and write (lost optimistic-lock race)."""

    status_code = 409


class StoreUnavailableError(PostServiceError):
    """Infrastructure failure talking to the post store."""

    status_code = 500
