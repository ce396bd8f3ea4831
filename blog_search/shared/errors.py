"""
Error types for the search engine.

Two kinds of errors reach callers:
- ValidationError: malformed caller input, raised before any index or cache access.
- DatabaseError: the post snapshot could not be read; the cause is chained.

Programming faults (bad cache capacity, duplicate post ids) raise ValueError
at construction time instead.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    # Validation errors
    KEYWORD_REQUIRED = "KEYWORD_REQUIRED"
    AUTHOR_REQUIRED = "AUTHOR_REQUIRED"
    TAG_REQUIRED = "TAG_REQUIRED"
    QUERY_REQUIRED = "QUERY_REQUIRED"
    TITLE_REQUIRED = "TITLE_REQUIRED"
    INVALID_SORT_KEY = "INVALID_SORT_KEY"
    INVALID_SORT_ORDER = "INVALID_SORT_ORDER"
    INVALID_SEARCH_TYPE = "INVALID_SEARCH_TYPE"
    INVALID_PAGE = "INVALID_PAGE"

    # Database / snapshot errors
    SNAPSHOT_ERROR = "SNAPSHOT_ERROR"


class BlogSearchError(Exception):
    """Base class for errors surfaced by the search engine."""

    def __init__(self, code: ErrorCode, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if self.context:
            details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"[{self.code.value}] {self.message} ({details})"
        return f"[{self.code.value}] {self.message}"


class ValidationError(BlogSearchError):
    """Caller input was rejected. Carries the offending field name."""

    def __init__(self, code: ErrorCode, field_name: str, message: str) -> None:
        super().__init__(code, message, {"field": field_name})
        self.field = field_name

    @classmethod
    def from_failure(cls, failure: "ValidationFailure") -> "ValidationError":
        return cls(failure.code, failure.field, failure.message)


class DatabaseError(BlogSearchError):
    """The post snapshot collaborator failed."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(code, message, context)
        self.cause = cause


# ---------------------------------------------------------
#   Validation results
# ---------------------------------------------------------

@dataclass(frozen=True)
class ValidationFailure:
    code: ErrorCode
    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Either a validated value or a ValidationFailure, never both."""
    value: Optional[T] = None
    failure: Optional[ValidationFailure] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        """Return the value, raising ValidationError for a failure."""
        if self.failure is not None:
            raise ValidationError.from_failure(self.failure)
        return self.value  # type: ignore[return-value]


def valid(value: T) -> ValidationResult[T]:
    return ValidationResult(value=value)


def invalid(code: ErrorCode, field_name: str, message: str) -> ValidationResult[Any]:
    return ValidationResult(failure=ValidationFailure(code, field_name, message))


def require_text(value: Union[str, None], code: ErrorCode, field_name: str, label: str) -> ValidationResult[str]:
    """Reject None, empty and whitespace-only strings."""
    if value is None or not isinstance(value, str) or not value.strip():
        return invalid(code, field_name, f"{label} cannot be null or empty")
    return valid(value)
