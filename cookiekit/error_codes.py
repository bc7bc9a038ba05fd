from __future__ import annotations

import dataclasses
import typing

T = typing.TypeVar("T", bound=str | int)


@dataclasses.dataclass(frozen=True)
class ErrorCode(typing.Generic[T]):
    code: T
    description: str = ""

    def __str__(self) -> str:
        return str(self.description)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str | int):
            return other == self.code

        if not isinstance(other, ErrorCode):
            return NotImplemented

        return bool(self.code == other.code)

    def __hash__(self) -> int:
        return hash(self.code)


INVALID_NAME = ErrorCode("invalid_name", "Invalid cookie name")
HEADERS_SENT = ErrorCode("headers_sent", "Headers already sent")
ENCODE_FAILED = ErrorCode("encode_failed", "Unable to encode cookie")
JSON_ENCODE_FAILED = ErrorCode("json_encode_failed", "Unable to encode cookie value as JSON")
COOKIE_NOT_FOUND = ErrorCode("cookie_not_found", "Cookie does not exist")


@dataclasses.dataclass(frozen=True, slots=True)
class CookieResult:
    """Outcome of a single cookie write. Truthy when the cookie was queued."""

    ok: bool
    error: ErrorCode[str] | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> CookieResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: ErrorCode[str]) -> CookieResult:
        return cls(ok=False, error=error)
