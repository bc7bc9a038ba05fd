from __future__ import annotations

import dataclasses
import types
import typing
from starlette.requests import HTTPConnection
from starlette.types import Scope


@dataclasses.dataclass(frozen=True)
class RequestCookies:
    """Everything the cookie manager reads from the incoming request."""

    cookies: typing.Mapping[str, str] = dataclasses.field(default_factory=lambda: types.MappingProxyType({}))
    raw_header: str = ""
    secure: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "cookies", types.MappingProxyType(dict(self.cookies)))

    @classmethod
    def from_connection(cls, connection: HTTPConnection) -> RequestCookies:
        return cls(
            cookies=connection.cookies,
            raw_header=connection.headers.get("cookie", ""),
            secure=connection.scope.get("scheme", "http") in ("https", "wss"),
        )

    @classmethod
    def from_scope(cls, scope: Scope) -> RequestCookies:
        return cls.from_connection(HTTPConnection(scope))
