from __future__ import annotations

import datetime
import http.cookies
import logging
import re
import typing
from email.utils import parsedate_to_datetime
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.responses import Response

from cookiekit import json as jsonlib
from cookiekit import timestamps
from cookiekit.config import CookieSettings
from cookiekit.error_codes import (
    COOKIE_NOT_FOUND,
    ENCODE_FAILED,
    HEADERS_SENT,
    INVALID_NAME,
    JSON_ENCODE_FAILED,
    CookieResult,
    ErrorCode,
)
from cookiekit.requests import RequestCookies
from cookiekit.structures import Cookie, SameSite

logger = logging.getLogger("cookiekit")

MARKUP_COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)
MARKUP_TAG_PATTERN = re.compile(r"<[^>]*>")
COOKIE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9!#$%&'*+\-.^_`|~]+$")
COOKIE_ATTRIBUTES = ("expires", "path", "domain", "secure", "httponly", "samesite")
SAMESITE_STRICT: SameSite = "strict"
SECURE_PREFIX = "__Secure-"
HOST_PREFIX = "__Host-"


class CookieOptions(typing.TypedDict, total=False):
    expire: int
    """Absolute unix timestamp, 0 for a session cookie."""

    path: str
    domain: str
    secure: bool
    httponly: bool

    samesite: str
    """Accepted for symmetry with the defaults, the written cookie is always Strict."""


class ParsedCookie(typing.NamedTuple):
    value: str
    attributes: dict[str, str]


def _validate_name(name: str) -> bool:
    return bool(COOKIE_NAME_PATTERN.match(name))


def _sanitize_value(value: str) -> str:
    """Remove comments and tags. Entities and whitespace are kept as is."""
    return MARKUP_TAG_PATTERN.sub("", MARKUP_COMMENT_PATTERN.sub("", str(value)))


def _parse_cookie_string(cookie_string: str) -> tuple[dict[str, ParsedCookie], dict[str, str]]:
    """
    Split a raw "name=value; name=value" header into cookie records.

    Whitelisted attribute keys are returned separately from the cookies and
    are never attached to a cookie record.
    """
    cookies: dict[str, ParsedCookie] = {}
    attributes: dict[str, str] = {}
    for part in cookie_string.split(";"):
        part = part.strip()
        if not part or "=" not in part:
            continue

        key, value = part.split("=", 1)
        key = key.strip()
        value = value.strip(" \"'")
        if key.lower() in COOKIE_ATTRIBUTES:
            attributes[key.lower()] = value
        else:
            cookies[key] = ParsedCookie(value=value, attributes={})
    return cookies, attributes


def _parse_expires(value: str) -> int | None:
    try:
        expires_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            expires_at = datetime.datetime.fromisoformat(value)
        except ValueError:
            return None

    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=datetime.timezone.utc)
    return int(expires_at.timestamp())


class CookieManager:
    """
    Reads, writes and deletes cookies of one request.

    Writes are queued and land in the response headers when the response
    starts (see CookieMiddleware) or when applied to a response explicitly.
    Values written during the request are visible to subsequent reads of the
    same request.
    """

    seconds = staticmethod(timestamps.seconds)
    minutes = staticmethod(timestamps.minutes)
    hours = staticmethod(timestamps.hours)
    days = staticmethod(timestamps.days)
    weeks = staticmethod(timestamps.weeks)
    months = staticmethod(timestamps.months)
    years = staticmethod(timestamps.years)

    def __init__(self, request: RequestCookies | None = None, settings: CookieSettings | None = None) -> None:
        self.request = request or RequestCookies()
        self.settings = settings or CookieSettings()
        self._cookies: dict[str, str] = dict(self.request.cookies)
        self._pending: list[tuple[Cookie, str]] = []
        self._headers_sent = False
        self._last_error: ErrorCode[str] | None = None

    @classmethod
    def from_connection(cls, connection: HTTPConnection, settings: CookieSettings | None = None) -> CookieManager:
        return cls(RequestCookies.from_connection(connection), settings)

    @property
    def headers_sent(self) -> bool:
        return self._headers_sent

    @property
    def pending(self) -> list[Cookie]:
        return [cookie for cookie, _ in self._pending]

    @property
    def last_error_code(self) -> ErrorCode[str] | None:
        return self._last_error

    def get_last_error(self) -> str | None:
        return str(self._last_error) if self._last_error is not None else None

    def set(
        self,
        name: str,
        value: str,
        expire: int = 0,
        path: str = "/",
        domain: str = "",
        secure: bool = True,
        httponly: bool = True,
    ) -> CookieResult:
        value = _sanitize_value(value)
        result = self._write(
            Cookie(
                name=name,
                value=value,
                expires=expire,
                path=path,
                domain=domain,
                secure=secure,
                httponly=httponly,
                samesite=SAMESITE_STRICT,
            )
        )
        if result:
            self._cookies[name] = value
        return result

    def set_secure(self, name: str, value: str, options: CookieOptions | None = None) -> CookieResult:
        defaults = CookieOptions(
            expire=timestamps.seconds(self.settings.default_expire),
            path=self.settings.cookie_path,
            domain=self.settings.cookie_domain,
            secure=self.request.secure,
            httponly=True,
            samesite="Strict",
        )
        merged = typing.cast(CookieOptions, {**defaults, **(options or {})})
        return self.set(
            name,
            value,
            merged["expire"],
            merged["path"],
            merged["domain"],
            merged["secure"],
            merged["httponly"],
        )

    def set_site_cookie(self, name: str, value: str, options: CookieOptions | None = None) -> CookieResult:
        options = CookieOptions(**(options or {}))
        if self.settings.multisite:
            options["path"] = self.settings.site_path
        return self.set_secure(name, value, options)

    def set_network_cookie(self, name: str, value: str, options: CookieOptions | None = None) -> CookieResult:
        options = CookieOptions(**(options or {}))
        if self.settings.multisite:
            options["path"] = "/"
            options["domain"] = self.settings.network_host
        return self.set_secure(name, value, options)

    def get(self, name: str, default: typing.Any = None) -> typing.Any:
        return self._cookies.get(name, default)

    def exists(self, name: str) -> bool:
        return name in self._cookies

    def delete(self, name: str, path: str = "/", domain: str = "") -> CookieResult:
        """
        Expire a cookie in the browser.

        The path and domain must match the ones the cookie was set with,
        otherwise the browser keeps the original cookie.
        """
        if not self.exists(name):
            return CookieResult.failure(COOKIE_NOT_FOUND)

        del self._cookies[name]
        return self._write(
            Cookie(
                name=name,
                value="",
                expires=timestamps.now() - timestamps.HOUR_IN_SECONDS,
                path=path,
                domain=domain,
                secure=True,
                httponly=True,
                samesite=SAMESITE_STRICT,
            )
        )

    def get_all(self) -> dict[str, str]:
        return dict(self._cookies)

    def set_multiple(
        self,
        cookies: typing.Mapping[str, str],
        expire: int = 0,
        options: CookieOptions | None = None,
    ) -> bool:
        results = [
            self.set_secure(name, value, CookieOptions(**{**(options or {}), "expire": expire}))
            for name, value in cookies.items()
        ]
        return all(results)

    def delete_multiple(self, names: typing.Iterable[str], options: CookieOptions | None = None) -> bool:
        options = options or CookieOptions()
        results = [self.delete(name, options.get("path", "/"), options.get("domain", "")) for name in names]
        return all(results)

    def get_json(self, name: str, default: typing.Any = None) -> typing.Any:
        value = self.get(name)
        if value is None:
            return default

        try:
            return jsonlib.loads(value)
        except jsonlib.JSONDecodeError:
            return default

    def set_json(self, name: str, value: typing.Any, options: CookieOptions | None = None) -> CookieResult:
        try:
            json_value = jsonlib.dumps(value)
        except (TypeError, ValueError):
            return self._fail(JSON_ENCODE_FAILED)
        return self.set_secure(name, json_value, options)

    def get_remaining_lifetime(self, name: str) -> int | None:
        """
        Seconds until the cookie expires, taken from the raw Cookie header.

        Browsers do not send cookie attributes back to the server, so for
        real traffic this returns None.
        """
        if not self.exists(name):
            return None

        if not self.request.raw_header:
            return None

        cookies, _ = _parse_cookie_string(self.request.raw_header)
        if name not in cookies:
            return None

        cookie_data = cookies[name]
        if "expires" not in cookie_data.attributes:
            return None

        expires = _parse_expires(cookie_data.attributes["expires"])
        if expires is None:
            return None

        remaining = expires - timestamps.now()
        return remaining if remaining > 0 else None

    def set_prefixed(self, name: str, value: str, options: CookieOptions | None = None) -> CookieResult:
        """
        Set a cookie with a name prefix.

        A truthy "secure" option adds "__Secure-", a truthy "domain" option
        adds "__Host-" in front of it. Browsers reject a "__Host-" cookie that
        declares a domain, which is left to the caller.
        """
        options = options or CookieOptions()
        prefix = self.settings.name_prefix
        if options.get("secure"):
            prefix = SECURE_PREFIX + prefix
        if options.get("domain"):
            prefix = HOST_PREFIX + prefix
        return self.set_secure(prefix + name, value, options)

    def flush(self, headers: MutableHeaders) -> None:
        """Write pending cookies into the outgoing header block. Later writes fail."""
        for _, header in self._pending:
            headers.append("set-cookie", header)
        self._pending.clear()
        self._headers_sent = True

    def apply(self, response: Response) -> Response:
        for _, header in self._pending:
            response.raw_headers.append((b"set-cookie", header.encode("latin-1")))
        self._pending.clear()
        self._headers_sent = True
        return response

    def _write(self, cookie: Cookie) -> CookieResult:
        if not _validate_name(cookie.name):
            return self._fail(INVALID_NAME)

        if self._headers_sent:
            return self._fail(HEADERS_SENT)

        try:
            header = cookie.to_header(now=timestamps.now())
            header.encode("latin-1")
        except (http.cookies.CookieError, UnicodeEncodeError):
            return self._fail(ENCODE_FAILED)

        self._pending.append((cookie, header))
        return CookieResult.success()

    def _fail(self, error: ErrorCode[str]) -> CookieResult:
        self._last_error = error
        if self.settings.debug:
            logger.error("Cookie error: %s", error)
        return CookieResult.failure(error)
