import dataclasses

import datetime
import http.cookies
import typing
from email.utils import format_datetime

SameSite = typing.Literal["lax", "strict", "none"]


@dataclasses.dataclass
class Cookie:
    name: str
    value: str = ""
    path: str = "/"
    expires: int = 0
    """Absolute unix timestamp, 0 makes a session cookie."""
    domain: str = ""
    secure: bool = False
    httponly: bool = False
    samesite: SameSite = "strict"

    @property
    def is_session(self) -> bool:
        return self.expires == 0

    def to_header(self, now: int) -> str:
        """
        Render the value of a Set-Cookie header.

        Raises http.cookies.CookieError when the encoder refuses the name.
        """
        cookie: http.cookies.BaseCookie[str] = http.cookies.SimpleCookie()
        cookie[self.name] = self.value
        morsel = cookie[self.name]
        if not self.is_session:
            expires_at = datetime.datetime.fromtimestamp(self.expires, tz=datetime.timezone.utc)
            morsel["expires"] = format_datetime(expires_at, usegmt=True)
            morsel["max-age"] = max(self.expires - now, 0)
        if self.path:
            morsel["path"] = self.path
        if self.domain:
            morsel["domain"] = self.domain
        if self.secure:
            morsel["secure"] = True
        if self.httponly:
            morsel["httponly"] = True
        morsel["samesite"] = self.samesite.capitalize()
        return cookie.output(header="").strip()
