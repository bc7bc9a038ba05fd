from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cookiekit.config import CookieSettings
from cookiekit.manager import CookieManager

SCOPE_KEY = "cookie_manager"


class CookieMiddleware:
    def __init__(self, app: ASGIApp, settings: CookieSettings | None = None) -> None:
        self.app = app
        self.settings = settings or CookieSettings()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":  # pragma: no cover
            await self.app(scope, receive, send)
            return

        manager = CookieManager.from_connection(HTTPConnection(scope, receive), self.settings)
        scope[SCOPE_KEY] = manager

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                manager.flush(MutableHeaders(scope=message))
            await send(message)

        await self.app(scope, receive, send_wrapper)


def get_cookie_manager(connection: HTTPConnection) -> CookieManager:
    assert SCOPE_KEY in connection.scope, "Cookies require CookieMiddleware."
    return connection.scope[SCOPE_KEY]
