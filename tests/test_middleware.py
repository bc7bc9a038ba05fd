import pytest
from starlette.requests import HTTPConnection, Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.testclient import TestClient
from starlette.types import Receive, Scope, Send

from cookiekit.config import CookieSettings
from cookiekit.error_codes import CookieResult
from cookiekit.middleware import CookieMiddleware, get_cookie_manager


async def set_app(scope: Scope, receive: Receive, send: Send) -> None:
    request = Request(scope, receive, send)
    manager = get_cookie_manager(request)
    manager.set("theme", "dark")
    await JSONResponse({"theme": manager.get("theme")})(scope, receive, send)


async def read_app(scope: Scope, receive: Receive, send: Send) -> None:
    manager = get_cookie_manager(HTTPConnection(scope))
    await JSONResponse(manager.get_all())(scope, receive, send)


async def delete_app(scope: Scope, receive: Receive, send: Send) -> None:
    manager = get_cookie_manager(HTTPConnection(scope))
    deleted = bool(manager.delete("theme"))
    await JSONResponse({"deleted": deleted, "exists": manager.exists("theme")})(scope, receive, send)


async def secure_app(scope: Scope, receive: Receive, send: Send) -> None:
    manager = get_cookie_manager(HTTPConnection(scope))
    manager.set_secure("theme", "dark")
    await PlainTextResponse("")(scope, receive, send)


def test_set_cookie_is_written_into_response() -> None:
    client = TestClient(CookieMiddleware(set_app))
    response = client.get("/")
    assert response.json() == {"theme": "dark"}
    assert response.headers["set-cookie"] == "theme=dark; HttpOnly; Path=/; SameSite=Strict; Secure"


def test_reads_request_cookies() -> None:
    client = TestClient(CookieMiddleware(read_app))
    response = client.get("/", headers={"cookie": "a=1; b=2"})
    assert response.json() == {"a": "1", "b": "2"}


def test_delete_cookie() -> None:
    client = TestClient(CookieMiddleware(delete_app))
    response = client.get("/", headers={"cookie": "theme=dark"})
    assert response.json() == {"deleted": True, "exists": False}

    header = response.headers["set-cookie"]
    assert header.startswith('theme=""; expires=')
    assert "Max-Age=0" in header


def test_delete_missing_cookie_writes_nothing() -> None:
    client = TestClient(CookieMiddleware(delete_app))
    response = client.get("/")
    assert response.json() == {"deleted": False, "exists": False}
    assert "set-cookie" not in response.headers


@pytest.mark.parametrize("base_url, secure", [("http://testserver", False), ("https://testserver", True)])
def test_secure_flag_follows_request_scheme(base_url: str, secure: bool) -> None:
    client = TestClient(CookieMiddleware(secure_app), base_url=base_url)
    response = client.get("/")
    assert ("; Secure" in response.headers["set-cookie"]) is secure


def test_multisite_settings_are_passed_to_manager() -> None:
    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        manager = get_cookie_manager(HTTPConnection(scope))
        manager.set_site_cookie("a", "1", {"expire": 0})
        manager.set_network_cookie("b", "2", {"expire": 0})
        await PlainTextResponse("")(scope, receive, send)

    settings = CookieSettings(
        multisite=True,
        site_url="https://example.com/blog",
        network_url="https://example.com",
    )
    client = TestClient(CookieMiddleware(app, settings=settings))
    response = client.get("/")
    assert response.headers.get_list("set-cookie") == [
        "a=1; HttpOnly; Path=/blog; SameSite=Strict",
        "b=2; Domain=example.com; HttpOnly; Path=/; SameSite=Strict",
    ]


def test_cookies_cannot_be_set_after_response_started() -> None:
    results: list[CookieResult] = []

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        manager = get_cookie_manager(HTTPConnection(scope))
        await PlainTextResponse("ok")(scope, receive, send)
        results.append(manager.set("late", "1"))

    client = TestClient(CookieMiddleware(app))
    response = client.get("/")
    assert "set-cookie" not in response.headers
    assert not results[0]
    assert str(results[0].error) == "Headers already sent"


def test_requires_middleware() -> None:
    request = Request({"type": "http"})
    with pytest.raises(AssertionError) as ex:
        get_cookie_manager(request)
    assert str(ex.value) == "Cookies require CookieMiddleware."


def test_unencodable_value_does_not_break_response() -> None:
    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        manager = get_cookie_manager(HTTPConnection(scope))
        result = manager.set("name", "日本")
        await JSONResponse({"ok": bool(result), "error": manager.get_last_error()})(scope, receive, send)

    client = TestClient(CookieMiddleware(app))
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"ok": False, "error": "Unable to encode cookie"}
    assert "set-cookie" not in response.headers
