import pytest
import typing

from cookiekit.config import CookieSettings
from cookiekit.manager import CookieManager
from cookiekit.requests import RequestCookies


class ManagerFactory(typing.Protocol):  # pragma: nocover
    def __call__(
        self,
        cookies: typing.Mapping[str, str] | None = None,
        raw_header: str = "",
        secure: bool = False,
        settings: CookieSettings | None = None,
    ) -> CookieManager:
        ...


@pytest.fixture
def cookie_settings() -> CookieSettings:
    return CookieSettings()


@pytest.fixture
def manager_factory(cookie_settings: CookieSettings) -> ManagerFactory:
    def factory(
        cookies: typing.Mapping[str, str] | None = None,
        raw_header: str = "",
        secure: bool = False,
        settings: CookieSettings | None = None,
    ) -> CookieManager:
        request = RequestCookies(cookies=cookies or {}, raw_header=raw_header, secure=secure)
        return CookieManager(request, settings or cookie_settings)

    return typing.cast(ManagerFactory, factory)


@pytest.fixture
def manager(manager_factory: ManagerFactory) -> CookieManager:
    return manager_factory()
