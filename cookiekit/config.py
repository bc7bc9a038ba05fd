from __future__ import annotations

import dataclasses
import os
import pathlib
import typing
from dotenv import dotenv_values
from starlette.config import Config as BaseConfig
from starlette.config import Environ
from urllib.parse import urlparse

from cookiekit.timestamps import MONTH_IN_SECONDS

__all__ = ["Config", "CookieSettings", "is_unittest_environment", "DEFAULT_EXPIRE"]

DEFAULT_EXPIRE = MONTH_IN_SECONDS


def is_unittest_environment() -> bool:
    """Test if code executed in unit test environment."""
    return "PYTEST_VERSION" in os.environ


class Config(BaseConfig):
    def __init__(
        self,
        env_files: list[str | pathlib.Path] | None = None,
        env_prefix: str = "",
        environ: typing.Mapping[str, str] | None = None,
    ):
        env_files = env_files or []
        super().__init__(None, environ or Environ(), env_prefix)
        for env_file in env_files:
            if os.path.exists(env_file) and os.path.isfile(env_file):
                values = dotenv_values(env_file)
                self.file_values.update({key: value for key, value in values.items() if value is not None})


@dataclasses.dataclass(frozen=True)
class CookieSettings:
    """Host application facts the cookie manager depends on."""

    site_url: str = ""
    network_url: str = ""
    multisite: bool = False
    debug: bool = False
    cookie_path: str = "/"
    cookie_domain: str = ""
    default_expire: int = DEFAULT_EXPIRE
    name_prefix: str = "wp_"

    @property
    def site_path(self) -> str:
        return urlparse(self.site_url).path or "/"

    @property
    def network_host(self) -> str:
        return urlparse(self.network_url).hostname or ""

    @classmethod
    def from_config(cls, config: BaseConfig) -> CookieSettings:
        return cls(
            site_url=config("COOKIE_SITE_URL", default=""),
            network_url=config("COOKIE_NETWORK_URL", default=""),
            multisite=config("COOKIE_MULTISITE", cast=bool, default=False),
            debug=config("DEBUG", cast=bool, default=False),
            cookie_path=config("COOKIE_PATH", default="/"),
            cookie_domain=config("COOKIE_DOMAIN", default=""),
            default_expire=config("COOKIE_DEFAULT_EXPIRE", cast=int, default=DEFAULT_EXPIRE),
            name_prefix=config("COOKIE_NAME_PREFIX", default="wp_"),
        )
