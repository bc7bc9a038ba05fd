from cookiekit.config import Config, CookieSettings
from cookiekit.error_codes import CookieResult, ErrorCode
from cookiekit.manager import CookieManager, CookieOptions
from cookiekit.middleware import CookieMiddleware, get_cookie_manager
from cookiekit.requests import RequestCookies
from cookiekit.structures import Cookie

__all__ = [
    "Config",
    "Cookie",
    "CookieManager",
    "CookieMiddleware",
    "CookieOptions",
    "CookieResult",
    "CookieSettings",
    "ErrorCode",
    "RequestCookies",
    "get_cookie_manager",
]

__version__ = "0.1.0"
