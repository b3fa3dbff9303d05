from fastapi import Response

from config import ApplicationConfig

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Attach session credentials as http-only cookies"""
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES * 60,
        httponly=True,
        secure=ApplicationConfig.COOKIE_SECURE,
        samesite=ApplicationConfig.COOKIE_SAMESITE,
        domain=ApplicationConfig.COOKIE_DOMAIN,
        path="/",
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        refresh_token,
        max_age=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=ApplicationConfig.COOKIE_SECURE,
        samesite=ApplicationConfig.COOKIE_SAMESITE,
        domain=ApplicationConfig.COOKIE_DOMAIN,
        path="/",
    )


def clear_auth_cookies(response: Response) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            name,
            path="/",
            domain=ApplicationConfig.COOKIE_DOMAIN,
            secure=ApplicationConfig.COOKIE_SECURE,
            httponly=True,
            samesite=ApplicationConfig.COOKIE_SAMESITE,
        )
