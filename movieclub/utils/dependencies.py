from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from movieclub.config import Settings
from movieclub.services.tmdb_service import TMDBService
from movieclub.utils.security import SESSION_COOKIE, constant_time_equals

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tmdb_service(request: Request) -> TMDBService:
    return request.app.state.tmdb_service


def _unauthorized(clear_cookie: bool = False) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"}
    if clear_cookie:
        headers["Set-Cookie"] = f'{SESSION_COOKIE}=""; Max-Age=0; Path=/; HttpOnly; SameSite=lax'
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers=headers,
    )


# Dependency guarding every /api route except login/logout
def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> None:
    # A bearer header takes precedence over the cookie
    if credentials is not None:
        if constant_time_equals(credentials.credentials, settings.api_token):
            return
        raise _unauthorized()

    cookie = request.cookies.get(SESSION_COOKIE)
    if cookie is None:
        raise _unauthorized()
    if not constant_time_equals(cookie, settings.api_token):
        raise _unauthorized(clear_cookie=True)
