from fastapi import APIRouter, Depends, HTTPException, Response, status

from movieclub.config import Settings
from movieclub.schemas.auth import LoginRequest, LoginResponse, MessageResponse
from movieclub.utils.dependencies import get_settings
from movieclub.utils.security import (
    SESSION_COOKIE,
    SESSION_MAX_AGE,
    constant_time_equals,
    safe_redirect,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# Login route
@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, response: Response, settings: Settings = Depends(get_settings)):
    """
    Exchange the shared API key for a session cookie

    - **api_key**: the club's API token
    - **redirect**: where to go afterwards (relative paths only)
    """
    if not constant_time_equals(payload.api_key, settings.api_token):
        logger.warning("Rejected login with invalid API key")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    response.set_cookie(
        key=SESSION_COOKIE,
        value=settings.api_token,
        max_age=SESSION_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
    return LoginResponse(message="Logged in", redirect=safe_redirect(payload.redirect))


# Logout route
@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(
        key=SESSION_COOKIE,
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
    return MessageResponse(message="Logged out")
