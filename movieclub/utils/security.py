import secrets
from typing import Optional
from urllib.parse import urlsplit

SESSION_COOKIE = "movieclub_session"
SESSION_MAX_AGE = 90 * 24 * 60 * 60  # 90 days


# Token comparison
def constant_time_equals(provided: Optional[str], expected: str) -> bool:
    """Compare a client-supplied token without leaking timing information"""
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


# Redirect sanitizing
def safe_redirect(target: Optional[str], default: str = "/") -> str:
    """
    Return target only if it is a same-site relative path.

    Absolute URLs, scheme-relative ("//host") and backslash tricks fall back
    to the default.
    """
    if not target or not target.startswith("/") or target.startswith("//"):
        return default
    if "\\" in target:
        return default
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return default
    return target
