"""Admin cookie-based session authentication."""

import hashlib
import hmac

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from starlette.requests import Request

COOKIE_NAME = "sceneit_admin"
MAX_AGE = 7 * 24 * 3600  # 7 days


def _get_settings():
    from sceneit_engine.common.config import get_settings
    return get_settings()


def _get_serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(_get_settings().secret_key, salt="admin-session")


def _password_fingerprint(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()[:16]


def check_password(candidate: str | None) -> bool:
    """Constant-time compare against the shared secret. Fails closed when unset."""
    password = _get_settings().admin_password
    if not password or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), password.encode("utf-8"))


def create_session_cookie() -> str:
    """Sign a session payload bound to the current admin password."""
    s = _get_serializer()
    return s.dumps({"role": "admin", "pw": _password_fingerprint(_get_settings().admin_password)})


def verify_session_cookie(cookie: str) -> dict | None:
    """Verify and decode a session cookie. Returns payload or None.

    Sessions die when the password changes or is removed.
    """
    password = _get_settings().admin_password
    if not password:
        return None
    s = _get_serializer()
    try:
        payload = s.loads(cookie, max_age=MAX_AGE)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(payload, dict) or payload.get("pw") != _password_fingerprint(password):
        return None
    return payload


def get_session(request: Request) -> dict | None:
    """Extract and verify the session from a request."""
    cookie = request.cookies.get(COOKIE_NAME)
    if not cookie:
        return None
    return verify_session_cookie(cookie)
