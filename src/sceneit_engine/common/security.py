"""Request provenance helpers and the admin authorization dependency."""

from starlette.requests import Request

from sceneit_engine.common.exceptions import AdminUnauthorizedError

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def hash_ip(ip: str) -> str:
    """Cheap 32-bit string hash rendered in base 36.

    Good enough to roughly de-duplicate visitors; not an identity and not
    a cryptographic digest.
    """
    h = 0
    for ch in ip:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(abs(h))


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def request_ip_hash(request: Request) -> str:
    return hash_ip(client_ip(request))


async def require_admin(request: Request) -> dict:
    """FastAPI dependency that validates the admin session cookie."""
    from sceneit_engine.admin.auth import get_session

    session = get_session(request)
    if session is None:
        raise AdminUnauthorizedError()
    return session
