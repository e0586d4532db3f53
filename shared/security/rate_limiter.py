from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

DEFAULT_CONTACT_RATE_LIMIT = "5/minute"

limiter = Limiter(key_func=get_remote_address)


def contact_limit_key(request: Request) -> str:
    """
    Key function for the contact form limit.
    Prefixes the client IP with the app's configured limit (e.g. "5/minute@10.0.0.7")
    so the limit provider below can read it back per request.
    """
    context = getattr(request.app.state, "context", None)
    limit = context.settings.contact_rate_limit if context else DEFAULT_CONTACT_RATE_LIMIT
    return f"{limit}@{get_remote_address(request)}"


def contact_rate_limit(key: str) -> str:
    # slowapi hands dynamic limit providers the value of the key function
    return key.split("@", 1)[0]
