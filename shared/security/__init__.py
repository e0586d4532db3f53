from .signature import compute_signature, verify_signature
from .rate_limiter import limiter, contact_limit_key, contact_rate_limit

__all__ = [
    "compute_signature",
    "verify_signature",
    "limiter",
    "contact_limit_key",
    "contact_rate_limit"
]
