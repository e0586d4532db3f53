import hashlib
import secrets
from typing import Optional


def compute_signature(order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """SHA-512 over the fields concatenated with no delimiter, exactly as Midtrans computes it."""
    payload = f"{order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(payload.encode("utf-8")).hexdigest()


def verify_signature(
    order_id: Optional[str],
    status_code: Optional[str],
    gross_amount: Optional[str],
    signature_key: Optional[str],
    server_key: str,
) -> bool:
    """Constant-time check of a notification's signature_key."""
    if not server_key or not signature_key:
        return False
    if order_id is None or status_code is None or gross_amount is None:
        return False
    expected = compute_signature(order_id, status_code, gross_amount, server_key)
    return secrets.compare_digest(expected.encode("utf-8"), str(signature_key).encode("utf-8"))
