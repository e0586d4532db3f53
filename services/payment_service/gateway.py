"""
Midtrans Snap client.

Only transaction creation is needed here; notification delivery is inbound
and handled by the webhook route.
"""
from typing import Any, Optional, Protocol

import httpx
import structlog

from shared.config.settings import GatewaySettings
from shared.errors import GatewayError

logger = structlog.get_logger(__name__)


class PaymentGateway(Protocol):
    async def create_transaction(self, payload: dict) -> dict: ...


class MidtransSnapClient:
    def __init__(self, settings: GatewaySettings, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self.server_key = settings.server_key
        self.client_key = settings.client_key
        self.base_url = settings.base_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def create_transaction(self, payload: dict) -> dict:
        """POST /transactions; returns {"token": ..., "redirect_url": ...}."""
        try:
            resp = await self._client.post(
                f"{self.base_url}/transactions",
                json=payload,
                auth=(self.server_key, ""),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise GatewayError(f"Midtrans API request failed: {e}") from e

        body = _json_or_none(resp)
        if resp.status_code >= 400 or body is None or "token" not in body:
            raise GatewayError(_error_message(resp.status_code, body), status_code=resp.status_code, response=body)
        return body

    async def aclose(self) -> None:
        await self._client.aclose()


def _json_or_none(resp: httpx.Response) -> Optional[dict]:
    try:
        body = resp.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _error_message(status_code: int, body: Optional[dict[str, Any]]) -> str:
    messages = (body or {}).get("error_messages") or []
    if messages:
        detail = "; ".join(str(m) for m in messages)
    else:
        detail = "unexpected response"
    return f"Midtrans API is returning API error. HTTP status code: {status_code}. {detail}"
