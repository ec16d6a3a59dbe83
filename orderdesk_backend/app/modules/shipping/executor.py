"""
Carrier Request Executor

Performs one authenticated HTTP call against a carrier API and normalizes
every outcome into an OperationResult:
- transport failures (connect errors, timeouts)
- non-2xx responses (raw body kept under `error`)
- bodies that are not JSON

Single-shot: no retries. Every call is bounded by the configured timeout.
"""
import logging
from typing import Any, Optional

import httpx

from app.modules.shipping.carriers.base import CarrierCall, CarrierProfile, OperationResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def _response_body(response: httpx.Response) -> Any:
    """Decoded JSON body, falling back to raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


class CarrierRequestExecutor:
    """
    Executes CarrierCall objects over a shared httpx.AsyncClient.

    Usage:
        executor = CarrierRequestExecutor(timeout=30)
        result = await executor.execute(profile, api_key, call)
        await executor.close()
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def execute(self, profile: CarrierProfile, api_key: str, call: CarrierCall) -> OperationResult:
        carrier = profile.code.value
        url = f"{profile.base_url}{call.path}"
        headers = {"Content-Type": "application/json", **profile.auth_headers(api_key)}

        logger.info(f"[{carrier}] {call.method} {call.path}")
        try:
            response = await self._get_http_client().request(
                call.method,
                url,
                json=call.json,
                params=call.params,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.error(f"[{carrier}] Timeout calling {call.method} {call.path}: {e}")
            return OperationResult.failure(
                f"{profile.name} request timed out",
                error={"type": "timeout", "carrier": carrier, "endpoint": call.path},
            )
        except httpx.HTTPError as e:
            logger.error(f"[{carrier}] Network error calling {call.method} {call.path}: {e}")
            return OperationResult.failure(
                f"Could not reach {profile.name}",
                error={"type": "network", "carrier": carrier, "endpoint": call.path, "detail": str(e)},
            )

        if not response.is_success:
            body = _response_body(response)
            logger.warning(
                f"[{carrier}] {call.method} {call.path} returned HTTP {response.status_code}"
            )
            return OperationResult.failure(
                f"{profile.name} returned HTTP {response.status_code}",
                error={
                    "type": "http",
                    "carrier": carrier,
                    "endpoint": call.path,
                    "status_code": response.status_code,
                    "body": body,
                },
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"[{carrier}] {call.method} {call.path} returned a non-JSON body")
            return OperationResult.failure(
                f"{profile.name} returned an unreadable response",
                error={"type": "decode", "carrier": carrier, "endpoint": call.path, "body": response.text},
            )

        return OperationResult.ok(data)
