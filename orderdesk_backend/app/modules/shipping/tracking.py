"""
Tracking Delegate (AfterShip v4)

Used for carriers without a tracking API. `track` is ensure-then-fetch:
1. GET /trackings/{slug}/{number} - 404 means "not registered yet"
2. POST /trackings to register it when unregistered
3. GET /trackings/{slug}/{number} for the current status and checkpoints

A step that fails for any other reason ends the sequence with that step's
result.
"""
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from app.modules.shipping.carriers.base import OperationResult

logger = logging.getLogger(__name__)

AFTERSHIP_API_BASE = "https://api.aftership.com/v4"
AFTERSHIP_LANGUAGE = "vi"

# meta.code AfterShip returns when the tracking already exists
TRACKING_ALREADY_EXISTS = 4003


class AfterShipTrackingDelegate:
    """Thin AfterShip client with an idempotent track() operation."""

    def __init__(
        self,
        api_key: str,
        base_url: str = AFTERSHIP_API_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "aftership-api-key": self.api_key,
                },
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        return await self._get_http_client().request(method, f"{self.base_url}{path}", **kwargs)

    @staticmethod
    def _body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    async def track(self, tracking_number: str, courier_slug: str) -> OperationResult:
        path = f"/trackings/{quote(courier_slug, safe='')}/{quote(tracking_number, safe='')}"
        try:
            logger.info(f"[aftership] Checking {courier_slug}/{tracking_number}")
            check = await self._request("GET", path)

            if check.status_code == 404:
                registered = await self._register(tracking_number, courier_slug)
                if not registered.success:
                    return registered
            elif not check.is_success:
                logger.warning(
                    f"[aftership] GET {path} returned HTTP {check.status_code}"
                )
                return OperationResult.failure(
                    "Could not check tracking with AfterShip",
                    error={"status_code": check.status_code, "body": self._body(check)},
                )

            response = await self._request("GET", path)
            if not response.is_success:
                logger.warning(f"[aftership] GET {path} returned HTTP {response.status_code}")
                return OperationResult.failure(
                    "Could not fetch tracking from AfterShip",
                    error={"status_code": response.status_code, "body": self._body(response)},
                )
            body = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"[aftership] Timeout tracking {courier_slug}/{tracking_number}: {e}")
            return OperationResult.failure(
                "AfterShip request timed out",
                error={"type": "timeout", "endpoint": path},
            )
        except httpx.HTTPError as e:
            logger.error(f"[aftership] Network error tracking {courier_slug}/{tracking_number}: {e}")
            return OperationResult.failure(
                "Could not reach AfterShip",
                error={"type": "network", "endpoint": path, "detail": str(e)},
            )
        except ValueError:
            logger.warning(f"[aftership] GET {path} returned a non-JSON body")
            return OperationResult.failure(
                "AfterShip returned an unreadable response",
                error={"type": "decode", "endpoint": path},
            )

        data = body.get("data") if isinstance(body, dict) else None
        return OperationResult.ok(data, message="Tracking retrieved")

    async def _register(self, tracking_number: str, courier_slug: str) -> OperationResult:
        logger.info(f"[aftership] Registering {courier_slug}/{tracking_number}")
        payload = {
            "tracking": {
                "tracking_number": tracking_number,
                "slug": courier_slug,
                "title": f"Order {tracking_number}",
                "language": AFTERSHIP_LANGUAGE,
            }
        }
        response = await self._request("POST", "/trackings", json=payload)
        if response.is_success:
            return OperationResult.ok(message="Tracking registered")

        body = self._body(response)
        meta = body.get("meta") if isinstance(body, dict) else None
        if isinstance(meta, dict) and meta.get("code") == TRACKING_ALREADY_EXISTS:
            logger.info(f"[aftership] {courier_slug}/{tracking_number} already registered")
            return OperationResult.ok(message="Tracking already registered")

        logger.warning(f"[aftership] POST /trackings returned HTTP {response.status_code}")
        return OperationResult.failure(
            "Could not register tracking with AfterShip",
            error={"status_code": response.status_code, "body": body},
        )
