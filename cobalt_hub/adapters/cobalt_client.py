"""HTTP client for the Cobalt connector API."""

import time
from typing import Any, Dict, Optional

import httpx

from cobalt_hub.infra.config import config
from cobalt_hub.infra.error_handler import DeliveryFailure, classify_error, retry_with_backoff
from cobalt_hub.infra.metrics import deliveries_total, delivery_duration
from cobalt_hub.logging.event_logger import log_event
from cobalt_hub.models.envelope import ControlStateRequest, MessageEnvelope

DEFAULT_BASE_URL = "http://localhost:3000"
MESSAGE_PATH = "/api/internal/message"
STATE_PATH = "/api/state/{operation}"


def normalize_base_url(base_url: Optional[str]) -> str:
    """
    Clean up a configured connector URL.

    Empty values fall back to the local connector, a missing scheme becomes
    http://, and trailing slashes are removed.
    """
    base_url = (base_url or "").strip() or DEFAULT_BASE_URL
    if not base_url.startswith("http://") and not base_url.startswith("https://"):
        base_url = f"http://{base_url}"
    return base_url.rstrip("/")


class CobaltClient:
    """Delivers envelopes and control-state changes to the connector."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self.base_url = normalize_base_url(base_url if base_url is not None else config.COBALT_API_BASE_URL)
        self.timeout = timeout if timeout is not None else config.DELIVERY_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else config.DELIVERY_MAX_RETRIES

    async def deliver_message(self, envelope: MessageEnvelope) -> Dict[str, Any]:
        """POST a message envelope to /api/internal/message."""
        return await self._post(MESSAGE_PATH, envelope.to_wire(), session_id=envelope.session_id)

    async def deliver_state(self, request: ControlStateRequest) -> Dict[str, Any]:
        """POST a control-state change to /api/state/{operation}."""
        return await self._post(
            STATE_PATH.format(operation=request.path),
            request.body(),
            session_id=request.session_id,
        )

    async def _post(self, path: str, body: Dict[str, Any], session_id: Optional[str] = None) -> Dict[str, Any]:
        """
        POST a JSON body, retrying network failures.

        Raises:
            DeliveryFailure: carrying the attempted body
        """
        url = f"{self.base_url}{path}"
        start_time = time.time()

        async def send() -> Dict[str, Any]:
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body)
                    response.raise_for_status()
            except httpx.HTTPStatusError as e:
                _, retryable, retry_after = classify_error(e)
                raise DeliveryFailure(
                    f"Connector returned {e.response.status_code} for {path}",
                    payload=body,
                    status_code=e.response.status_code,
                    retryable=retryable,
                    retry_after=retry_after,
                ) from e
            except httpx.HTTPError as e:
                _, retryable, _ = classify_error(e)
                raise DeliveryFailure(
                    f"Connector request to {url} failed: {e}",
                    payload=body,
                    retryable=retryable,
                ) from e

            if not response.content:
                return {}
            try:
                data = response.json()
            except ValueError:
                return {"response": response.text}
            return data if isinstance(data, dict) else {"response": data}

        try:
            result = await retry_with_backoff(
                send,
                max_retries=self.max_retries,
                initial_delay=0.5,
                max_delay=5.0,
                retryable_exceptions=(DeliveryFailure,),
            )
        except DeliveryFailure as e:
            deliveries_total.labels(target=path, status="failure").inc()
            log_event(
                "delivery_failed",
                session_id=session_id,
                status="failure",
                target=path,
                payload={"error": e.message, "status_code": e.status_code},
            )
            raise

        elapsed = time.time() - start_time
        deliveries_total.labels(target=path, status="success").inc()
        delivery_duration.labels(target=path).observe(elapsed)
        log_event(
            "message_delivered",
            session_id=session_id,
            target=path,
            latency_ms=int(elapsed * 1000),
        )
        return result
