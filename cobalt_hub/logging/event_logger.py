"""Event logging service."""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger("cobalt_hub.events")


def log_event(
    event_type: str,
    session_id: Optional[str] = None,
    status: str = "success",
    target: Optional[str] = None,
    latency_ms: Optional[int] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Write a structured event line.

    Args:
        event_type: Event type (e.g., 'message_delivered', 'webhook_received', 'delivery_failed')
        session_id: Chat session the event belongs to
        status: 'success' | 'failure'
        target: Connector path or trigger name involved
        latency_ms: Latency in milliseconds
        payload: Additional payload
    """
    level = logging.INFO if status == "success" else logging.WARNING
    logger.log(
        level,
        event_type,
        extra={
            "event_type": event_type,
            "session_id": session_id,
            "status": status,
            "target": target,
            "latency_ms": latency_ms,
            "payload": payload or {},
        },
    )
