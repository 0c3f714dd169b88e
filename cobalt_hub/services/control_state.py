"""Control-state changes for a chat session (bot/agent mode, end, email, datastore)."""

import json
import logging
from typing import Any, Optional, Union

from cobalt_hub.infra.validation import parse_json_object
from cobalt_hub.models.envelope import ControlOperation, ControlStateRequest

logger = logging.getLogger(__name__)

DEFAULT_ESCALATION_REASON = "User requested escalation"

_PAYLOAD_OPERATIONS = (ControlOperation.EMAIL, ControlOperation.DATASTORE)


def build_control_request(
    operation: Union[ControlOperation, str],
    session_id: str,
    payload: Any = None,
    value: bool = True,
) -> ControlStateRequest:
    """
    Build the request for a control operation.

    email and datastore carry the payload (a dict or a JSON string; anything
    unparsable becomes ``{}``). liveAgentRequested is sent to the datastore
    as ``{"liveAgentRequested": value}``.

    Raises:
        ValueError: If the operation is unknown
    """
    operation = ControlOperation(operation)

    if operation == ControlOperation.LIVE_AGENT_REQUESTED:
        return ControlStateRequest(
            operation=operation,
            path=ControlOperation.DATASTORE.value,
            session_id=session_id,
            payload={"liveAgentRequested": bool(value)},
        )

    body_payload = None
    if operation in _PAYLOAD_OPERATIONS:
        body_payload = parse_json_object(payload, field="payload")

    return ControlStateRequest(
        operation=operation,
        path=operation.value,
        session_id=session_id,
        payload=body_payload,
    )


def parse_escalation_reason(raw_input: Optional[str]) -> str:
    """
    Extract the escalation reason from a tool input.

    The input should be JSON with a ``reason`` property, but models sometimes
    send the bare reason string instead.
    """
    if not raw_input or not raw_input.strip():
        return DEFAULT_ESCALATION_REASON
    try:
        parsed = json.loads(raw_input)
    except json.JSONDecodeError:
        return raw_input
    reason = parsed.get("reason") if isinstance(parsed, dict) else None
    return str(reason) if reason else DEFAULT_ESCALATION_REASON


def build_datastore_escalation(session_id: str, raw_input: Optional[str]) -> ControlStateRequest:
    """Flag a live agent request in the session datastore."""
    reason = parse_escalation_reason(raw_input)
    logger.info("Escalation requested", extra={"session_id": session_id, "reason": reason})
    return ControlStateRequest(
        operation=ControlOperation.DATASTORE,
        path=ControlOperation.DATASTORE.value,
        session_id=session_id,
        payload={"liveAgentRequested": True, "escalationReason": reason},
    )
