"""Inbound webhook trigger events.

Events are echoed exactly as received; validation happens later, when the
record enters the normalizer or compiler.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from cobalt_hub.infra.metrics import webhook_events_total
from cobalt_hub.logging.event_logger import log_event

# Webhook path -> trigger node name
TRIGGERS: Dict[str, str] = {
    "cobalt-start": "Cobalt Trigger",
    "timeout": "Cobalt Timeout Trigger",
    "end-chat": "Cobalt End Chat Trigger",
    "live-agent-queue": "Cobalt Live Agent Queue Trigger",
    "live-agent-active": "Cobalt Live Agent Active Trigger",
    "analytics": "Cobalt Analytics Trigger",
    "email-transcript": "Cobalt Email Transcript Trigger",
    "transcript": "Cobalt Transcript Trigger",
    "greeting": "Cobalt Greeting Trigger",
    "llm": "Cobalt LLM Trigger",
}


@dataclass
class TriggerEvent:
    """One inbound webhook call."""
    path: str
    body: Any
    query: Dict[str, str] = field(default_factory=dict)

    @property
    def node_name(self) -> str:
        return TRIGGERS[self.path]

    def workflow_data(self) -> List[List[Dict[str, Any]]]:
        """The event as the single record the trigger emits."""
        return [[{"json": self.body}]]


def receive_trigger(event: TriggerEvent) -> List[List[Dict[str, Any]]]:
    """
    Count and log a trigger event.

    Returns:
        The workflow data the trigger emits
    """
    webhook_events_total.labels(trigger=event.path).inc()
    session_id = event.body.get("sessionId") if isinstance(event.body, dict) else None
    log_event(
        "webhook_received",
        session_id=session_id,
        target=event.path,
        payload={"node": event.node_name, "query": event.query},
    )
    return event.workflow_data()
