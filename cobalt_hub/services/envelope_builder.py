"""Assemble outbound message envelopes. Pure construction, no I/O."""

from typing import Any, Dict, List, Optional, Union

from cobalt_hub.infra.metrics import envelopes_built_total
from cobalt_hub.infra.validation import sanitize_text, strip_html
from cobalt_hub.models.envelope import (
    PLAIN_TEXT_PLACEHOLDER,
    MessageEnvelope,
    MessageMeta,
    MessageType,
)
from cobalt_hub.models.survey import SurveyPage
from cobalt_hub.services.content_normalizer import ContentBundle
from cobalt_hub.services.survey_compiler import build_survey_content, expiration_meta

BOT_PARTICIPANT = "bot"
DEFAULT_ESCALATION_TEXT = "Connecting you to a live agent..."

MetaInput = Union[MessageMeta, Dict[str, Any], None]


def _meta(meta: MetaInput) -> Optional[Dict[str, Any]]:
    if meta is None:
        return None
    if not isinstance(meta, MessageMeta):
        meta = MessageMeta.model_validate(meta)
    return meta.to_wire() or None


def _built(envelope: MessageEnvelope) -> MessageEnvelope:
    envelopes_built_total.labels(type=envelope.type.value).inc()
    return envelope


def build_message_envelope(
    session_id: str,
    bundle: ContentBundle,
    meta: MetaInput = None,
    participant: Optional[str] = None,
) -> MessageEnvelope:
    """
    Build a text or splash message from normalized content.

    plainText is the first text item's plain text, else the splash text,
    else the "Rich Content" placeholder. Splash title, text and buttons are
    duplicated at the top level, where the connector's splash renderer
    reads them.
    """
    splash = bundle.splash
    plain_text = bundle.plain_text or (splash.text if splash else None) or PLAIN_TEXT_PLACEHOLDER

    envelope = MessageEnvelope(
        session_id=session_id,
        type=MessageType.SPLASH if splash else MessageType.TEXT,
        plain_text=plain_text,
        rich_content=list(bundle.items),
        meta=_meta(meta),
        participant=participant,
    )
    if splash:
        envelope.title = splash.title
        envelope.text = splash.text
        envelope.buttons = list(splash.buttons)
    return _built(envelope)


def build_survey_envelope(session_id: str, title: str, pages: List[SurveyPage]) -> MessageEnvelope:
    """Build a survey message carrying one survey item with all pages."""
    return _built(
        MessageEnvelope(
            session_id=session_id,
            type=MessageType.SURVEY,
            plain_text=title,
            rich_content=[build_survey_content(session_id, title, pages)],
            meta=expiration_meta(),
        )
    )


def build_html_envelope(session_id: str, html: str) -> MessageEnvelope:
    """Build a text message whose body is rendered as HTML by the front-end."""
    html = sanitize_text(html or "")
    return _built(
        MessageEnvelope(
            session_id=session_id,
            type=MessageType.TEXT,
            text=html,
            plain_text=strip_html(html),
            rich_content=[],
            participant=BOT_PARTICIPANT,
        )
    )


def build_escalation_envelope(
    session_id: str,
    text: Optional[str] = None,
    reason: Optional[str] = None,
) -> MessageEnvelope:
    """Build the bot message that flags a live agent request."""
    text = sanitize_text(text or "") or DEFAULT_ESCALATION_TEXT
    extra = {"escalationReason": reason} if reason else {}
    meta = MessageMeta(live_agent_requested=True, **extra)
    return _built(
        MessageEnvelope(
            session_id=session_id,
            type=MessageType.TEXT,
            text=text,
            plain_text=text,
            meta=meta.to_wire(),
            participant=BOT_PARTICIPANT,
        )
    )


def envelope_to_wire(envelope: MessageEnvelope) -> Dict[str, Any]:
    """JSON-ready body for the connector."""
    return envelope.to_wire()
