"""Item-at-a-time processing of input batches.

Each input record runs its own session resolution, content build and
delivery. A failure on one item never touches the next; the caller decides
through ``continue_on_fail`` whether a missing session id aborts the batch
or becomes a per-item error record.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from cobalt_hub.adapters.cobalt_client import CobaltClient
from cobalt_hub.infra.error_handler import DeliveryFailure, InvalidSessionIdError, MissingSessionIdError
from cobalt_hub.infra.validation import validate_session_id
from cobalt_hub.models.content import ContentPolicy
from cobalt_hub.models.envelope import ControlOperation, MessageEnvelope
from cobalt_hub.services.content_normalizer import normalize_contents
from cobalt_hub.services.control_state import build_control_request
from cobalt_hub.services.envelope_builder import (
    build_escalation_envelope,
    build_html_envelope,
    build_message_envelope,
    build_survey_envelope,
)
from cobalt_hub.services.session_resolver import UpstreamOutputs, resolve_session_id
from cobalt_hub.services.survey_compiler import compile_survey

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
ItemResult = Dict[str, Any]


@dataclass
class BatchContext:
    """Parameters shared by every item of one batch."""
    client: CobaltClient
    session_id: Optional[str] = None
    upstream: Optional[UpstreamOutputs] = None
    continue_on_fail: bool = False
    policy: ContentPolicy = ContentPolicy.LENIENT
    params: Dict[str, Any] = field(default_factory=dict)

    def resolve_session(self, record: Record) -> str:
        session_id = resolve_session_id(self.session_id, self.upstream, record)
        validate_session_id(session_id)
        return session_id


Handler = Callable[[Record, BatchContext], Awaitable[ItemResult]]


async def _deliver(envelope: MessageEnvelope, ctx: BatchContext) -> ItemResult:
    """Deliver an envelope; a delivery failure keeps the body in the result."""
    body = envelope.to_wire()
    try:
        await ctx.client.deliver_message(envelope)
    except DeliveryFailure as e:
        if ctx.continue_on_fail:
            return {"error": e.message}
        return {"error": e.message, "body": body}
    return {**body, "sent": True}


async def reply_handler(record: Record, ctx: BatchContext) -> ItemResult:
    """Normalize the configured content blocks into one message and send it."""
    session_id = ctx.resolve_session(record)
    bundle = normalize_contents(ctx.params.get("content") or [], ctx.policy)
    return await _deliver(build_message_envelope(session_id, bundle, ctx.params.get("meta")), ctx)


async def survey_handler(record: Record, ctx: BatchContext) -> ItemResult:
    """Compile the configured questions and send the survey."""
    session_id = ctx.resolve_session(record)
    pages = compile_survey(
        ctx.params.get("questions") or [],
        completion_message=ctx.params.get("completion_message") or "",
        completion_description=ctx.params.get("completion_description") or "",
    )
    envelope = build_survey_envelope(session_id, ctx.params.get("title") or "", pages)
    return await _deliver(envelope, ctx)


async def html_handler(record: Record, ctx: BatchContext) -> ItemResult:
    session_id = ctx.resolve_session(record)
    return await _deliver(build_html_envelope(session_id, ctx.params.get("html") or ""), ctx)


async def escalation_handler(record: Record, ctx: BatchContext) -> ItemResult:
    session_id = ctx.resolve_session(record)
    envelope = build_escalation_envelope(session_id, ctx.params.get("text"), ctx.params.get("reason"))
    return await _deliver(envelope, ctx)


async def control_handler(record: Record, ctx: BatchContext) -> ItemResult:
    """
    Send a control-state change.

    Unlike messages, a delivery failure is re-raised unless the batch
    continues on failure.
    """
    session_id = ctx.resolve_session(record)
    request = build_control_request(
        ctx.params.get("operation", ControlOperation.BOT),
        session_id,
        payload=ctx.params.get("payload"),
        value=ctx.params.get("value", True),
    )
    try:
        return await ctx.client.deliver_state(request)
    except DeliveryFailure as e:
        if ctx.continue_on_fail:
            return {"error": e.message}
        raise


async def run_batch(items: List[Record], handler: Handler, ctx: BatchContext) -> List[ItemResult]:
    """
    Run a handler over every input record in order.

    Raises:
        MissingSessionIdError: for an item without a session id, unless
            ctx.continue_on_fail is set
        InvalidSessionIdError: for an item whose session id fails
            validation, unless ctx.continue_on_fail is set
    """
    results = []
    for index, record in enumerate(items or [{}]):
        if not isinstance(record, dict):
            record = {}
        try:
            results.append(await handler(record, ctx))
        except (MissingSessionIdError, InvalidSessionIdError) as e:
            if not ctx.continue_on_fail:
                raise
            logger.warning("Unusable session id", extra={"item_index": index, "error": e.message})
            results.append({"error": e.message})
    return results
