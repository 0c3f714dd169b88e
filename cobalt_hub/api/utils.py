"""API utility functions shared by the batch routers."""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from cobalt_hub.adapters.cobalt_client import CobaltClient
from cobalt_hub.api.models import BatchRequest, BatchResponse
from cobalt_hub.infra.config import config
from cobalt_hub.models.content import ContentPolicy
from cobalt_hub.services.batch_processor import BatchContext, Handler, run_batch


def get_cobalt_client() -> CobaltClient:
    """Dependency providing the connector client."""
    return CobaltClient()


def default_policy() -> ContentPolicy:
    try:
        return ContentPolicy(config.CONTENT_POLICY)
    except ValueError:
        return ContentPolicy.LENIENT


def build_context(
    request: BatchRequest,
    client: CobaltClient,
    params: Dict[str, Any],
    policy: Optional[ContentPolicy] = None,
) -> BatchContext:
    continue_on_fail = request.continue_on_fail
    if continue_on_fail is None:
        continue_on_fail = config.CONTINUE_ON_FAIL
    return BatchContext(
        client=client,
        session_id=request.session_id,
        upstream=request.upstream,
        continue_on_fail=continue_on_fail,
        policy=policy or default_policy(),
        params=params,
    )


async def run_batch_request(items: List[Dict[str, Any]], handler: Handler, ctx: BatchContext) -> BatchResponse:
    """
    Run a batch.

    CobaltErrors that abort the batch propagate to the app's error handler;
    an invalid session id becomes a 400.
    """
    try:
        results = await run_batch(items, handler, ctx)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return BatchResponse(results=results, count=len(results))
