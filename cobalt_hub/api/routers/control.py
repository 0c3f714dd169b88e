"""Control-state API router."""

from fastapi import APIRouter, Depends

from cobalt_hub.adapters.cobalt_client import CobaltClient
from cobalt_hub.api.models import BatchResponse, ControlRequest
from cobalt_hub.api.utils import build_context, get_cobalt_client, run_batch_request
from cobalt_hub.models.envelope import ControlOperation
from cobalt_hub.services.batch_processor import control_handler

router = APIRouter()


@router.post("/control/{operation}", tags=["Control"], response_model=BatchResponse)
async def change_state(
    operation: ControlOperation,
    request: ControlRequest,
    client: CobaltClient = Depends(get_cobalt_client),
):
    """
    Change the state of a chat session.

    Operations: `bot`, `agent`, `end`, `email`, `datastore`, and
    `liveAgentRequested` (sent to the datastore with `value`).
    """
    ctx = build_context(
        request,
        client,
        params={"operation": operation, "payload": request.payload, "value": request.value},
    )
    return await run_batch_request(request.items, control_handler, ctx)
