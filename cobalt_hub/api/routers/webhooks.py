"""Webhook trigger API router."""

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from cobalt_hub.api.models import TriggerResponse
from cobalt_hub.services.triggers import TRIGGERS, TriggerEvent, receive_trigger

router = APIRouter()


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw:
        return {}
    try:
        return await request.json()
    except ValueError:
        # Non-JSON bodies are passed on as text
        return raw.decode("utf-8", errors="replace")


@router.post("/webhook/{path}", tags=["Webhooks"], response_model=TriggerResponse)
async def handle_trigger(path: str, request: Request):
    """
    Receive a Cobalt trigger event.

    The body is echoed unmodified as the record the trigger emits.
    """
    if path not in TRIGGERS:
        raise HTTPException(status_code=404, detail=f"Unknown trigger: {path}")

    event = TriggerEvent(
        path=path,
        body=await _read_body(request),
        query=dict(request.query_params),
    )

    return TriggerResponse(
        status="received",
        trigger=event.node_name,
        workflowData=receive_trigger(event),
    )
