"""Chat tools API router."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from cobalt_hub.adapters.cobalt_client import CobaltClient
from cobalt_hub.api.models import ToolInvokeRequest, ToolInvokeResponse
from cobalt_hub.api.utils import get_cobalt_client
from cobalt_hub.models.tool import ToolDefinition
from cobalt_hub.services.chat_tools import TOOL_DEFINITIONS, execute_chat_tool, get_chat_tools

router = APIRouter()


@router.get("/tools", tags=["Tools"], response_model=List[ToolDefinition])
async def list_tools():
    """List chat tools with their JSON-schema parameters."""
    return get_chat_tools()


@router.post("/tools/{name}/invoke", tags=["Tools"], response_model=ToolInvokeResponse)
async def invoke_tool(
    name: str,
    request: ToolInvokeRequest,
    client: CobaltClient = Depends(get_cobalt_client),
):
    """
    Invoke a chat tool on behalf of an agent.

    Errors the model should see (missing session, delivery failure, bad
    input) are returned in `response` with status 200.
    """
    if name not in TOOL_DEFINITIONS:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

    if request.api_base_url:
        client = CobaltClient(base_url=request.api_base_url)
    response = await execute_chat_tool(name, request.arguments, request.session_id, client)
    return ToolInvokeResponse(tool=name, response=response)
