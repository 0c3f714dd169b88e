"""Chat tools an LLM agent can call to talk to the Cobalt front-end.

Tool results are plain strings the model reads back, so failures are
reported in the result text rather than raised.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cobalt_hub.adapters.cobalt_client import CobaltClient
from cobalt_hub.infra.error_handler import DeliveryFailure
from cobalt_hub.infra.metrics import tool_calls_total
from cobalt_hub.models.content import ContentPolicy
from cobalt_hub.models.tool import ToolDefinition
from cobalt_hub.services.content_normalizer import CONTENT_KINDS, normalize_contents
from cobalt_hub.services.control_state import build_datastore_escalation
from cobalt_hub.services.envelope_builder import (
    BOT_PARTICIPANT,
    build_escalation_envelope,
    build_html_envelope,
    build_message_envelope,
)

logger = logging.getLogger(__name__)

MISSING_SESSION_MESSAGE = (
    "Error: Could not determine Session ID. "
    "Please ensure the Session ID parameter is set in the tool node."
)


class ToolButton(BaseModel):
    text: str = Field(..., description="Button label")
    bot_action: Optional[str] = Field(None, description="Action triggered when clicked")
    link: Optional[str] = Field(None, description="URL to open")
    icon: Optional[str] = Field(None, description='Icon name (e.g., "right-arrow")')
    type: Optional[str] = Field(None, description="Button style (primary, secondary, danger, splash)")
    title: Optional[str] = Field(None, description="Title (shown above button for splash type)")


class ToolItem(BaseModel):
    text: Optional[str] = Field(None, description="Text for list item or card body")
    bot_action: Optional[str] = Field(None, description="Bot action for list item")
    link: Optional[str] = Field(None, description="Link URL for list item")
    title: Optional[str] = Field(None, description="Title for card")
    subtitle: Optional[str] = Field(None, description="Subtitle for card")
    imageUrl: Optional[str] = Field(None, description="Image URL for card")
    imageAlt: Optional[str] = Field(None, description="Image alt text for card")
    buttonText: Optional[str] = Field(None, description="Button text for card")
    buttonAction: Optional[str] = Field(None, description="Button action for card")


class RichContentToolInput(BaseModel):
    """Flat rich content description produced by the model."""
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = Field(
        "text",
        description='The type of rich content to send. One of: ' + ", ".join(CONTENT_KINDS)
        + '. Use "list" for bullet points/numbered lists.',
    )
    text: Optional[str] = Field(None, description='Main text content. Required for "text", "information", "splash".')
    plainText: Optional[str] = Field(None, description="Fallback plain text.")
    title: Optional[str] = Field(None, description="Title for card, list, map, or splash.")
    subtitle: Optional[str] = Field(None, description="Subtitle for card.")
    imageSrc: Optional[str] = Field(None, description="Source URL for image.")
    imageAlt: Optional[str] = Field(None, description="Alt text for image.")
    imageLink: Optional[str] = Field(None, description="Link URL for image.")
    buttons: Optional[List[ToolButton]] = Field(None, description='Buttons for "buttons" or "splash" type.')
    cardButtonText: Optional[str] = Field(None, description="Button text for card.")
    cardButtonAction: Optional[str] = Field(None, description="Button action for card.")
    replies: Optional[List[str]] = Field(None, description="List of quick reply options.")
    format: Optional[str] = Field(None, description='Quick reply format: "default" or "cloud".')
    items: Optional[List[ToolItem]] = Field(None, description='Items for "list" or "carousel".')
    ordered: Optional[bool] = Field(None, description="True for numbered list, false for bullet points")
    footer: Optional[str] = None
    fileName: Optional[str] = Field(None, description="File name.")
    fileSize: Optional[str] = Field(None, description="File size.")
    fileUrl: Optional[str] = Field(None, description="File or Link URL.")
    mapMode: Optional[str] = Field(None, description="place, view, directions, streetview or search")
    parameters: Optional[str] = None
    mapLinkUrl: Optional[str] = Field(None, description="Link URL for map.")
    mapLinkText: Optional[str] = Field(None, description="Link text for map.")


class HtmlToolInput(BaseModel):
    html: str = Field(
        ...,
        description=(
            "The raw HTML content to send. Use valid HTML tags for formatting "
            "(e.g., <b>bold</b>, <ul><li>item</li></ul>), not Markdown."
        ),
    )


class EscalationToolInput(BaseModel):
    reason: Optional[str] = Field(None, description="The reason for escalating to a live agent.")
    text: Optional[str] = Field(
        None,
        description='The text to display to the user (e.g. "Connecting you to a live agent...").',
    )


TOOL_DEFINITIONS: Dict[str, ToolDefinition] = {
    "send_rich_content": ToolDefinition(
        name="send_rich_content",
        description=(
            "Use this tool for any response that includes a list, options, or structured data. "
            'Never output markdown lists in plain text; use the "list" type instead. '
            'Use "carousel" for products/items, "card" for single items, "map" for locations, '
            'and "buttons"/"quickReply" for choices. This tool sends the message directly to the user; '
            "do not repeat the content in your final response."
        ),
        parameters_schema=RichContentToolInput.model_json_schema(),
    ),
    "send_html_content": ToolDefinition(
        name="send_html_content",
        description=(
            "Use this tool to send messages formatted with HTML, such as tables, bold text and headers. "
            "Convert any Markdown to valid HTML before sending. Do not use this for simple text messages."
        ),
        parameters_schema=HtmlToolInput.model_json_schema(),
    ),
    "escalate_to_live_agent": ToolDefinition(
        name="escalate_to_live_agent",
        description=(
            "Use this tool when the user explicitly requests a live agent or human support. "
            'This triggers the handoff process. You can provide the "text" to show the user.'
        ),
        parameters_schema=EscalationToolInput.model_json_schema(),
    ),
    "request_live_agent": ToolDefinition(
        name="request_live_agent",
        description=(
            "Flag the conversation for escalation when the user asks to speak to a human, "
            'live agent, or support representative. Input should be a JSON string with a "reason" property.'
        ),
        parameters_schema={"type": "object", "properties": {"input": {"type": "string"}}},
    ),
}


def get_chat_tools() -> List[ToolDefinition]:
    """All tools available to an agent."""
    return list(TOOL_DEFINITIONS.values())


async def _send_rich_content(args: Dict[str, Any], session_id: str, client: CobaltClient) -> str:
    tool_input = RichContentToolInput.model_validate(args)
    record = tool_input.model_dump(exclude_none=True)
    bundle = normalize_contents([record], ContentPolicy.LENIENT)
    envelope = build_message_envelope(session_id, bundle, participant=BOT_PARTICIPANT)
    await client.deliver_message(envelope)
    return "Rich content sent."


async def _send_html_content(args: Dict[str, Any], session_id: str, client: CobaltClient) -> str:
    tool_input = HtmlToolInput.model_validate(args)
    await client.deliver_message(build_html_envelope(session_id, tool_input.html))
    return "HTML content sent successfully to the user."


async def _escalate_to_live_agent(args: Dict[str, Any], session_id: str, client: CobaltClient) -> str:
    tool_input = EscalationToolInput.model_validate(args)
    await client.deliver_message(build_escalation_envelope(session_id, tool_input.text, tool_input.reason))
    return (
        "Escalation request sent successfully. The user has been notified. "
        "Do not generate any further text response."
    )


async def _request_live_agent(args: Dict[str, Any], session_id: str, client: CobaltClient) -> str:
    raw_input = args.get("input") if isinstance(args, dict) else args
    await client.deliver_state(build_datastore_escalation(session_id, raw_input))
    return "Escalation requested successfully. A live agent has been notified."


_EXECUTORS = {
    "send_rich_content": (_send_rich_content, "rich content"),
    "send_html_content": (_send_html_content, "HTML content"),
    "escalate_to_live_agent": (_escalate_to_live_agent, "escalation request"),
    "request_live_agent": (_request_live_agent, "escalation request"),
}


async def execute_chat_tool(
    name: str,
    args: Dict[str, Any],
    session_id: Optional[str],
    client: CobaltClient,
) -> str:
    """
    Execute a chat tool and return the text result for the model.

    Raises:
        ValueError: If the tool name is unknown
    """
    if name not in _EXECUTORS:
        raise ValueError(f"Unknown chat tool: {name}")
    executor, what = _EXECUTORS[name]

    if not session_id:
        tool_calls_total.labels(tool_name=name, status="missing_session").inc()
        return MISSING_SESSION_MESSAGE

    try:
        result = await executor(args or {}, session_id, client)
    except ValidationError as e:
        tool_calls_total.labels(tool_name=name, status="invalid_input").inc()
        logger.warning(f"Invalid input for tool {name}", extra={"errors": e.errors()})
        return f"Error: invalid input for {name}: {e.error_count()} validation error(s)"
    except DeliveryFailure as e:
        tool_calls_total.labels(tool_name=name, status="failure").inc()
        return f"Error sending {what} to {client.base_url}: {e.message}"

    tool_calls_total.labels(tool_name=name, status="success").inc()
    return result
