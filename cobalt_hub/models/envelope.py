"""Outbound message envelope and control-state models."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cobalt_hub.models.content import Button, RichContentItem, WireModel

PLAIN_TEXT_PLACEHOLDER = "Rich Content"


class MessageType(str, Enum):
    TEXT = "text"
    SURVEY = "survey"
    SPLASH = "splash"


class MessageMeta(BaseModel):
    """Named state flags sent alongside a message. Unset flags are omitted."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    chat_ended: Optional[bool] = None
    start_survey: Optional[bool] = None
    live_agent_requested: Optional[bool] = None
    live_agent_in_queue: Optional[bool] = None
    lock_input: Optional[bool] = None
    live_agent_unavailable: Optional[bool] = None
    livechat_issue: Optional[bool] = None
    get_location: Optional[bool] = None
    email_requested: Optional[bool] = None
    email_sent: Optional[bool] = None
    agent_typing: Optional[bool] = None
    apple_pay: Optional[bool] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SplashOverride(WireModel):
    """Top-level splash message fields."""
    title: str = ""
    text: str = ""
    buttons: List[Button] = Field(default_factory=list)


class MessageEnvelope(WireModel):
    """The complete message posted to the connector."""
    session_id: str = Field(..., alias="sessionId")
    type: MessageType = MessageType.TEXT
    plain_text: Optional[str] = Field(None, alias="plainText")
    text: Optional[str] = None
    rich_content: List[RichContentItem] = Field(default_factory=list, alias="richContent")
    meta: Optional[Dict[str, Any]] = None
    participant: Optional[str] = None

    # splash only
    title: Optional[str] = None
    buttons: Optional[List[Button]] = None


class ControlOperation(str, Enum):
    BOT = "bot"
    AGENT = "agent"
    END = "end"
    EMAIL = "email"
    DATASTORE = "datastore"
    LIVE_AGENT_REQUESTED = "liveAgentRequested"


class ControlStateRequest(BaseModel):
    """A control-state change addressed to /api/state/{path}."""
    operation: ControlOperation
    path: str
    session_id: str
    payload: Optional[Dict[str, Any]] = None

    def body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"sessionId": self.session_id}
        if self.payload is not None:
            body["payload"] = self.payload
        return body
