"""API request/response models."""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field

from cobalt_hub.models.content import ContentPolicy
from cobalt_hub.models.envelope import MessageMeta
from cobalt_hub.models.survey import SurveyQuestion


# ============================================================================
# Batch Models
# ============================================================================

class BatchRequest(BaseModel):
    """Fields shared by every batch endpoint."""
    session_id: Optional[str] = Field(None, description="Explicit session id; resolved from upstream or items when empty")
    items: List[Dict[str, Any]] = Field(default_factory=list, description="Input records, one message per record")
    upstream: Optional[Dict[str, List[Dict[str, Any]]]] = Field(
        None,
        description="Records emitted by upstream nodes, keyed by node name",
        example={"Cobalt Trigger": [{"sessionId": "abc"}]},
    )
    continue_on_fail: Optional[bool] = Field(None, description="Record per-item errors instead of failing the batch")


class ReplyRequest(BatchRequest):
    """Request model for a rich content reply."""
    content: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Content blocks, each with a 'type' discriminant",
        example=[{"type": "text", "message": "Hi"}],
    )
    meta: MessageMeta = Field(default_factory=MessageMeta)
    policy: Optional[ContentPolicy] = Field(None, description="'lenient' or 'strict'")


class SurveyRequest(BatchRequest):
    """Request model for sending a survey."""
    title: str = Field(..., example="CSAT")
    questions: List[SurveyQuestion] = Field(default_factory=list)
    completion_message: str = Field("", example="Thanks!")
    completion_description: str = ""


class HtmlReplyRequest(BatchRequest):
    html: str = Field(..., example="<b>Order shipped</b>")


class EscalationRequest(BatchRequest):
    text: Optional[str] = None
    reason: Optional[str] = None


class ControlRequest(BatchRequest):
    """Request model for a control-state change."""
    payload: Optional[Any] = Field(None, description="Payload for 'email' and 'datastore' (object or JSON string)")
    value: bool = Field(True, description="Flag value for 'liveAgentRequested'")


class BatchResponse(BaseModel):
    """One result per input item."""
    results: List[Dict[str, Any]]
    count: int


# ============================================================================
# Webhook Models
# ============================================================================

class TriggerResponse(BaseModel):
    status: str = Field(..., example="received")
    trigger: str
    workflowData: List[List[Dict[str, Any]]]


# ============================================================================
# Tool Models
# ============================================================================

class ToolInvokeRequest(BaseModel):
    session_id: Optional[str] = None
    arguments: Dict[str, Any] = Field(default_factory=dict)
    api_base_url: Optional[str] = Field(None, description="Connector base URL override")


class ToolInvokeResponse(BaseModel):
    tool: str
    response: str
