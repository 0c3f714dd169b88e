from .content import (
    Button,
    ButtonStyle,
    ContentPolicy,
    RichContentItem,
    TextContent,
)
from .envelope import (
    ControlOperation,
    ControlStateRequest,
    MessageEnvelope,
    MessageMeta,
    MessageType,
    SplashOverride,
)
from .survey import SurveyPage, SurveyQuestion
from .tool import ToolDefinition

__all__ = [
    "Button",
    "ButtonStyle",
    "ContentPolicy",
    "RichContentItem",
    "TextContent",
    "ControlOperation",
    "ControlStateRequest",
    "MessageEnvelope",
    "MessageMeta",
    "MessageType",
    "SplashOverride",
    "SurveyPage",
    "SurveyQuestion",
    "ToolDefinition",
]
