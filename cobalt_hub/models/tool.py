"""Chat tool definition model."""

from pydantic import BaseModel, Field
from typing import Dict, Any


class ToolDefinition(BaseModel):
    """Tool exposed to an LLM agent for talking to the chat front-end."""
    name: str = Field(..., description="Tool name as presented to the model")
    description: str = Field(..., description="Tool description")
    parameters_schema: Dict[str, Any] = Field(..., description="JSON Schema for parameters")
