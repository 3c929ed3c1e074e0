"""
Pydantic schemas for the Oddsy HTTP API.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single message in a chat conversation."""

    role: Literal["system", "user", "assistant"] = Field(
        ..., description="The role of the message author"
    )
    content: str = Field(..., description="The text content of the message")


class ChatRequest(BaseModel):
    """Request body for /api/chat."""

    messages: list[ChatMessage] = Field(
        ..., description="Conversation so far, oldest first", min_length=1
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "messages": [
                    {"role": "user", "content": "Find me a value moneyline bet in tonight's NBA games."}
                ],
            }
        }
    }


class FinalResponse(BaseModel):
    """The structured recommendation, exactly as the model submitted it."""

    type: Literal["final"] = "final"
    data: dict[str, Any]


class AnswerResponse(BaseModel):
    """A plain-text reply with the progress labels collected on the way."""

    type: Literal["answer"] = "answer"
    content: str
    steps: list[str] = Field(default_factory=list)


class ExhaustedResponse(BaseModel):
    """The step budget ran out before a decision."""

    type: Literal["exhausted"] = "exhausted"
    content: str


class ErrorDetail(BaseModel):
    type: Literal["invalid_request", "contract_violation", "model_error"]
    message: str


class ErrorResponse(BaseModel):
    """Error response body for failed runs."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = "healthy"
    version: str = Field(..., description="API version")
    model: str = Field(..., description="Orchestrator model")
    tool_families: list[str] = Field(
        default_factory=list, description="Tool families available with the configured keys"
    )
