"""
LLM Call Interface for Oddsy

Wraps the OpenAI Chat Completions API with native function calling. The
model is asked for at most one tool call per turn; anything it returns is
reduced to a ModelDecision (plain text or a single tool call).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from openai import OpenAI

from .errors import ModelCallError
from .models import OrchestratorConfig
from .orchestration.state import ToolCallRequest

logger = logging.getLogger(__name__)


@dataclass
class ModelDecision:
    """What the model chose to do on one turn."""

    text: Optional[str] = None
    tool_call: Optional[ToolCallRequest] = None
    usage: Optional[dict] = None

    @property
    def is_tool_call(self) -> bool:
        return self.tool_call is not None


class LLMClient:
    """Client for the orchestrator model."""

    def __init__(
        self,
        orchestrator_config: Optional[OrchestratorConfig] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
    ):
        if orchestrator_config is None:
            from .config import config

            orchestrator_config = config.orchestrator

        self.base_url = base_url or orchestrator_config.base_url
        self.model = model or orchestrator_config.model
        self.temperature = orchestrator_config.temperature
        self.client = OpenAI(
            base_url=self.base_url,
            api_key=orchestrator_config.api_key or "not-needed",
            timeout=orchestrator_config.timeout,
        )

    def decide(self, messages: list[dict], tools: list[dict]) -> ModelDecision:
        """
        Ask the model for its next move.

        Args:
            messages: Full conversation in OpenAI chat format
            tools: Function-calling tool definitions

        Returns:
            ModelDecision with either text or the first requested tool call

        Raises:
            ModelCallError: If the endpoint fails or returns no choices
        """
        create_kwargs: dict = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if tools:
            create_kwargs["tools"] = tools
            create_kwargs["tool_choice"] = "auto"
            create_kwargs["parallel_tool_calls"] = False

        try:
            response = self.client.chat.completions.create(**create_kwargs)
        except Exception as e:
            logger.error(f"Orchestrator call failed: {e}")
            raise ModelCallError(f"Orchestrator call failed: {e}") from e

        if not response.choices:
            raise ModelCallError("Orchestrator returned no choices")

        message = response.choices[0].message
        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        if message.tool_calls:
            if len(message.tool_calls) > 1:
                logger.warning(
                    "Model requested %d tool calls; only the first is executed",
                    len(message.tool_calls),
                )
            first = message.tool_calls[0]
            return ModelDecision(
                text=message.content,
                tool_call=ToolCallRequest(
                    id=first.id,
                    name=first.function.name,
                    arguments=first.function.arguments or "",
                ),
                usage=usage,
            )

        return ModelDecision(text=message.content or "", usage=usage)
