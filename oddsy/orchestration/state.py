"""
Conversation state for one orchestration run.

An append-only list of turns seeded from the caller's history. It renders
to OpenAI chat messages on every model call and is discarded with the run.
"""

from dataclasses import dataclass
from typing import Any, Optional

from ..errors import InvalidRequestError

CALLER_ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ToolCallRequest:
    """A single tool invocation requested by the model."""

    id: str
    name: str
    arguments: str = ""


@dataclass(frozen=True)
class Turn:
    role: str
    content: Optional[str] = None
    tool_call: Optional[ToolCallRequest] = None
    tool_name: Optional[str] = None

    @classmethod
    def assistant_tool_call(cls, call: ToolCallRequest, content: Optional[str] = None) -> "Turn":
        return cls(role="assistant", content=content, tool_call=call)

    @classmethod
    def tool_result(cls, call: ToolCallRequest, content: str) -> "Turn":
        return cls(role="tool", content=content, tool_call=call, tool_name=call.name)

    def to_message(self) -> dict[str, Any]:
        """Render as an OpenAI chat message."""
        if self.role == "tool" and self.tool_call is not None:
            return {
                "role": "tool",
                "tool_call_id": self.tool_call.id,
                "content": self.content or "",
            }
        if self.role == "assistant" and self.tool_call is not None:
            return {
                "role": "assistant",
                "content": self.content,
                "tool_calls": [
                    {
                        "id": self.tool_call.id,
                        "type": "function",
                        "function": {
                            "name": self.tool_call.name,
                            "arguments": self.tool_call.arguments,
                        },
                    }
                ],
            }
        return {"role": self.role, "content": self.content or ""}


class ConversationState:
    """Ordered, append-only turns owned by a single loop run."""

    def __init__(self, turns: Optional[list[Turn]] = None):
        self._turns: list[Turn] = list(turns or [])

    @classmethod
    def from_history(
        cls,
        history: Any,
        system_prompt: Optional[str] = None,
    ) -> "ConversationState":
        """
        Seed state from caller history (``[{role, content}, ...]``).

        The system prompt is prepended only when the history has no
        system turn of its own.

        Raises:
            InvalidRequestError: If the history is empty or malformed
        """
        if not isinstance(history, list) or not history:
            raise InvalidRequestError("Conversation history must be a non-empty list of messages")

        turns = []
        for index, message in enumerate(history):
            if not isinstance(message, dict):
                raise InvalidRequestError(f"Message {index} must be an object with role and content")
            role = message.get("role")
            content = message.get("content")
            if role not in CALLER_ROLES:
                raise InvalidRequestError(
                    f"Message {index} has unsupported role {role!r}; expected one of {', '.join(CALLER_ROLES)}"
                )
            if not isinstance(content, str):
                raise InvalidRequestError(f"Message {index} content must be a string")
            turns.append(Turn(role=role, content=content))

        if not any(turn.role == "user" for turn in turns):
            raise InvalidRequestError("Conversation history must contain at least one user message")

        if system_prompt and not any(turn.role == "system" for turn in turns):
            turns.insert(0, Turn(role="system", content=system_prompt))

        return cls(turns)

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    def to_messages(self) -> list[dict[str, Any]]:
        return [turn.to_message() for turn in self._turns]

    def __len__(self) -> int:
        return len(self._turns)
