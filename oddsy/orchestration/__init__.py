"""
Orchestration module for Oddsy.
"""

from .formatter import format_outcome
from .loop import (
    AgentLoop,
    BudgetExhausted,
    FinalDecision,
    LoopOutcome,
    OrchestrationStep,
    PlainAnswer,
    PROGRESS_LABELS,
)
from .state import ConversationState, ToolCallRequest, Turn

__all__ = [
    "AgentLoop",
    "BudgetExhausted",
    "ConversationState",
    "FinalDecision",
    "LoopOutcome",
    "OrchestrationStep",
    "PlainAnswer",
    "PROGRESS_LABELS",
    "ToolCallRequest",
    "Turn",
    "format_outcome",
]
