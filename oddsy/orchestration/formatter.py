"""
Maps a loop outcome onto one of the three caller-visible response shapes.
"""

from typing import Any

from .loop import BudgetExhausted, FinalDecision, LoopOutcome, PlainAnswer


def format_outcome(outcome: LoopOutcome) -> dict[str, Any]:
    """
    Format a LoopOutcome for the caller.

    The final decision payload is passed through by reference, unmodified.
    """
    if isinstance(outcome, FinalDecision):
        return {"type": "final", "data": outcome.payload}
    if isinstance(outcome, PlainAnswer):
        return {"type": "answer", "content": outcome.text, "steps": list(outcome.steps)}
    if isinstance(outcome, BudgetExhausted):
        return {"type": "exhausted", "content": outcome.message}
    raise TypeError(f"Unknown loop outcome: {type(outcome).__name__}")
