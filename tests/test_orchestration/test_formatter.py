"""Tests for the response formatter."""

import pytest

from oddsy.orchestration import BudgetExhausted, FinalDecision, PlainAnswer, format_outcome


class TestFormatOutcome:
    """Tests for format_outcome."""

    def test_final(self):
        payload = {"game": {"id": "g1"}, "pick": {"team": "A", "price": 120}, "narrative": "n"}

        response = format_outcome(FinalDecision(payload=payload))

        assert response == {"type": "final", "data": payload}
        assert response["data"] is payload

    def test_answer(self):
        response = format_outcome(PlainAnswer(text="No edge tonight.", steps=["Checking injury reports..."]))

        assert response == {
            "type": "answer",
            "content": "No edge tonight.",
            "steps": ["Checking injury reports..."],
        }

    def test_exhausted(self):
        response = format_outcome(BudgetExhausted())

        assert response == {
            "type": "exhausted",
            "content": "I've reached the maximum number of steps for my analysis.",
        }

    def test_unknown_outcome(self):
        with pytest.raises(TypeError):
            format_outcome("final")
