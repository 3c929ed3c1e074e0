"""Tests for the /api/chat endpoint."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from oddsy.api.main import app
from oddsy.errors import FatalContractViolation, InvalidRequestError, ModelCallError

client = TestClient(app)

REQUEST = {"messages": [{"role": "user", "content": "Best NBA moneyline tonight?"}]}


class TestChatEndpoint:
    """Tests for POST /api/chat."""

    @patch("oddsy.api.routes.chat.run_agent")
    def test_final_response(self, mock_run_agent):
        payload = {
            "game": {"id": "g1", "home_team": "A", "away_team": "B", "bookmakers": []},
            "pick": {"team": "B", "price": 130},
            "narrative": "Value.",
        }
        mock_run_agent.return_value = {"type": "final", "data": payload}

        response = client.post("/api/chat", json=REQUEST)

        assert response.status_code == 200
        assert response.json() == {"type": "final", "data": payload}

    @patch("oddsy.api.routes.chat.run_agent")
    def test_answer_response(self, mock_run_agent):
        mock_run_agent.return_value = {
            "type": "answer",
            "content": "No value tonight.",
            "steps": ["Shopping for the best lines..."],
        }

        response = client.post("/api/chat", json=REQUEST)

        assert response.status_code == 200
        assert response.json()["steps"] == ["Shopping for the best lines..."]

    @patch("oddsy.api.routes.chat.run_agent")
    def test_history_forwarded(self, mock_run_agent):
        mock_run_agent.return_value = {"type": "exhausted", "content": "out of steps"}
        messages = [
            {"role": "user", "content": "NBA?"},
            {"role": "assistant", "content": "Which game?"},
            {"role": "user", "content": "Lakers"},
        ]

        client.post("/api/chat", json={"messages": messages})

        history = mock_run_agent.call_args.args[0]
        assert history == messages
        assert mock_run_agent.call_args.kwargs["execution_id"].startswith("exec-")

    def test_empty_messages_is_400(self):
        response = client.post("/api/chat", json={"messages": []})

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "invalid_request"

    def test_bad_role_is_400(self):
        response = client.post("/api/chat", json={"messages": [{"role": "tool", "content": "x"}]})

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "invalid_request"

    @patch("oddsy.api.routes.chat.run_agent")
    def test_invalid_history_is_400(self, mock_run_agent):
        mock_run_agent.side_effect = InvalidRequestError(
            "Conversation history must contain at least one user message"
        )

        response = client.post("/api/chat", json={"messages": [{"role": "assistant", "content": "hi"}]})

        assert response.status_code == 400
        assert response.json() == {
            "error": {
                "type": "invalid_request",
                "message": "Conversation history must contain at least one user message",
            }
        }

    @patch("oddsy.api.routes.chat.run_agent")
    def test_contract_violation_is_502(self, mock_run_agent):
        mock_run_agent.side_effect = FatalContractViolation(
            "make_final_recommendation", "not valid JSON", "{"
        )

        response = client.post("/api/chat", json=REQUEST)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["type"] == "contract_violation"
        assert "make_final_recommendation" in error["message"]

    @patch("oddsy.api.routes.chat.run_agent")
    def test_model_error_is_502(self, mock_run_agent):
        mock_run_agent.side_effect = ModelCallError("Orchestrator call failed: timeout")

        response = client.post("/api/chat", json=REQUEST)

        assert response.status_code == 502
        assert response.json()["error"]["type"] == "model_error"

    @patch("oddsy.api.routes.chat.run_agent")
    def test_unexpected_error_is_500(self, mock_run_agent):
        mock_run_agent.side_effect = RuntimeError("boom")

        response = client.post("/api/chat", json=REQUEST)

        assert response.status_code == 500
