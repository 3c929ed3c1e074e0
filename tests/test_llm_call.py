"""Tests for the orchestrator model client."""

from unittest.mock import Mock, patch

import pytest

from oddsy.errors import ModelCallError
from oddsy.llm_call import LLMClient, ModelDecision
from oddsy.models import OrchestratorConfig

TOOLS = [{"type": "function", "function": {"name": "list_odds", "parameters": {}}}]


def _tool_call(call_id: str, name: str, arguments: str) -> Mock:
    tc = Mock()
    tc.id = call_id
    tc.function.name = name
    tc.function.arguments = arguments
    return tc


def _response(content=None, tool_calls=None, usage=True) -> Mock:
    message = Mock()
    message.content = content
    message.tool_calls = tool_calls
    response = Mock()
    response.choices = [Mock(message=message)]
    response.usage = Mock(prompt_tokens=10, completion_tokens=5, total_tokens=15) if usage else None
    return response


@pytest.fixture
def orchestrator_config():
    return OrchestratorConfig(
        base_url="http://llm.local/v1",
        model="test-model",
        api_key="",
        temperature=0.2,
        timeout=30.0,
    )


class TestLLMClient:
    """Tests for LLMClient.decide."""

    @patch("oddsy.llm_call.OpenAI")
    def test_client_construction(self, mock_openai_cls, orchestrator_config):
        client = LLMClient(orchestrator_config=orchestrator_config)

        mock_openai_cls.assert_called_once_with(
            base_url="http://llm.local/v1", api_key="not-needed", timeout=30.0
        )
        assert client.model == "test-model"
        assert client.temperature == 0.2

    @patch("oddsy.llm_call.OpenAI")
    def test_plain_text(self, mock_openai_cls, orchestrator_config):
        mock_openai_cls.return_value.chat.completions.create.return_value = _response("Hello")

        decision = LLMClient(orchestrator_config=orchestrator_config).decide(
            [{"role": "user", "content": "hi"}], TOOLS
        )

        assert decision.is_tool_call is False
        assert decision.text == "Hello"
        assert decision.usage == {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}

    @patch("oddsy.llm_call.OpenAI")
    def test_request_parameters(self, mock_openai_cls, orchestrator_config):
        create = mock_openai_cls.return_value.chat.completions.create
        create.return_value = _response("ok")

        LLMClient(orchestrator_config=orchestrator_config).decide([{"role": "user", "content": "hi"}], TOOLS)

        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["tools"] == TOOLS
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["parallel_tool_calls"] is False

    @patch("oddsy.llm_call.OpenAI")
    def test_tool_call(self, mock_openai_cls, orchestrator_config):
        mock_openai_cls.return_value.chat.completions.create.return_value = _response(
            tool_calls=[_tool_call("call_1", "list_odds", '{"sport": "nba"}')]
        )

        decision = LLMClient(orchestrator_config=orchestrator_config).decide([], TOOLS)

        assert decision.is_tool_call is True
        assert decision.tool_call.id == "call_1"
        assert decision.tool_call.name == "list_odds"
        assert decision.tool_call.arguments == '{"sport": "nba"}'

    @patch("oddsy.llm_call.OpenAI")
    def test_only_first_tool_call_used(self, mock_openai_cls, orchestrator_config):
        mock_openai_cls.return_value.chat.completions.create.return_value = _response(
            tool_calls=[
                _tool_call("call_1", "list_odds", "{}"),
                _tool_call("call_2", "search_news", "{}"),
            ]
        )

        decision = LLMClient(orchestrator_config=orchestrator_config).decide([], TOOLS)

        assert decision.tool_call.name == "list_odds"

    @patch("oddsy.llm_call.OpenAI")
    def test_endpoint_failure(self, mock_openai_cls, orchestrator_config):
        mock_openai_cls.return_value.chat.completions.create.side_effect = ConnectionError("refused")

        with pytest.raises(ModelCallError, match="refused"):
            LLMClient(orchestrator_config=orchestrator_config).decide([], TOOLS)

    @patch("oddsy.llm_call.OpenAI")
    def test_no_choices(self, mock_openai_cls, orchestrator_config):
        response = _response("x")
        response.choices = []
        mock_openai_cls.return_value.chat.completions.create.return_value = response

        with pytest.raises(ModelCallError, match="no choices"):
            LLMClient(orchestrator_config=orchestrator_config).decide([], TOOLS)


class TestModelDecision:
    def test_text_only(self):
        assert ModelDecision(text="hi").is_tool_call is False
