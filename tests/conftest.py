"""
Pytest configuration and fixtures for Oddsy tests.
"""

import json

import pytest
import requests
from unittest.mock import MagicMock, Mock, patch

from oddsy.models import UpstreamConfig
from oddsy.orchestration.state import ToolCallRequest


def make_response(payload=None, status_code: int = 200, reason: str = "OK", text: str | None = None) -> Mock:
    """Build a mock requests.Response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.reason = reason
    if text is not None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text
    else:
        response.json.return_value = payload
        response.text = json.dumps(payload)
    return response


def make_game(game_id: str = "g1", home: str = "Los Angeles Lakers", away: str = "Boston Celtics") -> dict:
    """An Odds API game object with one supported and one unsupported bookmaker."""
    return {
        "id": game_id,
        "sport_key": "basketball_nba",
        "sport_title": "NBA",
        "commence_time": "2024-01-15T00:00:00Z",
        "home_team": home,
        "away_team": away,
        "bookmakers": [
            {
                "key": "draftkings",
                "title": "DraftKings",
                "last_update": "2024-01-14T20:00:00Z",
                "markets": [
                    {
                        "key": "h2h",
                        "outcomes": [
                            {"name": home, "price": -150},
                            {"name": away, "price": 130},
                        ],
                    }
                ],
            },
            {
                "key": "some_offshore_book",
                "title": "Offshore",
                "markets": [],
            },
        ],
    }


def tool_call(name: str, arguments, call_id: str = "call_1") -> ToolCallRequest:
    """A ToolCallRequest with dict arguments serialized like the model sends them."""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return ToolCallRequest(id=call_id, name=name, arguments=arguments)


@pytest.fixture
def policy():
    """Upstream policy with the default retry count and cap."""
    return UpstreamConfig(timeout=5.0, max_retries=3, retry_base_delay=1.0, max_items=5)


@pytest.fixture
def mock_session():
    """A requests.Session stand-in; set .request.return_value or .side_effect."""
    return MagicMock(spec=requests.Session)


@pytest.fixture(autouse=True)
def no_sleep():
    """Never actually sleep between upstream retries."""
    with patch("oddsy.tools.http.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture(autouse=True)
def reset_tracing():
    """Keep the global tracing client disabled unless a test sets it."""
    import oddsy.tracing.client as client_module

    client_module._tracing_client = None
    yield
    client_module._tracing_client = None
