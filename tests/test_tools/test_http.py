"""Tests for the upstream HTTP client: retries, backoff and key masking."""

from unittest.mock import call

import pytest
import requests

from conftest import make_response
from oddsy.errors import UpstreamError
from oddsy.tools.http import MASK, UpstreamClient, backoff_delay


def _client(session, **kwargs) -> UpstreamClient:
    defaults = {
        "secret": "sk-live-123",
        "params": {"apiKey": "sk-live-123"},
        "timeout": 5.0,
        "max_retries": 3,
        "base_delay": 1.0,
    }
    defaults.update(kwargs)
    return UpstreamClient("Odds API", "https://api.example.com/v4/", session=session, **defaults)


class TestBackoff:
    """Tests for the backoff schedule."""

    def test_doubles_each_attempt(self):
        assert [backoff_delay(i, 1.0) for i in range(3)] == [1.0, 2.0, 4.0]

    def test_scales_with_base(self):
        assert backoff_delay(1, 0.5) == 1.0


class TestUpstreamClient:
    """Tests for UpstreamClient.request_json."""

    def test_success_first_attempt(self, mock_session, no_sleep):
        mock_session.request.return_value = make_response([{"id": "g1"}])

        data = _client(mock_session).get_json("/sports/basketball_nba/odds", {"regions": "us"})

        assert data == [{"id": "g1"}]
        assert mock_session.request.call_count == 1
        no_sleep.assert_not_called()

        args, kwargs = mock_session.request.call_args
        assert args == ("GET", "https://api.example.com/v4/sports/basketball_nba/odds")
        assert kwargs["params"] == {"apiKey": "sk-live-123", "regions": "us"}
        assert kwargs["timeout"] == 5.0

    def test_none_params_are_dropped(self, mock_session):
        mock_session.request.return_value = make_response([])

        _client(mock_session).get_json("/events", {"commenceTimeFrom": None, "regions": "us"})

        params = mock_session.request.call_args.kwargs["params"]
        assert "commenceTimeFrom" not in params

    def test_post_sends_json_body(self, mock_session):
        mock_session.request.return_value = make_response({"results": []})

        _client(mock_session, params=None).post_json("/search", {"query": "lakers"})

        args, kwargs = mock_session.request.call_args
        assert args[0] == "POST"
        assert kwargs["json"] == {"query": "lakers"}
        assert kwargs["params"] is None

    def test_retries_then_succeeds(self, mock_session, no_sleep):
        mock_session.request.side_effect = [
            make_response(None, status_code=500, reason="Internal Server Error"),
            make_response(None, status_code=502, reason="Bad Gateway"),
            make_response([{"id": "g1"}]),
        ]

        data = _client(mock_session).get_json("/sports")

        assert data == [{"id": "g1"}]
        assert mock_session.request.call_count == 3
        assert no_sleep.call_args_list == [call(1.0), call(2.0)]

    def test_persistent_failure_raises_after_max_attempts(self, mock_session, no_sleep):
        mock_session.request.return_value = make_response(
            None, status_code=500, reason="Internal Server Error"
        )

        with pytest.raises(UpstreamError) as exc_info:
            _client(mock_session).get_json("/sports")

        assert mock_session.request.call_count == 3
        assert no_sleep.call_args_list == [call(1.0), call(2.0)]
        assert "500" in str(exc_info.value)
        assert exc_info.value.status_code == 500

    def test_embedded_errors_field_counts_as_failure(self, mock_session, no_sleep):
        mock_session.request.side_effect = [
            make_response({"errors": {"token": "rate limited"}, "response": []}),
            make_response({"errors": [], "response": [{"id": 1}]}),
        ]

        data = _client(mock_session).get_json("/teams")

        assert data == {"errors": [], "response": [{"id": 1}]}
        assert mock_session.request.call_count == 2

    def test_non_json_body_is_failure(self, mock_session):
        mock_session.request.return_value = make_response(text="<html>oops</html>")

        with pytest.raises(UpstreamError, match="non-JSON"):
            _client(mock_session, max_retries=1).get_json("/sports")

    def test_timeout_message(self, mock_session):
        mock_session.request.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(UpstreamError) as exc_info:
            _client(mock_session, max_retries=2).get_json("/sports")

        assert str(exc_info.value) == "Odds API request timed out after 5s"
        assert mock_session.request.call_count == 2

    def test_connection_error_masks_key(self, mock_session):
        mock_session.request.side_effect = requests.exceptions.ConnectionError(
            "Max retries exceeded with url: /v4/sports?apiKey=sk-live-123"
        )

        with pytest.raises(UpstreamError) as exc_info:
            _client(mock_session, max_retries=1).get_json("/sports")

        assert "sk-live-123" not in str(exc_info.value)
        assert MASK in str(exc_info.value)

    def test_key_never_logged(self, mock_session, caplog):
        mock_session.request.return_value = make_response(None, status_code=401, reason="Unauthorized")

        with caplog.at_level("DEBUG", logger="oddsy.tools.http"):
            with pytest.raises(UpstreamError):
                _client(mock_session).get_json("/sports")

        assert "sk-live-123" not in caplog.text
        assert MASK in caplog.text

    def test_zero_retries_still_attempts_once(self, mock_session):
        mock_session.request.return_value = make_response([])

        _client(mock_session, max_retries=0).get_json("/sports")

        assert mock_session.request.call_count == 1

    def test_zero_retries_failure_raises_upstream_error(self, mock_session):
        mock_session.request.return_value = make_response(None, status_code=503, reason="Service Unavailable")

        with pytest.raises(UpstreamError, match="503"):
            _client(mock_session, max_retries=0).get_json("/sports")

        assert mock_session.request.call_count == 1
