"""Tests for the Tavily news search tool."""

import json
from datetime import date

import pytest

from conftest import make_response
from oddsy.tools.search import DEFAULT_DOMAINS, create_search_tools, validate_search_date


def _search(mock_session, policy):
    return create_search_tools("  tvly-secret  ", policy, session=mock_session)[0]


class TestValidateSearchDate:
    """Tests for date filter validation."""

    def test_valid(self):
        assert validate_search_date("2024-01-15", today=date(2024, 6, 1)) == "2024-01-15"

    def test_none(self):
        assert validate_search_date(None) is None

    @pytest.mark.parametrize("value", ["01/15/2024", "2024-1-5", "2024-13-01"])
    def test_bad_format(self, value):
        with pytest.raises(ValueError, match="Use YYYY-MM-DD"):
            validate_search_date(value)

    def test_year_out_of_range(self):
        with pytest.raises(ValueError, match="Year must be between 2000 and 2024"):
            validate_search_date("2031-01-01", today=date(2024, 6, 1))


class TestSearchNews:
    """Tests for search_news."""

    def test_request_body(self, mock_session, policy):
        mock_session.request.return_value = make_response({
            "results": [{"title": "Lakers injury update", "url": "https://espn.com/x", "content": "Out"}]
        })

        _search(mock_session, policy).run(json.dumps({"query": "  Lakers injuries  "}))

        args, kwargs = mock_session.request.call_args
        assert args == ("POST", "https://api.tavily.com/search")
        assert kwargs["headers"]["Authorization"] == "Bearer tvly-secret"
        body = kwargs["json"]
        assert body["query"] == "Lakers injuries"
        assert body["max_results"] == 5
        assert body["include_domains"] == DEFAULT_DOMAINS
        assert "start_date" not in body

    def test_date_range_forwarded(self, mock_session, policy):
        mock_session.request.return_value = make_response({
            "results": [{"title": "t", "content": "c"}]
        })

        _search(mock_session, policy).run(
            json.dumps({"query": "celtics", "start_date": "2024-01-01", "end_date": "2024-01-10"})
        )

        body = mock_session.request.call_args.kwargs["json"]
        assert body["start_date"] == "2024-01-01"
        assert body["end_date"] == "2024-01-10"

    def test_bad_date_makes_no_request(self, mock_session, policy):
        result = _search(mock_session, policy).run(json.dumps({"query": "x", "start_date": "yesterday"}))

        assert result.ok is False
        assert "start_date" in result.error
        mock_session.request.assert_not_called()

    def test_blank_query_rejected(self, mock_session, policy):
        result = _search(mock_session, policy).run('{"query": "   "}')

        assert result.ok is False
        mock_session.request.assert_not_called()

    def test_results_cleaned_and_filtered(self, mock_session, policy):
        mock_session.request.return_value = make_response({
            "results": [
                {
                    "title": "Celtics roll",
                    "url": "https://espn.com/a",
                    "content": "Boston   won\n\nagain " + "x" * 400,
                    "published_date": "2024-01-14",
                },
                {"title": "", "url": "https://espn.com/b", "content": "no title"},
                {"title": "No content", "url": "https://espn.com/c"},
            ]
        })

        result = _search(mock_session, policy).run('{"query": "celtics"}')

        assert result.ok is True
        assert result.data["query"] == "celtics"
        assert result.data["total"] == 1
        entry = result.data["results"][0]
        assert entry["content"].startswith("Boston won again ")
        assert entry["content"].endswith("...")
        assert entry["published_date"] == "2024-01-14"

    def test_no_results(self, mock_session, policy):
        mock_session.request.return_value = make_response({"results": []})

        result = _search(mock_session, policy).run('{"query": "obscure"}')

        assert result.ok is False
        assert result.error.startswith("No relevant results found.")

    def test_key_not_in_error(self, mock_session, policy):
        mock_session.request.return_value = make_response(None, status_code=403, reason="Forbidden")

        result = _search(mock_session, policy).run('{"query": "lakers"}')

        assert result.ok is False
        assert "403" in result.error
        assert "tvly-secret" not in result.to_json()
