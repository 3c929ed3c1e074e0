"""
Tavily News Search Tool

Real-time sports and betting news (injuries, lineups, narratives) via the
Tavily search API. Searches default to a fixed list of sports and betting
domains.
"""

import logging
import re
from datetime import date
from typing import Optional

import requests
from pydantic import BaseModel, Field, field_validator

from ..models import UpstreamConfig
from .http import UpstreamClient
from .normalize import cap_items, clean_text
from .registry import ToolResult, ToolSpec

logger = logging.getLogger(__name__)

TAVILY_BASE_URL = "https://api.tavily.com"

FAMILY = "tavily"

DEFAULT_DOMAINS = [
    "espn.com",
    "sports.yahoo.com",
    "cbssports.com",
    "nba.com",
    "nfl.com",
    "mlb.com",
    "vegasinsider.com",
    "actionnetwork.com",
    "covers.com",
]

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_search_date(value: Optional[str], today: Optional[date] = None) -> Optional[str]:
    """
    Check a YYYY-MM-DD date with a year between 2000 and the current year.

    Raises:
        ValueError: If the date is malformed or out of range
    """
    if value is None:
        return None
    if not DATE_PATTERN.match(value):
        raise ValueError("Use YYYY-MM-DD")
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise ValueError("Use YYYY-MM-DD")
    today = today or date.today()
    if not 2000 <= parsed.year <= today.year:
        raise ValueError(f"Year must be between 2000 and {today.year}")
    return value


class SearchNewsParams(BaseModel):
    query: str = Field(min_length=1, description="Search query, e.g. 'Lakers injury report'")
    start_date: Optional[str] = Field(None, description="Earliest publish date, YYYY-MM-DD")
    end_date: Optional[str] = Field(None, description="Latest publish date, YYYY-MM-DD")
    include_domains: Optional[list[str]] = Field(
        None, description="Restrict to these domains (defaults to major sports and betting sites)"
    )

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Search query cannot be empty")
        return value.strip()

    @field_validator("start_date", "end_date")
    @classmethod
    def check_date(cls, value: Optional[str]) -> Optional[str]:
        return validate_search_date(value)


class TavilySearchTool:
    """Executor for Tavily search, bound to one API key."""

    def __init__(
        self,
        api_key: str,
        policy: UpstreamConfig,
        session: Optional[requests.Session] = None,
    ):
        api_key = api_key.strip()
        self.client = UpstreamClient(
            "Tavily",
            TAVILY_BASE_URL,
            secret=api_key,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=policy.timeout,
            max_retries=policy.max_retries,
            base_delay=policy.retry_base_delay,
            session=session,
        )
        self.max_results = policy.max_items

    def search_news(self, args: SearchNewsParams) -> ToolResult:
        body = {
            "query": args.query,
            "max_results": self.max_results,
            "search_depth": "basic",
            "include_domains": args.include_domains or DEFAULT_DOMAINS,
            "include_answer": False,
        }
        if args.start_date:
            body["start_date"] = args.start_date
        if args.end_date:
            body["end_date"] = args.end_date

        logger.debug("Search request: %s", {k: v for k, v in body.items() if k != "include_domains"})
        data = self.client.post_json("/search", body)

        results = []
        for item in (data or {}).get("results", []):
            if not item.get("title") or not item.get("content"):
                continue
            entry = {
                "title": item["title"],
                "url": item.get("url", ""),
                "content": clean_text(item["content"]),
            }
            if item.get("published_date"):
                entry["published_date"] = item["published_date"]
            results.append(entry)

        if not results:
            return ToolResult.failure(
                "No relevant results found. Try rephrasing your query or removing date restrictions."
            )

        logger.info("Search for '%s' returned %d result(s)", args.query, len(results))
        return ToolResult.success({"query": args.query, **cap_items(results, "results", self.max_results)})


def create_search_tools(
    api_key: str,
    policy: Optional[UpstreamConfig] = None,
    session: Optional[requests.Session] = None,
) -> list[ToolSpec]:
    """Build the search tool family for one Tavily key."""
    tool = TavilySearchTool(api_key, policy or UpstreamConfig(), session=session)
    return [
        ToolSpec(
            name="search_news",
            description=(
                "Search recent sports and betting news: injuries, lineups, trends and "
                "narratives. Optionally restrict by publish date range (YYYY-MM-DD)."
            ),
            parameters=SearchNewsParams,
            execute=tool.search_news,
            family=FAMILY,
        ),
    ]
