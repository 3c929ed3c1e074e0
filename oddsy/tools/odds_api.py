"""
The Odds API tools.

Live and historical moneyline odds, scores and event listings from
https://the-odds-api.com. The API key travels as the ``apiKey`` query
parameter and is masked in every log line.
"""

import logging
from typing import Literal, Optional
from urllib.parse import quote

import requests
from pydantic import BaseModel, Field

from ..models import UpstreamConfig
from .http import UpstreamClient
from .normalize import cap_items, normalize_game, normalize_odds_sport
from .registry import ToolResult, ToolSpec

logger = logging.getLogger(__name__)

ODDS_API_BASE_URL = "https://api.the-odds-api.com/v4"

FAMILY = "odds"


class ListSportsParams(BaseModel):
    pass


class ListOddsParams(BaseModel):
    sport: str = Field(description="Sport key or name, e.g. 'basketball_nba', 'nba', 'nfl'")
    regions: str = Field("us", description="Bookmaker regions, comma separated")
    markets: str = Field("h2h", description="Betting markets, comma separated (h2h = moneyline)")
    odds_format: Literal["american", "decimal"] = Field("american", description="Price format")


class ScoresParams(BaseModel):
    sport: str = Field(description="Sport key or name")
    days_from: int = Field(1, ge=1, le=3, description="Include games completed this many days ago")


class HistoricalOddsParams(BaseModel):
    sport: str = Field(description="Sport key or name")
    date: str = Field(
        pattern=r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$",
        description="Snapshot time in ISO 8601, e.g. 2024-01-15T12:00:00Z",
    )
    regions: str = Field("us", description="Bookmaker regions, comma separated")
    markets: str = Field("h2h", description="Betting markets, comma separated")


class EventOddsParams(BaseModel):
    sport: str = Field(description="Sport key or name")
    event_id: str = Field(min_length=1, description="Event id from list_odds or get_events")
    regions: str = Field("us", description="Bookmaker regions, comma separated")
    markets: str = Field("h2h,spreads,totals", description="Betting markets, comma separated")


class EventsParams(BaseModel):
    sport: str = Field(description="Sport key or name")
    commence_time_from: Optional[str] = Field(
        None, description="Only events starting at or after this ISO 8601 time"
    )
    commence_time_to: Optional[str] = Field(
        None, description="Only events starting at or before this ISO 8601 time"
    )


class OddsApiTools:
    """Executors for The Odds API, bound to one API key."""

    def __init__(
        self,
        api_key: str,
        policy: UpstreamConfig,
        session: Optional[requests.Session] = None,
    ):
        self.client = UpstreamClient(
            "Odds API",
            ODDS_API_BASE_URL,
            secret=api_key,
            params={"apiKey": api_key},
            timeout=policy.timeout,
            max_retries=policy.max_retries,
            base_delay=policy.retry_base_delay,
            session=session,
        )
        self.cap = policy.max_items

    def _fetch_list(self, path: str, sport_key: str, params: Optional[dict] = None):
        data = self.client.get_json(path, params)
        if isinstance(data, list) and not data:
            logger.info("[Odds API] No data found for %s", sport_key)
            return None
        return data

    def list_sports(self, args: ListSportsParams) -> ToolResult:
        data = self.client.get_json("/sports")
        sports = [
            {
                "key": s.get("key"),
                "group": s.get("group"),
                "title": s.get("title"),
                "description": s.get("description"),
            }
            for s in data or []
            if s.get("active")
        ]
        if not sports:
            return ToolResult.failure("No data found for active sports")
        return ToolResult.success({"sports": sports, "total": len(sports)})

    def list_odds(self, args: ListOddsParams) -> ToolResult:
        sport_key = normalize_odds_sport(args.sport)
        data = self._fetch_list(
            f"/sports/{sport_key}/odds",
            sport_key,
            {
                "regions": args.regions,
                "markets": args.markets,
                "oddsFormat": args.odds_format,
                "dateFormat": "iso",
            },
        )
        if data is None:
            return ToolResult.failure(f"No data found for {sport_key}")

        games = [normalize_game(game) for game in data]
        if len(games) > self.cap:
            logger.info(
                "[Odds API] Response has %d games. Truncating to the first %d.",
                len(games),
                self.cap,
            )
        return ToolResult.success(cap_items(games, "games", self.cap))

    def get_scores(self, args: ScoresParams) -> ToolResult:
        sport_key = normalize_odds_sport(args.sport)
        data = self._fetch_list(
            f"/sports/{sport_key}/scores",
            sport_key,
            {"daysFrom": str(args.days_from), "dateFormat": "iso"},
        )
        if data is None:
            return ToolResult.failure(f"No data found for {sport_key}")

        scores = [
            {
                "id": g.get("id"),
                "commence_time": g.get("commence_time"),
                "completed": g.get("completed", False),
                "home_team": g.get("home_team"),
                "away_team": g.get("away_team"),
                "scores": g.get("scores"),
                "last_update": g.get("last_update"),
            }
            for g in data
        ]
        return ToolResult.success(cap_items(scores, "games", self.cap))

    def get_historical_odds(self, args: HistoricalOddsParams) -> ToolResult:
        sport_key = normalize_odds_sport(args.sport)
        payload = self.client.get_json(
            f"/historical/sports/{sport_key}/odds",
            {
                "date": args.date,
                "regions": args.regions,
                "markets": args.markets,
                "oddsFormat": "american",
            },
        )
        snapshot = payload.get("data", []) if isinstance(payload, dict) else payload
        if not snapshot:
            return ToolResult.failure(f"No data found for {sport_key} at {args.date}")

        result = cap_items([normalize_game(g) for g in snapshot], "games", self.cap)
        if isinstance(payload, dict):
            result["timestamp"] = payload.get("timestamp")
        return ToolResult.success(result)

    def get_event_odds(self, args: EventOddsParams) -> ToolResult:
        sport_key = normalize_odds_sport(args.sport)
        data = self.client.get_json(
            f"/sports/{sport_key}/events/{quote(args.event_id, safe='')}/odds",
            {
                "regions": args.regions,
                "markets": args.markets,
                "oddsFormat": "american",
            },
        )
        # Some plans return a one-element list instead of the event object
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            return ToolResult.failure(f"No data found for event {args.event_id}")
        return ToolResult.success(normalize_game(data))

    def get_events(self, args: EventsParams) -> ToolResult:
        sport_key = normalize_odds_sport(args.sport)
        params = {}
        if args.commence_time_from:
            params["commenceTimeFrom"] = args.commence_time_from
        if args.commence_time_to:
            params["commenceTimeTo"] = args.commence_time_to

        data = self._fetch_list(f"/sports/{sport_key}/events", sport_key, params)
        if data is None:
            return ToolResult.failure(f"No upcoming events found for {sport_key}")

        events = [
            {
                "id": e.get("id"),
                "commence_time": e.get("commence_time"),
                "home_team": e.get("home_team"),
                "away_team": e.get("away_team"),
            }
            for e in data
        ]
        return ToolResult.success(cap_items(events, "events", self.cap))


def create_odds_tools(
    api_key: str,
    policy: Optional[UpstreamConfig] = None,
    session: Optional[requests.Session] = None,
) -> list[ToolSpec]:
    """Build the Odds API tool family for one API key."""
    api = OddsApiTools(api_key, policy or UpstreamConfig(), session=session)
    return [
        ToolSpec(
            name="list_sports",
            description="List all in-season sports and their keys from The Odds API.",
            parameters=ListSportsParams,
            execute=api.list_sports,
            family=FAMILY,
        ),
        ToolSpec(
            name="list_odds",
            description=(
                "List upcoming games and their moneyline odds for a sport. "
                "Results are limited to a few games; check 'truncated' and use "
                "get_events plus get_event_odds for a specific game."
            ),
            parameters=ListOddsParams,
            execute=api.list_odds,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_scores",
            description="Get live and recent scores for a sport.",
            parameters=ScoresParams,
            execute=api.get_scores,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_historical_odds",
            description="Get a historical odds snapshot for a sport at a given time.",
            parameters=HistoricalOddsParams,
            execute=api.get_historical_odds,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_event_odds",
            description="Get detailed odds for one event, including all requested markets.",
            parameters=EventOddsParams,
            execute=api.get_event_odds,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_events",
            description="List upcoming events (ids, teams, start times) for a sport.",
            parameters=EventsParams,
            execute=api.get_events,
            family=FAMILY,
        ),
    ]
