"""
API-Sports tools: league metadata, team and player statistics, injuries,
standings and team lookup for the NBA, NFL and MLB.

Each sport lives on its own host (``v2.{host}.api-sports.io``); the key is
sent in the ``x-apisports-key`` header.
"""

import logging
from typing import Any, Optional

import requests
from pydantic import BaseModel, Field

from ..errors import UpstreamError
from ..models import UpstreamConfig
from .http import UpstreamClient
from .normalize import (
    STATS_LEAGUE_IDS,
    STATS_SPORT_HOSTS,
    cap_items,
    current_season,
    normalize_stats_sport,
    per_game,
)
from .registry import ToolResult, ToolSpec

logger = logging.getLogger(__name__)

FAMILY = "sports"

NBA_INJURY_REDIRECT = (
    "This tool does not support NBA injuries. Use the `search_news` tool to find "
    "NBA injury news. For example, search for 'Lakers injury report'."
)

SPORT_DESCRIPTION = "Sport key, e.g. 'nba', 'nfl', 'mlb' (Odds API keys also accepted)"


class SportParams(BaseModel):
    sport: str = Field(description=SPORT_DESCRIPTION)


class TeamStatsParams(BaseModel):
    sport: str = Field(description=SPORT_DESCRIPTION)
    team_id: int = Field(description="Numeric team id from get_teams")


class PlayerStatsParams(BaseModel):
    sport: str = Field(description=SPORT_DESCRIPTION)
    player: Optional[str] = Field(
        None, description="Full player name. If omitted, returns league leaders."
    )


class InjuryReportParams(BaseModel):
    sport: str = Field(description=SPORT_DESCRIPTION)
    team_id: Optional[int] = Field(
        None, description="Numeric team id. If omitted, returns league-wide injuries."
    )


class TeamsParams(BaseModel):
    sport: str = Field(description=SPORT_DESCRIPTION)
    search: Optional[str] = Field(None, description="Team name to search for, e.g. 'Lakers'")


def api_base_url(sport: str) -> str:
    return f"https://v2.{STATS_SPORT_HOSTS[sport]}.api-sports.io"


def _player_name(entry: dict) -> str:
    player = entry.get("player") or {}
    if isinstance(player, dict) and (player.get("firstname") or player.get("lastname")):
        return f"{player.get('firstname', '')} {player.get('lastname', '')}".strip()
    return entry.get("name") or player.get("name") or "Unknown"


def _player_line(entry: dict) -> dict:
    stats = entry.get("statistics") if isinstance(entry.get("statistics"), dict) else entry
    return {
        "name": _player_name(entry),
        "points_per_game": stats.get("points_per_game", stats.get("points", "N/A")),
        "minutes_per_game": stats.get("minutes_per_game", stats.get("min", "N/A")),
        "status": stats.get("status", "Unknown"),
    }


class SportsApiTools:
    """Executors for API-Sports, bound to one API key."""

    def __init__(
        self,
        api_key: str,
        policy: UpstreamConfig,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.policy = policy
        self.cap = policy.max_items
        self._session = session or requests.Session()
        self._clients: dict[str, UpstreamClient] = {}

    def client(self, sport: str) -> UpstreamClient:
        if sport not in self._clients:
            self._clients[sport] = UpstreamClient(
                f"API-Sports {sport.upper()}",
                api_base_url(sport),
                secret=self.api_key,
                headers={"x-apisports-key": self.api_key},
                timeout=self.policy.timeout,
                max_retries=self.policy.max_retries,
                base_delay=self.policy.retry_base_delay,
                session=self._session,
            )
        return self._clients[sport]

    def _response(self, sport: str, path: str, params: dict[str, Any]) -> list:
        data = self.client(sport).get_json(path, params)
        if not isinstance(data, dict) or "response" not in data:
            raise UpstreamError(f"API-Sports {sport.upper()} returned an invalid response format")
        response = data["response"]
        if isinstance(response, dict):
            return [response]
        return response or []

    def get_league_metadata(self, args: SportParams) -> ToolResult:
        sport = normalize_stats_sport(args.sport)
        season = current_season()
        league_id = STATS_LEAGUE_IDS[sport]

        if sport == "nba":
            rows = self._response(sport, "/standings", {"league": league_id, "season": season})
            if not rows:
                return ToolResult.failure(f"No data found for NBA (League ID: {league_id})")
            return ToolResult.success({
                "leagues": [{"league": "NBA", "league_id": league_id, "season": season, "current": True}],
                "total": 1,
                "truncated": False,
            })

        leagues = self._response(sport, "/leagues", {})
        if not leagues:
            return ToolResult.failure(f"No leagues found for {sport.upper()}")

        summaries = []
        for entry in leagues:
            league = entry.get("league") or entry
            seasons = entry.get("seasons") or []
            current = next((s for s in seasons if s.get("current")), seasons[0] if seasons else {})
            summaries.append({
                "league": league.get("name"),
                "league_id": league.get("id"),
                "season": current.get("year", season),
                "season_id": current.get("id", "N/A"),
            })
        return ToolResult.success(cap_items(summaries, "leagues", self.cap))

    def get_team_stats(self, args: TeamStatsParams) -> ToolResult:
        sport = normalize_stats_sport(args.sport)
        rows = self._response(
            sport,
            "/teams/statistics",
            {"id": args.team_id, "season": current_season()},
        )
        if not rows or not rows[0]:
            return ToolResult.failure(f"No statistics found for team ID: {args.team_id}")

        stats = rows[0]
        games = stats.get("games")
        return ToolResult.success({
            "team_id": args.team_id,
            "games_played": games or "N/A",
            "points_per_game": per_game(stats.get("points"), games),
            "field_goals_made_per_game": per_game(stats.get("fgm"), games),
            "field_goal_percentage": stats.get("fgp") or "N/A",
            "free_throw_percentage": stats.get("ftp") or "N/A",
            "three_point_percentage": stats.get("tpp") or "N/A",
            "rebounds_per_game": per_game(stats.get("totReb"), games),
            "assists_per_game": per_game(stats.get("assists"), games),
            "steals_per_game": per_game(stats.get("steals"), games),
            "turnovers_per_game": per_game(stats.get("turnovers"), games),
        })

    def get_player_stats(self, args: PlayerStatsParams) -> ToolResult:
        sport = normalize_stats_sport(args.sport)
        params: dict[str, Any] = {"league": STATS_LEAGUE_IDS[sport], "season": current_season()}
        if args.player:
            params["player"] = args.player

        rows = self._response(sport, "/players/statistics", params)
        if not rows:
            if args.player:
                return ToolResult.failure(f"No statistics found for player: {args.player}")
            return ToolResult.failure("No player statistics available")

        if args.player:
            return ToolResult.success({"player": args.player, **_player_line(rows[0])})
        return ToolResult.success(cap_items([_player_line(r) for r in rows], "leaders", self.cap))

    def get_injury_report(self, args: InjuryReportParams) -> ToolResult:
        sport = normalize_stats_sport(args.sport)
        if sport == "nba":
            return ToolResult.success({"message": NBA_INJURY_REDIRECT})

        params: dict[str, Any] = {"league": STATS_LEAGUE_IDS[sport]}
        if args.team_id is not None:
            params["team"] = args.team_id

        rows = self._response(sport, "/injuries", params)
        injuries = [
            {
                "player": _player_name(r),
                "position": r.get("position") or (r.get("player") or {}).get("position") or "N/A",
                "status": r.get("status") or "N/A",
                "notes": r.get("description") or r.get("injury_notes") or "No details",
            }
            for r in rows
        ]
        result = cap_items(injuries, "injuries", self.cap)
        if not injuries:
            result["message"] = (
                "No injuries reported for this team."
                if args.team_id is not None
                else "No injuries reported in the league."
            )
        return ToolResult.success(result)

    def get_standings(self, args: SportParams) -> ToolResult:
        sport = normalize_stats_sport(args.sport)
        rows = self._response(
            sport,
            "/standings",
            {"league": STATS_LEAGUE_IDS[sport], "season": current_season()},
        )
        if not rows:
            return ToolResult.failure("No standings data available")

        standings = []
        for row in rows:
            wins = row.get("win") or {}
            losses = row.get("loss") or {}
            won, lost = wins.get("total", 0), losses.get("total", 0)
            standings.append({
                "rank": (row.get("conference") or {}).get("rank", row.get("position")),
                "team": (row.get("team") or {}).get("name"),
                "played": won + lost,
                "won": won,
                "lost": lost,
                "form": f"W{wins.get('lastTen', '?')}-L{losses.get('lastTen', '?')} (Last 10)",
            })
        return ToolResult.success({"standings": standings, "total": len(standings)})

    def get_teams(self, args: TeamsParams) -> ToolResult:
        sport = normalize_stats_sport(args.sport)
        if args.search:
            params: dict[str, Any] = {"search": args.search}
        else:
            params = {"league": STATS_LEAGUE_IDS[sport]}

        rows = self._response(sport, "/teams", params)
        if not rows:
            for_team = f' for team "{args.search}"' if args.search else ""
            return ToolResult.failure(f"No teams found for {sport.upper()}{for_team}")

        teams = [
            {
                "id": t.get("id"),
                "name": t.get("name"),
                "code": t.get("code") or "N/A",
                "city": t.get("city") or "N/A",
            }
            for t in rows
        ]
        return ToolResult.success({"teams": teams, "total": len(teams)})


def create_sports_tools(
    api_key: str,
    policy: Optional[UpstreamConfig] = None,
    session: Optional[requests.Session] = None,
) -> list[ToolSpec]:
    """Build the API-Sports tool family for one API key."""
    api = SportsApiTools(api_key, policy or UpstreamConfig(), session=session)
    return [
        ToolSpec(
            name="get_league_metadata",
            description="Get league and current season metadata for a sport.",
            parameters=SportParams,
            execute=api.get_league_metadata,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_team_stats",
            description=(
                "Get per-game team statistics (PPG, rebounds, assists, shooting). "
                "You MUST have a team_id from get_teams to use this."
            ),
            parameters=TeamStatsParams,
            execute=api.get_team_stats,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_player_stats",
            description="Get basic player stats for a named player, or the league leaders.",
            parameters=PlayerStatsParams,
            execute=api.get_player_stats,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_injury_report",
            description=(
                "Get the injury report for a team or league. Does not cover the NBA; "
                "use search_news for NBA injuries."
            ),
            parameters=InjuryReportParams,
            execute=api.get_injury_report,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_standings",
            description="Get current league standings for a sport.",
            parameters=SportParams,
            execute=api.get_standings,
            family=FAMILY,
        ),
        ToolSpec(
            name="get_teams",
            description="List teams and their numeric ids for a sport, optionally searching by name.",
            parameters=TeamsParams,
            execute=api.get_teams,
            family=FAMILY,
        ),
    ]
