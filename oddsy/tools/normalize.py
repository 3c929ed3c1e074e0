"""
Shared normalization helpers for the upstream tool executors.

Sport identifiers typed by the model are mapped onto each provider's
keys through fixed synonym tables; large arrays are capped with the
truncation made visible in the result.
"""

import re
from datetime import date
from typing import Any, Optional

from ..errors import ToolArgumentError

# The Odds API sport keys
ODDS_SPORT_KEYS = {
    "NBA": "basketball_nba",
    "NFL": "americanfootball_nfl",
    "MLB": "baseball_mlb",
    "NHL": "icehockey_nhl",
    "EPL": "soccer_epl",
    "UFC": "mma_mixed_martial_arts",
}

ODDS_SPORT_SYNONYMS = {
    "nba": ODDS_SPORT_KEYS["NBA"],
    "basketball": ODDS_SPORT_KEYS["NBA"],
    "nfl": ODDS_SPORT_KEYS["NFL"],
    "football": ODDS_SPORT_KEYS["NFL"],
    "mlb": ODDS_SPORT_KEYS["MLB"],
    "baseball": ODDS_SPORT_KEYS["MLB"],
    "nhl": ODDS_SPORT_KEYS["NHL"],
    "hockey": ODDS_SPORT_KEYS["NHL"],
    "epl": ODDS_SPORT_KEYS["EPL"],
    "premier league": ODDS_SPORT_KEYS["EPL"],
    "ufc": ODDS_SPORT_KEYS["UFC"],
    "mma": ODDS_SPORT_KEYS["UFC"],
}

# API-Sports: family -> API host segment (v2.{host}.api-sports.io)
STATS_SPORT_HOSTS = {
    "nba": "nba",
    "nfl": "american-football",
    "mlb": "baseball",
}

STATS_LEAGUE_IDS = {
    "nba": "standard",
    "nfl": 1,
    "mlb": 1,
}

STATS_SPORT_SYNONYMS = {
    "basketball_nba": "nba",
    "americanfootball_nfl": "nfl",
    "baseball_mlb": "mlb",
    "basketball": "nba",
    "football": "nfl",
    "baseball": "mlb",
    "nba": "nba",
    "nfl": "nfl",
    "mlb": "mlb",
}

SUPPORTED_BOOKMAKERS = (
    "pinnacle",
    "draftkings",
    "fanduel",
    "betmgm",
    "caesars",
    "williamhill_us",
    "bovada",
)

DEFAULT_ITEM_CAP = 5


def normalize_odds_sport(sport: str) -> str:
    """
    Map a free-form sport name onto an Odds API sport key.

    Raises:
        ToolArgumentError: If the value is not a supported sport
    """
    key = (sport or "").strip().lower()
    key = ODDS_SPORT_SYNONYMS.get(key, key)
    if key not in ODDS_SPORT_KEYS.values():
        raise ToolArgumentError(
            f"Invalid sport key: {sport}. Valid keys are: {', '.join(ODDS_SPORT_KEYS.values())}"
        )
    return key


def normalize_stats_sport(sport: str) -> str:
    """
    Map a free-form sport name (or an Odds API key) onto an API-Sports family.

    Raises:
        ToolArgumentError: If the value is not a supported sport
    """
    key = (sport or "").strip().lower()
    key = STATS_SPORT_SYNONYMS.get(key, key)
    if key not in STATS_SPORT_HOSTS:
        raise ToolArgumentError(
            f"Unsupported sport: {sport}. Supported sports are: {', '.join(STATS_SPORT_HOSTS)}"
        )
    return key


def cap_items(items: list, key: str, cap: int = DEFAULT_ITEM_CAP) -> dict[str, Any]:
    """
    Truncate a list to ``cap`` entries, recording that it happened.

    Returns:
        ``{key: items[:cap], "total": len(items), "truncated": bool}``
    """
    total = len(items)
    return {
        key: items[:cap],
        "total": total,
        "truncated": total > cap,
    }


def filter_bookmakers(
    bookmakers: Optional[list[dict]],
    allowed: tuple[str, ...] = SUPPORTED_BOOKMAKERS,
) -> list[dict]:
    """Keep only supported sportsbooks, reshaped to key/title/last_update/markets."""
    kept = []
    for bookie in bookmakers or []:
        if bookie.get("key") not in allowed:
            continue
        kept.append({
            "key": bookie.get("key"),
            "title": bookie.get("title"),
            "last_update": bookie.get("last_update"),
            "markets": [
                {"key": market.get("key"), "outcomes": market.get("outcomes", [])}
                for market in bookie.get("markets", [])
            ],
        })
    return kept


def normalize_game(game: dict) -> dict:
    """Reshape one Odds API game, dropping unsupported bookmakers."""
    return {
        "id": game.get("id"),
        "sport_key": game.get("sport_key"),
        "sport_title": game.get("sport_title"),
        "commence_time": game.get("commence_time"),
        "home_team": game.get("home_team"),
        "away_team": game.get("away_team"),
        "bookmakers": filter_bookmakers(game.get("bookmakers")),
    }


def clean_text(text: str, limit: int = 300) -> str:
    """Collapse whitespace and clip to ``limit`` characters."""
    cleaned = re.sub(r"\s+", " ", text or "").strip()
    if len(cleaned) > limit:
        return cleaned[:limit] + "..."
    return cleaned


def current_season(today: Optional[date] = None) -> int:
    """Season year: seasons starting in October are named for that year."""
    today = today or date.today()
    return today.year if today.month >= 10 else today.year - 1


def per_game(total: Any, games: Any) -> Any:
    """Per-game average rounded to one decimal, or 'N/A' when unavailable."""
    try:
        if not total or not games:
            return "N/A"
        return round(float(total) / float(games), 1)
    except (TypeError, ValueError):
        return "N/A"
