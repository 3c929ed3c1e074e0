"""
Terminal tool: the structured betting recommendation.

Calling ``make_final_recommendation`` ends the run. Its arguments are the
decision itself: the full game odds object the model researched, the pick,
and the narrative. The orchestration loop validates them against
RecommendationParams and hands the parsed object to the caller unmodified.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .registry import ToolResult, ToolSpec

TERMINAL_TOOL_NAME = "make_final_recommendation"


class Outcome(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    price: float = Field(allow_inf_nan=False)


class Market(BaseModel):
    model_config = ConfigDict(extra="allow")

    key: str
    last_update: Optional[str] = None
    outcomes: list[Outcome] = Field(default_factory=list)


class Bookmaker(BaseModel):
    model_config = ConfigDict(extra="allow")

    key: str
    title: Optional[str] = None
    last_update: Optional[str] = None
    markets: list[Market] = Field(default_factory=list)


class Game(BaseModel):
    """The complete game object from list_odds, including all bookmakers."""

    model_config = ConfigDict(extra="allow")

    id: str
    sport_key: Optional[str] = None
    sport_title: Optional[str] = None
    commence_time: Optional[str] = None
    home_team: str
    away_team: str
    bookmakers: list[Bookmaker] = Field(default_factory=list)


class Pick(BaseModel):
    model_config = ConfigDict(extra="allow")

    team: str = Field(description="The name of the team picked.")
    price: float = Field(allow_inf_nan=False, description="The American odds for the picked team.")
    bookmaker: Optional[str] = Field(
        None, description='Key of the bookmaker offering the best odds, e.g. "pinnacle".'
    )
    market: str = Field("h2h", description="Market of the pick; moneyline is h2h.")


class RecommendationParams(BaseModel):
    game: Game = Field(description="The complete game object from list_odds, including all bookmakers.")
    pick: Pick = Field(description="The specific pick details.")
    narrative: str = Field(
        min_length=1,
        description=(
            "The detailed rationale for the pick, woven from research and analysis. "
            "Do not include a title or header."
        ),
    )


def _present(args: RecommendationParams) -> ToolResult:
    """Validated recommendation; the loop records it as the final step's observation."""
    return ToolResult.success(args.model_dump())


def create_recommendation_tool() -> ToolSpec:
    return ToolSpec(
        name=TERMINAL_TOOL_NAME,
        description=(
            "This is the final step. Use this tool to present the final betting pick "
            "to the user. You MUST provide the full game odds object, the specific "
            "pick details, and the narrative rationale."
        ),
        parameters=RecommendationParams,
        execute=_present,
        terminal=True,
    )
