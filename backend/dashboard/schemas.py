from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UpstreamModel(BaseModel):
    """Upstream payloads are camelCase; unknown keys are dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ValidationChecks(UpstreamModel):
    score_within_range: bool = False
    time_within_range: bool = False
    rate_within_range: bool = False
    score_achievable: bool = False


class Achievability(UpstreamModel):
    max_achievable_score: float = 0.0
    actual_score: float = 0.0
    required_rate: float = 0.0
    max_reasonable_rate: float = 0.0


class ValidationDetails(UpstreamModel):
    """Shown as-is next to a score, never recomputed here."""

    checks: ValidationChecks = Field(default_factory=ValidationChecks)
    achievability: Achievability = Field(default_factory=Achievability)
    explanation: str = ""


class ScoreRecord(UpstreamModel):
    score: float
    achieved_by: str
    time_taken: float = 0.0
    score_per_minute: float = 0.0
    achieved_at: datetime
    is_validated: bool = False
    cultix_reward: float = 0.0
    validation_details: ValidationDetails | None = None


class TopValidScore(UpstreamModel):
    score: float
    achieved_by: str
    is_validated: bool = False
    cultix_reward: float = 0.0


class MeanStd(UpstreamModel):
    mean: float = 0.0
    standard_deviation: float = 0.0


class GameStatistics(UpstreamModel):
    score: MeanStd = Field(default_factory=MeanStd)
    time: MeanStd = Field(default_factory=MeanStd)
    score_per_minute: MeanStd = Field(default_factory=MeanStd)


class GameBucket(UpstreamModel):
    game_id: int
    game_title: str
    top_valid_score: TopValidScore | None = None
    statistics: GameStatistics | None = None
    all_scores: list[ScoreRecord] = Field(default_factory=list)


class TopScoresResponse(UpstreamModel):
    message: str = ""
    data: list[GameBucket] = Field(default_factory=list)


class DailyBreakdown(UpstreamModel):
    date: str
    # upstream sends minutes as a decimal string
    total_minutes: str = "0"
    total_activities: int = 0


class MonthlyActivity(UpstreamModel):
    total_time: str = "0"
    average_time_per_activity: str = "0"
    unique_players: int = 0
    number_of_activities: int = 0
    number_of_activities_per_player: float = 0.0
    average_time_spent_per_player: str = "0"
    daily_breakdown: list[DailyBreakdown] = Field(default_factory=list)


class WalletCount(UpstreamModel):
    count: int = 0


class TopGame(UpstreamModel):
    game_id: int
    title: str
    completion_rate: float = 0.0
    predicted_score: float = 0.0


# --- client -> server websocket actions ---


class LeaderboardAction(BaseModel):
    action: Literal["select_game", "select_rank", "cycle", "refresh"]
    index: int | None = None
    direction: Literal[-1, 1] | None = None


class ActivityFilter(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
