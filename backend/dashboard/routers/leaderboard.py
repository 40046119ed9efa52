from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from ..navigation import DashboardContext, get_context
from ..ranking import RankingEngine
from ..services.leaderboard import leaderboard_payload, top_scorer_payload
from ..upstream import UpstreamError

router = APIRouter(tags=["leaderboard"])


async def _engine(ctx: DashboardContext) -> RankingEngine:
    try:
        buckets = await ctx.upstream.top_scores()
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail="Error fetching top scores") from e
    return RankingEngine(buckets=buckets, limit=ctx.settings.leaderboard_size)


@router.get("/top-scores")
async def top_scores(
    game: int = Query(0, ge=0, description="Index of the selected game"),
    rank: int = Query(0, ge=0, description="Selected row; clamped to the leaderboard"),
    ctx: DashboardContext = Depends(get_context),
) -> dict[str, Any]:
    engine = await _engine(ctx)
    if engine.bucket_count == 0:
        return {**leaderboard_payload(engine), "menu": ctx.menu_for("top-scores")}
    try:
        engine.select_bucket(game)
    except IndexError as e:
        raise HTTPException(status_code=404, detail="Game not found") from e
    engine.select_rank(rank)
    return {**leaderboard_payload(engine), "menu": ctx.menu_for("top-scores")}


@router.get("/top-scorers")
async def top_scorers(
    index: int = Query(0, ge=0),
    direction: int = Query(0, ge=-1, le=1, description="-1 previous, 1 next, 0 stay"),
    ctx: DashboardContext = Depends(get_context),
) -> dict[str, Any]:
    engine = await _engine(ctx)
    if engine.bucket_count == 0:
        return {**top_scorer_payload(engine), "menu": ctx.menu_for("top-scorer")}
    try:
        engine.select_bucket(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail="Game not found") from e
    if direction:
        engine.cycle(direction)
    return {**top_scorer_payload(engine), "menu": ctx.menu_for("top-scorer")}
