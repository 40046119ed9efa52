from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path

from ..navigation import DashboardContext, get_context
from ..services.activity import activity_payload, top_games_payload, wallets_payload
from ..upstream import UpstreamError

router = APIRouter(tags=["activity"])


@router.get("/activity")
async def activity_default(ctx: DashboardContext = Depends(get_context)) -> dict[str, Any]:
    s = ctx.settings
    return await activity(s.activity_default_month, s.activity_default_year, ctx)


@router.get("/activity/{month}/{year}")
async def activity(
    month: int = Path(..., ge=1, le=12),
    year: int = Path(..., ge=2000, le=2100),
    ctx: DashboardContext = Depends(get_context),
) -> dict[str, Any]:
    try:
        data = await ctx.upstream.monthly_activity(month, year)
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail="Error fetching activity data") from e
    return {**activity_payload(data, month, year), "menu": ctx.menu_for("monthly-activity")}


@router.get("/wallets")
async def wallets(ctx: DashboardContext = Depends(get_context)) -> dict[str, Any]:
    try:
        data = await ctx.upstream.wallet_count()
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail="Error fetching wallet data") from e
    return {**wallets_payload(data), "menu": ctx.menu_for("wallet-connected")}


@router.get("/games")
async def games(ctx: DashboardContext = Depends(get_context)) -> dict[str, Any]:
    try:
        data = await ctx.upstream.top_games()
    except UpstreamError as e:
        raise HTTPException(status_code=502, detail="Error fetching top games") from e
    return {**top_games_payload(data), "menu": ctx.menu_for("top-games")}
