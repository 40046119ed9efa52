from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from ..navigation import DashboardContext, get_context

router = APIRouter(tags=["nav"])


@router.get("/nav")
def nav(
    current: str | None = Query(None, description="Key of the page that is open"),
    ctx: DashboardContext = Depends(get_context),
) -> dict[str, Any]:
    return {"menu": ctx.menu_for(current)}
