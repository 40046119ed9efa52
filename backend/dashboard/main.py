import asyncio
import json
import logging
from contextlib import asynccontextmanager, suppress

import httpx
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .logging_config import setup_logging
from .settings import Settings
from .config import CORS_ALLOW_ORIGINS

from .live import ActivitySession, LeaderboardSession, LiveManager, LiveSession
from .navigation import DashboardContext
from .upstream import UpstreamClient
from .routers.nav import router as nav_router
from .routers.leaderboard import router as leaderboard_router
from .routers.activity import router as activity_router

log = logging.getLogger(__name__)


async def _run_session(ctx: DashboardContext, session: LiveSession) -> None:
    await ctx.live.connect(session)
    sender = asyncio.create_task(session.pump())
    try:
        await session.load()
        while True:
            text = await session.ws.receive_text()
            try:
                raw = json.loads(text)
            except ValueError:
                session.push_error("Messages must be JSON")
                continue
            await session.handle(raw)
    except WebSocketDisconnect:
        pass
    finally:
        ctx.live.disconnect(session)
        sender.cancel()
        with suppress(asyncio.CancelledError):
            await sender


def create_app(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    setup_logging(settings.log_level)

    ctx = DashboardContext(
        settings=settings,
        upstream=UpstreamClient(settings.api_base_url, timeout=settings.http_timeout, transport=transport),
        live=LiveManager(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Dashboard backend up, upstream %s", settings.api_base_url)
        yield
        ctx.live.close_all()

    app = FastAPI(
        title="Arcade Metrics Dashboard",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.ctx = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def health() -> dict:
        return {"ok": True, "live_sessions": ctx.live.count}

    app.include_router(nav_router)
    app.include_router(leaderboard_router)
    app.include_router(activity_router)

    @app.websocket("/ws/top-scores")
    async def ws_top_scores(ws: WebSocket) -> None:
        await _run_session(ctx, LeaderboardSession(ws, ctx.upstream, settings))

    @app.websocket("/ws/activity")
    async def ws_activity(ws: WebSocket) -> None:
        await _run_session(ctx, ActivitySession(ws, ctx.upstream, settings))

    return app
