from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from starlette.requests import HTTPConnection

from .settings import Settings
from .upstream import UpstreamClient

if TYPE_CHECKING:
    from .live import LiveManager


@dataclass(frozen=True)
class MenuItem:
    key: str
    label: str
    path: str
    api: str


# One registry for every page's menu.
MENU: tuple[MenuItem, ...] = (
    MenuItem("home", "Home", "/", "/"),
    MenuItem("top-scores", "Top 20 Scores", "/top-scores", "/top-scores"),
    MenuItem("top-scorer", "Top Scorers", "/top-scorer", "/top-scorers"),
    MenuItem("top-games", "Top Games", "/topgames", "/games"),
    MenuItem("monthly-activity", "Monthly Activity", "/monthly-activity", "/activity"),
    MenuItem("wallet-connected", "Wallet Connected", "/wallet-connected", "/wallets"),
)


@dataclass
class DashboardContext:
    """Created once per app and handed to every view."""

    settings: Settings
    upstream: UpstreamClient
    live: LiveManager
    menu: tuple[MenuItem, ...] = field(default=MENU)

    def menu_for(self, current_key: str | None = None) -> list[dict]:
        return [
            {
                "key": m.key,
                "label": m.label,
                "path": m.path,
                "api": m.api,
                "active": m.key == current_key,
            }
            for m in self.menu
        ]


def get_context(conn: HTTPConnection) -> DashboardContext:
    return conn.app.state.ctx
