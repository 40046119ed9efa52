from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import json

from .config import DEFAULT_API_BASE_URL

COUNTER_MODES = ("step", "spring")
COUNTER_ORIGINS = ("zero", "current")


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    log_level: str = "INFO"
    http_timeout: float = 10.0
    leaderboard_size: int = 20
    counter_duration_ms: float = 2000.0
    # per-display tween flavour: the leaderboard cards spring, the
    # activity counters step up from zero
    leaderboard_counter_mode: str = "spring"
    leaderboard_counter_origin: str = "current"
    activity_default_month: int = 2
    activity_default_year: int = 2025


def load_settings(
    *,
    config_path: str,
    api_base_url: str | None = None,
    log_level: str | None = None,
    http_timeout: float | None = None,
    leaderboard_size: int | None = None,
    counter_duration_ms: float | None = None,
    leaderboard_counter_mode: str | None = None,
) -> Settings:
    conf: dict = {}
    p = Path(config_path)
    if p.exists():
        conf = json.loads(p.read_text(encoding="utf-8"))

    def pick(key: str, cli_val, default):
        if cli_val is not None:
            return cli_val
        if conf.get(key) is not None:
            return conf[key]
        return default

    d = Settings()
    s = Settings(
        api_base_url=str(pick("api_base_url", api_base_url, d.api_base_url)).rstrip("/"),
        log_level=str(pick("log_level", log_level, d.log_level)),
        http_timeout=float(pick("http_timeout", http_timeout, d.http_timeout)),
        leaderboard_size=int(pick("leaderboard_size", leaderboard_size, d.leaderboard_size)),
        counter_duration_ms=float(pick("counter_duration_ms", counter_duration_ms, d.counter_duration_ms)),
        leaderboard_counter_mode=str(pick("leaderboard_counter_mode", leaderboard_counter_mode, d.leaderboard_counter_mode)),
        leaderboard_counter_origin=str(pick("leaderboard_counter_origin", None, d.leaderboard_counter_origin)),
        activity_default_month=int(pick("activity_default_month", None, d.activity_default_month)),
        activity_default_year=int(pick("activity_default_year", None, d.activity_default_year)),
    )

    if s.leaderboard_counter_mode not in COUNTER_MODES:
        raise ValueError(f"leaderboard_counter_mode must be one of {COUNTER_MODES}, got {s.leaderboard_counter_mode!r}")
    if s.leaderboard_counter_origin not in COUNTER_ORIGINS:
        raise ValueError(
            f"leaderboard_counter_origin must be one of {COUNTER_ORIGINS}, got {s.leaderboard_counter_origin!r}"
        )
    return s
