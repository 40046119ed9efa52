import argparse
import asyncio
import json
import logging
from pathlib import Path

from dashboard.logging_config import setup_logging
from dashboard.ranking import RankingEngine
from dashboard.schemas import GameBucket, TopScoresResponse
from dashboard.settings import load_settings
from dashboard.upstream import UpstreamClient, UpstreamError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Dashboard management commands")
    sub = p.add_subparsers(dest="cmd", required=True)

    p.add_argument("--config", default="./dashboard.json")
    p.add_argument("--api-base-url")
    p.add_argument("--log-level")

    lb = sub.add_parser("leaderboard", help="Print the top-20 table for one game")
    lb.add_argument("--file", help="top-scores JSON snapshot (default: fetch from the API)")
    lb.add_argument("--game", type=int, default=0, help="Game index")

    return p.parse_args(argv)


def load_snapshot(path: str) -> list[GameBucket]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return list(TopScoresResponse.model_validate(raw).data)


def format_leaderboard(engine: RankingEngine) -> list[str]:
    bucket = engine.active_bucket
    if bucket is None:
        return ["No data available."]
    view = engine.view()
    lines = [f"{bucket.game_title} (game {bucket.game_id})"]
    if view.empty:
        lines.append("No data available.")
        return lines
    lines.append(f"{'#':>3} {'pct':>5} {'score':>10}  player")
    for e in view.entries():
        marker = " *" if e.is_max else ""
        lines.append(
            f"{e.rank + 1:>3} {e.percentile:>5.0f} {e.record.score:>10.0f}  {e.record.achieved_by}{marker}"
        )
    return lines


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    settings = load_settings(
        config_path=args.config,
        api_base_url=args.api_base_url,
        log_level=args.log_level,
    )
    setup_logging(settings.log_level)

    log = logging.getLogger(__name__)

    if args.cmd == "leaderboard":
        if args.file:
            buckets = load_snapshot(args.file)
        else:
            client = UpstreamClient(settings.api_base_url, timeout=settings.http_timeout)
            try:
                buckets = asyncio.run(client.top_scores())
            except UpstreamError as e:
                log.error("Could not fetch top scores: %s", e)
                return 1

        engine = RankingEngine(buckets=buckets, limit=settings.leaderboard_size)
        if buckets:
            try:
                engine.select_bucket(args.game)
            except IndexError as e:
                log.error("%s", e)
                return 2
        print("\n".join(format_leaderboard(engine)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
