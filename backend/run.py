import argparse
import uvicorn
from dashboard.settings import COUNTER_MODES, load_settings

def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Arcade metrics dashboard backend")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8001)
    p.add_argument("--reload", action="store_true")
    p.add_argument("--config", default="./dashboard.json")

    # Optional overrides (override dashboard.json)
    p.add_argument("--api-base-url")
    p.add_argument("--log-level")
    p.add_argument("--http-timeout", type=float)
    p.add_argument("--counter-duration-ms", type=float)
    p.add_argument("--counter-mode", choices=COUNTER_MODES)
    return p.parse_args()

def app_factory():
    # IMPORTANT: executed in uvicorn worker process (including reload)
    args = parse_args()
    settings = load_settings(
        config_path=args.config,
        api_base_url=args.api_base_url,
        log_level=args.log_level,
        http_timeout=args.http_timeout,
        counter_duration_ms=args.counter_duration_ms,
        leaderboard_counter_mode=args.counter_mode,
    )
    from dashboard.main import create_app
    return create_app(settings)

def main() -> None:
    args = parse_args()
    uvicorn.run(
        "run:app_factory",
        host=args.host,
        port=args.port,
        reload=args.reload,
        factory=True,
        log_config=None,
    )

if __name__ == "__main__":
    main()
