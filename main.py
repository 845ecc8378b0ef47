"""CLI entry point for the market-fit engine."""

import argparse
import asyncio
import json
import logging
import sys

from marketfit.core.config import Settings
from marketfit.core.errors import RecommendationError
from marketfit.core.schemas import HealthReport, RecommendOptions
from marketfit.pipeline.orchestrator import RecommendationEngine
from marketfit.profile.schema import Profile


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: environment variables)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Market-fit engine - score a profile against live vacancy demand",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- recommend subcommand ---
    recommend_parser = subparsers.add_parser("recommend", help="Generate recommendations for a profile")
    recommend_parser.add_argument(
        "--profile",
        required=True,
        help="Path to profile YAML or JSON file",
    )
    recommend_parser.add_argument("--area", default=None, help="Region id for the vacancy search")
    recommend_parser.add_argument("--language", default="ru", help="Response language (default: ru)")
    recommend_parser.add_argument("--role", default=None, help="Search this role instead of guessing")
    _add_common(recommend_parser)

    # --- health subcommand ---
    health_parser = subparsers.add_parser("health", help="Print runtime limits as JSON")
    _add_common(health_parser)

    # --- serve subcommand ---
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: from config)")
    _add_common(serve_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    return Settings.from_yaml(path) if path else Settings.from_env()


async def run_recommend(settings: Settings, profile: Profile, options: RecommendOptions) -> dict:
    async with RecommendationEngine(settings) as engine:
        result = await engine.generate(profile, options)
    return result.to_wire()


async def _health(settings: Settings) -> HealthReport:
    async with RecommendationEngine(settings) as engine:
        return engine.health()


def cmd_recommend(args: argparse.Namespace, settings: Settings) -> None:
    """Handle recommend subcommand."""
    profile = Profile.from_yaml(args.profile)
    if profile.is_empty:
        logging.getLogger(__name__).warning("Profile %s is empty - expect generic results", args.profile)
    options = RecommendOptions(area_id=args.area, language=args.language, focus_role=args.role)
    data = asyncio.run(run_recommend(settings, profile, options))
    print(json.dumps(data, ensure_ascii=False, indent=2))


def cmd_health(settings: Settings) -> None:
    """Handle health subcommand."""
    report = asyncio.run(_health(settings))
    print(json.dumps(report.model_dump(mode="json", by_alias=True), indent=2))


def cmd_serve(args: argparse.Namespace, settings: Settings) -> None:
    """Handle serve subcommand."""
    import uvicorn

    from marketfit.api.app import create_app

    uvicorn.run(
        create_app(settings),
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
        log_level="debug" if args.verbose else "info",
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "recommend":
            cmd_recommend(args, settings)
        elif args.command == "health":
            cmd_health(settings)
        else:
            cmd_serve(args, settings)
    except (FileNotFoundError, ValueError, RecommendationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
