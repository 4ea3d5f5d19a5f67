"""Command-line entry point: ``python -m livemeet``."""

from __future__ import annotations

import argparse
import logging
from typing import Any

from aiohttp import web

from livemeet.config import LiveMeetConfig
from livemeet.server import create_app


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="livemeet", description="Serve live meet results to viewers.")
    parser.add_argument("--meet-id", help="Meet to follow on startup.")
    parser.add_argument("--federation", help="Federation code for --meet-id.")
    parser.add_argument("--host", help="Interface to bind.")
    parser.add_argument("--port", type=int, help="Port to listen on.")
    parser.add_argument("--interval", type=float, help="Seconds between poll cycles.")
    parser.add_argument("--federations", dest="federations_path", help="Federation table JSON file.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {}
    for arg_name, field_name in (
        ("meet_id", "meet_id"),
        ("federation", "federation"),
        ("host", "host"),
        ("port", "port"),
        ("interval", "poll_interval"),
        ("federations_path", "federations_path"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value

    config = LiveMeetConfig.from_env(**overrides)
    web.run_app(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
