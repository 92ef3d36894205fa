from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from ..config import Difficulty, EngineConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gambit", description="Gambit chess engine")
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.MEDIUM.value,
        help="Search tier used when no depth is given (default: medium)",
    )
    parser.add_argument("--max-depth", type=int, default=4, help="Largest accepted depth")
    parser.add_argument("--movetime-ms", type=int, default=None, help="Per-search time budget")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument(
        "--max-games", type=int, default=1024, help="Live HTTP games kept in memory"
    )

    sub = parser.add_subparsers(dest="command")
    serve = sub.add_parser("serve", help="Run the HTTP API (default)")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    sub.add_parser("uci", help="Speak UCI on stdin/stdout")
    return parser


def config_from_args(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(
        difficulty=Difficulty(args.difficulty),
        max_depth=max(1, args.max_depth),
        movetime_ms=args.movetime_ms,
        log_level=args.log_level.upper(),
        host=getattr(args, "host", "0.0.0.0"),
        port=getattr(args, "port", 8000),
        max_games=max(1, args.max_games),
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    if args.command == "uci":
        from ..protocol.uci.loop import run_uci

        run_uci(config)
        return

    from ..protocol.http.app import create_app

    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
