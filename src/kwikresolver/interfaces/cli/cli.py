from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from kwikresolver.domain.entities import PipelineResult, TargetValidationError
from kwikresolver.infrastructure.config import AppConfig, load_config
from kwikresolver.infrastructure.logging.setup import configure_logging
from kwikresolver.interfaces.app import create_app
from kwikresolver.interfaces.composition import build_fetcher_factory, build_resolver

log = structlog.get_logger(__name__)

DEFAULT_EXPORT_FILENAME = "kwik_links.txt"


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    # Config wiring flags shared by every command (no business logic)
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    common.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    common.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    common.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )
    common.add_argument(
        "--max-attempts",
        default=None,
        type=int,
        help="Override attempts per resolution stage.",
    )

    parser = argparse.ArgumentParser(prog="kwikresolver")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", parents=[common], help="Run the HTTP API.")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    serve.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )

    resolve = commands.add_parser(
        "resolve", parents=[common], help="Resolve Kwik links from the terminal."
    )
    resolve.add_argument("urls", nargs="+", help="Kwik URLs to resolve.")
    resolve.add_argument(
        "-x",
        "--export",
        action="store_true",
        help="Write the resolved links to a text file, one per line.",
    )
    resolve.add_argument(
        "-f",
        "--filename",
        default=DEFAULT_EXPORT_FILENAME,
        help=f"Export file name (default: {DEFAULT_EXPORT_FILENAME}).",
    )

    return parser.parse_args(argv)


def _load(args: argparse.Namespace) -> AppConfig:
    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format
    if args.max_attempts is not None:
        cli_overrides["resolver_max_attempts"] = args.max_attempts

    return load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )


async def resolve_urls(urls: Sequence[str], config: AppConfig) -> list[PipelineResult]:
    """Resolve *urls* one after another, each with its own HTTP client."""
    fetcher_factory = build_fetcher_factory(config)
    results: list[PipelineResult] = []
    for url in urls:
        async with fetcher_factory() as fetcher:
            try:
                result = await build_resolver(fetcher, config).execute(url)
            except TargetValidationError as e:
                result = PipelineResult.failure(str(e))
        results.append(result)
    return results


def export_links(results: Iterable[PipelineResult], path: Path) -> int:
    """Write the final link of every successful result to *path*."""
    links = [r.final_link for r in results if r.success and r.final_link]
    path.write_text("".join(f"{link}\n" for link in links), encoding="utf-8")
    log.info("links_exported", path=str(path), count=len(links))
    return len(links)


def _serve(args: argparse.Namespace, config: AppConfig) -> int:
    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = int(args.port or os.getenv("PORT", "5000"))

    log_config = configure_logging(config)

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )
    return 0


def _resolve(args: argparse.Namespace, config: AppConfig) -> int:
    # stdout carries the JSON results
    configure_logging(config, stderr_only=True)

    results = asyncio.run(resolve_urls(args.urls, config))
    for url, result in zip(args.urls, results):
        print(json.dumps({"url": url, **result.to_dict()}))

    if args.export:
        export_links(results, Path(args.filename))

    return 0 if all(r.success for r in results) else 1


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Config is loaded exactly once here, then handed to the chosen command.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    config = _load(args)

    if args.command == "serve":
        return _serve(args, config)
    return _resolve(args, config)


if __name__ == "__main__":
    raise SystemExit(start())
