from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from indexarr.application.use_cases import TorznabApiUseCase
from indexarr.domain.definitions import DefinitionError
from indexarr.domain.indexers import IndexerError
from indexarr.infrastructure.config import MemorySiteConfig, load_config
from indexarr.infrastructure.definitions import load_definition_file
from indexarr.infrastructure.logging.setup import configure_logging
from indexarr.infrastructure.runner import IndexerTester
from indexarr.interfaces.composition import Container, build_container

log = structlog.get_logger(__name__)


def _key_value(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    return key, value


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="indexarr")

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--definitions-dir",
        action="append",
        default=None,
        help="Directory with <site>.yml definitions (repeatable, first wins).",
    )
    parser.add_argument(
        "--sites-file",
        default=None,
        help="Override the per-site settings file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List known definition keys.")

    caps = sub.add_parser("caps", help="Print the caps document of a site.")
    caps.add_argument("site")

    query = sub.add_parser("query", help="Run a Torznab query against a site or 'aggregate'.")
    query.add_argument("site")
    query.add_argument("params", nargs="*", type=_key_value, metavar="key=value")
    query.add_argument("--format", choices=["xml", "json"], default="xml")

    download = sub.add_parser("download", help="Download a result link with the site session.")
    download.add_argument("site")
    download.add_argument("url")
    download.add_argument("file")

    test = sub.add_parser("test-definition", help="Smoke-test a definition file.")
    test.add_argument("file")
    test.add_argument(
        "--set",
        dest="settings",
        action="append",
        default=[],
        type=_key_value,
        metavar="key=value",
        help="Site setting for this run (repeatable), e.g. --set username=me.",
    )
    test.add_argument(
        "--download",
        action="store_true",
        help="Also download one result per search mode.",
    )

    return parser.parse_args(argv)


def _write(payload: bytes) -> None:
    sys.stdout.buffer.write(payload)
    if not payload.endswith(b"\n"):
        sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


async def _cmd_caps(container: Container, args: argparse.Namespace) -> int:
    runner = container.runner(args.site)
    result = await TorznabApiUseCase(runner).execute({"t": "caps"})
    _write(result.payload)
    return 0


async def _cmd_query(container: Container, args: argparse.Namespace) -> int:
    params = list(args.params)
    if not any(key == "t" for key, _ in params):
        params.insert(0, ("t", "search"))

    indexer = container.indexer(args.site)
    try:
        result = await TorznabApiUseCase(indexer, output=args.format).execute(params)
    finally:
        await indexer.aclose()
    _write(result.payload)
    return 0


async def _cmd_download(container: Container, args: argparse.Namespace) -> int:
    runner = container.runner(args.site)
    try:
        data, headers = await runner.download(args.url)
    finally:
        await runner.aclose()
    Path(args.file).write_bytes(data)
    log.info(
        "download_saved",
        file=args.file,
        size=len(data),
        content_type=headers.get("content-type", ""),
    )
    return 0


async def _cmd_test(container: Container, args: argparse.Namespace) -> int:
    definition = load_definition_file(Path(args.file))

    sites = MemorySiteConfig(
        {definition.site: container.sites.section(definition.site)}
    )
    for key, value in args.settings:
        sites.set(definition.site, key, value)

    runner = Container(
        config=container.config, loader=container.loader, sites=sites
    ).runner_for(definition)
    tester = IndexerTester(
        runner,
        search_limit=container.config.tester_search_limit,
        download=args.download,
    )
    try:
        report = await tester.run()
    finally:
        await runner.aclose()

    print(report.render())
    return 0 if report.ok else 1


async def _run(container: Container, args: argparse.Namespace) -> int:
    if args.command == "list":
        for key in container.loader.list():
            print(key)
        return 0
    if args.command == "caps":
        return await _cmd_caps(container, args)
    if args.command == "query":
        return await _cmd_query(container, args)
    if args.command == "download":
        return await _cmd_download(container, args)
    return await _cmd_test(container, args)


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, configures logging, then dispatches the subcommand.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.definitions_dir:
        cli_overrides["definition_dirs"] = args.definitions_dir
    if args.sites_file:
        cli_overrides["sites_file"] = args.sites_file
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    configure_logging(config)

    container = build_container(config)
    try:
        return asyncio.run(_run(container, args))
    except (DefinitionError, IndexerError) as e:
        log.error(
            "command_failed",
            command=args.command,
            error_type=type(e).__name__,
            error=str(e),
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(start())
