"""Command line interface for running queries against Apache Ignite."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

import httpx

from .datasource import IgniteDataSource
from .datasources import DataSourceConfigError, resolve_datasource
from .encoding import SpaceEncoding
from .errors import IgniteDataSourceError
from .frames import frames_to_dicts
from .ignite import IgniteSettings
from .io.yaml_loader import ConfigLoadError, load_query_targets
from .models import FormatType, QueryTarget


def _add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--data-source",
        type=str,
        default=None,
        help="Name or path of the data source definition (defaults to IGNITE_DS_* environment variables).",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Base URL of the Ignite REST endpoint; overrides the data source definition.",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Maximum number of rows requested per query.",
    )
    parser.add_argument(
        "--space-encoding",
        choices=[item.value for item in SpaceEncoding],
        default=None,
        help="Encode only the first space of the SQL as '+' or every space.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log requests and query summaries to stderr.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Execute SQL field queries against an Apache Ignite REST endpoint."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    query = commands.add_parser("query", help="Run query targets and print the result frames as JSON.")
    _add_connection_arguments(query)
    query.add_argument(
        "--targets",
        type=Path,
        default=None,
        help="YAML file listing query targets.",
    )
    query.add_argument("--cache", type=str, default=None, help="Cache name for a single inline query.")
    query.add_argument("--sql", type=str, default=None, help="SQL text for a single inline query.")
    query.add_argument(
        "--format",
        choices=[item.value for item in FormatType],
        default=FormatType.TABLE.value,
        help="Result format for the inline query.",
    )
    query.add_argument("--time-column", type=str, default=None, help="Time column for time series queries.")
    query.add_argument("--ref-id", type=str, default="A", help="Reference id for the inline query.")

    health = commands.add_parser("health", help="Check connectivity by requesting the node version.")
    _add_connection_arguments(health)
    return parser


def _resolve_settings(args: argparse.Namespace, parser: argparse.ArgumentParser) -> IgniteSettings | None:
    if args.url:
        settings = IgniteSettings(url=args.url)
    else:
        try:
            settings = resolve_datasource(args.data_source, search_from=Path.cwd()).settings
        except DataSourceConfigError as exc:
            parser.error(str(exc))
            return None

    if args.page_size is not None:
        if args.page_size <= 0:
            parser.error("--page-size must be positive.")
            return None
        settings = replace(settings, page_size=args.page_size)
    if args.space_encoding is not None:
        settings = replace(settings, space_encoding=SpaceEncoding(args.space_encoding))
    return settings


def _load_targets(args: argparse.Namespace, parser: argparse.ArgumentParser) -> list[QueryTarget] | None:
    if args.targets is not None:
        try:
            return load_query_targets(args.targets)
        except ConfigLoadError as exc:
            parser.error(str(exc))
            return None

    if args.cache is None or args.sql is None:
        parser.error("Provide --targets or both --cache and --sql.")
        return None

    return [
        QueryTarget(
            ref_id=args.ref_id,
            cache_name=args.cache,
            format=FormatType(args.format),
            time_column=args.time_column,
            query=args.sql,
        )
    ]


def _run_query(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
    *,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    settings = _resolve_settings(args, parser)
    targets = _load_targets(args, parser)
    if settings is None or targets is None:
        return 2

    datasource = IgniteDataSource(settings, transport=transport)
    try:
        response = asyncio.run(datasource.query(targets))
    except IgniteDataSourceError as exc:
        parser.error(str(exc))
        return 2

    print(json.dumps({"data": frames_to_dicts(response.data)}, indent=2, default=str))
    return 0


def _run_health(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
    *,
    transport: httpx.AsyncBaseTransport | None,
) -> int:
    settings = _resolve_settings(args, parser)
    if settings is None:
        return 2

    result = asyncio.run(IgniteDataSource(settings, transport=transport).test_datasource())
    print(f"{result.status}: {result.message}")
    return 0 if result.ok else 1


def run(
    argv: Sequence[str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    if args.command == "health":
        return _run_health(args, parser, transport=transport)
    return _run_query(args, parser, transport=transport)


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
