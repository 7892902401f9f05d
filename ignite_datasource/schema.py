"""Utilities for exporting JSON schemas from the data source models."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from .models import IgniteDataSourceConfig, QueryTarget


def query_target_json_schema() -> dict[str, Any]:
    """Return the JSON schema for a single query target."""

    return QueryTarget.model_json_schema(by_alias=True)


def datasource_json_schema() -> dict[str, Any]:
    """Return the JSON schema for data source definitions."""

    return IgniteDataSourceConfig.model_json_schema(by_alias=True)


def write_schema(schema: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2), encoding="utf-8")


def run(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export Ignite data source JSON schemas.")
    parser.add_argument(
        "--query",
        type=Path,
        default=Path("schemas/query.json"),
        help="Destination for the query target schema JSON file.",
    )
    parser.add_argument(
        "--datasource",
        type=Path,
        default=Path("schemas/datasource.json"),
        help="Destination for the data source definition schema JSON file.",
    )
    args = parser.parse_args(argv)

    write_schema(query_target_json_schema(), args.query)
    write_schema(datasource_json_schema(), args.datasource)
    print(f"Wrote schemas to {args.query} and {args.datasource}")
    return 0


def main() -> None:
    raise SystemExit(run())


__all__ = [
    "datasource_json_schema",
    "main",
    "query_target_json_schema",
    "run",
    "write_schema",
]


if __name__ == "__main__":
    main()
