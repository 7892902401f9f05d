"""YAML loaders that validate query targets against the data source models."""

from __future__ import annotations

import string
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import TypeAdapter, ValidationError

from ..models import QueryTarget


class ConfigLoadError(RuntimeError):
    """Raised when a targets file cannot be parsed or validated."""


TARGETS_ADAPTER = TypeAdapter(list[QueryTarget])


def _ref_id_for(index: int) -> str:
    """Return host-style reference ids: A..Z, then AA, AB, ..."""

    letters = string.ascii_uppercase
    label = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, len(letters))
        label = letters[remainder] + label
    return label


def _read_yaml(path: Path) -> Any:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to read query targets: {path}"
        raise ConfigLoadError(msg) from exc

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML syntax in {path}"
        raise ConfigLoadError(msg) from exc


def _normalize_entries(data: Any, path: Path) -> list[dict[str, Any]]:
    """Accept a bare list or a mapping with ``targets`` and optional ``defaults``."""

    defaults: Mapping[str, Any] = {}
    if isinstance(data, Mapping):
        defaults = data.get("defaults") or {}
        if not isinstance(defaults, Mapping):
            msg = f"defaults must be a mapping when provided ({path})"
            raise ConfigLoadError(msg)
        data = data.get("targets")

    if not isinstance(data, list):
        msg = f"Expected a list of query targets in {path}."
        raise ConfigLoadError(msg)

    entries: list[dict[str, Any]] = []
    for index, item in enumerate(data):
        if not isinstance(item, Mapping):
            msg = f"Query target #{index + 1} must be a mapping ({path})"
            raise ConfigLoadError(msg)
        entry = {**defaults, **item}
        if "refId" not in entry and "ref_id" not in entry:
            entry["refId"] = _ref_id_for(index)
        entries.append(entry)
    return entries


def load_query_targets(path: Path) -> list[QueryTarget]:
    """Load and validate a YAML file describing a batch of query targets."""

    resolved = path.resolve()
    entries = _normalize_entries(_read_yaml(resolved), resolved)
    try:
        return TARGETS_ADAPTER.validate_python(entries)
    except ValidationError as exc:
        msg = f"Query target validation failed for {resolved}: {exc}"
        raise ConfigLoadError(msg) from exc


__all__ = ["ConfigLoadError", "load_query_targets"]
