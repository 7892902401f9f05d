"""Request validation for batches of query targets."""

from __future__ import annotations

from typing import Iterable

from .errors import NoValidTargetsError
from .models import FormatType, QueryTarget


def _is_blank(value: str | None) -> bool:
    return value is None or value == ""


def is_valid_target(target: QueryTarget) -> bool:
    """Return whether *target* carries every field its format requires."""

    if _is_blank(target.cache_name):
        return False
    if target.format is None:
        return False
    if target.format is FormatType.TIMESERIES and _is_blank(target.time_column):
        return False
    if _is_blank(target.query):
        return False
    return True


def filter_valid_targets(targets: Iterable[QueryTarget]) -> list[QueryTarget]:
    """Return the well-formed targets, preserving their relative order."""

    copies = [target.model_copy(deep=True) for target in targets]
    return [target for target in copies if is_valid_target(target)]


def require_valid_targets(targets: Iterable[QueryTarget]) -> list[QueryTarget]:
    """Like :func:`filter_valid_targets` but fail when nothing survives."""

    valid = filter_valid_targets(targets)
    if not valid:
        raise NoValidTargetsError()
    return valid


__all__ = ["filter_valid_targets", "is_valid_target", "require_valid_targets"]
