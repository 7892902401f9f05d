"""Pydantic models describing query targets and data source definitions."""

from .datasource import IgniteDataSourceConfig
from .query import FormatType, QueryTarget

__all__ = [
    "FormatType",
    "IgniteDataSourceConfig",
    "QueryTarget",
]
