from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FormatType(str, Enum):
    """Result formats understood by the dashboard host."""

    TIMESERIES = "time_series"
    TABLE = "table"


class QueryTarget(BaseModel):
    """A single query issued by the host against one Ignite cache."""

    # Hosts attach bookkeeping keys (datasource, hide, ...) that are not ours.
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    ref_id: str = Field(
        default="A",
        alias="refId",
        description="Identifier linking the query to its result frame.",
    )
    cache_name: str | None = Field(
        default=None,
        alias="cacheName",
        description="Name of the Ignite cache the SQL runs against.",
    )
    format: FormatType | None = Field(
        default=None,
        description="Requested result format: 'time_series' or 'table'.",
    )
    time_column: str | None = Field(
        default=None,
        alias="timeColumn",
        description="Column carrying timestamps; required for time series results.",
    )
    query: str | None = Field(
        default=None,
        description="Raw SQL text sent to the qryfldexe endpoint.",
    )


__all__ = ["FormatType", "QueryTarget"]
