"""Query execution pipeline for the Apache Ignite data source."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Literal, Sequence

import httpx

from .errors import (
    CacheNotFoundError,
    FrameTranslationError,
    IgniteDataSourceError,
    IgniteTransportError,
)
from .frames import ResultFrame, build_frame
from .ignite import IgniteClient, IgniteSettings
from .models import QueryTarget
from .validation import require_valid_targets

logger = logging.getLogger(__name__)

HEALTH_OK_MESSAGE = "Successfully connected to Apache Ignite."
HEALTH_FAILED_MESSAGE = "Failed to connect to Apache Ignite."


@dataclass(frozen=True)
class CacheExistenceResult:
    """Outcome of a single ``cmd=size`` probe."""

    cache_name: str
    exists: bool
    error: str | None = None


@dataclass
class QueryResponse:
    """Frames produced for a batch of query targets, in target order."""

    data: list[ResultFrame] = field(default_factory=list)

    def frame_for(self, ref_id: str) -> ResultFrame | None:
        for frame in self.data:
            if frame.ref_id == ref_id:
                return frame
        return None


@dataclass(frozen=True)
class HealthCheckResult:
    """Status reported by the connectivity probe."""

    status: Literal["success", "failure"]
    message: str

    @property
    def ok(self) -> bool:
        return self.status == "success"


class IgniteDataSource:
    """Runs query targets against an Ignite node and returns typed frames.

    Each call opens its own HTTP client; the instance only holds read-only
    connection settings and may be shared freely.
    """

    def __init__(
        self,
        settings: IgniteSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @classmethod
    def from_env(cls) -> "IgniteDataSource":
        return cls(IgniteSettings.from_env())

    @property
    def settings(self) -> IgniteSettings:
        return self._settings

    def _client(self) -> IgniteClient:
        return IgniteClient(self._settings, transport=self._transport)

    async def query(self, targets: Iterable[QueryTarget]) -> QueryResponse:
        """Validate, check cache existence, then execute every target concurrently."""

        valid = require_valid_targets(targets)
        cache_names = list(dict.fromkeys(target.cache_name for target in valid))

        async with self._client() as client:
            results = await self._check_caches(client, cache_names)
            missing = [result.cache_name for result in results if not result.exists]
            if missing:
                logger.info("Cache existence check failed for: %s", ", ".join(missing))
                raise CacheNotFoundError(missing)

            frames = await asyncio.gather(
                *(self._execute_target(client, target) for target in valid)
            )

        logger.info(
            "Executed %d query target(s) against %d cache(s)", len(frames), len(cache_names)
        )
        return QueryResponse(data=list(frames))

    async def check_caches(self, cache_names: Sequence[str]) -> list[CacheExistenceResult]:
        """Probe each distinct cache once; every probe settles before returning."""

        async with self._client() as client:
            return await self._check_caches(client, list(dict.fromkeys(cache_names)))

    async def _check_caches(
        self, client: IgniteClient, cache_names: Sequence[str]
    ) -> list[CacheExistenceResult]:
        outcomes = await asyncio.gather(
            *(client.cache_size(name) for name in cache_names),
            return_exceptions=True,
        )

        results: list[CacheExistenceResult] = []
        for name, outcome in zip(cache_names, outcomes):
            if isinstance(outcome, BaseException):
                raise outcome
            results.append(
                CacheExistenceResult(
                    cache_name=name,
                    exists=outcome.succeeded,
                    error=outcome.error or None,
                )
            )
        return results

    async def _execute_target(self, client: IgniteClient, target: QueryTarget) -> ResultFrame:
        # Validated targets always carry a cache name and query.
        cache_name = target.cache_name or ""
        try:
            envelope = await client.execute_fields_query(cache_name, target.query or "")
        except IgniteTransportError as exc:
            logger.warning("Query %s failed; returning an empty frame: %s", target.ref_id, exc)
            return ResultFrame.empty(target.ref_id)

        if not envelope.succeeded:
            logger.warning(
                "Query %s on cache '%s' returned status %s: %s",
                target.ref_id,
                cache_name,
                envelope.success_status,
                envelope.error,
            )
            return ResultFrame.empty(target.ref_id)

        try:
            return build_frame(target.ref_id, envelope.response)
        except FrameTranslationError as exc:
            logger.warning("Query %s response could not be translated: %s", target.ref_id, exc)
            return ResultFrame.empty(target.ref_id)

    async def test_datasource(self) -> HealthCheckResult:
        """Check connectivity by requesting the node version."""

        try:
            async with self._client() as client:
                envelope = await client.version()
            if envelope.error is None or envelope.success_status == 0:
                logger.info("Connected to Apache Ignite %s", envelope.response)
                return HealthCheckResult(status="success", message=HEALTH_OK_MESSAGE)
            raise IgniteTransportError(envelope.error or HEALTH_FAILED_MESSAGE)
        except IgniteDataSourceError as exc:
            return HealthCheckResult(status="failure", message=exc.message)


__all__ = [
    "CacheExistenceResult",
    "HealthCheckResult",
    "IgniteDataSource",
    "QueryResponse",
]
