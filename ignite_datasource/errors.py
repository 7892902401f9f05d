"""Error taxonomy shared by the Ignite query pipeline."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Iterable


class ErrorKind(str, Enum):
    """Tags identifying the failure category of an IgniteDataSourceError."""

    NO_VALID_TARGETS = "no_valid_targets"
    CACHE_NOT_FOUND = "cache_not_found"
    TRANSPORT_ERROR = "transport_error"
    TRANSLATION_ERROR = "translation_error"
    CONFIGURATION_ERROR = "configuration_error"


class IgniteDataSourceError(RuntimeError):
    """Base class for every error raised by the data source."""

    kind: ClassVar[ErrorKind]
    default_message: ClassVar[str] = "Apache Ignite data source error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NoValidTargetsError(IgniteDataSourceError):
    """Raised when no query target survives validation."""

    kind = ErrorKind.NO_VALID_TARGETS
    default_message = "Please check your query configuration. No valid query targets found."


class CacheNotFoundError(IgniteDataSourceError):
    """Raised when at least one referenced cache failed its existence check."""

    kind = ErrorKind.CACHE_NOT_FOUND
    default_message = "At least one of the provided caches does not exist."

    def __init__(self, missing: Iterable[str] = (), message: str | None = None) -> None:
        super().__init__(message)
        self.missing: tuple[str, ...] = tuple(missing)


class IgniteTransportError(IgniteDataSourceError):
    """Raised when the REST API cannot be reached or answers unexpectedly."""

    kind = ErrorKind.TRANSPORT_ERROR
    default_message = "Failed to connect to Apache Ignite."


class FrameTranslationError(IgniteDataSourceError):
    """Raised when a query response cannot be translated into a result frame."""

    kind = ErrorKind.TRANSLATION_ERROR
    default_message = "Unexpected response shape from Apache Ignite qryfldexe."


class IgniteConfigurationError(IgniteDataSourceError):
    """Raised when required connection settings are missing or invalid."""

    kind = ErrorKind.CONFIGURATION_ERROR
    default_message = "Missing Apache Ignite configuration."


__all__ = [
    "CacheNotFoundError",
    "ErrorKind",
    "FrameTranslationError",
    "IgniteConfigurationError",
    "IgniteDataSourceError",
    "IgniteTransportError",
    "NoValidTargetsError",
]
