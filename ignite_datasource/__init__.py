"""Apache Ignite data source public interface."""

from .datasource import CacheExistenceResult, HealthCheckResult, IgniteDataSource, QueryResponse
from .encoding import SpaceEncoding, decode_query, encode_query
from .errors import (
    CacheNotFoundError,
    ErrorKind,
    FrameTranslationError,
    IgniteConfigurationError,
    IgniteDataSourceError,
    IgniteTransportError,
    NoValidTargetsError,
)
from .frames import FieldDescriptor, FieldType, ResultFrame, build_frame, infer_field_type
from .ignite import IgniteClient, IgniteSettings
from .models import FormatType, IgniteDataSourceConfig, QueryTarget
from .validation import filter_valid_targets, is_valid_target

__all__ = [
    "CacheExistenceResult",
    "CacheNotFoundError",
    "ErrorKind",
    "FieldDescriptor",
    "FieldType",
    "FormatType",
    "FrameTranslationError",
    "HealthCheckResult",
    "IgniteClient",
    "IgniteConfigurationError",
    "IgniteDataSource",
    "IgniteDataSourceConfig",
    "IgniteDataSourceError",
    "IgniteSettings",
    "IgniteTransportError",
    "NoValidTargetsError",
    "QueryResponse",
    "QueryTarget",
    "SpaceEncoding",
    "build_frame",
    "decode_query",
    "encode_query",
    "filter_valid_targets",
    "infer_field_type",
    "is_valid_target",
]
