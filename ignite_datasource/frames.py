"""Translation of Ignite field query responses into columnar result frames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import FrameTranslationError


class FieldType(str, Enum):
    """Field types understood by the dashboard host."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"


# Temporal values are kept in their raw textual form, e.g. 2018-02-18%2001:01:01.
FIELD_TYPES: Mapping[str, FieldType] = {
    "java.lang.Boolean": FieldType.BOOLEAN,
    "java.lang.Byte": FieldType.NUMBER,
    "java.lang.Double": FieldType.NUMBER,
    "java.lang.Float": FieldType.NUMBER,
    "java.lang.Integer": FieldType.NUMBER,
    "java.lang.Long": FieldType.NUMBER,
    "java.lang.Short": FieldType.NUMBER,
    "java.lang.String": FieldType.STRING,
    "java.sql.Date": FieldType.STRING,
    "java.sql.Time": FieldType.STRING,
    "java.sql.Timestamp": FieldType.STRING,
    "java.lang.UUID": FieldType.STRING,
    "java.util.UUID": FieldType.STRING,
    "org.apache.ignite.lang.IgniteUuid": FieldType.STRING,
}
DEFAULT_FIELD_TYPE = FieldType.STRING


class FieldMetadata(BaseModel):
    """Column description returned in ``fieldsMetadata``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    field_name: str = Field(..., alias="fieldName")
    field_type_name: str | None = Field(default=None, alias="fieldTypeName")
    schema_name: str | None = Field(default=None, alias="schemaName")
    type_name: str | None = Field(default=None, alias="typeName")


class FieldsQueryPayload(BaseModel):
    """The ``response`` member of a successful qryfldexe call."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    fields_metadata: list[FieldMetadata] = Field(default_factory=list, alias="fieldsMetadata")
    items: list[list[Any]] = Field(default_factory=list)
    last: bool | None = None
    query_id: int | None = Field(default=None, alias="queryId")


@dataclass(frozen=True)
class FieldDescriptor:
    """Name and inferred type of a single frame column."""

    name: str
    type: FieldType


@dataclass(frozen=True)
class ResultFrame:
    """Typed tabular result of one query target.

    Rows are stored positionally: ``rows[i][j]`` belongs to ``fields[j]``.
    """

    ref_id: str
    fields: tuple[FieldDescriptor, ...] = ()
    rows: tuple[tuple[Any, ...], ...] = ()

    def __post_init__(self) -> None:
        width = len(self.fields)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                msg = (
                    f"Row {index} of frame '{self.ref_id}' has {len(row)} values"
                    f" but {width} fields are defined."
                )
                raise FrameTranslationError(msg)

    @classmethod
    def empty(cls, ref_id: str) -> "ResultFrame":
        return cls(ref_id=ref_id)

    @property
    def is_empty(self) -> bool:
        return not self.fields and not self.rows

    @property
    def length(self) -> int:
        return len(self.rows)

    def columns(self) -> list[list[Any]]:
        """Return the frame values grouped per field, in field order."""

        return [[row[index] for row in self.rows] for index in range(len(self.fields))]

    def to_dict(self) -> dict[str, Any]:
        return {
            "refId": self.ref_id,
            "fields": [
                {"name": field.name, "type": field.type.value, "values": values}
                for field, values in zip(self.fields, self.columns())
            ],
            "length": self.length,
        }


def infer_field_type(type_name: str | None) -> FieldType:
    """Map an Ignite (Java) type tag onto a host field type; unknown tags become strings."""

    if type_name is None:
        return DEFAULT_FIELD_TYPE
    return FIELD_TYPES.get(type_name.strip(), DEFAULT_FIELD_TYPE)


def build_fields(metadata: Iterable[FieldMetadata]) -> tuple[FieldDescriptor, ...]:
    return tuple(
        FieldDescriptor(name=item.field_name, type=infer_field_type(item.field_type_name))
        for item in metadata
    )


def build_frame(ref_id: str, payload: Any) -> ResultFrame:
    """Assemble a frame from the ``response`` member of a qryfldexe envelope."""

    try:
        parsed = FieldsQueryPayload.model_validate(payload)
    except ValidationError as exc:
        raise FrameTranslationError() from exc

    fields = build_fields(parsed.fields_metadata)
    rows: list[tuple[Any, ...]] = [tuple(row) for row in parsed.items]
    return ResultFrame(ref_id=ref_id, fields=fields, rows=tuple(rows))


def frames_to_dicts(frames: Sequence[ResultFrame]) -> list[dict[str, Any]]:
    return [frame.to_dict() for frame in frames]


__all__ = [
    "DEFAULT_FIELD_TYPE",
    "FIELD_TYPES",
    "FieldDescriptor",
    "FieldMetadata",
    "FieldType",
    "FieldsQueryPayload",
    "ResultFrame",
    "build_fields",
    "build_frame",
    "frames_to_dicts",
    "infer_field_type",
]
