"""Percent-encoding of SQL text for the qryfldexe endpoint."""

from __future__ import annotations

from enum import Enum
from urllib.parse import quote, unquote_plus

# Characters encodeURIComponent leaves untouched beyond Python's default safe set.
URI_COMPONENT_SAFE = "!*'()"


class SpaceEncoding(str, Enum):
    """How encoded spaces are rewritten before the SQL is sent to Ignite."""

    FIRST = "first"
    ALL = "all"


def encode_uri_component(text: str) -> str:
    """Percent-encode *text* the way a browser's encodeURIComponent does."""

    return quote(text, safe=URI_COMPONENT_SAFE)


def encode_query(sql: str, mode: SpaceEncoding | str = SpaceEncoding.FIRST) -> str:
    """Encode SQL text for transport in the ``qry`` query parameter.

    Ignite expects spaces as ``+``. ``SpaceEncoding.FIRST`` rewrites only the
    first ``%20``; ``SpaceEncoding.ALL`` rewrites every space. Both forms
    decode to the same SQL on a form-decoding endpoint.
    """

    encoded = encode_uri_component(sql)
    if SpaceEncoding(mode) is SpaceEncoding.ALL:
        return encoded.replace("%20", "+")
    return encoded.replace("%20", "+", 1)


def decode_query(encoded: str) -> str:
    """Decode a ``qry`` value as the REST endpoint does."""

    return unquote_plus(encoded)


__all__ = [
    "SpaceEncoding",
    "decode_query",
    "encode_query",
    "encode_uri_component",
]
