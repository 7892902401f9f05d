from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IgniteDataSourceConfig(BaseModel):
    """Declarative configuration for connecting to an Apache Ignite REST endpoint."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: Literal["ignite"] = Field(default="ignite", description="Data source discriminator.")
    url: str | None = Field(
        default=None,
        description="Base URL of the Ignite node, e.g. http://localhost:8080, or an environment placeholder.",
    )
    page_size: int | None = Field(
        default=None,
        alias="pageSize",
        gt=0,
        description="Maximum number of rows requested per query execution.",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Transport timeout in seconds.",
    )
    space_encoding: Literal["first", "all"] | None = Field(
        default=None,
        alias="spaceEncoding",
        description="Encode only the first space of the SQL text as '+' ('first') or every space ('all').",
    )
    partition_awareness: bool = Field(
        default=False,
        alias="partitionAwareness",
        description="Recorded for parity with thin clients; request routing is handled outside this library.",
    )
    user_auth: bool = Field(
        default=False,
        alias="userAuth",
        description="Send user credentials with every REST request.",
    )
    user: str | None = Field(default=None, description="Username or environment placeholder.")
    password: str | None = Field(default=None, description="Password or environment placeholder.")
    tls_auth: bool = Field(
        default=False,
        alias="tlsAuth",
        description="Authenticate with the client certificate configured below.",
    )
    tls_skip_verify: bool = Field(
        default=False,
        alias="tlsSkipVerify",
        description="Skip verification of the server certificate chain and host name.",
    )
    tls_ca_cert: str | None = Field(
        default=None,
        alias="tlsCaCert",
        description="Path to the certificate authority bundle.",
    )
    tls_client_cert: str | None = Field(
        default=None,
        alias="tlsClientCert",
        description="Path to the client certificate (PEM).",
    )
    tls_client_key: str | None = Field(
        default=None,
        alias="tlsClientKey",
        description="Path to the client private key (PEM).",
    )

    @field_validator(
        "url",
        "user",
        "password",
        "tls_ca_cert",
        "tls_client_cert",
        "tls_client_key",
    )
    @classmethod
    def _normalize_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


__all__ = ["IgniteDataSourceConfig"]
