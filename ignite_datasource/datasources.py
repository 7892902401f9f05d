"""Data source configuration utilities for the Ignite data source."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import TypeAdapter, ValidationError

from .encoding import SpaceEncoding
from .errors import IgniteConfigurationError
from .ignite import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_TIMEOUT,
    PASSWORD_ENV_KEY,
    TLS_CA_CERT_ENV_KEY,
    TLS_CLIENT_CERT_ENV_KEY,
    TLS_CLIENT_KEY_ENV_KEY,
    URL_ENV_KEY,
    USER_ENV_KEY,
    IgniteSettings,
)
from .models import IgniteDataSourceConfig

logger = logging.getLogger(__name__)


class DataSourceConfigError(RuntimeError):
    """Raised when a data source definition cannot be resolved."""


ENV_PATTERNS = (
    re.compile(r"^\$\{env:(?P<name>[A-Z0-9_]+)\}$"),
    re.compile(r"^env:(?P<name>[A-Z0-9_]+)$"),
)
DATASOURCE_EXTENSIONS = (".yaml", ".yml")
DATASOURCE_DIRECTORY = "datasources"
DATASOURCE_ADAPTER = TypeAdapter(IgniteDataSourceConfig)


@dataclass(frozen=True)
class ResolvedDataSource:
    """Runtime view of a data source after applying environment expansion."""

    name: str
    settings: IgniteSettings
    config: IgniteDataSourceConfig | None = None
    source_path: Path | None = None


def _expand_env_value(
    raw: str | None,
    *,
    source: Path,
    datasource: str,
) -> str | None:
    if raw is None:
        return None

    text = raw.strip()
    if not text:
        return None

    for pattern in ENV_PATTERNS:
        match = pattern.match(text)
        if match:
            env_name = match.group("name")
            resolved = os.getenv(env_name)
            if resolved is None:
                msg = (
                    f"Environment variable '{env_name}' required by data source '{datasource}'"
                    f" is not set ({source})."
                )
                raise DataSourceConfigError(msg)
            return resolved

    return text


def _ancestor_directories(start: Path) -> list[Path]:
    current = start
    ancestors: list[Path] = [current]
    while current.parent != current:
        current = current.parent
        ancestors.append(current)
    return ancestors


def _candidate_paths(reference: str, search_from: Path) -> list[Path]:
    ref_path = Path(reference)
    start = search_from if search_from.is_dir() else search_from.parent
    ancestors = _ancestor_directories(start)
    candidates: list[Path] = []
    seen: set[Path] = set()

    def _register(path: Path) -> None:
        try:
            resolved = path.resolve()
        except OSError:
            resolved = path
        if resolved in seen:
            return
        seen.add(resolved)
        candidates.append(resolved)

    if ref_path.suffix in DATASOURCE_EXTENSIONS or ref_path.name != reference:
        if ref_path.is_absolute():
            _register(ref_path)
        else:
            for base in ancestors:
                _register(base / ref_path)
        return candidates

    for base in ancestors:
        data_dir = base / DATASOURCE_DIRECTORY
        if data_dir.is_dir():
            for ext in DATASOURCE_EXTENSIONS:
                _register(data_dir / f"{reference}{ext}")
        for ext in DATASOURCE_EXTENSIONS:
            _register(base / f"{reference}{ext}")

    return candidates


def _load_raw_yaml(path: Path) -> dict:
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to read data source definition: {path}"
        raise DataSourceConfigError(msg) from exc
    try:
        payload = yaml.safe_load(contents) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML syntax in data source: {path}"
        raise DataSourceConfigError(msg) from exc
    if not isinstance(payload, dict):
        msg = f"Expected mapping at data source root: {path}"
        raise DataSourceConfigError(msg)
    return payload


def load_datasource_config(path: Path) -> IgniteDataSourceConfig:
    payload = _load_raw_yaml(path)
    try:
        return DATASOURCE_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        msg = f"Data source configuration validation failed for {path}: {exc}"
        raise DataSourceConfigError(msg) from exc


def _resolve_field(
    value: str | None,
    *,
    field: str,
    source: Path,
    datasource: str,
    env_key: str | None,
    required: bool,
) -> str | None:
    resolved = _expand_env_value(value, source=source, datasource=datasource)
    if resolved is None and env_key:
        resolved = os.getenv(env_key) or None
    if resolved is None and required:
        target = env_key if env_key else field
        msg = (
            f"Data source '{datasource}' missing required field '{field}' ({source})."
            f" Set it explicitly or provide environment variable '{target}'."
        )
        raise DataSourceConfigError(msg)
    return resolved


def build_settings(
    config: IgniteDataSourceConfig,
    *,
    source: Path,
    datasource: str,
) -> IgniteSettings:
    """Turn a validated definition into connection settings."""

    url = _resolve_field(
        config.url,
        field="url",
        source=source,
        datasource=datasource,
        env_key=URL_ENV_KEY,
        required=True,
    )

    user: str | None = None
    password: str | None = None
    if config.user_auth:
        user = _resolve_field(
            config.user,
            field="user",
            source=source,
            datasource=datasource,
            env_key=USER_ENV_KEY,
            required=True,
        )
        password = _resolve_field(
            config.password,
            field="password",
            source=source,
            datasource=datasource,
            env_key=PASSWORD_ENV_KEY,
            required=False,
        )

    tls_ca_cert = _resolve_field(
        config.tls_ca_cert,
        field="tlsCaCert",
        source=source,
        datasource=datasource,
        env_key=TLS_CA_CERT_ENV_KEY,
        required=False,
    )
    tls_client_cert: str | None = None
    tls_client_key: str | None = None
    if config.tls_auth:
        tls_client_cert = _resolve_field(
            config.tls_client_cert,
            field="tlsClientCert",
            source=source,
            datasource=datasource,
            env_key=TLS_CLIENT_CERT_ENV_KEY,
            required=True,
        )
        tls_client_key = _resolve_field(
            config.tls_client_key,
            field="tlsClientKey",
            source=source,
            datasource=datasource,
            env_key=TLS_CLIENT_KEY_ENV_KEY,
            required=False,
        )

    if config.partition_awareness:
        logger.debug("Data source '%s' requests partition awareness; routing is external", datasource)

    return IgniteSettings(
        url=url or "",
        page_size=config.page_size or DEFAULT_PAGE_SIZE,
        timeout=config.timeout or DEFAULT_TIMEOUT,
        user=user,
        password=password,
        tls_skip_verify=config.tls_skip_verify,
        tls_ca_cert=tls_ca_cert,
        tls_client_cert=tls_client_cert,
        tls_client_key=tls_client_key,
        space_encoding=SpaceEncoding(config.space_encoding or SpaceEncoding.FIRST.value),
    )


def resolve_datasource(
    reference: str | None,
    *,
    search_from: Path,
) -> ResolvedDataSource:
    """Locate and resolve a data source by name or path.

    Without a reference the connection is taken from ``IGNITE_DS_*``
    environment variables.
    """

    normalized = (reference or "").strip()
    if not normalized:
        try:
            settings = IgniteSettings.from_env()
        except IgniteConfigurationError as exc:
            raise DataSourceConfigError(str(exc)) from exc
        return ResolvedDataSource(name="env", settings=settings)

    candidates = _candidate_paths(normalized, search_from)
    target: Path | None = None
    for candidate in candidates:
        if candidate.exists():
            target = candidate
            break

    if target is None:
        if candidates:
            msg = f"Data source definition not found: {candidates[0]}"
        else:
            msg = (
                f"Unable to locate data source '{normalized}' from {search_from}."
                f" Provide a name (searched under {DATASOURCE_DIRECTORY}/) or a YAML path."
            )
        raise DataSourceConfigError(msg)

    config = load_datasource_config(target)
    settings = build_settings(config, source=target, datasource=normalized)
    logger.debug("Resolved data source '%s' from %s", normalized, target)

    return ResolvedDataSource(
        name=normalized,
        settings=settings,
        config=config,
        source_path=target,
    )


__all__ = [
    "DataSourceConfigError",
    "ResolvedDataSource",
    "build_settings",
    "load_datasource_config",
    "resolve_datasource",
]
