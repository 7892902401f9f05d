"""Apache Ignite REST connectivity helpers."""

from __future__ import annotations

import logging
import os
import ssl
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .encoding import SpaceEncoding, encode_query
from .errors import IgniteConfigurationError, IgniteTransportError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1024
DEFAULT_TIMEOUT = 30.0
REST_PATH = "/ignite"

URL_ENV_KEY = "IGNITE_DS_URL"
PAGE_SIZE_ENV_KEY = "IGNITE_DS_PAGE_SIZE"
TIMEOUT_ENV_KEY = "IGNITE_DS_TIMEOUT"
USER_ENV_KEY = "IGNITE_DS_USER"
PASSWORD_ENV_KEY = "IGNITE_DS_PASSWORD"
TLS_SKIP_VERIFY_ENV_KEY = "IGNITE_DS_TLS_SKIP_VERIFY"
TLS_CA_CERT_ENV_KEY = "IGNITE_DS_TLS_CA_CERT"
TLS_CLIENT_CERT_ENV_KEY = "IGNITE_DS_TLS_CLIENT_CERT"
TLS_CLIENT_KEY_ENV_KEY = "IGNITE_DS_TLS_CLIENT_KEY"
SPACE_ENCODING_ENV_KEY = "IGNITE_DS_SPACE_ENCODING"

TRUTHY = {"1", "true", "yes", "on"}


def _parse_positive_int(raw: str, *, name: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise IgniteConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise IgniteConfigurationError(f"{name} must be positive, got {value}.")
    return value


def _parse_positive_float(raw: str, *, name: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise IgniteConfigurationError(f"{name} must be a number, got {raw!r}.") from exc
    if value <= 0:
        raise IgniteConfigurationError(f"{name} must be positive, got {value}.")
    return value


def _parse_space_encoding(raw: str) -> SpaceEncoding:
    try:
        return SpaceEncoding(raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(item.value for item in SpaceEncoding)
        raise IgniteConfigurationError(
            f"{SPACE_ENCODING_ENV_KEY} must be one of {choices}, got {raw!r}."
        ) from exc


@dataclass
class IgniteSettings:
    """Connection settings for an Ignite node's REST endpoint."""

    url: str
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = DEFAULT_TIMEOUT
    user: str | None = None
    password: str | None = None
    tls_skip_verify: bool = False
    tls_ca_cert: str | None = None
    tls_client_cert: str | None = None
    tls_client_key: str | None = None
    space_encoding: SpaceEncoding = SpaceEncoding.FIRST

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "IgniteSettings":
        env = env if env is not None else os.environ
        url = (env.get(URL_ENV_KEY) or "").strip()
        if not url:
            raise IgniteConfigurationError(
                f"Missing Apache Ignite configuration: set {URL_ENV_KEY}."
            )

        page_size = DEFAULT_PAGE_SIZE
        if env.get(PAGE_SIZE_ENV_KEY):
            page_size = _parse_positive_int(env[PAGE_SIZE_ENV_KEY], name=PAGE_SIZE_ENV_KEY)

        timeout = DEFAULT_TIMEOUT
        if env.get(TIMEOUT_ENV_KEY):
            timeout = _parse_positive_float(env[TIMEOUT_ENV_KEY], name=TIMEOUT_ENV_KEY)

        space_encoding = SpaceEncoding.FIRST
        if env.get(SPACE_ENCODING_ENV_KEY):
            space_encoding = _parse_space_encoding(env[SPACE_ENCODING_ENV_KEY])

        return cls(
            url=url,
            page_size=page_size,
            timeout=timeout,
            user=env.get(USER_ENV_KEY) or None,
            password=env.get(PASSWORD_ENV_KEY) or None,
            tls_skip_verify=env.get(TLS_SKIP_VERIFY_ENV_KEY, "").strip().lower() in TRUTHY,
            tls_ca_cert=env.get(TLS_CA_CERT_ENV_KEY) or None,
            tls_client_cert=env.get(TLS_CLIENT_CERT_ENV_KEY) or None,
            tls_client_key=env.get(TLS_CLIENT_KEY_ENV_KEY) or None,
            space_encoding=space_encoding,
        )

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    def ssl_verify(self) -> bool | ssl.SSLContext:
        """Return the ``verify`` argument for httpx based on the TLS options."""

        if self.tls_skip_verify and not self.tls_client_cert:
            return False
        if not (self.tls_ca_cert or self.tls_client_cert):
            return True

        try:
            context = ssl.create_default_context(cafile=self.tls_ca_cert)
            if self.tls_skip_verify:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
            if self.tls_client_cert:
                context.load_cert_chain(self.tls_client_cert, keyfile=self.tls_client_key)
        except (OSError, ssl.SSLError) as exc:
            raise IgniteConfigurationError(f"Failed to load TLS material: {exc}") from exc
        return context


class RestEnvelope(BaseModel):
    """Common envelope wrapping every Ignite REST response."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success_status: int | None = Field(default=None, alias="successStatus")
    error: str | None = None
    response: Any = None
    session_token: str | None = Field(default=None, alias="sessionToken")

    @property
    def succeeded(self) -> bool:
        return self.success_status == 0 and self.error == ""


class IgniteClient:
    """Client for the command-style Ignite REST API (``/ignite?cmd=...``)."""

    def __init__(
        self,
        settings: IgniteSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            timeout=settings.timeout,
            verify=settings.ssl_verify(),
            transport=transport,
        )

    async def __aenter__(self) -> "IgniteClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def settings(self) -> IgniteSettings:
        return self._settings

    def _auth_suffix(self) -> str:
        if not self._settings.user:
            return ""
        suffix = "&user=" + quote(self._settings.user, safe="")
        if self._settings.password is not None:
            suffix += "&password=" + quote(self._settings.password, safe="")
        return suffix

    def build_url(self, command: str) -> str:
        """Join the base URL with a pre-encoded command string."""

        return f"{self._settings.base_url}{REST_PATH}?cmd={command}{self._auth_suffix()}"

    async def _get(self, command: str) -> RestEnvelope:
        url = self.build_url(command)
        logger.debug("GET %s%s?cmd=%s", self._settings.base_url, REST_PATH, command)
        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise IgniteTransportError(
                f"Apache Ignite request failed: {exc}"
            ) from exc

        if response.status_code != 200:
            raise IgniteTransportError(
                f"Apache Ignite request failed: {response.status_code} {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise IgniteTransportError("Apache Ignite returned a non-JSON response.") from exc

        try:
            return RestEnvelope.model_validate(payload)
        except ValidationError as exc:
            raise IgniteTransportError("Unexpected response envelope from Apache Ignite.") from exc

    async def cache_size(self, cache_name: str) -> RestEnvelope:
        """Issue ``cmd=size``; used to check that a cache exists."""

        return await self._get("size&cacheName=" + quote(cache_name, safe=""))

    async def execute_fields_query(self, cache_name: str, query: str) -> RestEnvelope:
        """Issue ``cmd=qryfldexe`` for the first page of *query*."""

        command = (
            "qryfldexe&cacheName="
            + quote(cache_name, safe="")
            + f"&pageSize={self._settings.page_size}"
            + "&qry="
            + encode_query(query, self._settings.space_encoding)
        )
        return await self._get(command)

    async def version(self) -> RestEnvelope:
        return await self._get("version")


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "IgniteClient",
    "IgniteSettings",
    "RestEnvelope",
]
