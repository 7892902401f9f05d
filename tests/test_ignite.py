import httpx
import pytest

from ignite_datasource.encoding import SpaceEncoding
from ignite_datasource.errors import IgniteConfigurationError, IgniteTransportError
from ignite_datasource.ignite import DEFAULT_PAGE_SIZE, IgniteClient, IgniteSettings, RestEnvelope


def test_settings_from_env_missing_url() -> None:
    with pytest.raises(IgniteConfigurationError):
        IgniteSettings.from_env({})


def test_settings_from_env_defaults() -> None:
    settings = IgniteSettings.from_env({"IGNITE_DS_URL": "http://localhost:8080/"})

    assert settings.url == "http://localhost:8080/"
    assert settings.base_url == "http://localhost:8080"
    assert settings.page_size == DEFAULT_PAGE_SIZE == 1024
    assert settings.space_encoding is SpaceEncoding.FIRST
    assert settings.user is None
    assert settings.ssl_verify() is True


def test_settings_from_env_overrides() -> None:
    settings = IgniteSettings.from_env(
        {
            "IGNITE_DS_URL": "https://grid:8443",
            "IGNITE_DS_PAGE_SIZE": "50",
            "IGNITE_DS_TIMEOUT": "2.5",
            "IGNITE_DS_USER": "ignite",
            "IGNITE_DS_PASSWORD": "secret",
            "IGNITE_DS_TLS_SKIP_VERIFY": "true",
            "IGNITE_DS_SPACE_ENCODING": "ALL",
        }
    )

    assert settings.page_size == 50
    assert settings.timeout == 2.5
    assert settings.user == "ignite"
    assert settings.password == "secret"
    assert settings.space_encoding is SpaceEncoding.ALL
    assert settings.ssl_verify() is False


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("IGNITE_DS_PAGE_SIZE", "many"),
        ("IGNITE_DS_PAGE_SIZE", "0"),
        ("IGNITE_DS_TIMEOUT", "-1"),
        ("IGNITE_DS_SPACE_ENCODING", "some"),
    ],
)
def test_settings_from_env_rejects_invalid_values(key: str, value: str) -> None:
    with pytest.raises(IgniteConfigurationError):
        IgniteSettings.from_env({"IGNITE_DS_URL": "http://localhost:8080", key: value})


def test_missing_tls_material_is_a_configuration_error(tmp_path) -> None:
    settings = IgniteSettings(url="https://grid", tls_ca_cert=str(tmp_path / "missing.pem"))

    with pytest.raises(IgniteConfigurationError):
        settings.ssl_verify()


@pytest.mark.parametrize(
    ("payload", "succeeded"),
    [
        ({"successStatus": 0, "error": "", "response": 1}, True),
        ({"successStatus": 0, "error": None, "response": 1}, False),
        ({"successStatus": 1, "error": "", "response": None}, False),
        ({"successStatus": 0, "error": "Cache not found", "response": None}, False),
    ],
)
def test_envelope_success_rule(payload, succeeded: bool) -> None:
    assert RestEnvelope.model_validate(payload).succeeded is succeeded


@pytest.mark.asyncio
async def test_execute_fields_query_builds_command_url(fake_ignite, settings, make_fields_response) -> None:
    sql = "select * from person"
    fake_ignite.query_responses[sql] = make_fields_response([("NAME", "java.lang.String")], [["Alice"]])

    async with IgniteClient(settings, transport=fake_ignite.transport) as client:
        envelope = await client.execute_fields_query("person", sql)

    assert envelope.succeeded
    (request,) = fake_ignite.requests
    assert request.url.host == "ignite.test"
    assert request.url.path == "/ignite"
    assert request.url.query == b"cmd=qryfldexe&cacheName=person&pageSize=1024&qry=select+*%20from%20person"
    assert request.url.params["qry"] == sql


@pytest.mark.asyncio
async def test_page_size_and_space_encoding_follow_settings(fake_ignite) -> None:
    settings = IgniteSettings(url="http://ignite.test:8080", page_size=10, space_encoding=SpaceEncoding.ALL)

    async with IgniteClient(settings, transport=fake_ignite.transport) as client:
        await client.execute_fields_query("person", "select * from person")

    (request,) = fake_ignite.requests
    assert request.url.params["pageSize"] == "10"
    assert b"qry=select+*+from+person" in request.url.query


@pytest.mark.asyncio
async def test_user_credentials_are_appended(fake_ignite) -> None:
    settings = IgniteSettings(url="http://ignite.test:8080", user="ignite", password="p&ss")

    async with IgniteClient(settings, transport=fake_ignite.transport) as client:
        await client.version()

    (request,) = fake_ignite.requests
    assert request.url.params["user"] == "ignite"
    assert request.url.params["password"] == "p&ss"


@pytest.mark.asyncio
async def test_connection_failure_raises_transport_error(fake_ignite, settings) -> None:
    fake_ignite.unreachable.add("version")

    async with IgniteClient(settings, transport=fake_ignite.transport) as client:
        with pytest.raises(IgniteTransportError, match="Connection refused"):
            await client.version()


@pytest.mark.asyncio
async def test_non_200_and_non_json_responses_raise(settings) -> None:
    responses = iter(
        [
            httpx.Response(500, text="boom"),
            httpx.Response(200, text="<html>not json</html>"),
            httpx.Response(200, json=["not", "an", "envelope"]),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    async with IgniteClient(settings, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(IgniteTransportError, match="500 boom"):
            await client.version()
        with pytest.raises(IgniteTransportError, match="non-JSON"):
            await client.version()
        with pytest.raises(IgniteTransportError, match="envelope"):
            await client.version()
