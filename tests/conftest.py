from __future__ import annotations

from typing import Any

import httpx
import pytest

from ignite_datasource import IgniteSettings

BASE_URL = "http://ignite.test:8080"


class FakeIgnite:
    """In-memory stand-in for the Ignite REST endpoint."""

    def __init__(self) -> None:
        self.caches: set[str] = set()
        self.query_responses: dict[str, Any] = {}
        self.version_payload: Any = {"successStatus": 0, "error": "", "response": "2.16.0"}
        self.unreachable: set[str] = set()
        self.requests: list[httpx.Request] = []

    @property
    def commands(self) -> list[str | None]:
        return [request.url.params.get("cmd") for request in self.requests]

    def requests_for(self, command: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.params.get("cmd") == command]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        command = params.get("cmd")

        if command in self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        if command == "size":
            name = params.get("cacheName")
            if name in self.caches:
                return httpx.Response(200, json={"successStatus": 0, "error": "", "response": 3})
            return httpx.Response(
                200,
                json={"successStatus": 1, "error": f"Failed to find cache: {name}", "response": None},
            )

        if command == "qryfldexe":
            payload = self.query_responses.get(params.get("qry", ""))
            if payload is None:
                return httpx.Response(
                    200,
                    json={"successStatus": 1, "error": "Failed to parse query.", "response": None},
                )
            return httpx.Response(200, json=payload)

        if command == "version":
            return httpx.Response(200, json=self.version_payload)

        return httpx.Response(404, text="Unknown command")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def fields_response(fields: list[tuple[str, str]], items: list[list[Any]]) -> dict[str, Any]:
    return {
        "successStatus": 0,
        "error": "",
        "response": {
            "fieldsMetadata": [
                {"fieldName": name, "fieldTypeName": type_name, "schemaName": "PUBLIC", "typeName": "PERSON"}
                for name, type_name in fields
            ],
            "items": items,
            "last": True,
            "queryId": 1,
        },
    }


@pytest.fixture()
def fake_ignite() -> FakeIgnite:
    return FakeIgnite()


@pytest.fixture()
def settings() -> IgniteSettings:
    return IgniteSettings(url=BASE_URL)


@pytest.fixture()
def make_fields_response():
    return fields_response
