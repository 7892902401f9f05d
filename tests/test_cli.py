import json
from pathlib import Path

import pytest

from ignite_datasource.cli import run

URL = "http://ignite.test:8080"


def test_inline_query_prints_frames(fake_ignite, make_fields_response, capsys) -> None:
    fake_ignite.caches.add("person")
    fake_ignite.query_responses["select NAME, AGE from person"] = make_fields_response(
        [("NAME", "java.lang.String"), ("AGE", "java.lang.Integer")],
        [["Alice", 31], ["Bob", 42]],
    )

    exit_code = run(
        ["query", "--url", URL, "--cache", "person", "--sql", "select NAME, AGE from person"],
        transport=fake_ignite.transport,
    )

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output == {
        "data": [
            {
                "refId": "A",
                "fields": [
                    {"name": "NAME", "type": "string", "values": ["Alice", "Bob"]},
                    {"name": "AGE", "type": "number", "values": [31, 42]},
                ],
                "length": 2,
            }
        ]
    }


def test_targets_file_and_overrides(fake_ignite, make_fields_response, tmp_path: Path, capsys) -> None:
    fake_ignite.caches.add("person")
    fake_ignite.query_responses["select * from person"] = make_fields_response(
        [("NAME", "java.lang.String")], [["Alice"]]
    )
    targets = tmp_path / "targets.yaml"
    targets.write_text(
        "- refId: people\n  cacheName: person\n  format: table\n  query: select * from person\n",
        encoding="utf-8",
    )

    exit_code = run(
        [
            "query",
            "--url",
            URL,
            "--targets",
            str(targets),
            "--page-size",
            "5",
            "--space-encoding",
            "all",
        ],
        transport=fake_ignite.transport,
    )

    assert exit_code == 0
    (request,) = fake_ignite.requests_for("qryfldexe")
    assert request.url.params["pageSize"] == "5"
    assert b"qry=select+*+from+person" in request.url.query
    assert json.loads(capsys.readouterr().out)["data"][0]["refId"] == "people"


def test_missing_cache_is_reported(fake_ignite, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run(
            ["query", "--url", URL, "--cache", "missing_cache", "--sql", "select 1"],
            transport=fake_ignite.transport,
        )

    assert excinfo.value.code == 2
    assert "At least one of the provided caches does not exist." in capsys.readouterr().err
    assert fake_ignite.requests_for("qryfldexe") == []


def test_invalid_inline_target_is_reported(fake_ignite, capsys) -> None:
    with pytest.raises(SystemExit):
        run(
            ["query", "--url", URL, "--cache", "person", "--sql", "select 1", "--format", "time_series"],
            transport=fake_ignite.transport,
        )

    assert "No valid query targets found." in capsys.readouterr().err
    assert fake_ignite.requests == []


def test_query_requires_cache_and_sql(fake_ignite) -> None:
    with pytest.raises(SystemExit):
        run(["query", "--url", URL, "--cache", "person"], transport=fake_ignite.transport)


def test_data_source_from_environment(fake_ignite, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setenv("IGNITE_DS_URL", URL)

    exit_code = run(["health"], transport=fake_ignite.transport)

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "success: Successfully connected to Apache Ignite."


def test_health_failure_exit_code(fake_ignite, capsys) -> None:
    fake_ignite.unreachable.add("version")

    exit_code = run(["health", "--url", URL], transport=fake_ignite.transport)

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("failure:")


def test_malformed_url_is_reported(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run(["query", "--url", "http://[::1", "--cache", "person", "--sql", "select 1"])

    assert excinfo.value.code == 2
    assert "Apache Ignite request failed" in capsys.readouterr().err
