"""Tests for the command-line interface."""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import cli
import config

SCENARIO = '{"members":[{"status":"Up"},{"status":"Up"},{"status":"Down"},{"status":"Bogus"}]}'


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for name in ("AKKA_SCRAPE_URI", "AKKA_TIMEOUT", "AKKA_EXPORTER_LISTEN_ADDRESS", "AKKA_EXPORTER_LOG_FILE", "AKKA_EXPORTER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    config.reset()
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    config.reset()


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert "akka_cluster_http_management_exporter, version" in capsys.readouterr().out


def test_collect_json(upstream, capsys: pytest.CaptureFixture[str]) -> None:
    upstream.reply(SCENARIO)
    rc = cli.main(["collect", "--json", "--akka.scrape-uri", upstream.url, "--akka.timeout", "2s"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["up"] == 1
    assert out["members"] == {"Up": 2, "Down": 1, "Joining": 0, "Leaving": 0, "Exiting": 0, "Removed": 0}


def test_collect_json_unreachable(refused_url: str, capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli.main(["collect", "--json", "--akka.scrape-uri", refused_url, "--akka.timeout", "1s"])
    assert rc == 1
    out = json.loads(capsys.readouterr().out)
    assert out["up"] == 0
    assert set(out["members"].values()) == {0}
    assert "error" in out


def test_collect_table(upstream, capsys: pytest.CaptureFixture[str]) -> None:
    upstream.reply(SCENARIO)
    assert cli.main(["collect", "--akka.scrape-uri", upstream.url]) == 0
    out = capsys.readouterr().out
    assert "Joining" in out
    assert "up" in out


def test_collect_rejects_ftp_before_any_fetch(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["collect", "--json", "--akka.scrape-uri", "ftp://localhost:19999/members"]) == 1
    assert capsys.readouterr().out == ""


def test_serve_rejects_ftp() -> None:
    assert cli.main(["serve", "--akka.scrape-uri", "ftp://localhost:19999/members"]) == 1


def test_validate_config(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["validate-config"]) == 0
    out = capsys.readouterr().out
    assert "akka.scrape_uri: http://localhost:19999/members" in out
    assert "web.listen_address: :9110" in out


def test_validate_config_from_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "exporter.yaml"
    path.write_text("akka:\n  timeout: soon\n", encoding="utf-8")
    assert cli.main(["validate-config", "--config", str(path)]) == 1
    assert "invalid duration" in capsys.readouterr().err
