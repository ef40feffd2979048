"""Tests for the command line entrypoint."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def offline(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ACORN_CONFIG", raising=False)
    with patch("main.AzureAuth") as auth_class:
        auth_class.return_value = MagicMock()
        yield auth_class.return_value


def test_valid_name(offline):
    with patch("acorn.naming.generator.getpass.getuser", return_value="jdoe"):
        result = runner.invoke(app, ["valid-name", "cosmos", "--project-name", "My Shop"])

    assert result.exit_code == 0
    assert "my-shop-jdoe" in result.output


def test_unknown_kind():
    result = runner.invoke(app, ["valid-name", "vm", "--project-name", "shop"])

    assert result.exit_code != 0


def test_status_when_logged_out(offline):
    offline.get_email.return_value = ""

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "Not logged in" in result.output


def test_missing_config_file_is_reported():
    result = runner.invoke(app, ["status", "--config", "missing.yaml"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_malformed_selections_file_is_reported(offline, tmp_path):
    offline.get_email.return_value = "dev@example.com"
    offline.get_subscriptions = AsyncMock(return_value=[])
    selections_path = tmp_path / "selections.yaml"
    selections_path.write_text("engine: [unclosed\n")

    result = runner.invoke(app, ["plan", str(selections_path)])

    assert result.exit_code == 1
    assert "Error:" in result.output
