"""Tests for the command-line interface."""

import json

from typer.testing import CliRunner

from support_envelope.cli import app
from support_envelope.samples import SAMPLE_RESPONSES

runner = CliRunner()


def write_sample(tmp_path, name):
    path = tmp_path / f"{name}.json"
    path.write_text(json.dumps(SAMPLE_RESPONSES[name]["response"]))
    return path


def test_build_command_prints_envelope_json(tmp_path):
    path = write_sample(tmp_path, "ticketDraft")
    result = runner.invoke(app, ["build", str(path), "--run-id", "cli-1", "--workflow"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["state"]["phase"] == "ticketDraft"
    assert data["runId"] == "cli-1"
    assert data["sourceRefs"]["compiledFromWorkflow"] is True


def test_build_command_rejects_unreadable_input(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    result = runner.invoke(app, ["build", str(path)])

    assert result.exit_code == 1


def test_format_command_prints_channel_reply(tmp_path):
    path = write_sample(tmp_path, "finalTicket")
    result = runner.invoke(app, ["format", str(path), "--channel", "plain"])

    assert result.exit_code == 0
    assert "Ticket ID: TICKET-1700000000000-ab12c" in result.stdout


def test_format_command_rejects_unknown_channel(tmp_path):
    path = write_sample(tmp_path, "generic")
    result = runner.invoke(app, ["format", str(path), "--channel", "fax"])

    assert result.exit_code == 1


def test_demo_runs_every_scenario():
    result = runner.invoke(app, ["demo", "--channel", "telegram"])

    assert result.exit_code == 0
    for i in range(1, len(SAMPLE_RESPONSES) + 1):
        assert f"Demo Scenario #{i}:" in result.stdout


def test_schema_command():
    result = runner.invoke(app, ["schema"])

    assert result.exit_code == 0
    assert "Schema version:" in result.stdout
