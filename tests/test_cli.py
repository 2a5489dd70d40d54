import json

from typer.testing import CliRunner

from cli import app

runner = CliRunner()


def test_demo_table():
    result = runner.invoke(app, ["demo", "--kind", "x", "--payload", "hi"])

    assert result.exit_code == 0, result.output
    assert "partial failure" in result.output
    assert "handler log: ['hi']" in result.output


def test_demo_json(tmp_path):
    result = runner.invoke(
        app, ["demo", "--json", "--record-dir", str(tmp_path)]
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "dispatch_hub.jsonl").exists()
    line = (tmp_path / "dispatch_hub.jsonl").read_text(encoding="utf-8").strip()
    data = json.loads(line)
    assert data["invoked"] == 2
    assert data["failed"] == 1


def test_show_config():
    result = runner.invoke(app, ["show-config"])

    assert result.exit_code == 0, result.output
    assert '"validate_handlers": true' in result.output
