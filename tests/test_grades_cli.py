# ABOUTME: Verifies the grades CLI commands against the bundled sample export.
# ABOUTME: Runs the Typer app in-process; no database connection is needed.

from pathlib import Path

from typer.testing import CliRunner

from src.grades import cli

REPO_ROOT = Path(__file__).resolve().parents[1]
LOCAL_CONFIG = REPO_ROOT / "configs" / "grades_local.yaml"

runner = CliRunner()


def test_cli_registers_expected_commands():
    command_names = {cmd.name or cmd.callback.__name__ for cmd in cli.app.registered_commands}
    assert {"learner-avg", "stats", "export", "ensure-indexes"} <= command_names


def test_learner_avg_prints_one_row_per_class():
    result = runner.invoke(cli.app, ["learner-avg", "--learner-id", "1", "--config", str(LOCAL_CONFIG)])

    assert result.exit_code == 0, result.output
    assert "339" in result.output
    assert "88.60" in result.output
    assert "67.20" in result.output


def test_learner_avg_unknown_learner_exits_nonzero():
    result = runner.invoke(cli.app, ["learner-avg", "--learner-id", "999", "--config", str(LOCAL_CONFIG)])
    assert result.exit_code == 1
    assert "No grade records" in result.output


def test_stats_for_class_scope():
    result = runner.invoke(cli.app, ["stats", "--class-id", "108", "--config", str(LOCAL_CONFIG)])

    assert result.exit_code == 0, result.output
    assert "class 108" in result.output
    assert "100.00%" in result.output


def test_ensure_indexes_rejects_file_source():
    result = runner.invoke(cli.app, ["ensure-indexes", "--config", str(LOCAL_CONFIG)])
    assert result.exit_code == 1


def test_missing_config_exits_nonzero(tmp_path):
    result = runner.invoke(cli.app, ["stats", "--config", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 1


def test_malformed_config_exits_nonzero(tmp_path):
    config_path = tmp_path / "grades.yaml"
    config_path.write_text("source: [unclosed\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["stats", "--config", str(config_path)])

    assert result.exit_code == 1


def test_export_writes_reports(tmp_path):
    result = runner.invoke(cli.app, ["export", "--output-dir", str(tmp_path), "--config", str(LOCAL_CONFIG)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "cohort_stats.json").exists()
    assert (tmp_path / "learner_averages.parquet").exists()
