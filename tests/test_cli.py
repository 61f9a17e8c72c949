"""Tests for the modelhost command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from modelhost.cli import main
from modelhost.project import scaffold_project


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    return scaffold_project(tmp_path / "proj")


class TestNew:
    def test_scaffold(self, runner, tmp_path):
        target = tmp_path / "demo"
        result = runner.invoke(main, ["new", str(target)])
        assert result.exit_code == 0
        assert (target / "modelhost.yaml").exists()
        assert (target / "data" / "data1.txt").exists()
        assert (target / "scripts" / "script1.txt").exists()

    def test_refuses_existing_project(self, runner, project):
        result = runner.invoke(main, ["new", str(project)])
        assert result.exit_code != 0
        assert "already exists" in result.output


class TestModels:
    def test_lists_model2(self, runner):
        result = runner.invoke(main, ["models"])
        assert result.exit_code == 0
        assert "Model2" in result.output
        assert "netWealth" in result.output

    def test_json(self, runner):
        result = runner.invoke(main, ["models", "--json"])
        assert result.exit_code == 0
        entries = {e["name"]: e for e in json.loads(result.output)}
        bound = [b["name"] for b in entries["Model2"]["bound"]]
        assert bound[0] == "LL"
        assert "temp" not in bound


class TestInputs:
    def test_lists_project_files(self, runner, project):
        result = runner.invoke(main, ["inputs", "--project", str(project)])
        assert result.exit_code == 0
        assert "data1.txt" in result.output
        assert "script1.txt" in result.output

    def test_empty_project(self, runner, tmp_path):
        result = runner.invoke(main, ["inputs", "--project", str(tmp_path)])
        assert result.exit_code == 0
        assert result.output.count("(none)") == 2


class TestRun:
    def test_run_with_project_script(self, runner, project):
        result = runner.invoke(
            main,
            ["run", "Model2", "data1.txt", "--script", "script1.txt", "--project", str(project)],
        )
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0].startswith("LATA\t2015\t2016")
        assert lines[1].startswith("growthRatesProduction\t1\t1,03\t1,05")
        assert lines[4].startswith("production\t900,50\t927,52")
        names = [line.split("\t")[0] for line in lines]
        assert names[-2:] == ["savingsRatio", "averageNetWealth"]
        assert "t" not in names
        assert "LL" not in names

    def test_run_logs_events(self, runner, project):
        runner.invoke(main, ["run", "Model2", "data1.txt", "--project", str(project)])
        log = project / "logs" / "events.ndjson"
        types = [json.loads(line)["event_type"] for line in log.read_text().splitlines()]
        assert types[0] == "session_started"
        assert types[-1] == "report_rendered"

    def test_run_with_expr(self, runner, growth_data):
        result = runner.invoke(
            main, ["run", "Model2", str(growth_data), "--expr", "ratio = savings / production"]
        )
        assert result.exit_code == 0, result.output
        assert result.output.endswith("ratio\t0,10\t0,10\t0,10\n")

    def test_empty_expr_rejected(self, runner, growth_data):
        result = runner.invoke(main, ["run", "Model2", str(growth_data), "--expr", "  "])
        assert result.exit_code != 0
        assert "Script cannot be empty!" in result.output

    def test_table_output(self, runner, growth_data):
        result = runner.invoke(main, ["run", "Model2", str(growth_data), "--table"])
        assert result.exit_code == 0, result.output
        assert "netWealth" in result.output
        assert "2 400" in result.output
        assert "\t" not in result.output

    def test_unknown_model(self, runner, growth_data):
        result = runner.invoke(main, ["run", "Nope", str(growth_data)])
        assert result.exit_code == 1
        assert "Unknown model" in result.output

    def test_script_error(self, runner, growth_data):
        result = runner.invoke(main, ["run", "Model2", str(growth_data), "--expr", "x = ("])
        assert result.exit_code == 1
        assert "Script parse error" in result.output

    def test_missing_script_file(self, runner, growth_data, tmp_path):
        result = runner.invoke(
            main, ["run", "Model2", str(growth_data), "--script", str(tmp_path / "none.txt")]
        )
        assert result.exit_code == 1

    def test_model_failure(self, runner, write_data):
        result = runner.invoke(main, ["run", "Model2", str(write_data("LATA\n"))])
        assert result.exit_code == 1
        assert "Model 'Model2' failed" in result.output


class TestVersion:
    def test_version(self, runner):
        from modelhost import __version__

        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
