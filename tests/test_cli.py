"""Tests for the command-line frontend."""

import json

import pytest

from validator_suite import cli

from .conftest import write_files


class TestValidateList:
    """Test validate-list."""

    def test_lists_validators_by_tier(self, capsys):
        assert cli.main(["validate-list"]) == 0
        out = capsys.readouterr().out
        assert "Tier 1: Critical Quality" in out
        assert "Tier 2: Development Workflow" in out
        for name in ("code-quality", "spec-adherence", "security", "branch-strategy", "testing", "documentation"):
            assert name in out


class TestValidate:
    """Test single-validator runs and exit codes."""

    def test_clean_project_exits_zero(self, temp_dir, capsys):
        write_files(temp_dir, {"app.py": "x = 1\n"})
        assert cli.main(["validate", "security", str(temp_dir), "--no-save", "--workers", "1"]) == 0
        assert "[PASS] security  score 100%" in capsys.readouterr().out

    def test_failing_project_exits_one(self, temp_dir, capsys):
        write_files(temp_dir, {"app.py": 'password = "hunter2"\n'})
        output = temp_dir / "reports" / "security.json"

        code = cli.main(["validate", "security", str(temp_dir), "--output", str(output)])

        assert code == 1
        record = json.loads(output.read_text())
        assert record["kind"] == "validator"
        assert record["report"]["overall_status"] == "FAIL"

    def test_json_output(self, temp_dir, capsys):
        write_files(temp_dir, {"app.py": "x = 1\n"})
        cli.main(["validate", "security", str(temp_dir), "--json", "--no-save"])
        record = json.loads(capsys.readouterr().out)
        assert record["report"]["validator"] == "security"

    def test_default_report_location(self, temp_dir, monkeypatch):
        write_files(temp_dir, {"app.py": "x = 1\n"})
        monkeypatch.chdir(temp_dir)
        cli.main(["validate", "security", "."])
        assert (temp_dir / "validation-reports" / "security.json").is_file()

    def test_unknown_validator_exits_two(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["validate", "nope", str(temp_dir)])
        assert excinfo.value.code == 2
        assert "Unknown validator 'nope'" in capsys.readouterr().err

    def test_missing_root_exits_two(self, temp_dir, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["validate", "security", str(temp_dir / "absent")])
        assert excinfo.value.code == 2
        assert "Not a directory" in capsys.readouterr().err

    def test_bad_config_exits_two(self, temp_dir):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["validate", "security", str(temp_dir), "--config", str(temp_dir / "missing.json")])
        assert excinfo.value.code == 2


class TestGroupedCommands:
    """Test tier and combined runs."""

    def test_validate_tier1(self, temp_dir, capsys):
        write_files(temp_dir, {"app.py": '"""App."""\n\n\ndef main():\n    """Run."""\n    return 0\n'})
        assert cli.main(["validate-tier1", str(temp_dir), "--no-save"]) == 0
        assert "Tier 1: Critical Quality" in capsys.readouterr().out

    def test_validate_all_without_git_fails(self, temp_dir, capsys):
        write_files(temp_dir, {"app.py": "x = 1\n"})
        output = temp_dir / "all.json"
        assert cli.main(["validate-all", str(temp_dir), "--output", str(output)]) == 1
        record = json.loads(output.read_text())
        assert record["kind"] == "combined"
        assert record["report"]["state"] == "DONE"

    def test_shortcut_entry_points(self, temp_dir, monkeypatch):
        write_files(temp_dir, {"app.py": "x = 1\n"})
        monkeypatch.setattr("sys.argv", ["validate", "security", str(temp_dir), "--no-save"])
        assert cli.validate_main() == 0
        monkeypatch.setattr("sys.argv", ["validate-list"])
        assert cli.validate_list_main() == 0
