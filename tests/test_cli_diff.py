"""Tests for `revdiff files`, `revdiff unit` and the utility commands."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from revdiff import __version__
from revdiff.cli import cli as cli_module
from revdiff.core.config import GlobalConfig


def _run_cli(args: list[str], input: str | None = None):
    runner = CliRunner()
    return runner.invoke(cli_module.cli, args, input=input)


@pytest.fixture
def config_files(isolated_config):
    project = Path.cwd()
    (project / "old.txt").write_text("a\nb\nc\n")
    (project / "new.txt").write_text("a\nx\nc\n")
    return project


class TestFilesCommand:
    def test_unified_output(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "-u"])

        assert result.exit_code == 0, result.output
        assert result.output == (
            "--- old.txt\n+++ new.txt\n@@ -1,3 +1,3 @@\n a\n-b\n+x\n c\n"
        )

    def test_custom_labels(self, config_files):
        result = _run_cli(
            ["files", "old.txt", "new.txt", "-u", "--old-label", "prod/web/1", "--new-label", "prod/web/2"]
        )

        assert result.output.splitlines()[:2] == ["--- prod/web/1", "+++ prod/web/2"]

    def test_unified_colorized(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "-uc"])

        assert result.exit_code == 0
        assert "\x1b[31m-b\x1b[0m" in result.output
        assert "\x1b[32m+x\x1b[0m" in result.output

    def test_numbered_output_is_plain_when_not_a_terminal(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt"])

        assert result.exit_code == 0
        assert result.output == "1:   a\n2: -b\n2: +x\n3:   c\n"

    def test_numbered_color_forced(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "--color"])

        assert "\x1b[94m1: \x1b[0m" in result.output

    def test_no_color_wins(self, config_files, isolated_config):
        isolated_config.save_global_config(GlobalConfig(color="always"))

        result = _run_cli(["files", "old.txt", "new.txt", "-u", "--no-color"])

        assert "\x1b[" not in result.output

    def test_identical_files_unified_prints_nothing(self, config_files):
        result = _run_cli(["files", "old.txt", "old.txt", "-u"])

        assert result.exit_code == 0
        assert result.output == ""

    def test_configured_unified_and_numbered_override(self, config_files, isolated_config):
        isolated_config.save_global_config(GlobalConfig(unified=True, context_lines=0))

        unified = _run_cli(["files", "old.txt", "new.txt"])
        numbered = _run_cli(["files", "old.txt", "new.txt", "--numbered"])

        assert unified.output == "--- old.txt\n+++ new.txt\n@@ -2,1 +2,1 @@\n-b\n+x\n"
        assert numbered.output.startswith("1:   a\n")

    def test_context_option(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "-u", "-U", "0"])

        assert result.output.splitlines()[2:] == ["@@ -2,1 +2,1 @@", "-b", "+x"]

    def test_legacy_hunk_headers(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "-u", "--hunk-header", "legacy"])

        assert "@@ -1,3 +2,1 @@" in result.output

    def test_configured_hunk_header_style(self, config_files, isolated_config):
        isolated_config.save_global_config(GlobalConfig(hunk_header_style="legacy"))

        configured = _run_cli(["files", "old.txt", "new.txt", "-u"])
        overridden = _run_cli(["files", "old.txt", "new.txt", "-u", "--hunk-header", "canonical"])

        assert "@@ -1,3 +2,1 @@" in configured.output
        assert "@@ -1,3 +1,3 @@" in overridden.output

    def test_unknown_hunk_header_style_rejected(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "-u", "--hunk-header", "gnu"])

        assert result.exit_code == 2
        assert "canonical" in result.output

    def test_stdin_side(self, config_files):
        result = _run_cli(["files", "old.txt", "-", "-u"], input="a\nb\nc\nd\n")

        assert result.exit_code == 0
        assert result.output.splitlines()[2:] == ["@@ -1,3 +1,4 @@", " a", " b", " c", "+d"]

    def test_both_sides_from_stdin_rejected(self, config_files):
        result = _run_cli(["files", "-", "-"], input="")

        assert result.exit_code == 2
        assert "Only one side can be read from stdin" in result.output

    def test_base64_inputs(self, config_files):
        Path("old.b64").write_text(base64.b64encode(b"key: 1\n").decode() + "\n")
        Path("new.b64").write_text(base64.b64encode(b"key: 2\n").decode() + "\n")

        result = _run_cli(["files", "old.b64", "new.b64", "--base64", "-u"])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[3:] == ["-key: 1", "+key: 2"]

    def test_bad_base64_is_reported(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "--base64"])

        assert result.exit_code == 1
        assert "failed to decode old.txt data" in result.output

    def test_missing_file(self, config_files):
        result = _run_cli(["files", "nope.txt", "new.txt"])

        assert result.exit_code != 0
        assert "nope.txt" in result.output

    def test_stat(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "--stat"])

        assert result.output == "old.txt -> new.txt: 1 additions and 1 removals\n"

    def test_json(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "--json"])

        payload = json.loads(result.output)
        assert [item["type"] for item in payload] == ["equal", "delete", "insert", "equal"]

    def test_stat_and_json_conflict(self, config_files):
        result = _run_cli(["files", "old.txt", "new.txt", "--stat", "--json"])

        assert result.exit_code == 2
        assert "cannot be used together" in result.output

    def test_log_file(self, config_files, tmp_path):
        log_file = tmp_path / "logs" / "revdiff.log"

        result = _run_cli(["--log-file", str(log_file), "files", "old.txt", "new.txt"])

        assert result.exit_code == 0
        assert "[cli] Diffing files" in log_file.read_text()


class TestUnitCommand:
    @pytest.fixture
    def store(self, isolated_config, tmp_path, write_unit):
        root = tmp_path / "store"
        write_unit(root, "prod", "web", head=3, live=2, revisions={
            1: "replicas: 1\n",
            2: "replicas: 2\n",
            3: "replicas: 3\n",
        })
        return root

    def test_live_vs_head(self, store):
        result = _run_cli(["unit", "web", "--space", "prod", "--store", str(store), "-u"])

        assert result.exit_code == 0, result.output
        assert result.output == (
            "--- prod/web/2\n+++ prod/web/3\n@@ -1,1 +1,1 @@\n-replicas: 2\n+replicas: 3\n"
        )

    def test_positional_revisions(self, store):
        result = _run_cli(["unit", "web", "1", "3", "--space", "prod", "--store", str(store), "-u"])

        assert result.output.splitlines()[:2] == ["--- prod/web/1", "+++ prod/web/3"]

    def test_flag_revisions(self, store):
        result = _run_cli(["unit", "web", "--from", "1", "--space", "prod", "--store", str(store), "-u"])

        assert result.output.splitlines()[:2] == ["--- prod/web/1", "+++ prod/web/3"]

    def test_mixing_positional_and_flags(self, store):
        result = _run_cli(["unit", "web", "1", "--to", "2", "--space", "prod", "--store", str(store)])

        assert result.exit_code == 2
        assert "cannot mix positional arguments with --from/--to flags" in result.output

    def test_invalid_reference(self, store):
        result = _run_cli(["unit", "web", "tip", "--space", "prod", "--store", str(store)])

        assert result.exit_code == 1
        assert "invalid revision reference: tip" in result.output

    def test_space_and_store_from_config(self, store, isolated_config):
        isolated_config.save_global_config(GlobalConfig(default_space="prod", store_path=str(store)))

        result = _run_cli(["unit", "web", "--stat"])

        assert result.exit_code == 0, result.output
        assert result.output == "prod/web/2 -> prod/web/3: 1 additions and 1 removals\n"

    def test_missing_space(self, store):
        result = _run_cli(["unit", "web", "--store", str(store)])

        assert result.exit_code == 2
        assert "No space given" in result.output

    def test_unknown_unit(self, store):
        result = _run_cli(["unit", "api", "--space", "prod", "--store", str(store)])

        assert result.exit_code == 1
        assert "failed to get unit api" in result.output


def test_config_command(isolated_config):
    isolated_config.save_global_config(GlobalConfig(default_space="prod", context_lines=5))

    result = _run_cli(["config"])

    assert result.exit_code == 0
    assert "Context lines: 5" in result.output
    assert "Default space: prod" in result.output
    assert "line_number: bright_blue" in result.output


def test_version_command():
    result = _run_cli(["version"])

    assert result.exit_code == 0
    assert f"Revdiff version {__version__}" in result.output


def test_version_option():
    result = _run_cli(["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
