"""Tests for the mjudge CLI.

Covers every command, --json output, and error exits via CliRunner.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from mjudge import __version__
from mjudge.cli import app

# NO_COLOR=1 prevents Rich from injecting ANSI codes inside option names,
# which breaks substring matching in CI (headless, no TTY).
# COLUMNS=200 prevents wrapping that could split a flag across lines.
runner = CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})


# ── Factories ──────────────────────────────────────────────────────


def _make_options_file(tmp_path: Path, **overrides) -> Path:
    data = {
        "scale": "standard",
        "options": [
            {"id": "a", "label": "Alpha", "counts": [0, 2, 9, 9, 0, 0, 0]},
            {"id": "b", "label": "Bravo", "counts": [0, 6, 6, 8, 0, 0, 0]},
            {"id": "c", "label": "Charlie", "counts": [0, 8, 6, 6, 0, 0, 0]},
            {"id": "d", "counts": {"Good": 2, "VeryGood": 3}},
        ],
    }
    data.update(overrides)
    path = tmp_path / "options.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture()
def options_file(tmp_path):
    return _make_options_file(tmp_path)


# ── Top level ─────────────────────────────────────────────────────


class TestTopLevel:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"mjudge {__version__}" in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("rank", "compare", "analyze", "strategies", "scales", "config"):
            assert command in result.output


# ── mjudge rank ───────────────────────────────────────────────────


class TestRank:
    def test_table(self, options_file):
        result = runner.invoke(app, ["rank", str(options_file)])
        assert result.exit_code == 0
        assert "Ranking (usual, standard scale)" in result.output
        assert "Alpha" in result.output
        assert "VeryGood (60.0%)" in result.output

    def test_json(self, options_file):
        result = runner.invoke(app, ["rank", str(options_file), "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        ranks = {row["option_id"]: row["rank"] for row in payload}
        assert ranks == {"d": 1, "b": 2, "c": 2, "a": 4}
        assert payload[0]["is_winner"] is True
        assert payload[1]["tied_with_option_ids"] == ["c"]
        assert "analysis" not in payload[0]

    def test_strategy_override(self, options_file):
        result = runner.invoke(
            app, ["rank", str(options_file), "--strategy", "majority-gauge", "--json"],
        )
        assert result.exit_code == 0
        ranks = {row["option_id"]: row["rank"] for row in json.loads(result.output)}
        assert ranks["a"] == 4

    def test_pairwise_resolution(self, options_file):
        result = runner.invoke(
            app, ["rank", str(options_file), "--resolution", "pairwise", "--json"],
        )
        assert result.exit_code == 0
        ranks = {row["option_id"]: row["rank"] for row in json.loads(result.output)}
        assert ranks == {"d": 1, "c": 2, "b": 3, "a": 4}

    def test_unknown_strategy(self, options_file):
        result = runner.invoke(app, ["rank", str(options_file), "--strategy", "borda"])
        assert result.exit_code == 1
        assert "Invalid option" in result.output
        assert "Choose from" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["rank", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "Error loading options" in result.output

    def test_malformed_counts(self, tmp_path):
        path = _make_options_file(tmp_path, options=[{"id": "x", "counts": [1, 2]}])
        result = runner.invoke(app, ["rank", str(path)])
        assert result.exit_code == 1
        assert "Expected 7 counts" in result.output

    def test_duplicate_ids(self, tmp_path):
        path = _make_options_file(
            tmp_path,
            options=[
                {"id": "x", "counts": {"Good": 1}},
                {"id": "x", "counts": {"Fair": 1}},
            ],
        )
        result = runner.invoke(app, ["rank", str(path)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error loading options" in result.output
        assert "Duplicate option id: 'x'" in result.output

    def test_broken_scale_presets(self, tmp_path, monkeypatch):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "scales.toml").write_text('[other]\nkey = "value"\n')
        monkeypatch.setattr("mjudge.judgment.registry._CONFIG_DIR", config_dir)
        path = _make_options_file(tmp_path)
        result = runner.invoke(app, ["analyze", str(path), "a"])
        assert result.exit_code == 1
        assert "Error loading options" in result.output
        assert "No [scales] section" in result.output

    def test_verbose_flag(self, options_file):
        result = runner.invoke(app, ["--verbose", "rank", str(options_file), "--json"])
        assert result.exit_code == 0


# ── mjudge compare ────────────────────────────────────────────────


class TestCompare:
    def test_trace(self, options_file):
        result = runner.invoke(app, ["compare", str(options_file), "b", "c"])
        assert result.exit_code == 0
        assert "b (A) vs c (B)" in result.output
        assert "Winner: c" in result.output
        assert "B_WINS" in result.output

    def test_majority_grade_step(self, options_file):
        result = runner.invoke(
            app, ["compare", str(options_file), "d", "a", "--strategy", "lexicographic"],
        )
        assert result.exit_code == 0
        assert "Winner: d" in result.output
        assert "majority grade" in result.output

    def test_unknown_option(self, options_file):
        result = runner.invoke(app, ["compare", str(options_file), "a", "zzz"])
        assert result.exit_code == 1
        assert "Option not found" in result.output
        assert "Available: a, b, c, d" in result.output


# ── mjudge analyze ────────────────────────────────────────────────


class TestAnalyze:
    def test_chain_and_scores(self, options_file):
        result = runner.invoke(app, ["analyze", str(options_file), "d"])
        assert result.exit_code == 0
        assert "VeryGood (60.0%)" in result.output
        assert "VeryGood:60.0|Good:100.0" in result.output
        assert "Truncation chain" in result.output
        assert "Opponents outweigh supporters" in result.output

    def test_empty_option(self, tmp_path):
        path = _make_options_file(tmp_path, options=[{"id": "none", "counts": {}}])
        result = runner.invoke(app, ["analyze", str(path), "none"])
        assert result.exit_code == 0
        assert "No votes" in result.output
        assert "Truncation chain" not in result.output


# ── Listings ──────────────────────────────────────────────────────


class TestListings:
    def test_strategies(self):
        result = runner.invoke(app, ["strategies"])
        assert result.exit_code == 0
        for key in (
            "lexicographic", "majority-gauge", "typical", "central",
            "ballot-removal", "median-removal",
        ):
            assert key in result.output
        assert "usual (default)" in result.output

    def test_scales(self):
        result = runner.invoke(app, ["scales"])
        assert result.exit_code == 0
        assert "french" in result.output
        assert "Excellent, Good, Fair, Poor, Reject" in result.output

    def test_config(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "unsatisfied_groups" in result.output
        assert "1e-10" in result.output
