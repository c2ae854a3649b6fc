"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main


class TestCLI:
    """Tests for CLI commands."""

    def test_cases(self, capsys):
        main(["cases"])
        out = capsys.readouterr().out
        assert "ankle_sprain" in out
        assert "lower_back_pain" in out

    def test_modifiers(self, capsys):
        main(["modifiers"])
        out = capsys.readouterr().out
        assert "fire_drill" in out
        assert "Sets:" in out

    def test_validate_content(self, capsys):
        main(["validate-content"])
        assert "Catalog is valid" in capsys.readouterr().out

    def test_simulate_reaches_an_end(self, capsys):
        main(["simulate", "--difficulty", "expert", "--seed", "3", "--policy", "first"])
        out = capsys.readouterr().out
        assert "Winner:" in out
        assert "Scores:" in out

    def test_simulate_json(self, capsys):
        main(["simulate", "--seed", "5", "--modifier-set", "easy", "--json"])
        out = capsys.readouterr().out
        snapshot = json.loads(out[out.index("{"):])
        assert snapshot["state"]["outcome"] is not None

    def test_simulate_unknown_case(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["simulate", "--case", "broken_heart"])
        assert exc.value.code == 1

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit):
            main([])
