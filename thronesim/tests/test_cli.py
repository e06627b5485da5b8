"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main
from ..engine_core.record import from_json


class TestCli:
    """Tests for thronesim subcommands."""

    def test_setup_prints_record(self, capsys):
        main(["setup", "--players", "3", "--seed", "1"])
        state = from_json(capsys.readouterr().out)
        assert state.player_count == 3
        assert state.seed == 1

    def test_play_json(self, capsys, monkeypatch):
        monkeypatch.setenv("THRONESIM_ROUND_LIMIT", "2")
        main(["play", "--players", "3", "--seed", "2", "--agent", "passive", "--json"])
        output = json.loads(capsys.readouterr().out)
        assert output["completed"] is True
        assert output["rounds"] == 2
        assert len(output["standings"]) == 3

    def test_play_saves_state(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("THRONESIM_ROUND_LIMIT", "1")
        target = tmp_path / "game.json"
        main(["play", "--players", "4", "--agent", "passive", "--save", str(target)])
        assert "Winner:" in capsys.readouterr().out
        assert from_json(target.read_text()).winner is not None

    def test_invalid_player_count(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["setup", "--players", "2"])
        assert exc.value.code == 2
        assert "Error" in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1
