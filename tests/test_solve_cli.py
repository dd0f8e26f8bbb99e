"""Tests for the command line front end and its settings."""

import pytest

from kpuzzle.config import MODEL_555, SolverSettings, default_pdb_file
from kpuzzle.experiments.solve import build_parser, main

ONE_MOVE = "1,2,3,4,5,6,7,8,9,10,11,12,13,14,0,15"
TWO_MOVES = "1,2,3,4,5,6,7,8,9,10,0,12,13,14,11,15"


def test_manhattan_solution_is_printed(capsys):
    assert main(["-a", "manhattan", "-s", ONE_MOVE]) == 0
    out = capsys.readouterr().out
    assert "Initial State: [1,2,3,4,5,6,7,8,9,10,11,12,13,14,0,15]" in out
    assert "Node Explored:" in out
    assert "Time Elapsed:" in out
    assert "Solution Length: 1" in out
    assert "Solution Moves: [R]" in out
    assert "--- Solution States ---" in out
    assert "[1,2,3,4,5,6,7,8,9,10,11,12,13,14,15,0]" in out


def test_interactive_mode(capsys):
    assert main(["--algorithm", "MANHATTAN", "-s", TWO_MOVES, "-i"]) == 0
    out = capsys.readouterr().out
    assert "Solution Length: 2" in out
    assert "Solution Moves: [D,R]" in out


def test_pattern_heuristic_builds_database(tmp_path, capsys):
    pdb = tmp_path / "patternDB_33333.data"
    argv = ["-a", "PATTERN", "-s", TWO_MOVES, "--model", "33333", "--pdb-file", str(pdb)]
    assert main(argv) == 0
    assert pdb.exists()
    assert "Solution Length: 2" in capsys.readouterr().out
    # second run loads the file
    assert main(argv) == 0
    assert "Solution Moves: [D,R]" in capsys.readouterr().out


@pytest.mark.parametrize("state,message", [
    ("1,2,3", "expected 16 values"),
    ("1,1,3,4,5,6,7,8,9,10,11,12,13,14,15,0", "The given state is not valid."),
    ("1,2,3,4,5,6,7,8,9,10,11,12,13,15,14,0", "The given state is not solvable."),
])
def test_invalid_state(capsys, state, message):
    assert main(["-a", "MANHATTAN", "-s", state]) == 2
    assert message in capsys.readouterr().err


def test_unknown_heuristic_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-a", "LINEAR", "-s", ONE_MOVE])


def test_state_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-a", "MANHATTAN"])


class TestSettings:
    def test_defaults(self):
        s = SolverSettings()
        assert s.heuristic == "MANHATTAN"
        assert s.partition_model is MODEL_555
        assert s.pdb_file == default_pdb_file("555")

    def test_env_directory(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KPUZZLE_PDB_DIR", str(tmp_path))
        assert SolverSettings(model="33333").pdb_file == tmp_path / "patternDB_33333.data"

    def test_heuristic_case_insensitive(self):
        assert SolverSettings(heuristic="pattern").heuristic == "PATTERN"

    @pytest.mark.parametrize("kwargs", [{"heuristic": "BFS"}, {"model": "777"}])
    def test_rejects_unknown(self, kwargs):
        with pytest.raises(ValueError):
            SolverSettings(**kwargs)
