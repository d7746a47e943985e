"""Shared fixtures."""

import matplotlib
import pytest

matplotlib.use("Agg")

from sudoku_core import parse_grid  # noqa: E402
from tests.helpers import PUZZLE_STR, SOLUTION_STR  # noqa: E402


@pytest.fixture
def puzzle():
    """Singles-solvable puzzle (51 blanks)."""
    return parse_grid(PUZZLE_STR)


@pytest.fixture
def solution():
    return parse_grid(SOLUTION_STR)


@pytest.fixture
def empty_grid():
    return [0] * 81


@pytest.fixture
def hash_db(tmp_path, monkeypatch):
    """Isolated puzzle-hash history file."""
    path = tmp_path / "hashes.txt"
    monkeypatch.setenv("SUDOKU_HASH_DB", str(path))
    return path
