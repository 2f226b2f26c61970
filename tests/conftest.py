import os
import sys
import pytest

# Add project root to sys.path (so tests can import sudoku_engine.* and flask_api)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(PROJECT_ROOT)

from sudoku_engine.board import Board
from sudoku_engine.candidates import CandidateSet
from sudoku_engine.topology import by_name

WIKI_GIVENS = (
    "53..7...."
    "6..195..."
    ".98....6."
    "8...6...3"
    "4..8.3..1"
    "7...2...6"
    ".6....28."
    "...419..5"
    "....8..79"
)

WIKI_SOLUTION = (
    "534678912"
    "672195348"
    "198342567"
    "859761423"
    "426853791"
    "713924856"
    "961537284"
    "287419635"
    "345286179"
)


@pytest.fixture
def std9():
    return by_name("standard9x9")


@pytest.fixture
def std4():
    return by_name("standard4x4")


@pytest.fixture
def wiki_board(std9):
    return Board.from_strings(std9, WIKI_GIVENS, solution=WIKI_SOLUTION)


@pytest.fixture
def candidate_board(std9):
    """Returns a function that builds an empty 9x9 board where every cell holds `baseline`."""
    def _make(baseline=(5, 6, 7)):
        b = Board(std9)
        cs = CandidateSet.of(*baseline)
        for p in std9.positions():
            b.set_candidates(p, cs)
        return b
    return _make
