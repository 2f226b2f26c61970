import random
import threading

import pytest

from conftest import WIKI_GIVENS, WIKI_SOLUTION
from sudoku_engine.board import Board, parse_symbols
from sudoku_engine.models import GenerationCancelled, GenerationError, Position, Technique
from sudoku_engine.solver import (
    GeneratorConfig,
    auto_fill_unique_candidates,
    count_solutions,
    generate,
    grade,
    next_hint,
    random_solution,
    solve_backtracking,
    solve_logically,
)
from sudoku_engine.techniques import detectors_for


def _snapshot(board):
    return [(c.position, c.value, c.candidates) for c in board.cells()]


def test_solve_logically_wiki(wiki_board):
    before = _snapshot(wiki_board)
    result = solve_logically(wiki_board)
    assert result.is_solved
    assert result.board.to_string() == WIKI_SOLUTION
    assert result.hardest is not None
    assert result.hardest in result.techniques_used
    # the input board is left alone
    assert _snapshot(wiki_board) == before


def test_grade_matches_hardest_step(wiki_board):
    result = solve_logically(wiki_board)
    assert grade(wiki_board) is result.hardest


def test_stuck_board_has_no_grade(std4):
    empty = Board(std4)
    result = solve_logically(empty)
    assert not result.is_solved
    assert result.steps == ()
    assert grade(empty) is None


def test_restricted_detectors_get_stuck(wiki_board):
    # without detectors nothing can progress
    assert solve_logically(wiki_board, detectors=[]).is_solved is False


def test_next_hint_does_not_mutate(wiki_board):
    before = _snapshot(wiki_board)
    d = next_hint(wiki_board)
    assert d is not None
    assert d.is_applicable(wiki_board)
    assert _snapshot(wiki_board) == before


def test_next_hint_none_when_solved(std9):
    solved = Board.from_strings(std9, WIKI_SOLUTION)
    assert next_hint(solved) is None


def test_next_hint_follows_rank_order(wiki_board):
    d = next_hint(wiki_board)
    first_only = next_hint(wiki_board, detectors_for([d.technique]))
    assert first_only == d


def test_auto_fill_unique_candidates(wiki_board):
    # r5c5 starts with 5 as its only candidate
    assert wiki_board.candidates_at(Position(4, 4)).count() == 1
    filled = auto_fill_unique_candidates(wiki_board)
    assert Position(4, 4) in filled
    expected = parse_symbols(WIKI_SOLUTION, wiki_board.topology)
    for p in filled:
        assert wiki_board.value_at(p) == expected[p]


def test_auto_fill_refuses_board_with_mistake(wiki_board):
    wiki_board.place(Position(0, 2), 0)  # solution is '4'
    before = wiki_board.to_string()
    assert auto_fill_unique_candidates(wiki_board) == []
    assert wiki_board.to_string() == before


def test_auto_fill_refuses_rule_violation(std9):
    board = Board.from_strings(std9, WIKI_GIVENS)
    board.set_value(Position(0, 2), 4)  # second '5' in row 1
    assert auto_fill_unique_candidates(board) == []
    assert board.value_at(Position(4, 4)) is None


def test_count_solutions(std9, std4):
    assert count_solutions(Board.from_strings(std9, WIKI_GIVENS)) == 1
    assert count_solutions(Board(std4), limit=2) == 2


def test_random_solution_is_valid(std4):
    solution = random_solution(std4, random.Random(3))
    assert len(solution) == 16
    board = Board(std4, solution)
    for p, s in solution.items():
        board.set_value(p, s)
    assert board.is_solved()
    assert board.validate_rules().is_valid
    assert board.is_finished()


def test_solve_backtracking_wiki(wiki_board):
    solution = solve_backtracking(wiki_board)
    assert solution == parse_symbols(WIKI_SOLUTION, wiki_board.topology)


# ------------------ generation ------------------
def test_generator_config_validation():
    with pytest.raises(ValueError):
        GeneratorConfig(max_attempts=0)
    with pytest.raises(ValueError):
        GeneratorConfig(givens_ratio=1.5)


def test_generate_standard4x4(std4):
    puzzle = generate(std4, GeneratorConfig(seed=7))
    board = puzzle.board
    givens = [c for c in board.cells() if not c.editable]
    assert len(givens) == 8
    assert all(c.value == puzzle.solution[c.position] for c in givens)
    assert 1 <= puzzle.attempts <= GeneratorConfig.max_attempts

    result = solve_logically(board)
    assert result.is_solved
    assert {c.position: c.value for c in result.board.cells()} == puzzle.solution
    assert puzzle.grade is (result.hardest or Technique.NAKED_SINGLE)


def test_generate_is_reproducible_with_seed(std4):
    a = generate(std4, GeneratorConfig(seed=11))
    b = generate(std4, GeneratorConfig(seed=11))
    assert a.board.to_string() == b.board.to_string()


def test_generate_gives_up(std4):
    config = GeneratorConfig(max_attempts=3, givens_ratio=0.0)
    with pytest.raises(GenerationError) as excinfo:
        generate(std4, config)
    assert not isinstance(excinfo.value, GenerationCancelled)
    assert "3 attempts" in str(excinfo.value)


def test_generate_cancelled(std4):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(GenerationCancelled):
        generate(std4, GeneratorConfig(seed=1), cancel=cancel)
