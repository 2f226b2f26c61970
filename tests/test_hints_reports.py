from conftest import WIKI_GIVENS, WIKI_SOLUTION
from sudoku_engine.board import Board
from sudoku_engine.candidates import CandidateSet
from sudoku_engine.hints import explain, generate_hint, hint_for
from sudoku_engine.models import ConstraintKind, Position
from sudoku_engine.reports import generate_mistake_report, generate_violation_report
from sudoku_engine.solver import next_hint
from sudoku_engine.techniques import YWingDetector


# ------------------ violation report ------------------
def test_violation_report_clean(wiki_board):
    report = generate_violation_report(wiki_board)
    assert not report.has_violation
    assert report.conflict_cells == []


def test_violation_report_duplicate_in_row(wiki_board):
    wiki_board.set_value(Position(0, 2), 4)
    report = generate_violation_report(wiki_board)
    assert report.has_violation
    assert report.violation_type is ConstraintKind.ROW
    assert report.constraint_name == "row 1"
    assert report.symbol == 4
    assert "[(1, 1), (1, 3)]" in report.explanation
    assert "per row" in report.explanation


# ------------------ mistake report ------------------
def test_mistake_report_without_solution(std9):
    board = Board.from_strings(std9, WIKI_GIVENS)
    report = generate_mistake_report(board)
    assert not report.has_mistake
    assert "No solution is known" in report.summary


def test_mistake_report_lists_wrong_entries(wiki_board):
    wiki_board.set_value(Position(0, 2), 0)  # solution is '4'
    wiki_board.set_value(Position(0, 3), 5)  # correct '6'
    report = generate_mistake_report(wiki_board)
    assert report.has_mistake
    assert [it.cell for it in report.items] == [Position(0, 2)]
    item = report.items[0]
    assert item.entered == 0
    assert "row 1, column 3, block 1" in item.explanation
    assert "1 incorrect user entry" in report.summary


# ------------------ hints ------------------
def test_hint_reports_violation_first(wiki_board):
    wiki_board.set_value(Position(0, 2), 4)
    hint = generate_hint(wiki_board)
    assert hint.action == "ERROR"
    assert hint.technique == "Validation"
    assert hint.actions == []


def test_hint_fix_mistake_does_not_reveal_answer(wiki_board):
    wiki_board.set_value(Position(0, 2), 0)
    hint = generate_hint(wiki_board)
    assert hint.action == "FIX_MISTAKE"
    assert "(r1, c3)" in hint.message
    assert "Entered: 1" in hint.message
    # expected symbol is '4'
    assert "4" not in hint.message


def test_technique_hint_matches_next_hint(wiki_board):
    d = next_hint(wiki_board)
    hint = generate_hint(wiki_board)
    assert hint.has_hint
    assert hint.derivation == d
    assert hint.technique == d.description()
    assert hint.action == ("PLACE" if d.placements else "ELIMINATE")
    assert hint.actions == d.to_action_list(wiki_board)
    assert hint.message == explain(d)


def test_no_hint_when_complete(std9):
    board = Board.from_strings(std9, WIKI_SOLUTION)
    hint = generate_hint(board)
    assert not hint.has_hint
    assert hint.action == "NONE"
    assert "already complete" in hint.message


def test_hint_on_contradiction(candidate_board):
    board = candidate_board()
    board.set_candidates(Position(0, 0), CandidateSet())
    hint = hint_for(board)
    assert not hint.has_hint
    assert hint.action == "ERROR"


def test_explain_y_wing(candidate_board):
    board = candidate_board()
    board.set_candidates(Position(0, 0), CandidateSet.of(0, 2))
    board.set_candidates(Position(0, 4), CandidateSet.of(0, 1))
    board.set_candidates(Position(1, 1), CandidateSet.of(1, 2))
    board.set_candidates(Position(0, 2), CandidateSet.of(1, 5, 6))
    text = explain(YWingDetector().detect(board))
    assert text.startswith("Y-Wing with pivot (r1, c1) = {1, 3}.")
    assert "Example elimination target: 2 from (r1, c3)." in text
