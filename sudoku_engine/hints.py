from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sudoku_engine.board import Board, symbol_char
from sudoku_engine.derivations import (
    Derivation,
    FishDerivation,
    LockedCandidatesDerivation,
    SingleDerivation,
    SubsetDerivation,
    YWingDerivation,
)
from sudoku_engine.models import Action, Technique
from sudoku_engine.reports import MistakeReport, generate_mistake_report, generate_violation_report
from sudoku_engine.solver import next_hint
from sudoku_engine.techniques import Detector


# ------------------ Hint dataclass ------------------
@dataclass(frozen=True)
class HintResult:
    has_hint: bool
    technique: str = ""
    action: str = ""  # "PLACE" | "ELIMINATE" | "FIX_MISTAKE" | "ERROR" | "NONE"
    message: str = ""
    derivation: Optional[Derivation] = None
    actions: List[Action] = field(default_factory=list)


def _sym(s: int) -> str:
    return symbol_char(s)


def _syms(symbols) -> str:
    return "{" + ", ".join(_sym(s) for s in symbols) + "}"


def _example(d: Derivation) -> str:
    if not d.eliminations:
        return ""
    pos, s = d.eliminations[0]
    return f"\nExample elimination target: {_sym(s)} from {pos}."


# ------------------ messages per derivation ------------------
def explain(d: Derivation) -> str:
    """Human-readable explanation of a derivation."""
    if isinstance(d, SingleDerivation):
        if d.constraint is None:
            return (
                f"Naked Single found at {d.position}.\n"
                f"Only one candidate is possible: {_sym(d.symbol)}.\n"
                f"Hint: place {_sym(d.symbol)} in {d.position}."
            )
        return (
            f"Hidden Single in {d.constraint.name}.\n"
            f"Symbol {_sym(d.symbol)} can only go in {d.position}.\n"
            f"Hint: place {_sym(d.symbol)} in {d.position}."
        )

    if isinstance(d, SubsetDerivation):
        a, b = d.positions
        if d.technique is Technique.NAKED_PAIR:
            return (
                f"Naked Pair in {d.constraint.name}.\n"
                f"Cells {a} and {b} share the same two candidates {_syms(d.symbols)}.\n"
                f"Therefore {_syms(d.symbols)} can be eliminated from other cells in {d.constraint.name}."
                + _example(d)
            )
        return (
            f"Hidden Pair in {d.constraint.name}.\n"
            f"Symbols {_sym(d.symbols[0])} and {_sym(d.symbols[1])} can only occur in {a} and {b}.\n"
            f"Therefore those two cells must be restricted to {_syms(d.symbols)} (remove other candidates there)."
        )

    if isinstance(d, LockedCandidatesDerivation):
        s = _sym(d.symbol)
        return (
            f"{d.description()} in {d.source.name} for symbol {s}.\n"
            f"All candidates for {s} in {d.source.name} are in {d.target.name}.\n"
            f"Therefore eliminate {s} from {d.target.name} outside {d.source.name}."
            + _example(d)
        )

    if isinstance(d, FishDerivation):
        s = _sym(d.symbol)
        locked = ", ".join(c.name for c in d.locked)
        reducible = ", ".join(c.name for c in d.reducible)
        return (
            f"{d.description()} on symbol {s}.\n"
            f"In {locked}, {s} is restricted to {reducible}.\n"
            f"Therefore eliminate {s} from the rest of {reducible}."
            + _example(d)
        )

    if isinstance(d, YWingDerivation):
        pa, pc = d.pincers
        a, b, c = _sym(d.candidate_a), _sym(d.candidate_b), _sym(d.candidate_c)
        return (
            f"Y-Wing with pivot {d.pivot} = {{{a}, {c}}}.\n"
            f"Pincers {pa} = {{{a}, {b}}} and {pc} = {{{c}, {b}}} both see the pivot.\n"
            f"Whichever value the pivot takes, one pincer must be {b}.\n"
            f"Therefore eliminate {b} from every cell that sees both pincers."
            + _example(d)
        )

    return f"{d.description()} found."


def hint_for(board: Board, detectors: Optional[Sequence[Detector]] = None) -> HintResult:
    d = next_hint(board, detectors)
    if d is None:
        if board.is_solved():
            return HintResult(False, "—", "NONE", "No hint available: the puzzle is already complete.")
        if board.has_contradiction():
            return HintResult(False, "—", "ERROR", "Cannot generate hint: a cell has no candidates left.")
        return HintResult(False, "—", "NONE", "No hint available: none of the techniques produce a step from the current grid.")

    action = "PLACE" if d.placements else "ELIMINATE"
    return HintResult(True, d.description(), action, explain(d), d, d.to_action_list(board))


def generate_hint(
    board: Board,
    mistake_report: Optional[MistakeReport] = None,
    detectors: Optional[Sequence[Detector]] = None,
) -> HintResult:
    """
    Priority order:
      1) If validation fails -> return ERROR hint.
      2) If mistake exists -> return FIX_MISTAKE hint (without revealing the answer).
      3) Otherwise -> return next technique hint from the current candidates.
    """
    violation = generate_violation_report(board)
    if violation.has_violation:
        return HintResult(True, "Validation", "ERROR", violation.explanation)

    if mistake_report is None:
        mistake_report = generate_mistake_report(board)
    if mistake_report.has_mistake and mistake_report.items:
        item = mistake_report.items[0]
        msg = (
            f"Fix the mistake first.\n"
            f"Cell {item.cell} is inconsistent.\n"
            f"Entered: {_sym(item.entered)}\n"
            f"Why: This value contradicts the forced deductions from the givens, so the puzzle cannot be completed correctly.\n"
            f"Hint: clear {item.cell} and re-solve."
        )
        return HintResult(True, "Fix Mistake", "FIX_MISTAKE", msg)

    return hint_for(board, detectors)
