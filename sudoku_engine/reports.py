from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from sudoku_engine.board import Board, symbol_char
from sudoku_engine.models import ConstraintKind, Position


@dataclass(frozen=True)
class ViolationReport:
    has_violation: bool
    violation_type: Optional[ConstraintKind] = None
    constraint_name: str = ""
    symbol: int = -1
    conflict_cells: List[Position] = field(default_factory=list)
    explanation: str = ""


@dataclass(frozen=True)
class MistakeItem:
    cell: Position
    entered: int
    explanation: str
    constraint_values: List[List[int]]


@dataclass(frozen=True)
class MistakeReport:
    has_mistake: bool
    items: List[MistakeItem]
    summary: str


def _cells_1_indexed(cells: List[Position]) -> List[tuple]:
    return [(p.row + 1, p.col + 1) for p in cells]


def generate_violation_report(board: Board) -> ViolationReport:
    """
    Rule violations: the same symbol twice in any unique constraint.
    Returns the FIRST detected violation with a clear explanation.
    """
    result = board.validate_rules()
    if result.is_valid:
        return ViolationReport(
            has_violation=False,
            explanation="No violations detected (no duplicate symbols in any constraint).",
        )

    ch = symbol_char(result.symbol)
    return ViolationReport(
        has_violation=True,
        violation_type=result.conflict_type,
        constraint_name=result.constraint_name,
        symbol=result.symbol,
        conflict_cells=result.conflict_cells,
        explanation=(
            f"Rule violation: symbol {ch} appears more than once in {result.constraint_name}.\n"
            f"Conflict cells (1-indexed): {_cells_1_indexed(result.conflict_cells)}.\n"
            f"Sudoku rule: each symbol may appear at most once per {result.conflict_type.value.lower()}."
        ),
    )


def generate_mistake_report(board: Board) -> MistakeReport:
    """
    Mistake = an editable cell whose value differs from the stored solution.

    Only the fact that an entry is wrong is reported; the expected symbol is
    never included, so the report cannot give the answer away.
    """
    if not board.has_solution():
        return MistakeReport(
            has_mistake=False,
            items=[],
            summary="No solution is known for this puzzle, so entries cannot be checked.",
        )

    items: List[MistakeItem] = []
    for cell in board.cells():
        if not cell.editable or not board.is_mistake(cell.position):
            continue
        constraints = board.topology.constraints_containing(cell.position)
        context = [c.placed_symbols(board) for c in constraints]
        names = ", ".join(c.name for c in constraints)
        explanation = (
            f"Logical reason this is a mistake:\n"
            f"- Your entry: {symbol_char(cell.value)} at {cell.position}\n"
            f"- It breaks no rule yet, but it contradicts the deductions forced by the givens,\n"
            f"  so the puzzle cannot be completed correctly from here.\n"
            f"- Constraints involved: {names}"
        )
        items.append(MistakeItem(cell.position, cell.value, explanation, context))

    if items:
        return MistakeReport(
            has_mistake=True,
            items=items,
            summary=f"{len(items)} incorrect user entr{'y' if len(items) == 1 else 'ies'} detected (valid so far, but logically inconsistent).",
        )

    return MistakeReport(
        has_mistake=False,
        items=[],
        summary="No mistakes detected: all user entries match the forced deductions.",
    )
