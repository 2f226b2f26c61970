"""
Derivations: immutable records of a detected pattern.

A derivation never holds a board. It is materialised later with
`to_action_list(board)`, which re-checks every stored consequence against the
board it is given, so a derivation found on a scratch copy can be replayed on a
live board whose notes have moved on since.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sudoku_engine.models import Action, ActionKind, Position, Technique
from sudoku_engine.topology import Constraint

Elimination = Tuple[Position, int]
Placement = Tuple[Position, int]


def _require_arity(name: str, items: tuple, n: int) -> None:
    if len(items) != n:
        raise ValueError(f"{name} needs exactly {n} elements, got {len(items)}")


@dataclass(frozen=True)
class Derivation:
    technique: Technique
    eliminations: Tuple[Elimination, ...]
    placements: Tuple[Placement, ...]

    def description(self) -> str:
        return self.technique.label

    def cause_positions(self) -> Tuple[Position, ...]:
        return ()

    def to_action_list(self, board) -> List[Action]:
        actions: List[Action] = []
        for pos, s in self.placements:
            if board.value_at(pos) is None and board.candidates_at(pos).contains(s):
                actions.append(Action(pos, s, ActionKind.SET_VALUE))
        for pos, s in self.eliminations:
            if board.value_at(pos) is None and board.candidates_at(pos).contains(s):
                actions.append(Action(pos, s, ActionKind.CLEAR_NOTE))
        return actions

    def is_applicable(self, board) -> bool:
        return bool(self.to_action_list(board))


@dataclass(frozen=True)
class SingleDerivation(Derivation):
    # None for a naked single
    constraint: Optional[Constraint]

    @property
    def position(self) -> Position:
        return self.placements[0][0]

    @property
    def symbol(self) -> int:
        return self.placements[0][1]

    def cause_positions(self) -> Tuple[Position, ...]:
        return (self.position,)


@dataclass(frozen=True)
class SubsetDerivation(Derivation):
    constraint: Constraint
    positions: Tuple[Position, Position]
    symbols: Tuple[int, int]

    def __post_init__(self):
        _require_arity("Subset positions", self.positions, 2)
        _require_arity("Subset symbols", self.symbols, 2)

    def cause_positions(self) -> Tuple[Position, ...]:
        return self.positions


@dataclass(frozen=True)
class LockedCandidatesDerivation(Derivation):
    symbol: int
    source: Constraint
    target: Constraint

    def cause_positions(self) -> Tuple[Position, ...]:
        return self.source.intersection(self.target)


@dataclass(frozen=True)
class FishDerivation(Derivation):
    symbol: int
    locked: tuple
    reducible: tuple

    size = 0

    def __post_init__(self):
        _require_arity(f"{self.technique.label} locked constraints", self.locked, self.size)
        _require_arity(f"{self.technique.label} reducible constraints", self.reducible, self.size)

    def cause_positions(self) -> Tuple[Position, ...]:
        return tuple(
            p
            for lock in self.locked
            for red in self.reducible
            for p in lock.intersection(red)
        )


@dataclass(frozen=True)
class XWingDerivation(FishDerivation):
    locked: Tuple[Constraint, Constraint]
    reducible: Tuple[Constraint, Constraint]

    size = 2


@dataclass(frozen=True)
class SwordfishDerivation(FishDerivation):
    locked: Tuple[Constraint, Constraint, Constraint]
    reducible: Tuple[Constraint, Constraint, Constraint]

    size = 3


@dataclass(frozen=True)
class YWingDerivation(Derivation):
    """Pivot {A, C}; pincers {A, B} and {C, B}; B is removed from cells seeing both pincers."""

    pivot: Position
    pincers: Tuple[Position, Position]
    candidate_a: int
    candidate_b: int
    candidate_c: int

    def __post_init__(self):
        _require_arity("Y-Wing pincers", self.pincers, 2)

    def cause_positions(self) -> Tuple[Position, ...]:
        return (self.pivot,) + self.pincers
