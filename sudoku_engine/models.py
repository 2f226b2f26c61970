from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True, order=True)
class Position:
    row: int
    col: int

    def __str__(self) -> str:
        return f"(r{self.row + 1}, c{self.col + 1})"


class ConstraintKind(str, Enum):
    ROW = "ROW"
    COLUMN = "COLUMN"
    BLOCK = "BLOCK"
    DIAGONAL = "DIAGONAL"
    EXTRA = "EXTRA"


class ConstraintBehavior(str, Enum):
    UNIQUE = "UNIQUE"
    DISPLAY_ONLY = "DISPLAY_ONLY"


class ActionKind(str, Enum):
    SET_VALUE = "SET_VALUE"
    SET_NOTE = "SET_NOTE"
    CLEAR_NOTE = "CLEAR_NOTE"


@dataclass(frozen=True)
class Action:
    position: Position
    symbol: int
    kind: ActionKind


class Technique(Enum):
    """Deduction techniques in ascending difficulty; `rank` is the ordering authority."""

    NAKED_SINGLE = (1, "Naked Single")
    HIDDEN_SINGLE = (2, "Hidden Single")
    NAKED_PAIR = (3, "Naked Pair")
    HIDDEN_PAIR = (4, "Hidden Pair")
    POINTING = (5, "Pointing Pair/Triple")
    CLAIMING = (6, "Claiming (Box-Line)")
    X_WING = (7, "X-Wing")
    SWORDFISH = (8, "Swordfish")
    Y_WING = (9, "Y-Wing")

    def __init__(self, rank: int, label: str):
        self.rank = rank
        self.label = label

    @classmethod
    def parse(cls, text: str) -> "Technique":
        key = text.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            for t in cls:
                if t.label.lower() == text.strip().lower():
                    return t
            raise ValueError(f"Unknown technique '{text}'")


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    conflict_type: Optional[ConstraintKind] = None
    constraint_name: str = ""
    symbol: int = -1
    conflict_cells: List[Position] = field(default_factory=list)


# ------------------ errors ------------------
class TopologyError(ValueError):
    """A grid topology violates its structural invariants."""


class IllegalMoveError(ValueError):
    """A strict mutation targeted a non-editable cell or an invalid value."""


class GenerationError(RuntimeError):
    """Puzzle generation ran out of attempts."""


class GenerationCancelled(GenerationError):
    """The caller asked generation to stop."""
