from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from sudoku_engine.candidates import MAX_SYMBOLS
from sudoku_engine.models import ConstraintBehavior, ConstraintKind, Position, TopologyError

MIN_STANDARD_SIZE = 4
MAX_STANDARD_SIZE = 16

SAMURAI_OFFSETS: Tuple[Tuple[int, int], ...] = ((0, 0), (0, 12), (6, 6), (12, 0), (12, 12))


@dataclass(frozen=True)
class Constraint:
    name: str
    positions: Tuple[Position, ...]
    kind: ConstraintKind = ConstraintKind.EXTRA
    behavior: ConstraintBehavior = ConstraintBehavior.UNIQUE
    _members: FrozenSet[Position] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        members = frozenset(self.positions)
        if len(members) != len(self.positions):
            raise TopologyError(f"Constraint '{self.name}' lists a position more than once")
        object.__setattr__(self, "_members", members)

    def __contains__(self, position: object) -> bool:
        return position in self._members

    def __iter__(self) -> Iterator[Position]:
        return iter(self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def is_unique(self) -> bool:
        return self.behavior is ConstraintBehavior.UNIQUE

    @property
    def members(self) -> FrozenSet[Position]:
        return self._members

    def intersection(self, other: "Constraint") -> Tuple[Position, ...]:
        return tuple(p for p in self.positions if p in other._members)

    def overlaps(self, other: "Constraint") -> bool:
        return not self._members.isdisjoint(other._members)

    def is_resolved(self, board) -> bool:
        """True when every member cell of `board` holds a value."""
        return all(board.value_at(p) is not None for p in self.positions)

    def placed_symbols(self, board) -> List[int]:
        return sorted({v for v in (board.value_at(p) for p in self.positions) if v is not None})


class GridTopology:
    """
    Immutable puzzle shape:
    - rows x cols bounding box, symbol_count symbols
    - ordered constraints; a position may belong to any number of them
    - peers = positions sharing a UNIQUE constraint
    """

    def __init__(
        self,
        name: str,
        rows: int,
        cols: int,
        symbol_count: int,
        constraints: Iterable[Constraint],
        positions: Optional[Iterable[Position]] = None,
    ):
        if not 1 <= symbol_count <= MAX_SYMBOLS:
            raise TopologyError(f"symbol_count must be in 1..{MAX_SYMBOLS}, got {symbol_count}")
        if rows < 1 or cols < 1:
            raise TopologyError(f"Invalid dimensions {rows}x{cols}")

        self.name = name
        self.rows = rows
        self.cols = cols
        self.symbol_count = symbol_count
        self.constraints: Tuple[Constraint, ...] = tuple(constraints)

        if positions is None:
            covered = {p for c in self.constraints for p in c.positions}
            self._positions = tuple(sorted(covered))
        else:
            self._positions = tuple(sorted(set(positions)))
        self._position_set = frozenset(self._positions)

        self._validate()

        by_pos: Dict[Position, List[Constraint]] = {p: [] for p in self._positions}
        for c in self.constraints:
            for p in c.positions:
                by_pos[p].append(c)
        self._by_position: Dict[Position, Tuple[Constraint, ...]] = {
            p: tuple(cs) for p, cs in by_pos.items()
        }

        self._peers: Dict[Position, FrozenSet[Position]] = {}
        for p, cs in self._by_position.items():
            peers = set()
            for c in cs:
                if c.is_unique:
                    peers.update(c.positions)
            peers.discard(p)
            self._peers[p] = frozenset(peers)

    def _validate(self) -> None:
        names = set()
        for c in self.constraints:
            if c.name in names:
                raise TopologyError(f"Duplicate constraint name '{c.name}'")
            names.add(c.name)
            if len(c) != self.symbol_count:
                raise TopologyError(
                    f"Constraint '{c.name}' has {len(c)} positions, expected {self.symbol_count}"
                )
            for p in c.positions:
                if not (0 <= p.row < self.rows and 0 <= p.col < self.cols):
                    raise TopologyError(f"Constraint '{c.name}' position {p} is out of bounds")
                if p not in self._position_set:
                    raise TopologyError(f"Constraint '{c.name}' uses invalid position {p}")

        covered = {p for c in self.constraints for p in c.positions}
        orphans = [p for p in self._positions if p not in covered]
        if orphans:
            raise TopologyError(f"Positions without any constraint: {orphans[:5]}")

    # ---------- queries ----------
    def positions(self) -> Tuple[Position, ...]:
        return self._positions

    def is_valid(self, position: Position) -> bool:
        return position in self._position_set

    def constraints_containing(self, position: Position) -> Tuple[Constraint, ...]:
        return self._by_position.get(position, ())

    def peers_of(self, position: Position) -> FrozenSet[Position]:
        return self._peers.get(position, frozenset())

    def unique_constraints(self) -> Tuple[Constraint, ...]:
        return tuple(c for c in self.constraints if c.is_unique)

    def constraints_of_kind(self, *kinds: ConstraintKind) -> Tuple[Constraint, ...]:
        return tuple(c for c in self.constraints if c.is_unique and c.kind in kinds)

    @property
    def occurrences_per_symbol(self) -> int:
        return len(self._positions) // self.symbol_count

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self.constraints)

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return (
            f"GridTopology(name={self.name!r}, {self.rows}x{self.cols}, "
            f"symbols={self.symbol_count}, constraints={len(self.constraints)})"
        )


# ------------------ builders ------------------
def block_shape(size: int) -> Optional[Tuple[int, int]]:
    """(block_rows, block_cols) with block_rows <= block_cols, or None for prime sizes."""
    best = None
    for h in range(2, size):
        if size % h == 0 and h <= size // h:
            best = (h, size // h)
    return best


def _grid_constraints(
    size: int,
    row0: int = 0,
    col0: int = 0,
    prefix: str = "",
    shape: Optional[Tuple[int, int]] = None,
) -> List[Constraint]:
    out: List[Constraint] = []
    for r in range(size):
        out.append(Constraint(
            f"{prefix}row {r + 1}",
            tuple(Position(row0 + r, col0 + c) for c in range(size)),
            ConstraintKind.ROW,
        ))
    for c in range(size):
        out.append(Constraint(
            f"{prefix}column {c + 1}",
            tuple(Position(row0 + r, col0 + c) for r in range(size)),
            ConstraintKind.COLUMN,
        ))
    if shape is not None:
        bh, bw = shape
        b = 0
        for br in range(0, size, bh):
            for bc in range(0, size, bw):
                b += 1
                out.append(Constraint(
                    f"{prefix}block {b}",
                    tuple(
                        Position(row0 + r, col0 + c)
                        for r in range(br, br + bh)
                        for c in range(bc, bc + bw)
                    ),
                    ConstraintKind.BLOCK,
                ))
    return out


def standard(size: int = 9) -> GridTopology:
    if not MIN_STANDARD_SIZE <= size <= MAX_STANDARD_SIZE:
        raise TopologyError(
            f"Standard sizes range from {MIN_STANDARD_SIZE} to {MAX_STANDARD_SIZE}, got {size}"
        )
    return GridTopology(
        f"standard{size}x{size}", size, size, size,
        _grid_constraints(size, shape=block_shape(size)),
    )


def x_sudoku(size: int = 9) -> GridTopology:
    base = standard(size)
    diagonals = [
        Constraint("diagonal 1", tuple(Position(i, i) for i in range(size)), ConstraintKind.DIAGONAL),
        Constraint("diagonal 2", tuple(Position(i, size - 1 - i) for i in range(size)), ConstraintKind.DIAGONAL),
    ]
    return GridTopology(f"xsudoku{size}x{size}", size, size, size, base.constraints + tuple(diagonals))


def samurai() -> GridTopology:
    constraints: List[Constraint] = []
    seen_blocks = set()
    for g, (r0, c0) in enumerate(SAMURAI_OFFSETS, start=1):
        for c in _grid_constraints(9, r0, c0, prefix=f"grid {g} ", shape=(3, 3)):
            if c.kind is ConstraintKind.BLOCK:
                # corner blocks of the centre grid are shared with the outer grids
                if c.members in seen_blocks:
                    continue
                seen_blocks.add(c.members)
            constraints.append(c)
    return GridTopology("samurai", 21, 21, 9, constraints)


def from_description(desc: Mapping) -> GridTopology:
    """
    Build a topology from a declarative mapping:
      {"name": ..., "rows": R, "cols": C, "symbols": N,
       "constraints": [{"name": ..., "kind": "ROW", "behavior": "UNIQUE", "cells": [[r, c], ...]}],
       "positions": [[r, c], ...]  # optional}
    """
    try:
        rows = int(desc["rows"])
        cols = int(desc["cols"])
        symbols = int(desc["symbols"])
        raw_constraints = desc["constraints"]
    except (KeyError, TypeError, ValueError) as e:
        raise TopologyError(f"Malformed topology description: {e}") from e

    constraints = []
    for i, raw in enumerate(raw_constraints):
        try:
            cells = tuple(Position(int(r), int(c)) for r, c in raw["cells"])
            kind = ConstraintKind(raw.get("kind", ConstraintKind.EXTRA.value))
            behavior = ConstraintBehavior(raw.get("behavior", ConstraintBehavior.UNIQUE.value))
        except (KeyError, TypeError, ValueError) as e:
            raise TopologyError(f"Malformed constraint #{i}: {e}") from e
        constraints.append(Constraint(raw.get("name", f"constraint {i + 1}"), cells, kind, behavior))

    positions = None
    if desc.get("positions") is not None:
        positions = [Position(int(r), int(c)) for r, c in desc["positions"]]

    return GridTopology(desc.get("name", "custom"), rows, cols, symbols, constraints, positions)


_NAMED: Dict[str, Tuple] = {
    "standard4x4": (standard, 4),
    "standard6x6": (standard, 6),
    "standard8x8": (standard, 8),
    "standard9x9": (standard, 9),
    "standard10x10": (standard, 10),
    "standard12x12": (standard, 12),
    "standard15x15": (standard, 15),
    "standard16x16": (standard, 16),
    "xsudoku": (x_sudoku, 9),
    "samurai": (samurai,),
}


def known_types() -> Sequence[str]:
    return tuple(_NAMED)


@lru_cache(maxsize=None)
def by_name(name: str) -> GridTopology:
    """Shared, read-only topology for a named variant."""
    try:
        builder, *args = _NAMED[name]
    except KeyError:
        raise TopologyError(f"Unknown sudoku type '{name}'. Known: {', '.join(_NAMED)}") from None
    return builder(*args)
