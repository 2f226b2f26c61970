from __future__ import annotations
from abc import ABC, abstractmethod
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Type

from sudoku_engine.board import Board
from sudoku_engine.candidates import CandidateSet
from sudoku_engine.derivations import (
    Derivation,
    LockedCandidatesDerivation,
    SingleDerivation,
    SubsetDerivation,
    SwordfishDerivation,
    XWingDerivation,
    YWingDerivation,
)
from sudoku_engine.models import ConstraintKind, Position, Technique
from sudoku_engine.topology import Constraint

LINE_KINDS = (ConstraintKind.ROW, ConstraintKind.COLUMN)


# ------------------ board helpers ------------------
def spots(board: Board, constraint: Constraint, symbol: int) -> List[Position]:
    """Unsolved positions of `constraint` that still allow `symbol`."""
    return [p for p in constraint.positions if board.candidates_at(p).contains(symbol)]


def is_placed(board: Board, constraint: Constraint, symbol: int) -> bool:
    return any(board.value_at(p) == symbol for p in constraint.positions)


def targets(board: Board, positions: Iterable[Position], symbol: int) -> Tuple[Tuple[Position, int], ...]:
    return tuple((p, symbol) for p in positions if board.candidates_at(p).contains(symbol))


# ------------------ detector contract ------------------
class Detector(ABC):
    technique: Technique

    def description(self) -> str:
        return self.technique.label

    @abstractmethod
    def detect(self, board: Board) -> Optional[Derivation]:
        """First instance of the pattern on `board` that still removes something, or None."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


_REGISTRY: List[Type[Detector]] = []


def register(cls: Type[Detector]) -> Type[Detector]:
    _REGISTRY.append(cls)
    return cls


def detectors_for(techniques: Optional[Iterable[Technique]] = None) -> List[Detector]:
    """Registered detectors in ascending rank (registration order breaks ties)."""
    wanted = None if techniques is None else set(techniques)
    classes = [c for c in _REGISTRY if wanted is None or c.technique in wanted]
    return [c() for c in sorted(classes, key=lambda c: c.technique.rank)]


# ------------------ singles ------------------
@register
class NakedSingleDetector(Detector):
    technique = Technique.NAKED_SINGLE

    def detect(self, board: Board) -> Optional[Derivation]:
        for cell in board.cells():
            if cell.value is None and cell.candidates.count() == 1:
                s = cell.candidates.first()
                return SingleDerivation(self.technique, (), ((cell.position, s),), None)
        return None


@register
class HiddenSingleDetector(Detector):
    technique = Technique.HIDDEN_SINGLE

    def detect(self, board: Board) -> Optional[Derivation]:
        for constraint in board.topology.unique_constraints():
            for s in range(board.topology.symbol_count):
                if is_placed(board, constraint, s):
                    continue
                found = spots(board, constraint, s)
                if len(found) == 1:
                    return SingleDerivation(self.technique, (), ((found[0], s),), constraint)
        return None


# ------------------ pairs ------------------
@register
class NakedPairDetector(Detector):
    technique = Technique.NAKED_PAIR

    def detect(self, board: Board) -> Optional[Derivation]:
        for constraint in board.topology.unique_constraints():
            pairs: Dict[int, List[Position]] = {}
            for p in constraint.positions:
                cs = board.candidates_at(p)
                if cs.count() == 2:
                    pairs.setdefault(cs.to_bits(), []).append(p)

            for mask, cells in pairs.items():
                if len(cells) != 2:
                    continue
                digits = tuple(CandidateSet.from_bits(mask))
                others = [p for p in constraint.positions if p not in cells]
                elims = tuple(e for d in digits for e in targets(board, others, d))
                if elims:
                    return SubsetDerivation(
                        self.technique, tuple(sorted(elims)), (), constraint, (cells[0], cells[1]), digits
                    )
        return None


@register
class HiddenPairDetector(Detector):
    technique = Technique.HIDDEN_PAIR

    def detect(self, board: Board) -> Optional[Derivation]:
        n = board.topology.symbol_count
        for constraint in board.topology.unique_constraints():
            digit_cells = {s: spots(board, constraint, s) for s in range(n)}
            for d1, d2 in combinations(range(n), 2):
                loc1, loc2 = digit_cells[d1], digit_cells[d2]
                if len(loc1) != 2 or loc1 != loc2:
                    continue
                keep = CandidateSet.of(d1, d2)
                elims = tuple(
                    (p, s)
                    for p in loc1
                    for s in board.candidates_at(p) - keep
                )
                if elims:
                    return SubsetDerivation(self.technique, elims, (), constraint, (loc1[0], loc1[1]), (d1, d2))
        return None


# ------------------ locked candidates ------------------
def _locked_candidates(
    board: Board,
    technique: Technique,
    source_kinds: Sequence[ConstraintKind],
    target_kinds: Sequence[ConstraintKind],
) -> Optional[Derivation]:
    topology = board.topology
    for source in topology.constraints_of_kind(*source_kinds):
        for s in range(topology.symbol_count):
            found = spots(board, source, s)
            if len(found) < 2:
                continue
            for target in topology.constraints_containing(found[0]):
                if target is source or not target.is_unique or target.kind not in target_kinds:
                    continue
                if not all(p in target for p in found):
                    continue
                elims = targets(board, (p for p in target.positions if p not in source), s)
                if elims:
                    return LockedCandidatesDerivation(technique, elims, (), s, source, target)
    return None


@register
class PointingDetector(Detector):
    """Symbol confined to one line inside a block: remove it from the rest of that line."""

    technique = Technique.POINTING

    def detect(self, board: Board) -> Optional[Derivation]:
        return _locked_candidates(
            board, self.technique, (ConstraintKind.BLOCK,), LINE_KINDS + (ConstraintKind.DIAGONAL,)
        )


@register
class ClaimingDetector(Detector):
    """Symbol confined to one block inside a line: remove it from the rest of that block."""

    technique = Technique.CLAIMING

    def detect(self, board: Board) -> Optional[Derivation]:
        return _locked_candidates(
            board, self.technique, LINE_KINDS + (ConstraintKind.DIAGONAL,), (ConstraintKind.BLOCK,)
        )


# ------------------ fish ------------------
def _find_fish(board: Board, size: int, locked_pool: Sequence[Constraint], reducible_pool: Sequence[Constraint]):
    """
    `size` pairwise disjoint locked lines in which `symbol` occurs 2..size times, all
    inside exactly `size` reducible lines (each spot in exactly one of them).
    Returns (symbol, locked, reducible, eliminations) or None.
    """
    n = board.topology.symbol_count
    for locked in combinations(locked_pool, size):
        if any(a.overlaps(b) for a, b in combinations(locked, 2)):
            continue
        for s in range(n):
            if any(is_placed(board, c, s) for c in locked):
                continue
            locked_spots = [spots(board, c, s) for c in locked]
            if any(not 2 <= len(found) <= size for found in locked_spots):
                continue

            used: List[Constraint] = []
            ok = True
            for p in (p for found in locked_spots for p in found):
                covering = [r for r in reducible_pool if p in r]
                if len(covering) != 1:
                    ok = False
                    break
                if covering[0] not in used:
                    used.append(covering[0])
            if not ok or len(used) != size:
                continue

            used.sort(key=reducible_pool.index)
            elims = tuple(
                e
                for red in used
                for e in targets(board, (p for p in red.positions if not any(p in c for c in locked)), s)
            )
            if elims:
                return s, tuple(locked), tuple(used), elims
    return None


class _FishDetector(Detector):
    size = 0
    derivation_cls: type = XWingDerivation

    def detect(self, board: Board) -> Optional[Derivation]:
        rows = board.topology.constraints_of_kind(ConstraintKind.ROW)
        cols = board.topology.constraints_of_kind(ConstraintKind.COLUMN)
        # rows locked first, then columns locked
        for locked_pool, reducible_pool in ((rows, cols), (cols, rows)):
            found = _find_fish(board, self.size, locked_pool, reducible_pool)
            if found is not None:
                s, locked, reducible, elims = found
                return self.derivation_cls(self.technique, elims, (), s, locked, reducible)
        return None


@register
class XWingDetector(_FishDetector):
    technique = Technique.X_WING
    size = 2
    derivation_cls = XWingDerivation


@register
class SwordfishDetector(_FishDetector):
    technique = Technique.SWORDFISH
    size = 3
    derivation_cls = SwordfishDerivation


# ------------------ wings ------------------
@register
class YWingDetector(Detector):
    technique = Technique.Y_WING

    def detect(self, board: Board) -> Optional[Derivation]:
        topology = board.topology
        bivalue = [c.position for c in board.cells() if c.value is None and c.candidates.count() == 2]
        bivalue_set = set(bivalue)

        for pivot in bivalue:
            a, c = board.candidates_at(pivot).set_symbols()
            neighbours = sorted(topology.peers_of(pivot) & bivalue_set)
            pincers_a = [p for p in neighbours if board.candidates_at(p).contains(a)
                         and not board.candidates_at(p).contains(c)]
            pincers_c = [p for p in neighbours if board.candidates_at(p).contains(c)
                         and not board.candidates_at(p).contains(a)]

            for pa in pincers_a:
                b = board.candidates_at(pa).without(a).first()
                for pc in pincers_c:
                    if board.candidates_at(pc) != CandidateSet.of(b, c):
                        continue
                    seen_by_both = (topology.peers_of(pa) & topology.peers_of(pc)) - {pivot}
                    elims = targets(board, sorted(seen_by_both), b)
                    if elims:
                        return YWingDerivation(self.technique, elims, (), pivot, (pa, pc), a, b, c)
        return None
