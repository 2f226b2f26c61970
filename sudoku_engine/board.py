from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from sudoku_engine.candidates import CandidateSet
from sudoku_engine.models import Action, ActionKind, IllegalMoveError, Position, ValidationResult
from sudoku_engine.topology import GridTopology

SYMBOL_CHARS = "123456789ABCDEFGHIJKLMNOPQRSTUVW"
EMPTY_CHARS = ".0"


def symbol_char(s: Optional[int]) -> str:
    return "." if s is None else SYMBOL_CHARS[s]


def parse_symbols(s: str, topology: GridTopology) -> Dict[Position, Optional[int]]:
    """
    Parse a text grid into {position: symbol-or-None}.
    Accepts either one char per valid position (row-major) or one char per
    cell of the rows x cols bounding box.
    """
    s = "".join(ch for ch in s if not ch.isspace())
    positions = topology.positions()
    box = topology.rows * topology.cols
    if len(s) == len(positions):
        pairs = zip(positions, s)
    elif len(s) == box:
        pairs = (
            (Position(i // topology.cols, i % topology.cols), ch)
            for i, ch in enumerate(s)
        )
    else:
        raise ValueError(
            f"Expected {len(positions)} (or {box}) characters after removing whitespace, got {len(s)}"
        )

    out: Dict[Position, Optional[int]] = {}
    for pos, ch in pairs:
        if ch in EMPTY_CHARS:
            v = None
        else:
            v = SYMBOL_CHARS.find(ch.upper())
            if v < 0 or v >= topology.symbol_count:
                raise ValueError(f"Invalid char '{ch}' in grid.")
        if not topology.is_valid(pos):
            if v is not None:
                raise ValueError(f"Symbol '{ch}' placed outside the grid at {pos}.")
            continue
        out[pos] = v
    return out


@dataclass
class Cell:
    position: Position
    value: Optional[int] = None
    editable: bool = True
    candidates: CandidateSet = CandidateSet()
    _solution: Optional[int] = field(default=None, repr=False)

    def copy(self) -> "Cell":
        return Cell(self.position, self.value, self.editable, self.candidates, self._solution)


class Board:
    """
    Live puzzle state over a shared GridTopology:
    - one Cell per valid position (value, editable flag, candidate notes)
    - optional per-cell solution, only reachable through solution_at / boolean checks
    - candidates of solved cells are empty
    """

    def __init__(self, topology: GridTopology, solution: Optional[Mapping[Position, int]] = None):
        self.topology = topology
        n = topology.symbol_count
        self._cells: Dict[Position, Cell] = {
            p: Cell(p, candidates=CandidateSet.full(n)) for p in topology.positions()
        }
        if solution:
            for pos, s in solution.items():
                if pos not in self._cells:
                    raise ValueError(f"Solution position {pos} is not part of '{topology.name}'")
                if not 0 <= s < n:
                    raise ValueError(f"Solution symbol {s} out of range at {pos}")
                self._cells[pos]._solution = s

    @staticmethod
    def from_strings(
        topology: GridTopology,
        givens: str,
        current: Optional[str] = None,
        solution: Optional[str] = None,
    ) -> "Board":
        given_map = parse_symbols(givens, topology)
        sol_map = None
        if solution is not None:
            parsed = parse_symbols(solution, topology)
            sol_map = {p: v for p, v in parsed.items() if v is not None}
        b = Board(topology, sol_map)
        for pos, v in given_map.items():
            if v is not None:
                cell = b._cells[pos]
                cell.value = v
                cell.editable = False
        if current is not None:
            for pos, v in parse_symbols(current, topology).items():
                cell = b._cells[pos]
                if cell.editable:
                    cell.value = v
        b.fill_candidates()
        return b

    def clone(self) -> "Board":
        b = Board.__new__(Board)
        b.topology = self.topology
        b._cells = {p: c.copy() for p, c in self._cells.items()}
        return b

    # ---------- cells ----------
    def cell(self, position: Position) -> Cell:
        try:
            return self._cells[position]
        except KeyError:
            raise IllegalMoveError(f"{position} is not part of '{self.topology.name}'") from None

    def cells(self) -> Iterator[Cell]:
        for p in self.topology.positions():
            yield self._cells[p]

    def value_at(self, position: Position) -> Optional[int]:
        c = self._cells.get(position)
        return None if c is None else c.value

    def solution_at(self, position: Position) -> Optional[int]:
        c = self._cells.get(position)
        return None if c is None else c._solution

    def has_solution(self) -> bool:
        return all(c._solution is not None for c in self._cells.values())

    def is_editable(self, position: Position) -> bool:
        c = self._cells.get(position)
        return c is not None and c.editable

    def is_mistake(self, position: Position) -> bool:
        """True iff the cell holds a value that differs from its known solution."""
        c = self._cells.get(position)
        if c is None or c.value is None or c._solution is None:
            return False
        return c.value != c._solution

    def empty_positions(self) -> List[Position]:
        return [c.position for c in self.cells() if c.value is None]

    # ---------- values ----------
    def set_value(
        self,
        position: Position,
        symbol: Optional[int],
        check_editable: bool = True,
        strict: bool = False,
    ) -> bool:
        """
        Set (or clear with None) a cell value. Returns True if the value changed.
        Non-editable cell with check_editable: strict -> IllegalMoveError, lenient -> no-op False.
        """
        cell = self.cell(position)
        if symbol is not None and not (isinstance(symbol, int) and 0 <= symbol < self.topology.symbol_count):
            raise IllegalMoveError(f"Symbol {symbol!r} out of range for '{self.topology.name}'")
        if check_editable and not cell.editable:
            if strict:
                raise IllegalMoveError(f"Cell {position} is not editable")
            return False
        if cell.value == symbol:
            return False
        cell.value = symbol
        return True

    def clear_value(self, position: Position, check_editable: bool = True, strict: bool = False) -> bool:
        return self.set_value(position, None, check_editable, strict)

    def place(self, position: Position, symbol: int, check_editable: bool = False) -> bool:
        """Set a value and remove it from the candidates of every peer."""
        if not self.set_value(position, symbol, check_editable=check_editable, strict=True):
            return False
        self._cells[position].candidates = CandidateSet()
        for p in self.topology.peers_of(position):
            peer = self._cells[p]
            if peer.value is None:
                peer.candidates = peer.candidates.without(symbol)
        return True

    def is_symbol_completed(self, symbol) -> bool:
        if not isinstance(symbol, int) or isinstance(symbol, bool):
            return False
        if not 0 <= symbol < self.topology.symbol_count:
            return False
        placed = [c for c in self._cells.values() if c.value == symbol]
        if len(placed) != self.topology.occurrences_per_symbol:
            return False
        return all(c._solution == symbol for c in placed)

    def is_solved(self) -> bool:
        return all(c.value is not None for c in self._cells.values())

    def is_finished(self) -> bool:
        return self.is_solved() and not any(self.is_mistake(p) for p in self._cells)

    # ---------- candidates ----------
    def candidates_at(self, position: Position) -> CandidateSet:
        c = self._cells.get(position)
        if c is None or c.value is not None:
            return CandidateSet()
        return c.candidates

    def set_candidates(self, position: Position, candidates: CandidateSet) -> None:
        self.cell(position).candidates = candidates

    def add_candidate(self, position: Position, symbol: int) -> bool:
        cell = self.cell(position)
        if cell.candidates.contains(symbol):
            return False
        cell.candidates = cell.candidates.with_symbol(symbol)
        return True

    def clear_candidate(self, position: Position, symbol: int) -> bool:
        cell = self.cell(position)
        if not cell.candidates.contains(symbol):
            return False
        cell.candidates = cell.candidates.without(symbol)
        return True

    def fill_candidates(self) -> None:
        """Recompute every empty cell's candidates from the placed values of its peers."""
        full = CandidateSet.full(self.topology.symbol_count)
        for cell in self._cells.values():
            if cell.value is not None:
                cell.candidates = CandidateSet()
                continue
            used = CandidateSet.of(*(
                v for v in (self._cells[p].value for p in self.topology.peers_of(cell.position))
                if v is not None
            ))
            cell.candidates = full - used

    def has_contradiction(self) -> bool:
        return any(c.value is None and c.candidates.is_empty() for c in self._cells.values())

    # ---------- actions ----------
    def apply(self, action: Action, check_editable: bool = True) -> bool:
        """Execute one (position, symbol, kind) action. Returns True if the board changed."""
        if action.kind is ActionKind.SET_VALUE:
            if check_editable and not self.is_editable(action.position):
                return False
            return self.place(action.position, action.symbol)
        if action.kind is ActionKind.SET_NOTE:
            return self.add_candidate(action.position, action.symbol)
        if action.kind is ActionKind.CLEAR_NOTE:
            return self.clear_candidate(action.position, action.symbol)
        raise ValueError(f"Unknown action kind {action.kind!r}")

    def apply_all(self, actions: Iterable[Action], check_editable: bool = True) -> int:
        """Execute actions as one batch, in order. Returns how many changed the board."""
        return sum(1 for a in actions if self.apply(a, check_editable))

    # ---------- rendering / validation ----------
    def to_string(self) -> str:
        return "".join(symbol_char(c.value) for c in self.cells())

    def pretty(self) -> str:
        lines = []
        for r in range(self.topology.rows):
            row = []
            for c in range(self.topology.cols):
                pos = Position(r, c)
                row.append(symbol_char(self._cells[pos].value) if pos in self._cells else " ")
            lines.append(" ".join(row).rstrip())
        return "\n".join(lines)

    def validate_rules(self) -> ValidationResult:
        for constraint in self.topology.unique_constraints():
            seen: Dict[int, List[Position]] = {}
            for p in constraint.positions:
                v = self._cells[p].value
                if v is None:
                    continue
                seen.setdefault(v, []).append(p)
            for s, cells in seen.items():
                if len(cells) > 1:
                    return ValidationResult(False, constraint.kind, constraint.name, s, cells)
        return ValidationResult(True)
