from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from sudoku_engine.board import Board
from sudoku_engine.derivations import Derivation
from sudoku_engine.models import GenerationCancelled, GenerationError, Position, Technique
from sudoku_engine.techniques import Detector, detectors_for
from sudoku_engine.topology import GridTopology

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolveResult:
    is_solved: bool
    steps: Tuple[Derivation, ...] = ()
    board: Optional[Board] = field(default=None, compare=False, repr=False)

    @property
    def techniques_used(self) -> List[Technique]:
        seen: List[Technique] = []
        for d in self.steps:
            if d.technique not in seen:
                seen.append(d.technique)
        return seen

    @property
    def hardest(self) -> Optional[Technique]:
        if not self.steps:
            return None
        return max((d.technique for d in self.steps), key=lambda t: t.rank)


@dataclass(frozen=True)
class GeneratorConfig:
    max_attempts: int = 50
    givens_ratio: float = 0.5
    # accept only puzzles whose hardest technique is exactly this one
    target: Optional[Technique] = None
    techniques: Optional[Tuple[Technique, ...]] = None
    seed: Optional[int] = None

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if not 0.0 <= self.givens_ratio <= 1.0:
            raise ValueError(f"givens_ratio must be within [0, 1], got {self.givens_ratio}")


@dataclass(frozen=True)
class GeneratedPuzzle:
    board: Board
    grade: Technique
    attempts: int
    solution: Dict[Position, int] = field(repr=False, default_factory=dict)


def _check_cancel(cancel) -> None:
    if cancel is not None and cancel.is_set():
        raise GenerationCancelled("Generation cancelled")


# ------------------ derivation driver ------------------
def find_derivation(
    board: Board,
    detectors: Optional[Sequence[Detector]] = None,
    cancel=None,
) -> Optional[Derivation]:
    """First derivation found by the detectors, tried in the given (ascending) order."""
    for det in detectors if detectors is not None else detectors_for():
        _check_cancel(cancel)
        d = det.detect(board)
        if d is not None:
            return d
    return None


def next_hint(board: Board, detectors: Optional[Sequence[Detector]] = None) -> Optional[Derivation]:
    """Easiest applicable derivation on the live candidate state; None means no hint."""
    if board.is_solved() or board.has_contradiction():
        return None
    return find_derivation(board.clone(), detectors)


def apply_derivation(board: Board, derivation: Derivation) -> int:
    return board.apply_all(derivation.to_action_list(board), check_editable=False)


def solve_logically(
    board: Board,
    detectors: Optional[Sequence[Detector]] = None,
    cancel=None,
) -> SolveResult:
    """
    Solve a scratch copy step by step:
    - candidates are recomputed from placed values first
    - each step applies the first derivation found
    - stops when solved, contradictory, or no detector matches
    """
    if detectors is None:
        detectors = detectors_for()
    scratch = board.clone()
    scratch.fill_candidates()

    # every step removes at least one candidate or fills one cell
    budget = sum(c.candidates.count() for c in scratch.cells()) + len(scratch.topology)
    steps: List[Derivation] = []
    while not scratch.is_solved():
        if scratch.has_contradiction() or len(steps) >= budget:
            break
        d = find_derivation(scratch, detectors, cancel)
        if d is None:
            break
        if apply_derivation(scratch, d) == 0:
            logger.warning("%s made no progress; stopping", d.description())
            break
        steps.append(d)
        logger.debug("step %d: %s", len(steps), d.description())

    solved = scratch.is_solved() and scratch.validate_rules().is_valid
    return SolveResult(solved, tuple(steps), scratch)


def grade(board: Board, detectors: Optional[Sequence[Detector]] = None, cancel=None) -> Optional[Technique]:
    """Hardest technique needed to solve `board`, or None if the detectors get stuck."""
    result = solve_logically(board, detectors, cancel)
    return result.hardest if result.is_solved else None


def _has_errors(board: Board) -> bool:
    if board.has_contradiction() or not board.validate_rules().is_valid:
        return True
    return any(board.is_mistake(c.position) for c in board.cells())


def auto_fill_unique_candidates(board: Board) -> List[Position]:
    """
    Repeatedly fill empty editable cells that have exactly one candidate.
    Nothing is filled while the board has errors; filling stops as soon as one appears.
    """
    filled: List[Position] = []
    if _has_errors(board):
        return filled
    while True:
        progressed = False
        for cell in list(board.cells()):
            if cell.value is None and cell.editable and cell.candidates.count() == 1:
                board.place(cell.position, cell.candidates.first())
                filled.append(cell.position)
                progressed = True
                if _has_errors(board):
                    logger.debug("auto fill stopped after %d cells: board has errors", len(filled))
                    return filled
        if not progressed:
            return filled


# ------------------ backtracking ------------------
def _search(board: Board, rng: Optional[random.Random], limit: int, found: List[Dict[Position, int]]) -> None:
    if len(found) >= limit:
        return
    if board.has_contradiction():
        return
    empties = [c for c in board.cells() if c.value is None]
    if not empties:
        found.append({c.position: c.value for c in board.cells()})
        return

    cell = min(empties, key=lambda c: c.candidates.count())
    symbols = list(cell.candidates)
    if rng is not None:
        rng.shuffle(symbols)
    for s in symbols:
        trial = board.clone()
        trial.place(cell.position, s)
        _search(trial, rng, limit, found)
        if len(found) >= limit:
            return


def solve_backtracking(board: Board, rng: Optional[random.Random] = None) -> Optional[Dict[Position, int]]:
    scratch = board.clone()
    scratch.fill_candidates()
    found: List[Dict[Position, int]] = []
    _search(scratch, rng, 1, found)
    return found[0] if found else None


def count_solutions(board: Board, limit: int = 2) -> int:
    scratch = board.clone()
    scratch.fill_candidates()
    found: List[Dict[Position, int]] = []
    _search(scratch, None, limit, found)
    return len(found)


def random_solution(topology: GridTopology, rng: random.Random) -> Optional[Dict[Position, int]]:
    return solve_backtracking(Board(topology), rng)


# ------------------ generation ------------------
def _puzzle_from_solution(
    topology: GridTopology,
    solution: Dict[Position, int],
    givens_ratio: float,
    rng: random.Random,
) -> Board:
    positions = list(topology.positions())
    rng.shuffle(positions)
    keep = set(positions[: round(len(positions) * givens_ratio)])

    board = Board(topology, solution)
    for pos in topology.positions():
        if pos in keep:
            cell = board.cell(pos)
            cell.value = solution[pos]
            cell.editable = False
    board.fill_candidates()
    return board


def generate(
    topology: GridTopology,
    config: GeneratorConfig = GeneratorConfig(),
    cancel=None,
    rng: Optional[random.Random] = None,
) -> GeneratedPuzzle:
    """
    Generate a puzzle solvable by the configured detectors.
    Each attempt uses a fresh random solution; attempts the detectors cannot
    finish (or whose grade misses config.target) are discarded.
    Raises GenerationError after config.max_attempts, GenerationCancelled on cancel.
    """
    rng = rng or random.Random(config.seed)
    detectors = detectors_for(config.techniques)

    for attempt in range(1, config.max_attempts + 1):
        _check_cancel(cancel)
        solution = random_solution(topology, rng)
        if solution is None:
            raise GenerationError(f"Topology '{topology.name}' has no solution")

        board = _puzzle_from_solution(topology, solution, config.givens_ratio, rng)
        result = solve_logically(board, detectors, cancel)
        if not result.is_solved:
            logger.debug("attempt %d rejected: detectors got stuck", attempt)
            continue

        hardest = result.hardest or Technique.NAKED_SINGLE
        if config.target is not None and hardest is not config.target:
            logger.debug("attempt %d rejected: graded %s, wanted %s", attempt, hardest.label, config.target.label)
            continue

        logger.debug("attempt %d accepted: graded %s", attempt, hardest.label)
        return GeneratedPuzzle(board, hardest, attempt, solution)

    raise GenerationError(
        f"No puzzle for '{topology.name}' found within {config.max_attempts} attempts"
        + (f" (target {config.target.label})" if config.target else "")
    )
