import argparse
import logging

from sudoku_engine.board import Board
from sudoku_engine.models import GenerationError, Technique
from sudoku_engine.hints import generate_hint
from sudoku_engine.reports import generate_mistake_report, generate_violation_report
from sudoku_engine.solver import GeneratorConfig, generate, solve_logically
from sudoku_engine.topology import by_name, known_types


def print_grid(board: Board):
    print(board.pretty())


def run_generate(args) -> None:
    topology = by_name(args.type)
    config = GeneratorConfig(
        max_attempts=args.max_attempts,
        givens_ratio=args.givens_ratio,
        target=Technique.parse(args.target) if args.target else None,
        seed=args.seed,
    )
    print("GENERATOR REPORT")
    print("=" * 60)
    try:
        puzzle = generate(topology, config)
    except GenerationError as e:
        print("Status: FAIL")
        print(f"Explanation: {e}")
        print("=" * 60)
        return
    print(f"Status: PASS (attempt {puzzle.attempts})")
    print(f"Grade: {puzzle.grade.label}")
    print(f"Givens: {puzzle.board.to_string()}")
    print()
    print_grid(puzzle.board)
    print("=" * 60)


def run_analyze(args) -> None:
    topology = by_name(args.type)
    board = Board.from_strings(topology, args.givens, args.current, args.solution)

    print("\nBOARD:\n")
    print_grid(board)
    print()

    print("RUN REPORT")
    print("=" * 60)

    # 1) VALIDATION
    violation = generate_violation_report(board)
    print("VALIDATION REPORT")
    print("-" * 60)
    if violation.has_violation:
        print("Status: FAIL")
        print(violation.explanation)
        print("=" * 60)
        return
    print("Status: PASS")
    print("No rule violations detected.")
    print("-" * 60)

    # 2) MISTAKE REPORT
    mistake_report = generate_mistake_report(board)
    print("MISTAKE REPORT")
    print("-" * 60)
    print(mistake_report.summary)
    for item in mistake_report.items:
        print(f"\n- Cell {item.cell}")
        print("  " + item.explanation.replace("\n", "\n  "))
    print("-" * 60)

    # 3) GRADE (technique loop on a scratch copy)
    if args.grade:
        result = solve_logically(board)
        print("SOLVER REPORT")
        print("-" * 60)
        if not result.is_solved:
            print("Status: FAIL (Technique-only solver stuck)")
            print(f"Steps before getting stuck: {len(result.steps)}")
        else:
            hardest = result.hardest.label if result.hardest else "none (already complete)"
            print("Status: PASS (Solved by logic only)")
            print(f"Steps: {len(result.steps)}")
            print(f"Techniques used: {', '.join(t.label for t in result.techniques_used) or '-'}")
            print(f"Grade: {hardest}")
        print("-" * 60)

    # 4) HINT REPORT (optional)
    if args.hint:
        hint = generate_hint(board, mistake_report)
        print("HINT REPORT")
        print("-" * 60)
        if hint.has_hint:
            print(f"Technique: {hint.technique}")
            print(f"Action: {hint.action}")
            print(hint.message)
        else:
            print(hint.message or "No hint available.")
        print("-" * 60)

    print("=" * 60)
    print()


def main(argv=None):
    p = argparse.ArgumentParser(prog="sudoku-engine")
    p.add_argument("--type", default="standard9x9", choices=known_types(), help="Sudoku variant")
    p.add_argument("--givens", help="Givens, one char per cell (symbols + . or 0)")
    p.add_argument("--current", help="User grid in the same format as --givens")
    p.add_argument("--solution", help="Known solution in the same format as --givens")
    p.add_argument("--hint", action="store_true", help="Print one next-step hint")
    p.add_argument("--grade", action="store_true", help="Solve by logic and print the difficulty grade")
    p.add_argument("--generate", action="store_true", help="Generate a new puzzle")
    p.add_argument("--target", help="Technique the generated puzzle must need, e.g. 'x-wing'")
    p.add_argument("--seed", type=int, help="Random seed for --generate")
    p.add_argument("--max-attempts", type=int, default=GeneratorConfig.max_attempts)
    p.add_argument("--givens-ratio", type=float, default=GeneratorConfig.givens_ratio)
    p.add_argument("-v", "--verbose", action="store_true", help="Log solver steps")
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.generate:
            run_generate(args)
        elif args.givens:
            run_analyze(args)
        else:
            p.error("either --givens or --generate is required")
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
