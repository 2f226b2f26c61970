from __future__ import annotations

from flask import Flask, request, jsonify
from flask_cors import CORS

from sudoku_engine.board import Board, symbol_char
from sudoku_engine.hints import HintResult, generate_hint
from sudoku_engine.models import GenerationError, Technique
from sudoku_engine.reports import generate_mistake_report, generate_violation_report
from sudoku_engine.solver import GeneratorConfig, generate, solve_logically
from sudoku_engine.topology import by_name

DEFAULTS = {
    "DEFAULT_TYPE": "standard9x9",
    "MAX_ATTEMPTS": GeneratorConfig.max_attempts,
    "GIVENS_RATIO": GeneratorConfig.givens_ratio,
}


def _cell(p) -> dict:
    return {"r": p.row + 1, "c": p.col + 1}


def _hint_to_json(hint: HintResult) -> dict:
    return {
        "has_hint": hint.has_hint,
        "technique": hint.technique or None,
        "action": hint.action,
        "message": hint.message,
        "actions": [
            {**_cell(a.position), "symbol": symbol_char(a.symbol), "kind": a.kind.value}
            for a in hint.actions
        ],
        "cause": [_cell(p) for p in hint.derivation.cause_positions()] if hint.derivation else [],
    }


def _json_body() -> dict:
    data = request.get_json(force=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("JSON object expected")
    return data


def _board_from_request(app: Flask, data: dict) -> Board:
    topology = by_name(data.get("type") or app.config["DEFAULT_TYPE"])
    givens = data.get("givens") or ""
    current = data.get("current")
    if current is not None and str(current).strip() == "":
        current = None
    return Board.from_strings(topology, givens, current, data.get("solution") or None)


def create_app(config: dict = None) -> Flask:
    app = Flask(__name__)
    app.config.update(DEFAULTS)
    app.config.from_prefixed_env("SUDOKU")
    if config:
        app.config.update(config)
    CORS(app)

    @app.errorhandler(ValueError)
    def bad_request(e):
        app.logger.info("rejected request: %s", e)
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(GenerationError)
    def generation_failed(e):
        app.logger.warning("generation failed: %s", e)
        return jsonify({"error": str(e)}), 422

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    @app.post("/analyze")
    def analyze():
        data = _json_body()
        board = _board_from_request(app, data)

        # 1) RULE VIOLATION (duplicates only)
        violation = generate_violation_report(board)
        if violation.has_violation:
            return jsonify({
                "validation": {"ok": False, "explanation": violation.explanation},
                "duplicates": [_cell(p) for p in violation.conflict_cells],
                "hint": {"has_hint": False, "technique": None, "message": ""},
                "solver": {"ok": False, "grade": None, "steps": 0},
                "mistakes": {"has_mistake": False, "items": []},
            })

        # 2) MISTAKE REPORT (valid grid but inconsistent with the known solution)
        mistakes = generate_mistake_report(board)

        # 3) GRADE on a scratch copy
        result = solve_logically(board)
        solver = {
            "ok": result.is_solved,
            "grade": result.hardest.label if result.is_solved and result.hardest else None,
            "steps": len(result.steps),
        }

        # 4) Mistakes override hint highlighting
        hint = generate_hint(board, mistakes)
        return jsonify({
            "validation": {"ok": True, "explanation": ""},
            "duplicates": [],
            "hint": _hint_to_json(hint),
            "solver": solver,
            "mistakes": {
                "has_mistake": mistakes.has_mistake,
                "items": [
                    {**_cell(it.cell), "entered": symbol_char(it.entered), "explanation": it.explanation}
                    for it in mistakes.items
                ],
            },
        })

    @app.post("/hint")
    def hint():
        data = _json_body()
        board = _board_from_request(app, data)
        return jsonify(_hint_to_json(generate_hint(board)))

    @app.post("/generate")
    def generate_puzzle():
        data = _json_body()
        topology = by_name(data.get("type") or app.config["DEFAULT_TYPE"])
        target = data.get("target")
        seed = data.get("seed")
        config = GeneratorConfig(
            max_attempts=int(data.get("max_attempts", app.config["MAX_ATTEMPTS"])),
            givens_ratio=float(data.get("givens_ratio", app.config["GIVENS_RATIO"])),
            target=Technique.parse(target) if target else None,
            seed=int(seed) if seed is not None else None,
        )
        puzzle = generate(topology, config)
        return jsonify({
            "type": topology.name,
            "givens": puzzle.board.to_string(),
            "grade": puzzle.grade.label,
            "attempts": puzzle.attempts,
        })

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=True)
