"""
Minimal Flask API that wires the game loop into the board UI.

Endpoints:
- GET  /api/players          -> selectable player catalog
- GET  /api/game             -> current game state (FEN, history, flags, messages, seats, PGN)
- GET  /api/game/board.svg   -> board rendering for the current position
- POST /api/game/start       -> Start (only from a fresh/reset game)
- POST /api/game/toggle      -> Play/Pause
- POST /api/game/reset       -> Reset
- POST /api/settings         -> Save seat settings {"white": {"model", "api_key"}, "black": {...}}

One game per process; the loop runs on its own thread and the UI polls /api/game.
"""
from __future__ import annotations

import logging

from flask import Flask, Response, jsonify, request

from llmchess_duel.config import SETTINGS
from llmchess_duel.game import GameLoop
from llmchess_duel.players import PLAYERS, EnginePlayer
from llmchess_duel.snapshot import render_board_svg

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("server")

app = Flask(__name__)

LOOP = GameLoop()
if SETTINGS.white_model and SETTINGS.black_model:
    LOOP.save_settings(SETTINGS.white_model, SETTINGS.white_api_key, SETTINGS.black_model, SETTINGS.black_api_key)


@app.route("/api/players", methods=["GET"])
def list_players():
    return jsonify([
        {
            "provider": p.provider.value,
            "model": p.model,
            "config": {"depth": p.config.depth} if isinstance(p, EnginePlayer) else None,
        }
        for p in PLAYERS
    ])


@app.route("/api/game", methods=["GET"])
def game_state():
    return jsonify(LOOP.snapshot_state())


@app.route("/api/game/board.svg", methods=["GET"])
def game_board():
    state = LOOP.snapshot_state()
    svg = render_board_svg(state["fen"], last_move_uci=LOOP.last_move_uci())
    return Response(svg, mimetype="image/svg+xml")


@app.route("/api/game/start", methods=["POST"])
def start_game():
    if not LOOP.start():
        return jsonify({"error": "already_started", "message": "Reset the game before starting a new one."}), 400
    log.info("Game started from the API")
    return jsonify(LOOP.snapshot_state())


@app.route("/api/game/toggle", methods=["POST"])
def toggle_game():
    if not LOOP.snapshot_state()["started"]:
        return jsonify({"error": "not_started"}), 400
    LOOP.toggle()
    return jsonify(LOOP.snapshot_state())


@app.route("/api/game/reset", methods=["POST"])
def reset_game():
    LOOP.reset()
    return jsonify(LOOP.snapshot_state())


@app.route("/api/settings", methods=["POST"])
def save_settings():
    payload = request.get_json(silent=True) or {}
    white = payload.get("white") or {}
    black = payload.get("black") or {}
    ok = LOOP.save_settings(
        white.get("model", ""),
        white.get("api_key", ""),
        black.get("model", ""),
        black.get("api_key", ""),
    )
    state = LOOP.snapshot_state()
    if not ok:
        return jsonify({"error": "invalid_selection", "message": state["error"]}), 400
    return jsonify(state)


@app.after_request
def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
    response.headers["Access-Control-Allow-Credentials"] = "true"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    # Prevent caching so the UI always sees the freshest state/history
    response.headers["Cache-Control"] = "no-store, max-age=0"
    return response


@app.route("/api/<path:path>", methods=["OPTIONS"])
def cors_preflight(path: str):
    resp = app.make_response(("", 204))
    resp.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
    resp.headers["Access-Control-Allow-Credentials"] = "true"
    resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    resp.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return resp


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=False, threaded=True)
