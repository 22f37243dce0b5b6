"""
Game loop controller.

- LoopConfig: loop delay, think delay, attempts per tick, notice durations.
- GameLoop: drives one game between the White and Black seats using python-chess (via Referee).
  - Each tick: deliver finished engine evaluations, then (if running and no move is in flight)
    compute and apply exactly one move.
  - Forced moves are applied without asking anyone. LLM seats get a board image plus described legal
    moves and answer with an index. Engine seats evaluate asynchronously; the result is posted back
    and applied at the next tick boundary, or dropped if the game was reset or ended meanwhile.
  - Selection failures cost the tick only. A failure while applying a resolved move resets the game
    and shows a timed error.
  - Records "White: Knight moves to f3" style history plus a final "Game Over: ..." entry.

start()/toggle()/reset()/save_settings() may be called from any thread (the web UI does).
"""
from __future__ import annotations

import functools
import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import chess

from .config import SETTINGS
from .engine_selector import EngineMoveSelector
from .errors import ConfigurationError, MoveSelectionError
from .llm_client import LLMMoveSelector, MoveRequest
from .loop_state import LoopState, Notice
from .moves import describe_move, describe_moves
from .players import EnginePlayer, Seat, color_name, default_seats, find_player
from .referee import Referee
from .snapshot import render_board_png

NO_PREVIOUS_MOVE = "No previous moves yet."
APPLY_ERROR_MESSAGE = "Error occured finding next move, make sure API key is correct."
SAVED_MESSAGE = "Settings saved successfully!"
INVALID_SELECTION_MESSAGE = "Error: LLM selection is invalid."


@dataclass
class LoopConfig:
    loop_delay_s: float = SETTINGS.loop_delay_s
    think_delay_s: float = SETTINGS.think_delay_s
    max_attempts: int = SETTINGS.max_attempts  # selection attempts per tick
    retry_backoff_s: float = SETTINGS.retry_backoff_s
    error_display_s: float = SETTINGS.error_display_s
    notice_display_s: float = SETTINGS.notice_display_s


class GameLoop:
    def __init__(self, llm_selector=None, engine_selector=None, cfg: LoopConfig | None = None,
                 referee: Referee | None = None,
                 render_snapshot: Callable[[str], str] = render_board_png,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.log = logging.getLogger("game_loop")
        self.cfg = cfg or LoopConfig()
        self.ref = referee or Referee()
        self.llm = llm_selector if llm_selector is not None else LLMMoveSelector()
        self.engine = engine_selector if engine_selector is not None else EngineMoveSelector()
        self._render_snapshot = render_snapshot
        self._sleep = sleep

        self.state = LoopState()
        self.history: list[str] = []
        self.seats: dict[chess.Color, Seat] = default_seats()
        self.thinking_message = ""
        self.result_message = ""
        self.error = Notice(clock)
        self.saved = Notice(clock)

        self._lock = threading.RLock()
        self._engine_results: queue.Queue = queue.Queue()
        self._pending_engine: Optional[tuple[int, str]] = None  # (token, fen) of the queued evaluation
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None

    # ---------------- Controls -----------------
    def start(self, background: bool = True) -> bool:
        """Start a game from Idle. With background=False the caller drives tick() itself."""
        with self._lock:
            if not self.state.start():
                return False
            generation = self.state.generation
            self._update_headers()
        self.log.info("Starting loop (white=%s, black=%s)", self._label(chess.WHITE), self._label(chess.BLACK))
        if background:
            self._thread = threading.Thread(target=self._run, args=(generation,), name="game-loop", daemon=True)
            self._thread.start()
        return True

    def toggle(self) -> bool:
        """Play/Pause. Returns True if the loop is now playing."""
        with self._lock:
            self.state.toggle()
            playing = self.state.playing
        self.log.info("Game %s", "resumed" if playing else "paused")
        self._wake.set()
        return playing

    def pause(self) -> bool:
        with self._lock:
            return self.state.pause()

    def resume(self) -> bool:
        with self._lock:
            changed = self.state.resume()
        self._wake.set()
        return changed

    def reset(self) -> None:
        with self._lock:
            self.state.reset()
            self._pending_engine = None
            self.ref.reset()
            self.history.clear()
            self.result_message = ""
            self.thinking_message = ""
        self._wake.set()
        self.log.info("Game reset!")

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def close(self) -> None:
        self.reset()
        self.join(timeout=self.cfg.loop_delay_s * 4)
        for selector in (self.llm, self.engine):
            close = getattr(selector, "close", None)
            if close:
                close()

    def save_settings(self, white_model: str, white_api_key: str, black_model: str, black_api_key: str) -> bool:
        """Bind both seats to catalog players. Unknown models leave the seats untouched."""
        white = find_player(white_model)
        black = find_player(black_model)
        with self._lock:
            if white is None or black is None:
                self.log.warning("Rejected seat selection white=%r black=%r", white_model, black_model)
                self.error.show(INVALID_SELECTION_MESSAGE, self.cfg.notice_display_s)
                return False
            self.seats = {
                chess.WHITE: Seat("White", white, white_api_key or ""),
                chess.BLACK: Seat("Black", black, black_api_key or ""),
            }
            self._update_headers()
            self.saved.show(SAVED_MESSAGE, self.cfg.notice_display_s)
        self.log.info("Seats saved: white=%s black=%s", white.model, black.model)
        return True

    # ---------------- Loop -----------------
    def _run(self, generation: int) -> None:
        while True:
            with self._lock:
                if self.state.generation != generation or not self.state.started or self.state.game_over:
                    break
            self.tick()
            self._wake.wait(self.cfg.loop_delay_s)
            self._wake.clear()
        self.log.info("Game loop ended")

    def tick(self) -> bool:
        """One scheduled iteration; applies at most one move. Returns True if it did."""
        if self._drain_engine_results():
            return True
        with self._lock:
            token = self.state.begin_move()
        if token is None:
            return False
        try:
            return self._make_move(token)
        finally:
            with self._lock:
                if self._pending_engine is None or self._pending_engine[0] != token:
                    self.state.end_move(token)

    def _make_move(self, token: int) -> bool:
        with self._lock:
            if not self.state.accepts(token):
                return False
            turn = self.ref.turn()
            mover, previous = color_name(turn), color_name(not turn)
            moves = self.ref.legal_moves()
            seat = self.seats[turn]
            fen = self.ref.snapshot()
            history = self.ref.history()
        if not moves:
            return False
        if len(moves) == 1:
            self.log.info("%s has a single legal move: %s", mover, moves[0])
            return self._commit(token, mover, san=moves[0])

        attempts = max(1, self.cfg.max_attempts)
        for attempt in range(1, attempts + 1):
            with self._lock:
                if not self.state.accepts(token):
                    return False
            try:
                san = self._select(token, seat, moves, fen, history, mover, previous)
            except (ConfigurationError, MoveSelectionError) as e:
                self.log.warning("%s: move attempt %d/%d failed: %s", mover, attempt, attempts, e)
            except Exception:
                self.log.exception("%s: move attempt %d/%d failed", mover, attempt, attempts)
            else:
                if san is None:
                    return False  # engine evaluation queued
                return self._commit(token, mover, san=san)
            finally:
                with self._lock:
                    if self._pending_engine is None and self.state.accepts(token):
                        self.thinking_message = ""
            if attempt < attempts and self.cfg.retry_backoff_s > 0:
                self._sleep(self.cfg.retry_backoff_s)
        return False

    def _select(self, token: int, seat: Seat, moves: list[str], fen: str, history: list[str],
                mover: str, previous: str) -> Optional[str]:
        """Resolve the SAN to play, or None when an engine evaluation was queued instead."""
        player = seat.validate()
        with self._lock:
            self.thinking_message = f"{mover} is thinking..."

        if isinstance(player, EnginePlayer):
            with self._lock:
                self._pending_engine = (token, fen)
            try:
                self.engine.request(fen, player.config.depth, functools.partial(self._on_engine_result, token, fen))
            except Exception:
                with self._lock:
                    if self._pending_engine == (token, fen):
                        self._pending_engine = None
                raise
            return None

        last_move = f"{previous}: {describe_move(history[-1])}" if history else NO_PREVIOUS_MOVE
        req = MoveRequest(
            current_state_image=self._render_snapshot(fen),
            all_moves=describe_moves(moves),
            provider=player.provider,
            model=player.model,
            color=mover,
            last_move=last_move,
            api_key=seat.api_key,
        )
        index = self.llm.choose(req)
        self._sleep(self.cfg.think_delay_s)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(moves):
            raise MoveSelectionError(f"Invalid move: {index}")
        return moves[index]

    # ---------------- Engine results -----------------
    def _on_engine_result(self, token: int, fen: str, best_move: Optional[str]) -> None:
        # Runs on the engine worker thread: only posts, never touches the game.
        self._engine_results.put((token, fen, best_move))
        self._wake.set()

    def _drain_engine_results(self) -> bool:
        applied = False
        while True:
            try:
                token, fen, best = self._engine_results.get_nowait()
            except queue.Empty:
                return applied
            with self._lock:
                if self._pending_engine != (token, fen) or not self.state.accepts(token):
                    self.log.debug("Discarding stale engine result %s", best)
                    continue
                self._pending_engine = None
                self.state.end_move(token)
                self.thinking_message = ""
                mover = color_name(self.ref.turn())
                if best is None:
                    self.log.warning("%s: engine returned no move; retrying next tick", mover)
                    continue
                applied = self._commit(token, mover, uci=best) or applied

    # ---------------- Apply / terminal -----------------
    def _commit(self, token: int, mover: str, san: str | None = None, uci: str | None = None) -> bool:
        try:
            with self._lock:
                if not self.state.accepts(token):
                    self.log.info("Discarding %s move %s: game was reset or ended", mover, san or uci)
                    return False
                applied = self.ref.apply_uci(uci) if uci else self.ref.apply(san)
                self.history.append(f"{mover}: {describe_move(applied)}")
                self.log.info("[ply %d] %s (%s)", len(self.ref.board.move_stack), self.history[-1], applied)
                self._check_terminal(mover)
            return True
        except Exception:
            self.log.exception("Failed to apply %s move %s", mover, san or uci)
            self.reset()
            with self._lock:
                self.error.show(APPLY_ERROR_MESSAGE, self.cfg.error_display_s)
            return False

    def _check_terminal(self, mover: str) -> None:
        if not self.ref.is_game_over():
            return
        if self.ref.is_checkmate():
            reason = "Checkmate"
        elif self.ref.is_stalemate():
            reason = "Stalemate"
        else:
            reason = "Draw"
        final = f"Game Over: {reason}." + ("" if reason == "Draw" else f" Winner: {mover}.")
        self.result_message = final
        self.history.append(final)
        self.state.finish()
        self.log.info(final)

    # ---------------- Views -----------------
    def _label(self, color: chess.Color) -> str:
        player = self.seats[color].player
        return player.model if player else "?"

    def _update_headers(self) -> None:
        self.ref.set_headers(white=self._label(chess.WHITE), black=self._label(chess.BLACK))

    def last_move_uci(self) -> Optional[str]:
        with self._lock:
            stack = self.ref.board.move_stack
            return stack[-1].uci() if stack else None

    def snapshot_state(self) -> dict:
        """Plain-dict view of the game for the UI. API keys are never included."""
        with self._lock:
            return {
                "fen": self.ref.snapshot(),
                "history": list(self.history),
                "started": self.state.started,
                "playing": self.state.playing,
                "game_over": self.state.game_over,
                "phase": self.state.phase.value,
                "thinking": self.thinking_message,
                "result": self.result_message,
                "error": self.error.current(),
                "saved": self.saved.current(),
                "seats": {
                    "white": self.seats[chess.WHITE].public_view(),
                    "black": self.seats[chess.BLACK].public_view(),
                },
                "pgn": self.ref.pgn(),
            }
