"""
Stockfish-backed move selector.

- Resolves engine binary path from: explicit parameter, SETTINGS.stockfish_path/env, or system PATH.
- request(): evaluates a FEN at a fixed depth on a single worker thread and hands the best move
  (UCI string, or None when the engine fails or has no move) to the given callback, from that thread.
- close(): terminates the engine process and the worker.
"""
from __future__ import annotations

import logging
import os
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import chess
import chess.engine

from .config import SETTINGS
from .errors import ConfigurationError

log = logging.getLogger("engine_selector")

EngineCallback = Callable[[Optional[str]], None]


def resolve_engine_path(engine_path: str | None = None) -> str:
    candidate = engine_path or SETTINGS.stockfish_path or "stockfish"
    resolved = shutil.which(candidate) or (candidate if os.path.isfile(candidate) else None)
    if not resolved:
        resolved = shutil.which("stockfish")
    if not resolved:
        raise ConfigurationError(
            f"Stockfish engine not found (candidate='{candidate}'). Install it (e.g. 'apt install stockfish' "
            "or 'brew install stockfish') or set STOCKFISH_PATH to the binary path."
        )
    return resolved


class EngineMoveSelector:
    def __init__(self, engine_path: str | None = None,
                 engine_factory: Callable[[str], chess.engine.SimpleEngine] | None = None):
        self._engine_path = engine_path
        self._engine_factory = engine_factory or chess.engine.SimpleEngine.popen_uci
        self._engine: chess.engine.SimpleEngine | None = None
        self._resolved_path: str | None = None
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="engine")

    def _ensure_path(self) -> str:
        if self._resolved_path is None:
            self._resolved_path = resolve_engine_path(self._engine_path)
        return self._resolved_path

    def _ensure_engine(self) -> chess.engine.SimpleEngine:
        with self._lock:
            if self._engine is None:
                path = self._ensure_path()
                try:
                    self._engine = self._engine_factory(path)
                except FileNotFoundError as e:
                    raise ConfigurationError(f"Failed launching engine at '{path}': {e}") from e
                log.info("Started engine %s", path)
            return self._engine

    def request(self, fen: str, depth: int, on_result: EngineCallback) -> None:
        """Queue an evaluation; on_result fires later from the worker thread."""
        self._ensure_path()
        self._executor.submit(self._evaluate, fen, depth, on_result)

    def _evaluate(self, fen: str, depth: int, on_result: EngineCallback) -> None:
        best: Optional[str] = None
        try:
            engine = self._ensure_engine()
            res = engine.play(chess.Board(fen=fen), chess.engine.Limit(depth=depth))
            best = res.move.uci() if res.move else None
            log.debug("Engine depth=%d best=%s fen=%s", depth, best, fen)
        except Exception:
            log.exception("Engine evaluation failed for %s", fen)
        on_result(best)

    def close(self):
        self._executor.shutdown(wait=False, cancel_futures=True)
        with self._lock:
            if self._engine is not None:
                try:
                    self._engine.quit()
                except chess.engine.EngineTerminatedError:
                    pass
                self._engine = None
