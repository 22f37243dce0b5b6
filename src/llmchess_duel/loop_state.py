"""
Loop state machine for the game controller.

Phases: IDLE -> RUNNING <-> PAUSED -> GAME_OVER, and reset() from anywhere back to IDLE.
On top of the phase it tracks:
- generation: bumped on every reset so late results from an earlier game can be recognised;
- the single-flight token: at most one move computation at a time.

Not thread-safe on its own; GameLoop holds its lock around every call.
"""
from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Callable, Optional


class LoopPhase(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class LoopState:
    def __init__(self) -> None:
        self.phase = LoopPhase.IDLE
        self.generation = 0
        self._in_flight: Optional[int] = None

    # ---------------- Flags -----------------
    @property
    def started(self) -> bool:
        return self.phase != LoopPhase.IDLE

    @property
    def playing(self) -> bool:
        return self.phase == LoopPhase.RUNNING

    @property
    def game_over(self) -> bool:
        return self.phase == LoopPhase.GAME_OVER

    @property
    def move_in_flight(self) -> bool:
        return self._in_flight is not None

    # ---------------- Transitions -----------------
    def start(self) -> bool:
        if self.phase != LoopPhase.IDLE:
            return False
        self.phase = LoopPhase.RUNNING
        return True

    def pause(self) -> bool:
        if self.phase != LoopPhase.RUNNING:
            return False
        self.phase = LoopPhase.PAUSED
        return True

    def resume(self) -> bool:
        if self.phase != LoopPhase.PAUSED:
            return False
        self.phase = LoopPhase.RUNNING
        return True

    def toggle(self) -> bool:
        return self.pause() or self.resume()

    def finish(self) -> None:
        """Latch GAME_OVER for the current game."""
        if self.phase in (LoopPhase.RUNNING, LoopPhase.PAUSED):
            self.phase = LoopPhase.GAME_OVER

    def reset(self) -> None:
        self.phase = LoopPhase.IDLE
        self.generation += 1
        self._in_flight = None

    # ---------------- Single flight -----------------
    def begin_move(self) -> Optional[int]:
        """Claim the move slot. Returns a token, or None if paused/not running/already busy."""
        if self.phase != LoopPhase.RUNNING or self._in_flight is not None:
            return None
        self._in_flight = self.generation
        return self.generation

    def end_move(self, token: int) -> None:
        if self._in_flight == token:
            self._in_flight = None

    def accepts(self, token: int) -> bool:
        """True if a result computed under `token` may still be applied."""
        return token == self.generation and self.phase in (LoopPhase.RUNNING, LoopPhase.PAUSED)


@dataclass
class Notice:
    """A message that is shown for a fixed time, then reads as empty."""

    clock: Callable[[], float] = time.monotonic
    text: str = ""
    expires_at: float = 0.0

    def show(self, text: str, duration_s: float) -> None:
        self.text = text
        self.expires_at = self.clock() + duration_s

    def clear(self) -> None:
        self.text = ""
        self.expires_at = 0.0

    def current(self) -> str:
        if self.text and self.clock() >= self.expires_at:
            self.clear()
        return self.text
