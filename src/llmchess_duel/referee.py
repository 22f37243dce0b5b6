"""
Referee: the legality oracle for one game.

- Owns a python-chess Board; every position change goes through apply()/apply_uci()/reset().
- Lists legal moves in SAN, reports turn, history and terminal status (checkmate / stalemate / draw).
- Manages PGN headers and serializes the game with pgn().

Used by GameLoop, which never touches the board directly.
"""
from __future__ import annotations

import datetime
from typing import Optional

import chess
import chess.pgn

from .errors import IllegalMoveError


class Referee:
    """Plain chess referee around python-chess Board and PGN export."""

    def __init__(self, starting_fen: str | None = None):
        self._starting_fen = starting_fen
        self.board = chess.Board(fen=starting_fen) if starting_fen else chess.Board()
        self._headers: dict[str, str] = {}

    # ---------------- Header Management -----------------
    def set_headers(self, event: str = "LLM Chess Duel", site: str = "?", date: Optional[str] = None,
                    round_: str = "?", white: str = "?", black: str = "?") -> None:
        date = date or datetime.date.today().strftime("%Y.%m.%d")
        self._headers.update({
            "Event": event,
            "Site": site,
            "Date": date,
            "Round": round_,
            "White": white,
            "Black": black,
        })

    # ---------------- Queries -----------------
    def legal_moves(self) -> list[str]:
        return [self.board.san(mv) for mv in self.board.legal_moves]

    def turn(self) -> chess.Color:
        return self.board.turn

    def history(self) -> list[str]:
        """SAN of every applied move, replayed from the starting position."""
        replay = chess.Board(fen=self._starting_fen) if self._starting_fen else chess.Board()
        sans: list[str] = []
        for mv in self.board.move_stack:
            sans.append(replay.san(mv))
            replay.push(mv)
        return sans

    def snapshot(self) -> str:
        return self.board.fen()

    def is_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def is_draw(self) -> bool:
        # Stalemate counts as a draw.
        b = self.board
        return (
            b.is_stalemate()
            or b.is_insufficient_material()
            or b.halfmove_clock >= 100
            or b.is_repetition(3)
        )

    def is_game_over(self) -> bool:
        return self.is_checkmate() or self.is_draw()

    # ---------------- Move Application -----------------
    def apply(self, san: str) -> str:
        """Apply a SAN move; returns its canonical SAN."""
        try:
            mv = self.board.parse_san(san)
        except ValueError as e:
            raise IllegalMoveError(f"Illegal move '{san}' in {self.board.fen()}: {e}") from e
        canonical = self.board.san(mv)
        self.board.push(mv)
        return canonical

    def apply_uci(self, uci: str) -> str:
        """Apply a coordinate move (e2e4, e7e8q); returns its SAN."""
        try:
            mv = chess.Move.from_uci(uci)
        except ValueError as e:
            raise IllegalMoveError(f"Malformed move '{uci}': {e}") from e
        if mv not in self.board.legal_moves:
            raise IllegalMoveError(f"Illegal move '{uci}' in {self.board.fen()}")
        san = self.board.san(mv)
        self.board.push(mv)
        return san

    def reset(self) -> None:
        self.board = chess.Board(fen=self._starting_fen) if self._starting_fen else chess.Board()

    # ---------------- PGN / Status -----------------
    def status(self) -> str:
        if self.is_checkmate():
            return "0-1" if self.board.turn == chess.WHITE else "1-0"
        if self.is_draw():
            return "1/2-1/2"
        return "*"

    def pgn(self) -> str:
        game = chess.pgn.Game()
        for k, v in self._headers.items():
            game.headers[k] = v
        if self._starting_fen:
            game.setup(chess.Board(fen=self._starting_fen))
        game.headers["Result"] = self.status()
        node = game
        for mv in list(self.board.move_stack):
            node = node.add_variation(mv)
        exporter = chess.pgn.StringExporter(headers=True, variations=False, comments=False)
        return game.accept(exporter)
