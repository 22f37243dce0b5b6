"""
Human-readable descriptions of SAN move tokens.

describe_move() works on the token alone (no board needed) and is what both the
LLM prompt (numbered move options) and the game history display use.
"""
from __future__ import annotations

import re

PIECE_NAMES = {
    "K": "King",
    "Q": "Queen",
    "R": "Rook",
    "B": "Bishop",
    "N": "Knight",
    "P": "Pawn",
}

CASTLES = {
    "O-O": "King castles kingside",
    "O-O-O": "King castles queenside",
}

SQUARE_RE = re.compile(r"[a-h][1-8]")


def _piece_name(ch: str) -> str:
    return PIECE_NAMES.get(ch, "Pawn")


def _target_square(token: str) -> str:
    """Last square mentioned in the token; falls back to the token without check markers."""
    squares = SQUARE_RE.findall(token)
    if squares:
        return squares[-1]
    return token.rstrip("+#")


def describe_move(move: str) -> str:
    """Describe one SAN move, e.g. 'Nf3' -> 'Knight moves to f3'.

    First match wins: castling, capture, checkmate, check, promotion, normal move.
    Malformed tokens get a best-effort description rather than an error.
    """
    if not move:
        return "Unknown move"

    castle = CASTLES.get(move.rstrip("+#"))
    if castle:
        return castle

    if "x" in move:
        origin, dest = move.split("x", 1)
        return f"{_piece_name(origin[:1])} captures on {_target_square(dest)}"

    if "#" in move:
        return f"{_piece_name(move[0])} moves to {_target_square(move)} and delivers checkmate"

    if "+" in move:
        return f"{_piece_name(move[0])} moves to {_target_square(move)} with check"

    if "=" in move:
        letter = move.split("=", 1)[1][:1].upper()
        return f"Pawn promotes to {PIECE_NAMES.get(letter, 'Queen')}"

    if move[0] in PIECE_NAMES:
        return f"{PIECE_NAMES[move[0]]} moves to {_target_square(move[1:])}"
    return f"Pawn moves to {_target_square(move)}"


def describe_moves(moves: list[str]) -> list[str]:
    return [describe_move(m) for m in moves]
