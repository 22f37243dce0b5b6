"""
Board snapshots.

- render_board_png(): PNG data URL sent to vision LLMs alongside the move options.
  Pieces are drawn as letters (uppercase White, lowercase Black) on discs so the image
  reads without a piece-set download.
- render_board_svg(): chess.svg rendering for the web UI.
"""
from __future__ import annotations

import base64
import io
import os

import chess
import chess.svg
from PIL import Image, ImageDraw, ImageFont

from .config import SETTINGS

LIGHT_COLOR = "#E0C094"
DARK_COLOR = "#865745"
LAST_MOVE_COLOR = "#F6F669"
WHITE_PIECE = "#FAFAFA"
BLACK_PIECE = "#1E1E1E"
COORD_COLOR = "#333333"
COORD_MARGIN = 20


def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for path in [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
    ]:
        if os.path.exists(path):
            return ImageFont.truetype(path, size)
    return ImageFont.load_default(size=size)


def render_board_png(fen: str, size: int | None = None, last_move_uci: str | None = None) -> str:
    """Render the position as a base64 PNG data URL, White at the bottom."""
    size = size or SETTINGS.board_png_size
    board = chess.Board(fen=fen)
    square = max(8, (size - 2 * COORD_MARGIN) // 8)
    edge = square * 8 + 2 * COORD_MARGIN

    canvas = Image.new("RGB", (edge, edge), "#FFFFFF")
    draw = ImageDraw.Draw(canvas)
    piece_font = _load_font(int(square * 0.55))
    coord_font = _load_font(max(10, COORD_MARGIN - 8))

    highlighted: set[int] = set()
    if last_move_uci:
        mv = chess.Move.from_uci(last_move_uci)
        highlighted = {mv.from_square, mv.to_square}

    for sq in chess.SQUARES:
        file_idx = chess.square_file(sq)
        rank_idx = chess.square_rank(sq)
        x0 = COORD_MARGIN + file_idx * square
        y0 = COORD_MARGIN + (7 - rank_idx) * square
        if sq in highlighted:
            fill = LAST_MOVE_COLOR
        else:
            fill = LIGHT_COLOR if (file_idx + rank_idx) % 2 else DARK_COLOR
        draw.rectangle([x0, y0, x0 + square, y0 + square], fill=fill)

        piece = board.piece_at(sq)
        if piece is None:
            continue
        pad = square // 8
        is_white = piece.color == chess.WHITE
        draw.ellipse(
            [x0 + pad, y0 + pad, x0 + square - pad, y0 + square - pad],
            fill=WHITE_PIECE if is_white else BLACK_PIECE,
            outline=BLACK_PIECE,
            width=2,
        )
        draw.text(
            (x0 + square // 2, y0 + square // 2),
            piece.symbol(),
            fill=BLACK_PIECE if is_white else WHITE_PIECE,
            font=piece_font,
            anchor="mm",
        )

    for i, letter in enumerate("abcdefgh"):
        x = COORD_MARGIN + i * square + square // 2
        draw.text((x, edge - COORD_MARGIN // 2), letter, fill=COORD_COLOR, font=coord_font, anchor="mm")
    for i, rank in enumerate("87654321"):
        y = COORD_MARGIN + i * square + square // 2
        draw.text((COORD_MARGIN // 2, y), rank, fill=COORD_COLOR, font=coord_font, anchor="mm")

    buf = io.BytesIO()
    canvas.save(buf, format="PNG")
    b64 = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{b64}"


def render_board_svg(fen: str, last_move_uci: str | None = None, size: int = 450) -> str:
    board = chess.Board(fen=fen)
    lastmove = chess.Move.from_uci(last_move_uci) if last_move_uci else None
    return chess.svg.board(board=board, size=size, lastmove=lastmove, coordinates=True)
