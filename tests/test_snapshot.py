import base64
import io
import unittest

import chess
from PIL import Image

from llmchess_duel.snapshot import render_board_png, render_board_svg


def _decode(data_url):
    prefix = "data:image/png;base64,"
    assert data_url.startswith(prefix)
    return Image.open(io.BytesIO(base64.b64decode(data_url[len(prefix):])))


class SnapshotTests(unittest.TestCase):
    def test_png_data_url(self):
        img = _decode(render_board_png(chess.STARTING_FEN, size=320))
        self.assertEqual(img.format, "PNG")
        self.assertEqual(img.size[0], img.size[1])
        self.assertLessEqual(img.size[0], 320)

    def test_positions_render_differently(self):
        start = render_board_png(chess.STARTING_FEN, size=240)
        board = chess.Board()
        board.push_san("e4")
        after = render_board_png(board.fen(), size=240, last_move_uci="e2e4")
        self.assertNotEqual(start, after)

    def test_svg(self):
        svg = render_board_svg(chess.STARTING_FEN, last_move_uci="e2e4")
        self.assertIn("<svg", svg)


if __name__ == "__main__":
    unittest.main()
