import unittest
from unittest.mock import patch

import server
from llmchess_duel.game import GameLoop, LoopConfig
from llmchess_duel.referee import Referee
from tests.test_game import FakeEngine, FakeLLM


class ServerTests(unittest.TestCase):
    def setUp(self):
        cfg = LoopConfig(loop_delay_s=0.01, think_delay_s=0.0, max_attempts=1, retry_backoff_s=0.0,
                         error_display_s=3.0, notice_display_s=2.0)
        self.engine = FakeEngine()
        self.loop = GameLoop(llm_selector=FakeLLM(), engine_selector=self.engine, cfg=cfg, referee=Referee(),
                             render_snapshot=lambda fen: "data:image/png;base64,AAAA")
        patcher = patch.object(server, "LOOP", self.loop)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self.loop.close)
        self.client = server.app.test_client()

    def _save_engines(self):
        return self.client.post("/api/settings", json={
            "white": {"model": "Stockfish 16 (Easy)"},
            "black": {"model": "Stockfish 16 (Medium)"},
        })

    def test_players(self):
        rsp = self.client.get("/api/players")
        self.assertEqual(rsp.status_code, 200)
        players = rsp.get_json()
        self.assertEqual(players[0], {"provider": "OpenAI", "model": "gpt-4o", "config": None})
        self.assertIn({"provider": "Stockfish", "model": "Stockfish 16", "config": {"depth": 18}}, players)

    def test_game_state_hides_keys(self):
        self.client.post("/api/settings", json={
            "white": {"model": "gpt-4o", "api_key": "sk-secret"},
            "black": {"model": "Stockfish 16"},
        })
        rsp = self.client.get("/api/game")
        self.assertEqual(rsp.status_code, 200)
        body = rsp.get_json()
        self.assertFalse(body["started"])
        self.assertEqual(body["seats"]["white"]["model"], "gpt-4o")
        self.assertTrue(body["seats"]["white"]["has_api_key"])
        self.assertNotIn("sk-secret", rsp.get_data(as_text=True))
        self.assertEqual(rsp.headers["Cache-Control"], "no-store, max-age=0")

    def test_settings_rejects_unknown_model(self):
        rsp = self.client.post("/api/settings", json={"white": {"model": "gpt-2"}, "black": {"model": "gpt-4o"}})
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.get_json()["error"], "invalid_selection")

        rsp = self._save_engines()
        self.assertEqual(rsp.status_code, 200)
        self.assertEqual(rsp.get_json()["saved"], "Settings saved successfully!")

    def test_start_toggle_reset(self):
        self.assertEqual(self.client.post("/api/game/toggle").status_code, 400)
        self._save_engines()

        rsp = self.client.post("/api/game/start")
        self.assertEqual(rsp.status_code, 200)
        self.assertTrue(rsp.get_json()["started"])
        self.assertEqual(self.client.post("/api/game/start").status_code, 400)

        rsp = self.client.post("/api/game/toggle")
        self.assertEqual(rsp.get_json()["phase"], "paused")
        rsp = self.client.post("/api/game/toggle")
        self.assertEqual(rsp.get_json()["phase"], "running")

        rsp = self.client.post("/api/game/reset")
        body = rsp.get_json()
        self.assertFalse(body["started"])
        self.assertEqual(body["history"], [])
        self.assertEqual(self.client.post("/api/game/start").status_code, 200)

    def test_board_svg(self):
        rsp = self.client.get("/api/game/board.svg")
        self.assertEqual(rsp.status_code, 200)
        self.assertEqual(rsp.mimetype, "image/svg+xml")
        self.assertIn(b"<svg", rsp.data)

    def test_preflight(self):
        rsp = self.client.open("/api/anything", method="OPTIONS", headers={"Origin": "http://localhost:5173"})
        self.assertEqual(rsp.status_code, 204)
        self.assertEqual(rsp.headers["Access-Control-Allow-Origin"], "http://localhost:5173")
        self.assertIn("POST", rsp.headers["Access-Control-Allow-Methods"])


if __name__ == "__main__":
    unittest.main()
