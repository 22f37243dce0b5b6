import argparse
import logging

from llmchess_duel.config import SETTINGS
from llmchess_duel.game import GameLoop, LoopConfig
from llmchess_duel.players import PLAYERS, find_player


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Play one game between two catalog players.")
    ap.add_argument("--white", default=SETTINGS.white_model or "Stockfish 16 (Easy)", help="Model label for White (see --list-players)")
    ap.add_argument("--black", default=SETTINGS.black_model or "Stockfish 16 (Easy)", help="Model label for Black (see --list-players)")
    ap.add_argument("--white-key", default=SETTINGS.white_api_key, help="API key for White (LLM players only)")
    ap.add_argument("--black-key", default=SETTINGS.black_api_key, help="API key for Black (LLM players only)")
    ap.add_argument("--loop-delay", type=float, default=None, help="Seconds between ticks")
    ap.add_argument("--think-delay", type=float, default=None, help="Seconds to wait after an LLM answer")
    ap.add_argument("--max-attempts", type=int, default=None, help="Selection attempts per tick")
    ap.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds (default: play to the end)")
    ap.add_argument("--pgn-out", default=None, help="Optional path to write PGN at end")
    ap.add_argument("--list-players", action="store_true", help="Print the player catalog and exit")
    ap.add_argument("--log-level", default="INFO", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("play_one")

    if args.list_players:
        for p in PLAYERS:
            print(f"{p.provider.value:10s} {p.model}")
        raise SystemExit(0)

    for side, label in (("White", args.white), ("Black", args.black)):
        if find_player(label) is None:
            raise SystemExit(f"Unknown player for {side}: '{label}'. Use --list-players.")

    cfg = LoopConfig()
    if args.loop_delay is not None:
        cfg.loop_delay_s = args.loop_delay
    if args.think_delay is not None:
        cfg.think_delay_s = args.think_delay
    if args.max_attempts is not None:
        cfg.max_attempts = args.max_attempts

    loop = GameLoop(cfg=cfg)
    loop.save_settings(args.white, args.white_key, args.black, args.black_key)
    log.info("Starting game: white=%s black=%s", args.white, args.black)
    loop.start()
    try:
        loop.join(args.timeout)
    except KeyboardInterrupt:
        log.info("Interrupted")
    state = loop.snapshot_state()
    if not state["game_over"]:
        log.warning("Game did not finish; stopping at FEN %s", state["fen"])

    print("Moves:")
    for line in state["history"]:
        print(" ", line)
    print("PGN:\n", state["pgn"])

    if args.pgn_out:
        with open(args.pgn_out, "w", encoding="utf-8") as f:
            f.write(state["pgn"])
        log.info("Wrote PGN to %s", args.pgn_out)

    loop.close()
