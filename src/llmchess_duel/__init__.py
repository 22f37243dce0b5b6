"""
LLM Chess Duel package.

Components:
- game: the game loop controller (turn sequencing, play/pause/reset, retry policy, history)
- players: static catalog of selectable players and per-side seat assignment
- referee: python-chess backed legality oracle
- moves: human-readable move descriptions
- llm_client/engine_selector: move selectors (hosted LLM over an OpenAI-compatible API, or Stockfish)
- snapshot: board images sent to the LLM and shown in the UI
"""
# Package exports are intentionally minimal; import modules directly as needed.
