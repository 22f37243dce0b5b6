"""Exception types shared by the selectors, the referee and the game loop."""


class DuelError(Exception):
    """Base class for all LLM Chess Duel errors."""


class ConfigurationError(DuelError):
    """A seat or collaborator is missing something it needs (player, model, API key, engine)."""


class MoveSelectionError(DuelError):
    """The move selector produced no usable answer (empty reply, no index, index out of range)."""


class IllegalMoveError(DuelError):
    """The referee rejected a move for the current position."""
