"""
Player catalog and seat assignment.

- Provider: the five selectable backends.
- ServicePlayer / EnginePlayer: the two player kinds. The game loop dispatches on the type,
  never on the provider string.
- PLAYERS: ordered, immutable catalog shown in the settings form; find_player() resolves a
  selection by exact model label.
- Seat: one side's bound player plus its credential.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import chess

from .config import SETTINGS
from .errors import ConfigurationError


class Provider(str, Enum):
    OPENAI = "OpenAI"
    GOOGLE = "Google"
    ANTHROPIC = "Anthropic"
    MIXTRAL = "Mixtral"
    STOCKFISH = "Stockfish"


@dataclass(frozen=True)
class EngineConfig:
    depth: int = field(default_factory=lambda: SETTINGS.engine_depth)


@dataclass(frozen=True)
class ServicePlayer:
    """A hosted LLM that picks among described legal moves; needs an API key."""

    provider: Provider
    model: str


@dataclass(frozen=True)
class EnginePlayer:
    """A local UCI engine (Stockfish) searching to a fixed depth; needs no API key."""

    model: str
    config: EngineConfig = field(default_factory=EngineConfig)
    provider: Provider = Provider.STOCKFISH


Player = Union[ServicePlayer, EnginePlayer]


PLAYERS: tuple[Player, ...] = (
    ServicePlayer(Provider.OPENAI, "gpt-4o"),
    ServicePlayer(Provider.OPENAI, "gpt-4o-mini"),
    ServicePlayer(Provider.OPENAI, "gpt-4-turbo"),
    ServicePlayer(Provider.OPENAI, "gpt-3.5-turbo-instruct"),
    ServicePlayer(Provider.OPENAI, "gpt-3.5-turbo"),
    ServicePlayer(Provider.MIXTRAL, "pixtral-12b-2409"),
    ServicePlayer(Provider.ANTHROPIC, "claude-3-5-sonnet-20240620"),
    ServicePlayer(Provider.GOOGLE, "gemini-1.5-flash"),
    ServicePlayer(Provider.GOOGLE, "gemini-1.5-pro"),
    EnginePlayer("Stockfish 16", EngineConfig(depth=18)),
    EnginePlayer("Stockfish 16 (Medium)", EngineConfig(depth=8)),
    EnginePlayer("Stockfish 16 (Easy)", EngineConfig(depth=2)),
)


def find_player(model: str | None) -> Optional[Player]:
    """Exact-match lookup by model label. Returns None when nothing matches."""
    if not model:
        return None
    for player in PLAYERS:
        if player.model == model:
            return player
    return None


def color_name(color: chess.Color) -> str:
    return "White" if color == chess.WHITE else "Black"


@dataclass(frozen=True)
class Seat:
    color: str
    player: Optional[Player] = None
    api_key: str = ""

    def validate(self) -> Player:
        """Return the bound player, or raise ConfigurationError if the seat cannot move."""
        if self.player is None or not self.player.model:
            raise ConfigurationError(f"{self.color}: provider or model is undefined")
        if isinstance(self.player, ServicePlayer) and not self.api_key:
            raise ConfigurationError(f"{self.color}: API key is undefined for {self.player.model}")
        return self.player

    def public_view(self) -> dict:
        """Seat summary safe to send to the UI (never includes the key)."""
        return {
            "color": self.color,
            "provider": self.player.provider.value if self.player else None,
            "model": self.player.model if self.player else None,
            "has_api_key": bool(self.api_key),
        }


def default_seats() -> dict[chess.Color, Seat]:
    return {
        chess.WHITE: Seat("White", PLAYERS[0]),
        chess.BLACK: Seat("Black", PLAYERS[0]),
    }
