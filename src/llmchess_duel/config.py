"""
Configuration and environment loading for LLM Chess Duel.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables (.env honoured).
- Exposes SETTINGS with keys used across the project (loop timing, engine path, provider endpoints).
"""
from dataclasses import dataclass
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()


def _repo_root() -> str:
    # this file: src/llmchess_duel/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data if isinstance(data, dict) else {}


_cfg = _load_yaml(os.environ.get("LLMCHESS_SETTINGS_PATH") or os.path.join(_repo_root(), "settings.yml"))


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    # YAML takes precedence
    if name in _cfg:
        val = _cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


@dataclass(frozen=True)
class Settings:
    # Game loop timing
    loop_delay_s: float
    think_delay_s: float
    max_attempts: int
    retry_backoff_s: float
    error_display_s: float
    notice_display_s: float

    # Engine
    stockfish_path: str
    engine_depth: int

    # OpenAI-compatible endpoints per provider
    openai_base_url: str
    google_base_url: str
    anthropic_base_url: str
    mixtral_base_url: str

    # Board snapshot
    board_png_size: int

    # Optional initial seats (entry scripts only)
    white_model: str
    black_model: str
    white_api_key: str
    black_api_key: str


SETTINGS = Settings(
    loop_delay_s=float(_get("LLMCHESS_LOOP_DELAY_S", 0.5, cast=float)),
    think_delay_s=float(_get("LLMCHESS_THINK_DELAY_S", 0.5, cast=float)),
    max_attempts=int(_get("LLMCHESS_MAX_ATTEMPTS", 1, cast=int)),
    retry_backoff_s=float(_get("LLMCHESS_RETRY_BACKOFF_S", 0.0, cast=float)),
    error_display_s=float(_get("LLMCHESS_ERROR_DISPLAY_S", 3.0, cast=float)),
    notice_display_s=float(_get("LLMCHESS_NOTICE_DISPLAY_S", 2.0, cast=float)),
    stockfish_path=_get("STOCKFISH_PATH", "stockfish"),
    engine_depth=int(_get("LLMCHESS_ENGINE_DEPTH", 2, cast=int)),
    openai_base_url=_get("LLMCHESS_OPENAI_BASE_URL", "https://api.openai.com/v1"),
    google_base_url=_get("LLMCHESS_GOOGLE_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"),
    anthropic_base_url=_get("LLMCHESS_ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1/"),
    mixtral_base_url=_get("LLMCHESS_MIXTRAL_BASE_URL", "https://api.mistral.ai/v1"),
    board_png_size=int(_get("LLMCHESS_BOARD_PNG_SIZE", 480, cast=int)),
    white_model=_get("LLMCHESS_WHITE_MODEL", ""),
    black_model=_get("LLMCHESS_BLACK_MODEL", ""),
    white_api_key=_get("LLMCHESS_WHITE_API_KEY", ""),
    black_api_key=_get("LLMCHESS_BLACK_API_KEY", ""),
)
