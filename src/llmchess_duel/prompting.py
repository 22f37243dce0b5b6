"""
Prompt builders and config for "pick one of these legal moves" requests.

Callers supply system instructions and a template string with placeholders
that are substituted per turn.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

DEFAULT_SYSTEM_INSTRUCTIONS = (
    "You are a strong chess player. You will be shown an image of the current board and a numbered "
    "list of every legal move. Choose the best move and reply with its number only."
)
DEFAULT_TEMPLATE = """You are playing as {COLOR}.
Last move: {LAST_MOVE}
The attached image shows the current board (White at the bottom).
Legal moves:
{MOVE_OPTIONS}
Reply with only the number of the move you choose (0 to {MAX_INDEX})."""


@dataclass
class PromptConfig:
    """Configuration for shaping move prompts using a custom template."""

    system_instructions: str = DEFAULT_SYSTEM_INSTRUCTIONS
    template: str = DEFAULT_TEMPLATE


def render_custom_prompt(template: str, values: Dict[str, str]) -> str:
    """Replace known placeholders in the template. Unknown tokens are left intact."""
    rendered = template or ""
    for key, val in values.items():
        rendered = rendered.replace(f"{{{key}}}", val)
    return rendered


def format_move_options(described_moves: List[str]) -> str:
    return "\n".join(f"{i}. {desc}" for i, desc in enumerate(described_moves))


def build_selection_prompt(color: str, last_move: str, described_moves: List[str], cfg: PromptConfig | None = None) -> str:
    cfg = cfg or PromptConfig()
    values = {
        "COLOR": color,
        "LAST_MOVE": last_move,
        "MOVE_OPTIONS": format_move_options(described_moves),
        "MAX_INDEX": str(max(len(described_moves) - 1, 0)),
    }
    return render_custom_prompt(cfg.template, values)
