from __future__ import annotations
"""
LLM move selector over OpenAI-compatible chat endpoints.

Every hosted provider in the catalog (OpenAI, Google, Anthropic, Mixtral) is reached through
the openai SDK pointed at that provider's OpenAI-compatible base URL, using the seat's own key.
One request per call; retries are the game loop's business, so the SDK's are disabled.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging
import re

from openai import OpenAI

from .config import SETTINGS
from .errors import ConfigurationError, MoveSelectionError
from .players import Provider
from .prompting import PromptConfig, build_selection_prompt

log = logging.getLogger("llm_client")

INDEX_RE = re.compile(r"-?\d+")

BASE_URLS: Dict[Provider, str] = {
    Provider.OPENAI: SETTINGS.openai_base_url,
    Provider.GOOGLE: SETTINGS.google_base_url,
    Provider.ANTHROPIC: SETTINGS.anthropic_base_url,
    Provider.MIXTRAL: SETTINGS.mixtral_base_url,
}


@dataclass
class MoveRequest:
    current_state_image: str  # data URL of the board snapshot
    all_moves: List[str]  # described legal moves, in legal-move order
    provider: Provider
    model: str
    color: str
    last_move: str
    api_key: Optional[str] = None


def _default_client_factory(provider: Provider, api_key: str) -> OpenAI:
    base_url = BASE_URLS.get(provider)
    if not base_url:
        raise ConfigurationError(f"No endpoint configured for provider {provider.value}")
    return OpenAI(api_key=api_key, base_url=base_url, max_retries=0)


def build_messages(req: MoveRequest, prompt_cfg: PromptConfig | None = None) -> List[Dict]:
    cfg = prompt_cfg or PromptConfig()
    prompt = build_selection_prompt(req.color, req.last_move, req.all_moves, cfg)
    return [
        {"role": "system", "content": cfg.system_instructions},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": req.current_state_image}},
            ],
        },
    ]


def parse_move_index(text: str) -> int:
    """Return the first integer in the reply. Range checks happen in the game loop."""
    m = INDEX_RE.search(text or "")
    if not m:
        raise MoveSelectionError(f"No move index in reply: {text!r}")
    return int(m.group(0))


class LLMMoveSelector:
    """Asks a hosted model to pick one of the described legal moves; returns its index."""

    def __init__(self, prompt_cfg: PromptConfig | None = None,
                 client_factory: Callable[[Provider, str], OpenAI] | None = None):
        self.prompt_cfg = prompt_cfg or PromptConfig()
        self._client_factory = client_factory or _default_client_factory

    def choose(self, req: MoveRequest) -> int:
        if not req.api_key:
            raise ConfigurationError(f"API key is required for {req.provider.value}/{req.model}")
        client = self._client_factory(req.provider, req.api_key)
        messages = build_messages(req, self.prompt_cfg)
        log.debug("Requesting move from %s/%s (%d options)", req.provider.value, req.model, len(req.all_moves))
        rsp = client.chat.completions.create(model=req.model, messages=messages)
        text = _extract_text(rsp)
        if not text:
            raise MoveSelectionError(f"Empty reply from {req.provider.value}/{req.model}")
        index = parse_move_index(text)
        log.debug("%s/%s replied %r -> index %d", req.provider.value, req.model, text.strip()[:80], index)
        return index

    def close(self):
        # Clients are per request; nothing to release
        return


def _extract_text(rsp) -> str:
    if not (hasattr(rsp, "choices") and rsp.choices):
        return ""
    msg = rsp.choices[0].message
    content = getattr(msg, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for c in content:
            if isinstance(c, dict):
                if c.get("type") == "text" and isinstance(c.get("text"), str):
                    parts.append(c["text"])
                continue
            t = getattr(c, "text", None)
            if isinstance(t, str):
                parts.append(t)
        return "\n".join(parts)
    return ""
