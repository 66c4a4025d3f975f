# ChatGenerator: the generation collaborator behind the search pipeline.
# - accepts any model client (Gemini, OpenAI, Ollama, Echo) plus an optional fallback
# - builds the prompt from the aggregated retrieval context
# - answers with a plain payload: {success, response, model} or {success: False, error}

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import yaml

from askbot.logger import get_logger
from askbot.search.prompts import build_system_prompt
from askbot.settings import Settings, settings
from .types import Message, ModelParams
from .clients.echo_dev_client import EchoDevClient

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")


class ChatGenerator:
    def __init__(self, model_client, fallback_client=None, config_path: str = DEFAULT_CONFIG_PATH):
        self.model_client = model_client
        self.fallback_client = fallback_client
        self.config_path = config_path
        self.cfg = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_path):
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @property
    def clients(self) -> List[Any]:
        return [c for c in (self.model_client, self.fallback_client) if c is not None]

    def compose_messages(self, query: str, context: str) -> List[Message]:
        return [
            Message(role="system", content=build_system_prompt(context)),
            Message(role="user", content=query),
        ]

    def generate(
        self,
        query: str,
        context: str = "",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Main entry point. Tries the primary client, then the fallback."""
        if not query:
            return {"success": False, "error": "Query is required"}

        messages = self.compose_messages(query, context)
        params = ModelParams(
            temperature=temperature or self.cfg.get("temperature", 0.7),
            max_tokens=max_tokens or self.cfg.get("max_tokens", 2000),
        )

        last_error: Optional[Exception] = None
        for client in self.clients:
            engine = type(client).__name__
            try:
                text, meta = client.generate(messages, params)
            except Exception as e:
                logger.warning("Generation with %s failed: %s", engine, e)
                last_error = e
                continue
            if not text:
                logger.warning("Generation with %s returned no text", engine)
                last_error = ValueError(f"{engine} returned an empty response")
                continue
            return {
                "success": True,
                "response": text,
                "model": meta.get("model") or getattr(client, "model", engine),
                "usage": meta.get("usage"),
            }

        return {"success": False, "error": str(last_error) if last_error else "No model client configured"}


def build_chat_generator(cfg: Settings = settings) -> ChatGenerator:
    """Pick model clients from settings. `auto`: Gemini first, OpenAI as fallback, else echo."""
    engine = cfg.GENERATION_ENGINE.lower()

    def gemini():
        from .clients.gemini_client import GeminiClient
        return GeminiClient(model=cfg.GEMINI_MODEL, api_key=cfg.GEMINI_API_KEY)

    def openai():
        from .clients.openai_client import OpenAIClient
        return OpenAIClient(model=cfg.OPENAI_MODEL, api_key=cfg.OPENAI_API_KEY)

    def ollama():
        from .clients.ollama_client import OllamaClient
        return OllamaClient(model=cfg.OLLAMA_MODEL, host=cfg.OLLAMA_HOST)

    if engine == "gemini":
        return ChatGenerator(model_client=gemini())
    if engine == "openai":
        return ChatGenerator(model_client=openai())
    if engine == "ollama":
        return ChatGenerator(model_client=ollama())
    if engine == "echo":
        return ChatGenerator(model_client=EchoDevClient())
    if engine != "auto":
        raise ValueError(f"Unknown GENERATION_ENGINE: {cfg.GENERATION_ENGINE}")

    clients = []
    if cfg.GEMINI_API_KEY:
        clients.append(gemini())
    if cfg.OPENAI_API_KEY:
        clients.append(openai())
    if not clients:
        clients.append(EchoDevClient())
    return ChatGenerator(model_client=clients[0], fallback_client=clients[1] if len(clients) > 1 else None)
