# Client for Ollama local inference; exposes generate(messages, params).

import requests
from typing import List, Optional, Tuple, Dict, Any

from askbot.settings import settings
from ..types import Message, ModelParams


class OllamaClient:
    def __init__(self, model: str = "mistral:7b-instruct", host: Optional[str] = None):
        self.model = model
        self.host = host or settings.OLLAMA_HOST

    def set_model(self, model: str):
        self.model = model

    def generate(self, messages: List[Message], params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        payload = {
            "model": self.model,
            "prompt": self._compose_prompt(messages),
            "stream": False,
            "options": {
                "temperature": float(params.temperature or 0.7),
                "num_predict": int(params.max_tokens or 2000),
            },
        }
        resp = requests.post(f"{self.host}/api/generate", json=payload, timeout=180)
        resp.raise_for_status()
        data = resp.json()
        return data.get("response", "").strip(), {"engine": "ollama", "model": self.model}

    def _compose_prompt(self, messages: List[Message]) -> str:
        parts = []
        for m in messages:
            parts.append(f"{m.role.upper()}:\n{m.content.strip()}\n")
        return "\n".join(parts)
