# Client for the Gemini generateContent REST API; same interface as OllamaClient.
# System and user turns are flattened into a single text part.

import requests
from typing import List, Optional, Tuple, Dict, Any

from askbot.errors import CollaboratorError
from askbot.settings import settings
from ..types import Message, ModelParams

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class GeminiClient:
    def __init__(self, model: str = "gemini-2.0-flash-exp", api_key: Optional[str] = None):
        self.model = model
        self.api_key = api_key or settings.GEMINI_API_KEY

    def set_model(self, model: str):
        self.model = model

    def generate(self, messages: List[Message], params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        if not self.api_key:
            raise CollaboratorError("GEMINI_API_KEY is not set")

        payload = {
            "contents": [{"parts": [{"text": self._compose_prompt(messages)}]}],
            "generationConfig": {
                "temperature": float(params.temperature or 0.7),
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": int(params.max_tokens or 4096),
            },
        }
        resp = requests.post(
            GEMINI_URL.format(model=self.model),
            params={"key": self.api_key},
            json=payload,
            timeout=settings.HTTP_TIMEOUT,
        )
        resp.raise_for_status()
        data = resp.json()

        candidates = data.get("candidates") or []
        parts = (candidates[0].get("content") or {}).get("parts") if candidates else None
        if not parts:
            raise CollaboratorError("No response from Gemini")
        text = "".join(p.get("text", "") for p in parts).strip()
        return text, {"engine": "gemini", "model": self.model, "usage": data.get("usageMetadata")}

    def _compose_prompt(self, messages: List[Message]) -> str:
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        user = "\n\n".join(m.content for m in messages if m.role == "user")
        return f"{system}\n\nUser Question: {user}".strip()
