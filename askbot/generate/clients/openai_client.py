# Client for the OpenAI Chat Completions API; same interface as OllamaClient.

from typing import List, Optional, Tuple, Dict, Any
from openai import OpenAI

from askbot.settings import settings
from ..types import Message, ModelParams


class OpenAIClient:
    def __init__(self, model: str = "gpt-4o", api_key: Optional[str] = None):
        self.model = model
        self.client = OpenAI(api_key=api_key or settings.OPENAI_API_KEY)

    def set_model(self, model: str):
        self.model = model

    def generate(self, messages: List[Message], params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        formatted = [{"role": m.role, "content": m.content} for m in messages]
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=formatted,
            temperature=params.temperature or 0.7,
            max_tokens=params.max_tokens or 2000,
        )
        text = (resp.choices[0].message.content or "").strip()
        usage = resp.usage.model_dump() if getattr(resp, "usage", None) is not None else None
        return text, {"engine": "openai", "model": self.model, "usage": usage}
