# Typed dataclasses shared across generator modules.

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass
class Message:
    """Single chat turn: system, user, or assistant."""
    role: str
    content: str


@dataclass
class ModelParams:
    """LLM parameters per request."""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
