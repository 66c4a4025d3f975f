# ===============================================
# tests/test_generator.py
# ChatGenerator payloads, client fallback and client selection.
# ===============================================
import pytest

from askbot.generate import ChatGenerator, EchoDevClient, build_chat_generator
from askbot.generate.clients import gemini_client
from askbot.generate.clients.gemini_client import GeminiClient
from askbot.generate.types import Message, ModelParams
from askbot.errors import CollaboratorError
from askbot.settings import Settings


class FailingClient:
    model = "broken"

    def generate(self, messages, params):
        raise ConnectionError("provider unreachable")


class EmptyClient:
    model = "empty"

    def generate(self, messages, params):
        return "", {"model": self.model}


def test_echo_generation_payload():
    gen = ChatGenerator(model_client=EchoDevClient())
    out = gen.generate("What is Joey working on?", context="=== PROJECTS ===")
    assert out["success"] is True
    assert out["model"] == "echo-dev"
    assert "What is Joey working on?" in out["response"]


def test_system_prompt_carries_context():
    gen = ChatGenerator(model_client=EchoDevClient())
    system, user = gen.compose_messages("hi", "Joey plays guitar.")
    assert system.role == "system"
    assert "Joey plays guitar." in system.content
    assert "=== END OF CONTEXT ===" in system.content
    assert user == Message(role="user", content="hi")


def test_config_defaults_are_loaded():
    gen = ChatGenerator(model_client=EchoDevClient())
    assert gen.cfg["temperature"] == 0.7
    assert gen.cfg["max_tokens"] == 2000


def test_fallback_client_is_used():
    gen = ChatGenerator(model_client=FailingClient(), fallback_client=EchoDevClient())
    out = gen.generate("music?")
    assert out["success"] is True
    assert out["model"] == "echo-dev"


def test_empty_primary_answer_moves_to_fallback():
    gen = ChatGenerator(model_client=EmptyClient(), fallback_client=EchoDevClient())
    assert gen.generate("music?")["model"] == "echo-dev"


def test_all_clients_failing_reports_error():
    out = ChatGenerator(model_client=FailingClient()).generate("music?")
    assert out["success"] is False
    assert "provider unreachable" in out["error"]


def test_missing_query_reports_error():
    out = ChatGenerator(model_client=EchoDevClient()).generate("")
    assert out == {"success": False, "error": "Query is required"}


# -------------------------
# Client selection
# -------------------------
def test_auto_without_keys_uses_echo():
    gen = build_chat_generator(Settings(GENERATION_ENGINE="auto", GEMINI_API_KEY=None, OPENAI_API_KEY=None))
    assert isinstance(gen.model_client, EchoDevClient)
    assert gen.fallback_client is None


def test_auto_with_keys_prefers_gemini_then_openai():
    gen = build_chat_generator(Settings(GENERATION_ENGINE="auto", GEMINI_API_KEY="g-key", OPENAI_API_KEY="sk-test"))
    assert isinstance(gen.model_client, GeminiClient)
    assert type(gen.fallback_client).__name__ == "OpenAIClient"


def test_explicit_engine_and_unknown_engine():
    assert isinstance(build_chat_generator(Settings(GENERATION_ENGINE="echo")).model_client, EchoDevClient)
    with pytest.raises(ValueError):
        build_chat_generator(Settings(GENERATION_ENGINE="telepathy"))


# -------------------------
# Gemini REST client
# -------------------------
class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


def test_gemini_client_parses_candidates(monkeypatch):
    seen = {}

    def fake_post(url, params=None, json=None, timeout=None):
        seen.update(url=url, params=params, json=json)
        return FakeResponse({"candidates": [{"content": {"parts": [{"text": "Hello from Gemini"}]}}]})

    monkeypatch.setattr(gemini_client.requests, "post", fake_post)
    client = GeminiClient(model="gemini-test", api_key="k")
    messages = [Message("system", "RULES"), Message("user", "Who is Joey?")]
    text, meta = client.generate(messages, ModelParams(temperature=0.2, max_tokens=100))

    assert text == "Hello from Gemini"
    assert meta["model"] == "gemini-test"
    assert "gemini-test:generateContent" in seen["url"]
    assert seen["params"] == {"key": "k"}
    prompt = seen["json"]["contents"][0]["parts"][0]["text"]
    assert prompt.startswith("RULES") and "User Question: Who is Joey?" in prompt
    assert seen["json"]["generationConfig"]["maxOutputTokens"] == 100


def test_gemini_client_without_candidates_raises(monkeypatch):
    monkeypatch.setattr(gemini_client.requests, "post", lambda *a, **k: FakeResponse({"candidates": []}))
    with pytest.raises(CollaboratorError):
        GeminiClient(api_key="k").generate([Message("user", "hi")], ModelParams())


def test_gemini_client_requires_key():
    with pytest.raises(CollaboratorError):
        GeminiClient(api_key="").generate([Message("user", "hi")], ModelParams())


def test_ollama_engine_posts_flattened_prompt(monkeypatch):
    from askbot.generate.clients import ollama_client

    seen = {}

    def fake_post(url, json=None, timeout=None):
        seen.update(url=url, json=json)
        return FakeResponse({"response": "  Local answer  "})

    monkeypatch.setattr(ollama_client.requests, "post", fake_post)
    gen = build_chat_generator(Settings(GENERATION_ENGINE="ollama", OLLAMA_HOST="http://ollama:11434", OLLAMA_MODEL="m"))
    out = gen.generate("Where is Joey based?", context="Columbus, Ohio")

    assert out == {"success": True, "response": "Local answer", "model": "m", "usage": None}
    assert seen["url"] == "http://ollama:11434/api/generate"
    assert seen["json"]["stream"] is False
    assert "USER:\nWhere is Joey based?" in seen["json"]["prompt"]
    assert "Columbus, Ohio" in seen["json"]["prompt"]
