# ===============================================
# tests/test_pipeline.py
# Response assembly, degradation and ordering.
# ===============================================
import threading
import time

import pytest

from askbot.search.pipeline import DRIVE_HEADER, fallback_answer, is_admin_phrase
from askbot.search.types import GenerationResult, PersonalRef, VectorHit
from conftest import FakeContext, FakeGenerator, FakePageData, FakeStore, FakeVector


def by_key(response):
    return {c.ref.dedup_key: c for c in response.relevant_content}


# -------------------------
# Admin short-circuit
# -------------------------
def test_admin_phrase_detection():
    assert is_admin_phrase("  I Am Joey HENDRICKSON \n", "i am joey hendrickson")
    assert not is_admin_phrase("i am joey hendrickson!", "i am joey hendrickson")


def test_admin_phrase_skips_every_collaborator(make_pipeline, fakes):
    pipeline = make_pipeline()
    out = pipeline.search("  I am Joey Hendrickson  ")

    assert out.is_admin_access is True
    assert out.redirect_to == "/admin-login"
    assert out.relevant_content == ()
    assert out.suggestions == ()
    for fake in fakes.values():
        assert fake.calls == []

    payload = out.to_dict()
    assert payload["success"] is True
    assert payload["isAdminAccess"] is True
    assert payload["redirectTo"] == "/admin-login"
    assert payload["relevantContent"] == []
    assert "isGenerative" not in payload


# -------------------------
# Happy path
# -------------------------
def test_music_question(make_pipeline):
    out = make_pipeline().search("Tell me about your music")
    payload = out.to_dict()

    assert payload["success"] is True
    assert payload["isGenerative"] is True
    assert payload["aiResponse"] == "Joey makes music in Columbus."
    assert payload["model"] == "fake-model"
    assert len(payload["suggestions"]) == 5

    music = [c for c in payload["relevantContent"] if c.get("pageId") == "music"]
    assert len(music) == 1
    assert music[0]["type"] == "page"
    assert music[0]["hasData"] is True
    assert music[0]["pageData"] == {"page": "music"}


def test_context_is_free_text_then_drive_block(make_pipeline, fakes):
    hits = [VectorHit(file_name="a.txt", text="hello"), VectorHit(file_name="b.pdf", text="world")]
    vector = FakeVector(hits=hits)
    make_pipeline(vector_provider=vector).search("anything at all")

    (query, context), = fakes["generator"].calls
    assert query == "anything at all"
    assert context == (
        "=== CONTEXT ===\nJoey writes songs."
        + DRIVE_HEADER
        + "File: a.txt\nContent: hello\n---\n"
        + "File: b.pdf\nContent: world\n---\n"
    )
    assert vector.calls == [("anything at all", 5)]


def test_vector_failure_keeps_free_text(make_pipeline, fakes):
    out = make_pipeline(vector_provider=FakeVector(error=ConnectionError("pinecone down"))).search("music")
    assert out.to_dict()["success"] is True
    assert fakes["generator"].calls[0][1] == "=== CONTEXT ===\nJoey writes songs."


def test_both_context_sources_failing_gives_empty_context(make_pipeline, fakes):
    pipeline = make_pipeline(
        context_provider=FakeContext(error=RuntimeError("db gone")),
        vector_provider=FakeVector(error=RuntimeError("index gone")),
    )
    out = pipeline.search("music")
    assert out.ai_response == "Joey makes music in Columbus."
    assert fakes["generator"].calls[0][1] == ""


# -------------------------
# Generation fallback
# -------------------------
def test_embedded_generation_error_uses_fallback(make_pipeline):
    gen = FakeGenerator(payload={"success": True, "response": "partial", "error": "quota exceeded"})
    out = make_pipeline(generator=gen).search("What is your favourite song?")
    assert out.ai_response == fallback_answer("What is your favourite song?")
    assert '"What is your favourite song?"' in out.ai_response
    assert out.model == "unknown"
    assert len(gen.calls) == 1


def test_invoke_generation_results(make_pipeline):
    ok = make_pipeline().invoke_generation("music?", "ctx")
    assert ok == GenerationResult(text="Joey makes music in Columbus.", model_used="fake-model")

    failed = make_pipeline(generator=FakeGenerator(error=ValueError("x"))).invoke_generation("music?", "ctx")
    assert failed == GenerationResult(text=fallback_answer("music?"), model_used="unknown")


def test_unsuccessful_generation_uses_fallback(make_pipeline):
    out = make_pipeline(generator=FakeGenerator(payload={"success": False})).search("hi there")
    assert out.ai_response == fallback_answer("hi there")
    assert out.model == "unknown"


def test_generation_exception_uses_fallback_once(make_pipeline):
    gen = FakeGenerator(error=TimeoutError("slow model"))
    out = make_pipeline(generator=gen).search("tell me about music")
    assert out.ai_response == fallback_answer("tell me about music")
    assert len(gen.calls) == 1
    assert out.to_dict()["success"] is True
    # retrieval still happens on the degraded path
    assert "music" in by_key(out)


# -------------------------
# Enrichment
# -------------------------
def test_page_failures_are_isolated(make_pipeline):
    pages = FakePageData(failing=("music",), missing=("travel-santa-marta",))
    out = make_pipeline(page_data=pages).search("music projects travel")
    found = by_key(out)

    assert found["music"].found is False
    assert found["projects"].found is True
    assert found["projects"].page_data == {"page": "projects"}
    assert found["travel-santa-marta"].found is False
    assert found["music"].to_dict()["hasData"] is False
    assert "pageData" not in found["music"].to_dict()
    assert sorted(p for p, _ in pages.calls) == ["music", "projects", "travel-santa-marta"]
    assert all(q == "music projects travel" for _, q in pages.calls)


def test_faith_without_rows_has_no_content(make_pipeline):
    out = make_pipeline().search("How does faith shape you?")
    faith = by_key(out)["faith"]
    assert faith.found is False
    assert faith.to_dict() == {"type": "personal", "category": "faith", "hasContent": False}


def test_personal_rows_are_attached(make_pipeline):
    rows = [{"title": "Core Values", "content": "Curiosity"}]
    store = FakeStore(rows={"values": rows}, failing=("faith",))
    out = make_pipeline(content_store=store).search("faith and values")
    found = by_key(out)

    assert found["faith"].found is False
    assert found["values"].found is True
    assert found["values"].to_dict()["actualContent"] == rows
    assert found["values"].to_dict()["hasContent"] is True
    assert sorted(store.calls) == ["faith", "values"]


class SlowFirstPage(FakePageData):
    """Delays the first-matched page so later candidates finish first."""

    def __init__(self):
        super().__init__()
        self.lock = threading.Lock()

    def get(self, page_id, query=None):
        if page_id == "consultant":
            time.sleep(0.2)
        with self.lock:
            return super().get(page_id, query)


def test_output_order_ignores_completion_order(make_pipeline):
    out = make_pipeline(page_data=SlowFirstPage()).search("consultant projects music values")
    assert [c.ref.dedup_key for c in out.relevant_content] == ["consultant", "projects", "music", "values"]
    assert isinstance(out.relevant_content[-1].ref, PersonalRef)


def test_relevant_content_is_unique(make_pipeline):
    out = make_pipeline().search("consultant projects founder speaker music travel travels author gym fitness home")
    keys = [c.ref.dedup_key for c in out.relevant_content]
    assert len(keys) == len(set(keys))


def test_unknown_ref_type_is_rejected(make_pipeline):
    with pytest.raises(TypeError):
        make_pipeline().enrich(["not-a-ref"], "q")
