"""
Retrieval-augmented search pipeline.

One call to SearchPipeline.search() handles one visitor query:

    admin phrase? -> context (free text || vectors) -> generation
        -> keyword matching -> enrichment (pages || personal) -> response

Every collaborator is optional except for input validation: retrieval and
enrichment failures go through `degrade()` and fall back to empty values,
generation failures fall back to a canned answer. The only shared state is the
read-only Catalog.
"""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Protocol, Sequence

from askbot.errors import GenerationError, degrade
from askbot.logger import get_logger
from .catalog import Catalog
from .matcher import find_relevant_content
from .types import (
    ContentRef,
    EnrichedCandidate,
    GenerationResult,
    PageRef,
    PersonalRef,
    SearchResponse,
    VectorHit,
)

logger = get_logger(__name__)

ADMIN_NOTICE = "Admin access detected. Redirecting to login..."
UNKNOWN_MODEL = "unknown"
DRIVE_HEADER = "\n\n=== RELEVANT GOOGLE DRIVE CONTENT ===\n"


# -------------------------
# Collaborator ports
# -------------------------
class ContextProvider(Protocol):
    def build(self, query: str) -> str: ...


class VectorProvider(Protocol):
    def query(self, query: str, top_k: int = 5) -> List[VectorHit]: ...


class Generator(Protocol):
    def generate(self, query: str, context: str = "") -> Dict[str, Any]: ...


class PageDataSource(Protocol):
    def get(self, page_id: str, query: Optional[str] = None) -> Dict[str, Any]: ...


class PersonalContentSource(Protocol):
    def personal_content(self, category: Optional[str] = None) -> List[Dict[str, Any]]: ...


# -------------------------
# Helpers
# -------------------------
def is_admin_phrase(query: str, phrase: str) -> bool:
    return query.strip().lower() == phrase.strip().lower()


def fallback_answer(query: str) -> str:
    return (
        f'I\'m here to help you learn about Joey! Based on your question "{query}", '
        "I can provide information from his professional portfolio, projects, music, "
        "and personal experiences. However, I'm having trouble generating a detailed "
        "response right now. Please try asking a more specific question."
    )


def format_drive_hits(hits: Sequence[VectorHit]) -> str:
    if not hits:
        return ""
    block = DRIVE_HEADER
    for hit in hits:
        block += f"File: {hit.file_name}\nContent: {hit.text}\n---\n"
    return block


def check_generation_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise GenerationError(f"Unexpected generation payload: {payload!r}")
    if payload.get("error"):
        raise GenerationError(str(payload["error"]))
    if not payload.get("success"):
        raise GenerationError("AI generation returned unsuccessful response")
    return payload


class SearchPipeline:
    def __init__(
        self,
        catalog: Catalog,
        context_provider: ContextProvider,
        vector_provider: VectorProvider,
        generator: Generator,
        page_data: PageDataSource,
        content_store: PersonalContentSource,
        admin_phrase: str = "i am joey hendrickson",
        admin_redirect: str = "/admin-login",
        vector_top_k: int = 5,
        executor: Optional[Executor] = None,
        max_workers: int = 8,
    ):
        self.catalog = catalog
        self.context_provider = context_provider
        self.vector_provider = vector_provider
        self.generator = generator
        self.page_data = page_data
        self.content_store = content_store
        self.admin_phrase = admin_phrase
        self.admin_redirect = admin_redirect
        self.vector_top_k = vector_top_k
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="askbot")

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    # -------------------------
    # Stages
    # -------------------------
    def _free_text_context(self, query: str) -> str:
        return degrade(self.context_provider.build, query, default="", label="RAG context", logger=logger) or ""

    def _drive_context(self, query: str) -> str:
        hits = degrade(
            self.vector_provider.query, query, top_k=self.vector_top_k,
            default=[], label="Vector query", logger=logger,
        )
        return format_drive_hits(hits or [])

    def aggregate_context(self, query: str) -> str:
        """Free-text context followed by the Drive block; both sub-calls run concurrently."""
        free_text = self._executor.submit(self._free_text_context, query)
        drive = self._executor.submit(self._drive_context, query)
        return free_text.result() + drive.result()

    def invoke_generation(self, query: str, context: str) -> GenerationResult:
        try:
            payload = check_generation_payload(self.generator.generate(query, context))
        except Exception as e:
            logger.error(
                "Error generating AI response: query=%r context_length=%d error=%s",
                query, len(context), e,
            )
            return GenerationResult(text=fallback_answer(query), model_used=UNKNOWN_MODEL)

        text = payload.get("response") or fallback_answer(query)
        model = payload.get("model") or UNKNOWN_MODEL
        logger.info("AI response generated: model=%s length=%d", model, len(text))
        return GenerationResult(text=text, model_used=model)

    def _enrich_page(self, ref: PageRef, query: str) -> EnrichedCandidate:
        result = degrade(
            self.page_data.get, ref.page_id, query,
            default={}, label=f"Page data for {ref.page_id}", logger=logger,
        )
        if result.get("success"):
            return EnrichedCandidate(ref=ref, found=True, page_data=result.get("data"))
        return EnrichedCandidate(ref=ref, found=False)

    def _enrich_personal(self, ref: PersonalRef) -> EnrichedCandidate:
        rows = degrade(
            self.content_store.personal_content, ref.category,
            default=[], label=f"Personal content for {ref.category}", logger=logger,
        )
        if rows:
            return EnrichedCandidate(ref=ref, found=True, actual_content=list(rows))
        return EnrichedCandidate(ref=ref, found=False)

    def enrich(self, candidates: Sequence[ContentRef], query: str) -> List[EnrichedCandidate]:
        """Enrich every candidate concurrently; output keeps the input order."""
        page_futures = {}
        personal_futures = {}
        for i, ref in enumerate(candidates):
            if isinstance(ref, PageRef):
                page_futures[i] = self._executor.submit(self._enrich_page, ref, query)
            elif isinstance(ref, PersonalRef):
                personal_futures[i] = self._executor.submit(self._enrich_personal, ref)
            else:
                raise TypeError(f"Unknown content ref: {ref!r}")

        done = {i: f.result() for i, f in page_futures.items()}
        done.update({i: f.result() for i, f in personal_futures.items()})
        return [done[i] for i in range(len(candidates))]

    def suggestions(self) -> List[str]:
        return list(self.catalog.suggestions)

    # -------------------------
    # Public API
    # -------------------------
    def admin_response(self, query: str) -> SearchResponse:
        return SearchResponse(
            query=query,
            ai_response=ADMIN_NOTICE,
            is_admin_access=True,
            redirect_to=self.admin_redirect,
        )

    def search(self, query: str) -> SearchResponse:
        if is_admin_phrase(query, self.admin_phrase):
            logger.info("Admin phrase received; redirecting to %s", self.admin_redirect)
            return self.admin_response(query)

        context = self.aggregate_context(query)
        generation = self.invoke_generation(query, context)
        candidates = find_relevant_content(query, self.catalog)
        enriched = self.enrich(candidates, query)

        return SearchResponse(
            query=query,
            ai_response=generation.text,
            relevant_content=tuple(enriched),
            suggestions=tuple(self.suggestions()),
            model=generation.model_used,
        )
