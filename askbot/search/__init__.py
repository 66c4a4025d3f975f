# Search layer: static catalog, keyword matching and the response pipeline.
# The FAISS retriever lives in .retriever and is imported explicitly.

from .catalog import Catalog, load_catalog
from .matcher import find_relevant_content
from .pipeline import SearchPipeline
from .types import (
    ContentRef,
    EnrichedCandidate,
    GenerationResult,
    PageRef,
    PersonalRef,
    SearchResponse,
    VectorHit,
)

__all__ = [
    "Catalog",
    "load_catalog",
    "find_relevant_content",
    "SearchPipeline",
    "ContentRef",
    "EnrichedCandidate",
    "GenerationResult",
    "PageRef",
    "PersonalRef",
    "SearchResponse",
    "VectorHit",
]
