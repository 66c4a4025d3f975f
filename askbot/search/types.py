# Data models for the search layer.
# ContentRef is a tagged union (PageRef | PersonalRef) keyed by `type`.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class PageRef:
    """Reference to a site page."""
    page_id: str
    title: str
    description: str
    route: str
    content: Optional[Tuple[str, ...]] = None
    type: str = field(default="page", init=False)

    @property
    def dedup_key(self) -> str:
        return self.page_id

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "type": self.type,
            "pageId": self.page_id,
            "title": self.title,
            "description": self.description,
            "route": self.route,
        }
        if self.content is not None:
            out["content"] = list(self.content)
        return out


@dataclass(frozen=True)
class PersonalRef:
    """Reference to a personal-content category."""
    category: str
    type: str = field(default="personal", init=False)

    @property
    def dedup_key(self) -> str:
        return self.category

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "category": self.category}


ContentRef = Union[PageRef, PersonalRef]


@dataclass(frozen=True)
class ConceptEntry:
    keyword: str
    ref: ContentRef


@dataclass(frozen=True)
class SiteIndexPage:
    id: str
    title: str
    route: str
    description: str
    content: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PersonalCategory:
    id: str
    title: str
    description: str


@dataclass(frozen=True)
class EnrichedCandidate:
    """A matched ContentRef plus whatever enrichment found for it."""
    ref: ContentRef
    found: bool
    page_data: Optional[Dict[str, Any]] = None
    actual_content: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        out = self.ref.to_dict()
        if isinstance(self.ref, PageRef):
            if self.found:
                out["pageData"] = self.page_data
            out["hasData"] = self.found
        elif isinstance(self.ref, PersonalRef):
            if self.found:
                out["actualContent"] = self.actual_content
            out["hasContent"] = self.found
        else:
            raise TypeError(f"Unknown content ref: {self.ref!r}")
        return out


@dataclass(frozen=True)
class VectorHit:
    """One hit from the vector-similarity provider."""
    file_name: str
    text: str
    score: float = 0.0
    file_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "text": self.text,
            "score": self.score,
            "fileId": self.file_id,
        }


@dataclass(frozen=True)
class GenerationResult:
    text: str
    model_used: str


@dataclass(frozen=True)
class SearchResponse:
    """Final, immutable response for one query."""
    query: str
    ai_response: str
    relevant_content: Tuple[EnrichedCandidate, ...] = ()
    suggestions: Tuple[str, ...] = ()
    model: Optional[str] = None
    is_admin_access: bool = False
    redirect_to: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "success": True,
            "query": self.query,
            "aiResponse": self.ai_response,
            "relevantContent": [c.to_dict() for c in self.relevant_content],
            "suggestions": list(self.suggestions),
        }
        if self.is_admin_access:
            out["isAdminAccess"] = True
            out["redirectTo"] = self.redirect_to
        else:
            out["model"] = self.model
            out["isGenerative"] = True
        return out
