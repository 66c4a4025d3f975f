# Load the static site catalog (concept map, site index, personal categories)
# from catalog.yaml into immutable objects. Loaded once per path and shared
# read-only across requests.

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

import yaml

from askbot.settings import settings
from .types import ConceptEntry, PageRef, PersonalCategory, PersonalRef, SiteIndexPage

DEFAULT_CATALOG_PATH = os.path.join(os.path.dirname(__file__), "catalog.yaml")


@dataclass(frozen=True)
class Catalog:
    concept_map: Tuple[ConceptEntry, ...]
    site_index: Tuple[SiteIndexPage, ...]
    personal_categories: Tuple[PersonalCategory, ...]
    suggestions: Tuple[str, ...]
    consultant: Dict[str, Any]
    consulting_context: Tuple[str, ...]
    founder_project_ids: Tuple[str, ...]

    def ontology(self) -> Dict[str, Any]:
        """Site structure as served by /site-ontology."""
        return {
            "pages": [
                {
                    "id": p.id,
                    "title": p.title,
                    "route": p.route,
                    "description": p.description,
                    "content": list(p.content),
                }
                for p in self.site_index
            ],
            "personalContent": {
                "categories": [
                    {"id": c.id, "title": c.title, "description": c.description}
                    for c in self.personal_categories
                ]
            },
        }


def _parse_concept(raw: Dict[str, Any]) -> ConceptEntry:
    keyword = str(raw["keyword"]).lower()
    if "page" in raw:
        p = raw["page"]
        ref = PageRef(
            page_id=p["pageId"],
            title=p["title"],
            description=p["description"],
            route=p["route"],
        )
    elif "personal" in raw:
        ref = PersonalRef(category=raw["personal"])
    else:
        raise ValueError(f"Concept '{keyword}' needs either 'page' or 'personal'")
    return ConceptEntry(keyword=keyword, ref=ref)


def _parse_page(raw: Dict[str, Any]) -> SiteIndexPage:
    return SiteIndexPage(
        id=raw["id"],
        title=raw["title"],
        route=raw["route"],
        description=raw.get("description", ""),
        content=tuple(str(c) for c in raw.get("content") or ()),
    )


@lru_cache(maxsize=4)
def load_catalog(path: Optional[str] = None) -> Catalog:
    path = path or settings.CATALOG_PATH or DEFAULT_CATALOG_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Catalog not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return Catalog(
        concept_map=tuple(_parse_concept(c) for c in data.get("concept_map") or ()),
        site_index=tuple(_parse_page(p) for p in data.get("site_index") or ()),
        personal_categories=tuple(
            PersonalCategory(id=c["id"], title=c["title"], description=c.get("description", ""))
            for c in data.get("personal_categories") or ()
        ),
        suggestions=tuple(data.get("suggestions") or ()),
        consultant=data.get("consultant") or {},
        consulting_context=tuple(data.get("consulting_context") or ()),
        founder_project_ids=tuple(data.get("founder_project_ids") or ()),
    )
