# Keyword matcher: concept map first, then fuzzy site-index matching.
# Output is ordered and deduplicated by page id / category (first match wins).

from __future__ import annotations
from typing import List, Set

from .catalog import Catalog
from .types import ContentRef, PageRef, SiteIndexPage


def _page_matches(page: SiteIndexPage, lower_query: str) -> bool:
    return (
        page.title.lower() in lower_query
        or page.id in lower_query
        or lower_query in page.description.lower()
        or any(lower_query in line.lower() for line in page.content)
    )


def find_relevant_content(query: str, catalog: Catalog) -> List[ContentRef]:
    lower_query = query.lower()
    results: List[ContentRef] = []
    matched: Set[str] = set()

    for entry in catalog.concept_map:
        key = entry.ref.dedup_key
        if entry.keyword in lower_query and key not in matched:
            results.append(entry.ref)
            matched.add(key)

    for page in catalog.site_index:
        if page.id not in matched and _page_matches(page, lower_query):
            results.append(
                PageRef(
                    page_id=page.id,
                    title=page.title,
                    description=page.description,
                    route=page.route,
                    content=page.content,
                )
            )
            matched.add(page.id)

    return results
