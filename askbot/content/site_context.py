"""
Free-text context provider.

Flattens everything the site knows (projects, songs, press and speaking videos,
published personal content, consulting blurbs, founder ventures, admin-editable
topics) into sectioned text lines, then keeps only the lines relevant to the
query. Each store-backed section is best-effort: a failing table drops that
section and the rest of the context is still returned.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from askbot.errors import degrade
from askbot.logger import get_logger
from askbot.search.catalog import Catalog
from .store import ContentStore

logger = get_logger(__name__)

HEADER_PREFIX = "==="
SONG_LIMIT = 50
PERSONAL_EXCERPT = 500


def _header(title: str) -> str:
    return f"{HEADER_PREFIX} {title} {HEADER_PREFIX}"


def _category_label(category: str) -> str:
    # only the first hyphen is replaced ("gym-routine" -> "GYM ROUTINE")
    return category.replace("-", " ", 1).upper()


def filter_lines(lines: List[str], query: str) -> List[str]:
    """Keep lines mentioning the query (or any word longer than 2 chars).

    The leading section header always stays and comes first; later headers
    survive only when they match the query themselves.
    """
    if not query:
        return lines
    lower_query = query.lower()
    words = [w for w in lower_query.split() if len(w) > 2]

    def relevant(line: str) -> bool:
        low = line.lower()
        return lower_query in low or any(w in low for w in words)

    lead = lines[:1] if lines and lines[0].startswith(HEADER_PREFIX) else []
    kept = [l for l in lines if relevant(l)]
    return list(dict.fromkeys(lead + kept))


class SiteContextProvider:
    def __init__(self, store: ContentStore, catalog: Catalog, projects: Tuple[Dict[str, Any], ...]):
        self.store = store
        self.catalog = catalog
        self.projects = projects

    def build(self, query: str = "") -> str:
        return "\n".join(filter_lines(self.lines(), query))

    def lines(self) -> List[str]:
        out: List[str] = []
        out += self._projects_section()
        out += self._from_store("songs", self.store.public_songs, self._music_section, limit=SONG_LIMIT)
        out += self._from_store("founder videos", self.store.founder_videos, self._founder_videos_section)
        out += self._from_store("speaker videos", self.store.speaker_videos, self._speaker_section)
        out += self._from_store("personal content", self.store.personal_content, self._personal_section)
        out += self._consulting_section()
        out += self._founder_ventures_section()
        out += self._from_store("topics", self.store.active_topics, self._topics_section)
        return out

    # -------------------------
    # Sections
    # -------------------------
    def _from_store(
        self,
        label: str,
        fetch: Callable[..., List[Dict[str, Any]]],
        render: Callable[[List[Dict[str, Any]]], List[str]],
        **kwargs: Any,
    ) -> List[str]:
        rows = degrade(fetch, default=[], label=f"site context: {label}", logger=logger, **kwargs)
        return render(rows) if rows else []

    def _projects_section(self) -> List[str]:
        out = [_header("PROJECTS PORTFOLIO"), f"Total Projects: {len(self.projects)}"]
        for p in self.projects:
            out.append(f"- {p['title']} ({p['client']}): {p['description']}")
            out.append(f"  Period: {p.get('period', '')}, Budget: {p.get('budget') or 'N/A'}")
            out.append(f"  Technologies: {', '.join(p.get('technologies', []))}")
            if p.get("achievements"):
                out.append(f"  Achievements: {'; '.join(p['achievements'])}")
        return out

    def _music_section(self, songs: List[Dict[str, Any]]) -> List[str]:
        out = [_header("MUSIC"), f"Total Songs: {len(songs)}"]
        for s in songs:
            out.append(f"- {s['title']} by {s.get('artist_name')} ({s.get('genre') or 'Unknown genre'})")
        return out

    def _founder_videos_section(self, videos: List[Dict[str, Any]]) -> List[str]:
        out = [_header("FOUNDER VIDEOS & PRESS")]
        for v in videos:
            out.append(f"- {v['title']} ({v.get('outlet') or 'Unknown outlet'}, {v.get('year') or 'Unknown year'})")
            if v.get("description"):
                out.append(f"  {v['description']}")
        return out

    def _speaker_section(self, videos: List[Dict[str, Any]]) -> List[str]:
        out = [_header("SPEAKING ENGAGEMENTS")]
        for v in videos:
            out.append(f"- {v['title']} at {v.get('event') or 'Unknown event'} ({v.get('year') or 'Unknown year'})")
            if v.get("location"):
                out.append(f"  Location: {v['location']}")
            if v.get("description"):
                out.append(f"  {v['description']}")
        return out

    def _personal_section(self, rows: List[Dict[str, Any]]) -> List[str]:
        out = [_header("PERSONAL CONTENT")]
        for r in rows:
            text = r.get("content") or ""
            excerpt = text[:PERSONAL_EXCERPT] + ("..." if len(text) > PERSONAL_EXCERPT else "")
            out.append(f"[{_category_label(r['category'])}] {r['title']}")
            out.append(excerpt)
        return out

    def _consulting_section(self) -> List[str]:
        return [_header("CONSULTING SERVICES"), *self.catalog.consulting_context]

    def _founder_ventures_section(self) -> List[str]:
        ids = self.catalog.founder_project_ids
        ventures = [
            p for p in self.projects
            if "founder" in str(p.get("client", "")).lower() or any(i in p["id"] for i in ids)
        ]
        if not ventures:
            return []
        out = [_header("FOUNDER VENTURES")]
        for p in ventures:
            out.append(f"- {p['title']}: {p['description']}")
            out.append(f"  Status: {p.get('period', '')}, Impact: {p.get('budget') or 'N/A'}")
        return out

    def _topics_section(self, topics: List[Dict[str, Any]]) -> List[str]:
        out = [_header("TOPICS (WEBSITE PAGES)")]
        for t in topics:
            out.append(f"[{t['title']}] ({t.get('route')})")
            out.append(f"Description: {t.get('description') or 'N/A'}")
            out.append(f"Content: {t.get('content') or ''}")
            out += _labelled_lists(t.get("ontology"), _ONTOLOGY_FIELDS)
            out += _labelled_lists(t.get("metadata"), _METADATA_FIELDS)
        return out


# (key, label, separator)
_ONTOLOGY_FIELDS = (
    ("sections", "Sections", ", "),
    ("keyPoints", "Key Points", "; "),
    ("categories", "Categories", ", "),
)
_METADATA_FIELDS = (
    ("keyProjects", "Key Projects", ", "),
    ("achievements", "Achievements", "; "),
)


def _labelled_lists(
    blob: Optional[Dict[str, Any]],
    fields: Iterable[Tuple[str, str, str]],
) -> List[str]:
    if not isinstance(blob, dict):
        return []
    out = []
    for key, label, sep in fields:
        value = blob.get(key)
        if isinstance(value, list):
            out.append(f"{label}: {sep.join(str(v) for v in value)}")
    return out
