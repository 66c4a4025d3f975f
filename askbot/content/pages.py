# Page-data provider: full records behind each site page, keyed by page id.
# get() never raises for an unknown page; it answers {"success": False, ...}.

from __future__ import annotations

import copy
import os
import re
import sqlite3
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from askbot.errors import UnknownPageError
from askbot.logger import get_logger
from askbot.search.catalog import Catalog
from askbot.settings import settings
from .store import ContentStore

logger = get_logger(__name__)

DEFAULT_PROJECTS_PATH = os.path.join(os.path.dirname(__file__), "projects.yaml")

_BUDGET = re.compile(r"\$([0-9.]+)([KMB])?")
_MULTIPLIERS = {"K": 1_000, "M": 1_000_000, "B": 1_000_000_000}


@lru_cache(maxsize=4)
def load_projects(path: Optional[str] = None) -> Tuple[Dict[str, Any], ...]:
    path = path or settings.PROJECTS_PATH or DEFAULT_PROJECTS_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Projects file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return tuple(data.get("projects") or ())


def budget_value(budget: Optional[str]) -> float:
    """Largest dollar amount mentioned in a budget string ("$250K R&D ($6M ...)" -> 6e6)."""
    if not budget:
        return 0.0
    best = 0.0
    for number, suffix in _BUDGET.findall(budget):
        try:
            value = float(number)
        except ValueError:
            continue
        value *= _MULTIPLIERS.get(suffix, 1)
        best = max(best, value)
    return best


def _query_words(query: str) -> List[str]:
    return [w for w in query.lower().split() if len(w) > 2]


def _search_text(p: Dict[str, Any]) -> str:
    parts = [
        p.get("title", ""),
        p.get("client", ""),
        p.get("description", ""),
        p.get("budget") or "",
        p.get("category", ""),
        *p.get("technologies", []),
        *(p.get("achievements") or []),
    ]
    return " ".join(str(x) for x in parts).lower()


def _rank_text(p: Dict[str, Any]) -> str:
    parts = [p.get("title", ""), p.get("client", ""), p.get("description", ""), *p.get("technologies", [])]
    return " ".join(str(x) for x in parts).lower()


class PageDataProvider:
    def __init__(self, store: ContentStore, catalog: Catalog, projects: Tuple[Dict[str, Any], ...]):
        self.store = store
        self.catalog = catalog
        self.projects = projects
        self._extractors: Dict[str, Callable[[Optional[str]], Dict[str, Any]]] = {
            "projects": self.projects_data,
            "consultant": self.consultant_data,
            "music": self.music_data,
            "founder": self.founder_data,
            "speaker": self.speaker_data,
        }

    def get(self, page_id: str, query: Optional[str] = None) -> Dict[str, Any]:
        try:
            data = self.extract(page_id, query)
        except UnknownPageError:
            return {"success": False, "pageId": page_id, "error": "Invalid pageId"}
        return {"success": True, "pageId": page_id, "query": query, "data": data}

    def extract(self, page_id: str, query: Optional[str] = None) -> Dict[str, Any]:
        extractor = self._extractors.get(page_id)
        if extractor is None:
            raise UnknownPageError(page_id)
        return extractor(query or None)

    # -------------------------
    # Per-page extractors
    # -------------------------
    def projects_data(self, query: Optional[str] = None) -> Dict[str, Any]:
        projects = [copy.deepcopy(p) for p in self.projects]

        if query:
            lower_query = query.lower()
            words = _query_words(query)
            projects = [
                p for p in projects
                if any(w in _search_text(p) for w in words) or lower_query in _search_text(p)
            ]
            projects.sort(key=lambda p: sum(1 for w in words if w in _rank_text(p)), reverse=True)

        total = sum(budget_value(p.get("budget")) for p in projects)
        categories: List[str] = []
        for p in projects:
            if p.get("category") not in categories:
                categories.append(p.get("category"))

        return {
            "projects": projects,
            "totalProjects": len(projects),
            "totalBudget": total / 1_000_000,
            "categories": categories,
        }

    def consultant_data(self, query: Optional[str] = None) -> Dict[str, Any]:
        return copy.deepcopy(self.catalog.consultant)

    def music_data(self, query: Optional[str] = None) -> Dict[str, Any]:
        try:
            songs = self.store.public_songs()
        except sqlite3.Error:
            logger.warning("Music data unavailable", exc_info=True)
            return {"songs": []}
        if query:
            q = query.lower()
            songs = [
                s for s in songs
                if q in (s.get("title") or "").lower()
                or q in (s.get("artist_name") or "").lower()
                or q in (s.get("genre") or "").lower()
            ]
        return {"songs": songs}

    def founder_data(self, query: Optional[str] = None) -> Dict[str, Any]:
        try:
            return {"videos": self.store.founder_videos()}
        except sqlite3.Error:
            logger.warning("Founder videos unavailable", exc_info=True)
            return {"videos": []}

    def speaker_data(self, query: Optional[str] = None) -> Dict[str, Any]:
        try:
            return {"videos": self.store.speaker_videos()}
        except sqlite3.Error:
            logger.warning("Speaker videos unavailable", exc_info=True)
            return {"videos": []}
