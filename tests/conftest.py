from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import pytest

from askbot.search import SearchPipeline, load_catalog
from askbot.search.types import VectorHit
from bootstrap_site import build_faiss, seed_store


# ------------------------------------------------------------
# Fakes for every pipeline port
# ------------------------------------------------------------
class FakeContext:
    def __init__(self, text: str = "=== CONTEXT ===\nJoey writes songs.", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: List[str] = []

    def build(self, query: str) -> str:
        self.calls.append(query)
        if self.error:
            raise self.error
        return self.text


class FakeVector:
    def __init__(self, hits: Optional[List[VectorHit]] = None, error: Optional[Exception] = None):
        self.hits = hits or []
        self.error = error
        self.calls: List[tuple] = []

    def query(self, query: str, top_k: int = 5) -> List[VectorHit]:
        self.calls.append((query, top_k))
        if self.error:
            raise self.error
        return self.hits


class FakeGenerator:
    def __init__(self, payload: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.payload = payload if payload is not None else {
            "success": True,
            "response": "Joey makes music in Columbus.",
            "model": "fake-model",
        }
        self.error = error
        self.calls: List[tuple] = []

    def generate(self, query: str, context: str = "") -> Dict[str, Any]:
        self.calls.append((query, context))
        if self.error:
            raise self.error
        return self.payload


class FakePageData:
    def __init__(self, failing: tuple = (), missing: tuple = ()):
        self.failing = set(failing)
        self.missing = set(missing)
        self.calls: List[tuple] = []

    def get(self, page_id: str, query: Optional[str] = None) -> Dict[str, Any]:
        self.calls.append((page_id, query))
        if page_id in self.failing:
            raise RuntimeError(f"page-data down for {page_id}")
        if page_id in self.missing:
            return {"success": False, "error": "Invalid pageId"}
        return {"success": True, "pageId": page_id, "data": {"page": page_id}}


class FakeStore:
    def __init__(self, rows: Optional[Dict[str, List[Dict[str, Any]]]] = None, failing: tuple = ()):
        self.rows = rows or {}
        self.failing = set(failing)
        self.calls: List[Optional[str]] = []

    def personal_content(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        self.calls.append(category)
        if category in self.failing:
            raise RuntimeError(f"store down for {category}")
        return self.rows.get(category, [])


# ------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------
@pytest.fixture(scope="session")
def catalog():
    return load_catalog()


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=4)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def fakes():
    return {
        "context_provider": FakeContext(),
        "vector_provider": FakeVector(),
        "generator": FakeGenerator(),
        "page_data": FakePageData(),
        "content_store": FakeStore(),
    }


@pytest.fixture
def make_pipeline(catalog, executor, fakes):
    def _make(**overrides) -> SearchPipeline:
        ports = {**fakes, **overrides}
        return SearchPipeline(catalog=catalog, executor=executor, **ports)

    return _make


@pytest.fixture
def seeded_store(tmp_path):
    return seed_store((tmp_path / "site.db").as_posix())


@pytest.fixture
def faiss_path(tmp_path, seeded_store):
    path = (tmp_path / "index" / "faiss.index").as_posix()
    build_faiss(path)
    return path
