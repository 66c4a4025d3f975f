# ============================================================
# Ask-Anything FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Static catalog (concept map + site index)
#   - SQLite content store, page data, site context
#   - FAISS vector retriever over Drive documents
#   - Generation via Gemini, OpenAI, Ollama, or Echo clients
#   - The /ai-search pipeline plus read-only collaborator routes
# ============================================================

from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# --- Local imports ---
from askbot.content.pages import PageDataProvider, load_projects
from askbot.content.site_context import SiteContextProvider, filter_lines
from askbot.content.store import ContentStore
from askbot.generate import ChatGenerator, build_chat_generator
from askbot.logger import get_logger, setup_logging
from askbot.search import Catalog, SearchPipeline, load_catalog
from askbot.search.retriever import VectorRetriever
from askbot.settings import settings

setup_logging()
logger = get_logger(__name__)


# ------------------------------------------------------------
# 🧠 Collaborators (built once per process)
# ------------------------------------------------------------
@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return load_catalog()


@lru_cache(maxsize=1)
def get_store() -> ContentStore:
    return ContentStore(settings.DB_PATH)


@lru_cache(maxsize=1)
def get_page_data() -> PageDataProvider:
    return PageDataProvider(get_store(), get_catalog(), load_projects())


@lru_cache(maxsize=1)
def get_context_provider() -> SiteContextProvider:
    return SiteContextProvider(get_store(), get_catalog(), load_projects())


@lru_cache(maxsize=1)
def get_vector_retriever() -> VectorRetriever:
    return VectorRetriever(get_store(), settings.FAISS_PATH)


@lru_cache(maxsize=1)
def get_generator() -> ChatGenerator:
    return build_chat_generator(settings)


@lru_cache(maxsize=1)
def get_pipeline() -> SearchPipeline:
    return SearchPipeline(
        catalog=get_catalog(),
        context_provider=get_context_provider(),
        vector_provider=get_vector_retriever(),
        generator=get_generator(),
        page_data=get_page_data(),
        content_store=get_store(),
        admin_phrase=settings.ADMIN_PHRASE,
        admin_redirect=settings.ADMIN_REDIRECT,
        vector_top_k=settings.VECTOR_TOP_K,
        max_workers=settings.MAX_WORKERS,
    )


# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title=f"{settings.APP_NAME} API", version="0.3")


# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class VectorQueryRequest(BaseModel):
    query: Any = None
    topK: int = Field(default=5, ge=1, le=50)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _query_from_body(request: Request) -> Optional[str]:
    """The `query` field of a JSON object body, or None for anything else."""
    try:
        body = await request.json()
    except ValueError:
        return None
    query = body.get("query") if isinstance(body, dict) else None
    if not isinstance(query, str) or not query.strip():
        return None
    return query


# ------------------------------------------------------------
# 💬 Main search route
# ------------------------------------------------------------
@app.post("/ai-search")
async def ai_search(request: Request, pipeline: SearchPipeline = Depends(get_pipeline)):
    # body is read raw so every malformed request answers 400 {"error": ...}
    query = await _query_from_body(request)
    if query is None:
        return _error("Query is required", 400)

    try:
        result = await run_in_threadpool(pipeline.search, query)
        return result.to_dict()
    except Exception as e:
        logger.exception("AI search error")
        return _error(str(e) or "Internal server error", 500)


# ------------------------------------------------------------
# 🔎 Collaborator routes (read-only)
# ------------------------------------------------------------
@app.get("/site-ontology")
def site_ontology(catalog: Catalog = Depends(get_catalog)):
    return {"success": True, "ontology": catalog.ontology()}


@app.get("/page-data")
def page_data(
    pageId: Optional[str] = Query(None, description="Page id, e.g. projects or music"),
    query: Optional[str] = Query(None, description="Optional filter query"),
    provider: PageDataProvider = Depends(get_page_data),
):
    try:
        result = provider.get(pageId or "", query)
    except Exception as e:
        logger.exception("Page data API error")
        return _error(str(e) or "Internal server error", 500)
    if not result["success"]:
        return _error(result["error"], 400)
    return result


@app.get("/personal-content")
def personal_content(
    category: Optional[str] = Query(None),
    store: ContentStore = Depends(get_store),
):
    try:
        rows: List[Dict[str, Any]] = store.personal_content(category)
    except Exception:
        logger.exception("Personal content API error")
        return _error("Failed to fetch personal content", 500)
    return {"success": True, "content": rows}


@app.get("/rag-context")
def rag_context(
    query: str = Query("", description="Optional filter query"),
    provider: SiteContextProvider = Depends(get_context_provider),
):
    try:
        lines = provider.lines()
    except Exception as e:
        logger.exception("RAG context error")
        return _error(str(e) or "Internal server error", 500)
    kept = filter_lines(lines, query)
    return {"success": True, "context": "\n".join(kept), "totalLength": len(kept), "query": query or None}


@app.post("/vector/query")
def vector_query(
    req: Optional[VectorQueryRequest] = Body(default=None),
    retriever: VectorRetriever = Depends(get_vector_retriever),
):
    query = req.query if req is not None else None
    if not isinstance(query, str) or not query.strip():
        return _error("Query is required", 400)
    try:
        hits = retriever.query(query, top_k=req.topK)
    except Exception as e:
        logger.exception("Vector query error")
        return _error(str(e) or "Internal server error", 500)
    results = [h.to_dict() for h in hits]
    return {"success": True, "query": query, "results": results, "count": len(results)}


# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.APP_NAME,
    }


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}


@app.get("/")
def hello():
    return {"message": f"{settings.APP_NAME} service running."}
