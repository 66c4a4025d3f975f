# Vector-similarity provider over indexed Drive documents.
#  - FAISS inner-product index with a sidecar ids.npy (row -> drive_chunks.id)
#  - Query embeddings from Ollama /api/embeddings or the OpenAI embeddings API
#  - Chunk text and file name looked up in the SQLite drive_chunks table
# Building the index is out of scope here; see tests/bootstrap_site.py for a toy one.

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import faiss
import numpy as np
import requests

from askbot.content.store import ContentStore
from askbot.settings import settings
from .types import VectorHit

Embedder = Callable[[str], np.ndarray]


def _normalized(vec: List[float]) -> np.ndarray:
    arr = np.array(vec, dtype="float32")
    faiss.normalize_L2(arr.reshape(1, -1))
    return arr


def ollama_embedder(host: Optional[str] = None, model: Optional[str] = None) -> Embedder:
    host = host or settings.OLLAMA_HOST
    model = model or settings.EMBED_MODEL

    def embed(text: str) -> np.ndarray:
        resp = requests.post(
            f"{host}/api/embeddings",
            json={"model": model, "prompt": text},
            timeout=settings.HTTP_TIMEOUT,
        )
        resp.raise_for_status()
        return _normalized(resp.json()["embedding"])

    return embed


def openai_embedder(model: Optional[str] = None) -> Embedder:
    from openai import OpenAI

    client = OpenAI(api_key=settings.OPENAI_API_KEY)
    model = model or settings.OPENAI_EMBED_MODEL

    def embed(text: str) -> np.ndarray:
        resp = client.embeddings.create(model=model, input=text)
        return _normalized(resp.data[0].embedding)

    return embed


def default_embedder() -> Embedder:
    backend = settings.EMBED_BACKEND.lower()
    if backend == "openai":
        return openai_embedder()
    if backend == "ollama":
        return ollama_embedder()
    raise ValueError(f"Unknown EMBED_BACKEND: {settings.EMBED_BACKEND}")


class VectorRetriever:
    def __init__(self, store: ContentStore, faiss_path: str, embedder: Optional[Embedder] = None):
        self.store = store
        self.faiss_path = faiss_path
        self._embedder = embedder

        self._faiss_index: Optional[faiss.Index] = None
        self._faiss_ids: Optional[list[str]] = None

    # -------------------------
    # Loaders
    # -------------------------
    @property
    def embedder(self) -> Embedder:
        if self._embedder is None:
            self._embedder = default_embedder()
        return self._embedder

    def _load_faiss_index(self) -> faiss.Index:
        if self._faiss_index is None:
            if not Path(self.faiss_path).exists():
                raise FileNotFoundError(f"FAISS index not found: {self.faiss_path}")
            self._faiss_index = faiss.read_index(self.faiss_path)
        return self._faiss_index

    def _load_faiss_ids(self) -> list[str]:
        """Load sidecar ids.npy that maps FAISS row to drive_chunks.id."""
        if self._faiss_ids is None:
            ids_path = Path(self.faiss_path).with_name("ids.npy")
            if not ids_path.exists():
                raise FileNotFoundError(f"FAISS id mapping not found: {ids_path}")
            self._faiss_ids = np.load(ids_path.as_posix()).astype(str).tolist()
        return self._faiss_ids

    # -------------------------
    # Public API
    # -------------------------
    def query(self, query: str, top_k: int = 5) -> List[VectorHit]:
        index = self._load_faiss_index()
        ids = self._load_faiss_ids()

        qvec = self.embedder(query)
        if qvec.shape[0] != index.d:
            raise ValueError(f"Query dim {qvec.shape[0]} != index dim {index.d}")

        k = min(top_k, index.ntotal)
        if k <= 0:
            return []
        D, I = index.search(np.array([qvec]), k)

        hits: List[VectorHit] = []
        for sim, row_idx in zip(D[0], I[0]):
            row_idx = int(row_idx)
            if not 0 <= row_idx < len(ids):
                continue
            chunk = self.store.drive_chunk(ids[row_idx])
            if chunk is None:
                continue
            hits.append(
                VectorHit(
                    file_name=chunk["file_name"],
                    text=chunk["text"],
                    score=float(sim),
                    file_id=chunk.get("file_id") or "",
                )
            )
        return hits
