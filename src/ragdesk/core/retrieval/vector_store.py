"""Default vector store -- lifespan dependency.

An ``InMemoryVectorStore`` over ``OpenAIEmbeddings``, optionally preloaded
from a JSONL file with one chunk per line::

    {"text": "...", "source": "faq.pdf", "category": "Commodities",
     "tags": ["wheat"], "is_faq": true}

Any other ``VectorStore`` can be attached to ``app.state.vector_store``
(or swapped via ``dependency_overrides``) without touching the pipeline.
"""

import json
import logging
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from langchain_core.vectorstores import InMemoryVectorStore, VectorStore
from langchain_openai import OpenAIEmbeddings

from ragdesk.configs.config import AppConfig, get_app_config
from ragdesk.configs.system import EmbeddingConfig
from ragdesk.core.pipeline.models import DocumentChunk
from ragdesk.infra.lifespan import get_app

logger = logging.getLogger(__name__)


def load_chunks(path: str | Path) -> list[DocumentChunk]:
    """Read chunk records from a JSONL file, skipping blank lines."""
    chunks: list[DocumentChunk] = []
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                chunks.append(DocumentChunk.model_validate(json.loads(line)))
            except ValueError:
                logger.warning(
                    "Skipping invalid chunk record at %s:%d", path, line_no,
                    exc_info=True,
                )
    return chunks


def create_embeddings(config: EmbeddingConfig) -> OpenAIEmbeddings:
    return OpenAIEmbeddings(
        model=config.model_name,
        base_url=config.endpoint,
        api_key=config.api_key.get_secret_value() or None,
    )


async def build_vector_store(
    app: Annotated[FastAPI, Depends(get_app)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> AsyncGenerator[None, None]:
    """Create the in-memory store and load the configured documents."""
    store = InMemoryVectorStore(embedding=create_embeddings(config.embedding))

    path = config.rag.documents_path
    if path:
        chunks = load_chunks(path)
        if chunks:
            await store.aadd_documents([chunk.to_document() for chunk in chunks])
        logger.info("Loaded %d document chunks from %s", len(chunks), path)
    else:
        logger.info("No documents_path configured; vector store starts empty.")

    app.state.vector_store = store
    yield


def get_vector_store(request: Request) -> VectorStore:
    """Per-request dependency -- reads from ``app.state``."""
    return request.app.state.vector_store
