"""Context retrieval: vector search, then lexical filtering and ranking.

Steps, in order:

1. ``top_k`` nearest neighbours from the vector store (errors -> no results).
2. Category filter, dropped again if it leaves too few chunks.
3. FAQ chunks first for direct questions.
4. Chunks whose tags occur in the question first.
5. Stable reorder by ``RelevanceScorer``.
6. Keep the first ``max_context_chunks``.
7. Score context relevance; below the threshold the context is discarded
   and a clarification is requested instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from typing import Protocol

from langchain_core.documents import Document
from pydantic import BaseModel, Field

from ragdesk.configs.system import RagConfig
from ragdesk.infra.telemetry import (
    ATTR_RETRIEVE_CANDIDATES,
    ATTR_RETRIEVE_FAILED,
    ATTR_RETRIEVE_TOP_K,
    SPAN_RETRIEVE_SEARCH,
    tracer,
)

from .heuristics import evaluate_context_relevance
from .metrics import (
    CLARIFICATIONS_TOTAL,
    RETRIEVAL_CHUNKS_SELECTED,
    RETRIEVAL_FAILURES_TOTAL,
)
from .models import DocumentCategory, DocumentChunk
from .scoring import LexicalRelevanceScorer, RelevanceScorer, reorder_by_relevance

logger = logging.getLogger(__name__)

DIRECT_QUESTION_RE = re.compile(
    r"^(what|how|who|where|when|why|can|does|do|is|are|should|could|would"
    r"|will|may|did|has|have|had)\b",
    re.IGNORECASE,
)


class SimilaritySearch(Protocol):
    """The slice of ``langchain_core.vectorstores.VectorStore`` we rely on."""

    async def asimilarity_search(self, query: str, k: int = 4) -> list[Document]: ...


class RetrievalResult(BaseModel):
    context: list[DocumentChunk] = Field(default_factory=list)
    context_relevance: float = 0.0
    clarification_needed: bool = False


def is_direct_question(question: str) -> bool:
    return DIRECT_QUESTION_RE.match(question.strip()) is not None


def _promote(
    chunks: Sequence[DocumentChunk], predicate: Callable[[DocumentChunk], bool]
) -> list[DocumentChunk]:
    """Move matching chunks to the front, keeping order inside both groups."""
    matched = [c for c in chunks if predicate(c)]
    if not matched:
        return list(chunks)
    return matched + [c for c in chunks if not predicate(c)]


def filter_by_category(
    chunks: Sequence[DocumentChunk], category: str, min_chunks: int
) -> list[DocumentChunk]:
    if category == DocumentCategory.GENERAL.value:
        return list(chunks)
    filtered = [c for c in chunks if c.category == category]
    if len(filtered) < min_chunks:
        return list(chunks)
    return filtered


def boost_faq(chunks: Sequence[DocumentChunk], question: str) -> list[DocumentChunk]:
    if not is_direct_question(question):
        return list(chunks)
    return _promote(chunks, lambda c: c.is_faq)


def boost_tags(chunks: Sequence[DocumentChunk], question: str) -> list[DocumentChunk]:
    lowered = question.lower()
    return _promote(
        chunks, lambda c: any(tag and tag.lower() in lowered for tag in c.tags)
    )


class Retriever:
    """Selects and scores the context handed to the generator."""

    def __init__(
        self,
        vector_store: SimilaritySearch,
        config: RagConfig | None = None,
        scorer: RelevanceScorer | None = None,
    ) -> None:
        self._store = vector_store
        self._config = config or RagConfig()
        self._scorer = scorer or LexicalRelevanceScorer()

    async def search(self, question: str) -> list[DocumentChunk]:
        """Nearest neighbours for ``question``; empty on any store failure."""
        with tracer.start_as_current_span(SPAN_RETRIEVE_SEARCH) as span:
            span.set_attribute(ATTR_RETRIEVE_TOP_K, self._config.top_k)
            try:
                docs = await self._store.asimilarity_search(
                    question, k=self._config.top_k
                )
            except Exception:
                RETRIEVAL_FAILURES_TOTAL.inc()
                span.set_attribute(ATTR_RETRIEVE_FAILED, True)
                logger.warning(
                    "Vector search failed, continuing with empty results",
                    exc_info=True,
                )
                return []
            span.set_attribute(ATTR_RETRIEVE_CANDIDATES, len(docs))
            return [DocumentChunk.from_document(doc) for doc in docs]

    def select(
        self, candidates: Sequence[DocumentChunk], question: str, category: str
    ) -> list[DocumentChunk]:
        """Filter, boost, reorder and truncate ``candidates``."""
        chunks = filter_by_category(
            candidates, category, self._config.min_category_chunks
        )
        chunks = boost_faq(chunks, question)
        chunks = boost_tags(chunks, question)
        chunks = reorder_by_relevance(chunks, question, self._scorer)
        return chunks[: self._config.max_context_chunks]

    async def retrieve(self, question: str, category: str) -> RetrievalResult:
        candidates = await self.search(question)
        selected = self.select(candidates, question, category)
        relevance = evaluate_context_relevance(selected, question)
        RETRIEVAL_CHUNKS_SELECTED.observe(len(selected))

        if not selected or relevance < self._config.clarification_threshold:
            CLARIFICATIONS_TOTAL.inc()
            logger.info(
                "Retrieval: %d candidate(s), relevance %.2f below %.2f; "
                "asking for clarification",
                len(candidates),
                relevance,
                self._config.clarification_threshold,
            )
            return RetrievalResult(clarification_needed=True)

        logger.info(
            "Retrieval: selected %d of %d candidate(s) (relevance=%.2f)",
            len(selected),
            len(candidates),
            relevance,
        )
        return RetrievalResult(context=selected, context_relevance=relevance)
