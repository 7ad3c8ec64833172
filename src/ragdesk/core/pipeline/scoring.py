"""Pluggable relevance scoring used to reorder retrieved chunks."""

from collections.abc import Sequence
from typing import Protocol

from .heuristics import count_whole_word, extract_key_terms
from .models import DocumentChunk


class RelevanceScorer(Protocol):
    """Scores how well a chunk answers a question; higher is better."""

    def score(self, question: str, chunk: DocumentChunk) -> float: ...


class LexicalRelevanceScorer:
    """Counts whole-word occurrences of the question's key terms."""

    def score(self, question: str, chunk: DocumentChunk) -> float:
        return float(
            sum(count_whole_word(term, chunk.text) for term in extract_key_terms(question))
        )


def reorder_by_relevance(
    chunks: Sequence[DocumentChunk],
    question: str,
    scorer: RelevanceScorer,
) -> list[DocumentChunk]:
    """Stable sort, highest score first; equal scores keep their order."""
    scored = [(scorer.score(question, chunk), chunk) for chunk in chunks]
    return [chunk for _, chunk in sorted(scored, key=lambda s: s[0], reverse=True)]
