"""Shared fixtures: an in-process vector store stand-in and chunk helpers."""

from __future__ import annotations

from collections.abc import Sequence
from unittest.mock import AsyncMock

import pytest
from langchain_core.documents import Document
from langchain_core.messages import AIMessage

from ragdesk.configs.system import PromptConfig
from ragdesk.core.pipeline.models import DocumentChunk
from ragdesk.core.pipeline.prompt import PromptBuilder


class FakeVectorStore:
    """Returns canned documents, or raises, and records every query."""

    def __init__(
        self,
        documents: Sequence[Document] = (),
        error: Exception | None = None,
    ) -> None:
        self.documents = list(documents)
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def asimilarity_search(self, query: str, k: int = 4) -> list[Document]:
        self.calls.append((query, k))
        if self.error is not None:
            raise self.error
        return self.documents[:k]


def make_docs(*chunks: DocumentChunk) -> list[Document]:
    return [chunk.to_document() for chunk in chunks]


def mock_llm(*responses: str) -> AsyncMock:
    """An LLM double whose ``ainvoke`` returns ``responses`` in order."""
    llm = AsyncMock()
    llm.ainvoke.side_effect = [AIMessage(content=r) for r in responses]
    return llm


@pytest.fixture
def prompts() -> PromptBuilder:
    return PromptBuilder(PromptConfig())
