"""Tests for context retrieval, filtering and ranking."""

import pytest

from ragdesk.configs.system import RagConfig
from ragdesk.core.pipeline.models import DocumentChunk
from ragdesk.core.pipeline.retriever import (
    Retriever,
    boost_faq,
    boost_tags,
    filter_by_category,
    is_direct_question,
)

from .conftest import FakeVectorStore, make_docs

WHEAT_QUESTION = "What is your company's wheat protein content?"


def _chunk(text: str, **kwargs) -> DocumentChunk:
    return DocumentChunk(text=text, **kwargs)


# =========================================================================
# Ranking helpers
# =========================================================================


class TestHelpers:
    @pytest.mark.parametrize(
        "question",
        ["What is it?", "  how do I ship?", "CAN you help", "Does it work"],
    )
    def test_direct_questions(self, question):
        assert is_direct_question(question)

    @pytest.mark.parametrize("question", ["Tell me about oats", "whatever", "I wonder"])
    def test_not_direct_questions(self, question):
        assert not is_direct_question(question)

    def test_category_filter_keeps_matches(self):
        chunks = [
            _chunk("a", category="Commodities"),
            _chunk("b", category="Transport"),
            _chunk("c", category="Commodities"),
            _chunk("d", category="Commodities"),
        ]
        assert [c.text for c in filter_by_category(chunks, "Commodities", 3)] == [
            "a",
            "c",
            "d",
        ]

    def test_category_filter_falls_back_when_too_few(self):
        chunks = [
            _chunk("a", category="Commodities"),
            _chunk("b", category="Transport"),
            _chunk("c", category="Transport"),
        ]
        assert filter_by_category(chunks, "Commodities", 3) == chunks

    def test_general_category_is_not_filtered(self):
        chunks = [_chunk("a", category="Transport")] * 3
        assert filter_by_category(chunks, "General", 3) == chunks

    def test_faq_boost_only_for_direct_questions(self):
        chunks = [_chunk("a"), _chunk("b", is_faq=True)]
        assert [c.text for c in boost_faq(chunks, "What is b?")] == ["b", "a"]
        assert [c.text for c in boost_faq(chunks, "Tell me about b")] == ["a", "b"]

    def test_tag_boost_is_stable(self):
        chunks = [
            _chunk("a"),
            _chunk("b", tags=frozenset({"rapeseed"})),
            _chunk("c"),
            _chunk("d", tags=frozenset({"Rapeseed"})),
        ]
        boosted = boost_tags(chunks, "Tell me about rapeseed shipments")
        assert [c.text for c in boosted] == ["b", "d", "a", "c"]


# =========================================================================
# Retriever.retrieve
# =========================================================================


class TestRetrieve:
    @pytest.mark.asyncio
    async def test_faq_chunks_come_first(self):
        chunks = [
            _chunk(f"Wheat protein note {i}.", category="Commodities", is_faq=i in (2, 4))
            for i in range(5)
        ]
        store = FakeVectorStore(make_docs(*chunks))

        result = await Retriever(store).retrieve(WHEAT_QUESTION, "Commodities")

        assert [c.is_faq for c in result.context] == [True, True, False, False]
        assert [c.text for c in result.context[:2]] == [
            "Wheat protein note 2.",
            "Wheat protein note 4.",
        ]
        assert not result.clarification_needed
        assert store.calls == [(WHEAT_QUESTION, 16)]

    @pytest.mark.asyncio
    async def test_relevance_score_reorders(self):
        chunks = [
            _chunk("Wheat is stored in silos."),
            _chunk("Wheat protein content is tested on arrival for wheat lots."),
        ]
        store = FakeVectorStore(make_docs(*chunks))

        result = await Retriever(store).retrieve(WHEAT_QUESTION, "Commodities")

        assert result.context[0] == chunks[1]

    @pytest.mark.asyncio
    async def test_bounds(self):
        chunks = [_chunk(f"wheat protein content {i}") for i in range(20)]
        store = FakeVectorStore(make_docs(*chunks))

        result = await Retriever(store).retrieve(WHEAT_QUESTION, "Commodities")

        assert len(result.context) == 4
        assert 0.0 <= result.context_relevance <= 1.0

    @pytest.mark.asyncio
    async def test_store_failure_degrades_to_clarification(self):
        store = FakeVectorStore(error=ConnectionError("index unavailable"))

        result = await Retriever(store).retrieve(WHEAT_QUESTION, "Commodities")

        assert result.context == []
        assert result.context_relevance == 0.0
        assert result.clarification_needed

    @pytest.mark.asyncio
    async def test_low_relevance_requests_clarification(self):
        store = FakeVectorStore(make_docs(_chunk("Lorem ipsum dolor sit amet.")))

        result = await Retriever(store).retrieve(WHEAT_QUESTION, "Commodities")

        assert result.clarification_needed
        assert result.context == []
        assert result.context_relevance == 0.0

    @pytest.mark.asyncio
    async def test_empty_store_requests_clarification(self):
        result = await Retriever(FakeVectorStore()).retrieve(WHEAT_QUESTION, "General")
        assert result.clarification_needed

    @pytest.mark.asyncio
    async def test_config_limits(self):
        chunks = [_chunk(f"wheat protein content {i}") for i in range(10)]
        store = FakeVectorStore(make_docs(*chunks))
        config = RagConfig(top_k=5, max_context_chunks=2)

        result = await Retriever(store, config).retrieve(WHEAT_QUESTION, "General")

        assert store.calls == [(WHEAT_QUESTION, 5)]
        assert len(result.context) == 2

    @pytest.mark.asyncio
    async def test_custom_scorer(self):
        class ByLength:
            def score(self, question, chunk):
                return float(len(chunk.text))

        chunks = [_chunk("wheat protein"), _chunk("wheat protein content, longest")]
        store = FakeVectorStore(make_docs(*chunks))

        result = await Retriever(store, scorer=ByLength()).retrieve(
            WHEAT_QUESTION, "General"
        )

        assert result.context[0].text == "wheat protein content, longest"
