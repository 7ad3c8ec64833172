"""Tests for keyword-based question and document categorisation."""

from ragdesk.core.pipeline.categorizer import (
    CATEGORY_KEYWORDS,
    Categorizer,
    identify_document_category,
    identify_question_category,
)
from ragdesk.core.pipeline.models import DocumentCategory


class TestIdentifyQuestion:
    def test_no_keywords_is_general(self):
        assert identify_question_category("What are your opening hours?") == (
            DocumentCategory.GENERAL
        )

    def test_empty_question_is_general(self):
        assert identify_question_category("") == DocumentCategory.GENERAL

    def test_single_commodity_keyword(self):
        assert (
            identify_question_category("What is your company's wheat protein content?")
            == DocumentCategory.COMMODITIES
        )

    def test_highest_count_wins(self):
        assert (
            identify_question_category("Can you move freight by rail and truck?")
            == DocumentCategory.TRANSPORT
        )

    def test_tie_goes_to_first_declared_category(self):
        # One commodity hit, one chemical hit.
        assert (
            identify_question_category("Do you sell ethylene or wheat?")
            == DocumentCategory.COMMODITIES
        )

    def test_case_insensitive(self):
        assert identify_question_category("POLYETHYLENE grades") == (
            DocumentCategory.CHEMICALS
        )

    def test_custom_keywords(self):
        categorizer = Categorizer({DocumentCategory.SERVICES: ("audit",)})
        assert categorizer.identify("Do you audit warehouses?") == (
            DocumentCategory.SERVICES
        )
        assert categorizer.identify("Do you sell wheat?") == DocumentCategory.GENERAL

    def test_every_category_but_general_has_keywords(self):
        assert set(CATEGORY_KEYWORDS) == set(DocumentCategory) - {
            DocumentCategory.GENERAL
        }


class TestIdentifyDocument:
    def test_filename_match_wins(self):
        assert identify_document_category(
            "freight_rates.pdf", "polyethylene polyethylene"
        ) == DocumentCategory.TRANSPORT

    def test_content_counts_whole_words(self):
        content = "Our polyethylene and propylene grades ship monthly."
        assert identify_document_category("doc1.txt", content) == (
            DocumentCategory.CHEMICALS
        )

    def test_no_match_is_general(self):
        assert identify_document_category("doc1.txt") == DocumentCategory.GENERAL
        assert identify_document_category("doc1.txt", "nothing here") == (
            DocumentCategory.GENERAL
        )
