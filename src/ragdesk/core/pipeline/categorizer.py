"""Keyword-based topic categorisation for questions and documents."""

import re
from collections.abc import Mapping, Sequence

from .models import DocumentCategory

CATEGORY_KEYWORDS: Mapping[DocumentCategory, Sequence[str]] = {
    DocumentCategory.TRANSPORT: (
        "cargo", "freight", "logistics", "transport",
        "shipping", "rail", "truck", "air", "ocean",
        "multimodal", "intermodal", "oog",
    ),
    DocumentCategory.COMMODITIES: (
        "barley", "wheat", "lentils", "seeds", "meal",
        "oil", "peas", "chickpeas", "millet", "oats",
        "flour", "sunflower", "rapeseed", "flaxseed", "soybean",
    ),
    DocumentCategory.CHEMICALS: (
        "ethylene", "polyethylene", "propylene", "chemical",
    ),
    DocumentCategory.SERVICES: (
        "services", "solutions", "operations", "management",
        "supply chain", "financial",
    ),
}


class Categorizer:
    """Assigns a coarse category by counting keyword hits.

    The highest count wins, ties go to the category declared first, and a
    question with no hits at all is ``General``.
    """

    def __init__(
        self,
        keywords: Mapping[DocumentCategory, Sequence[str]] = CATEGORY_KEYWORDS,
    ) -> None:
        self._keywords = {
            category: tuple(k.lower() for k in words)
            for category, words in keywords.items()
        }

    def identify(self, question: str) -> DocumentCategory:
        normalized = question.lower()
        best, best_score = DocumentCategory.GENERAL, 0
        for category, words in self._keywords.items():
            score = sum(1 for keyword in words if keyword in normalized)
            if score > best_score:
                best, best_score = category, score
        return best

    def identify_document(
        self, filename: str, content: str | None = None
    ) -> DocumentCategory:
        """Categorise a document by filename, then by content word counts."""
        normalized_name = filename.lower()
        for category, words in self._keywords.items():
            if any(keyword in normalized_name for keyword in words):
                return category

        if not content:
            return DocumentCategory.GENERAL

        normalized = content.lower()
        best, best_score = DocumentCategory.GENERAL, 0
        for category, words in self._keywords.items():
            score = sum(
                len(re.findall(r"\b" + re.escape(keyword) + r"\b", normalized))
                for keyword in words
            )
            if score > best_score:
                best, best_score = category, score
        return best


_default = Categorizer()


def identify_question_category(question: str) -> DocumentCategory:
    return _default.identify(question)


def identify_document_category(
    filename: str, content: str | None = None
) -> DocumentCategory:
    return _default.identify_document(filename, content)
