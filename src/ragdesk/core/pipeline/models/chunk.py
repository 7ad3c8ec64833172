"""Retrieved document passages."""

from typing import Any

from langchain_core.documents import Document
from pydantic import BaseModel, ConfigDict, Field

from .constants import DocumentCategory

__all__ = ["DocumentChunk", "DEFAULT_SOURCE"]

DEFAULT_SOURCE = "Company Document"

# Metadata keys written by the ingestion process
META_SOURCE = "source"
META_CATEGORY = "category"
META_TAGS = "tags"
META_IS_FAQ = "is_faq"
META_SECTION = "section"


class DocumentChunk(BaseModel):
    """A passage of source text plus the metadata the retriever ranks on."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Passage text")
    source: str = Field(default=DEFAULT_SOURCE, description="Source document name")
    category: str = Field(
        default=DocumentCategory.GENERAL.value, description="Document category"
    )
    tags: frozenset[str] = Field(
        default_factory=frozenset, description="Free-text tags"
    )
    is_faq: bool = Field(default=False, description="Whether the chunk is an FAQ entry")
    section: str | None = Field(default=None, description="Optional section title")

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentChunk":
        """Build a chunk from a LangChain document, tolerating sparse metadata."""
        meta: dict[str, Any] = doc.metadata or {}
        tags = meta.get(META_TAGS) or []
        if isinstance(tags, str):
            tags = [tags]
        return cls(
            text=doc.page_content,
            source=meta.get(META_SOURCE) or DEFAULT_SOURCE,
            category=meta.get(META_CATEGORY) or DocumentCategory.GENERAL.value,
            tags=frozenset(str(t) for t in tags),
            is_faq=bool(meta.get(META_IS_FAQ, False)),
            section=meta.get(META_SECTION),
        )

    def to_document(self) -> Document:
        return Document(
            page_content=self.text,
            metadata={
                META_SOURCE: self.source,
                META_CATEGORY: self.category,
                META_TAGS: sorted(self.tags),
                META_IS_FAQ: self.is_faq,
                META_SECTION: self.section,
            },
        )
