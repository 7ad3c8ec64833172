"""Vector store used by the retriever."""

from .vector_store import (  # noqa: F401
    build_vector_store,
    get_vector_store,
    load_chunks,
)
