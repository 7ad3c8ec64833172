"""LLM client object as BaseLanguageModel in langchain."""

from .deps import get_llm  # noqa: F401
