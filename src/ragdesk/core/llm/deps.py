"""LLM factory functions."""

import logging
from typing import Annotated

from fastapi import Depends
from langchain_openai import ChatOpenAI

from ragdesk.configs.config import get_llm_config
from ragdesk.configs.system import LLMConfig

logger = logging.getLogger(__name__)


def get_llm(
    config: Annotated[LLMConfig, Depends(get_llm_config)],
) -> ChatOpenAI:
    """Create a ChatOpenAI client for an OpenAI-compatible endpoint.

    An empty ``api_key`` defers to the client's own ``OPENAI_API_KEY`` lookup.
    """
    return ChatOpenAI(
        base_url=config.endpoint,
        api_key=config.api_key.get_secret_value() or None,
        model=config.model_name,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.model_timeout.total_seconds(),
        max_retries=config.max_retries,
    )
