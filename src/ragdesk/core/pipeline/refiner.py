"""Second-pass rewrite of answers that failed validation."""

import logging
from collections.abc import Sequence

from langchain_core.language_models import BaseLanguageModel

from .generator import message_text
from .models import DocumentChunk
from .prompt import PromptBuilder

logger = logging.getLogger(__name__)


class Refiner:
    def __init__(self, llm: BaseLanguageModel, prompts: PromptBuilder) -> None:
        self._llm = llm
        self._prompts = prompts

    async def refine(
        self, question: str, context: Sequence[DocumentChunk], answer: str
    ) -> str:
        """Ask the LLM to improve ``answer`` using only ``context``."""
        prompt = self._prompts.refinement_prompt(question, context, answer)
        response = await self._llm.ainvoke(prompt)
        refined = message_text(response)
        logger.debug(
            "Refined answer (%d -> %d chars)", len(answer), len(refined)
        )
        return refined
