"""Answer generation: one LLM call over the assembled prompt."""

import logging
from collections.abc import Sequence

from langchain_core.language_models import BaseLanguageModel

from .models import DocumentChunk, Message
from .prompt import PromptBuilder

logger = logging.getLogger(__name__)


def message_text(response: object) -> str:
    """Text of an LLM response (chat models return messages, LLMs strings)."""
    if isinstance(response, str):
        return response
    content = getattr(response, "content", "")
    if isinstance(content, str):
        return content
    # Multi-part content: keep the text parts only.
    return "".join(
        part if isinstance(part, str) else part.get("text", "")
        for part in content
    )


class Generator:
    """Produces the draft answer.

    LLM errors are not caught here; they propagate to the caller.
    """

    def __init__(self, llm: BaseLanguageModel, prompts: PromptBuilder) -> None:
        self._llm = llm
        self._prompts = prompts

    async def generate(
        self,
        question: str,
        category: str,
        context: Sequence[DocumentChunk],
        history: Sequence[Message],
        *,
        clarification_needed: bool = False,
    ) -> str:
        if clarification_needed:
            return self._prompts.clarification_message

        prompt = self._prompts.answer_prompt(question, context, history)
        logger.debug(
            "Generating answer (category=%s, chunks=%d, history=%d)",
            category,
            len(context),
            len(history),
        )
        response = await self._llm.ainvoke(prompt)
        return message_text(response)
