"""Prompt assembly from ``PromptConfig`` text.

The wording lives in configuration; this module only decides which
template applies and how context and history are rendered into it.
"""

from collections.abc import Sequence

from langchain_core.prompt_values import PromptValue
from langchain_core.prompts import ChatPromptTemplate

from ragdesk.configs.system import PromptConfig

from .heuristics import summarize_question
from .models import DocumentChunk, Message

# Template variable names
VAR_QUESTION = "question"
VAR_CONTEXT = "context"
VAR_HISTORY = "history"
VAR_ANSWER = "answer"


def _literal(text: str) -> str:
    """Escape braces so configured prose is not read as template variables."""
    return text.replace("{", "{{").replace("}", "}}")


def format_context(chunks: Sequence[DocumentChunk]) -> str:
    """``Source: <source>`` header over each chunk, blank-line separated."""
    return "\n\n".join(f"Source: {chunk.source}\n{chunk.text}" for chunk in chunks)


def format_context_text(chunks: Sequence[DocumentChunk]) -> str:
    """Bare chunk text, blank-line separated (used by the refiner)."""
    return "\n\n".join(chunk.text for chunk in chunks)


def format_history(history: Sequence[Message]) -> str:
    """One ``role: content`` line per message."""
    return "\n".join(f"{msg.role}: {msg.content}" for msg in history)


class PromptBuilder:
    """Builds chat prompts for the generator and refiner."""

    def __init__(self, config: PromptConfig) -> None:
        self._config = config
        self._rag_template = ChatPromptTemplate.from_messages(
            [
                ("system", _literal(config.system_prompt)),
                ("human", "{question}"),
                ("system", config.context_prompt),
                ("system", _literal(config.guideline_prompt)),
            ]
        )
        self._conversational_template = ChatPromptTemplate.from_messages(
            [
                ("system", _literal(config.system_prompt)),
                ("system", config.history_prompt),
                ("human", "{question}"),
                ("system", config.context_prompt),
                ("system", _literal(config.conversational_guideline_prompt)),
            ]
        )
        self._refinement_template = ChatPromptTemplate.from_messages(
            [("system", config.refinement_prompt)]
        )

    @property
    def clarification_message(self) -> str:
        return self._config.clarification_message

    def answer_prompt(
        self,
        question: str,
        context: Sequence[DocumentChunk],
        history: Sequence[Message],
    ) -> PromptValue:
        """History-aware template when ``history`` is non-empty."""
        if history:
            return self._conversational_template.invoke(
                {
                    VAR_QUESTION: question,
                    VAR_CONTEXT: format_context(context),
                    VAR_HISTORY: format_history(history),
                }
            )
        return self._rag_template.invoke(
            {VAR_QUESTION: question, VAR_CONTEXT: format_context(context)}
        )

    def refinement_prompt(
        self,
        question: str,
        context: Sequence[DocumentChunk],
        answer: str,
    ) -> PromptValue:
        return self._refinement_template.invoke(
            {
                VAR_QUESTION: question,
                VAR_CONTEXT: format_context_text(context),
                VAR_ANSWER: answer,
            }
        )

    def handoff_message(self, question: str) -> str:
        return self._config.handoff_message.format(
            summary=summarize_question(question)
        )
