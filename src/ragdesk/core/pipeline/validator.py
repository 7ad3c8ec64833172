"""Answer validation: refinement and human-handoff decisions."""

from collections.abc import Sequence

from pydantic import BaseModel

from ragdesk.configs.system import ValidationConfig

from .heuristics import needs_human_help, validate_answer_quality
from .models import DocumentChunk


class ValidationResult(BaseModel):
    needs_refinement: bool
    needs_human_assistance: bool


class Validator:
    def __init__(self, config: ValidationConfig | None = None) -> None:
        self._config = config or ValidationConfig()

    def is_acceptable(self, answer: str, question: str) -> bool:
        return validate_answer_quality(
            answer, question, min_words=self._config.min_answer_words
        )

    def validate(
        self, answer: str, question: str, context: Sequence[DocumentChunk]
    ) -> ValidationResult:
        return ValidationResult(
            needs_refinement=not self.is_acceptable(answer, question),
            needs_human_assistance=needs_human_help(
                question,
                context,
                answer,
                relevance_threshold=self._config.human_assistance_threshold,
            ),
        )
