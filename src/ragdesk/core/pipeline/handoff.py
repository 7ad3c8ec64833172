"""Final-answer selection, including escalation to a human."""

from .prompt import PromptBuilder


class HumanHandoffHandler:
    def __init__(self, prompts: PromptBuilder) -> None:
        self._prompts = prompts

    def final_answer(
        self,
        question: str,
        answer: str,
        refined_answer: str | None,
        needs_human_assistance: bool,
    ) -> str:
        """The handoff message wins over any refined or draft answer."""
        if needs_human_assistance:
            return self._prompts.handoff_message(question)
        if refined_answer is not None:
            return refined_answer
        return answer
