"""Tests for the validate stage and final-answer selection."""

from ragdesk.configs.system import ValidationConfig
from ragdesk.core.pipeline.handoff import HumanHandoffHandler
from ragdesk.core.pipeline.models import DocumentChunk
from ragdesk.core.pipeline.validator import Validator

QUESTION = "What is your company's wheat protein content?"
GOOD_ANSWER = (
    "Our wheat has a protein content of twelve to fourteen percent depending "
    "on the harvest year and the region where the grain was grown and stored."
)
RELEVANT = [DocumentChunk(text="Our wheat protein content is 13 percent.")]


class TestValidator:
    def test_short_answer_needs_refinement(self):
        result = Validator().validate("Twelve percent.", QUESTION, RELEVANT)
        assert result.needs_refinement
        assert not result.needs_human_assistance

    def test_good_answer_passes(self):
        result = Validator().validate(GOOD_ANSWER, QUESTION, RELEVANT)
        assert not result.needs_refinement
        assert not result.needs_human_assistance

    def test_greeting_never_needs_human(self):
        result = Validator().validate("I don't know.", "hello there", [])
        assert result.needs_refinement
        assert not result.needs_human_assistance

    def test_thresholds_come_from_config(self):
        validator = Validator(
            ValidationConfig(min_answer_words=2, human_assistance_threshold=0.9)
        )
        result = validator.validate(
            "Wheat protein is 13 percent.", QUESTION, RELEVANT
        )
        assert not result.needs_refinement

        escalated = validator.validate(
            "I'm not sure, sorry.",
            "Can I get a custom pricing quote for wheat?",
            [DocumentChunk(text="custom wheat")],
        )
        assert escalated.needs_human_assistance


class TestHandoff:
    def test_handoff_overrides_refined_answer(self, prompts):
        final = HumanHandoffHandler(prompts).final_answer(
            QUESTION, "draft", "refined", needs_human_assistance=True
        )
        assert final == prompts.handoff_message(QUESTION)

    def test_refined_answer_preferred_over_draft(self, prompts):
        handler = HumanHandoffHandler(prompts)
        assert handler.final_answer(QUESTION, "draft", "refined", False) == "refined"
        assert handler.final_answer(QUESTION, "draft", None, False) == "draft"
