"""RAG pipeline -- explicit finite-state machine.

Stages:
    categorize → retrieve → generate → validate ─┬─ (refine) → refine ─┐
                                                 └─ (ok) ──────────────┴→ handle_human_assistance → END

Each stage is a bound method taking the current ``PipelineState`` and
returning a partial update.  The driver merges updates into the state,
rejecting any that rewrite a key already set, and follows ``TRANSITIONS``
until it reaches a terminal stage.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Union

from langchain_core.language_models import BaseLanguageModel

from ragdesk.configs.system import RagConfig, ValidationConfig
from ragdesk.infra.logging import log_context
from ragdesk.infra.telemetry import (
    ATTR_PIPELINE_CATEGORY,
    ATTR_PIPELINE_HANDOFF,
    ATTR_PIPELINE_HISTORY_LEN,
    ATTR_PIPELINE_QUESTION_LEN,
    ATTR_PIPELINE_REFINED,
    ATTR_PIPELINE_SESSION_ID,
    ATTR_PIPELINE_STAGE,
    ATTR_RETRIEVE_RELEVANCE,
    ATTR_RETRIEVE_SELECTED,
    SPAN_PIPELINE,
    SPAN_PIPELINE_STAGE,
    tracer,
)

from .categorizer import Categorizer
from .errors import StateTransitionError
from .generator import Generator
from .handoff import HumanHandoffHandler
from .metrics import (
    HANDOFFS_TOTAL,
    PIPELINE_DURATION_SECONDS,
    PIPELINE_RUNS_TOTAL,
    PIPELINE_STAGE_SECONDS,
    QUESTIONS_BY_CATEGORY_TOTAL,
    REFINEMENTS_TOTAL,
)
from .models import (
    INPUT_KEYS,
    KEY_ANSWER,
    KEY_CATEGORY,
    KEY_CLARIFICATION_NEEDED,
    KEY_CONTEXT,
    KEY_CONTEXT_RELEVANCE,
    KEY_FINAL_ANSWER,
    KEY_HISTORY,
    KEY_NEEDS_HUMAN_ASSISTANCE,
    KEY_NEEDS_REFINEMENT,
    KEY_QUESTION,
    KEY_REFINED_ANSWER,
    KEY_SESSION_ID,
    Message,
    PipelineState,
    Stage,
)
from .prompt import PromptBuilder
from .refiner import Refiner
from .retriever import Retriever, SimilaritySearch
from .validator import Validator

logger = logging.getLogger(__name__)

StageUpdate = dict[str, Any]
StageHandler = Callable[[PipelineState], Awaitable[StageUpdate]]
Router = Callable[[PipelineState], Stage]

# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def route_after_validate(state: PipelineState) -> Stage:
    if state.get(KEY_NEEDS_REFINEMENT):
        return Stage.REFINE
    return Stage.HANDLE_HUMAN_ASSISTANCE


# A stage maps to its successor, to a router choosing one, or to None (END).
TRANSITIONS: Mapping[Stage, Union[Stage, Router, None]] = {
    Stage.CATEGORIZE: Stage.RETRIEVE,
    Stage.RETRIEVE: Stage.GENERATE,
    Stage.GENERATE: Stage.VALIDATE,
    Stage.VALIDATE: route_after_validate,
    Stage.REFINE: Stage.HANDLE_HUMAN_ASSISTANCE,
    Stage.HANDLE_HUMAN_ASSISTANCE: None,
}

START = Stage.CATEGORIZE


def next_stage(stage: Stage, state: PipelineState) -> Stage | None:
    if stage not in TRANSITIONS:
        raise StateTransitionError(f"No transition defined for stage {stage!r}")
    target = TRANSITIONS[stage]
    if target is None or isinstance(target, Stage):
        return target
    chosen = target(state)
    if chosen not in TRANSITIONS:
        raise StateTransitionError(
            f"Router for {stage.value!r} returned unknown stage {chosen!r}"
        )
    return chosen


def merge_update(state: PipelineState, update: StageUpdate, stage: Stage) -> None:
    """Apply ``update`` in place; every key may be written only once."""
    for key, value in update.items():
        if key in INPUT_KEYS or key in state:
            raise StateTransitionError(
                f"Stage {stage.value!r} attempted to overwrite {key!r}"
            )
        state[key] = value  # type: ignore[literal-required]


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Orchestrator:
    """Runs one question through the pipeline stages.

    Collaborators are built once at construction; ``invoke`` keeps no
    per-call state on the instance so one orchestrator can serve concurrent
    requests.
    """

    def __init__(
        self,
        *,
        categorizer: Categorizer,
        retriever: Retriever,
        generator: Generator,
        validator: Validator,
        refiner: Refiner,
        handoff: HumanHandoffHandler,
    ) -> None:
        self._categorizer = categorizer
        self._retriever = retriever
        self._generator = generator
        self._validator = validator
        self._refiner = refiner
        self._handoff = handoff

        self._handlers: dict[Stage, StageHandler] = {
            Stage.CATEGORIZE: self._categorize,
            Stage.RETRIEVE: self._retrieve,
            Stage.GENERATE: self._generate,
            Stage.VALIDATE: self._validate,
            Stage.REFINE: self._refine,
            Stage.HANDLE_HUMAN_ASSISTANCE: self._handle_human_assistance,
        }

    @classmethod
    def build(
        cls,
        *,
        llm: BaseLanguageModel,
        vector_store: SimilaritySearch,
        prompts: PromptBuilder,
        rag_config: RagConfig | None = None,
        validation_config: ValidationConfig | None = None,
    ) -> "Orchestrator":
        """Wire the default collaborators around one LLM and vector store."""
        return cls(
            categorizer=Categorizer(),
            retriever=Retriever(vector_store, rag_config),
            generator=Generator(llm, prompts),
            validator=Validator(validation_config),
            refiner=Refiner(llm, prompts),
            handoff=HumanHandoffHandler(prompts),
        )

    # ------------------------------------------------------------------
    # Stage: categorize
    # ------------------------------------------------------------------

    async def _categorize(self, state: PipelineState) -> StageUpdate:
        category = self._categorizer.identify(state[KEY_QUESTION]).value
        QUESTIONS_BY_CATEGORY_TOTAL.labels(category=category).inc()
        return {KEY_CATEGORY: category}

    # ------------------------------------------------------------------
    # Stage: retrieve
    # ------------------------------------------------------------------

    async def _retrieve(self, state: PipelineState) -> StageUpdate:
        result = await self._retriever.retrieve(
            state[KEY_QUESTION], state[KEY_CATEGORY]
        )
        return {
            KEY_CONTEXT: result.context,
            KEY_CONTEXT_RELEVANCE: result.context_relevance,
            KEY_CLARIFICATION_NEEDED: result.clarification_needed,
        }

    # ------------------------------------------------------------------
    # Stage: generate
    # ------------------------------------------------------------------

    async def _generate(self, state: PipelineState) -> StageUpdate:
        answer = await self._generator.generate(
            state[KEY_QUESTION],
            state[KEY_CATEGORY],
            state.get(KEY_CONTEXT, []),
            state.get(KEY_HISTORY, []),
            clarification_needed=state.get(KEY_CLARIFICATION_NEEDED, False),
        )
        return {KEY_ANSWER: answer}

    # ------------------------------------------------------------------
    # Stage: validate
    # ------------------------------------------------------------------

    async def _validate(self, state: PipelineState) -> StageUpdate:
        result = self._validator.validate(
            state[KEY_ANSWER], state[KEY_QUESTION], state.get(KEY_CONTEXT, [])
        )
        return {
            KEY_NEEDS_REFINEMENT: result.needs_refinement,
            KEY_NEEDS_HUMAN_ASSISTANCE: result.needs_human_assistance,
        }

    # ------------------------------------------------------------------
    # Stage: refine
    # ------------------------------------------------------------------

    async def _refine(self, state: PipelineState) -> StageUpdate:
        REFINEMENTS_TOTAL.inc()
        refined = await self._refiner.refine(
            state[KEY_QUESTION], state.get(KEY_CONTEXT, []), state[KEY_ANSWER]
        )
        return {KEY_REFINED_ANSWER: refined}

    # ------------------------------------------------------------------
    # Stage: handle_human_assistance  (terminal)
    # ------------------------------------------------------------------

    async def _handle_human_assistance(self, state: PipelineState) -> StageUpdate:
        needs_human = state.get(KEY_NEEDS_HUMAN_ASSISTANCE, False)
        if needs_human:
            HANDOFFS_TOTAL.inc()
        final = self._handoff.final_answer(
            state[KEY_QUESTION],
            state[KEY_ANSWER],
            state.get(KEY_REFINED_ANSWER),
            needs_human,
        )
        return {KEY_FINAL_ANSWER: final}

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def _run_stage(self, stage: Stage, state: PipelineState) -> None:
        handler = self._handlers.get(stage)
        if handler is None:
            raise StateTransitionError(f"No handler registered for {stage!r}")

        with (
            log_context(stage=stage.value),
            tracer.start_as_current_span(SPAN_PIPELINE_STAGE) as span,
        ):
            span.set_attribute(ATTR_PIPELINE_STAGE, stage.value)
            start = time.monotonic()
            update = await handler(state)
            elapsed = time.monotonic() - start

            if stage is Stage.RETRIEVE:
                span.set_attribute(ATTR_RETRIEVE_SELECTED, len(update[KEY_CONTEXT]))
                span.set_attribute(
                    ATTR_RETRIEVE_RELEVANCE, update[KEY_CONTEXT_RELEVANCE]
                )
            PIPELINE_STAGE_SECONDS.labels(stage=stage.value).observe(elapsed)
            logger.debug("Stage %s finished in %.3fs", stage.value, elapsed)
        merge_update(state, update, stage)

    async def invoke(
        self,
        question: str,
        history: Sequence[Message] = (),
        session_id: str = "",
    ) -> PipelineState:
        """Run every stage for ``question`` and return the terminal state.

        LLM exceptions propagate unchanged; retrieval errors never do.
        """
        state: PipelineState = {
            KEY_QUESTION: question,
            KEY_HISTORY: list(history),
            KEY_SESSION_ID: session_id,
        }

        with tracer.start_as_current_span(SPAN_PIPELINE) as span:
            span.set_attribute(ATTR_PIPELINE_SESSION_ID, session_id)
            span.set_attribute(ATTR_PIPELINE_QUESTION_LEN, len(question))
            span.set_attribute(ATTR_PIPELINE_HISTORY_LEN, len(state[KEY_HISTORY]))

            start = time.monotonic()
            stage: Stage | None = START
            try:
                while stage is not None:
                    await self._run_stage(stage, state)
                    stage = next_stage(stage, state)
            except Exception:
                PIPELINE_RUNS_TOTAL.labels(status="error").inc()
                raise
            finally:
                PIPELINE_DURATION_SECONDS.observe(time.monotonic() - start)

            PIPELINE_RUNS_TOTAL.labels(status="ok").inc()
            span.set_attribute(ATTR_PIPELINE_CATEGORY, state[KEY_CATEGORY])
            span.set_attribute(ATTR_PIPELINE_REFINED, KEY_REFINED_ANSWER in state)
            span.set_attribute(
                ATTR_PIPELINE_HANDOFF, state[KEY_NEEDS_HUMAN_ASSISTANCE]
            )

        logger.info(
            "Pipeline: session=%s category=%s relevance=%.2f refined=%s handoff=%s",
            session_id,
            state[KEY_CATEGORY],
            state[KEY_CONTEXT_RELEVANCE],
            KEY_REFINED_ANSWER in state,
            state[KEY_NEEDS_HUMAN_ASSISTANCE],
        )
        return state
