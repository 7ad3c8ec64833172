"""Prometheus metrics for the RAG pipeline.

All metrics use the ``ragdesk_`` prefix.
"""

from prometheus_client import Counter, Histogram

PIPELINE_RUNS_TOTAL = Counter(
    "ragdesk_pipeline_runs_total",
    "Pipeline invocations, by outcome",
    ["status"],  # "ok" | "error"
)

PIPELINE_DURATION_SECONDS = Histogram(
    "ragdesk_pipeline_duration_seconds",
    "End-to-end duration of a pipeline invocation",
    buckets=(0.25, 0.5, 1, 2, 5, 10, 15, 25, 60),
)

PIPELINE_STAGE_SECONDS = Histogram(
    "ragdesk_pipeline_stage_seconds",
    "Duration of each pipeline stage",
    ["stage"],
    buckets=(0.001, 0.01, 0.05, 0.1, 0.5, 1, 2, 5, 10),
)

QUESTIONS_BY_CATEGORY_TOTAL = Counter(
    "ragdesk_questions_by_category_total",
    "Questions routed to each category",
    ["category"],
)

RETRIEVAL_FAILURES_TOTAL = Counter(
    "ragdesk_retrieval_failures_total",
    "Vector store queries that raised and were replaced by empty results",
)

RETRIEVAL_CHUNKS_SELECTED = Histogram(
    "ragdesk_retrieval_chunks_selected",
    "Chunks kept as generator context per question",
    buckets=(0, 1, 2, 3, 4, 8),
)

CLARIFICATIONS_TOTAL = Counter(
    "ragdesk_clarifications_total",
    "Questions answered with a clarification request",
)

REFINEMENTS_TOTAL = Counter(
    "ragdesk_refinements_total",
    "Draft answers sent back to the LLM for refinement",
)

HANDOFFS_TOTAL = Counter(
    "ragdesk_handoffs_total",
    "Answers replaced by a human handoff message",
)
