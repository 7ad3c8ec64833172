"""Lexical heuristics that drive the pipeline's branching decisions.

Everything here is pure and deterministic: keyword extraction, context
relevance, answer quality and the human-assistance check.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import DocumentChunk

# ---------------------------------------------------------------------------
# Word lists
# ---------------------------------------------------------------------------

# Dropped when scoring context relevance (words must also be > 2 chars).
RELEVANCE_STOPWORDS = frozenset(
    {"a", "an", "the", "in", "on", "at", "to", "for", "with", "about"}
)

# Dropped when extracting key terms (words must also be > 3 chars).
KEY_TERM_STOPWORDS = frozenset(
    {
        "what", "where", "when", "which", "who", "how", "why",
        "about", "tell", "give", "does", "mean", "information",
    }
)

UNCERTAINTY_PHRASES = (
    "i don't know",
    "i'm not sure",
    "i don't have enough information",
    "i can't answer",
    "cannot provide",
    "don't have specific",
    "unable to provide",
    "don't have information",
)

COMPLEX_REQUEST_INDICATORS = (
    "quote",
    "pricing",
    "custom",
    "contact",
    "representative",
    "discount",
    "negotiate",
    "specific offer",
    "personal",
    "account",
)

COMMON_GREETINGS = (
    "hello", "hi", "hey", "greetings", "good morning",
    "good afternoon", "good evening", "howdy",
    "how are you", "how's it going", "what's up",
    "nice to meet you", "pleasure to meet you",
    "thanks", "thank you", "appreciate it",
)

SIMPLE_QUESTION_PATTERNS = (
    "who are you", "what can you do", "what is your name",
    "your purpose", "how do you work", "help me with",
    "tell me about", "explain", "what are you",
    "how can you help",
)

_WORD_SPLIT = re.compile(r"\W+")
_GREETING_RES = tuple(
    re.compile(r"\b" + re.escape(greeting) + r"\b") for greeting in COMMON_GREETINGS
)

MIN_KEY_TERM_LENGTH = 4
MIN_KEYWORD_LENGTH = 3
SHORT_INPUT_MAX_WORDS = 2
SHORT_INPUT_MAX_CHARS = 15
MIN_HANDOFF_QUESTION_WORDS = 3
ELLIPSIS = "..."


# ---------------------------------------------------------------------------
# Tokenising
# ---------------------------------------------------------------------------


def split_words(text: str) -> list[str]:
    """Lower-case ``text`` and split on non-word characters."""
    return [w for w in _WORD_SPLIT.split(text.lower()) if w]


def extract_key_terms(question: str) -> list[str]:
    """Words longer than 3 characters that are not question/filler words."""
    return [
        w
        for w in split_words(question)
        if len(w) >= MIN_KEY_TERM_LENGTH and w not in KEY_TERM_STOPWORDS
    ]


def question_keywords(question: str) -> list[str]:
    """Distinct words longer than 2 characters, first-seen order."""
    seen: dict[str, None] = {}
    for w in split_words(question):
        if len(w) >= MIN_KEYWORD_LENGTH and w not in RELEVANCE_STOPWORDS:
            seen.setdefault(w, None)
    return list(seen)


def count_whole_word(term: str, text: str) -> int:
    """Occurrences of ``term`` as a whole word in ``text`` (case-insensitive)."""
    return len(re.findall(r"\b" + re.escape(term.lower()) + r"\b", text.lower()))


def word_count(text: str) -> int:
    return len(text.split())


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


def keyword_coverage(question: str, text: str) -> float:
    """Fraction of the question's keywords found as substrings of ``text``."""
    keywords = question_keywords(question)
    if not keywords:
        return 0.0
    lowered = text.lower()
    return sum(1 for w in keywords if w in lowered) / len(keywords)


def evaluate_context_relevance(
    context: Sequence["DocumentChunk"], question: str
) -> float:
    """Average keyword coverage over ``context``; 0 for an empty context."""
    if not context:
        return 0.0
    scores = [keyword_coverage(question, chunk.text) for chunk in context]
    return sum(scores) / len(scores)


# ---------------------------------------------------------------------------
# Answer and question checks
# ---------------------------------------------------------------------------


def contains_any(text: str, phrases: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in phrases)


def has_uncertainty(answer: str) -> bool:
    return contains_any(answer, UNCERTAINTY_PHRASES)


def is_complex_request(question: str) -> bool:
    return contains_any(question, COMPLEX_REQUEST_INDICATORS)


def addresses_question(answer: str, question: str) -> bool:
    lowered = answer.lower()
    return any(term in lowered for term in extract_key_terms(question))


def validate_answer_quality(
    answer: str, question: str, *, min_words: int = 20
) -> bool:
    """True when the answer is long enough, on topic and not uncertain."""
    return (
        word_count(answer) >= min_words
        and addresses_question(answer, question)
        and not has_uncertainty(answer)
    )


def is_greeting_or_casual(text: str) -> bool:
    """Greetings, questions about the assistant, and very short inputs.

    Greetings match as whole words so "hi" does not fire on "shipping".
    """
    normalized = text.lower().strip()
    if any(pattern.search(normalized) for pattern in _GREETING_RES):
        return True
    if any(pattern in normalized for pattern in SIMPLE_QUESTION_PATTERNS):
        return True
    return (
        len(normalized.split()) <= SHORT_INPUT_MAX_WORDS
        and len(normalized) < SHORT_INPUT_MAX_CHARS
    )


def needs_human_help(
    question: str,
    context: Sequence["DocumentChunk"],
    answer: str,
    *,
    relevance_threshold: float = 0.3,
) -> bool:
    """Decide whether a specialist should take over the conversation.

    Greetings and very short questions never escalate. Otherwise escalation
    requires weak context *and* either an uncertain answer or a request that
    only a person can fulfil (pricing, accounts, ...).
    """
    if is_greeting_or_casual(question):
        return False
    if word_count(question) < MIN_HANDOFF_QUESTION_WORDS:
        return False

    relevance = evaluate_context_relevance(context, question)
    if relevance >= relevance_threshold:
        return False
    return has_uncertainty(answer) or is_complex_request(question)


def summarize_question(question: str, max_chars: int = 50) -> str:
    """Truncate ``question`` to at most ``max_chars`` characters, marking the cut."""
    if len(question) > max_chars:
        return question[: max_chars - len(ELLIPSIS)] + ELLIPSIS
    return question
