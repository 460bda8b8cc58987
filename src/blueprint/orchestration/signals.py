"""Lightweight heuristics for reading a single utterance.

Every function here is pure and works on raw text, so each can be tested
without a machine or a session. Phrases match on word boundaries:
"ok" matches "ok, next" but not "book".
"""

from __future__ import annotations

import re
from collections.abc import Iterable

# --- Phrase lists ---

PROGRESS_PHRASES: tuple[str, ...] = (
    "sounds good",
    "let's continue",
    "continue",
    "what's next",
    "next step",
    "next",
    "i'm ready",
    "ready",
    "that works",
    "let's move on",
    "move on",
    "let's go",
    "proceed",
    "keep going",
    "done",
    "yes, let's",
)

AFFIRMATION_PHRASES: tuple[str, ...] = (
    "yes",
    "yep",
    "yeah",
    "sure",
    "ok",
    "okay",
    "good",
    "great",
    "perfect",
    "confirmed",
    "correct",
    "exactly",
    "looks good",
    "sounds good",
    "that works",
    "i like that",
    "that's it",
    "love it",
)

CONFUSION_PHRASES: tuple[str, ...] = (
    "not sure",
    "don't understand",
    "confused",
    "what do you mean",
    "can you explain",
    "help me",
    "i don't know",
    "unclear",
    "lost",
)

REFINEMENT_PHRASES: tuple[str, ...] = (
    "wait",
    "actually",
    "hmm",
    "let me",
    "change",
    "different",
    "revise",
    "edit",
    "modify",
    "adjust",
    "refine",
    "improve",
    "not quite",
    "almost",
    "close but",
    "no",
    "nope",
    "no thanks",
)

QUESTION_WORDS = re.compile(r"\b(how|why|what|when|where|which|who|to what extent)\b", re.I)
CLOSED_QUESTION_START = re.compile(r"^(is|are|do|does|did|can|could|will|would|should|has|have)\b", re.I)
ACTION_VERBS = re.compile(
    r"\b(create|design|solve|build|develop|improve|make|plan|propose|produce|launch|present)\b",
    re.I,
)

# Keywords that mark text as journey or deliverables content
JOURNEY_KEYWORDS: tuple[str, ...] = (
    "research",
    "analyze",
    "investigate",
    "explore",
    "brainstorm",
    "prototype",
    "create",
    "design",
    "build",
    "test",
    "evaluate",
    "reflect",
    "launch",
    "interview",
    "survey",
    "phase",
    "week",
    "timeline",
    "video",
    "book",
    "article",
    "expert",
    "museum",
    "tool",
)

DELIVERABLES_KEYWORDS: tuple[str, ...] = (
    "presentation",
    "portfolio",
    "prototype",
    "report",
    "assessment",
    "rubric",
    "criteria",
    "criterion",
    "showcase",
    "exhibition",
    "milestone",
    "checkpoint",
    "week",
    "audience",
    "community",
    "share",
    "publish",
)

# Numbered or bulleted line, "Name:" grouping, or a "Week N" prefix
STRUCTURE_PATTERN = re.compile(
    r"(^|\n)\s*(\d{1,3}[.)]|[-*•])\s+|^[^\n:]{1,60}:\s*\S|\bweek\s*\d", re.I | re.M
)

TOKEN_PATTERN = re.compile(r"[\w']+")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Progress and affirmation phrases only count in short replies
SHORT_REPLY_TOKENS = 10
MIN_CONTENT_TOKENS = 4
MIN_BIG_IDEA_TOKENS = 3
MIN_CHALLENGE_TOKENS = 5


def normalize(text: str) -> str:
    """Lower-case, straighten apostrophes and collapse whitespace."""
    text = text.replace("’", "'").replace("‘", "'")
    return WHITESPACE_PATTERN.sub(" ", text).strip().casefold()


def count_tokens(text: str) -> int:
    """Number of word tokens in ``text``."""
    return len(TOKEN_PATTERN.findall(text))


def _phrase_pattern(phrases: Iterable[str]) -> re.Pattern[str]:
    ordered = sorted(phrases, key=len, reverse=True)
    alternatives = "|".join(re.escape(phrase) for phrase in ordered)
    return re.compile(rf"(?<![\w'])(?:{alternatives})(?![\w'])")


_PROGRESS = _phrase_pattern(PROGRESS_PHRASES)
_AFFIRMATION = _phrase_pattern(AFFIRMATION_PHRASES)
_CONFUSION = _phrase_pattern(CONFUSION_PHRASES)
_REFINEMENT = _phrase_pattern(REFINEMENT_PHRASES)


def contains_phrase(text: str, phrases: Iterable[str]) -> bool:
    """True when any phrase occurs in ``text`` on word boundaries."""
    return bool(_phrase_pattern(phrases).search(normalize(text)))


def is_progress_signal(text: str) -> bool:
    """A short "let's continue" style reply."""
    normalized = normalize(text)
    if count_tokens(normalized) > SHORT_REPLY_TOKENS:
        return False
    return bool(_PROGRESS.search(normalized))


def is_affirmation(text: str) -> bool:
    """A short yes-like reply to a confirmation prompt."""
    normalized = normalize(text)
    if count_tokens(normalized) > SHORT_REPLY_TOKENS:
        return False
    if _REFINEMENT.match(normalized) or _CONFUSION.search(normalized):
        return False
    return bool(_AFFIRMATION.search(normalized))


def is_bare_progress(text: str, keywords: Iterable[str] | None = None) -> bool:
    """A "continue" or "yes" reply that carries no content of its own.

    Structured text never counts. Neither does text that still has a few
    words once the signal phrases are removed, unless ``keywords`` are given
    and the text falls short of ``has_sufficient_content`` for them.
    """
    if not (is_progress_signal(text) or is_affirmation(text)):
        return False
    if has_structure(text):
        return False
    normalized = normalize(text)
    remainder = _AFFIRMATION.sub(" ", _PROGRESS.sub(" ", normalized))
    if count_tokens(remainder) < MIN_BIG_IDEA_TOKENS:
        return True
    return keywords is not None and not has_sufficient_content(text, keywords)


def is_confusion_signal(text: str) -> bool:
    return bool(_CONFUSION.search(normalize(text)))


def is_refinement_signal(text: str) -> bool:
    """The user wants to change a candidate value.

    Long replies only count when they open with a refinement phrase, so
    content such as "climate change" is not mistaken for a request.
    """
    normalized = normalize(text)
    if _REFINEMENT.match(normalized):
        return True
    return count_tokens(normalized) <= 6 and bool(_REFINEMENT.search(normalized))


def has_structure(text: str) -> bool:
    """True for list markers, ``Name: items`` groupings or ``Week N`` labels."""
    return bool(STRUCTURE_PATTERN.search(text))


def has_sufficient_content(
    text: str,
    keywords: Iterable[str] = JOURNEY_KEYWORDS,
    min_tokens: int = MIN_CONTENT_TOKENS,
) -> bool:
    """Enough explicit content to commit without asking first.

    Requires ``min_tokens`` words and either a domain keyword or some
    structure the extractors can use.
    """
    if count_tokens(text) < min_tokens:
        return False
    return contains_phrase(text, keywords) or has_structure(text)


def looks_like_question(text: str) -> bool:
    stripped = text.strip()
    return "?" in stripped or bool(QUESTION_WORDS.search(stripped))


def is_open_ended(text: str) -> bool:
    """Questions that cannot be answered with yes or no."""
    return looks_like_question(text) and not CLOSED_QUESTION_START.match(text.strip())


def looks_like_big_idea(text: str) -> bool:
    """A statement (not a question) of a few words or more."""
    stripped = text.strip()
    return count_tokens(stripped) >= MIN_BIG_IDEA_TOKENS and "?" not in stripped


def looks_like_challenge(text: str) -> bool:
    """A task with an action verb and enough detail to act on."""
    return count_tokens(text) >= MIN_CHALLENGE_TOKENS and bool(ACTION_VERBS.search(text))
