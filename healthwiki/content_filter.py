"""
Content filtering for the health wiki proxy.

Classifies a raw prompt before any remote call is made: greetings are
answered directly, conversational filler is stripped to get a search term,
and terms that look like politics, entertainment or geography are refused.
"""

import re
from dataclasses import dataclass
from enum import Enum

GREETING_MESSAGE = (
    "Hello there! I'm here to provide Wikipedia information on **health and medical topics** only. "
    "How can I help you find a medical fact today?"
)

# Greeting openers, anchored at the start of the prompt
GREETING_PATTERN = re.compile(
    r"^(hi|hello|hey|greetings|hallo|what's up|how are you|how is it going)\b",
    re.IGNORECASE,
)

# Conversational filler; only the first match is removed
FILLER_PATTERN = re.compile(
    r"^(i have a|i feel|what is|tell me about|what are|the benefits of|i want to know about)\s+",
    re.IGNORECASE,
)

# Matched as substrings, so "art" also rejects "heart attack". Known and accepted.
NON_MEDICAL_KEYWORDS = [
    # People and institutions
    "queen", "king", "president", "celebrity", "actor", "actress", "singer", "artist",
    # Places
    "country", "city", "village", "place",
    # Culture and entertainment
    "novel", "movie", "song", "album", "book", "art", "sports",
    # Everything else
    "history", "politics", "religion", "weather", "car",
]

MIN_SCREENED_LENGTH = 3

_NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


class Disposition(str, Enum):
    GREETING = "greeting"
    OUT_OF_SCOPE = "out_of_scope"
    CANDIDATE = "candidate"


@dataclass(frozen=True)
class Classification:
    """Outcome of screening a prompt. `term` is empty for greetings."""

    disposition: Disposition
    term: str = ""


def is_greeting(prompt: str) -> bool:
    """
    Check whether the prompt opens with a greeting.

    Args:
        prompt (str): Raw user text

    Returns:
        bool: True if the trimmed prompt starts with a known greeting
    """
    if not prompt or not isinstance(prompt, str):
        return False
    return GREETING_PATTERN.match(prompt.strip()) is not None


def clean_medical_prompt(prompt: str) -> str:
    """
    Strip one leading conversational phrase to get a precise search term.

    E.g. "I have a fever" -> "fever". Text with no known filler comes back
    trimmed but otherwise unchanged.

    Args:
        prompt (str): Raw user text

    Returns:
        str: The search term
    """
    cleaned = prompt.strip()
    cleaned = FILLER_PATTERN.sub("", cleaned, count=1)
    return cleaned.strip()


def _is_numeric(term: str) -> bool:
    return _NUMERIC_PATTERN.match(term.strip()) is not None


def is_likely_non_medical(search_term: str) -> bool:
    """
    Determine if the search term is likely non-medical.

    Short and purely numeric terms always pass so that clinical terms such
    as "flu" are never refused.

    Args:
        search_term (str): Normalized search term

    Returns:
        bool: True if the term contains a non-medical keyword
    """
    lower_term = search_term.lower()

    if len(lower_term) < MIN_SCREENED_LENGTH or _is_numeric(lower_term):
        return False

    for keyword in NON_MEDICAL_KEYWORDS:
        if keyword in lower_term:
            return True

    return False


def get_out_of_scope_message(term: str) -> str:
    return (
        "I apologize, but my function is strictly limited to **health and medical topics**. "
        f'I cannot search for information about "{term}". Please try a health-related question instead.'
    )


def classify(prompt: str) -> Classification:
    """
    Screen a prompt before it reaches the search backend.

    Args:
        prompt (str): Raw user text

    Returns:
        Classification: GREETING, OUT_OF_SCOPE with the term, or CANDIDATE with the term
    """
    if is_greeting(prompt):
        return Classification(Disposition.GREETING)

    term = clean_medical_prompt(prompt)
    if is_likely_non_medical(term):
        return Classification(Disposition.OUT_OF_SCOPE, term)

    return Classification(Disposition.CANDIDATE, term)
