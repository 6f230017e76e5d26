"""
Theme Detection

Keyword themes found in a check-in transcript. Themes steer the
AI prompt, the template body, and the suggestion pools.
"""

import re


def _pattern(*words: str) -> re.Pattern:
    alternatives = "|".join(re.escape(w) for w in words)
    return re.compile(rf"\b(?:{alternatives})(?:s|es|ed|ing)?\b", re.IGNORECASE)


# Ordered: earlier themes win when suggestion slots run out
THEME_PATTERNS: dict[str, re.Pattern] = {
    "work": _pattern(
        "work", "job", "career", "boss", "meeting", "deadline", "project",
        "office", "colleague", "interview", "promotion", "workplace",
    ),
    "anxiety": _pattern("anxious", "anxiety", "worried", "worry", "nervous", "panic", "on edge"),
    "stress": _pattern("stress", "stressful", "pressure", "overwhelm", "too much", "burnout", "burned out"),
    "sadness": _pattern("sad", "depressed", "down", "empty", "cry", "crying", "grief", "heartbroken"),
    "relationships": _pattern(
        "friend", "family", "partner", "relationship", "marriage", "dating",
        "mom", "dad", "mother", "father", "sister", "brother",
    ),
    "isolation": _pattern("alone", "lonely", "isolated", "nobody", "disconnected", "left out"),
    "health": _pattern("health", "sick", "tired", "exhausted", "sleep", "energy", "exercise"),
    "gratitude": _pattern("thank", "grateful", "appreciate", "blessed", "thankful", "lucky"),
    "growth": _pattern("improve", "grow", "learn", "skill", "habit", "goal", "progress"),
}


def detect_themes(text: str) -> list[str]:
    """
    Themes present in text, in THEME_PATTERNS order.

    Args:
        text: Transcript to scan

    Returns:
        Matched theme names
    """
    return [name for name, pattern in THEME_PATTERNS.items() if pattern.search(text)]
