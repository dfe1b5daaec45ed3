"""Content classifier for free-text submissions (listing title/description).

Pure functions over two fixed tables:
  * SUSPICIOUS_KEYWORDS — substring match on the lower-cased text.
  * SPAM_PATTERNS — regex match on the text as written (the uppercase-run
    rule needs the original case).

Deterministic: the same input always yields the same reasons, in table order.
"""

import re
from dataclasses import dataclass, field

SUSPICIOUS_KEYWORDS: tuple[str, ...] = (
    "$",
    "sell",
    "money",
    "cash",
    "payment",
    "buy",
    "price",
    "cost",
    "scam",
    "fake",
    "stolen",
    "illegal",
    "drugs",
    "weapon",
)

# (label, pattern)
SPAM_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("spam phrase", re.compile(r"\b(viagra|casino|lottery|winner)\b", re.IGNORECASE)),
    ("call to action", re.compile(r"\b(click here|visit now|act now)\b", re.IGNORECASE)),
    ("get-rich phrase", re.compile(r"\b(free money|easy money|get rich)\b", re.IGNORECASE)),
    ("repeated characters", re.compile(r"(.)\1{4,}")),
    ("all caps", re.compile(r"[A-Z]{10,}")),
)


@dataclass(frozen=True)
class ContentVerdict:
    flagged: bool
    reasons: list[str] = field(default_factory=list)


def spam_pattern_hits(content: str) -> list[str]:
    """Labels of every spam pattern that matches `content`."""
    return [label for label, pattern in SPAM_PATTERNS if pattern.search(content)]


def is_spam(content: str) -> bool:
    return any(pattern.search(content) for _, pattern in SPAM_PATTERNS)


def classify_content(title: str, description: str | None) -> ContentVerdict:
    text = f"{title} {description or ''}"
    lowered = text.lower()

    reasons = [
        f"Contains suspicious keyword: {keyword}"
        for keyword in SUSPICIOUS_KEYWORDS
        if keyword in lowered
    ]
    reasons.extend(
        f"Contains spam-like patterns: {label}" for label in spam_pattern_hits(text)
    )
    return ContentVerdict(flagged=bool(reasons), reasons=reasons)
