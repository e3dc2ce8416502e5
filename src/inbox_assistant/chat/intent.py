from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

CONTEXT_MISSING_REPLY = "Please select an email from your inbox first so I can help you with that."

# A draft request always needs an email; "summarize"/"summary" need one too
# but must not trigger the Subject: format contract.
DRAFT_KEYWORDS = ("draft", "reply", "write an email", "compose")
CONTEXT_KEYWORDS = DRAFT_KEYWORDS + ("summarize", "summary")


@dataclass(frozen=True)
class Intent:
    context_dependent: bool
    draft_requested: bool


def contains_any(text: str | None, needles: Sequence[str]) -> bool:
    """True if any needle is a substring of text (case-insensitive)."""
    t = (text or "").lower()
    return any(n.lower() in t for n in needles)


def classify_intent(utterance: str) -> Intent:
    return Intent(
        context_dependent=contains_any(utterance, CONTEXT_KEYWORDS),
        draft_requested=contains_any(utterance, DRAFT_KEYWORDS),
    )
