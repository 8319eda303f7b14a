from __future__ import annotations

from typing import Tuple

from callcore.records import Outcome
from callcore.timeparse import is_blank

ANSWERED_TOKENS: Tuple[str, ...] = ("atend", "answer", "closed", "resolv", "finaliz")


def normalize_status(raw: object) -> Outcome:
    """Map a free-text call outcome onto one of the three canonical outcomes.

    A missing status counts as abandoned while an unrecognized one counts as
    answered. Historical abandonment rates depend on this asymmetry.
    """
    if is_blank(raw):
        return Outcome.ABANDONED
    text = str(raw).strip().lower()
    if "abandon" in text:
        return Outcome.ABANDONED
    if "transfer" in text:
        return Outcome.TRANSFERRED
    if any(token in text for token in ANSWERED_TOKENS):
        return Outcome.ANSWERED
    return Outcome.ANSWERED
