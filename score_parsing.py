from __future__ import annotations

import logging
import re

from ocr_models import MAX_SCORE

logger = logging.getLogger("rhythm-ocr.score")

# "990;7:20" -> digit runs split by single stray separators
RE_NOISY_NUMBER = re.compile(r"[0-9]+(?:[,;:\s][0-9]+)+")
RE_PLAIN_NUMBER = re.compile(r"[0-9,]+")
RE_SCORE_SEPARATORS = re.compile(r"[,;:\s]")
RE_SCORE_DIGITS = re.compile(r"[0-9]{6,7}")


def number_like_tokens(text: str) -> list[str]:
    """Collect noisy and plain number tokens, de-duplicated in order of discovery."""
    noisy = RE_NOISY_NUMBER.findall(text)
    plain = RE_PLAIN_NUMBER.findall(text)
    return list(dict.fromkeys(noisy + plain))


def clean_score_token(token: str) -> int | None:
    """Turn a raw number token into a score when it has the shape of one.

    Separators (``,;:`` and whitespace) are removed first. A score has
    exactly 6 or 7 digits and never exceeds 1,000,000.

    Args:
      token: Raw OCR digit sequence, possibly containing separators.

    Returns:
      The integer score, or None when the token is not a plausible score.
    """
    cleaned = RE_SCORE_SEPARATORS.sub("", token)
    if not RE_SCORE_DIGITS.fullmatch(cleaned):
        return None
    value = int(cleaned)
    return value if value <= MAX_SCORE else None


def score_candidates(text: str) -> list[int]:
    candidates: list[int] = []
    for token in number_like_tokens(text):
        value = clean_score_token(token)
        if value is None:
            logger.debug(f"[score] rejected token {token!r}")
            continue
        candidates.append(value)
    return candidates


def extract_score(text: str) -> int | None:
    """Pick the score from a result-screen transcript.

    Other 6-digit numbers (dates, ids) may appear on screen; the largest valid
    candidate is taken as the score.
    """
    candidates = score_candidates(text or "")
    if not candidates:
        logger.debug("[score] no 6-7 digit candidate found")
        return None
    best = max(candidates)
    logger.debug(f"[score] candidates={candidates} -> {best}")
    return best
