from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from rapidfuzz.distance import Levenshtein

from ocr_models import DIFFICULTY_NAMES, MAX_DIFFICULTY_LEVEL, MIN_DIFFICULTY_LEVEL, DifficultyName

logger = logging.getLogger("rhythm-ocr.difficulty")

RE_DIFFICULTY_EXACT = re.compile(
    rf"({'|'.join(DIFFICULTY_NAMES)})\s*(?:score)?\s*([0-9]{{1,2}})(?![0-9A-Za-z_])",
    flags=re.IGNORECASE,
)
RE_FIRST_NUMBER = re.compile(r"[0-9]+")
RE_WORD_SPLIT = re.compile(r"\s+")

# SINGLE / DOUBLE are play styles; too short and generic to match loosely.
FUZZY_LABELS: tuple[DifficultyName, ...] = ("BEGINNER", "BASIC", "DIFFICULT", "EXPERT", "CHALLENGE")
FUZZY_LABEL_MAX_DISTANCE = 2
MAX_LEVEL_DIGITS = 2


@dataclass(frozen=True)
class DifficultyMatch:
    name: DifficultyName
    level: int
    fuzzy: bool = False


def is_valid_level(level: int) -> bool:
    return MIN_DIFFICULTY_LEVEL <= level <= MAX_DIFFICULTY_LEVEL


def parse_level(digits: str) -> Optional[int]:
    """Read a level from a digit run; more than two significant digits is out of range."""
    digits = digits.lstrip("0") or "0"
    if len(digits) > MAX_LEVEL_DIGITS:
        return None
    level = int(digits)
    return level if is_valid_level(level) else None


def find_exact_difficulty(text: str) -> Optional[DifficultyMatch]:
    """Find the first "<LABEL> [score] <level>" occurrence in the transcript.

    Only the first occurrence is considered; an out-of-range level there means
    no exact result at all. Labels are plain ASCII, so a look-alike such as
    "SİNGLE" is not an occurrence.
    """
    for match in RE_DIFFICULTY_EXACT.finditer(text):
        label = match.group(1)
        if not label.isascii():
            logger.debug(f"[difficulty] skipped non-ASCII label {label!r}")
            continue
        level = parse_level(match.group(2))
        if level is None:
            logger.debug(f"[difficulty] exact match {match.group(0)!r} rejected: level out of range")
            return None
        return DifficultyMatch(name=label.upper(), level=level)  # type: ignore[arg-type]
    logger.debug("[difficulty] no exact label match")
    return None


def _level_near(words: Sequence[str], word_index: int, next_line: Optional[str]) -> Optional[str]:
    rest_of_line = " ".join(words[word_index + 1 :])
    number = RE_FIRST_NUMBER.search(rest_of_line)
    if number is None and next_line is not None:
        number = RE_FIRST_NUMBER.match(next_line)
    return number.group(0) if number else None


def _fuzzy_label_hits(lines: Sequence[str]) -> Iterator[tuple[DifficultyName, Optional[str], str]]:
    for line_index, line in enumerate(lines):
        words = RE_WORD_SPLIT.split(line)
        next_line = lines[line_index + 1] if line_index + 1 < len(lines) else None
        for word_index, word in enumerate(words):
            upper_word = word.upper()
            for label in FUZZY_LABELS:
                if abs(len(word) - len(label)) > FUZZY_LABEL_MAX_DISTANCE:
                    continue
                distance = Levenshtein.distance(upper_word, label, score_cutoff=FUZZY_LABEL_MAX_DISTANCE)
                if distance <= FUZZY_LABEL_MAX_DISTANCE:
                    yield label, _level_near(words, word_index, next_line), word


def find_fuzzy_difficulty(lines: Sequence[str]) -> Optional[DifficultyMatch]:
    """Look for a misread difficulty label with a level beside it.

    Each line is split into words and every word is compared with the five
    difficulty labels. For a close enough word the level is taken from the
    first number later on the same line, or else from a number opening the
    next line. The first hit with a level in range wins.

    Args:
      lines: Trimmed, non-empty transcript lines.

    Returns:
      The first accepted DifficultyMatch, or None.
    """
    for label, digits, word in _fuzzy_label_hits(lines):
        if digits is None:
            logger.debug(f"[difficulty] fuzzy {word!r} ~ {label}: no level nearby")
            continue
        level = parse_level(digits)
        if level is None:
            logger.debug(f"[difficulty] fuzzy {word!r} ~ {label}: level {digits[:8]} out of range")
            continue
        return DifficultyMatch(name=label, level=level, fuzzy=True)
    return None


def match_difficulty(text: str, lines: Sequence[str]) -> Optional[DifficultyMatch]:
    if not text:
        return None
    found = find_exact_difficulty(text) or find_fuzzy_difficulty(lines)
    if found is None:
        logger.info("[difficulty] no difficulty recognised")
    else:
        logger.info(f"[difficulty] {'fuzzy' if found.fuzzy else 'exact'} match: {found.name} {found.level}")
    return found
