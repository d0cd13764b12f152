from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Literal, Optional, Sequence

from rapidfuzz.distance import Levenshtein

logger = logging.getLogger("rhythm-ocr.title")

_HIRAGANA = r"\u3040-\u309F"
_KATAKANA = r"\u30A0-\u30FF"
_KANJI = r"\u4E00-\u9FAF"

RE_JAPANESE_CHARACTER = re.compile(f"[{_HIRAGANA}{_KATAKANA}{_KANJI}]")

# Titles this short only match exactly and with their original casing.
SHORT_TITLE_MAX_LENGTH = 3
# A line may carry this many stray characters and still count as the title itself.
STANDALONE_SLACK = 4
FUZZY_THRESHOLD_LATIN = 3
FUZZY_THRESHOLD_JAPANESE = 5

MatchKind = Literal["standalone", "embedded", "fuzzy"]

_KIND_RANK: dict[MatchKind, int] = {"standalone": 2, "embedded": 1, "fuzzy": 0}


@dataclass(frozen=True)
class TitleMatch:
    title: str
    kind: MatchKind
    distance: int = 0

    @property
    def rank(self) -> int:
        return _KIND_RANK[self.kind]


def contains_japanese(text: str) -> bool:
    """Return True if the text holds any hiragana, katakana or kanji."""
    return RE_JAPANESE_CHARACTER.search(text or "") is not None


def order_titles(titles: Sequence[str]) -> list[str]:
    """Return a new list of titles in search order.

    Japanese titles come first (the English release keeps some titles in
    Japanese, and a short Latin title could otherwise match inside one), then
    longer titles before shorter ones. The caller's sequence is left as is.

    Args:
      titles: Known song titles, in caller order.

    Returns:
      A sorted copy of ``titles``; ties keep caller order.
    """
    return sorted(titles, key=lambda title: (not contains_japanese(title), -len(title)))


def split_lines(text: str) -> list[str]:
    """Split a transcript into trimmed, non-empty lines."""
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def _exact_pattern(title: str) -> re.Pattern[str]:
    flags = 0 if len(title) <= SHORT_TITLE_MAX_LENGTH else re.IGNORECASE
    return re.compile(rf"(?:^|\s){re.escape(title)}(?:$|\s)", flags)


def is_standalone(title: str, lines: Sequence[str]) -> bool:
    """Tell whether some line is (almost) just the title.

    A line qualifies when it equals the title ignoring case, or when it contains
    the title and is at most a few characters longer (e.g. a trailing digit).
    """
    lowered_title = title.lower()
    for line in lines:
        lowered_line = line.lower()
        if lowered_line == lowered_title:
            return True
        if lowered_title in lowered_line and len(line) <= len(title) + STANDALONE_SLACK:
            return True
    return False


def _exact_matches(text: str, ordered_titles: Sequence[str], lines: Sequence[str]) -> Iterator[TitleMatch]:
    for title in ordered_titles:
        if not title or not _exact_pattern(title).search(text):
            continue
        kind: MatchKind = "standalone" if is_standalone(title, lines) else "embedded"
        logger.debug(f"[title] exact {kind} match: {title!r}")
        yield TitleMatch(title=title, kind=kind)


def find_exact_title(text: str, ordered_titles: Sequence[str], lines: Sequence[str]) -> Optional[TitleMatch]:
    """First pass: exact word-bounded match, standalone preferred over embedded.

    The search stops at the first standalone match. Otherwise the first
    embedded match found is kept.
    """
    best: Optional[TitleMatch] = None
    for match in _exact_matches(text, ordered_titles, lines):
        if best is None or match.rank > best.rank:
            best = match
        if best.kind == "standalone":
            break
    return best


def fuzzy_threshold(title: str) -> int:
    return FUZZY_THRESHOLD_JAPANESE if contains_japanese(title) else FUZZY_THRESHOLD_LATIN


def _fuzzy_candidates(ordered_titles: Sequence[str], lines: Sequence[str]) -> Iterator[TitleMatch]:
    for title in ordered_titles:
        if len(title) <= SHORT_TITLE_MAX_LENGTH:
            continue
        threshold = fuzzy_threshold(title)
        lowered_title = title.lower()
        for line in lines:
            if abs(len(line) - len(title)) > threshold:
                continue
            distance = Levenshtein.distance(line.lower(), lowered_title, score_cutoff=threshold)
            if distance <= threshold:
                logger.debug(f"[title] fuzzy candidate {title!r} ~ {line!r} (distance {distance})")
                yield TitleMatch(title=title, kind="fuzzy", distance=distance)


def find_fuzzy_title(ordered_titles: Sequence[str], lines: Sequence[str]) -> Optional[TitleMatch]:
    """Second pass: closest line/title pair within the edit-distance threshold.

    Keeps the globally smallest distance across every title and line; on a tie
    the first candidate in search order wins.
    """
    best: Optional[TitleMatch] = None
    for candidate in _fuzzy_candidates(ordered_titles, lines):
        if best is None or candidate.distance < best.distance:
            best = candidate
            if best.distance == 0:
                break
    return best


def match_title(text: str, known_titles: Sequence[str]) -> Optional[TitleMatch]:
    """Match a filtered transcript against the known song titles.

    Args:
      text: Transcript with noise phrases already removed.
      known_titles: Catalogue of titles; never modified.

    Returns:
      The best TitleMatch, or None when neither pass finds a title.
    """
    if not text or not known_titles:
        return None
    ordered_titles = order_titles(known_titles)
    lines = split_lines(text)

    exact = find_exact_title(text, ordered_titles, lines)
    if exact is not None:
        logger.info(f"[title] {exact.kind} match: {exact.title!r}")
        return exact

    fuzzy = find_fuzzy_title(ordered_titles, lines)
    if fuzzy is not None:
        logger.info(f"[title] fuzzy match: {fuzzy.title!r} (distance {fuzzy.distance})")
    else:
        logger.info("[title] no title recognised")
    return fuzzy
