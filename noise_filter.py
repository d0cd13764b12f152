from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

logger = logging.getLogger("rhythm-ocr.noise")


def load_ignore_phrases(path: Path | str) -> tuple[str, ...]:
    """Read the noise-phrase file, one phrase per line.

    Lines are trimmed and blank lines dropped. A missing file is not an error.
    An unreadable one is logged and treated as empty so the filter degrades to
    a no-op instead of taking the service down.

    Args:
      path: Location of the plain-text phrase file (UTF-8).

    Returns:
      The phrases in file order.
    """
    phrase_file = Path(path)
    if not phrase_file.exists():
        logger.info(f"[noise] no ignore-phrase file at {phrase_file}, filtering disabled")
        return ()
    try:
        content = phrase_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"[noise] failed to load {phrase_file}: {e}")
        return ()
    phrases = tuple(line.strip() for line in content.splitlines() if line.strip())
    logger.info(f"[noise] loaded {len(phrases)} ignore phrases from {phrase_file}")
    return phrases


class NoiseFilter:
    """Replace known OCR garbage phrases with a single space.

    Phrases are literal text matched case-insensitively. The filter is built
    once and only read afterwards, so one instance can serve concurrent calls.
    """

    def __init__(self, phrases: Iterable[str] = ()) -> None:
        self._phrases: tuple[str, ...] = tuple(p for p in phrases if p)
        self._patterns: tuple[re.Pattern[str], ...] = tuple(
            re.compile(re.escape(phrase), flags=re.IGNORECASE) for phrase in self._phrases
        )

    @classmethod
    def from_file(cls, path: Path | str) -> NoiseFilter:
        return cls(load_ignore_phrases(path))

    @property
    def phrases(self) -> tuple[str, ...]:
        return self._phrases

    def __len__(self) -> int:
        return len(self._phrases)

    def apply(self, text: str) -> str:
        """Return ``text`` with every ignore phrase replaced by a space."""
        for pattern in self._patterns:
            text = pattern.sub(" ", text)
        return text
