from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, ValidationError

from difficulty_parsing import DifficultyMatch, match_difficulty
from noise_filter import NoiseFilter
from ocr_models import ExtractionResult, RawOcrPayload
from score_parsing import extract_score
from title_matching import TitleMatch, match_title, split_lines

logger = logging.getLogger("rhythm-ocr.extract")


def resolve_transcript(payload: Mapping[str, Any] | BaseModel | None) -> str | None:
    """Pull the full-text transcript out of an OCR service response.

    Accepts either ``{"textAnnotations": [...]}`` or
    ``{"responses": [{"textAnnotations": [...]}]}``; the first annotation's
    ``description`` holds the whole recognised text.

    Args:
      payload: Decoded OCR response, as a mapping or an already parsed model.

    Returns:
      The transcript, or None when it cannot be found.
    """
    if payload is None:
        logger.warning("[extract] no OCR payload given")
        return None
    try:
        if isinstance(payload, RawOcrPayload):
            parsed = payload
        elif isinstance(payload, BaseModel):
            parsed = RawOcrPayload.model_validate(payload.model_dump(by_alias=True))
        else:
            parsed = RawOcrPayload.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"[extract] unexpected OCR payload shape: {e.error_count()} error(s)")
        return None
    transcript = parsed.full_text()
    if transcript is None:
        logger.warning("[extract] could not find the full text description in the OCR payload")
    return transcript


class ResultScreenExtractor:
    """Turn one OCR transcript of a result screen into an ExtractionResult.

    Holds only the noise filter, which is immutable; the same instance can
    serve any number of concurrent calls.
    """

    def __init__(self, noise_filter: Optional[NoiseFilter] = None) -> None:
        self.noise_filter = noise_filter if noise_filter is not None else NoiseFilter()

    def extract(
        self, payload: Mapping[str, Any] | BaseModel | None, known_titles: Sequence[str] = ()
    ) -> ExtractionResult:
        """Extract song title, score and difficulty from an OCR response.

        Never raises: a step that fails is logged and its field left empty.

        Args:
          payload: OCR service response (see ``resolve_transcript``).
          known_titles: Song titles to match against; not modified.

        Returns:
          A fresh ExtractionResult, all-None when nothing could be read.
        """
        try:
            transcript = resolve_transcript(payload)
        except Exception:
            logger.exception("[extract] failed to read OCR payload")
            transcript = None
        if not transcript:
            return ExtractionResult()

        try:
            text = self.noise_filter.apply(transcript)
        except Exception:
            logger.exception("[extract] noise filtering failed, using raw transcript")
            text = transcript
        lines = split_lines(text)

        title = self._match_title(text, known_titles)
        score = self._extract_score(text)
        difficulty = self._match_difficulty(text, lines)

        return self._assemble(
            song_title=title.title if title else None,
            score=score,
            difficulty_level=difficulty.level if difficulty else None,
            difficulty_name=difficulty.name if difficulty else None,
        )

    @staticmethod
    def _assemble(**fields: Any) -> ExtractionResult:
        """Build the result, dropping whichever field group fails validation."""
        try:
            return ExtractionResult(**fields)
        except ValidationError:
            logger.exception("[extract] invalid extraction result, dropping rejected fields")
        groups = (("song_title",), ("score",), ("difficulty_level", "difficulty_name"))
        kept: dict[str, Any] = {}
        for group in groups:
            candidate = {**kept, **{name: fields[name] for name in group}}
            try:
                ExtractionResult(**candidate)
            except ValidationError:
                continue
            kept = candidate
        return ExtractionResult(**kept)

    @staticmethod
    def _match_title(text: str, known_titles: Sequence[str]) -> Optional[TitleMatch]:
        try:
            return match_title(text, tuple(known_titles or ()))
        except Exception:
            logger.exception("[extract] title matching failed")
            return None

    @staticmethod
    def _extract_score(text: str) -> Optional[int]:
        try:
            return extract_score(text)
        except Exception:
            logger.exception("[extract] score extraction failed")
            return None

    @staticmethod
    def _match_difficulty(text: str, lines: list[str]) -> Optional[DifficultyMatch]:
        try:
            return match_difficulty(text, lines)
        except Exception:
            logger.exception("[extract] difficulty extraction failed")
            return None


def extract_rhythm_game_data(
    payload: Mapping[str, Any] | BaseModel | None,
    known_titles: Sequence[str] = (),
    noise_filter: Optional[NoiseFilter] = None,
) -> ExtractionResult:
    """Extract rhythm game metrics from an OCR response in one call."""
    return ResultScreenExtractor(noise_filter).extract(payload, known_titles)
