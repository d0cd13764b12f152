from __future__ import annotations

from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

DifficultyName = Literal["BEGINNER", "BASIC", "DIFFICULT", "EXPERT", "CHALLENGE", "SINGLE", "DOUBLE"]

DIFFICULTY_NAMES: tuple[DifficultyName, ...] = get_args(DifficultyName)

MIN_DIFFICULTY_LEVEL = 1
MAX_DIFFICULTY_LEVEL = 20
MAX_SCORE = 1_000_000


def to_camel(s: str) -> str:
    """Convert a string to camel case."""
    parts = s.split("_")
    return parts[0] + "".join(p.title() for p in parts[1:])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------- OCR service response (Cloud Vision shaped) --------
class TextAnnotation(CamelModel):
    description: Optional[str] = None


class AnnotateImageResponse(CamelModel):
    text_annotations: Optional[list[TextAnnotation]] = None


class RawOcrPayload(CamelModel):
    """Either a bare annotate response or a batch envelope around one.

    Unknown keys (bounding polygons, locale, full text pages...) are ignored.
    """

    text_annotations: Optional[list[TextAnnotation]] = None
    responses: Optional[list[AnnotateImageResponse]] = None

    def full_text(self) -> str | None:
        """Return the full-text transcript held by the first annotation.

        When the payload is wrapped in ``responses`` the first response is
        used, even if ``textAnnotations`` also appears at the top level.

        Returns:
          The transcript, or None when the expected shape is absent or the first
          annotation carries no text.
        """
        if self.responses is not None:
            if not self.responses:
                return None
            annotations = self.responses[0].text_annotations
        else:
            annotations = self.text_annotations
        if not annotations:
            return None
        return annotations[0].description or None


# -------- Extraction output --------
class ExtractionResult(BaseModel):
    """Structured facts recovered from one result-screen transcript.

    Serialised with the display keys used by the score submission form, with
    the difficulty level rendered as text.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    song_title: Optional[str] = Field(default=None, alias="Song Title")
    score: Optional[int] = Field(default=None, alias="Score", ge=0, le=MAX_SCORE)
    difficulty_level: Optional[int] = Field(
        default=None, alias="Difficulty Level", ge=MIN_DIFFICULTY_LEVEL, le=MAX_DIFFICULTY_LEVEL
    )
    difficulty_name: Optional[DifficultyName] = Field(default=None, alias="Difficulty Name")

    @model_validator(mode="after")
    def _level_and_name_together(self) -> ExtractionResult:
        if (self.difficulty_level is None) != (self.difficulty_name is None):
            raise ValueError("difficulty level and difficulty name must be set together")
        return self

    @field_serializer("difficulty_level")
    def _level_as_text(self, level: Optional[int]) -> Optional[str]:
        return None if level is None else str(level)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# -------- HTTP request --------
class ExtractRequest(CamelModel):
    ocr_response: dict[str, Any]
    known_titles: list[str] = Field(default_factory=list)
