from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Request

from extraction import ResultScreenExtractor
from noise_filter import NoiseFilter
from ocr_models import ExtractionResult, ExtractRequest

# --- Service configuration (environment) ---
IGNORE_PHRASES_PATH = Path(
    os.environ.get("RHYTHM_OCR_IGNORE_PHRASES", str(Path(__file__).with_name("machine_text.txt")))
)
LOG_LEVEL = os.environ.get("RHYTHM_OCR_LOG_LEVEL", "INFO").upper()
HOST = os.environ.get("RHYTHM_OCR_HOST", "0.0.0.0")
PORT = int(os.environ.get("RHYTHM_OCR_PORT", "8000"))
WORKERS = int(os.environ.get("RHYTHM_OCR_WORKERS", "4"))


logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("rhythm-ocr")


def build_extractor(ignore_phrases_path: Path = IGNORE_PHRASES_PATH) -> ResultScreenExtractor:
    """Load the ignore-phrase list and build the shared extractor.

    Called once per process. The phrase list is read-only afterwards, so the
    extractor is shared by every request without locking.

    Args:
      ignore_phrases_path: Plain-text file with one noise phrase per line.

    Returns:
      A ResultScreenExtractor holding the loaded NoiseFilter.
    """
    noise_filter = NoiseFilter.from_file(ignore_phrases_path)
    logger.info(f"[config] noise filter ready with {len(noise_filter)} phrases ({ignore_phrases_path})")
    return ResultScreenExtractor(noise_filter)


@asynccontextmanager
async def load_configuration_on_startup(app: FastAPI) -> AsyncIterator:
    """FastAPI startup hook that loads the ignore-phrase list.

    Notes:
      - With several workers each process loads its own copy.
    """
    app.state.extractor = build_extractor()
    yield


app = FastAPI(title="Rhythm Game Result OCR", lifespan=load_configuration_on_startup)


def get_extractor(request: Request) -> ResultScreenExtractor:
    extractor = getattr(request.app.state, "extractor", None)
    if extractor is None:
        raise HTTPException(status_code=503, detail="extractor not ready yet")
    return extractor


@app.get("/ping")
def ping(request: Request) -> dict:
    """Liveness endpoint that reports how many noise phrases are loaded."""
    extractor = getattr(request.app.state, "extractor", None)
    phrases = len(extractor.noise_filter) if extractor is not None else 0
    return {"ok": True, "ignorePhrases": phrases}


@app.post("/extract", response_model=ExtractionResult)
def extract_result_screen(payload: ExtractRequest, request: Request) -> ExtractionResult:
    """Extract song title, score and difficulty from an OCR response.

    Args:
      payload: The OCR service response plus the titles to match against.

    Returns:
      The extraction result keyed "Song Title", "Score", "Difficulty Level"
      and "Difficulty Name"; fields that could not be read are null.

    Raises:
      HTTPException: 503 if the extractor was not initialised.
    """
    extractor = get_extractor(request)
    return extractor.extract(payload.ocr_response, payload.known_titles)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=HOST, port=PORT, workers=WORKERS)
