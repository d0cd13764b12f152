"""Shared fixtures for the extraction tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest


def vision_payload(text: str) -> dict[str, Any]:
    """Build a bare annotate response the way the OCR service returns it."""
    return {
        "textAnnotations": [
            {"locale": "en", "description": text},
            {"description": text.split()[0] if text.split() else ""},
        ]
    }


@pytest.fixture
def make_payload() -> Callable[[str], dict[str, Any]]:
    return vision_payload


@pytest.fixture
def result_screen_text() -> str:
    return "DANCE AROUND\n990720\nEXPERT 16"
