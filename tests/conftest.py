from __future__ import annotations

import pytest

from translation_styles.models import CustomTranslationStyle, TranslationPair, new_id
from translation_styles.store import InMemoryRepository, StyleStore


def make_pair(
    source_text: str,
    target_text: str,
    confidence: float = 1.0,
    source_file: str | None = None,
    target_file: str | None = None,
) -> TranslationPair:
    return TranslationPair(
        id=new_id("pair"),
        source_text=source_text,
        target_text=target_text,
        source_language="en",
        target_language="es",
        confidence=confidence,
        source_file=source_file,
        target_file=target_file,
    )


def make_style(name: str = "Style", source_language: str = "en", target_language: str = "es", **kwargs) -> CustomTranslationStyle:
    return CustomTranslationStyle(
        id=new_id("style"),
        name=name,
        source_language=source_language,
        target_language=target_language,
        **kwargs,
    )


@pytest.fixture
def store() -> StyleStore:
    return StyleStore(InMemoryRepository())
