from __future__ import annotations

from typing import Sequence

from .aligner import PhraseAlignment
from .models import TranslationPair, new_id, normalize_text, utc_now


def create_translation_pairs(
    alignments: Sequence[PhraseAlignment],
    source_language: str,
    target_language: str,
) -> list[TranslationPair]:
    """One pair per alignment, in alignment order. Duplicates are kept."""
    now = utc_now()
    return [
        TranslationPair(
            id=new_id("pair"),
            source_text=alignment.source_phrase,
            target_text=alignment.target_phrase,
            source_language=source_language,
            target_language=target_language,
            context=alignment.context,
            confidence=alignment.confidence,
            frequency=1,
            source_file=alignment.source_file,
            target_file=alignment.target_file,
            created_at=now,
            updated_at=now,
        )
        for alignment in alignments
    ]


def merge_duplicate_pairs(pairs: Sequence[TranslationPair]) -> list[TranslationPair]:
    """
    Collapse pairs sharing the same normalized source and target.

    The first-seen pair survives and keeps its text, id and provenance; its
    frequency becomes the sum of the group and its confidence the
    frequency-weighted mean.
    """
    merged: dict[tuple[str, str], TranslationPair] = {}
    for pair in pairs:
        key = (normalize_text(pair.source_text), normalize_text(pair.target_text))
        existing = merged.get(key)
        if existing is None:
            merged[key] = TranslationPair(
                id=pair.id,
                source_text=pair.source_text,
                target_text=pair.target_text,
                source_language=pair.source_language,
                target_language=pair.target_language,
                context=pair.context,
                confidence=pair.confidence,
                frequency=pair.frequency,
                source_file=pair.source_file,
                target_file=pair.target_file,
                created_at=pair.created_at,
                updated_at=pair.updated_at,
                is_refined=pair.is_refined,
                refinement_history=list(pair.refinement_history),
            )
            continue
        total = existing.frequency + pair.frequency
        existing.confidence = (existing.confidence * existing.frequency + pair.confidence * pair.frequency) / total
        existing.frequency = total
    return list(merged.values())
