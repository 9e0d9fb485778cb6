from __future__ import annotations

import logging
from typing import Sequence

from .models import ConflictTranslation, TranslationConflict, TranslationPair, new_id, normalize_text

logger = logging.getLogger(__name__)


def _provenance(values: list[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


def detect_conflicts(pairs: Sequence[TranslationPair]) -> list[TranslationConflict]:
    """
    Surface every normalized source text that maps to two or more distinct
    normalized targets.

    Groups, candidates and representative texts all follow first-seen order:
    the candidate text is the original-case target of the first pair in its
    subgroup, not the most frequent or most confident one.
    """
    by_source: dict[str, list[TranslationPair]] = {}
    for pair in pairs:
        by_source.setdefault(normalize_text(pair.source_text), []).append(pair)

    conflicts: list[TranslationConflict] = []
    for group in by_source.values():
        if len(group) < 2:
            continue
        by_target: dict[str, list[TranslationPair]] = {}
        for pair in group:
            by_target.setdefault(normalize_text(pair.target_text), []).append(pair)
        if len(by_target) < 2:
            continue

        translations = [
            ConflictTranslation(
                target_text=subgroup[0].target_text,
                confidence=sum(pair.confidence for pair in subgroup) / len(subgroup),
                frequency=len(subgroup),
                source_files=_provenance([pair.source_file for pair in subgroup]),
                target_files=_provenance([pair.target_file for pair in subgroup]),
            )
            for subgroup in by_target.values()
        ]
        first = group[0]
        conflicts.append(
            TranslationConflict(
                id=new_id("conflict"),
                source_text=first.source_text,
                source_language=first.source_language,
                target_language=first.target_language,
                translations=translations,
            )
        )

    logger.info(f"Detected {len(conflicts)} conflicts across {len(by_source)} distinct source texts")
    return conflicts
