"""Curator operations over stored styles: pair CRUD, refinement, conflict resolution.

Each operation loads the style from the store, mutates it, stamps
``updated_at``, recomputes statistics and saves it back. Unknown style, pair
or conflict ids are no-ops that return ``None``; invalid input raises
``StyleInputError`` before anything is changed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Literal

from .errors import StyleInputError
from .models import (
    CustomTranslationStyle,
    RefinementRecord,
    TranslationPair,
    new_id,
    utc_now,
    validate_confidence,
    validate_pair_text,
)
from .statistics import refresh_statistics
from .store import StyleStore

logger = logging.getLogger(__name__)

SortField = Literal["source_text", "target_text", "confidence", "frequency"]

EDITABLE_PAIR_FIELDS = frozenset({"source_text", "target_text", "context", "confidence", "frequency", "source_file", "target_file"})


class CurationWorkflow:
    def __init__(self, store: StyleStore) -> None:
        self.store = store

    def _mutate(
        self,
        style_id: str,
        action: str,
        mutation: Callable[[CustomTranslationStyle], bool],
    ) -> CustomTranslationStyle | None:
        style = self.store.get_style_by_id(style_id)
        if style is None:
            logger.info(f"{action}: style {style_id} not found")
            return None
        if not mutation(style):
            logger.info(f"{action}: target not found in style {style_id}")
            return None
        style.updated_at = utc_now()
        refresh_statistics(style)
        self.store.save_style(style)
        logger.info(f"{action} on style {style_id}: accuracy={style.statistics.accuracy:.3f}")
        return style

    def add_pair(
        self,
        style_id: str,
        source_text: str,
        target_text: str,
        *,
        context: str | None = None,
        confidence: float = 1.0,
        frequency: int = 1,
    ) -> CustomTranslationStyle | None:
        validate_pair_text(source_text, target_text)
        validate_confidence(confidence)
        if frequency < 1:
            raise StyleInputError("Frequency must be a positive integer")

        def mutation(style: CustomTranslationStyle) -> bool:
            now = utc_now()
            style.translation_pairs.append(
                TranslationPair(
                    id=new_id("pair"),
                    source_text=source_text,
                    target_text=target_text,
                    source_language=style.source_language,
                    target_language=style.target_language,
                    context=context,
                    confidence=confidence,
                    frequency=frequency,
                    created_at=now,
                    updated_at=now,
                )
            )
            return True

        return self._mutate(style_id, "add_pair", mutation)

    def edit_pair(self, style_id: str, pair_id: str, **changes: Any) -> CustomTranslationStyle | None:
        unknown = set(changes) - EDITABLE_PAIR_FIELDS
        if unknown:
            raise StyleInputError(f"Cannot edit pair fields: {', '.join(sorted(unknown))}")
        for name in ("source_text", "target_text"):
            if name in changes and not (changes[name] or "").strip():
                raise StyleInputError(f"{name.replace('_', ' ').capitalize()} must not be empty")
        if "confidence" in changes:
            confidence = changes["confidence"]
            if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
                raise StyleInputError("Confidence must be a number between 0 and 1")
            validate_confidence(confidence)
        if "frequency" in changes:
            frequency = changes["frequency"]
            if isinstance(frequency, bool) or not isinstance(frequency, int) or frequency < 1:
                raise StyleInputError("Frequency must be a positive integer")

        def mutation(style: CustomTranslationStyle) -> bool:
            pair = style.find_pair(pair_id)
            if pair is None:
                return False
            for name, value in changes.items():
                setattr(pair, name, value)
            pair.updated_at = utc_now()
            return True

        return self._mutate(style_id, "edit_pair", mutation)

    def delete_pair(self, style_id: str, pair_id: str) -> CustomTranslationStyle | None:
        """Remove a pair. Conflicts it contributed to are left untouched."""

        def mutation(style: CustomTranslationStyle) -> bool:
            remaining = [pair for pair in style.translation_pairs if pair.id != pair_id]
            if len(remaining) == len(style.translation_pairs):
                return False
            style.translation_pairs = remaining
            return True

        return self._mutate(style_id, "delete_pair", mutation)

    def refine_pair(
        self,
        style_id: str,
        pair_id: str,
        reason: str,
        *,
        refined_by: str | None = None,
    ) -> CustomTranslationStyle | None:
        """Annotate a pair as refined. The target text itself is not rewritten."""
        if not reason or not reason.strip():
            raise StyleInputError("Refinement reason must not be empty")

        def mutation(style: CustomTranslationStyle) -> bool:
            pair = style.find_pair(pair_id)
            if pair is None:
                return False
            now = utc_now()
            pair.refinement_history.append(
                RefinementRecord(
                    id=new_id("refinement"),
                    original_text=pair.target_text,
                    refined_text=pair.target_text,
                    reason=reason.strip(),
                    refined_at=now,
                    refined_by=refined_by,
                )
            )
            pair.is_refined = True
            pair.updated_at = now
            return True

        return self._mutate(style_id, "refine_pair", mutation)

    def resolve_conflict(self, style_id: str, conflict_id: str, chosen_target_text: str) -> CustomTranslationStyle | None:
        def mutation(style: CustomTranslationStyle) -> bool:
            conflict = style.find_conflict(conflict_id)
            if conflict is None:
                return False
            if chosen_target_text not in conflict.candidate_texts():
                raise StyleInputError(f"'{chosen_target_text}' is not a candidate translation of conflict {conflict_id}")
            conflict.resolved_translation = chosen_target_text
            conflict.is_resolved = True
            return True

        return self._mutate(style_id, "resolve_conflict", mutation)

    def unresolve_conflict(self, style_id: str, conflict_id: str) -> CustomTranslationStyle | None:
        def mutation(style: CustomTranslationStyle) -> bool:
            conflict = style.find_conflict(conflict_id)
            if conflict is None:
                return False
            conflict.resolved_translation = None
            conflict.is_resolved = False
            return True

        return self._mutate(style_id, "unresolve_conflict", mutation)


def search_pairs(
    style: CustomTranslationStyle,
    query: str = "",
    *,
    sort_by: SortField = "source_text",
    descending: bool = False,
) -> list[TranslationPair]:
    needle = query.strip().lower()
    pairs = [
        pair
        for pair in style.translation_pairs
        if not needle or needle in pair.source_text.lower() or needle in pair.target_text.lower()
    ]
    if sort_by in ("source_text", "target_text"):
        key: Callable[[TranslationPair], Any] = lambda pair: getattr(pair, sort_by).lower()
    elif sort_by in ("confidence", "frequency"):
        key = lambda pair: getattr(pair, sort_by)
    else:
        raise StyleInputError(f"Unknown sort field: {sort_by}")
    return sorted(pairs, key=key, reverse=descending)
