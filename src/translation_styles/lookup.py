from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from rapidfuzz import fuzz

from .models import CustomTranslationStyle, TranslationPair, normalize_text
from .store import StyleStore

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LookupMatch:
    source_text: str
    target_text: str
    score: float
    style_id: str
    style_name: str
    resolved: bool = False


class StyleLookup:
    """Read-only source -> target lookup over a set of curated styles."""

    def __init__(self, styles: Sequence[CustomTranslationStyle]) -> None:
        self.styles = list(styles)
        self._resolved: dict[str, LookupMatch] = {}
        self._by_source: dict[str, list[tuple[CustomTranslationStyle, TranslationPair]]] = {}
        for style in self.styles:
            for conflict in style.conflicts:
                if conflict.is_resolved and conflict.resolved_translation:
                    self._resolved.setdefault(
                        normalize_text(conflict.source_text),
                        LookupMatch(
                            source_text=conflict.source_text,
                            target_text=conflict.resolved_translation,
                            score=100.0,
                            style_id=style.id,
                            style_name=style.name,
                            resolved=True,
                        ),
                    )
            for pair in style.translation_pairs:
                self._by_source.setdefault(normalize_text(pair.source_text), []).append((style, pair))

    @classmethod
    def for_language_pair(cls, store: StyleStore, source_language: str, target_language: str) -> "StyleLookup":
        styles = store.get_styles_by_language_pair(source_language, target_language)
        logger.info(f"Lookup over {len(styles)} active styles for {source_language}->{target_language}")
        return cls(styles)

    def __len__(self) -> int:
        return sum(len(candidates) for candidates in self._by_source.values())

    def __iter__(self) -> Iterable[TranslationPair]:
        return (pair for candidates in self._by_source.values() for _, pair in candidates)

    def get(self, source_text: str) -> LookupMatch | None:
        """Preferred target: a resolved conflict wins, then the most confident, most frequent pair."""
        key = normalize_text(source_text)
        if key in self._resolved:
            return self._resolved[key]
        candidates = self._by_source.get(key)
        if not candidates:
            return None
        style, pair = max(candidates, key=lambda item: (item[1].confidence, item[1].frequency))
        return LookupMatch(
            source_text=pair.source_text,
            target_text=pair.target_text,
            score=100.0,
            style_id=style.id,
            style_name=style.name,
        )

    def similar(self, source_text: str, *, limit: int = 5, threshold: float = 80.0) -> list[LookupMatch]:
        candidates: list[LookupMatch] = []
        pairs = [item for items in self._by_source.values() for item in items]
        for style, pair in pairs:
            score = fuzz.token_set_ratio(source_text, pair.source_text)
            if score >= threshold:
                candidates.append(
                    LookupMatch(
                        source_text=pair.source_text,
                        target_text=pair.target_text,
                        score=score,
                        style_id=style.id,
                        style_name=style.name,
                    )
                )
        candidates.sort(key=lambda match: match.score, reverse=True)
        return candidates[:limit]
