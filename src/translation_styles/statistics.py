from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .models import CustomTranslationStyle, StyleStatistics, TranslationConflict, TranslationPair

COVERAGE_TARGET_PAIRS = 1000
LOW_COVERAGE = 0.3
LOW_QUALITY = 0.8
CONFLICT_SHARE_WARNING = 0.1


def calculate_statistics(pairs: Sequence[TranslationPair], conflicts: Sequence[TranslationConflict]) -> StyleStatistics:
    total_pairs = len(pairs)
    total_conflicts = len(conflicts)
    resolved_conflicts = sum(1 for conflict in conflicts if conflict.is_resolved)
    refined_pairs = sum(1 for pair in pairs if pair.is_refined)
    accuracy = (total_pairs - total_conflicts + resolved_conflicts) / total_pairs if total_pairs > 0 else 0.0
    return StyleStatistics(
        total_pairs=total_pairs,
        total_conflicts=total_conflicts,
        resolved_conflicts=resolved_conflicts,
        refined_pairs=refined_pairs,
        accuracy=accuracy,
    )


def refresh_statistics(style: CustomTranslationStyle) -> StyleStatistics:
    style.statistics = calculate_statistics(style.translation_pairs, style.conflicts)
    return style.statistics


@dataclass(slots=True)
class StyleAnalysis:
    total_pairs: int
    conflicts: list[TranslationConflict]
    coverage: float
    quality: float
    recommendations: list[str] = field(default_factory=list)


def analyze_style(style: CustomTranslationStyle) -> StyleAnalysis:
    stats = style.statistics
    coverage = stats.total_pairs / COVERAGE_TARGET_PAIRS
    quality = stats.accuracy

    recommendations: list[str] = []
    if coverage < LOW_COVERAGE:
        recommendations.append("Consider adding more translation pairs to improve coverage")
    if quality < LOW_QUALITY:
        recommendations.append("Resolve translation conflicts to improve quality")
    if stats.total_conflicts > stats.total_pairs * CONFLICT_SHARE_WARNING:
        recommendations.append("High number of conflicts detected - review and resolve them")

    return StyleAnalysis(
        total_pairs=stats.total_pairs,
        conflicts=list(style.conflicts),
        coverage=min(coverage, 1.0),
        quality=quality,
        recommendations=recommendations,
    )
