from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .errors import StyleInputError


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:16]}"


def normalize_text(text: str) -> str:
    return text.lower().strip()


def validate_pair_text(source_text: str | None, target_text: str | None) -> None:
    if not source_text or not source_text.strip():
        raise StyleInputError("Source text must not be empty")
    if not target_text or not target_text.strip():
        raise StyleInputError("Target text must not be empty")


def validate_confidence(confidence: float) -> None:
    if not 0.0 <= confidence <= 1.0:
        raise StyleInputError(f"Confidence must be between 0 and 1, got {confidence}")


@dataclass(slots=True, frozen=True)
class RefinementRecord:
    id: str
    original_text: str
    refined_text: str
    reason: str
    refined_at: str
    refined_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "originalText": self.original_text,
            "refinedText": self.refined_text,
            "reason": self.reason,
            "refinedAt": self.refined_at,
        }
        if self.refined_by is not None:
            payload["refinedBy"] = self.refined_by
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RefinementRecord":
        return cls(
            id=payload["id"],
            original_text=payload.get("originalText", ""),
            refined_text=payload.get("refinedText", ""),
            reason=payload.get("reason", ""),
            refined_at=payload.get("refinedAt", ""),
            refined_by=payload.get("refinedBy"),
        )


@dataclass(slots=True)
class TranslationPair:
    id: str
    source_text: str
    target_text: str
    source_language: str
    target_language: str
    context: str | None = None
    confidence: float = 1.0
    frequency: int = 1
    source_file: str | None = None
    target_file: str | None = None
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)
    is_refined: bool = False
    refinement_history: list[RefinementRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "sourceText": self.source_text,
            "targetText": self.target_text,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
            "confidence": self.confidence,
            "frequency": self.frequency,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isRefined": self.is_refined,
            "refinementHistory": [record.to_dict() for record in self.refinement_history],
        }
        # optional fields are omitted rather than written as null
        if self.context is not None:
            payload["context"] = self.context
        if self.source_file is not None:
            payload["sourceFile"] = self.source_file
        if self.target_file is not None:
            payload["targetFile"] = self.target_file
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TranslationPair":
        now = utc_now()
        created_at = payload.get("createdAt") or now
        return cls(
            id=payload["id"],
            source_text=payload["sourceText"],
            target_text=payload["targetText"],
            source_language=payload.get("sourceLanguage", ""),
            target_language=payload.get("targetLanguage", ""),
            context=payload.get("context"),
            confidence=float(payload.get("confidence", 1.0)),
            frequency=int(payload.get("frequency", 1)),
            source_file=payload.get("sourceFile"),
            target_file=payload.get("targetFile"),
            created_at=created_at,
            updated_at=payload.get("updatedAt") or created_at,
            is_refined=bool(payload.get("isRefined", False)),
            refinement_history=[
                RefinementRecord.from_dict(item) for item in payload.get("refinementHistory") or []
            ],
        )


@dataclass(slots=True)
class ConflictTranslation:
    target_text: str
    confidence: float
    frequency: int
    source_files: list[str] = field(default_factory=list)
    target_files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetText": self.target_text,
            "confidence": self.confidence,
            "frequency": self.frequency,
            "sourceFiles": list(self.source_files),
            "targetFiles": list(self.target_files),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ConflictTranslation":
        return cls(
            target_text=payload["targetText"],
            confidence=float(payload.get("confidence", 0.0)),
            frequency=int(payload.get("frequency", 1)),
            source_files=list(payload.get("sourceFiles") or []),
            target_files=list(payload.get("targetFiles") or []),
        )


@dataclass(slots=True)
class TranslationConflict:
    id: str
    source_text: str
    source_language: str
    target_language: str
    translations: list[ConflictTranslation] = field(default_factory=list)
    resolved_translation: str | None = None
    is_resolved: bool = False

    def candidate_texts(self) -> list[str]:
        return [translation.target_text for translation in self.translations]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "sourceText": self.source_text,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
            "translations": [translation.to_dict() for translation in self.translations],
            "isResolved": self.is_resolved,
        }
        if self.resolved_translation is not None:
            payload["resolvedTranslation"] = self.resolved_translation
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TranslationConflict":
        return cls(
            id=payload["id"],
            source_text=payload["sourceText"],
            source_language=payload.get("sourceLanguage", ""),
            target_language=payload.get("targetLanguage", ""),
            translations=[ConflictTranslation.from_dict(item) for item in payload.get("translations") or []],
            resolved_translation=payload.get("resolvedTranslation"),
            is_resolved=bool(payload.get("isResolved", False)),
        )


@dataclass(slots=True)
class StyleStatistics:
    total_pairs: int = 0
    total_conflicts: int = 0
    resolved_conflicts: int = 0
    refined_pairs: int = 0
    accuracy: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPairs": self.total_pairs,
            "totalConflicts": self.total_conflicts,
            "resolvedConflicts": self.resolved_conflicts,
            "refinedPairs": self.refined_pairs,
            "accuracy": self.accuracy,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "StyleStatistics":
        return cls(
            total_pairs=int(payload.get("totalPairs", 0)),
            total_conflicts=int(payload.get("totalConflicts", 0)),
            resolved_conflicts=int(payload.get("resolvedConflicts", 0)),
            refined_pairs=int(payload.get("refinedPairs", 0)),
            accuracy=float(payload.get("accuracy", 0.0)),
        )


@dataclass(slots=True)
class CustomTranslationStyle:
    id: str
    name: str
    source_language: str
    target_language: str
    description: str | None = None
    translation_pairs: list[TranslationPair] = field(default_factory=list)
    conflicts: list[TranslationConflict] = field(default_factory=list)
    statistics: StyleStatistics = field(default_factory=StyleStatistics)
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)
    is_active: bool = True

    def find_pair(self, pair_id: str) -> TranslationPair | None:
        return next((pair for pair in self.translation_pairs if pair.id == pair_id), None)

    def find_conflict(self, conflict_id: str) -> TranslationConflict | None:
        return next((conflict for conflict in self.conflicts if conflict.id == conflict_id), None)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
            "translationPairs": [pair.to_dict() for pair in self.translation_pairs],
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "statistics": self.statistics.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isActive": self.is_active,
        }
        if self.description is not None:
            payload["description"] = self.description
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CustomTranslationStyle":
        from .statistics import calculate_statistics

        pairs = [TranslationPair.from_dict(item) for item in payload.get("translationPairs") or []]
        conflicts = [TranslationConflict.from_dict(item) for item in payload.get("conflicts") or []]
        raw_statistics = payload.get("statistics")
        statistics = (
            StyleStatistics.from_dict(raw_statistics)
            if raw_statistics
            else calculate_statistics(pairs, conflicts)
        )
        created_at = payload.get("createdAt") or utc_now()
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            description=payload.get("description"),
            source_language=payload.get("sourceLanguage", ""),
            target_language=payload.get("targetLanguage", ""),
            translation_pairs=pairs,
            conflicts=conflicts,
            statistics=statistics,
            created_at=created_at,
            updated_at=payload.get("updatedAt") or created_at,
            is_active=bool(payload.get("isActive", True)),
        )
