from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import fields
from pathlib import Path
from typing import Any

from .errors import StyleInputError
from .models import CustomTranslationStyle, utc_now

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "translation_styles"

_IMMUTABLE_FIELDS = {"id", "created_at"}
UPDATABLE_FIELDS = frozenset(f.name for f in fields(CustomTranslationStyle)) - _IMMUTABLE_FIELDS


class StyleRepository(ABC):
    """Raw key/value persistence for serialized style collections."""

    @abstractmethod
    def read(self, namespace: str) -> str | None:
        ...

    @abstractmethod
    def write(self, namespace: str, payload: str) -> None:
        ...

    @abstractmethod
    def delete(self, namespace: str) -> None:
        ...


class InMemoryRepository(StyleRepository):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, namespace: str) -> str | None:
        return self._data.get(namespace)

    def write(self, namespace: str, payload: str) -> None:
        self._data[namespace] = payload

    def delete(self, namespace: str) -> None:
        self._data.pop(namespace, None)


class JsonFileRepository(StyleRepository):
    """One `<namespace>.json` file per namespace under `root`."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, namespace: str) -> Path:
        return self.root / f"{namespace}.json"

    def read(self, namespace: str) -> str | None:
        path = self.path_for(namespace)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, namespace: str, payload: str) -> None:
        path = self.path_for(namespace)
        path.parent.mkdir(parents=True, exist_ok=True)
        # write-then-rename so readers never observe a half-written file
        fd, tmp_name = tempfile.mkstemp(prefix=f".{namespace}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(payload)} bytes to {path}")

    def delete(self, namespace: str) -> None:
        self.path_for(namespace).unlink(missing_ok=True)


class StyleStore:
    """
    Persisted collection of translation styles.

    Every operation reads the whole collection and writes it back in one
    repository call. There is no locking: when two writers race on the same
    style, the last `save_style` wins.
    """

    def __init__(self, repository: StyleRepository, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.repository = repository
        self.namespace = namespace

    def _write_all(self, styles: list[CustomTranslationStyle]) -> None:
        payload = json.dumps([style.to_dict() for style in styles], ensure_ascii=False, indent=2)
        self.repository.write(self.namespace, payload)

    def get_all_styles(self) -> list[CustomTranslationStyle]:
        """All persisted styles; unreadable or corrupt state yields an empty list."""
        try:
            raw = self.repository.read(self.namespace)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list of styles, got {type(data).__name__}")
            return [CustomTranslationStyle.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error(f"Error loading translation styles from '{self.namespace}': {type(exc).__name__}: {exc}")
            return []

    def save_style(self, style: CustomTranslationStyle) -> CustomTranslationStyle:
        styles = self.get_all_styles()
        for index, existing in enumerate(styles):
            if existing.id == style.id:
                style.updated_at = utc_now()
                styles[index] = style
                logger.info(f"Updated style {style.id} ({len(style.translation_pairs)} pairs)")
                break
        else:
            styles.append(style)
            logger.info(f"Saved new style {style.id} '{style.name}' ({len(style.translation_pairs)} pairs)")
        self._write_all(styles)
        return style

    def get_style_by_id(self, style_id: str) -> CustomTranslationStyle | None:
        return next((style for style in self.get_all_styles() if style.id == style_id), None)

    def delete_style(self, style_id: str) -> None:
        styles = self.get_all_styles()
        remaining = [style for style in styles if style.id != style_id]
        if len(remaining) == len(styles):
            logger.info(f"Delete of unknown style {style_id} ignored")
            return
        self._write_all(remaining)
        logger.info(f"Deleted style {style_id}")

    def update_style(self, style_id: str, **updates: Any) -> CustomTranslationStyle | None:
        """Shallow-merge `updates` into a stored style; `None` when the id is unknown."""
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise StyleInputError(f"Cannot update style fields: {', '.join(sorted(unknown))}")
        if "name" in updates and not (updates["name"] or "").strip():
            raise StyleInputError("Style name must not be empty")
        if "is_active" in updates and not isinstance(updates["is_active"], bool):
            raise StyleInputError("is_active must be true or false")

        styles = self.get_all_styles()
        for style in styles:
            if style.id == style_id:
                for name, value in updates.items():
                    setattr(style, name, value)
                style.updated_at = utc_now()
                self._write_all(styles)
                return style
        return None

    def set_active(self, style_id: str, active: bool) -> CustomTranslationStyle | None:
        return self.update_style(style_id, is_active=active)

    def get_styles_by_language_pair(self, source_language: str, target_language: str) -> list[CustomTranslationStyle]:
        return [
            style
            for style in self.get_all_styles()
            if style.source_language == source_language
            and style.target_language == target_language
            and style.is_active
        ]

    def search_styles(self, query: str = "", language_pair: str | None = None) -> list[CustomTranslationStyle]:
        """Filter by name/description substring and an optional "src-tgt" pair."""
        needle = query.strip().lower()
        results = []
        for style in self.get_all_styles():
            if needle and needle not in style.name.lower() and needle not in (style.description or "").lower():
                continue
            if language_pair and f"{style.source_language}-{style.target_language}" != language_pair:
                continue
            results.append(style)
        return results
