from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Sequence

from .aligner import AlignmentStrategy, align_translations
from .conflicts import detect_conflicts
from .documents import UploadedDocument, process_documents
from .errors import StyleInputError
from .models import CustomTranslationStyle, new_id, utc_now
from .pairs import create_translation_pairs, merge_duplicate_pairs
from .segmenter import FileProcessingResult
from .statistics import calculate_statistics

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StyleCreationData:
    name: str
    source_language: str
    target_language: str
    source_files: list[UploadedDocument] = field(default_factory=list)
    target_files: list[UploadedDocument] = field(default_factory=list)
    description: str | None = None

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise StyleInputError("Please enter a style name")
        if not self.source_language or not self.target_language:
            raise StyleInputError("Source and target languages are required")
        if not self.source_files or not self.target_files:
            raise StyleInputError("Please upload both source and target files")


def build_style(
    data: StyleCreationData,
    source_results: Sequence[FileProcessingResult],
    target_results: Sequence[FileProcessingResult],
    *,
    strategy: AlignmentStrategy | None = None,
    merge_duplicates: bool = False,
) -> CustomTranslationStyle:
    """Align segmented files and assemble a new, unsaved style."""
    alignments = align_translations(source_results, target_results, strategy)
    pairs = create_translation_pairs(alignments, data.source_language, data.target_language)
    if merge_duplicates:
        before = len(pairs)
        pairs = merge_duplicate_pairs(pairs)
        logger.info(f"Merged duplicate pairs: {before} -> {len(pairs)}")
    conflicts = detect_conflicts(pairs)
    now = utc_now()
    return CustomTranslationStyle(
        id=new_id("style"),
        name=data.name.strip(),
        description=data.description,
        source_language=data.source_language,
        target_language=data.target_language,
        translation_pairs=pairs,
        conflicts=conflicts,
        statistics=calculate_statistics(pairs, conflicts),
        created_at=now,
        updated_at=now,
        is_active=True,
    )


async def process_files(
    data: StyleCreationData,
    *,
    strategy: AlignmentStrategy | None = None,
    merge_duplicates: bool = False,
) -> CustomTranslationStyle:
    """
    Run the full pipeline over uploaded source/target documents.

    All files are read concurrently; a file that cannot be read contributes no
    sentences instead of failing the run. Results are merged in upload order,
    so the output does not depend on which read finishes first. The returned
    style is not saved.
    """
    data.validate()
    start = perf_counter()
    source_results, target_results = await asyncio.gather(
        process_documents(data.source_files, data.source_language),
        process_documents(data.target_files, data.target_language),
    )
    failed = [result.file_name for result in (*source_results, *target_results) if not result.success]
    if failed:
        logger.warning(f"Continuing without unreadable files: {', '.join(failed)}")

    style = build_style(data, source_results, target_results, strategy=strategy, merge_duplicates=merge_duplicates)
    logger.info(
        f"Processed style '{style.name}' ({style.source_language}->{style.target_language}) in "
        f"{perf_counter() - start:.2f}s: {style.statistics.total_pairs} pairs, "
        f"{style.statistics.total_conflicts} conflicts"
    )
    return style
