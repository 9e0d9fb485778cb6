from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Sequence

from rapidfuzz import fuzz

from .segmenter import FileProcessingResult

logger = logging.getLogger(__name__)

MIN_ALIGNMENT_CONFIDENCE = 0.3


@dataclass(slots=True, frozen=True)
class PhraseAlignment:
    source_phrase: str
    target_phrase: str
    confidence: float
    context: str
    source_file: str | None = None
    target_file: str | None = None


def _ratio(a: int, b: int) -> float:
    larger = max(a, b)
    if larger == 0:
        return 0.0
    return min(a, b) / larger


def alignment_confidence(source: str, target: str) -> float:
    """Length-similarity heuristic: mean of the character and word count ratios."""
    length_ratio = _ratio(len(source), len(target))
    word_count_ratio = _ratio(len(source.split()), len(target.split()))
    return (length_ratio + word_count_ratio) / 2


class AlignmentStrategy(ABC):
    """
    Pairs up the sentences of one source document with one target document.

    Strategies only decide which sentences correspond; filtering, ordering
    across files and everything downstream stays in `align_translations`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def align(self, source: FileProcessingResult, target: FileProcessingResult) -> Iterator[PhraseAlignment]:
        ...

    @staticmethod
    def _make(source: FileProcessingResult, target: FileProcessingResult, source_phrase: str, target_phrase: str, confidence: float) -> PhraseAlignment:
        return PhraseAlignment(
            source_phrase=source_phrase,
            target_phrase=target_phrase,
            confidence=confidence,
            context=f"{source.file_name} -> {target.file_name}",
            source_file=source.file_name,
            target_file=target.file_name,
        )


class PositionalAligner(AlignmentStrategy):
    """Sentence i of the source aligns with sentence i of the target (parallel documents)."""

    @property
    def name(self) -> str:
        return "positional"

    def align(self, source: FileProcessingResult, target: FileProcessingResult) -> Iterator[PhraseAlignment]:
        for source_phrase, target_phrase in zip(source.sentences, target.sentences):
            if source_phrase and target_phrase:
                yield self._make(source, target, source_phrase, target_phrase, alignment_confidence(source_phrase, target_phrase))


class SimilarityAligner(AlignmentStrategy):
    """
    Picks, for each source sentence, the best unused target sentence within
    `window` positions of it.

    The score blends the length heuristic with rapidfuzz's token-set ratio, so
    sentences sharing numbers, names or cognates win over their neighbours.
    Tolerates inserted or dropped sentences that break positional alignment.
    """

    def __init__(self, window: int = 2, lexical_weight: float = 0.5) -> None:
        if window < 0:
            raise ValueError("window must be >= 0")
        if not 0.0 <= lexical_weight <= 1.0:
            raise ValueError("lexical_weight must be between 0 and 1")
        self.window = window
        self.lexical_weight = lexical_weight

    @property
    def name(self) -> str:
        return "similarity"

    def score(self, source_phrase: str, target_phrase: str) -> float:
        lexical = fuzz.token_set_ratio(source_phrase, target_phrase) / 100.0
        heuristic = alignment_confidence(source_phrase, target_phrase)
        return (1 - self.lexical_weight) * heuristic + self.lexical_weight * lexical

    def align(self, source: FileProcessingResult, target: FileProcessingResult) -> Iterator[PhraseAlignment]:
        used: set[int] = set()
        for index, source_phrase in enumerate(source.sentences):
            start = max(0, index - self.window)
            stop = min(len(target.sentences), index + self.window + 1)
            best: tuple[float, int] | None = None
            for candidate in range(start, stop):
                if candidate in used:
                    continue
                candidate_score = self.score(source_phrase, target.sentences[candidate])
                # strict comparison keeps the earliest candidate on ties
                if best is None or candidate_score > best[0]:
                    best = (candidate_score, candidate)
            if best is None:
                continue
            used.add(best[1])
            yield self._make(source, target, source_phrase, target.sentences[best[1]], best[0])


def align_translations(
    source_results: Sequence[FileProcessingResult],
    target_results: Sequence[FileProcessingResult],
    strategy: AlignmentStrategy | None = None,
    *,
    min_confidence: float = MIN_ALIGNMENT_CONFIDENCE,
) -> list[PhraseAlignment]:
    """Align every source file against every target file, source-file-major."""
    strategy = strategy or PositionalAligner()
    alignments: list[PhraseAlignment] = []
    discarded = 0
    for source in source_results:
        if not source.success:
            continue
        for target in target_results:
            if not target.success:
                continue
            for alignment in strategy.align(source, target):
                if alignment.confidence > min_confidence:
                    alignments.append(alignment)
                else:
                    discarded += 1
    logger.info(f"Aligner '{strategy.name}' kept {len(alignments)} alignments, discarded {discarded} below {min_confidence}")
    return alignments
