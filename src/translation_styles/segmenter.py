"""Sentence, phrase and word segmentation of raw document text."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from time import perf_counter

SENTENCE_MIN_LENGTH = 10
MAX_SENTENCES = 1000

PHRASE_MIN_LENGTH = 5
PHRASE_MAX_LENGTH = 200
MAX_PHRASES = 2000

WORD_MIN_LENGTH = 3
MAX_WORDS = 5000

_SENTENCE_BREAK = re.compile(r"[.!?]+")
_PHRASE_BREAK = re.compile(r"[,;:()\[\]{}]")
_WORD_BREAK = re.compile(r"\W+")


@dataclass(slots=True)
class FileProcessingResult:
    file_name: str
    language: str
    sentences: list[str] = field(default_factory=list)
    phrases: list[str] = field(default_factory=list)
    words: list[str] = field(default_factory=list)
    processing_time: float = 0.0
    success: bool = True
    error: str | None = None


def extract_sentences(text: str) -> list[str]:
    sentences = [chunk.strip() for chunk in _SENTENCE_BREAK.split(text)]
    return [sentence for sentence in sentences if len(sentence) >= SENTENCE_MIN_LENGTH][:MAX_SENTENCES]


def extract_phrases(text: str) -> list[str]:
    phrases: list[str] = []
    for sentence in extract_sentences(text):
        for chunk in _PHRASE_BREAK.split(sentence):
            phrase = chunk.strip()
            if PHRASE_MIN_LENGTH <= len(phrase) <= PHRASE_MAX_LENGTH:
                phrases.append(phrase)
    return phrases[:MAX_PHRASES]


def extract_words(text: str) -> list[str]:
    words = _WORD_BREAK.split(text.lower())
    return [word for word in words if len(word) >= WORD_MIN_LENGTH][:MAX_WORDS]


def segment_text(file_name: str, text: str, language: str) -> FileProcessingResult:
    """Segment one document; the language tag is recorded, never detected."""
    start = perf_counter()
    return FileProcessingResult(
        file_name=file_name,
        language=language,
        sentences=extract_sentences(text),
        phrases=extract_phrases(text),
        words=extract_words(text),
        processing_time=perf_counter() - start,
    )


def failed_result(file_name: str, language: str, error: str, processing_time: float = 0.0) -> FileProcessingResult:
    return FileProcessingResult(
        file_name=file_name,
        language=language,
        processing_time=processing_time,
        success=False,
        error=error,
    )
