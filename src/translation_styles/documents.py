from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter
from typing import Sequence

import pdfplumber
from docx import Document

from .segmenter import FileProcessingResult, failed_result, segment_text

logger = logging.getLogger(__name__)

DOCX_SUFFIX = ".docx"
PDF_SUFFIX = ".pdf"
SUPPORTED_SUFFIXES = {".txt", ".md", DOCX_SUFFIX, PDF_SUFFIX}


@dataclass(slots=True, frozen=True)
class UploadedDocument:
    name: str
    content: bytes

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()


def load_document(path: str | Path) -> UploadedDocument:
    path_obj = Path(path)
    return UploadedDocument(name=path_obj.name, content=path_obj.read_bytes())


def discover_documents(folder: Path) -> list[Path]:
    """Supported files anywhere under `folder`, ordered by relative path. Hidden entries are skipped."""
    return sorted(
        [
            path
            for path in folder.rglob("*")
            if path.is_file()
            and path.suffix.lower() in SUPPORTED_SUFFIXES
            and not any(part.startswith(".") for part in path.relative_to(folder).parts)
        ],
        key=lambda p: p.relative_to(folder).as_posix(),
    )


def load_documents(paths: Sequence[str | Path]) -> list[UploadedDocument]:
    """Load files in the given order; a folder contributes its supported files in place."""
    documents: list[UploadedDocument] = []
    for path in map(Path, paths):
        if not path.is_dir():
            documents.append(load_document(path))
            continue
        found = discover_documents(path)
        if not found:
            logger.warning(f"No supported documents found in folder {path}")
        for file_path in found:
            relative = file_path.relative_to(path).as_posix()
            documents.append(UploadedDocument(name=f"{path.name}/{relative}", content=file_path.read_bytes()))
        logger.info(f"Folder {path}: {len(found)} documents")
    return documents


def _read_docx_text(content: bytes) -> str:
    document = Document(io.BytesIO(content))
    return "\n\n".join(para.text for para in document.paragraphs if para.text.strip())


def _read_pdf_text(content: bytes) -> str:
    pages: list[str] = []
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        for page in pdf.pages:
            text = page.extract_text() or ""
            if text.strip():
                pages.append(text)
    return "\n\n".join(pages)


def read_document_text(document: UploadedDocument) -> str:
    """Decode an uploaded document to text. Anything not DOCX/PDF is read as UTF-8."""
    if document.suffix == DOCX_SUFFIX:
        return _read_docx_text(document.content)
    if document.suffix == PDF_SUFFIX:
        return _read_pdf_text(document.content)
    return document.content.decode("utf-8-sig")


def process_document(document: UploadedDocument, language: str) -> FileProcessingResult:
    start = perf_counter()
    try:
        text = read_document_text(document)
    except Exception as exc:
        logger.warning(f"Failed to read {document.name}: {type(exc).__name__}: {exc}")
        return failed_result(document.name, language, str(exc), perf_counter() - start)
    result = segment_text(document.name, text, language)
    result.processing_time = perf_counter() - start
    logger.info(
        f"Segmented {document.name} ({language}): {len(result.sentences)} sentences, "
        f"{len(result.phrases)} phrases, {len(result.words)} words"
    )
    return result


async def process_documents(documents: Sequence[UploadedDocument], language: str) -> list[FileProcessingResult]:
    """Read and segment documents concurrently; results keep the input order."""
    return list(
        await asyncio.gather(*(asyncio.to_thread(process_document, document, language) for document in documents))
    )
