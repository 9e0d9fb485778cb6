from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, Response, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .aligner import PositionalAligner, SimilarityAligner
from .curation import CurationWorkflow, search_pairs
from .documents import UploadedDocument
from .errors import StyleInputError
from .logging_config import setup_logging
from .lookup import StyleLookup
from .models import CustomTranslationStyle
from .processing import StyleCreationData, process_files
from .settings import get_settings
from .statistics import analyze_style
from .store import JsonFileRepository, StyleStore

settings = get_settings()
setup_logging(settings.log_level, settings.log_file)
logger = logging.getLogger(__name__)

app = FastAPI(title="Translation Styles API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

NOT_FOUND = "Style not found"
TARGET_NOT_FOUND = "Style, pair or conflict not found"


class StyleUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class PairCreate(BaseModel):
    source_text: str
    target_text: str
    context: Optional[str] = None
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    frequency: int = Field(1, ge=1)


class PairUpdate(BaseModel):
    source_text: Optional[str] = None
    target_text: Optional[str] = None
    context: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    frequency: Optional[int] = Field(None, ge=1)


class RefineRequest(BaseModel):
    reason: str
    refined_by: Optional[str] = None


class ResolveRequest(BaseModel):
    target_text: str


def get_store() -> StyleStore:
    return StyleStore(JsonFileRepository(settings.data_root), namespace=settings.store_namespace)


def get_workflow(store: StyleStore = Depends(get_store)) -> CurationWorkflow:
    return CurationWorkflow(store)


def _found(style: CustomTranslationStyle | None, detail: str = NOT_FOUND) -> dict:
    if style is None:
        raise HTTPException(status_code=404, detail=detail)
    return style.to_dict()


async def _read_upload(upload: UploadFile) -> UploadedDocument:
    return UploadedDocument(name=upload.filename or "upload.txt", content=await upload.read())


@app.exception_handler(StyleInputError)
async def style_input_error_handler(_request: Request, exc: StyleInputError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/")
async def root():
    return {"message": "Translation Styles API", "version": __version__}


@app.post("/api/styles", status_code=status.HTTP_201_CREATED)
async def create_style(
    name: str = Form(""),
    description: Optional[str] = Form(None),
    source_language: str = Form(...),
    target_language: str = Form(...),
    aligner: Literal["positional", "similarity"] = Form("positional"),
    merge_duplicates: bool = Form(False),
    source_files: list[UploadFile] = File(...),
    target_files: list[UploadFile] = File(...),
    store: StyleStore = Depends(get_store),
):
    data = StyleCreationData(
        name=name,
        description=description,
        source_language=source_language,
        target_language=target_language,
        source_files=[await _read_upload(upload) for upload in source_files],
        target_files=[await _read_upload(upload) for upload in target_files],
    )
    strategy = SimilarityAligner() if aligner == "similarity" else PositionalAligner()
    style = await process_files(data, strategy=strategy, merge_duplicates=merge_duplicates)
    store.save_style(style)
    logger.info(f"Created style {style.id} from {len(source_files)} source / {len(target_files)} target files")
    return style.to_dict()


@app.get("/api/styles")
async def list_styles(query: str = "", language_pair: Optional[str] = None, store: StyleStore = Depends(get_store)):
    return {"styles": [style.to_dict() for style in store.search_styles(query, language_pair)]}


@app.get("/api/styles/by-language-pair")
async def styles_by_language_pair(source: str, target: str, store: StyleStore = Depends(get_store)):
    return {"styles": [style.to_dict() for style in store.get_styles_by_language_pair(source, target)]}


@app.get("/api/styles/{style_id}")
async def get_style(style_id: str, store: StyleStore = Depends(get_store)):
    return _found(store.get_style_by_id(style_id))


@app.patch("/api/styles/{style_id}")
async def update_style(style_id: str, update: StyleUpdate, store: StyleStore = Depends(get_store)):
    return _found(store.update_style(style_id, **update.model_dump(exclude_unset=True, exclude_none=True)))


@app.delete("/api/styles/{style_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_style(style_id: str, store: StyleStore = Depends(get_store)):
    store.delete_style(style_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/api/styles/{style_id}/analysis")
async def get_analysis(style_id: str, store: StyleStore = Depends(get_store)):
    style = store.get_style_by_id(style_id)
    if style is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    analysis = analyze_style(style)
    return {
        "totalPairs": analysis.total_pairs,
        "conflicts": [conflict.to_dict() for conflict in analysis.conflicts],
        "coverage": analysis.coverage,
        "quality": analysis.quality,
        "recommendations": analysis.recommendations,
    }


@app.get("/api/styles/{style_id}/pairs")
async def list_pairs(
    style_id: str,
    query: str = "",
    sort_by: Literal["source_text", "target_text", "confidence", "frequency"] = "source_text",
    descending: bool = False,
    store: StyleStore = Depends(get_store),
):
    style = store.get_style_by_id(style_id)
    if style is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    pairs = search_pairs(style, query, sort_by=sort_by, descending=descending)
    return {"pairs": [pair.to_dict() for pair in pairs], "total": len(style.translation_pairs)}


@app.post("/api/styles/{style_id}/pairs", status_code=status.HTTP_201_CREATED)
async def add_pair(style_id: str, pair: PairCreate, workflow: CurationWorkflow = Depends(get_workflow)):
    return _found(
        workflow.add_pair(
            style_id,
            pair.source_text,
            pair.target_text,
            context=pair.context,
            confidence=pair.confidence,
            frequency=pair.frequency,
        )
    )


@app.patch("/api/styles/{style_id}/pairs/{pair_id}")
async def edit_pair(style_id: str, pair_id: str, changes: PairUpdate, workflow: CurationWorkflow = Depends(get_workflow)):
    return _found(workflow.edit_pair(style_id, pair_id, **changes.model_dump(exclude_unset=True)), TARGET_NOT_FOUND)


@app.delete("/api/styles/{style_id}/pairs/{pair_id}")
async def delete_pair(style_id: str, pair_id: str, workflow: CurationWorkflow = Depends(get_workflow)):
    return _found(workflow.delete_pair(style_id, pair_id), TARGET_NOT_FOUND)


@app.post("/api/styles/{style_id}/pairs/{pair_id}/refine")
async def refine_pair(style_id: str, pair_id: str, request: RefineRequest, workflow: CurationWorkflow = Depends(get_workflow)):
    return _found(workflow.refine_pair(style_id, pair_id, request.reason, refined_by=request.refined_by), TARGET_NOT_FOUND)


@app.post("/api/styles/{style_id}/conflicts/{conflict_id}/resolve")
async def resolve_conflict(style_id: str, conflict_id: str, request: ResolveRequest, workflow: CurationWorkflow = Depends(get_workflow)):
    return _found(workflow.resolve_conflict(style_id, conflict_id, request.target_text), TARGET_NOT_FOUND)


@app.post("/api/styles/{style_id}/conflicts/{conflict_id}/unresolve")
async def unresolve_conflict(style_id: str, conflict_id: str, workflow: CurationWorkflow = Depends(get_workflow)):
    return _found(workflow.unresolve_conflict(style_id, conflict_id), TARGET_NOT_FOUND)


@app.get("/api/lookup")
async def lookup(
    text: str,
    source_language: str,
    target_language: str,
    threshold: float = 80.0,
    limit: int = 5,
    store: StyleStore = Depends(get_store),
):
    memory = StyleLookup.for_language_pair(store, source_language, target_language)
    match = memory.get(text)
    similar = [] if match else memory.similar(text, limit=limit, threshold=threshold)
    return {
        "exact": None if match is None else {"targetText": match.target_text, "styleId": match.style_id, "resolved": match.resolved},
        "similar": [
            {"sourceText": m.source_text, "targetText": m.target_text, "score": m.score, "styleId": m.style_id}
            for m in similar
        ],
    }
