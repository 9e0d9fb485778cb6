from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer

from .aligner import AlignmentStrategy, PositionalAligner, SimilarityAligner
from .curation import CurationWorkflow, search_pairs
from .documents import load_documents
from .errors import StyleInputError
from .export import export_tmx
from .logging_config import setup_logging
from .lookup import StyleLookup
from .models import CustomTranslationStyle
from .processing import StyleCreationData, process_files
from .settings import get_settings
from .statistics import analyze_style
from .store import JsonFileRepository, StyleStore

app = typer.Typer(help="Build and curate custom translation styles from parallel documents.")

ALIGNERS = {"positional": PositionalAligner, "similarity": SimilarityAligner}


@app.callback()
def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)


def _store() -> StyleStore:
    settings = get_settings()
    return StyleStore(JsonFileRepository(settings.data_root), namespace=settings.store_namespace)


def _workflow() -> CurationWorkflow:
    return CurationWorkflow(_store())


def _summary(style: CustomTranslationStyle) -> str:
    stats = style.statistics
    status = "active" if style.is_active else "inactive"
    return (
        f"{style.id}  {style.name} [{style.source_language}->{style.target_language}, {status}] "
        f"pairs={stats.total_pairs} conflicts={stats.total_conflicts} resolved={stats.resolved_conflicts} "
        f"refined={stats.refined_pairs} accuracy={stats.accuracy:.2%}"
    )


def _require(style: CustomTranslationStyle | None, what: str) -> CustomTranslationStyle:
    if style is None:
        typer.echo(f"{what} not found.", err=True)
        raise typer.Exit(code=1)
    return style


def _aligner(name: str) -> AlignmentStrategy:
    try:
        return ALIGNERS[name]()
    except KeyError as exc:
        raise typer.BadParameter(f"Unknown aligner '{name}', choose from {', '.join(ALIGNERS)}") from exc


@app.command()
def create(
    name: str = typer.Argument(..., help="Style name."),
    source_files: List[Path] = typer.Option(..., "--source", "-s", exists=True, readable=True, help="Source-language file or folder (repeatable)."),
    target_files: List[Path] = typer.Option(..., "--target", "-t", exists=True, readable=True, help="Target-language file or folder (repeatable)."),
    source_lang: Optional[str] = typer.Option(None, "--source-lang", help="Source language code (default from settings)."),
    target_lang: Optional[str] = typer.Option(None, "--target-lang", help="Target language code (default from settings)."),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Optional description."),
    aligner: str = typer.Option("positional", "--aligner", help="Alignment strategy: positional or similarity."),
    merge_duplicates: bool = typer.Option(False, "--merge-duplicates", help="Merge identical source/target pairs."),
) -> None:
    """Process parallel files into a new style and save it."""
    settings = get_settings()
    data = StyleCreationData(
        name=name,
        description=description,
        source_language=source_lang or settings.default_source_lang,
        target_language=target_lang or settings.default_target_lang,
        source_files=load_documents(source_files),
        target_files=load_documents(target_files),
    )
    try:
        style = asyncio.run(process_files(data, strategy=_aligner(aligner), merge_duplicates=merge_duplicates))
    except StyleInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _store().save_style(style)
    typer.echo(f"Created {_summary(style)}")


@app.command("list")
def list_styles(
    query: str = typer.Option("", "--query", "-q", help="Filter by name or description."),
    source_lang: Optional[str] = typer.Option(None, "--source-lang", help="Only active styles for this source language."),
    target_lang: Optional[str] = typer.Option(None, "--target-lang", help="Only active styles for this target language."),
) -> None:
    """List stored styles."""
    store = _store()
    styles = store.search_styles(query)
    if source_lang and target_lang:
        eligible = {style.id for style in store.get_styles_by_language_pair(source_lang, target_lang)}
        styles = [style for style in styles if style.id in eligible]
    if not styles:
        typer.echo("No translation styles found.")
        return
    for style in styles:
        typer.echo(_summary(style))


@app.command()
def show(
    style_id: str = typer.Argument(..., help="Style id."),
    query: str = typer.Option("", "--query", "-q", help="Only pairs containing this text."),
    sort_by: str = typer.Option("source_text", "--sort-by", help="source_text, target_text, confidence or frequency."),
    descending: bool = typer.Option(False, "--desc", help="Sort descending."),
    as_json: bool = typer.Option(False, "--json", help="Print the stored style as JSON."),
) -> None:
    """Show a style with its pairs and conflicts."""
    style = _require(_store().get_style_by_id(style_id), f"Style {style_id}")
    if as_json:
        typer.echo(json.dumps(style.to_dict(), ensure_ascii=False, indent=2))
        return
    try:
        pairs = search_pairs(style, query, sort_by=sort_by, descending=descending)
    except StyleInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(_summary(style))
    typer.echo(f"Pairs ({len(pairs)} of {len(style.translation_pairs)}):")
    for pair in pairs:
        marker = "*" if pair.is_refined else " "
        typer.echo(f" {marker} {pair.id}  {pair.source_text!r} -> {pair.target_text!r} ({pair.confidence:.2f}, x{pair.frequency})")
    typer.echo(f"Conflicts ({len(style.conflicts)}):")
    for conflict in style.conflicts:
        state = f"resolved: {conflict.resolved_translation!r}" if conflict.is_resolved else "unresolved"
        typer.echo(f"   {conflict.id}  {conflict.source_text!r} [{state}]")
        for candidate in conflict.translations:
            typer.echo(f"      - {candidate.target_text!r} ({candidate.confidence:.2f}, x{candidate.frequency})")


@app.command()
def delete(style_id: str = typer.Argument(..., help="Style id.")) -> None:
    """Delete a style (no-op when it does not exist)."""
    _store().delete_style(style_id)
    typer.echo(f"Deleted {style_id}")


@app.command()
def activate(style_id: str = typer.Argument(..., help="Style id.")) -> None:
    """Make a style eligible for lookup."""
    style = _require(_store().set_active(style_id, True), f"Style {style_id}")
    typer.echo(_summary(style))


@app.command()
def deactivate(style_id: str = typer.Argument(..., help="Style id.")) -> None:
    """Exclude a style from lookup."""
    style = _require(_store().set_active(style_id, False), f"Style {style_id}")
    typer.echo(_summary(style))


@app.command("add-pair")
def add_pair(
    style_id: str = typer.Argument(..., help="Style id."),
    source_text: str = typer.Argument(..., help="Source text."),
    target_text: str = typer.Argument(..., help="Target text."),
    context: Optional[str] = typer.Option(None, "--context", help="Free-text context."),
    confidence: float = typer.Option(1.0, "--confidence", help="Confidence between 0 and 1."),
) -> None:
    """Add a translation pair by hand."""
    try:
        style = _workflow().add_pair(style_id, source_text, target_text, context=context, confidence=confidence)
    except StyleInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(_summary(_require(style, f"Style {style_id}")))


@app.command("edit-pair")
def edit_pair(
    style_id: str = typer.Argument(..., help="Style id."),
    pair_id: str = typer.Argument(..., help="Pair id."),
    source_text: Optional[str] = typer.Option(None, "--source-text", help="New source text."),
    target_text: Optional[str] = typer.Option(None, "--target-text", help="New target text."),
    context: Optional[str] = typer.Option(None, "--context", help="New context."),
    confidence: Optional[float] = typer.Option(None, "--confidence", help="New confidence."),
) -> None:
    """Edit fields of an existing pair."""
    changes = {
        name: value
        for name, value in {
            "source_text": source_text,
            "target_text": target_text,
            "context": context,
            "confidence": confidence,
        }.items()
        if value is not None
    }
    try:
        style = _workflow().edit_pair(style_id, pair_id, **changes)
    except StyleInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(_summary(_require(style, f"Style {style_id} or pair {pair_id}")))


@app.command("delete-pair")
def delete_pair(
    style_id: str = typer.Argument(..., help="Style id."),
    pair_id: str = typer.Argument(..., help="Pair id."),
) -> None:
    """Delete a pair. Conflicts are kept as they are."""
    style = _workflow().delete_pair(style_id, pair_id)
    typer.echo(_summary(_require(style, f"Style {style_id} or pair {pair_id}")))


@app.command()
def refine(
    style_id: str = typer.Argument(..., help="Style id."),
    pair_id: str = typer.Argument(..., help="Pair id."),
    reason: str = typer.Option(..., "--reason", "-r", help="Why the pair was reviewed."),
    refined_by: Optional[str] = typer.Option(None, "--by", help="Curator name."),
) -> None:
    """Mark a pair as refined with a reason."""
    try:
        style = _workflow().refine_pair(style_id, pair_id, reason, refined_by=refined_by)
    except StyleInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(_summary(_require(style, f"Style {style_id} or pair {pair_id}")))


@app.command()
def resolve(
    style_id: str = typer.Argument(..., help="Style id."),
    conflict_id: str = typer.Argument(..., help="Conflict id."),
    target_text: str = typer.Argument(..., help="Winning candidate translation."),
) -> None:
    """Resolve a conflict by picking one of its candidate translations."""
    try:
        style = _workflow().resolve_conflict(style_id, conflict_id, target_text)
    except StyleInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(_summary(_require(style, f"Style {style_id} or conflict {conflict_id}")))


@app.command()
def unresolve(
    style_id: str = typer.Argument(..., help="Style id."),
    conflict_id: str = typer.Argument(..., help="Conflict id."),
) -> None:
    """Reopen a resolved conflict."""
    style = _workflow().unresolve_conflict(style_id, conflict_id)
    typer.echo(_summary(_require(style, f"Style {style_id} or conflict {conflict_id}")))


@app.command()
def analyze(style_id: str = typer.Argument(..., help="Style id.")) -> None:
    """Report coverage, quality and recommendations for a style."""
    style = _require(_store().get_style_by_id(style_id), f"Style {style_id}")
    analysis = analyze_style(style)
    typer.echo(f"Coverage: {analysis.coverage:.0%}")
    typer.echo(f"Quality: {analysis.quality:.0%}")
    typer.echo(f"Unresolved conflicts: {sum(1 for c in analysis.conflicts if not c.is_resolved)}")
    for recommendation in analysis.recommendations:
        typer.echo(f"- {recommendation}")


@app.command()
def lookup(
    text: str = typer.Argument(..., help="Source text to look up."),
    source_lang: Optional[str] = typer.Option(None, "--source-lang", help="Source language code (default from settings)."),
    target_lang: Optional[str] = typer.Option(None, "--target-lang", help="Target language code (default from settings)."),
    threshold: float = typer.Option(80.0, "--threshold", help="Fuzzy match threshold (0-100)."),
) -> None:
    """Look a fragment up in the active styles for a language pair."""
    settings = get_settings()
    memory = StyleLookup.for_language_pair(
        _store(),
        source_lang or settings.default_source_lang,
        target_lang or settings.default_target_lang,
    )
    match = memory.get(text)
    if match is not None:
        typer.echo(f"{match.target_text}  (exact, {match.style_name})")
        return
    similar = memory.similar(text, threshold=threshold)
    if not similar:
        typer.echo("No match found.")
        raise typer.Exit(code=1)
    for candidate in similar:
        typer.echo(f"{candidate.target_text}  ({candidate.score:.0f}%, {candidate.source_text!r}, {candidate.style_name})")


@app.command("export-tmx")
def export_tmx_command(
    style_id: str = typer.Argument(..., help="Style id."),
    output_path: Path = typer.Argument(..., help="TMX file to write."),
) -> None:
    """Export a curated style as TMX."""
    style = _require(_store().get_style_by_id(style_id), f"Style {style_id}")
    count = export_tmx(style, output_path)
    typer.echo(f"Wrote {count} translation units to {output_path}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", help="Bind port."),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    typer.echo(f"Starting API at http://{host}:{port}")
    uvicorn.run("translation_styles.api:app", host=host, port=port)


if __name__ == "__main__":
    app()
