"""TMX export of curated translation styles."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path

from . import __version__
from .models import CustomTranslationStyle, normalize_text


def curated_pairs(style: CustomTranslationStyle) -> list[tuple[str, str]]:
    """
    Distinct (source, target) texts of a style in pair order.

    A source covered by a resolved conflict contributes only its resolved
    translation; unresolved conflicts keep every candidate.
    """
    resolved = {
        normalize_text(conflict.source_text): conflict.resolved_translation
        for conflict in style.conflicts
        if conflict.is_resolved and conflict.resolved_translation
    }
    seen: set[tuple[str, str]] = set()
    units: list[tuple[str, str]] = []
    for pair in style.translation_pairs:
        source_key = normalize_text(pair.source_text)
        target = resolved.get(source_key, pair.target_text)
        key = (source_key, normalize_text(target))
        if key in seen:
            continue
        seen.add(key)
        units.append((pair.source_text, target))
    return units


def export_tmx(style: CustomTranslationStyle, output_path: str | Path) -> int:
    """
    Export a style to TMX (Translation Memory eXchange) 1.4.

    Returns the number of translation units written.
    """
    tmx = ET.Element("tmx", version="1.4")

    header = ET.SubElement(tmx, "header")
    header.set("creationtool", "translation-styles")
    header.set("creationtoolversion", __version__)
    header.set("datatype", "plaintext")
    header.set("segtype", "sentence")
    header.set("adminlang", "en-US")
    header.set("srclang", style.source_language)
    header.set("o-tmf", "none")
    header.set("creationdate", datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ"))
    note = ET.SubElement(header, "note")
    note.text = style.name

    body = ET.SubElement(tmx, "body")
    units = curated_pairs(style)
    for source_text, target_text in units:
        tu = ET.SubElement(body, "tu")
        for lang, text in ((style.source_language, source_text), (style.target_language, target_text)):
            tuv = ET.SubElement(tu, "tuv")
            tuv.set("xml:lang", lang)
            seg = ET.SubElement(tuv, "seg")
            seg.text = text

    tree = ET.ElementTree(tmx)
    ET.indent(tree, space="  ")

    output_path_obj = Path(output_path)
    output_path_obj.parent.mkdir(parents=True, exist_ok=True)
    with output_path_obj.open("wb") as f:
        f.write(b'<?xml version="1.0" encoding="UTF-8"?>\n')
        tree.write(f, encoding="utf-8", xml_declaration=False)
    return len(units)
