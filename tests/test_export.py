from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from translation_styles.conflicts import detect_conflicts
from translation_styles.export import curated_pairs, export_tmx

from conftest import make_pair, make_style

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


def _style():
    pairs = [
        make_pair("Hello there", "Hola"),
        make_pair("Hello there", "Buenas"),
        make_pair("hello there", "hola"),
        make_pair("Thank you very much", "Muchas gracias"),
    ]
    return make_style(name="Greetings", translation_pairs=pairs, conflicts=detect_conflicts(pairs))


def test_curated_pairs_keep_every_candidate_of_unresolved_conflicts() -> None:
    assert curated_pairs(_style()) == [
        ("Hello there", "Hola"),
        ("Hello there", "Buenas"),
        ("Thank you very much", "Muchas gracias"),
    ]


def test_curated_pairs_use_resolved_translation() -> None:
    style = _style()
    style.conflicts[0].is_resolved = True
    style.conflicts[0].resolved_translation = "Buenas"

    assert curated_pairs(style) == [("Hello there", "Buenas"), ("Thank you very much", "Muchas gracias")]


def test_export_tmx_writes_translation_units(tmp_path: Path) -> None:
    output = tmp_path / "exports" / "greetings.tmx"

    count = export_tmx(_style(), output)

    assert count == 3
    root = ET.parse(output).getroot()
    assert root.tag == "tmx"
    assert root.find("header").get("srclang") == "en"
    units = root.findall("./body/tu")
    assert len(units) == 3
    first = units[0].findall("tuv")
    assert [tuv.get(XML_LANG) for tuv in first] == ["en", "es"]
    assert [tuv.find("seg").text for tuv in first] == ["Hello there", "Hola"]
