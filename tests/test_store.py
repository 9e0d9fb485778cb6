from __future__ import annotations

import json
from pathlib import Path

import pytest

from translation_styles.conflicts import detect_conflicts
from translation_styles.curation import CurationWorkflow
from translation_styles.errors import StyleInputError
from translation_styles.statistics import refresh_statistics
from translation_styles.store import InMemoryRepository, JsonFileRepository, StyleStore

from conftest import make_pair, make_style


def _rich_style():
    pairs = [
        make_pair("Hello there", "Hola", 0.8, "a.txt", "b.txt"),
        make_pair("Hello there", "Buenas", 0.7, "a.txt", "c.txt"),
    ]
    style = make_style(name="Legal", description="Contracts", translation_pairs=pairs, conflicts=detect_conflicts(pairs))
    refresh_statistics(style)
    return style


def test_round_trip_through_json_file(tmp_path: Path) -> None:
    store = StyleStore(JsonFileRepository(tmp_path))
    style = _rich_style()

    store.save_style(style)
    loaded = store.get_style_by_id(style.id)

    assert loaded == style
    assert (tmp_path / "translation_styles.json").exists()
    assert not list(tmp_path.glob("*.tmp"))


def test_round_trip_preserves_refinements_and_resolution(store: StyleStore) -> None:
    style = store.save_style(_rich_style())
    workflow = CurationWorkflow(store)
    workflow.refine_pair(style.id, style.translation_pairs[0].id, "Checked against glossary", refined_by="ana")
    updated = workflow.resolve_conflict(style.id, style.conflicts[0].id, "Hola")

    loaded = store.get_style_by_id(style.id)

    assert loaded == updated
    assert loaded.translation_pairs[0].refinement_history[0].refined_by == "ana"
    assert loaded.conflicts[0].resolved_translation == "Hola"


def test_save_existing_style_stamps_updated_at(store: StyleStore) -> None:
    style = make_style()
    style.updated_at = "2000-01-01T00:00:00+00:00"
    store.save_style(style)
    assert store.get_style_by_id(style.id).updated_at == "2000-01-01T00:00:00+00:00"

    style.name = "Renamed"
    store.save_style(style)

    loaded = store.get_style_by_id(style.id)
    assert loaded.name == "Renamed"
    assert loaded.updated_at != "2000-01-01T00:00:00+00:00"
    assert len(store.get_all_styles()) == 1


def test_missing_style_returns_none(store: StyleStore) -> None:
    assert store.get_style_by_id("style-missing") is None


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        '{"id": "style-1"}',
        '[{"name": "no id"}]',
        '[{"id": "style-1", "name": "x", "statistics": "garbage"}]',
        '[{"id": "style-1", "name": "x", "statistics": ["oops"]}]',
        '["not a style"]',
    ],
)
def test_corrupt_state_degrades_to_empty_list(payload: str) -> None:
    store = StyleStore(InMemoryRepository({"translation_styles": payload}))
    assert store.get_all_styles() == []


def test_loader_tolerates_missing_optional_fields() -> None:
    raw = [
        {
            "id": "style-1",
            "name": "Minimal",
            "sourceLanguage": "en",
            "targetLanguage": "es",
            "translationPairs": [
                {"id": "pair-1", "sourceText": "Hello there", "targetText": "Hola"},
                {"id": "pair-2", "sourceText": "Hello there", "targetText": "Buenas"},
            ],
            "conflicts": [
                {
                    "id": "conflict-1",
                    "sourceText": "Hello there",
                    "translations": [{"targetText": "Hola"}, {"targetText": "Buenas"}],
                }
            ],
        }
    ]
    store = StyleStore(InMemoryRepository({"translation_styles": json.dumps(raw)}))

    style = store.get_style_by_id("style-1")

    assert style is not None
    assert style.is_active is True
    assert style.description is None
    assert style.translation_pairs[0].refinement_history == []
    assert style.conflicts[0].is_resolved is False
    assert style.statistics.total_pairs == 2
    assert style.statistics.total_conflicts == 1
    assert style.statistics.accuracy == 0.5


def test_delete_is_idempotent(store: StyleStore) -> None:
    keep = store.save_style(make_style(name="Keep"))
    gone = store.save_style(make_style(name="Gone"))

    store.delete_style(gone.id)
    store.delete_style(gone.id)
    store.delete_style("style-never-existed")

    assert [s.id for s in store.get_all_styles()] == [keep.id]


def test_update_style_merges_fields(store: StyleStore) -> None:
    style = store.save_style(make_style(name="Before"))

    updated = store.update_style(style.id, name="After", is_active=False)

    assert updated is not None
    assert updated.name == "After"
    assert updated.is_active is False
    assert updated.source_language == "en"
    assert store.get_style_by_id(style.id).name == "After"
    assert store.update_style("style-missing", name="x") is None


def test_update_style_rejects_unknown_and_immutable_fields(store: StyleStore) -> None:
    style = store.save_style(make_style())
    with pytest.raises(StyleInputError):
        store.update_style(style.id, colour="blue")
    with pytest.raises(StyleInputError):
        store.update_style(style.id, id="style-other")
    with pytest.raises(StyleInputError):
        store.update_style(style.id, name="  ")
    with pytest.raises(StyleInputError):
        store.update_style(style.id, is_active=None)
    assert store.get_style_by_id(style.id).is_active is True


def test_language_pair_query_is_exact_and_active_only(store: StyleStore) -> None:
    active = store.save_style(make_style(name="Active"))
    inactive = store.save_style(make_style(name="Inactive"))
    store.set_active(inactive.id, False)
    store.save_style(make_style(name="Regional", source_language="en-US"))
    store.save_style(make_style(name="Reverse", source_language="es", target_language="en"))

    assert [s.id for s in store.get_styles_by_language_pair("en", "es")] == [active.id]
    assert store.get_styles_by_language_pair("en", "fr") == []


def test_search_styles_by_text_and_language_pair(store: StyleStore) -> None:
    store.save_style(make_style(name="Legal EN-ES", description="contracts"))
    store.save_style(make_style(name="Marketing", description="Campaign copy"))
    store.save_style(make_style(name="Legal FR", source_language="fr", target_language="en"))

    assert [s.name for s in store.search_styles("legal")] == ["Legal EN-ES", "Legal FR"]
    assert [s.name for s in store.search_styles("campaign")] == ["Marketing"]
    assert [s.name for s in store.search_styles("legal", "fr-en")] == ["Legal FR"]
    assert len(store.search_styles()) == 3


def test_namespaces_are_isolated() -> None:
    repository = InMemoryRepository()
    first = StyleStore(repository, namespace="one")
    second = StyleStore(repository, namespace="two")

    first.save_style(make_style())

    assert len(first.get_all_styles()) == 1
    assert second.get_all_styles() == []
