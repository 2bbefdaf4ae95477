"""Tests for the template catalogue.

Covers CRUD, search filters, recommendations, favourites, usage
counters and JSON persistence.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from construcalc.models import Category, Difficulty, Parameter, Template
from construcalc.templates import SEED_TEMPLATES, TemplateLibrary
from construcalc.templates.search import matches
from construcalc.templates.seed_data import BEAM_DESIGN, BEAM_DESIGN_ID, ELECTRICAL_DEMAND_ID


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _template(template_id: str, category: Category = Category.STRUCTURAL, **kw: object) -> Template:
    return Template(
        id=template_id,
        name=kw.pop("name", f"Plantilla {template_id}"),
        category=category,
        parameters=[Parameter(name="x", required=True)],
        **kw,
    )


@pytest.fixture
def library() -> TemplateLibrary:
    lib = TemplateLibrary()
    lib.add(_template("columna", usage_count=500, tags=["columna"], target_professions=["civil_engineer"]))
    lib.add(_template("zapata", usage_count=10, difficulty=Difficulty.BASIC))
    lib.add(_template("tuberia", Category.HYDRAULIC, usage_count=900, target_professions=["plumber"]))
    return lib


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


class TestSeedData:
    def test_two_builtin_templates(self) -> None:
        assert {t.id for t in SEED_TEMPLATES} == {ELECTRICAL_DEMAND_ID, BEAM_DESIGN_ID}

    def test_beam_parameters(self) -> None:
        assert BEAM_DESIGN.parameter_names() == [
            "length", "load", "concreteStrength", "steelStrength",
            "beamHeight", "beamWidth", "barDiameter",
        ]
        assert BEAM_DESIGN.get_parameter("beamHeight").required is False
        assert BEAM_DESIGN.get_parameter("barDiameter").options == ["8", "10", "12", "16", "20", "25"]

    def test_default_library_is_seeded(self) -> None:
        lib = TemplateLibrary()
        assert len(lib) == 2
        assert ELECTRICAL_DEMAND_ID in lib


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


class TestCrud:
    def test_add_and_get(self, library: TemplateLibrary) -> None:
        assert library.get("columna").name == "Plantilla columna"
        assert len(library) == 5

    def test_get_missing(self, library: TemplateLibrary) -> None:
        assert library.get("nope") is None

    def test_remove(self, library: TemplateLibrary) -> None:
        assert library.remove("zapata") is True
        assert library.remove("zapata") is False
        assert "zapata" not in library

    def test_empty_library(self) -> None:
        assert TemplateLibrary(templates=[]).list_all() == []


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    def test_by_type(self, library: TemplateLibrary) -> None:
        ids = {t.id for t in library.search({"types": ["hydraulic"]})}
        assert ids == {"tuberia"}

    def test_by_comma_separated_types(self, library: TemplateLibrary) -> None:
        ids = {t.id for t in library.search({"types": "electrical,hydraulic"})}
        assert ids == {ELECTRICAL_DEMAND_ID, "tuberia"}

    def test_by_profession(self, library: TemplateLibrary) -> None:
        ids = {t.id for t in library.search({"targetProfessions": ["civil_engineer"]})}
        assert ids == {BEAM_DESIGN_ID, "columna"}

    def test_by_search_term_in_tags(self, library: TemplateLibrary) -> None:
        ids = {t.id for t in library.search({"searchTerm": "VIGA"})}
        assert ids == {BEAM_DESIGN_ID}

    def test_by_difficulty(self, library: TemplateLibrary) -> None:
        ids = {t.id for t in library.search({"difficulty": "advanced"})}
        assert ids == {BEAM_DESIGN_ID}

    def test_empty_filters_match_everything(self, library: TemplateLibrary) -> None:
        assert len(library.search({"types": [], "searchTerm": ""})) == len(library)
        assert len(library.search()) == len(library)

    def test_verified_flag(self, library: TemplateLibrary) -> None:
        ids = {t.id for t in library.search({"verified": True})}
        assert ids == {ELECTRICAL_DEMAND_ID, BEAM_DESIGN_ID}

    def test_matches_accepts_enum_values(self) -> None:
        assert matches(BEAM_DESIGN, {"category": [Category.STRUCTURAL]})


# ---------------------------------------------------------------------------
# Recommendations / stats
# ---------------------------------------------------------------------------


class TestRecommendations:
    def test_same_category_first(self, library: TemplateLibrary) -> None:
        ids = [t.id for t in library.recommendations(BEAM_DESIGN_ID)]
        assert ids[:2] == ["columna", "zapata"]
        assert BEAM_DESIGN_ID not in ids

    def test_without_reference_sorted_by_usage(self, library: TemplateLibrary) -> None:
        ids = [t.id for t in library.recommendations(limit=2)]
        assert ids == ["tuberia", "columna"]

    def test_limit(self, library: TemplateLibrary) -> None:
        assert len(library.recommendations(limit=1)) == 1
        assert library.recommendations(limit=0) == []


class TestStats:
    def test_toggle_favorite(self, library: TemplateLibrary) -> None:
        assert library.toggle_favorite("zapata") is True
        assert library.get("zapata").is_favorite is True
        assert {t.id for t in library.search({"favorites": True})} == {"zapata"}
        assert library.toggle_favorite("zapata") is False

    def test_record_usage(self, library: TemplateLibrary) -> None:
        assert library.record_usage("zapata") == 11
        assert library.get("zapata").usage_count == 11

    def test_unknown_template(self, library: TemplateLibrary) -> None:
        with pytest.raises(KeyError):
            library.record_usage("nope")
        with pytest.raises(KeyError):
            library.toggle_favorite("nope")


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_save_and_load(self, library: TemplateLibrary, tmp_path: Path) -> None:
        path = library.save(tmp_path / "catalogue" / "templates.json")
        loaded = TemplateLibrary.load(path)
        assert {t.id for t in loaded.list_all()} == {t.id for t in library.list_all()}
        assert loaded.get(BEAM_DESIGN_ID) == BEAM_DESIGN

    def test_saved_file_uses_wire_names(self, library: TemplateLibrary, tmp_path: Path) -> None:
        path = library.save(tmp_path / "templates.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == "1"
        assert "necReference" in data["templates"][0]
        assert not list(tmp_path.glob(".templates_*"))

    def test_load_missing_file(self, tmp_path: Path) -> None:
        assert len(TemplateLibrary.load(tmp_path / "missing.json")) == 0

    def test_load_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "templates.json"
        path.write_text("{not json", encoding="utf-8")
        assert len(TemplateLibrary.load(path)) == 0

    def test_load_skips_invalid_entries(self, tmp_path: Path) -> None:
        path = tmp_path / "templates.json"
        path.write_text(
            json.dumps({"version": "1", "templates": [{"id": "bad"}, {"id": "ok", "category": "custom"}]}),
            encoding="utf-8",
        )
        loaded = TemplateLibrary.load(path)
        assert [t.id for t in loaded.list_all()] == ["ok"]
