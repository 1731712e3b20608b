"""Tests for the filetype catalog, the built-in table and the Recent list."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from scratchpads.core.config import ScratchpadsConfig
from scratchpads.core.errors import FiletypeExistsError, ValidationError
from scratchpads.core.filetypes import (
    ALL_TYPES_SECTION,
    RECENT_SECTION,
    Filetype,
    FiletypeCatalog,
    load_builtins,
    load_language_table,
    load_recent,
    normalize_extension,
    promote,
    remove_extension,
    save_recent,
)
from tests.conftest import SMALL_TABLE, ScriptedPrompter


def _catalog(config: ScratchpadsConfig, prompter: ScriptedPrompter | None = None) -> FiletypeCatalog:
    return FiletypeCatalog(config, prompter or ScriptedPrompter(), SMALL_TABLE)


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------


class TestLoadBuiltins:
    """Splitting the language table into primary and secondary filetypes."""

    def test_primary_takes_first_extension_sorted_by_name(self) -> None:
        primary, _ = load_builtins(SMALL_TABLE)
        assert [(ft.name, ft.ext) for ft in primary] == [
            ("JavaScript", ".js"),
            ("Markdown", ".md"),
            ("PLSQL", ".pls"),
            ("Python", ".py"),
            ("reStructuredText", ".rst"),
            ("SQL", ".sql"),
            ("TypeScript", ".ts"),
        ]

    def test_secondary_named_after_extension(self) -> None:
        _, secondary = load_builtins(SMALL_TABLE)
        assert [(ft.name, ft.ext) for ft in secondary] == [
            ("CJS", ".cjs"),
            ("CTS", ".cts"),
            ("DDL", ".ddl"),
            ("MARKDOWN", ".markdown"),
            ("MJS", ".mjs"),
            ("PYI", ".pyi"),
            ("PYW", ".pyw"),
        ]

    def test_secondary_excludes_multi_dot_and_primary_extensions(self) -> None:
        primary, secondary = load_builtins(SMALL_TABLE)
        primary_keys = {ft.key for ft in primary}
        for filetype in secondary:
            assert filetype.ext.count(".") == 1
            assert filetype.key not in primary_keys

    def test_secondary_has_no_duplicates(self) -> None:
        _, secondary = load_builtins(SMALL_TABLE)
        keys = [ft.key for ft in secondary]
        assert len(keys) == len(set(keys))

    def test_languages_without_extensions_are_skipped(self) -> None:
        primary, _ = load_builtins(SMALL_TABLE)
        assert "Go Module" not in {ft.name for ft in primary}

    def test_is_idempotent_and_leaves_table_untouched(self) -> None:
        table = {name: tuple(exts) for name, exts in SMALL_TABLE.items()}
        first = load_builtins(table)
        second = load_builtins(table)
        assert first == second
        assert table == SMALL_TABLE


class TestPackagedLanguageTable:
    """The language table shipped with the package."""

    def test_loads_well_known_languages(self) -> None:
        table = load_language_table()
        assert table["Python"][0] == ".py"
        assert table["JavaScript"][0] == ".js"

    def test_is_cached(self) -> None:
        assert load_language_table() is load_language_table()

    def test_builtins_from_packaged_table_are_consistent(self) -> None:
        primary, secondary = load_builtins(load_language_table())
        primary_keys = {ft.key for ft in primary}
        assert primary
        assert all(ft.ext.count(".") == 1 for ft in secondary)
        assert not primary_keys & {ft.key for ft in secondary}


# ---------------------------------------------------------------------------
# Recent list
# ---------------------------------------------------------------------------


class TestRecentOperations:
    """Pure operations over the Recent tuple."""

    def test_normalize_extension(self) -> None:
        assert normalize_extension(" ..PY ") == "py"

    def test_promote_prepends_new_entry(self) -> None:
        recent = (Filetype("Python", ".py"),)
        result = promote(recent, Filetype("SQL", ".sql"))
        assert [ft.ext for ft in result] == [".sql", ".py"]
        assert recent == (Filetype("Python", ".py"),)

    def test_promote_moves_existing_entry_without_growing(self) -> None:
        recent = (Filetype("SQL", ".sql"), Filetype("Python", ".py"), Filetype("TS", ".ts"))
        result = promote(recent, Filetype("Python", ".PY"))
        assert [ft.key for ft in result] == ["py", "sql", "ts"]
        assert len(result) == len(recent)

    def test_remove_extension(self) -> None:
        recent = (Filetype("SQL", ".sql"), Filetype("Python", ".py"))
        assert remove_extension(recent, "py") == (Filetype("SQL", ".sql"),)


class TestRecentPersistence:
    """Saving and loading recentFiletypes.json."""

    def test_round_trip_keeps_order(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "recentFiletypes.json"
        recent = (Filetype("Notes", ".notes"), Filetype("Python", ".py"))
        save_recent(path, recent)
        assert json.loads(path.read_text()) == [
            {"name": "Notes", "ext": ".notes"},
            {"name": "Python", "ext": ".py"},
        ]
        assert load_recent(path) == recent

    def test_missing_file_loads_empty(self, tmp_path: Path) -> None:
        assert load_recent(tmp_path / "missing.json") == ()

    def test_corrupted_file_loads_empty(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = tmp_path / "recentFiletypes.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_recent(path) == ()
        assert "Ignoring" in capsys.readouterr().out

    def test_non_array_loads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "recentFiletypes.json"
        path.write_text('{"name": "Python"}', encoding="utf-8")
        assert load_recent(path) == ()

    def test_malformed_entries_are_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "recentFiletypes.json"
        path.write_text(
            json.dumps([
                {"name": "Python", "ext": ".py"},
                "junk",
                {"name": "NoExt"},
                {"name": 3, "ext": ".x"},
                {"name": "Dup", "ext": ".PY"},
                {"name": "SQL", "ext": ".sql"},
            ]),
            encoding="utf-8",
        )
        assert load_recent(path) == (Filetype("Python", ".py"), Filetype("SQL", ".sql"))


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class TestCatalogCustomTypes:
    """Adding and removing user-defined filetypes."""

    def test_added_types_are_most_recent_first(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        catalog.register_custom_type("e1")
        catalog.register_custom_type("e2")
        assert [ft.ext for ft in catalog.recent] == [".e2", ".e1"]

    def test_readding_existing_extension_is_rejected(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        catalog.register_custom_type("e1")
        catalog.register_custom_type("e2")
        before = catalog.recent

        with pytest.raises(FiletypeExistsError) as excinfo:
            catalog.register_custom_type(".E1")

        assert excinfo.value.existing == Filetype("E1", ".e1")
        assert "Extension already exists (E1)" in str(excinfo.value)
        assert catalog.recent == before
        assert load_recent(config.recent_filetypes_path) == before

    def test_builtin_extension_is_rejected(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        with pytest.raises(FiletypeExistsError) as excinfo:
            catalog.register_custom_type("pyi")
        assert excinfo.value.existing.name == "PYI"
        assert catalog.recent == ()

    def test_empty_extension_is_rejected(self, config: ScratchpadsConfig) -> None:
        with pytest.raises(ValidationError):
            _catalog(config).register_custom_type(" .. ")

    def test_custom_types_persist(self, config: ScratchpadsConfig) -> None:
        _catalog(config).register_custom_type("notes", "My Notes")
        reloaded = _catalog(config)
        assert reloaded.recent == (Filetype("My Notes", ".notes"),)
        assert reloaded.custom_types() == (Filetype("My Notes", ".notes"),)

    def test_add_custom_type_prompts_for_extension_and_name(
        self,
        config: ScratchpadsConfig,
    ) -> None:
        prompter = ScriptedPrompter(texts=["http", ""])
        catalog = _catalog(config, prompter)

        filetype = catalog.add_custom_type()

        assert filetype == Filetype("HTTP", ".http")
        assert catalog.recent[0] == filetype
        assert "'HTTP'" in prompter.text_calls[1][0]

    def test_add_custom_type_empty_extension_cancels(
        self,
        config: ScratchpadsConfig,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        catalog = _catalog(config, ScriptedPrompter(texts=[""]))
        assert catalog.add_custom_type() is None
        assert "Canceled..." in capsys.readouterr().out
        assert not config.recent_filetypes_path.exists()

    def test_add_custom_type_dismissed_name_cancels(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config, ScriptedPrompter(texts=["http", None]))
        assert catalog.add_custom_type() is None
        assert catalog.recent == ()

    def test_add_custom_type_existing_extension_raises(self, config: ScratchpadsConfig) -> None:
        prompter = ScriptedPrompter(texts=["py"])
        catalog = _catalog(config, prompter)
        with pytest.raises(FiletypeExistsError):
            catalog.add_custom_type()
        assert len(prompter.text_calls) == 1

    def test_remove_custom_type_without_custom_types(
        self,
        config: ScratchpadsConfig,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        catalog = _catalog(config)
        catalog.remember(Filetype("Python", ".py"))
        assert catalog.remove_custom_type() is None
        assert "No custom filetypes to remove" in capsys.readouterr().out

    def test_remove_custom_type_offers_only_custom_entries(
        self,
        config: ScratchpadsConfig,
    ) -> None:
        prompter = ScriptedPrompter(picks=["NOTES (.notes)"])
        catalog = _catalog(config, prompter)
        catalog.remember(Filetype("Python", ".py"))
        catalog.register_custom_type("notes")

        removed = catalog.remove_custom_type()

        assert removed == Filetype("NOTES", ".notes")
        offered = [item.label for item in prompter.pick_calls[0][0]]
        assert offered == ["NOTES (.notes)"]
        assert catalog.recent == (Filetype("Python", ".py"),)
        assert load_recent(config.recent_filetypes_path) == catalog.recent

    def test_remove_custom_rejects_builtin(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        catalog.remember(Filetype("Python", ".py"))
        with pytest.raises(ValidationError):
            catalog.remove_custom("py")


class TestCatalogSelection:
    """The sectioned selection list and Recent promotion."""

    def test_items_have_recent_then_all_types(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        catalog.remember(Filetype("Python", ".py"))

        items = catalog.items()

        assert items[0].separator and items[0].label == RECENT_SECTION
        assert items[1].label == "Python (.py)"
        assert items[2].separator and items[2].label == ALL_TYPES_SECTION
        labels = [item.label for item in items[3:]]
        assert "Python (.py)" not in labels
        assert "JavaScript (.js)" in labels
        assert "PYI (.pyi)" in labels

    def test_items_are_cached_until_recent_changes(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        first = catalog.items()
        assert catalog.items() is first
        catalog.remember(Filetype("SQL", ".sql"))
        assert catalog.items() is not first

    def test_selecting_recent_entry_moves_it_to_head(self, config: ScratchpadsConfig) -> None:
        prompter = ScriptedPrompter(picks=["E1 (.e1)"])
        catalog = _catalog(config, prompter)
        catalog.register_custom_type("e1")
        catalog.register_custom_type("e2")

        selected = catalog.select_filetype()

        assert selected == Filetype("E1", ".e1")
        assert [ft.ext for ft in catalog.recent] == [".e1", ".e2"]
        assert load_recent(config.recent_filetypes_path) == catalog.recent

    def test_selecting_builtin_adds_it_to_recent(self, config: ScratchpadsConfig) -> None:
        prompter = ScriptedPrompter(picks=["TypeScript (.ts)"])
        catalog = _catalog(config, prompter)
        assert catalog.select_filetype("Pick one") == Filetype("TypeScript", ".ts")
        assert catalog.recent == (Filetype("TypeScript", ".ts"),)
        assert prompter.pick_calls[0][1] == "Pick one"

    def test_dismissed_selection_changes_nothing(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config, ScriptedPrompter(picks=[None]))
        assert catalog.select_filetype() is None
        assert catalog.recent == ()
        assert not config.recent_filetypes_path.exists()


class TestCatalogLookup:
    """find(), is_builtin() and get_default()."""

    def test_find_prefers_recent_entry(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        catalog.remember(Filetype("Py3", ".py"))
        assert catalog.find(".PY") == Filetype("Py3", ".py")

    def test_find_unknown_returns_none(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        assert catalog.find("nope") is None
        assert catalog.find("") is None

    def test_is_builtin(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(config)
        assert catalog.is_builtin("mjs")
        assert not catalog.is_builtin("notes")

    def test_get_default(self, config: ScratchpadsConfig) -> None:
        catalog = _catalog(replace(config, default_filetype="md"))
        assert catalog.get_default() == Filetype("Markdown", ".md")
        assert _catalog(config).get_default() is None
