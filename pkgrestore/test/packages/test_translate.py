"""Tests for pkgrestore.packages.translate module."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pkgrestore.core.result import Err, Ok
from pkgrestore.packages.translate import (
    TranslationRule,
    TranslationTable,
    load_translations,
    parse_rules,
)
from pkgrestore.platform.detection import Platform


@pytest.fixture(scope="module")
def shipped() -> TranslationTable:
    result = load_translations()
    assert isinstance(result, Ok)
    return result.value


class TestShippedTable:
    def test_nodejs(self, shipped: TranslationTable) -> None:
        assert shipped.translate(Platform.WSL, "nodejs") == ["nodejs", "npm"]
        assert shipped.translate(Platform.ARCH, "nodejs") == ["nodejs", "npm"]
        assert shipped.translate(Platform.MAC, "nodejs") == ["node"]

    def test_python_pip(self, shipped: TranslationTable) -> None:
        assert shipped.translate(Platform.WSL, "python-pip") == ["python3-pip"]
        assert shipped.translate(Platform.ARCH, "python-pip") == ["python-pip"]
        assert shipped.translate(Platform.MAC, "python-pip") == ["python"]

    def test_not_needed_on_mac(self, shipped: TranslationTable) -> None:
        assert shipped.translate(Platform.MAC, "fontconfig") == []
        # No rule for Linux hosts: identity.
        assert shipped.translate(Platform.WSL, "fontconfig") == ["fontconfig"]

    def test_lookup_is_case_insensitive(self, shipped: TranslationTable) -> None:
        assert shipped.translate(Platform.MAC, " NodeJS ") == ["node"]

    def test_unknown_name_is_identity(self, shipped: TranslationTable) -> None:
        assert shipped.translate(Platform.ARCH, "neovim") == ["neovim"]


class TestTranslationTable:
    def test_later_rules_override(self) -> None:
        table = TranslationTable(
            [
                TranslationRule(Platform.MAC, "nodejs", ("node",)),
                TranslationRule(Platform.MAC, "NodeJS", ("node", "npm")),
            ]
        )
        assert table.translate(Platform.MAC, "nodejs") == ["node", "npm"]
        assert len(table) == 1

    def test_merged_layers_user_rules(self) -> None:
        base = TranslationTable([TranslationRule(Platform.WSL, "fd", ("fd-find",))])
        merged = base.merged([TranslationRule(Platform.WSL, "fd", ("fd-musl",))])
        assert merged.translate(Platform.WSL, "fd") == ["fd-musl"]
        # The base table is unchanged.
        assert base.translate(Platform.WSL, "fd") == ["fd-find"]

    def test_rules_roundtrip_into_new_table(self) -> None:
        table = TranslationTable([TranslationRule(Platform.ARCH, "x", ("y",))])
        assert TranslationTable(table.rules()).translate(Platform.ARCH, "x") == ["y"]


@given(st.text(min_size=1, max_size=30).filter(lambda s: s.strip()), st.sampled_from(list(Platform)))
def test_names_without_rules_translate_to_themselves(name: str, platform: Platform) -> None:
    assert TranslationTable().translate(platform, name) == [name.strip()]


class TestParseRules:
    def test_string_and_list_values(self) -> None:
        result = parse_rules(
            {"translations": {"nodejs": {"mac": "node", "wsl": ["nodejs", "npm"]}}}
        )
        assert isinstance(result, Ok)
        assert TranslationRule(Platform.MAC, "nodejs", ("node",)) in result.value
        assert TranslationRule(Platform.WSL, "nodejs", ("nodejs", "npm")) in result.value

    def test_empty_list(self) -> None:
        result = parse_rules({"translations": {"fontconfig": {"mac": []}}})
        assert result == Ok([TranslationRule(Platform.MAC, "fontconfig", ())])

    def test_no_section(self) -> None:
        assert parse_rules({}) == Ok([])

    def test_section_not_a_table(self) -> None:
        result = parse_rules({"translations": ["nodejs"]})
        assert isinstance(result, Err)

    def test_entry_not_a_table(self) -> None:
        result = parse_rules({"translations": {"nodejs": "node"}})
        assert isinstance(result, Err)
        assert "translations.nodejs" in result.error.message

    def test_unknown_platform(self) -> None:
        result = parse_rules({"translations": {"nodejs": {"freebsd": "node"}}})
        assert isinstance(result, Err)
        assert "freebsd" in result.error.message

    def test_bad_value(self) -> None:
        result = parse_rules({"translations": {"nodejs": {"mac": ["node", 3]}}})
        assert isinstance(result, Err)


class TestLoadTranslations:
    def test_custom_file(self, tmp_path: Path) -> None:
        path = tmp_path / "t.toml"
        path.write_text('[translations.fd]\nwsl = "fd-find"\n', encoding="utf-8")

        result = load_translations(path)

        assert isinstance(result, Ok)
        assert result.value.translate(Platform.WSL, "fd") == ["fd-find"]

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_translations(tmp_path / "absent.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "t.toml"
        path.write_text("[translations.fd\n", encoding="utf-8")
        assert isinstance(load_translations(path), Err)
