from __future__ import annotations

import json

import pytest

from furigen.jlpt import JlptLevel
from furigen.scopes import DedupScope
from furigen.settings import (
    FuriganaSettings,
    default_settings_path,
    load_settings,
    merge_exclusion_list,
    parse_exclusion_list,
    save_settings,
    settings_from_dict,
)
from furigen.syntax import AnnotationSyntax


def test_defaults() -> None:
    settings = FuriganaSettings()
    assert settings.scope is DedupScope.ALL
    assert settings.syntax is AnnotationSyntax.RUBY
    assert settings.exclude_headings is True
    assert settings.jlpt_levels_to_include == {level.value: True for level in JlptLevel}
    assert settings.custom_exclusion_list == []


def test_save_and_load_round_trip(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = FuriganaSettings(
        scope=DedupScope.SENTENCE,
        syntax=AnnotationSyntax.JAPANESE_NOVEL,
        exclude_headings=False,
        custom_exclusion_list=["日本", "食べる"],
    )
    settings.jlpt_levels_to_include["n5"] = False

    assert save_settings(settings, path) == path
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["syntax"] == "JAPANESE-NOVEL"
    assert "日本" in path.read_text(encoding="utf-8")
    assert load_settings(path) == settings


def test_plugin_style_keys_are_accepted() -> None:
    settings = settings_from_dict(
        {
            "scope": "PARAGRAPH",
            "syntax": "MARKDOWN",
            "excludeHeadings": False,
            "jlptLevelsToInclude": {"n5": False, "n9": False},
            "customExclusionList": "日本\n\n  東京 \n",
            "unrelated": 1,
        }
    )
    assert settings.scope is DedupScope.PARAGRAPH
    assert settings.syntax is AnnotationSyntax.MARKDOWN
    assert settings.exclude_headings is False
    assert settings.jlpt_levels_to_include["n5"] is False
    assert settings.jlpt_levels_to_include["n1"] is True
    assert settings.custom_exclusion_list == ["日本", "東京"]


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_settings(tmp_path / "absent.json") == FuriganaSettings()


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_malformed_file_raises(tmp_path, content: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)


def test_default_path_honors_env(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("FURIGEN_CONFIG", str(tmp_path / "custom.json"))
    assert default_settings_path() == tmp_path / "custom.json"


def test_exclusion_list_helpers() -> None:
    assert parse_exclusion_list(" 日本 \n\n東京\n  \n") == ["日本", "東京"]
    assert merge_exclusion_list(["東京", "日本"], ["日本", " 学校 ", "", "東京"]) == [
        "東京",
        "日本",
        "学校",
    ]
    settings = FuriganaSettings(custom_exclusion_list=["日本"])
    assert settings.with_exclusions(["学校"]).custom_exclusion_list == ["日本", "学校"]
