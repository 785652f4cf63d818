from __future__ import annotations

import pytest

from furigen.jlpt import JlptLevel, build_kanji_skip_set, load_level_kanji


def test_all_levels_included_skips_nothing() -> None:
    assert build_kanji_skip_set({level: True for level in JlptLevel}) == frozenset()
    assert build_kanji_skip_set(None) == frozenset()


def test_excluded_level_contributes_its_kanji() -> None:
    skip = build_kanji_skip_set({"n5": False, "n4": True})
    assert {"学", "校", "日", "本"} <= skip
    assert skip == load_level_kanji(JlptLevel.N5)


def test_excluded_levels_are_unioned() -> None:
    skip = build_kanji_skip_set({JlptLevel.N5: False, JlptLevel.N1: False})
    assert skip == load_level_kanji("n5") | load_level_kanji("n1")


def test_reference_sets_hold_only_kanji() -> None:
    for level in JlptLevel:
        kanji = load_level_kanji(level)
        assert kanji
        assert all("一" <= ch <= "龯" for ch in kanji)


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_kanji_skip_set({"n6": False})


def test_n1_covers_advanced_joyo_kanji() -> None:
    n1 = load_level_kanji(JlptLevel.N1)
    assert set("隙挿餌賄嘆弔堕唆虞謁塡璽爵嗅拶憬慄畏") <= n1
    assert len(n1) > 1100


def test_levels_are_disjoint() -> None:
    levels = [load_level_kanji(level) for level in JlptLevel]
    assert sum(len(kanji) for kanji in levels) == len(frozenset().union(*levels))
