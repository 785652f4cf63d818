from __future__ import annotations

from enum import Enum
from functools import lru_cache
from importlib import resources
from typing import Mapping

__all__ = [
    "JlptLevel",
    "load_level_kanji",
    "build_kanji_skip_set",
]


class JlptLevel(str, Enum):
    N5 = "n5"
    N4 = "n4"
    N3 = "n3"
    N2 = "n2"
    N1 = "n1"

    @classmethod
    def parse(cls, value: "JlptLevel | str") -> "JlptLevel":
        if isinstance(value, JlptLevel):
            return value
        normalized = str(value).strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unknown JLPT level: {value!r}") from exc


@lru_cache(maxsize=None)
def load_level_kanji(level: JlptLevel | str) -> frozenset[str]:
    """Return the reference kanji set bundled for ``level``."""
    level = JlptLevel.parse(level)
    data = resources.files("furigen") / "data" / f"jlpt_{level.value}.txt"
    text = data.read_text(encoding="utf-8")
    return frozenset(ch for ch in text if not ch.isspace())


def build_kanji_skip_set(
    levels_to_include: Mapping[JlptLevel | str, bool] | None,
) -> frozenset[str]:
    """
    Collect the kanji to leave unannotated.

    Every level mapped to ``False`` contributes its whole reference set; levels
    missing from the mapping are treated as included.
    """
    skip: set[str] = set()
    if not levels_to_include:
        return frozenset()
    for key, included in levels_to_include.items():
        if included:
            continue
        skip.update(load_level_kanji(JlptLevel.parse(key)))
    return frozenset(skip)
