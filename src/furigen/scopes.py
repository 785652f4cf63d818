from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

__all__ = [
    "DedupScope",
    "ScopeUnit",
    "split_units",
    "join_units",
]

_SENTENCE_BOUNDARY = re.compile(r"(?<=[。！？])")


class DedupScope(str, Enum):
    """Span over which only the first occurrence of a word is annotated."""

    ALL = "ALL"
    ENTIRE_TEXT = "ENTIRE_TEXT"
    PARAGRAPH = "PARAGRAPH"
    SENTENCE = "SENTENCE"

    @classmethod
    def parse(cls, value: "DedupScope | str") -> "DedupScope":
        if isinstance(value, DedupScope):
            return value
        normalized = str(value).strip().upper().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unknown scope: {value!r}") from exc


@dataclass(slots=True)
class ScopeUnit:
    text: str
    separator: str = ""
    tracks_seen: bool = True
    passthrough: bool = False


def _split_lines(text: str) -> list[tuple[str, str]]:
    lines = text.split("\n")
    last = len(lines) - 1
    return [(line, "\n" if idx < last else "") for idx, line in enumerate(lines)]


def split_units(text: str, scope: DedupScope | str) -> list[ScopeUnit]:
    """
    Partition masked text into dedup units.

    Joining each unit's text with its separator reproduces ``text`` exactly.
    """
    scope = DedupScope.parse(scope)
    if scope is DedupScope.PARAGRAPH:
        return [ScopeUnit(line, separator) for line, separator in _split_lines(text)]
    if scope is DedupScope.SENTENCE:
        units: list[ScopeUnit] = []
        for line, separator in _split_lines(text):
            sentences = _SENTENCE_BOUNDARY.split(line)
            last = len(sentences) - 1
            for idx, sentence in enumerate(sentences):
                units.append(
                    ScopeUnit(
                        sentence,
                        separator if idx == last else "",
                        passthrough=not sentence.strip(),
                    )
                )
        return units
    return [ScopeUnit(text, tracks_seen=scope is not DedupScope.ALL)]


def join_units(units: Iterable[ScopeUnit], outputs: Iterable[str]) -> str:
    return "".join(output + unit.separator for unit, output in zip(units, outputs))
