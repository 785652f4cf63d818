from __future__ import annotations

from typing import AbstractSet, Optional

from .kana import contains_kanji, is_kanji, katakana_to_hiragana
from .masking import is_placeholder
from .syntax import AnnotationSyntax, format_annotation
from .tokens import LexicalToken, WordType

__all__ = [
    "Segment",
    "align_reading",
    "render_segments",
    "annotate_token",
]

# (text, reading); reading is None for literal fragments.
Segment = tuple[str, Optional[str]]

_ITERATION_MARK = "々"


def align_reading(surface: str, reading: str) -> list[Segment]:
    """
    Split ``reading`` (hiragana) across the kanji runs of ``surface``.

    Each kanji run takes the reading up to the next occurrence of the kana
    that follows it in the surface. A run at the end of the surface, or one
    whose following kana cannot be found, takes the rest of the reading.
    Non-kanji characters are copied and advance the reading cursor when they
    match it, which keeps later runs aligned across okurigana.
    """
    segments: list[Segment] = []
    literal: list[str] = []
    surface_index = 0
    reading_index = 0
    length = len(surface)
    while surface_index < length:
        if is_kanji(surface[surface_index]):
            start = surface_index
            while surface_index < length and is_kanji(surface[surface_index]):
                surface_index += 1
            run = surface[start:surface_index]
            found = -1
            if surface_index < length:
                next_kana = katakana_to_hiragana(surface[surface_index])
                found = reading.find(next_kana, reading_index)
            if found != -1:
                part = reading[reading_index:found]
                reading_index = found
            else:
                part = reading[reading_index:]
                reading_index = len(reading)
            if literal:
                segments.append(("".join(literal), None))
                literal = []
            segments.append((run, part))
            continue
        ch = surface[surface_index]
        literal.append(ch)
        if reading_index < len(reading) and reading[reading_index] == katakana_to_hiragana(ch):
            reading_index += 1
        surface_index += 1
    if literal:
        segments.append(("".join(literal), None))
    return segments


def render_segments(segments: list[Segment], syntax: AnnotationSyntax) -> str:
    pieces: list[str] = []
    for text, reading in segments:
        if reading is None or text == reading:
            pieces.append(text)
        else:
            pieces.append(format_annotation(text, reading, syntax))
    return "".join(pieces)


def _all_kanji_skipped(surface: str, kanji_skip_set: AbstractSet[str]) -> bool:
    kanji_chars = [ch for ch in surface if is_kanji(ch) and ch != _ITERATION_MARK]
    return bool(kanji_chars) and all(ch in kanji_skip_set for ch in kanji_chars)


def annotate_token(
    token: LexicalToken,
    *,
    seen: set[str] | None = None,
    kanji_skip_set: AbstractSet[str] = frozenset(),
    custom_exclusions: AbstractSet[str] = frozenset(),
    syntax: AnnotationSyntax = AnnotationSyntax.RUBY,
) -> str:
    """
    Return the token's surface, annotated when it passes every filter.

    ``seen`` is the active dedup set for the current scope unit; ``None``
    disables deduplication entirely. A token is recorded in ``seen`` before
    it is rendered so later occurrences in the same unit stay bare.
    """
    surface = token.surface
    if is_placeholder(surface):
        return surface
    if token.basic_form in custom_exclusions:
        return surface
    if not contains_kanji(surface):
        return surface
    if not token.reading or token.word_type == WordType.UNKNOWN:
        return surface
    if seen is not None and surface in seen:
        return surface
    if _all_kanji_skipped(surface, kanji_skip_set):
        return surface
    hiragana_reading = katakana_to_hiragana(token.reading)
    if surface == hiragana_reading:
        return surface
    if seen is not None:
        seen.add(surface)
    return render_segments(align_reading(surface, hiragana_reading), syntax)
