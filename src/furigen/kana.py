from __future__ import annotations

__all__ = [
    "is_kanji",
    "contains_kanji",
    "katakana_to_hiragana",
]

_ITERATION_MARK = "々"


def is_kanji(ch: str) -> bool:
    if not ch:
        return False
    code = ord(ch[0])
    return 0x4E00 <= code <= 0x9FAF or ch == _ITERATION_MARK


def contains_kanji(text: str) -> bool:
    return any(is_kanji(ch) for ch in text)


def katakana_to_hiragana(text: str) -> str:
    """Shift katakana (U+30A1-U+30FA) into the hiragana block."""
    result = []
    for ch in text:
        code = ord(ch)
        if 0x30A1 <= code <= 0x30FA:
            result.append(chr(code - 0x60))
        else:
            result.append(ch)
    return "".join(result)
