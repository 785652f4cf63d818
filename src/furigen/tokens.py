from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

__all__ = [
    "WordType",
    "LexicalToken",
    "Tokenizer",
    "TokenizerUnavailableWarning",
]


class WordType(str, Enum):
    KNOWN = "KNOWN"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class LexicalToken:
    """
    One morphologically segmented unit of input.

    ``surface`` is the text exactly as written, ``basic_form`` the dictionary
    (lemma) form used for exclusion matching, and ``reading`` the analyzer's
    kana transcription of the surface, which may be missing.
    """

    surface: str
    reading: str | None
    basic_form: str
    word_type: WordType = WordType.KNOWN


@runtime_checkable
class Tokenizer(Protocol):
    """Anything that segments text into tokens whose surfaces rejoin to the input."""

    def tokenize(self, text: str) -> list[LexicalToken]:
        ...


class TokenizerUnavailableWarning(RuntimeWarning):
    """Issued when an operation needs the tokenizer but none is loaded."""
