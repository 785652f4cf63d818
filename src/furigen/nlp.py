from __future__ import annotations

import shlex
import warnings
from pathlib import Path
from typing import Optional

from .tokens import LexicalToken, TokenizerUnavailableWarning, WordType
from .tools import get_unidic_dicdir

__all__ = [
    "FugashiTokenizer",
    "NLPBackendUnavailableError",
    "load_tokenizer",
]

_READING_FIELDS = ("kana", "reading", "reading_form", "pron")


class NLPBackendUnavailableError(RuntimeError):
    """Raised when fugashi or a MeCab dictionary cannot be loaded."""


def _feature_value(feature, name: str) -> Optional[str]:
    if feature is None:
        return None
    if hasattr(feature, name):
        value = getattr(feature, name)
    else:
        try:
            value = feature[name]
        except (KeyError, IndexError, TypeError):
            value = None
    if not value or value == "*":
        return None
    return str(value)


def _clean_lemma(lemma: str) -> str:
    # UniDic tags loanword lemmas with their source spelling: "コーヒー-coffee".
    head, sep, tail = lemma.partition("-")
    if sep and head and tail.isascii():
        return head
    return lemma


class FugashiTokenizer:
    """Fugashi (MeCab) tokenizer yielding tokens whose surfaces rejoin to the input."""

    def __init__(self, dicdir: Path | None = None) -> None:
        try:
            from fugashi import GenericTagger, Tagger  # type: ignore
            from fugashi import fugashi as fugashi_core  # type: ignore
        except ImportError as exc:
            raise NLPBackendUnavailableError(
                "Furigana generation requires 'fugashi' (MeCab) to be installed."
            ) from exc

        dicdir = dicdir or get_unidic_dicdir()
        if dicdir:
            args = f"-d {shlex.quote(str(dicdir))}"
            feature_wrapper = getattr(fugashi_core, "UnidicFeatures29", None)
            try:
                if feature_wrapper is not None:
                    self._tagger = GenericTagger(args, feature_wrapper)
                else:
                    self._tagger = GenericTagger(args)
            except RuntimeError as exc:
                raise NLPBackendUnavailableError(
                    f"Failed to initialize UniDic dictionary at '{dicdir}': {exc}"
                ) from exc
        else:
            try:
                self._tagger = Tagger()
            except RuntimeError as exc:
                raise NLPBackendUnavailableError(
                    "No MeCab dictionary found. Install 'unidic-lite' or run "
                    "'furigen tools install-unidic'."
                ) from exc

    def tokenize(self, text: str) -> list[LexicalToken]:
        tokens: list[LexicalToken] = []
        if not text:
            return tokens
        pos = 0
        for raw in self._tagger(text):
            surface = raw.surface
            if not surface:
                continue
            start = text.find(surface, pos)
            if start == -1:
                # Whatever MeCab could not place is emitted below as a gap.
                continue
            if start > pos:
                tokens.append(_gap_token(text[pos:start]))
            tokens.append(self._convert(raw, surface))
            pos = start + len(surface)
        if pos < len(text):
            tokens.append(_gap_token(text[pos:]))
        return tokens

    def _convert(self, raw, surface: str) -> LexicalToken:
        feature = getattr(raw, "feature", None)
        reading = None
        for name in _READING_FIELDS:
            reading = _feature_value(feature, name)
            if reading:
                break
        base = _feature_value(feature, "orthBase")
        lemma = _feature_value(feature, "lemma")
        word_type = WordType.UNKNOWN if getattr(raw, "is_unk", False) else WordType.KNOWN
        return LexicalToken(
            surface=surface,
            reading=reading,
            basic_form=base or (_clean_lemma(lemma) if lemma else surface),
            word_type=word_type,
        )


def _gap_token(text: str) -> LexicalToken:
    return LexicalToken(surface=text, reading=None, basic_form=text, word_type=WordType.UNKNOWN)


def load_tokenizer(dicdir: Path | None = None) -> FugashiTokenizer | None:
    """Build the tokenizer, or warn and return ``None`` when it cannot be loaded."""
    try:
        return FugashiTokenizer(dicdir)
    except NLPBackendUnavailableError as exc:
        warnings.warn(str(exc), TokenizerUnavailableWarning, stacklevel=2)
        return None
