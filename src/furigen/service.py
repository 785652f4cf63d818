from __future__ import annotations

import warnings
from typing import AbstractSet, Iterable, Mapping

from .aligner import annotate_token
from .jlpt import JlptLevel, build_kanji_skip_set
from .kana import contains_kanji
from .masking import mask_exclusions
from .scopes import DedupScope, ScopeUnit, join_units, split_units
from .settings import FuriganaSettings
from .syntax import AnnotationSyntax, remove_furigana
from .tokens import Tokenizer, TokenizerUnavailableWarning

__all__ = [
    "FuriganaService",
    "unique_kanjis",
]


def unique_kanjis(words: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(words))


def _warn_unavailable(action: str) -> None:
    warnings.warn(
        f"Furigana tokenizer is not ready; {action}.",
        TokenizerUnavailableWarning,
        stacklevel=3,
    )


class FuriganaService:
    """
    Adds and removes furigana over a tokenizer supplied by the caller.

    The service keeps no per-call state: dedup sets, placeholders and the
    kanji skip set live only for the duration of one call, so a single
    instance can be shared freely.
    """

    def __init__(self, tokenizer: Tokenizer | None = None) -> None:
        self._tokenizer = tokenizer

    @property
    def is_ready(self) -> bool:
        return self._tokenizer is not None

    def generate_furigana(
        self,
        text: str,
        jlpt_levels: Mapping[JlptLevel | str, bool] | None = None,
        scope: DedupScope | str = DedupScope.ALL,
        exclude_headings: bool = True,
        custom_exclusions: Iterable[str] = (),
        syntax: AnnotationSyntax | str = AnnotationSyntax.RUBY,
    ) -> str:
        if self._tokenizer is None:
            _warn_unavailable("text left unchanged")
            return text
        scope = DedupScope.parse(scope)
        syntax = AnnotationSyntax.parse(syntax)
        kanji_skip_set = build_kanji_skip_set(jlpt_levels)
        exclusions = frozenset(custom_exclusions)

        masked = mask_exclusions(text, exclude_headings)
        units = split_units(masked.text, scope)
        outputs = [
            self._process_unit(unit, kanji_skip_set, exclusions, syntax) for unit in units
        ]
        return masked.restore(join_units(units, outputs))

    def generate_with_settings(self, text: str, settings: FuriganaSettings) -> str:
        return self.generate_furigana(
            text,
            settings.jlpt_levels_to_include,
            settings.scope,
            settings.exclude_headings,
            settings.custom_exclusion_list,
            settings.syntax,
        )

    def _process_unit(
        self,
        unit: ScopeUnit,
        kanji_skip_set: AbstractSet[str],
        custom_exclusions: AbstractSet[str],
        syntax: AnnotationSyntax,
    ) -> str:
        if unit.passthrough or not unit.text:
            return unit.text
        seen: set[str] | None = set() if unit.tracks_seen else None
        tokens = self._tokenizer.tokenize(unit.text)
        return "".join(
            annotate_token(
                token,
                seen=seen,
                kanji_skip_set=kanji_skip_set,
                custom_exclusions=custom_exclusions,
                syntax=syntax,
            )
            for token in tokens
        )

    def remove_furigana(self, text: str) -> str:
        return remove_furigana(text)

    def extract_kanjis(self, text: str) -> list[str]:
        """Dictionary forms containing kanji, in order of appearance (duplicates kept)."""
        if self._tokenizer is None:
            _warn_unavailable("no words extracted")
            return []
        return [
            token.basic_form
            for token in self._tokenizer.tokenize(text)
            if contains_kanji(token.basic_form)
        ]

    def exclude_kanjis(
        self,
        text: str,
        settings: FuriganaSettings,
        *,
        strip_furigana: bool = True,
    ) -> tuple[FuriganaSettings, str, list[str]]:
        """
        Add every kanji word in ``text`` to the custom exclusion list.

        Returns the updated settings, the text (stripped of furigana when
        requested) and the newly extracted words.
        """
        bare = remove_furigana(text)
        words = unique_kanjis(self.extract_kanjis(bare))
        updated = settings.with_exclusions(words)
        return updated, bare if strip_furigana else text, words
