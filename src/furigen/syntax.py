from __future__ import annotations

import re
from enum import Enum

__all__ = [
    "AnnotationSyntax",
    "format_annotation",
    "remove_furigana",
]


class AnnotationSyntax(str, Enum):
    RUBY = "RUBY"
    MARKDOWN = "MARKDOWN"
    JAPANESE_NOVEL = "JAPANESE-NOVEL"

    @classmethod
    def parse(cls, value: "AnnotationSyntax | str") -> "AnnotationSyntax":
        if isinstance(value, AnnotationSyntax):
            return value
        normalized = str(value).strip().upper().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unknown furigana syntax: {value!r}") from exc


def format_annotation(run: str, reading: str, syntax: AnnotationSyntax) -> str:
    if syntax is AnnotationSyntax.MARKDOWN:
        return f"{{{run}|{reading}}}"
    if syntax is AnnotationSyntax.JAPANESE_NOVEL:
        return f"{run}《{reading}》"
    return f"<ruby>{run}<rt>{reading}</rt></ruby>"


# One capture group per branch; exactly one participates in any match.
_ANNOTATION_RE = re.compile(
    r"<ruby>(.*?)<rt>.*?</rt></ruby>"
    r"|\{([^{}|\n]+?)\|[^{}\n]*?\}"
    r"|[|｜]([^|｜《》\n]+)《[^《》\n]*?》"
    r"|([々一-龯]+)《[^《》\n]*?》"
)


def _base_text(match: re.Match[str]) -> str:
    for group in match.groups():
        if group is not None:
            return group
    return ""


def remove_furigana(text: str) -> str:
    """Strip ruby, markdown and Japanese-novel annotations down to their base text."""
    return _ANNOTATION_RE.sub(_base_text, text)
