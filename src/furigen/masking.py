from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache

__all__ = [
    "PLACEHOLDER_PREFIX",
    "MaskedText",
    "make_placeholder",
    "is_placeholder",
    "mask_exclusions",
    "restore_placeholders",
]

PLACEHOLDER_PREFIX = "__EXCLUDED_PLACEHOLDER_"
_PLACEHOLDER_RE = re.compile(r"__EXCLUDED_PLACEHOLDER_(\d+)__")

_KANJI = r"々一-龯"

# Leftmost match wins; at equal positions the earlier entry wins.
_EXCLUSION_CATALOG: tuple[tuple[str, str], ...] = (
    # Placeholder-shaped input is masked too, so restoration never confuses it with ours.
    ("placeholder", r"__EXCLUDED_PLACEHOLDER_\d+__"),
    ("front_matter", r"\A---[ \t]*\n(?s:.*?)\n---[ \t]*$"),
    ("code_block", r"```(?s:.*?)```"),
    ("heading", r"^#{1,6}[ \t].*$"),
    ("callout_title", r"^[ \t]*>[ \t]*\[![^\]\n]+\][+-]?.*$"),
    ("ruby", r"<ruby>.*?</rt></ruby>"),
    ("markdown_ruby", r"\{[^{}\n]*?\|[^{}\n]*?\}"),
    ("novel_ruby", rf"[|｜][^|｜《》\n]+《[^《》\n]*》|[{_KANJI}]+《[^《》\n]*》"),
    ("wiki_link", r"!?\[\[.*?\]\]"),
    ("footnote", r"\[\^[^\]\n]*\]"),
    ("markdown_link", r"!?\[[^\]\n]*\]\([^)\n]*\)"),
    ("url", r"https?://\S+"),
    ("inline_code", r"`[^`\n]+`"),
    ("templater", r"<%.*?%>"),
    ("comment", r"%%.*?%%"),
    ("tag", r"#[\w/-]+"),
    ("emphasis", r"\*{1,3}|_{1,3}|~~|=="),
)


@lru_cache(maxsize=2)
def _exclusion_pattern(exclude_headings: bool) -> re.Pattern[str]:
    parts = [
        f"(?:{pattern})"
        for name, pattern in _EXCLUSION_CATALOG
        if exclude_headings or name != "heading"
    ]
    return re.compile("|".join(parts), re.MULTILINE)


def make_placeholder(index: int) -> str:
    return f"{PLACEHOLDER_PREFIX}{index}__"


def is_placeholder(text: str) -> bool:
    return text.startswith(PLACEHOLDER_PREFIX)


@dataclass(slots=True)
class MaskedText:
    """Masked text plus the original spans, indexed by placeholder number."""

    text: str
    placeholders: list[str] = field(default_factory=list)

    def restore(self, text: str | None = None) -> str:
        return restore_placeholders(self.text if text is None else text, self.placeholders)


def mask_exclusions(text: str, exclude_headings: bool = False) -> MaskedText:
    """
    Replace every span that must survive untouched with a placeholder.

    Spans are numbered in order of appearance. Existing annotations, links,
    code, front matter, tags, comments, formatting markers and (optionally)
    heading lines are all masked whole.
    """
    placeholders: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        placeholders.append(match.group(0))
        return make_placeholder(len(placeholders) - 1)

    masked = _exclusion_pattern(bool(exclude_headings)).sub(_replace, text)
    return MaskedText(text=masked, placeholders=placeholders)


def restore_placeholders(text: str, placeholders: list[str]) -> str:
    if not placeholders:
        return text

    def _restore(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index < len(placeholders):
            return placeholders[index]
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_restore, text)
