from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Mapping

from .jlpt import JlptLevel
from .scopes import DedupScope
from .syntax import AnnotationSyntax

__all__ = [
    "FuriganaSettings",
    "default_settings_path",
    "settings_from_dict",
    "load_settings",
    "save_settings",
    "parse_exclusion_list",
    "merge_exclusion_list",
]

_CONFIG_ENV = "FURIGEN_CONFIG"


def _all_levels_included() -> dict[str, bool]:
    return {level.value: True for level in JlptLevel}


@dataclass(slots=True)
class FuriganaSettings:
    """Caller-owned options for furigana generation."""

    scope: DedupScope = DedupScope.ALL
    syntax: AnnotationSyntax = AnnotationSyntax.RUBY
    exclude_headings: bool = True
    jlpt_levels_to_include: dict[str, bool] = field(default_factory=_all_levels_included)
    custom_exclusion_list: list[str] = field(default_factory=list)

    def with_exclusions(self, words: Iterable[str]) -> "FuriganaSettings":
        merged = merge_exclusion_list(self.custom_exclusion_list, words)
        return replace(self, custom_exclusion_list=merged)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["scope"] = self.scope.value
        payload["syntax"] = self.syntax.value
        return payload


def default_settings_path() -> Path:
    env_path = os.environ.get(_CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "furigen" / "settings.json"


def parse_exclusion_list(text: str) -> list[str]:
    """Split a one-word-per-line exclusion list, dropping blank lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def merge_exclusion_list(existing: Iterable[str], additions: Iterable[str]) -> list[str]:
    merged = dict.fromkeys(word for word in existing if word)
    for word in additions:
        word = word.strip()
        if word:
            merged.setdefault(word, None)
    return list(merged)


def _coerce_levels(value: object) -> dict[str, bool]:
    levels = _all_levels_included()
    if not isinstance(value, Mapping):
        return levels
    for key, included in value.items():
        try:
            level = JlptLevel.parse(key)
        except ValueError:
            continue
        levels[level.value] = bool(included)
    return levels


def _coerce_exclusions(value: object) -> list[str]:
    if isinstance(value, str):
        return parse_exclusion_list(value)
    if isinstance(value, list):
        return merge_exclusion_list([], (item for item in value if isinstance(item, str)))
    return []


def settings_from_dict(data: Mapping[str, Any] | None) -> FuriganaSettings:
    """Build settings from a persisted mapping; unknown keys are ignored."""
    settings = FuriganaSettings()
    if not data:
        return settings
    # camelCase keys are what the Obsidian plugin persisted in data.json.
    scope = data.get("scope")
    if scope is not None:
        settings.scope = DedupScope.parse(scope)
    syntax = data.get("syntax")
    if syntax is not None:
        settings.syntax = AnnotationSyntax.parse(syntax)
    exclude_headings = data.get("exclude_headings", data.get("excludeHeadings"))
    if exclude_headings is not None:
        settings.exclude_headings = bool(exclude_headings)
    levels = data.get("jlpt_levels_to_include", data.get("jlptLevelsToInclude"))
    if levels is not None:
        settings.jlpt_levels_to_include = _coerce_levels(levels)
    exclusions = data.get("custom_exclusion_list", data.get("customExclusionList"))
    if exclusions is not None:
        settings.custom_exclusion_list = _coerce_exclusions(exclusions)
    return settings


def load_settings(path: Path | None = None) -> FuriganaSettings:
    settings_path = path or default_settings_path()
    if not settings_path.exists():
        return FuriganaSettings()
    try:
        payload = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Failed to parse settings file: {settings_path}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{settings_path.name} must contain a JSON object.")
    return settings_from_dict(payload)


def save_settings(settings: FuriganaSettings, path: Path | None = None) -> Path:
    settings_path = path or default_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(
        json.dumps(settings.to_dict(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return settings_path
