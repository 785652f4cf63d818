from __future__ import annotations

import argparse
import os
import sys
from importlib import metadata
from pathlib import Path

import tomllib
from rich.console import Console

from .jlpt import JlptLevel
from .nlp import FugashiTokenizer, NLPBackendUnavailableError
from .scopes import DedupScope
from .service import FuriganaService, unique_kanjis
from .settings import FuriganaSettings, default_settings_path, load_settings, save_settings
from .syntax import AnnotationSyntax
from .tools import DEFAULT_UNIDIC_URL, UniDicInstallError, ensure_unidic_installed, resolve_managed_unidic

_DEBUG_LOG = False
_console = Console(stderr=True)


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def _debug_log(message: str) -> None:
    if _DEBUG_LOG:
        _console.print(f"[dim][furigen debug] {message}[/dim]", highlight=False)


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - installed without a source tree
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("furigen")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"furigen {__version__}",
    )


def _add_io_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input_path",
        help="Markdown/text file to process, or '-' to read standard input.",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "-o",
        "--output",
        help="Write the result to this file instead of standard output.",
    )
    target.add_argument(
        "-i",
        "--in-place",
        action="store_true",
        help="Overwrite the input file with the result.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print resolved settings and other diagnostics to stderr.",
    )


def _add_settings_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--settings",
        help=(
            "Settings JSON file (default: $FURIGEN_CONFIG or "
            "~/.config/furigen/settings.json)."
        ),
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="furigen",
        description="Add or remove furigana over kanji in Japanese text.",
        epilog="Commands: add, remove, extract, exclude, tools. Use `furigen <command> --help`.",
    )
    _add_version_flag(ap)
    return ap


def build_add_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="furigen add",
        description="Annotate kanji with their readings.",
    )
    _add_version_flag(ap)
    _add_io_arguments(ap)
    _add_settings_argument(ap)
    ap.add_argument(
        "--scope",
        choices=[scope.value for scope in DedupScope],
        help="Annotate only the first occurrence of a word within this scope (default from settings).",
    )
    ap.add_argument(
        "--syntax",
        choices=[syntax.value for syntax in AnnotationSyntax],
        help="Annotation syntax to emit (default from settings).",
    )
    headings = ap.add_mutually_exclusive_group()
    headings.add_argument(
        "--exclude-headings",
        dest="exclude_headings",
        action="store_true",
        default=None,
        help="Leave markdown heading lines untouched.",
    )
    headings.add_argument(
        "--include-headings",
        dest="exclude_headings",
        action="store_false",
        help="Annotate markdown heading lines as well.",
    )
    ap.add_argument(
        "--skip-level",
        action="append",
        default=[],
        choices=[level.value for level in JlptLevel],
        metavar="LEVEL",
        help="Do not annotate kanji of this JLPT level (n5..n1). Repeatable.",
    )
    ap.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="WORD",
        help="Dictionary form to leave unannotated. Repeatable.",
    )
    return ap


def build_remove_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="furigen remove",
        description="Strip ruby, markdown and Japanese-novel furigana back to bare text.",
    )
    _add_version_flag(ap)
    _add_io_arguments(ap)
    return ap


def build_extract_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="furigen extract",
        description="List the dictionary forms of kanji words found in the input.",
    )
    _add_version_flag(ap)
    ap.add_argument("input_path", help="File to read, or '-' for standard input.")
    ap.add_argument(
        "--all",
        dest="keep_duplicates",
        action="store_true",
        help="Keep repeated words instead of listing each once.",
    )
    ap.add_argument("--debug", action="store_true", help="Print diagnostics to stderr.")
    return ap


def build_exclude_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="furigen exclude",
        description=(
            "Add every kanji word in the input to the custom exclusion list and "
            "strip its existing furigana."
        ),
    )
    _add_version_flag(ap)
    _add_io_arguments(ap)
    _add_settings_argument(ap)
    ap.add_argument(
        "--keep-furigana",
        action="store_true",
        help="Only update the exclusion list; leave the input text as it is.",
    )
    return ap


def build_tools_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="furigen tools", description="furigen helper utilities")
    _add_version_flag(ap)
    subparsers = ap.add_subparsers(dest="tool_cmd")

    install = subparsers.add_parser(
        "install-unidic",
        help="Download and register the full UniDic dictionary inside the current virtualenv.",
    )
    install.add_argument(
        "--zip",
        help="Path to a previously downloaded unidic-cwj zip archive.",
    )
    install.add_argument(
        "--url",
        default=DEFAULT_UNIDIC_URL,
        help="Download URL for the UniDic archive (default: %(default)s).",
    )
    install.add_argument(
        "--force",
        action="store_true",
        help="Reinstall even if the requested version already exists.",
    )

    subparsers.add_parser(
        "unidic-status",
        help="Show the currently detected UniDic dictionary path.",
    )
    return ap


def _read_input(input_path: str) -> str:
    if input_path == "-":
        return sys.stdin.read()
    path = Path(input_path).expanduser()
    if not path.is_file():
        raise SystemExit(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8")


def _write_output(args: argparse.Namespace, text: str) -> None:
    if getattr(args, "in_place", False):
        if args.input_path == "-":
            raise SystemExit("--in-place cannot be used with standard input.")
        Path(args.input_path).expanduser().write_text(text, encoding="utf-8")
        return
    output = getattr(args, "output", None)
    if output:
        Path(output).expanduser().write_text(text, encoding="utf-8")
        return
    sys.stdout.write(text)


def _settings_path(args: argparse.Namespace) -> Path:
    if getattr(args, "settings", None):
        return Path(args.settings).expanduser()
    return default_settings_path()


def _load_settings(args: argparse.Namespace) -> FuriganaSettings:
    path = _settings_path(args)
    try:
        settings = load_settings(path)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    _debug_log(f"settings from {path}: {settings.to_dict()}")
    return settings


def _build_service() -> FuriganaService:
    try:
        tokenizer = FugashiTokenizer()
    except NLPBackendUnavailableError as exc:
        raise SystemExit(str(exc)) from exc
    return FuriganaService(tokenizer)


def _apply_overrides(settings: FuriganaSettings, args: argparse.Namespace) -> FuriganaSettings:
    if args.scope:
        settings.scope = DedupScope.parse(args.scope)
    if args.syntax:
        settings.syntax = AnnotationSyntax.parse(args.syntax)
    if args.exclude_headings is not None:
        settings.exclude_headings = args.exclude_headings
    levels = dict(settings.jlpt_levels_to_include)
    for level in args.skip_level:
        levels[JlptLevel.parse(level).value] = False
    settings.jlpt_levels_to_include = levels
    if args.exclude:
        settings = settings.with_exclusions(args.exclude)
    return settings


def _run_add(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    settings = _apply_overrides(_load_settings(args), args)
    _debug_log(f"effective settings: {settings.to_dict()}")
    text = _read_input(args.input_path)
    service = _build_service()
    _write_output(args, service.generate_with_settings(text, settings))
    return 0


def _run_remove(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    text = _read_input(args.input_path)
    _write_output(args, FuriganaService().remove_furigana(text))
    return 0


def _run_extract(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    text = _read_input(args.input_path)
    words = _build_service().extract_kanjis(text)
    _debug_log(f"extracted {len(words)} word(s)")
    if not args.keep_duplicates:
        words = unique_kanjis(words)
    for word in words:
        print(word)
    return 0


def _run_exclude(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    settings = _load_settings(args)
    text = _read_input(args.input_path)
    service = _build_service()
    updated, new_text, words = service.exclude_kanjis(
        text,
        settings,
        strip_furigana=not args.keep_furigana,
    )
    added = [word for word in words if word not in settings.custom_exclusion_list]
    path = save_settings(updated, _settings_path(args))
    if added:
        _console.print(f"Added {len(added)} word(s) to the exclusion list in {path}")
    else:
        _console.print("No new kanji words found; exclusion list unchanged.")
    if not args.keep_furigana:
        _write_output(args, new_text)
    return 0


def _run_tools(args: argparse.Namespace) -> int:
    if not args.tool_cmd:
        raise SystemExit("A tools subcommand is required. Use --help for options.")

    if args.tool_cmd == "install-unidic":
        try:
            status = ensure_unidic_installed(url=args.url, zip_path=args.zip, force=args.force)
        except UniDicInstallError as exc:
            raise SystemExit(str(exc)) from exc
        print(f"UniDic {status.version} installed at {status.path}")
        print("Set FURIGEN_UNIDIC_DIR to override or rerun 'furigen tools install-unidic' to reinstall.")
        return 0

    if args.tool_cmd == "unidic-status":
        status = resolve_managed_unidic()
        if status.usable:
            print(f"Managed UniDic path: {status.path}")
            print(f"Version: {status.version or 'unknown'}")
        else:
            print("No managed UniDic installation detected; unidic-lite will be used.")
        env_dir = os.environ.get("FURIGEN_UNIDIC_DIR")
        if env_dir:
            print(f"FURIGEN_UNIDIC_DIR is set to: {env_dir}")
        return 0

    raise SystemExit(f"Unknown tools subcommand: {args.tool_cmd}")


_COMMANDS = {
    "add": (build_add_parser, _run_add),
    "remove": (build_remove_parser, _run_remove),
    "extract": (build_extract_parser, _run_extract),
    "exclude": (build_exclude_parser, _run_exclude),
    "tools": (build_tools_parser, _run_tools),
}


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] in _COMMANDS:
        build, run = _COMMANDS[argv[0]]
        return run(build().parse_args(argv[1:]))

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0
    parser.parse_args(argv)
    raise SystemExit(f"Unknown command: {argv[0]}")


if __name__ == "__main__":
    raise SystemExit(main())
