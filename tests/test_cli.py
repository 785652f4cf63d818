from __future__ import annotations

from pathlib import Path

import pytest

import furigen.cli as cli
from furigen.nlp import NLPBackendUnavailableError
from furigen.service import FuriganaService
from furigen.settings import load_settings
from furigen.tokens import LexicalToken, WordType
from furigen.tools import UniDicStatus

_VOCAB = {
    "日本": ("ニホン", "日本"),
    "学校": ("ガッコウ", "学校"),
    "食べた": ("タベタ", "食べる"),
}


class _StubTokenizer:
    def tokenize(self, text: str) -> list[LexicalToken]:
        tokens: list[LexicalToken] = []
        pos = 0
        while pos < len(text):
            for word, (reading, basic_form) in _VOCAB.items():
                if text.startswith(word, pos):
                    tokens.append(LexicalToken(word, reading, basic_form))
                    pos += len(word)
                    break
            else:
                tokens.append(LexicalToken(text[pos], None, text[pos], WordType.UNKNOWN))
                pos += 1
        return tokens


@pytest.fixture
def stub_service(monkeypatch):
    monkeypatch.setattr(cli, "_build_service", lambda: FuriganaService(_StubTokenizer()))


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "note.md"
    path.write_text(text, encoding="utf-8")
    return path


def test_remove_prints_bare_text(tmp_path, capsys) -> None:
    path = _write(tmp_path, "<ruby>日本<rt>にほん</rt></ruby>と{学校|がっこう}")
    assert cli.main(["remove", str(path)]) == 0
    assert capsys.readouterr().out == "日本と学校"


def test_remove_in_place(tmp_path, capsys) -> None:
    path = _write(tmp_path, "日本《にほん》")
    assert cli.main(["remove", str(path), "-i"]) == 0
    assert path.read_text(encoding="utf-8") == "日本"
    assert capsys.readouterr().out == ""


def test_add_uses_settings_and_overrides(tmp_path, capsys, stub_service) -> None:
    path = _write(tmp_path, "日本と日本の学校")
    settings_path = tmp_path / "settings.json"

    assert cli.main(["add", str(path), "--settings", str(settings_path)]) == 0
    out = capsys.readouterr().out
    assert out.count("<ruby>日本<rt>にほん</rt></ruby>") == 2

    argv = [
        "add",
        str(path),
        "--settings",
        str(settings_path),
        "--scope",
        "ENTIRE_TEXT",
        "--syntax",
        "MARKDOWN",
        "--skip-level",
        "n5",
    ]
    assert cli.main(argv) == 0
    assert capsys.readouterr().out == "日本と日本の学校"

    argv = ["add", str(path), "--settings", str(settings_path), "--syntax", "MARKDOWN", "--exclude", "日本"]
    assert cli.main(argv) == 0
    assert capsys.readouterr().out == "日本と日本の{学校|がっこう}"
    assert not settings_path.exists()


def test_add_writes_output_file(tmp_path, stub_service) -> None:
    path = _write(tmp_path, "食べた")
    output = tmp_path / "out.md"
    cli.main(["add", str(path), "--settings", str(tmp_path / "s.json"), "-o", str(output)])
    assert output.read_text(encoding="utf-8") == "<ruby>食<rt>た</rt></ruby>べた"


def test_extract_lists_unique_words(tmp_path, capsys, stub_service) -> None:
    path = _write(tmp_path, "食べた日本と日本")
    assert cli.main(["extract", str(path)]) == 0
    assert capsys.readouterr().out == "食べる\n日本\n"
    assert cli.main(["extract", str(path), "--all"]) == 0
    assert capsys.readouterr().out == "食べる\n日本\n日本\n"


def test_exclude_updates_settings_and_strips(tmp_path, capsys, stub_service) -> None:
    path = _write(tmp_path, "<ruby>学校<rt>がっこう</rt></ruby>で食べた")
    settings_path = tmp_path / "settings.json"
    settings_path.write_text('{"customExclusionList": "日本"}', encoding="utf-8")

    assert cli.main(["exclude", str(path), "--settings", str(settings_path)]) == 0
    assert capsys.readouterr().out == "学校で食べた"
    assert load_settings(settings_path).custom_exclusion_list == ["日本", "学校", "食べる"]


def test_exclude_keep_furigana_writes_nothing(tmp_path, capsys, stub_service) -> None:
    path = _write(tmp_path, "日本")
    settings_path = tmp_path / "settings.json"
    assert cli.main(["exclude", str(path), "--settings", str(settings_path), "--keep-furigana"]) == 0
    assert capsys.readouterr().out == ""
    assert load_settings(settings_path).custom_exclusion_list == ["日本"]


def test_missing_backend_exits(tmp_path, monkeypatch) -> None:
    def _raise():
        raise NLPBackendUnavailableError("no analyzer")

    monkeypatch.setattr(cli, "FugashiTokenizer", _raise)
    path = _write(tmp_path, "日本")
    with pytest.raises(SystemExit, match="no analyzer"):
        cli.main(["extract", str(path)])


def test_missing_input_exits(tmp_path) -> None:
    with pytest.raises(SystemExit, match="Input file not found"):
        cli.main(["remove", str(tmp_path / "missing.md")])


def test_unknown_command_exits() -> None:
    with pytest.raises(SystemExit):
        cli.main(["translate"])


def test_unidic_status_without_install(monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "resolve_managed_unidic", lambda: UniDicStatus(None, None))
    monkeypatch.delenv("FURIGEN_UNIDIC_DIR", raising=False)
    assert cli.main(["tools", "unidic-status"]) == 0
    assert "No managed UniDic installation detected" in capsys.readouterr().out


def test_install_unidic_reports_status(monkeypatch, capsys, tmp_path) -> None:
    calls: dict[str, object] = {}

    def _fake_install(*, url, zip_path, force):
        calls.update(url=url, zip_path=zip_path, force=force)
        return UniDicStatus("3.1.1", tmp_path / "unidic")

    monkeypatch.setattr(cli, "ensure_unidic_installed", _fake_install)
    assert cli.main(["tools", "install-unidic", "--zip", "unidic.zip", "--force"]) == 0
    assert calls == {"url": cli.DEFAULT_UNIDIC_URL, "zip_path": "unidic.zip", "force": True}
    assert "UniDic 3.1.1 installed" in capsys.readouterr().out
