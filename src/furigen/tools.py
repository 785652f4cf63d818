from __future__ import annotations

import os
import shutil
import sys
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path

import requests
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn

__all__ = [
    "DEFAULT_UNIDIC_URL",
    "UNIDIC_VERSION",
    "UniDicInstallError",
    "UniDicStatus",
    "managed_unidic_dir",
    "ensure_unidic_installed",
    "resolve_managed_unidic",
    "get_unidic_dicdir",
]

UNIDIC_VERSION = "3.1.1"
DEFAULT_UNIDIC_URL = (
    f"https://clrd.ninjal.ac.jp/unidic_archive/cwj/{UNIDIC_VERSION}/unidic-cwj-{UNIDIC_VERSION}-full.zip"
)
_UNIDIC_DIR_ENV = "FURIGEN_UNIDIC_DIR"


class UniDicInstallError(RuntimeError):
    pass


@dataclass(slots=True)
class UniDicStatus:
    version: str | None
    path: Path | None

    @property
    def usable(self) -> bool:
        return self.path is not None and _is_dicdir(self.path)


def _is_dicdir(path: Path) -> bool:
    return (path / "dicrc").is_file()


def managed_unidic_dir() -> Path:
    """Where ``furigen tools install-unidic`` puts the dictionary for this environment."""
    return Path(sys.prefix) / "share" / "furigen" / f"unidic-{UNIDIC_VERSION}"


def ensure_unidic_installed(
    *,
    url: str | None = DEFAULT_UNIDIC_URL,
    zip_path: str | None = None,
    force: bool = False,
) -> UniDicStatus:
    """Unpack UniDic into :func:`managed_unidic_dir`, from a local zip or ``url``."""
    target = managed_unidic_dir()
    if _is_dicdir(target) and not force:
        return UniDicStatus(UNIDIC_VERSION, target)

    if zip_path is not None:
        archive = Path(zip_path).expanduser()
        if not archive.is_file():
            raise UniDicInstallError(f"Archive not found: {archive}")
        _unpack(archive, target)
    elif url:
        with tempfile.TemporaryDirectory() as tmpdir:
            archive = _download(url, Path(tmpdir) / "unidic.zip")
            _unpack(archive, target)
    else:
        raise UniDicInstallError("Either a zip archive or a download URL is required.")
    return UniDicStatus(UNIDIC_VERSION, target)


def _download(url: str, destination: Path) -> Path:
    try:
        response = requests.get(url, stream=True, timeout=60)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise UniDicInstallError(f"Failed to download UniDic from {url}: {exc}") from exc

    length = response.headers.get("Content-Length")
    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        DownloadColumn(),
        transient=True,
    )
    with destination.open("wb") as handle, progress:
        task = progress.add_task("UniDic", total=int(length) if length and length.isdigit() else None)
        for block in response.iter_content(chunk_size=1 << 20):
            handle.write(block)
            progress.advance(task, len(block))
    return destination


def _unpack(archive: Path, target: Path) -> None:
    try:
        zf = zipfile.ZipFile(archive)
    except zipfile.BadZipFile as exc:
        raise UniDicInstallError(f"Not a zip archive: {archive}") from exc
    with zf, tempfile.TemporaryDirectory() as tmpdir:
        zf.extractall(tmpdir)
        dicrc = next(Path(tmpdir).rglob("dicrc"), None)
        if dicrc is None:
            raise UniDicInstallError(f"{archive.name} does not contain a MeCab dictionary (no dicrc).")
        if target.exists():
            shutil.rmtree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(dicrc.parent), str(target))


def resolve_managed_unidic() -> UniDicStatus:
    target = managed_unidic_dir()
    if _is_dicdir(target):
        return UniDicStatus(UNIDIC_VERSION, target)
    return UniDicStatus(None, None)


def get_unidic_dicdir() -> Path | None:
    """
    Locate a full UniDic dictionary.

    ``FURIGEN_UNIDIC_DIR`` wins, then the managed install, then the ``unidic``
    package. ``None`` means the tagger should fall back to ``unidic-lite``.
    """
    env_dir = os.environ.get(_UNIDIC_DIR_ENV)
    if env_dir and _is_dicdir(Path(env_dir).expanduser()):
        return Path(env_dir).expanduser()
    managed = resolve_managed_unidic()
    if managed.usable:
        return managed.path
    try:
        import unidic  # type: ignore
    except ImportError:
        return None
    dicdir = Path(getattr(unidic, "DICDIR", ""))
    return dicdir if _is_dicdir(dicdir) else None
