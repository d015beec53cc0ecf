"""
Locate and read the project manifest of a directory.

A directory may hold ``package.json``, ``package.json5`` or ``package.yaml``.
They are probed one at a time in that order; the first one present wins and
any failure other than the file being absent stops the lookup.
"""

from __future__ import annotations

import errno
import os
import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .blocking import run_blocking
from .errors import ManifestNotFound
from .formats import JSON_MANIFEST, MANIFEST_FORMATS, ManifestFormat, format_for_name
from .formatting import detect_file_formatting
from .writer import ManifestWriter

__all__ = [
    "ExactManifestRecord",
    "ManifestRecord",
    "read_exact_project_manifest",
    "read_project_manifest",
    "read_project_manifest_only",
    "safe_read_project_manifest_only",
    "try_read_project_manifest",
]

Manifest = Dict[str, Any]


@dataclass
class ManifestRecord:
    file_name: str
    manifest: Optional[Manifest]
    writer: ManifestWriter


@dataclass
class ExactManifestRecord:
    manifest: Manifest
    writer: ManifestWriter


def _is_windows() -> bool:
    return sys.platform == "win32"


async def _read_with_format(fmt: ManifestFormat, manifest_path: Path) -> ExactManifestRecord:
    data, text = await fmt.read(manifest_path)
    formatting = detect_file_formatting(text) if fmt.detects_formatting and text is not None else None
    writer = ManifestWriter(manifest_path, formatting=formatting, initial_manifest=data)
    return ExactManifestRecord(manifest=data, writer=writer)


def _ensure_directory(project_dir: Path) -> None:
    # Windows reports a missing file instead of ENOTDIR when a path component
    # is a regular file.
    try:
        st = os.stat(project_dir)
    except OSError:
        return
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryError(errno.ENOTDIR, f'"{project_dir}" is not a directory', str(project_dir))


async def try_read_project_manifest(project_dir: Path | str) -> ManifestRecord:
    """
    Read the manifest of ``project_dir``, returning ``manifest=None`` if absent.

    The returned writer creates ``package.json`` when no manifest exists.
    """

    directory = Path(project_dir)
    for fmt in MANIFEST_FORMATS:
        manifest_path = directory / fmt.file_name
        try:
            record = await _read_with_format(fmt, manifest_path)
        except FileNotFoundError:
            continue
        return ManifestRecord(file_name=fmt.file_name, manifest=record.manifest, writer=record.writer)

    if _is_windows():
        await run_blocking(_ensure_directory, directory)

    return ManifestRecord(
        file_name=JSON_MANIFEST,
        manifest=None,
        writer=ManifestWriter(directory / JSON_MANIFEST),
    )


async def read_project_manifest(project_dir: Path | str) -> ManifestRecord:
    record = await try_read_project_manifest(project_dir)
    if record.manifest is None:
        raise ManifestNotFound(str(project_dir))
    return record


async def read_project_manifest_only(project_dir: Path | str) -> Manifest:
    record = await read_project_manifest(project_dir)
    return record.manifest  # type: ignore[return-value]


async def safe_read_project_manifest_only(project_dir: Path | str) -> Optional[Manifest]:
    """
    Like ``read_project_manifest_only`` but returns ``None`` when no manifest exists.

    Parse errors and other filesystem failures still propagate.
    """

    try:
        return await read_project_manifest_only(project_dir)
    except ManifestNotFound:
        return None


async def read_exact_project_manifest(manifest_path: Path | str) -> ExactManifestRecord:
    """
    Read the manifest at ``manifest_path``, choosing the parser by its basename.

    Raises ``UnsupportedManifestName`` before touching the filesystem when the
    basename is not one of the supported manifest names.
    """

    path = Path(manifest_path)
    fmt = format_for_name(path.name)
    return await _read_with_format(fmt, path)
