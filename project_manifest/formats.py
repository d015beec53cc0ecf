"""
Supported manifest file formats and their readers.

Formats are listed in lookup priority: when a directory holds more than one
manifest, the earliest entry in ``MANIFEST_FORMATS`` wins.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import json5
import yaml

from .blocking import run_blocking
from .errors import ManifestParseError, UnsupportedManifestName

__all__ = [
    "JSON_MANIFEST",
    "JSON5_MANIFEST",
    "YAML_MANIFEST",
    "MANIFEST_FORMATS",
    "ManifestFormat",
    "ReadResult",
    "format_for_name",
    "read_json_file",
    "read_json5_file",
    "read_yaml_file",
]

JSON_MANIFEST = "package.json"
JSON5_MANIFEST = "package.json5"
YAML_MANIFEST = "package.yaml"

# (data, raw text); text is None for formats without formatting detection.
ReadResult = Tuple[Any, Optional[str]]
ManifestReader = Callable[[Path], Awaitable[ReadResult]]


def _read_text(path: Path) -> str:
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        text = handle.read()
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


def _expect_mapping(data: Any, path: Path, code: str) -> Any:
    if not isinstance(data, dict):
        raise ManifestParseError(
            str(path),
            f"Expected a mapping at the top level, got {type(data).__name__} in {path}",
            code,
        )
    return data


async def read_json_file(path: Path) -> ReadResult:
    text = await run_blocking(_read_text, path)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(str(path), f"{exc} in {path}", "JSON_PARSE") from exc
    return _expect_mapping(data, path, "JSON_PARSE"), text


async def read_json5_file(path: Path) -> ReadResult:
    text = await run_blocking(_read_text, path)
    try:
        data = json5.loads(text)
    except ValueError as exc:
        raise ManifestParseError(str(path), f"{exc} in {path}", "JSON5_PARSE") from exc
    return _expect_mapping(data, path, "JSON5_PARSE"), text


async def read_yaml_file(path: Path) -> ReadResult:
    text = await run_blocking(_read_text, path)
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestParseError(str(path), f"{exc}\nin {path}", "YAML_PARSE") from exc
    if data is None:
        data = {}
    return _expect_mapping(data, path, "YAML_PARSE"), None


@dataclass(frozen=True)
class ManifestFormat:
    file_name: str
    read: ManifestReader
    detects_formatting: bool


MANIFEST_FORMATS: Tuple[ManifestFormat, ...] = (
    ManifestFormat(JSON_MANIFEST, read_json_file, detects_formatting=True),
    ManifestFormat(JSON5_MANIFEST, read_json5_file, detects_formatting=True),
    ManifestFormat(YAML_MANIFEST, read_yaml_file, detects_formatting=False),
)

_BY_NAME: Dict[str, ManifestFormat] = {fmt.file_name: fmt for fmt in MANIFEST_FORMATS}


def format_for_name(name: str) -> ManifestFormat:
    """
    Look up a format by manifest basename, ignoring case.
    """

    base = name.lower()
    try:
        return _BY_NAME[base]
    except KeyError as exc:
        raise UnsupportedManifestName(base) from exc
