"""
Serialize a project manifest and write it to disk in the format implied by
its file extension.
"""

from __future__ import annotations

import json
import os
import stat
import threading
from pathlib import Path
from typing import Any, Mapping, Optional

import json5
import yaml

from .blocking import run_blocking
from .formatting import Indent

DEFAULT_INDENT = "\t"
YAML_EXTENSIONS = frozenset({"yaml", "yml"})


class _ManifestDumper(yaml.SafeDumper):
    def ignore_aliases(self, data: Any) -> bool:
        return True


def _file_type(path: Path) -> str:
    return path.suffix.lstrip(".").lower()


def dump_manifest(
    file_type: str,
    manifest: Mapping[str, Any],
    indent: Optional[Indent] = None,
    insert_final_newline: bool = True,
) -> str:
    if file_type in YAML_EXTENSIONS:
        return yaml.dump(
            dict(manifest),
            Dumper=_ManifestDumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )

    if indent is None:
        indent = DEFAULT_INDENT
    if indent in ("", 0):
        layout: dict[str, Any] = {"indent": None, "separators": (",", ":")}
    else:
        layout = {"indent": indent}

    if file_type == "json5":
        text = json5.dumps(manifest, ensure_ascii=False, trailing_commas=False, **layout)
    else:
        text = json.dumps(manifest, ensure_ascii=False, **layout)
    return text + ("\n" if insert_final_newline else "")


def _write_atomic(path: Path, content: str) -> None:
    # Write through symlinks and keep the permissions of an existing file.
    path = Path(os.path.realpath(path))
    try:
        existing_mode: Optional[int] = stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        existing_mode = None
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.{os.getpid()}.{threading.get_ident()}.tmp")
    try:
        with tmp_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        if existing_mode is not None:
            os.chmod(tmp_path, existing_mode)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            tmp_path.unlink()
        except OSError:
            pass
        raise


async def write_project_manifest(
    path: Path | str,
    manifest: Mapping[str, Any],
    indent: Optional[Indent] = None,
    insert_final_newline: bool = True,
) -> None:
    """
    Write ``manifest`` to ``path``, creating parent directories as needed.

    YAML files use block style with keys kept in insertion order. JSON and
    JSON5 files use ``indent`` (a tab when ``None``, compact output when
    empty) and end with a newline unless ``insert_final_newline`` is false.
    The file is replaced atomically; any ``OSError`` propagates unchanged.
    """

    target = Path(path)
    content = dump_manifest(_file_type(target), manifest, indent, insert_final_newline)
    await run_blocking(_write_atomic, target, content)
