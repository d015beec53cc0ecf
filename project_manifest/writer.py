"""
Change-detecting writer bound to a single manifest file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .formatting import FileFormatting
from .normalize import manifests_equal, normalize_manifest
from .persist import write_project_manifest


class ManifestWriter:
    """
    Persist a manifest only when it differs from what was last read or written.

    ``baseline`` holds the normalized form of the last persisted content. A
    writer created without a baseline writes on every call until its first
    successful write. A single instance must not be awaited concurrently.
    """

    def __init__(
        self,
        path: Path | str,
        *,
        formatting: Optional[FileFormatting] = None,
        initial_manifest: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.path = Path(path)
        self.formatting = formatting
        self.baseline: Optional[Dict[str, Any]] = (
            normalize_manifest(initial_manifest) if initial_manifest is not None else None
        )
        self.write_count = 0

    @property
    def file_name(self) -> str:
        return self.path.name

    def is_changed(self, manifest: Mapping[str, Any]) -> bool:
        if self.baseline is None:
            return True
        return not manifests_equal(normalize_manifest(manifest), self.baseline)

    async def write(self, manifest: Mapping[str, Any], force: bool = False) -> None:
        updated = normalize_manifest(manifest)
        if not force and self.baseline is not None and manifests_equal(updated, self.baseline):
            return
        formatting = self.formatting or FileFormatting()
        await write_project_manifest(
            self.path,
            manifest,
            indent=formatting.indent,
            insert_final_newline=formatting.insert_final_newline,
        )
        self.baseline = updated
        self.write_count += 1

    async def __call__(self, manifest: Mapping[str, Any], force: bool = False) -> None:
        await self.write(manifest, force=force)

    def __repr__(self) -> str:
        return f"ManifestWriter(path={str(self.path)!r}, writes={self.write_count})"
