"""
Project manifest persistence.

Finds the manifest of a project directory (``package.json``,
``package.json5`` or ``package.yaml``), parses it and hands back a writer that
rewrites the file in its original style, and only when its content actually
changed.
"""

from __future__ import annotations

from .errors import ManifestError, ManifestNotFound, ManifestParseError, UnsupportedManifestName
from .formats import JSON5_MANIFEST, JSON_MANIFEST, MANIFEST_FORMATS, YAML_MANIFEST, ManifestFormat
from .formatting import FileFormatting, detect_file_formatting, detect_indent
from .normalize import DEPENDENCY_FIELDS, manifests_equal, normalize_manifest
from .persist import DEFAULT_INDENT, write_project_manifest
from .reader import (
    ExactManifestRecord,
    ManifestRecord,
    read_exact_project_manifest,
    read_project_manifest,
    read_project_manifest_only,
    safe_read_project_manifest_only,
    try_read_project_manifest,
)
from .writer import ManifestWriter

__all__ = [
    "DEFAULT_INDENT",
    "DEPENDENCY_FIELDS",
    "ExactManifestRecord",
    "FileFormatting",
    "JSON5_MANIFEST",
    "JSON_MANIFEST",
    "MANIFEST_FORMATS",
    "ManifestError",
    "ManifestFormat",
    "ManifestNotFound",
    "ManifestParseError",
    "ManifestRecord",
    "ManifestWriter",
    "UnsupportedManifestName",
    "YAML_MANIFEST",
    "detect_file_formatting",
    "detect_indent",
    "manifests_equal",
    "normalize_manifest",
    "read_exact_project_manifest",
    "read_project_manifest",
    "read_project_manifest_only",
    "safe_read_project_manifest_only",
    "try_read_project_manifest",
    "write_project_manifest",
]
