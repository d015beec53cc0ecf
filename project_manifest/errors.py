"""
Custom exceptions for the project manifest read/write layer.
"""

from __future__ import annotations


class ManifestError(RuntimeError):
    code = "MANIFEST_ERROR"


class ManifestNotFound(ManifestError):
    code = "NO_IMPORTER_MANIFEST_FOUND"

    def __init__(self, project_dir: str) -> None:
        super().__init__(
            f'No package.json (or package.yaml, or package.json5) was found in "{project_dir}".'
        )
        self.project_dir = project_dir


class ManifestParseError(ManifestError):
    def __init__(self, path: str, message: str, code: str) -> None:
        super().__init__(message)
        self.path = path
        self.code = code


class UnsupportedManifestName(ManifestError):
    code = "UNSUPPORTED_MANIFEST_NAME"

    def __init__(self, name: str) -> None:
        super().__init__(f'Not supported manifest name "{name}"')
        self.name = name
