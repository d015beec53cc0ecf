"""
Manifest subcommand handlers for the pkgmanifest CLI.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Mapping, MutableMapping

from cli.context import CliContext
from project_manifest import (
    DEPENDENCY_FIELDS,
    ManifestError,
    ManifestWriter,
    normalize_manifest,
    read_exact_project_manifest,
    read_project_manifest,
    try_read_project_manifest,
)

STATUS_EXIT = {
    "ok": 0,
    "noop": 0,
    "created": 0,
    "updated": 0,
    "warn": 1,
    "warning": 1,
    "missing": 1,
    "error": 2,
}

Handler = Callable[[CliContext, argparse.Namespace], Awaitable[MutableMapping[str, Any]]]


def add_parsers(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    show = subparsers.add_parser("show", help="Print the manifest of a project directory")
    show.add_argument("path", help="Project directory, or manifest file with --exact")
    show.add_argument("--exact", action="store_true", help="Treat PATH as a manifest file")
    show.add_argument("--summary", action="store_true", help="Print a short summary instead of the manifest")
    show.set_defaults(handler=_handle_show)

    normalize = subparsers.add_parser("normalize", help="Print the normalized comparison form")
    normalize.add_argument("path", help="Project directory")
    normalize.set_defaults(handler=_handle_normalize)

    fmt = subparsers.add_parser("format", help="Rewrite the manifest using its detected formatting")
    fmt.add_argument("path", help="Project directory")
    fmt.set_defaults(handler=_handle_format)

    field_choices = sorted(DEPENDENCY_FIELDS)

    set_dep = subparsers.add_parser("set-dependency", help="Add or update a dependency")
    set_dep.add_argument("path", help="Project directory")
    set_dep.add_argument("name", help="Package name")
    set_dep.add_argument("spec", help="Version specifier")
    set_dep.add_argument("--field", choices=field_choices, default="dependencies")
    set_dep.set_defaults(handler=_handle_set_dependency)

    remove_dep = subparsers.add_parser("remove-dependency", help="Remove a dependency")
    remove_dep.add_argument("path", help="Project directory")
    remove_dep.add_argument("name", help="Package name")
    remove_dep.add_argument("--field", choices=field_choices, default="dependencies")
    remove_dep.set_defaults(handler=_handle_remove_dependency)


def handle(ctx: CliContext, args: argparse.Namespace) -> MutableMapping[str, Any]:
    handler: Handler = args.handler
    try:
        result = asyncio.run(handler(ctx, args))
    except (ManifestError, OSError) as exc:
        ctx.error(str(exc))
        result = {
            "status": "error",
            "message": str(exc),
            "code": getattr(exc, "code", None),
            "path": args.path,
        }
        return result
    if not ctx.json_mode and result.get("status") != "error":
        _emit_human_output(ctx, result)
    return result


async def _handle_show(ctx: CliContext, args: argparse.Namespace) -> MutableMapping[str, Any]:
    if args.exact:
        exact = await read_exact_project_manifest(args.path)
        file_name = Path(args.path).name
        manifest = exact.manifest
    else:
        record = await try_read_project_manifest(args.path)
        if record.manifest is None:
            return {"status": "missing", "message": f"No manifest found in {args.path}", "path": args.path}
        file_name = record.file_name
        manifest = record.manifest

    result: Dict[str, Any] = {"status": "ok", "file_name": file_name, "path": args.path}
    if args.summary:
        result["summary"] = _manifest_summary(manifest)
    else:
        result["manifest"] = manifest
    return result


async def _handle_normalize(ctx: CliContext, args: argparse.Namespace) -> MutableMapping[str, Any]:
    record = await read_project_manifest(args.path)
    return {
        "status": "ok",
        "file_name": record.file_name,
        "path": args.path,
        "manifest": normalize_manifest(record.manifest or {}),
    }


async def _handle_format(ctx: CliContext, args: argparse.Namespace) -> MutableMapping[str, Any]:
    record = await read_project_manifest(args.path)
    ctx.info(f"Rewriting {record.writer.path}")
    await record.writer(record.manifest or {}, force=True)
    return {
        "status": "ok",
        "message": f"Formatted {record.writer.path}",
        "file_name": record.file_name,
        "path": args.path,
    }


async def _handle_set_dependency(ctx: CliContext, args: argparse.Namespace) -> MutableMapping[str, Any]:
    record = await try_read_project_manifest(args.path)
    created = record.manifest is None
    manifest = dict(record.manifest or {})
    current = manifest.get(args.field)
    if current is not None and not isinstance(current, Mapping):
        return _not_a_mapping(ctx, args)
    deps = dict(current or {})
    deps[args.name] = args.spec
    manifest[args.field] = deps
    return await _write(record.writer, manifest, "created" if created else "updated", args)


async def _handle_remove_dependency(ctx: CliContext, args: argparse.Namespace) -> MutableMapping[str, Any]:
    record = await read_project_manifest(args.path)
    manifest = dict(record.manifest or {})
    current = manifest.get(args.field)
    if current is not None and not isinstance(current, Mapping):
        return _not_a_mapping(ctx, args)
    deps = dict(current or {})
    if deps.pop(args.name, None) is None:
        ctx.warn(f"{args.name} is not listed in {args.field}")
    if deps:
        manifest[args.field] = deps
    else:
        manifest.pop(args.field, None)
    return await _write(record.writer, manifest, "updated", args)


def _not_a_mapping(ctx: CliContext, args: argparse.Namespace) -> MutableMapping[str, Any]:
    message = f"{args.field} in {args.path} is not a mapping"
    ctx.error(message)
    return {
        "status": "error",
        "message": message,
        "path": args.path,
        "field": args.field,
    }


async def _write(
    writer: ManifestWriter,
    manifest: Mapping[str, Any],
    status: str,
    args: argparse.Namespace,
) -> MutableMapping[str, Any]:
    before = writer.write_count
    await writer(manifest)
    if writer.write_count == before:
        return {
            "status": "noop",
            "message": f"{writer.path} is already up to date",
            "path": str(writer.path),
            "field": args.field,
        }
    return {
        "status": status,
        "message": f"Wrote {writer.path}",
        "path": str(writer.path),
        "field": args.field,
        "name": args.name,
    }


def _manifest_summary(manifest: Mapping[str, Any]) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "name": manifest.get("name"),
        "version": manifest.get("version"),
    }
    for field in sorted(DEPENDENCY_FIELDS):
        deps = manifest.get(field)
        summary[field] = len(deps) if isinstance(deps, Mapping) else 0
    return summary


def _emit_human_output(ctx: CliContext, result: Mapping[str, Any]) -> None:
    message = result.get("message")
    if message:
        ctx.info(message)
    if "summary" in result:
        for key, value in result["summary"].items():
            print(f"{key}: {value}")
    elif "manifest" in result:
        ctx.emit(result["manifest"])


def extract_exit_code(result: Mapping[str, Any]) -> int:
    status = str(result.get("status", "ok")).lower()
    return STATUS_EXIT.get(status, 0)
