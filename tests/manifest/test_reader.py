import errno
import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import yaml

from project_manifest import (
    ManifestNotFound,
    ManifestParseError,
    UnsupportedManifestName,
    read_exact_project_manifest,
    read_project_manifest,
    read_project_manifest_only,
    safe_read_project_manifest_only,
    try_read_project_manifest,
)
from project_manifest import reader


def _write_json(path: Path, payload, indent=2) -> None:
    path.write_text(json.dumps(payload, indent=indent) + "\n", encoding="utf-8")


class ReadProjectManifestTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_json_takes_priority_over_yaml(self):
        _write_json(self.root / "package.json", {"name": "from-json"})
        (self.root / "package.yaml").write_text("name: from-yaml\n", encoding="utf-8")

        record = await read_project_manifest(self.root)

        self.assertEqual(record.file_name, "package.json")
        self.assertEqual(record.manifest, {"name": "from-json"})

    async def test_json5_takes_priority_over_yaml(self):
        (self.root / "package.json5").write_text(
            "{\n  // comment\n  name: 'from-json5',\n  version: '1.0.0',\n}\n",
            encoding="utf-8",
        )
        (self.root / "package.yaml").write_text("name: from-yaml\n", encoding="utf-8")

        record = await read_project_manifest(self.root)

        self.assertEqual(record.file_name, "package.json5")
        self.assertEqual(record.manifest, {"name": "from-json5", "version": "1.0.0"})
        self.assertEqual(record.writer.formatting.indent, "  ")

    async def test_yaml_manifest_has_no_formatting(self):
        (self.root / "package.yaml").write_text(
            "name: from-yaml\ndependencies:\n  foo: ^1.0.0\n",
            encoding="utf-8",
        )

        record = await read_project_manifest(self.root)

        self.assertEqual(record.file_name, "package.yaml")
        self.assertEqual(record.manifest, {"name": "from-yaml", "dependencies": {"foo": "^1.0.0"}})
        self.assertIsNone(record.writer.formatting)
        self.assertEqual(record.writer.path, self.root / "package.yaml")

    async def test_json_formatting_is_captured(self):
        (self.root / "package.json").write_text('{\n\t"name": "tabs"\n}', encoding="utf-8")

        record = await read_project_manifest(self.root)

        self.assertEqual(record.writer.formatting.indent, "\t")
        self.assertFalse(record.writer.formatting.insert_final_newline)

    async def test_bom_is_stripped(self):
        (self.root / "package.json").write_text('\ufeff{"name": "bom"}', encoding="utf-8")

        manifest = await read_project_manifest_only(self.root)

        self.assertEqual(manifest, {"name": "bom"})

    async def test_invalid_utf8_is_replaced_not_raised(self):
        (self.root / "package.json").write_bytes(b'{"name": "caf\xff"}')

        manifest = await read_project_manifest_only(self.root)

        self.assertEqual(manifest, {"name": "caf\ufffd"})

    async def test_json_array_at_top_level_is_a_parse_error(self):
        (self.root / "package.json").write_text("[1, 2]\n", encoding="utf-8")

        with self.assertRaises(ManifestParseError) as ctx:
            await read_project_manifest(self.root)

        self.assertEqual(ctx.exception.code, "JSON_PARSE")
        self.assertIn("list", str(ctx.exception))

    async def test_json5_scalar_at_top_level_is_a_parse_error(self):
        (self.root / "package.json5").write_text("'pkg'\n", encoding="utf-8")

        with self.assertRaises(ManifestParseError) as ctx:
            await read_project_manifest(self.root)

        self.assertEqual(ctx.exception.code, "JSON5_PARSE")

    async def test_yaml_scalar_at_top_level_is_a_parse_error(self):
        yaml_path = self.root / "package.yaml"
        yaml_path.write_text("just a string\n", encoding="utf-8")

        with self.assertRaises(ManifestParseError) as ctx:
            await safe_read_project_manifest_only(self.root)

        self.assertEqual(ctx.exception.code, "YAML_PARSE")
        self.assertIn(str(yaml_path), str(ctx.exception))

    async def test_baseline_matches_what_was_read(self):
        _write_json(self.root / "package.json", {"name": "pkg", "dependencies": {"b": "1", "a": "1"}})

        record = await read_project_manifest(self.root)

        self.assertEqual(record.writer.baseline, {"name": "pkg", "dependencies": {"a": "1", "b": "1"}})
        self.assertIsNot(record.writer.baseline["dependencies"], record.manifest["dependencies"])

    async def test_each_read_returns_a_fresh_writer(self):
        _write_json(self.root / "package.json", {"name": "pkg"})

        first = await read_project_manifest(self.root)
        second = await read_project_manifest(self.root)

        self.assertIsNot(first.writer, second.writer)
        self.assertIsNot(first.manifest, second.manifest)

    async def test_empty_directory_returns_creating_writer(self):
        record = await try_read_project_manifest(self.root)

        self.assertEqual(record.file_name, "package.json")
        self.assertIsNone(record.manifest)
        self.assertIsNone(record.writer.baseline)

        await record.writer({"name": "created"})

        created = self.root / "package.json"
        self.assertTrue(created.exists())
        self.assertEqual(json.loads(created.read_text(encoding="utf-8")), {"name": "created"})

    async def test_strict_read_raises_when_missing(self):
        with self.assertRaises(ManifestNotFound) as ctx:
            await read_project_manifest(self.root)
        self.assertEqual(ctx.exception.code, "NO_IMPORTER_MANIFEST_FOUND")
        self.assertIn(str(self.root), str(ctx.exception))

    async def test_safe_read_returns_none_when_missing(self):
        self.assertIsNone(await safe_read_project_manifest_only(self.root))

    async def test_safe_read_still_propagates_parse_errors(self):
        (self.root / "package.json").write_text('{"name": ', encoding="utf-8")

        with self.assertRaises(ManifestParseError) as ctx:
            await safe_read_project_manifest_only(self.root)
        self.assertEqual(ctx.exception.code, "JSON_PARSE")
        self.assertIn(str(self.root / "package.json"), str(ctx.exception))

    async def test_parse_error_does_not_fall_through(self):
        (self.root / "package.json").write_text("{not json", encoding="utf-8")
        (self.root / "package.yaml").write_text("name: fallback\n", encoding="utf-8")

        with self.assertRaises(ManifestParseError):
            await try_read_project_manifest(self.root)

    async def test_invalid_json5_is_reported(self):
        (self.root / "package.json5").write_text("{name: }", encoding="utf-8")

        with self.assertRaises(ManifestParseError) as ctx:
            await read_project_manifest(self.root)
        self.assertEqual(ctx.exception.code, "JSON5_PARSE")

    async def test_invalid_yaml_message_includes_path(self):
        yaml_path = self.root / "package.yaml"
        yaml_path.write_text("name: [unclosed\n", encoding="utf-8")

        with self.assertRaises(ManifestParseError) as ctx:
            await read_project_manifest(self.root)

        self.assertEqual(ctx.exception.code, "YAML_PARSE")
        self.assertIn(str(yaml_path), str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, yaml.YAMLError)

    async def test_empty_yaml_reads_as_empty_manifest(self):
        (self.root / "package.yaml").write_text("", encoding="utf-8")

        record = await read_project_manifest(self.root)

        self.assertEqual(record.manifest, {})

    @unittest.skipIf(sys.platform == "win32", "native ENOTDIR is POSIX behaviour")
    async def test_file_instead_of_directory_raises_not_a_directory(self):
        not_a_dir = self.root / "file.txt"
        not_a_dir.write_text("", encoding="utf-8")

        with self.assertRaises(NotADirectoryError):
            await try_read_project_manifest(not_a_dir)


class NotADirectoryEmulationTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_regular_file_raises_enotdir(self):
        not_a_dir = self.root / "file.txt"
        not_a_dir.write_text("", encoding="utf-8")
        missing = mock.AsyncMock(side_effect=FileNotFoundError)

        with mock.patch.object(reader, "_is_windows", return_value=True), mock.patch.object(
            reader, "_read_with_format", missing
        ):
            with self.assertRaises(NotADirectoryError) as ctx:
                await try_read_project_manifest(not_a_dir)

        self.assertEqual(ctx.exception.errno, errno.ENOTDIR)
        self.assertEqual(missing.await_count, 3)

    async def test_directory_check_runs_off_the_event_loop(self):
        not_a_dir = self.root / "file.txt"
        not_a_dir.write_text("", encoding="utf-8")
        missing = mock.AsyncMock(side_effect=FileNotFoundError)
        offload = mock.AsyncMock(wraps=reader.run_blocking)

        with mock.patch.object(reader, "_is_windows", return_value=True), mock.patch.object(
            reader, "_read_with_format", missing
        ), mock.patch.object(reader, "run_blocking", offload):
            with self.assertRaises(NotADirectoryError):
                await try_read_project_manifest(not_a_dir)

        offload.assert_awaited_once_with(reader._ensure_directory, not_a_dir)

    async def test_missing_path_is_not_fatal(self):
        with mock.patch.object(reader, "_is_windows", return_value=True):
            record = await try_read_project_manifest(self.root / "does-not-exist")

        self.assertIsNone(record.manifest)
        self.assertEqual(record.writer.path, self.root / "does-not-exist" / "package.json")

    async def test_check_skipped_off_windows(self):
        not_a_dir = self.root / "file.txt"
        not_a_dir.write_text("", encoding="utf-8")
        missing = mock.AsyncMock(side_effect=FileNotFoundError)

        with mock.patch.object(reader, "_is_windows", return_value=False), mock.patch.object(
            reader, "_read_with_format", missing
        ):
            record = await try_read_project_manifest(not_a_dir)

        self.assertIsNone(record.manifest)


class ReadExactProjectManifestTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_reads_json_by_name(self):
        path = self.root / "package.json"
        _write_json(path, {"name": "exact"}, indent=4)

        record = await read_exact_project_manifest(path)

        self.assertEqual(record.manifest, {"name": "exact"})
        self.assertEqual(record.writer.formatting.indent, "    ")

    async def test_name_match_ignores_case(self):
        path = self.root / "Package.YAML"
        path.write_text("name: shouty\n", encoding="utf-8")

        record = await read_exact_project_manifest(path)

        self.assertEqual(record.manifest, {"name": "shouty"})
        self.assertEqual(record.writer.path, path)
        self.assertIsNone(record.writer.formatting)

    async def test_unsupported_name_fails_before_io(self):
        with mock.patch("project_manifest.formats.run_blocking") as blocking:
            with self.assertRaises(UnsupportedManifestName) as ctx:
                await read_exact_project_manifest(self.root / "missing" / "manifest.toml")

        blocking.assert_not_called()
        self.assertEqual(ctx.exception.name, "manifest.toml")
        self.assertEqual(ctx.exception.code, "UNSUPPORTED_MANIFEST_NAME")

    async def test_missing_exact_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            await read_exact_project_manifest(self.root / "package.json5")


if __name__ == "__main__":
    unittest.main()
