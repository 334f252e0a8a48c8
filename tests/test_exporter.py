#!/usr/bin/env python3
"""End-to-end tests for the exporter."""

import dataclasses
import os
import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from srcexport.core import file_ops
from srcexport.core.constants import ReadOnlyPolicy
from srcexport.core.errors import IntegrityError
from srcexport.core.links import NullLinkPreserver
from srcexport.core.logging import ExportEvent, RecordingExportLog
from srcexport.core.settings import ExcludedProject, Replacement, Settings, settings_to_dict
from srcexport.exporter import Exporter, ExportResult
from srcexport.rules.engine import Rule, RuleAction


def tree_bytes(root: Path):
    """Map of relative path to content for every file under root."""
    result = {}
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            path = Path(dirpath) / name
            result[str(path.relative_to(root))] = path.read_bytes()
    return result


def tree_dirs(root: Path):
    return sorted(
        str(Path(dirpath).relative_to(root))
        for dirpath, _, _ in os.walk(root)
        if dirpath != str(root)
    )


class TestExporterArguments:
    """Tests for argument handling."""

    def test_none_source(self):
        """Test a None source is rejected."""
        with pytest.raises(ValueError):
            Exporter(None)

    def test_none_destination(self, source_dir):
        """Test a None destination is rejected."""
        with pytest.raises(ValueError):
            Exporter(str(source_dir), log=RecordingExportLog()).export(None)

    def test_file_source_uses_parent(self, source_dir):
        """Test a file path exports its directory."""
        exporter = Exporter(str(source_dir / "App.sln"), log=RecordingExportLog())
        assert exporter.source_root == str(source_dir)

    def test_default_settings(self, source_dir):
        """Test settings default to Settings.default()."""
        exporter = Exporter(str(source_dir), log=RecordingExportLog())
        assert settings_to_dict(exporter.settings) == settings_to_dict(Settings.default())

    def test_empty_log_is_kept(self, source_dir):
        """Test a log with no events yet is used, not replaced."""
        log = RecordingExportLog()
        links = NullLinkPreserver()
        exporter = Exporter(str(source_dir), log=log, link_preserver=links)

        assert exporter.log is log
        assert exporter.links is links


class TestRoundTrip:
    """Tests for verbatim exports."""

    def test_counts_and_bytes(self, source_dir, dest_dir, plain_settings):
        """Test an export without options mirrors the tree byte for byte."""
        result = Exporter(str(source_dir), plain_settings, RecordingExportLog()).export(
            str(dest_dir)
        )

        assert tree_bytes(dest_dir) == tree_bytes(source_dir)
        assert tree_dirs(dest_dir) == tree_dirs(source_dir)
        assert result == ExportResult(files=len(tree_bytes(source_dir)), directories=3)

    def test_idempotent_with_overwrite(self, source_dir, dest_dir, plain_settings):
        """Test exporting twice gives the same result."""
        settings = dataclasses.replace(plain_settings, overwrite_existing=True)
        exporter = Exporter(str(source_dir), settings, RecordingExportLog())

        first = exporter.export(str(dest_dir))
        content = tree_bytes(dest_dir)
        second = exporter.export(str(dest_dir))

        assert first == second
        assert tree_bytes(dest_dir) == content

    def test_fresh_counters_per_export(self, source_dir, temp_dir, plain_settings):
        """Test counters restart with each export."""
        exporter = Exporter(str(source_dir), plain_settings, RecordingExportLog())

        first = exporter.export(str(temp_dir / "one"))
        second = exporter.export(str(temp_dir / "two"))

        assert first == second

    def test_log_sequence(self, source_dir, dest_dir, plain_settings):
        """Test configuration first, summary last."""
        log = RecordingExportLog()
        result = Exporter(str(source_dir), plain_settings, log).export(str(dest_dir))

        assert log.events[0][0] is ExportEvent.CONFIGURATION
        assert log.events[1] == (ExportEvent.DIRECTORY_CREATED, str(dest_dir))
        assert log.events[-2:] == [
            (ExportEvent.SUMMARY, f"Directories: {result.directories}"),
            (ExportEvent.SUMMARY, f"Files: {result.files}"),
        ]

    def test_existing_destination_not_logged(self, source_dir, dest_dir, plain_settings):
        """Test an existing destination root is not reported as created."""
        dest_dir.mkdir()
        log = RecordingExportLog()
        Exporter(str(source_dir), plain_settings, log).export(str(dest_dir))

        assert str(dest_dir) not in log.values(ExportEvent.DIRECTORY_CREATED)


class TestDefaultExport:
    """Tests with the default settings."""

    def test_build_output_excluded(self, source_dir, dest_dir):
        """Test bin/obj and backups are left out."""
        log = RecordingExportLog()
        Exporter(str(source_dir), log=log).export(str(dest_dir))

        assert not (dest_dir / "App" / "bin").exists()
        assert not (dest_dir / "App" / "obj").exists()
        assert not (dest_dir / "notes.bak").exists()
        assert (dest_dir / "notes.bak.txt").exists()
        assert str(source_dir / "App" / "bin") in log.values(ExportEvent.EXCLUDE)

    def test_scm_binding_removed(self, source_dir, dest_dir):
        """Test solution and project bindings are removed."""
        Exporter(str(source_dir), log=RecordingExportLog()).export(str(dest_dir))

        assert "SourceCodeControl" not in (dest_dir / "App.sln").read_text()
        assert "SccProjectName" not in (dest_dir / "App" / "App.csproj").read_text()

    def test_disallowed_hint_path_unchanged(self, source_dir, dest_dir):
        """Test hint paths outside shared folders survive."""
        Exporter(str(source_dir), log=RecordingExportLog(), allowed_folders=[]).export(
            str(dest_dir)
        )

        assert "..\\..\\..\\outside\\Vendor.dll" in (dest_dir / "App" / "App.csproj").read_text()

    def test_outputs_writable(self, source_dir, dest_dir):
        """Test outputs are made writable."""
        file_ops.set_read_only(source_dir / "README.md", True)
        Exporter(str(source_dir), log=RecordingExportLog()).export(str(dest_dir))

        assert not file_ops.is_read_only(dest_dir / "README.md")


class TestScenarios:
    """Behavioural scenarios."""

    def test_include_precedence(self, source_dir, dest_dir, plain_settings):
        """Test an include rule keeps a file an earlier exclude rule matches."""
        settings = dataclasses.replace(
            plain_settings,
            rules=(Rule("*.bak"), Rule("notes.bak", RuleAction.INCLUDE)),
        )
        Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        assert (dest_dir / "notes.bak").exists()

    def test_alternation(self, source_dir, dest_dir, plain_settings):
        """Test glob alternation excludes either name."""
        settings = dataclasses.replace(plain_settings, rules=(Rule("README.md|logo.png"),))
        Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        assert not (dest_dir / "README.md").exists()
        assert not (dest_dir / "App" / "logo.png").exists()
        assert (dest_dir / "App" / "Program.cs").exists()

    def test_excluded_project_without_scm_removal(self, source_dir, dest_dir, plain_settings):
        """Test excluded projects leave the solution even when bindings are kept."""
        settings = dataclasses.replace(
            plain_settings,
            excluded_projects=(
                ExcludedProject(uuid.UUID("22222222-2222-2222-2222-222222222222"), "Tests"),
            ),
        )
        Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        text = (dest_dir / "App.sln").read_text()
        assert "Tests.csproj" not in text
        assert "SourceCodeControl" in text

    def test_rename_product(self, source_dir, dest_dir, plain_settings):
        """Test replacements rename paths and text contents."""
        settings = dataclasses.replace(plain_settings, replacements=(Replacement("App", "Tool"),))
        Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        assert (dest_dir / "Tool" / "Program.cs").exists()
        assert (dest_dir / "Tool.sln").exists()
        assert "Tool" in (dest_dir / "README.md").read_text()

    def test_generated_files_excluded(self, source_dir, dest_dir, plain_settings):
        """Test generated files are left out on request."""
        (source_dir / "App" / "Form.Designer.cs").write_text("partial class Form { }")
        (source_dir / "App" / "Proxy.cs").write_text("// <auto-generated />\n")
        settings = dataclasses.replace(plain_settings, exclude_generated_files=True)
        Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        assert not (dest_dir / "App" / "Form.Designer.cs").exists()
        assert not (dest_dir / "App" / "Proxy.cs").exists()
        assert (dest_dir / "App" / "Program.cs").exists()

    def test_designer_directory_exported(self, source_dir, dest_dir, plain_settings):
        """Test hand-written files under a *.Designer.* directory are exported."""
        controls = source_dir / "Contoso.Designer.Controls"
        controls.mkdir()
        (controls / "Button.cs").write_text("class Button { }")
        settings = dataclasses.replace(plain_settings, exclude_generated_files=True)
        Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        assert (dest_dir / "Contoso.Designer.Controls" / "Button.cs").exists()

    def test_truncated_first_copy_retried(self, source_dir, dest_dir, plain_settings):
        """Test a truncated copy is verified, recopied and the export completes."""
        real_copy = file_ops.copy_bytes
        calls = []

        def flaky_copy(source, destination):
            calls.append(source)
            if len(calls) == 1:
                with open(source, "rb") as src, open(destination, "wb") as dst:
                    dst.write(src.read()[:-1])
            else:
                real_copy(source, destination)

        settings = dataclasses.replace(plain_settings, compute_hash=True)
        log = RecordingExportLog()
        with patch.object(file_ops, "copy_bytes", side_effect=flaky_copy):
            Exporter(str(source_dir), settings, log).export(str(dest_dir))

        assert tree_bytes(dest_dir) == tree_bytes(source_dir)
        assert "Different hash (1)" in log.values(ExportEvent.VERIFY)

    def test_integrity_failure_aborts(self, source_dir, dest_dir, plain_settings):
        """Test persistent hash mismatches abort the export."""

        def broken_copy(source, destination):
            with open(destination, "wb") as dst:
                dst.write(b"")

        settings = dataclasses.replace(plain_settings, compute_hash=True)
        with patch.object(file_ops, "copy_bytes", side_effect=broken_copy):
            with pytest.raises(IntegrityError):
                Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symbolic_links_kept(self, source_dir, dest_dir, temp_dir, plain_settings):
        """Test linked directories are recreated, not copied."""
        (temp_dir / "shared").mkdir()
        (temp_dir / "shared" / "s.txt").write_text("s")
        try:
            os.symlink(temp_dir / "shared", source_dir / "shared", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        settings = dataclasses.replace(plain_settings, keep_symbolic_links=True)
        result = Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        assert os.path.islink(dest_dir / "shared")
        assert os.readlink(dest_dir / "shared") == str(temp_dir / "shared")
        assert result.directories == 4

    def test_read_only_outputs(self, source_dir, dest_dir, plain_settings):
        """Test outputs are marked read-only on request."""
        settings = dataclasses.replace(plain_settings, output_read_only=ReadOnlyPolicy.FORCE_TRUE)
        Exporter(str(source_dir), settings, RecordingExportLog()).export(str(dest_dir))

        assert file_ops.is_read_only(dest_dir / "README.md")
