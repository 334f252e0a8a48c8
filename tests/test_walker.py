#!/usr/bin/env python3
"""Tests for filtered tree traversal."""

import os

import pytest

from srcexport.core.logging import ExportEvent, RecordingExportLog
from srcexport.rules.engine import FilterEngine, Rule, RuleAction
from srcexport.walker import TreeWalker


@pytest.fixture
def tree(temp_dir):
    """Create a tree with nested directories."""
    root = temp_dir / "root"
    (root / "b").mkdir(parents=True)
    (root / "a").mkdir()
    (root / "a" / "inner").mkdir()
    (root / "z.txt").write_text("z")
    (root / "m.tmp").write_text("m")
    (root / "a" / "one.txt").write_text("1")
    (root / "a" / "inner" / "deep.txt").write_text("d")
    (root / "b" / "two.txt").write_text("2")
    return root


def relative(root, paths):
    return [os.path.relpath(p, root) for p in paths]


class TestTreeWalker:
    """Tests for TreeWalker."""

    def test_order(self, tree):
        """Test files first, then each directory followed by its contents."""
        walker = TreeWalker(str(tree), FilterEngine(), RecordingExportLog())

        assert relative(tree, walker.walk()) == [
            "m.tmp",
            "z.txt",
            "a",
            os.path.join("a", "one.txt"),
            os.path.join("a", "inner"),
            os.path.join("a", "inner", "deep.txt"),
            "b",
            os.path.join("b", "two.txt"),
        ]

    def test_re_enumerable(self, tree):
        """Test the walker can be iterated more than once."""
        walker = TreeWalker(str(tree), FilterEngine(), RecordingExportLog())

        assert list(walker) == list(walker)

    def test_excluded_file_skipped_and_logged(self, tree):
        """Test excluded files are not yielded and are logged."""
        log = RecordingExportLog()
        walker = TreeWalker(str(tree), FilterEngine([Rule("*.tmp")]), log)
        paths = list(walker)

        assert str(tree / "m.tmp") not in paths
        assert log.values(ExportEvent.EXCLUDE) == [str(tree / "m.tmp")]
        assert str(tree / "z.txt") in log.values(ExportEvent.INCLUDE)

    def test_excluded_directory_not_descended(self, tree):
        """Test excluded directories hide their contents."""
        log = RecordingExportLog()
        walker = TreeWalker(str(tree), FilterEngine([Rule("a", apply_to_path=False)]), log)

        assert relative(tree, walker) == [
            "m.tmp",
            "z.txt",
            "b",
            os.path.join("b", "two.txt"),
        ]

    def test_include_overrides_exclude(self, tree):
        """Test include rules rescue excluded entries."""
        engine = FilterEngine([Rule("*.txt"), Rule("z.txt", RuleAction.INCLUDE)])
        paths = relative(tree, TreeWalker(str(tree), engine, RecordingExportLog()))

        assert "z.txt" in paths
        assert os.path.join("b", "two.txt") not in paths

    def test_missing_root(self, temp_dir):
        """Test a missing root yields nothing."""
        walker = TreeWalker(str(temp_dir / "missing"), FilterEngine(), RecordingExportLog())
        assert list(walker) == []

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_linked_directory(self, tree, temp_dir):
        """Test linked directories are descended only when links are not kept."""
        (temp_dir / "shared").mkdir()
        (temp_dir / "shared" / "s.txt").write_text("s")
        try:
            os.symlink(temp_dir / "shared", tree / "link", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        kept = relative(tree, TreeWalker(str(tree), FilterEngine(), RecordingExportLog(), True))
        followed = relative(tree, TreeWalker(str(tree), FilterEngine(), RecordingExportLog()))

        assert "link" in kept
        assert os.path.join("link", "s.txt") not in kept
        assert os.path.join("link", "s.txt") in followed
