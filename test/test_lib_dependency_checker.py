#!/usr/bin/env python3
"""End-to-end tests for circular/dependency_checker.py"""

import os
import json

import pytest

from circular.constants import ConfigurationError, DependencyCycleError, ProjectDirectoryError, EXIT_CYCLES_FOUND
from circular.dependency_checker import DependencyChecker, check_dependencies, check_dependencies_or_fail


class TestCheckDependencies:
    """Tests for check_dependencies."""

    def test_two_file_cycle_with_isolated_node(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test the a.h <-> b.h example with an isolated c.h."""
        root = make_project({"a.h": '#include "b.h"\n', "b.h": '#include "a.h"\n', "c.h": "// no includes\n"})

        result = check_dependencies(root)

        a, b, c = (os.path.join(root, name) for name in ("a.h", "b.h", "c.h"))
        assert result.cycles == [[a, b, a]]
        assert result.has_cycles
        assert bool(result)
        assert len(result) == 1
        assert result.graph is not None
        assert c in result.graph
        assert result.graph.out_degree(c) == 0

    def test_acyclic_project(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that a clean tree reports nothing."""
        root = make_project(
            {
                "main.cpp": '#include "app/app.h"\n#include <iostream>\n',
                "app/app.h": '#include "../core/core.h"\n',
                "core/core.h": "#pragma once\n",
            }
        )

        result = check_dependencies(root)

        assert result.cycles == []
        assert not result
        assert result.scan is not None
        assert result.scan.edge_count == 2

    def test_three_file_cycle(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test A -> B -> C -> A across directories."""
        root = make_project(
            {
                "a.hpp": '#include "sub/b.hpp"\n',
                "sub/b.hpp": '#include "c.hpp"\n',
                "sub/c.hpp": '#include "../a.hpp"\n',
            }
        )

        result = check_dependencies(root)

        a = os.path.join(root, "a.hpp")
        b = os.path.join(root, "sub", "b.hpp")
        c = os.path.join(root, "sub", "c.hpp")
        assert result.cycles == [[a, b, c, a]]

    def test_self_include(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that a file including itself yields [A, A]."""
        root = make_project({"self.h": '#include "self.h"\n'})

        result = check_dependencies(root)

        node = os.path.join(root, "self.h")
        assert result.cycles == [[node, node]]

    def test_self_include_through_normalization(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test a self include spelled with a round-trip path."""
        root = make_project({"inc/self.h": '#include "../inc/./self.h"\n'})

        result = check_dependencies(root)

        node = os.path.join(root, "inc", "self.h")
        assert result.cycles == [[node, node]]

    def test_idempotent(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that two checks of an unchanged tree agree."""
        root = make_project(
            {
                "a.h": '#include "b.h"\n#include "c.h"\n',
                "b.h": '#include "a.h"\n',
                "c.h": '#include "d.h"\n',
                "d.h": '#include "c.h"\n#include "a.h"\n',
            }
        )

        assert check_dependencies(root).cycles == check_dependencies(root).cycles

    def test_cycle_through_byte_order_mark_file(self, temp_dir: str) -> None:
        """Test that a BOM-prefixed header still closes its cycle."""
        with open(os.path.join(temp_dir, "a.h"), "wb") as f:
            f.write(b'\xef\xbb\xbf#include "b.h"\n')
        with open(os.path.join(temp_dir, "b.h"), "wb") as f:
            f.write(b'#include "a.h"\n')

        result = check_dependencies(temp_dir)

        a, b = os.path.join(temp_dir, "a.h"), os.path.join(temp_dir, "b.h")
        assert result.cycles == [[a, b, a]]

    def test_dangling_include_not_an_error(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that an include of a missing file is dropped."""
        root = make_project({"a.h": '#include "missing.h"\n'})

        result = check_dependencies(root)

        assert result.cycles == []
        assert result.scan is not None
        assert result.scan.unresolved_includes == 1

    def test_angle_include_cycle_from_root(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test a cycle closed through an angle include resolved at the root."""
        root = make_project({"lib/widget.h": "#include <lib/button.h>\n", "lib/button.h": '#include "widget.h"\n'})

        result = check_dependencies(root)

        button = os.path.join(root, "lib", "button.h")
        widget = os.path.join(root, "lib", "widget.h")
        assert result.cycles == [[button, widget, button]]

    def test_include_inside_disabled_branch_counts(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that the lexical scan reports cycles a preprocessor would skip."""
        root = make_project({"a.h": '#if 0\n#include "b.h"\n#endif\n', "b.h": '#include "a.h"\n'})

        assert len(check_dependencies(root).cycles) == 1

    def test_missing_project_directory(self, temp_dir: str) -> None:
        """Test that a missing root raises ProjectDirectoryError."""
        with pytest.raises(ProjectDirectoryError, match="does not exist"):
            check_dependencies(os.path.join(temp_dir, "nope"))

    def test_project_path_is_file(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that a file given as root is rejected."""
        root = make_project({"a.h": ""})

        with pytest.raises(ProjectDirectoryError, match="not a directory"):
            check_dependencies(os.path.join(root, "a.h"))


class TestIgnoreManifest:
    """Tests for ignore manifest handling in a full check."""

    def test_ignored_file_breaks_cycle(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that ignoring one participant removes the cycle and its edges."""
        root = make_project(
            {
                "a.h": '#include "b.h"\n',
                "b.h": '#include "a.h"\n',
                "c.h": '#include "b.h"\n',
                "CircularIgnore.json": json.dumps(["b.h"]),
            }
        )

        result = check_dependencies(root)

        assert result.cycles == []
        assert result.graph is not None
        assert os.path.join(root, "b.h") not in result.graph
        assert result.graph.number_of_edges() == 0

    def test_ignored_directory_breaks_cycle(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that a directory entry hides cycles inside it."""
        root = make_project(
            {
                "third_party/x.h": '#include "y.h"\n',
                "third_party/y.h": '#include "x.h"\n',
                "src/main.cpp": '#include "../third_party/x.h"\n',
                "CircularIgnore.json": json.dumps(["third_party"]),
            }
        )

        result = check_dependencies(root)

        assert result.cycles == []
        assert result.scan is not None
        assert result.scan.discovery.ignored == 2

    def test_malformed_manifest_aborts(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that a broken manifest fails the check."""
        root = make_project({"a.h": '#include "a.h"\n', "CircularIgnore.json": "[not json"})

        with pytest.raises(ConfigurationError):
            check_dependencies(root)

    def test_custom_manifest_name(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test the manifest_name option."""
        root = make_project({"a.h": '#include "a.h"\n', "ignore.json": json.dumps(["a.h"])})

        assert len(check_dependencies(root).cycles) == 1
        assert check_dependencies(root, manifest_name="ignore.json").cycles == []


class TestCheckOptions:
    """Tests for exclude, dedupe and exhaustive options."""

    def test_exclude_patterns(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that excluded files are not scanned."""
        root = make_project({"gen/a.h": '#include "b.h"\n', "gen/b.h": '#include "a.h"\n', "src/c.h": ""})

        assert len(check_dependencies(root).cycles) == 1
        assert check_dependencies(root, exclude_patterns=["gen/*"]).cycles == []

    def test_exhaustive_reports_hidden_cycle(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that exhaustive mode finds the cycle pruned by the DFS."""
        root = make_project({"a.h": '#include "b.h"\n#include "c.h"\n', "b.h": '#include "c.h"\n', "c.h": '#include "a.h"\n'})

        assert len(check_dependencies(root).cycles) == 1
        assert len(check_dependencies(root, exhaustive=True).cycles) == 2
        assert len(check_dependencies(root, exhaustive=True, max_cycles=1).cycles) == 1

    def test_dedupe_keeps_distinct_cycles(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that dedupe never drops distinct cycles."""
        root = make_project({"a.h": '#include "b.h"\n#include "c.h"\n', "b.h": '#include "a.h"\n', "c.h": '#include "a.h"\n'})

        raw = check_dependencies(root).cycles
        deduped = check_dependencies(root, dedupe=True).cycles

        assert {tuple(sorted(set(c))) for c in raw} == {tuple(sorted(set(c))) for c in deduped}
        assert len(deduped) == 2


class TestFailingVariants:
    """Tests for check_dependencies_or_fail and DependencyChecker."""

    def test_or_fail_raises_with_cycles(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that cycles raise DependencyCycleError carrying the list."""
        root = make_project({"a.h": '#include "b.h"\n', "b.h": '#include "a.h"\n'})

        with pytest.raises(DependencyCycleError) as exc_info:
            check_dependencies_or_fail(root)

        a, b = os.path.join(root, "a.h"), os.path.join(root, "b.h")
        assert exc_info.value.cycles == [[a, b, a]]
        assert exc_info.value.exit_code == EXIT_CYCLES_FOUND
        assert str(exc_info.value) == f"Circular dependencies detected:\n{a} -> {b} -> {a}"

    def test_or_fail_returns_clean_result(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that a clean tree returns normally."""
        root = make_project({"a.h": '#include "b.h"\n', "b.h": ""})

        assert check_dependencies_or_fail(root).cycles == []

    def test_checker_class(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test the reusable DependencyChecker."""
        root = make_project({"a.h": '#include "b.h"\n', "b.h": '#include "a.h"\n', "vendor/v.h": '#include "v.h"\n'})
        checker = DependencyChecker(exclude_patterns=["vendor/*"])

        assert len(checker.check(root).cycles) == 1
        with pytest.raises(DependencyCycleError):
            checker.check_or_fail(root)
        assert "vendor/*" in repr(checker)

    def test_checker_rescans_each_call(self, make_project) -> None:  # type: ignore[no-untyped-def]
        """Test that fixing a file between calls is picked up."""
        root = make_project({"a.h": '#include "b.h"\n', "b.h": '#include "a.h"\n'})
        checker = DependencyChecker()

        assert checker.check(root).has_cycles
        make_project({"b.h": "// fixed\n"})
        assert not checker.check(root).has_cycles
