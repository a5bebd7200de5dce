#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Entry point for circular include checks.

check_dependencies() returns the cycles as data; check_dependencies_or_fail()
turns a non-empty result into a DependencyCycleError for callers that want a
build to stop. Each call loads the ignore manifest, rescans the tree and builds
a fresh graph, so calls never share state.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import networkx as nx

from .constants import IGNORE_MANIFEST_NAME, DependencyCycleError, ProjectDirectoryError
from .graph_utils import Cycle, canonicalize_cycles, find_all_simple_cycles, find_cycles
from .ignore_utils import load_ignore_set
from .include_graph import IncludeGraphScanResult, build_include_graph
from .path_utils import normalize_path

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Outcome of one circular include check.

    An empty cycle list means the tree has no circular includes. The object is
    truthy when cycles were found.

    Attributes:
        project_root: Normalized root that was scanned
        cycles: Cycles in discovery order, each closing on its first file
        scan: Graph and scan statistics the cycles were computed from
    """

    project_root: str
    cycles: List[Cycle] = field(default_factory=list)
    scan: Optional[IncludeGraphScanResult] = None

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    @property
    def graph(self) -> Optional["nx.DiGraph[Any]"]:
        return self.scan.graph if self.scan is not None else None

    def __bool__(self) -> bool:
        return self.has_cycles

    def __len__(self) -> int:
        return len(self.cycles)


def validate_project_root(project_root: str) -> str:
    """Normalize the project root and make sure it is a directory.

    Raises:
        ProjectDirectoryError: If the path does not exist or is not a directory
    """
    root = normalize_path(project_root)
    if not os.path.exists(root):
        raise ProjectDirectoryError(f"Project directory does not exist: {root}")
    if not os.path.isdir(root):
        raise ProjectDirectoryError(f"Project path is not a directory: {root}")
    return root


def check_dependencies(
    project_root: str,
    manifest_name: str = IGNORE_MANIFEST_NAME,
    exclude_patterns: Optional[List[str]] = None,
    dedupe: bool = False,
    exhaustive: bool = False,
    max_cycles: Optional[int] = None,
) -> CheckResult:
    """Scan a project tree and report every circular include found.

    Args:
        project_root: Directory to scan
        manifest_name: Name of the ignore manifest in project_root
        exclude_patterns: Optional glob patterns of files not to scan
        dedupe: Merge rotations of the same cycle
        exhaustive: Enumerate every elementary cycle instead of the DFS report
        max_cycles: Cap for exhaustive enumeration

    Returns:
        CheckResult

    Raises:
        ProjectDirectoryError: If project_root is not a directory
        ConfigurationError: If the ignore manifest is malformed
    """
    root = validate_project_root(project_root)
    logger.info("Checking circular includes under %s", root)

    ignore_set = load_ignore_set(root, manifest_name)
    scan = build_include_graph(root, ignore_set, exclude_patterns)

    if exhaustive:
        cycles = find_all_simple_cycles(scan.graph, limit=max_cycles)
    else:
        cycles = find_cycles(scan.graph)
        if dedupe:
            cycles = canonicalize_cycles(cycles)

    return CheckResult(project_root=root, cycles=cycles, scan=scan)


def check_dependencies_or_fail(project_root: str, **kwargs: Any) -> CheckResult:
    """Run check_dependencies() and raise if any cycle was found.

    Raises:
        DependencyCycleError: Carrying every cycle found
    """
    result = check_dependencies(project_root, **kwargs)
    if result.has_cycles:
        raise DependencyCycleError(result.cycles)
    return result


class DependencyChecker:
    """Reusable check configuration.

    Holds options only; every check() call performs a full rescan.
    """

    def __init__(
        self,
        manifest_name: str = IGNORE_MANIFEST_NAME,
        exclude_patterns: Optional[List[str]] = None,
        dedupe: bool = False,
        exhaustive: bool = False,
        max_cycles: Optional[int] = None,
    ):
        self.manifest_name = manifest_name
        self.exclude_patterns = list(exclude_patterns or [])
        self.dedupe = dedupe
        self.exhaustive = exhaustive
        self.max_cycles = max_cycles

    def check(self, project_root: str) -> CheckResult:
        return check_dependencies(
            project_root,
            manifest_name=self.manifest_name,
            exclude_patterns=self.exclude_patterns,
            dedupe=self.dedupe,
            exhaustive=self.exhaustive,
            max_cycles=self.max_cycles,
        )

    def check_or_fail(self, project_root: str) -> CheckResult:
        result = self.check(project_root)
        if result.has_cycles:
            raise DependencyCycleError(result.cycles)
        return result

    def __repr__(self) -> str:
        return f"DependencyChecker(manifest_name={self.manifest_name!r}, exclude_patterns={self.exclude_patterns!r}, dedupe={self.dedupe}, exhaustive={self.exhaustive})"
