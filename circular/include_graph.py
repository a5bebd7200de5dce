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
"""Include directive extraction and dependency graph construction.

The scan is lexical: every #include with a quoted or angle-bracket literal is
an edge, including those inside #if/#ifdef branches that a compiler would
skip. The resulting graph over-approximates the real include graph.
"""

import re
import time
import logging
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

import networkx as nx

from .constants import SOURCE_ENCODING
from .file_utils import DiscoveryStatistics, find_source_files
from .ignore_utils import IgnoreSet
from .path_utils import IncludeKind, normalize_path, path_key, resolve_include

logger = logging.getLogger(__name__)

INCLUDE_PATTERN = re.compile(r'^[ \t]*#[ \t]*include[ \t]*(?:"([^"\r\n]+)"|<([^>\r\n]+)>)', re.MULTILINE)


class IncludeDirective(NamedTuple):
    """A single #include as written in the source."""

    path: str
    kind: IncludeKind
    line: int


@dataclass
class IncludeGraphScanResult:
    """Result of scanning a project tree into a dependency graph.

    Attributes:
        graph: File -> included files. Scanned files carry scanned=True and are
            inserted in enumeration order; existing include targets that were
            not scanned themselves carry scanned=False.
        project_root: Normalized project root
        files: Scanned files in enumeration order
        ignore_set: Ignore set applied to nodes and edges
        discovery: File discovery statistics
        unreadable_files: Files that could not be read and have no edges
        unresolved_includes: Number of include directives that named no existing file
        elapsed: Scan time in seconds
    """

    graph: "nx.DiGraph[str]"
    project_root: str
    files: List[str]
    ignore_set: IgnoreSet = field(default_factory=IgnoreSet)
    discovery: DiscoveryStatistics = field(default_factory=DiscoveryStatistics)
    unreadable_files: List[str] = field(default_factory=list)
    unresolved_includes: int = 0
    elapsed: float = 0.0

    @property
    def edge_count(self) -> int:
        return int(self.graph.number_of_edges())


def parse_includes_from_content(content: str) -> List[IncludeDirective]:
    """Parse #include directives from C/C++ file content.

    Whitespace is allowed before the '#', between '#' and 'include', and before
    the path literal. A directive commented out with a leading // is not
    matched because the line must start with '#'. Block comments are not
    tracked, so a directive on its own line inside /* ... */ is still
    returned, the same as one inside a disabled #if branch.

    Args:
        content: File content to parse

    Returns:
        Directives in source order

    Example:
        >>> [d.path for d in parse_includes_from_content('#include <vector>\\n#include "a.h"\\n')]
        ['vector', 'a.h']
    """
    directives: List[IncludeDirective] = []
    for match in INCLUDE_PATTERN.finditer(content):
        line = content.count("\n", 0, match.start()) + 1
        if match.group(1) is not None:
            directives.append(IncludeDirective(match.group(1), IncludeKind.QUOTED, line))
        else:
            directives.append(IncludeDirective(match.group(2), IncludeKind.ANGLE, line))
    return directives


def read_source_file(file_path: str) -> str:
    """Read a source file fully as text; undecodable bytes are dropped."""
    with open(file_path, "r", encoding=SOURCE_ENCODING, errors="ignore") as f:
        return f.read()


def build_include_graph(project_root: str, ignore_set: Optional[IgnoreSet] = None, exclude_patterns: Optional[List[str]] = None) -> IncludeGraphScanResult:
    """Scan a project tree and build its file-level include graph.

    Every surviving file becomes a node even without includes. Edges follow the
    order of the directives in the source; unresolved and ignored targets are
    dropped. Unreadable files are logged and kept as isolated nodes.

    Args:
        project_root: Directory to scan; also the base for angle includes
        ignore_set: Files excluded from nodes and edges (default: none)
        exclude_patterns: Optional glob patterns of files not to scan

    Returns:
        IncludeGraphScanResult
    """
    start_time = time.time()
    project_root = normalize_path(project_root)
    if ignore_set is None:
        ignore_set = IgnoreSet()

    files, discovery = find_source_files(project_root, ignore_set, exclude_patterns)

    # path_key -> spelling, for case-insensitive target resolution
    known_files: Dict[str, str] = {path_key(f): f for f in files}

    graph: nx.DiGraph[str] = nx.DiGraph()
    graph.add_nodes_from(files, scanned=True)

    unreadable_files: List[str] = []
    unresolved = 0

    for file_path in files:
        try:
            content = read_source_file(file_path)
        except OSError as e:
            logger.warning("Could not read %s, skipping: %s", file_path, e)
            unreadable_files.append(file_path)
            continue

        for directive in parse_includes_from_content(content):
            target = resolve_include(file_path, directive.path, directive.kind, project_root, known_files)
            if target is None:
                unresolved += 1
                continue

            if target in ignore_set:
                logger.debug("Dropping edge %s -> %s (ignored target)", file_path, target)
                continue

            if target not in graph:
                graph.add_node(target, scanned=False)
                known_files[path_key(target)] = target

            graph.add_edge(file_path, target)

    elapsed = time.time() - start_time
    logger.info("Built include graph with %d files and %d edges in %.2fs", len(files), graph.number_of_edges(), elapsed)
    if unresolved:
        logger.debug("%d include directives did not resolve to a file", unresolved)

    return IncludeGraphScanResult(
        graph=graph,
        project_root=project_root,
        files=files,
        ignore_set=ignore_set,
        discovery=discovery,
        unreadable_files=unreadable_files,
        unresolved_includes=unresolved,
        elapsed=elapsed,
    )
