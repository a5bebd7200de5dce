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
"""File discovery and path filtering for C/C++ project trees."""

import os
import fnmatch
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .constants import SOURCE_EXTENSIONS
from .color_utils import Colors
from .ignore_utils import IgnoreSet
from .path_utils import normalize_path

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryStatistics:
    """Statistics about file discovery.

    Attributes:
        candidates: Files with a C/C++ extension found under the root
        ignored: Candidates dropped because the ignore manifest lists them
        excluded: Candidates dropped by exclude patterns
        scanned: Files that will be parsed for includes
        pattern_matches: Exclude pattern -> number of files it removed
    """

    candidates: int = 0
    ignored: int = 0
    excluded: int = 0
    scanned: int = 0
    pattern_matches: Dict[str, int] = field(default_factory=dict)

    @property
    def unmatched_patterns(self) -> List[str]:
        return [pattern for pattern, count in self.pattern_matches.items() if count == 0]

    def format_concise(self) -> str:
        """Format concise single-line summary.

        Returns:
            Formatted string like "120 → 97 | Excluded: 20 ignored, 3 by patterns"
        """
        parts = [f"{Colors.CYAN}{self.candidates:,}{Colors.RESET} → {Colors.CYAN}{self.scanned:,}{Colors.RESET}"]

        excluded_parts = []
        if self.ignored > 0:
            excluded_parts.append(f"{Colors.CYAN}{self.ignored}{Colors.RESET} {Colors.DIM}ignored{Colors.RESET}")
        if self.excluded > 0:
            excluded_parts.append(f"{Colors.CYAN}{self.excluded}{Colors.RESET} {Colors.DIM}by patterns{Colors.RESET}")

        if excluded_parts:
            parts.append(f"| {Colors.DIM}Excluded:{Colors.RESET} " + ", ".join(excluded_parts))

        return " ".join(parts)


def is_source_file(path: str) -> bool:
    """Check if a path has one of the scanned C/C++ extensions (case-insensitive)."""
    return os.path.splitext(path)[1].lower() in SOURCE_EXTENSIONS


def _relative_posix(path: str, project_root: str) -> str:
    return os.path.relpath(path, project_root).replace(os.sep, "/")


def exclude_files_by_patterns(files: List[str], exclude_patterns: List[str], project_root: str, stats: DiscoveryStatistics) -> List[str]:
    """Drop files whose root-relative path matches a glob pattern.

    Paths are matched with forward slashes on every platform. The first
    matching pattern is credited with the file in stats.pattern_matches, and
    stats.excluded is increased by the number of files removed.

    Returns:
        Surviving files in their original order
    """
    for pattern in exclude_patterns:
        stats.pattern_matches.setdefault(pattern, 0)

    kept: List[str] = []
    for file_path in files:
        rel_path = _relative_posix(file_path, project_root)
        pattern = next((p for p in exclude_patterns if fnmatch.fnmatch(rel_path, p)), None)
        if pattern is None:
            kept.append(file_path)
        else:
            stats.pattern_matches[pattern] += 1
            logger.debug("Excluding %s (matches '%s')", rel_path, pattern)

    stats.excluded += len(files) - len(kept)
    return kept


def find_source_files(
    project_root: str, ignore_set: Optional[IgnoreSet] = None, exclude_patterns: Optional[List[str]] = None
) -> Tuple[List[str], DiscoveryStatistics]:
    """Enumerate C/C++ files under the project root.

    Directory entries are visited in sorted order so that two scans of an
    unchanged tree produce the same file order.

    Args:
        project_root: Root directory to walk recursively
        ignore_set: Files to drop (default: none)
        exclude_patterns: Optional glob patterns relative to the root

    Returns:
        Tuple of (files, statistics) where files are absolute normalized paths
    """
    project_root = normalize_path(project_root)
    stats = DiscoveryStatistics()
    files: List[str] = []

    for root, dirs, filenames in os.walk(project_root):
        dirs.sort()
        for filename in sorted(filenames):
            if not is_source_file(filename):
                continue

            stats.candidates += 1
            full_path = normalize_path(os.path.join(root, filename))

            if ignore_set is not None and full_path in ignore_set:
                stats.ignored += 1
                logger.debug("Skipping ignored file %s", full_path)
                continue

            files.append(full_path)

    if exclude_patterns:
        files = exclude_files_by_patterns(files, exclude_patterns, project_root, stats)
        for pattern in stats.unmatched_patterns:
            logger.warning("Exclude pattern '%s' matched no files", pattern)

    stats.scanned = len(files)
    logger.info("Found %d C/C++ files under %s (%d ignored, %d excluded)", stats.scanned, project_root, stats.ignored, stats.excluded)
    return files, stats
