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
"""Console reporting and build-start integration for circular include checks."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Type
from types import TracebackType

from .color_utils import Colors, print_success
from .constants import MAX_CYCLES_DISPLAY, CircularCheckError
from .dependency_checker import CheckResult, DependencyChecker
from .graph_utils import Cycle, summarize_cycles
from .path_utils import relative_display

logger = logging.getLogger(__name__)

START_MESSAGE = "Starting circular dependency check..."
SUCCESS_MESSAGE = "Circular dependency check completed successfully."


@dataclass(frozen=True)
class Diagnostic:
    """A (file, message) pair for an error list.

    Locations are file-level; line and column stay unset.
    """

    file: str
    message: str
    line: Optional[int] = None
    column: Optional[int] = None


def format_cycle(cycle: Cycle, project_root: Optional[str] = None) -> str:
    """Format a cycle as 'a.h -> b.h -> a.h', relative to project_root when given."""
    if project_root is None:
        return " -> ".join(cycle)
    return " -> ".join(relative_display(node, project_root) for node in cycle)


def cycle_diagnostics(result: CheckResult) -> List[Diagnostic]:
    """One diagnostic per cycle, attributed to the cycle's first file."""
    return [
        Diagnostic(file=cycle[0], message=f"Circular dependency: {format_cycle(cycle, result.project_root)}")
        for cycle in result.cycles
    ]


def print_check_result(result: CheckResult, verbose: bool = False) -> None:
    """Print a colored summary of a check to stdout.

    Args:
        result: Check outcome
        verbose: List every cycle and the cyclic components instead of the first MAX_CYCLES_DISPLAY
    """
    scan = result.scan
    if scan is not None:
        print(f"{Colors.BRIGHT}Files:{Colors.RESET} {scan.discovery.format_concise()}")
        print(f"{Colors.BRIGHT}Include edges:{Colors.RESET} {Colors.CYAN}{scan.edge_count:,}{Colors.RESET}")
        if scan.unreadable_files:
            print(f"{Colors.YELLOW}Unreadable files skipped: {len(scan.unreadable_files)}{Colors.RESET}")
            if verbose:
                for file_path in scan.unreadable_files:
                    print(f"  {Colors.DIM}{relative_display(file_path, result.project_root)}{Colors.RESET}")

    if not result.has_cycles:
        print_success("No circular includes found.")
        return

    print(f"\n{Colors.RED}{Colors.BRIGHT}Circular includes detected: {len(result.cycles)}{Colors.RESET}")
    shown = result.cycles if verbose else result.cycles[:MAX_CYCLES_DISPLAY]
    for index, cycle in enumerate(shown, 1):
        print(f"  {Colors.DIM}{index:>3}.{Colors.RESET} {format_cycle(cycle, result.project_root)}")

    hidden = len(result.cycles) - len(shown)
    if hidden > 0:
        print(f"  {Colors.DIM}... {hidden} more (use --verbose to list all){Colors.RESET}")

    if verbose and result.graph is not None:
        summary = summarize_cycles(result.graph, result.cycles)
        print(f"\n{Colors.BRIGHT}Files in cycles:{Colors.RESET} {Colors.CYAN}{len(summary.files_in_cycles)}{Colors.RESET}")
        for number, component in enumerate(summary.components, 1):
            members = ", ".join(sorted(relative_display(node, result.project_root) for node in component))
            print(f"  {Colors.DIM}Component {number} ({len(component)} files):{Colors.RESET} {members}")
        for node in summary.self_loops:
            print(f"  {Colors.DIM}Self include:{Colors.RESET} {relative_display(node, result.project_root)}")


class BuildStartListener:
    """Runs a circular include check whenever a build starts.

    The host calls on_build_begin() synchronously with the directory to scan.
    Progress lines go to progress_sink and cycles go to diagnostics_sink as
    Diagnostic lists. Check errors are reported through the same sinks and do
    not propagate into the host.
    """

    def __init__(
        self,
        checker: DependencyChecker,
        progress_sink: Callable[[str], None],
        diagnostics_sink: Callable[[List[Diagnostic]], None],
    ):
        self.checker = checker
        self.progress_sink = progress_sink
        self.diagnostics_sink = diagnostics_sink
        self.attached = False

    def attach(self) -> "BuildStartListener":
        self.attached = True
        logger.debug("Build-start listener attached")
        return self

    def detach(self) -> None:
        self.attached = False
        logger.debug("Build-start listener detached")

    def __enter__(self) -> "BuildStartListener":
        return self.attach()

    def __exit__(self, exc_type: Optional[Type[BaseException]], exc: Optional[BaseException], tb: Optional[TracebackType]) -> None:
        self.detach()

    def on_build_begin(self, project_root: str) -> Optional[CheckResult]:
        """Check project_root and report through the sinks.

        Returns:
            The CheckResult, or None if the check itself failed or the listener is detached
        """
        if not self.attached:
            logger.debug("Ignoring build start while detached")
            return None

        self.progress_sink(START_MESSAGE)
        try:
            result = self.checker.check(project_root)
        except CircularCheckError as e:
            logger.error("Circular dependency check failed: %s", e)
            self.progress_sink(f"Error during circular dependency check: {e}")
            self.diagnostics_sink([Diagnostic(file="", message=str(e))])
            return None

        if not result.has_cycles:
            self.progress_sink(SUCCESS_MESSAGE)
            return result

        self.progress_sink(f"Circular dependencies detected: {len(result.cycles)}")
        for cycle in result.cycles:
            self.progress_sink(format_cycle(cycle, result.project_root))
        self.diagnostics_sink(cycle_diagnostics(result))
        return result
