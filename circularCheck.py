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
"""Detect circular #include dependencies in a C/C++ project tree.

PURPOSE:
    Finds include cycles (a.h includes b.h, b.h includes a.h) before they turn
    into confusing incomplete-type errors. Meant to run at the start of every
    build; a non-zero exit code stops the build when cycles exist.

WHAT IT DOES:
    - Walks the project directory for .c, .cc, .cpp, .h, .hh and .hpp files
    - Drops files listed in CircularIgnore.json at the project root
    - Extracts #include "..." and #include <...> directives from each file
    - Resolves quoted includes against the including file's directory and
      angle includes against the project root
    - Reports every cycle found by a depth-first search over the include graph

METHOD:
    Lexical scan, not a preprocessor. Includes inside #if/#ifdef blocks count
    as edges, so the graph can contain cycles a compiler would never see.
    Includes that do not resolve to an existing file are dropped silently.

IGNORE MANIFEST:
    CircularIgnore.json is a JSON array of paths, relative to the project root
    or absolute. A directory entry ignores every file beneath it:

        ["third_party", "src/generated/Config.h"]

EXIT CODES:
    0  no circular includes (or --warn-only)
    1  invalid arguments or project directory
    2  runtime error, including a malformed ignore manifest
    3  circular includes found

EXAMPLES:
    # Check a project
    ./circularCheck.py ~/src/engine

    # Report cycles without failing the build
    ./circularCheck.py ~/src/engine --warn-only

    # Merge rotated duplicates and export the graph for Gephi/yEd
    ./circularCheck.py ~/src/engine --dedupe --export-graph includes.graphml
"""
__version__ = "1.0.0"

import sys
import argparse
import logging
from typing import List, Optional

from circular.color_utils import Colors, print_error, print_warning, should_use_color
from circular.constants import (
    EXIT_CYCLES_FOUND,
    EXIT_INVALID_ARGS,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    IGNORE_MANIFEST_NAME,
    ArgumentError,
    CircularCheckError,
    ConfigurationError,
    ValidationError,
)
from circular.dependency_checker import DependencyChecker
from circular.export_utils import export_cycles_json, export_dependency_graph, validate_graph_format
from circular.report_utils import print_check_result


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Detect circular #include dependencies in a C/C++ project tree.",
        epilog="""
Quoted includes resolve relative to the including file, angle includes
relative to PROJECT_DIR. Files and directories listed in CircularIgnore.json
at PROJECT_DIR are removed from the graph together with every edge into them.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}", help="Show version and exit")

    parser.add_argument("project_directory", metavar="PROJECT_DIR", help="Root of the C/C++ tree to scan")

    parser.add_argument(
        "--ignore-file", type=str, default=IGNORE_MANIFEST_NAME, metavar="NAME", help=f"Ignore manifest name inside PROJECT_DIR (default: {IGNORE_MANIFEST_NAME})"
    )

    parser.add_argument(
        "--exclude",
        type=str,
        action="append",
        metavar="PATTERN",
        help="Do not scan files matching glob pattern relative to PROJECT_DIR (can be used multiple times). " 'Examples: "third_party/*", "*/test/*"',
    )

    parser.add_argument("--dedupe", action="store_true", help="Merge rotations of the same cycle found from different start files")

    parser.add_argument(
        "--exhaustive", action="store_true", help="Enumerate every elementary cycle instead of the depth-first report (can be slow on tangled trees)"
    )

    parser.add_argument("--max-cycles", type=int, metavar="N", help="Stop exhaustive enumeration after N cycles")

    parser.add_argument("--export-graph", type=str, metavar="FILE", help="Export the include graph (formats: .graphml, .gexf, .json)")

    parser.add_argument("--export-cycles", type=str, metavar="FILE.json", help="Export the cycle list as JSON")

    parser.add_argument("--warn-only", action="store_true", help="Report cycles but exit with 0")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging and list every cycle")

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Reject invalid option combinations.

    Raises:
        ArgumentError: If the options conflict or are out of range
    """
    if args.max_cycles is not None:
        if not args.exhaustive:
            raise ArgumentError("--max-cycles requires --exhaustive")
        if args.max_cycles <= 0:
            raise ArgumentError("--max-cycles must be a positive number")

    if args.exhaustive and args.dedupe:
        logging.info("--exhaustive already reports each cycle once, --dedupe has no effect")

    if args.export_graph:
        validate_graph_format(args.export_graph)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the circular include check.

    Returns:
        Exit code (0 for success, non-zero for errors or cycles)
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    parser = create_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    try:
        validate_args(args)

        checker = DependencyChecker(
            manifest_name=args.ignore_file,
            exclude_patterns=args.exclude,
            dedupe=args.dedupe,
            exhaustive=args.exhaustive,
            max_cycles=args.max_cycles,
        )
        result = checker.check(args.project_directory)

        print_check_result(result, verbose=args.verbose)

        if args.export_graph:
            export_dependency_graph(args.export_graph, result)
        if args.export_cycles:
            export_cycles_json(args.export_cycles, result)

        if result.has_cycles and not args.warn_only:
            return EXIT_CYCLES_FOUND
        return EXIT_SUCCESS

    except ValidationError as e:
        logging.error("Validation error: %s", e)
        print_error(str(e))
        return EXIT_INVALID_ARGS

    except ConfigurationError as e:
        logging.error("Configuration error: %s", e)
        print_error(str(e))
        print_warning("Fix or remove the ignore manifest and run the check again", prefix=False)
        return e.exit_code

    except CircularCheckError as e:
        logging.error("Check failed: %s", e)
        print_error(str(e))
        return e.exit_code

    except Exception as e:  # pylint: disable=broad-exception-caught
        logging.critical("Unexpected error: %s", e, exc_info=True)
        print_error(f"Fatal error: {e}")
        print_warning("Run with --verbose for more details", prefix=False)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print_warning("\nInterrupted by user", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
