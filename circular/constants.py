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
"""Shared constants for the circular include checker.

This module provides centralized constants used across the circular include
checker to ensure consistency and make it easy to adjust defaults.
"""

from typing import List

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_CYCLES_FOUND = 3
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Scanning Constants
# =============================================================================

# Extensions are compared lower-cased
SOURCE_EXTENSIONS = (".c", ".cc", ".cpp", ".h", ".hh", ".hpp")

IGNORE_MANIFEST_NAME = "CircularIgnore.json"  # Ignore manifest at the project root

FILE_ENCODING = "utf-8"

# Reads strip a leading UTF-8 byte-order mark, as written by Visual Studio
SOURCE_ENCODING = "utf-8-sig"

# =============================================================================
# Display Limits
# =============================================================================

MAX_CYCLES_DISPLAY = 20  # Maximum cycles to display unless --verbose
MAX_IGNORED_DISPLAY = 10  # Maximum ignored entries to list in verbose output

# =============================================================================
# Export Constants
# =============================================================================

SUPPORTED_GRAPH_FORMATS = [".graphml", ".gexf", ".json"]

# =============================================================================
# Exception Classes
# =============================================================================


class CircularCheckError(Exception):
    """Base exception for all circular checker errors.

    All exceptions carry an exit_code attribute that indicates what exit code
    the program should use when this error is caught at the main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(CircularCheckError):
    """Raised when input validation fails (arguments, paths, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ProjectDirectoryError(ValidationError):
    """Raised when the project directory is missing or not a directory."""


class ArgumentError(ValidationError):
    """Raised when command-line arguments are invalid."""


class ConfigurationError(CircularCheckError):
    """Raised when the ignore manifest cannot be parsed."""

    def __init__(self, message: str, manifest_path: str = ""):
        super().__init__(message, EXIT_RUNTIME_ERROR)
        self.manifest_path = manifest_path


class DependencyCycleError(CircularCheckError):
    """Raised by the failing check variants when circular includes exist.

    Attributes:
        cycles: Every cycle found, each closing on its first file
    """

    def __init__(self, cycles: List[List[str]]):
        lines = "\n".join(" -> ".join(cycle) for cycle in cycles)
        super().__init__(f"Circular dependencies detected:\n{lines}", EXIT_CYCLES_FOUND)
        self.cycles = cycles
