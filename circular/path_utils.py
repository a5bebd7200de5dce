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
"""Include path resolution and path identity helpers.

Paths handled by the checker are absolute and normalized. Identity between two
paths is decided by path_key(), which folds case so that lookups behave the same
on case-sensitive and case-insensitive file systems.
"""

import os
import enum
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class IncludeKind(enum.Enum):
    """Delimiter style of an #include directive."""

    QUOTED = "quoted"  # #include "file.h"
    ANGLE = "angle"  # #include <file.h>


def normalize_path(path: str) -> str:
    """Return the absolute path with '.' and '..' collapsed."""
    return os.path.normpath(os.path.abspath(path))


def path_key(path: str) -> str:
    """Return the case-insensitive identity of a normalized path.

    Args:
        path: Absolute, normalized path

    Returns:
        Key suitable for set membership and dict lookups
    """
    return os.path.normcase(path).casefold()


def relative_display(path: str, project_root: str) -> str:
    """Get a path relative to the project root for display.

    Args:
        path: Absolute file path
        project_root: Project root directory

    Returns:
        Relative path if the file lives under the root, otherwise the path unchanged
    """
    try:
        rel_path = os.path.relpath(path, project_root)
    except ValueError:
        # Different drives on Windows
        return path
    if rel_path == os.pardir or rel_path.startswith(os.pardir + os.sep):
        return path
    return rel_path


def resolve_include(
    including_file: str, raw_token: str, kind: IncludeKind, project_root: str, known_files: Optional[Dict[str, str]] = None
) -> Optional[str]:
    """Resolve an include token to the absolute path of an existing file.

    Quoted includes resolve against the directory of the including file, angle
    includes against the project root. Absolute tokens are used as written.
    This approximates a compiler's search path with a single directory and does
    not try to emulate -I ordering.

    Args:
        including_file: Absolute path of the file containing the directive
        raw_token: Path literal between the delimiters
        kind: IncludeKind.QUOTED or IncludeKind.ANGLE
        project_root: Absolute project root, used for angle includes
        known_files: Optional mapping of path_key() -> path for scanned files.
            A target matching a known file by key resolves to that file's
            spelling even if the exact spelling does not exist on disk.

    Returns:
        Normalized absolute path, or None if the target does not exist
    """
    token = raw_token.strip().replace("\\", "/")
    if not token:
        return None

    if kind is IncludeKind.QUOTED:
        base_dir = os.path.dirname(including_file)
    else:
        base_dir = project_root

    # os.path.join keeps an absolute token as-is
    candidate = normalize_path(os.path.join(base_dir, token))

    if known_files is not None:
        known = known_files.get(path_key(candidate))
        if known is not None:
            return known

    if os.path.isfile(candidate):
        return candidate

    logger.debug("Unresolved include '%s' in %s (tried %s)", raw_token, including_file, candidate)
    return None
