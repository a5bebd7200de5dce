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
"""Loading of the project-local ignore manifest (CircularIgnore.json).

The manifest is a JSON array of paths, relative to the project root or
absolute. Directories expand to every file beneath them. Entries naming
nothing on disk are skipped.
"""

import os
import json
import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Set, Tuple

from .constants import IGNORE_MANIFEST_NAME, SOURCE_ENCODING, ConfigurationError
from .path_utils import normalize_path, path_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IgnoreSet:
    """Files excluded from both graph nodes and graph edges.

    Attributes:
        keys: path_key() of every ignored file
        entries: Manifest entries after resolution to absolute paths
        manifest_path: Manifest that was loaded, or None if there was none
    """

    keys: FrozenSet[str] = frozenset()
    entries: Tuple[str, ...] = ()
    manifest_path: Optional[str] = None

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        return path_key(normalize_path(path)) in self.keys

    def __len__(self) -> int:
        return len(self.keys)


def read_ignore_manifest(manifest_path: str) -> List[str]:
    """Read and validate the ignore manifest.

    Args:
        manifest_path: Path to CircularIgnore.json

    Returns:
        List of raw path entries (empty for a JSON null document)

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON array of strings
    """
    try:
        with open(manifest_path, "r", encoding=SOURCE_ENCODING) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in ignore manifest {manifest_path}: {e}", manifest_path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read ignore manifest {manifest_path}: {e}", manifest_path) from e

    if data is None:
        return []

    if not isinstance(data, list):
        raise ConfigurationError(f"Ignore manifest {manifest_path} must contain a JSON array of paths, got {type(data).__name__}", manifest_path)

    for index, entry in enumerate(data):
        if not isinstance(entry, str):
            raise ConfigurationError(f"Ignore manifest {manifest_path}: entry {index} must be a string, got {type(entry).__name__}", manifest_path)

    return data


def _collect_directory_files(directory: str) -> Set[str]:
    files: Set[str] = set()
    for root, _dirs, filenames in os.walk(directory):
        for filename in filenames:
            files.add(path_key(normalize_path(os.path.join(root, filename))))
    return files


def load_ignore_set(project_root: str, manifest_name: str = IGNORE_MANIFEST_NAME) -> IgnoreSet:
    """Load the ignore manifest from the project root and expand it to files.

    Args:
        project_root: Project root directory
        manifest_name: Manifest file name, looked up directly in project_root

    Returns:
        IgnoreSet; empty when the manifest does not exist

    Raises:
        ConfigurationError: If the manifest exists but is malformed
    """
    project_root = normalize_path(project_root)
    manifest_path = os.path.join(project_root, manifest_name)

    if not os.path.isfile(manifest_path):
        logger.debug("No ignore manifest at %s", manifest_path)
        return IgnoreSet()

    raw_entries = read_ignore_manifest(manifest_path)

    keys: Set[str] = set()
    entries: List[str] = []
    for raw_entry in raw_entries:
        full_path = normalize_path(os.path.join(project_root, raw_entry.replace("\\", "/")))
        entries.append(full_path)

        if os.path.isdir(full_path):
            directory_files = _collect_directory_files(full_path)
            keys.update(directory_files)
            logger.info("Ignored directory: %s (%d files)", full_path, len(directory_files))
        elif os.path.isfile(full_path):
            keys.add(path_key(full_path))
            logger.info("Ignored file: %s", full_path)
        else:
            logger.debug("Ignore entry '%s' does not exist, skipping", raw_entry)

    logger.debug("Loaded %d ignore entries covering %d files from %s", len(entries), len(keys), manifest_path)
    return IgnoreSet(keys=frozenset(keys), entries=tuple(entries), manifest_path=manifest_path)
