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
"""Export utilities for writing check results to files."""

import os
import json
import logging
from typing import Any, List

import networkx as nx
from networkx.readwrite import json_graph

from .color_utils import print_error, print_success
from .constants import FILE_ENCODING, SUPPORTED_GRAPH_FORMATS, ArgumentError
from .dependency_checker import CheckResult
from .graph_utils import Cycle
from .path_utils import relative_display

logger = logging.getLogger(__name__)


def validate_graph_format(filename: str) -> str:
    """Return the lower-cased extension of filename.

    Raises:
        ArgumentError: If the extension is not one of SUPPORTED_GRAPH_FORMATS
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in SUPPORTED_GRAPH_FORMATS:
        raise ArgumentError(f"Unsupported graph format '{ext or filename}'. Supported: {', '.join(SUPPORTED_GRAPH_FORMATS)}")
    return ext


def annotate_graph(directed_graph: "nx.DiGraph[Any]", cycles: List[Cycle], project_root: str) -> "nx.DiGraph[Any]":
    """Copy the include graph and add visualization attributes.

    Node attributes:
        - label: File basename
        - path: Path relative to the project root
        - scanned: Whether the file was parsed for includes
        - in_cycle: Whether the file participates in a reported cycle

    Edge attributes:
        - in_cycle: Whether the edge is a step of a reported cycle
    """
    G = directed_graph.copy()

    files_in_cycles = set()
    cycle_edges = set()
    for cycle in cycles:
        files_in_cycles.update(cycle)
        cycle_edges.update(zip(cycle, cycle[1:]))

    for node in G.nodes():
        G.nodes[node]["label"] = os.path.basename(node)
        G.nodes[node]["path"] = relative_display(node, project_root)
        G.nodes[node]["scanned"] = bool(G.nodes[node].get("scanned", True))
        G.nodes[node]["in_cycle"] = node in files_in_cycles

    for u, v in G.edges():
        G.edges[u, v]["in_cycle"] = (u, v) in cycle_edges

    return G


def export_dependency_graph(filename: str, result: CheckResult) -> bool:
    """Export the include graph of a check to GraphML, GEXF or node-link JSON.

    Args:
        filename: Output filename (extension determines format)
        result: Check whose graph and cycles are written

    Returns:
        True if the file was written

    Raises:
        ArgumentError: If the extension is not supported
    """
    ext = validate_graph_format(filename)
    if result.graph is None:
        logger.warning("Check result carries no graph, nothing to export")
        return False

    G = annotate_graph(result.graph, result.cycles, result.project_root)

    try:
        if ext == ".graphml":
            nx.write_graphml(G, filename)
        elif ext == ".gexf":
            nx.write_gexf(G, filename)
        else:
            data = json_graph.node_link_data(G)
            with open(filename, "w", encoding=FILE_ENCODING) as f:
                json.dump(data, f, indent=2)
    except OSError as e:
        logger.error("Failed to export graph: %s", e)
        print_error(f"Failed to export graph: {e}")
        return False

    logger.info("Exported dependency graph to %s", filename)
    print_success(f"Exported dependency graph to {filename}")
    return True


def export_cycles_json(filename: str, result: CheckResult) -> bool:
    """Write the cycle list of a check as JSON.

    The document holds the project root and, for every cycle, both the
    absolute paths and the paths relative to the root.

    Returns:
        True if the file was written
    """
    document = {
        "project_root": result.project_root,
        "cycle_count": len(result.cycles),
        "cycles": [
            {"files": cycle, "relative": [relative_display(node, result.project_root) for node in cycle]}
            for cycle in result.cycles
        ],
    }

    try:
        with open(filename, "w", encoding=FILE_ENCODING) as f:
            json.dump(document, f, indent=2)
    except OSError as e:
        logger.error("Failed to export cycles: %s", e)
        print_error(f"Failed to export cycles: {e}")
        return False

    logger.info("Exported %d cycle(s) to %s", len(result.cycles), filename)
    print_success(f"Exported cycles to {filename}")
    return True
