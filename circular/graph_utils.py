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
"""Cycle detection over include graphs using NetworkX graphs."""

import logging
from itertools import islice
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

import networkx as nx

from .path_utils import path_key

logger = logging.getLogger(__name__)

Cycle = List[str]


@dataclass
class CycleSummary:
    """Aggregate view of the circular includes in a graph.

    Attributes:
        files_in_cycles: Every file that appears in at least one reported cycle
        components: Strongly connected components with more than one file
        self_loops: Files that include themselves
    """

    files_in_cycles: Set[str] = field(default_factory=set)
    components: List[Set[str]] = field(default_factory=list)
    self_loops: List[str] = field(default_factory=list)


def build_dependency_graph(include_graph: Mapping[str, Sequence[str]]) -> "nx.DiGraph[Any]":
    """Build a NetworkX directed graph from a file -> includes mapping.

    Keys become scanned nodes in mapping order, before any edge is added, so
    that edge targets never change the node order. Targets that are not keys
    are added as unscanned nodes.

    Args:
        include_graph: Mapping of files to their direct includes

    Returns:
        NetworkX DiGraph
    """
    G: nx.DiGraph[str] = nx.DiGraph()
    G.add_nodes_from(include_graph, scanned=True)

    for source, includes in include_graph.items():
        for included in includes:
            if included not in G:
                G.add_node(included, scanned=False)
            G.add_edge(source, included)

    logger.debug("Built graph with %s nodes and %s edges", G.number_of_nodes(), G.number_of_edges())
    return G


def _scanned_nodes(graph: "nx.DiGraph[Any]") -> List[str]:
    return [node for node, scanned in graph.nodes(data="scanned", default=True) if scanned]


def find_cycles(graph: "nx.DiGraph[Any]") -> List[Cycle]:
    """Find circular includes with a depth-first search.

    Scanned nodes are used as start points in insertion order. A global visited
    set means a file is fully explored at most once across all searches. When a
    neighbor is already on the current path, the path from that neighbor is
    reported as a cycle closed with the neighbor again, and the search moves on
    to the next sibling edge. Rotations of one cycle found from different start
    points are not merged; see canonicalize_cycles().

    The search keeps its own stack so deep include chains do not hit the
    interpreter recursion limit.

    Args:
        graph: Include graph (file -> included files)

    Returns:
        Cycles in discovery order, each with first == last. A file including
        itself gives [file, file].
    """
    cycles: List[Cycle] = []
    visited: Set[str] = set()
    path: List[str] = []
    path_index: Dict[str, int] = {}

    for start in _scanned_nodes(graph):
        if start in visited:
            continue

        path.append(start)
        path_index[start] = 0
        stack: List[Tuple[str, Iterator[str]]] = [(start, iter(graph.successors(start)))]

        while stack:
            node, neighbors = stack[-1]
            descended = False

            for neighbor in neighbors:
                if neighbor in path_index:
                    cycle = path[path_index[neighbor] :] + [neighbor]
                    logger.debug("Cycle found: %s", " -> ".join(cycle))
                    cycles.append(cycle)
                    continue

                if neighbor in visited:
                    continue

                path_index[neighbor] = len(path)
                path.append(neighbor)
                stack.append((neighbor, iter(graph.successors(neighbor))))
                descended = True
                break

            if not descended:
                stack.pop()
                path.pop()
                del path_index[node]
                visited.add(node)

    logger.info("Found %d circular include chain(s)", len(cycles))
    return cycles


def canonicalize_cycles(cycles: List[Cycle]) -> List[Cycle]:
    """Rotate each cycle to start at its smallest file and drop duplicates.

    The file order inside a cycle is kept, so A -> B -> A and B -> A -> B
    collapse to one entry while a reversed cycle stays distinct. The first
    occurrence of each cycle decides its position in the output.

    Args:
        cycles: Closed cycles as returned by find_cycles()

    Returns:
        Deduplicated closed cycles
    """
    seen: Set[Tuple[str, ...]] = set()
    result: List[Cycle] = []

    for cycle in cycles:
        body = cycle[:-1]
        if not body:
            continue
        keys = [path_key(node) for node in body]
        pivot = keys.index(min(keys))
        rotated = body[pivot:] + body[:pivot]
        identity = tuple(keys[pivot:] + keys[:pivot])
        if identity in seen:
            continue
        seen.add(identity)
        result.append(rotated + [rotated[0]])

    if len(result) != len(cycles):
        logger.debug("Merged %d rotated duplicate cycle(s)", len(cycles) - len(result))
    return result


def find_all_simple_cycles(graph: "nx.DiGraph[Any]", limit: Optional[int] = None) -> List[Cycle]:
    """Enumerate every elementary cycle with NetworkX.

    Unlike find_cycles() this does not prune through visited files, so it can
    be exponential on densely coupled trees. Use limit to cap the output.

    Args:
        graph: Include graph
        limit: Maximum number of cycles to return (None for all)

    Returns:
        Closed cycles, each rotated to start at its smallest file
    """
    raw_cycles = nx.simple_cycles(graph)
    if limit is not None:
        raw_cycles = islice(raw_cycles, limit)

    closed = [list(cycle) + [cycle[0]] for cycle in raw_cycles]
    cycles = canonicalize_cycles(closed)
    # simple_cycles yields in an order that depends on internal sets; sort for stable output
    cycles.sort(key=lambda cycle: [path_key(node) for node in cycle])
    return cycles


def find_strongly_connected_components(graph: "nx.DiGraph[Any]") -> Tuple[List[Set[str]], List[str]]:
    """Find strongly connected components (cycles) and self-loops in a directed graph.

    Args:
        graph: NetworkX DiGraph

    Returns:
        Tuple of (components, self_loops) where:
        - components: List of sets containing files in multi-file cycles
        - self_loops: List of files that include themselves
    """
    components = []
    self_loops = []
    for scc in nx.strongly_connected_components(graph):
        if len(scc) > 1:
            components.append(scc)
        elif len(scc) == 1:
            node = next(iter(scc))
            if graph.has_edge(node, node):
                self_loops.append(node)

    return components, self_loops


def summarize_cycles(graph: "nx.DiGraph[Any]", cycles: List[Cycle]) -> CycleSummary:
    """Summarize reported cycles together with the graph's cyclic components.

    Args:
        graph: Include graph
        cycles: Cycles reported for the graph

    Returns:
        CycleSummary
    """
    files_in_cycles: Set[str] = set()
    for cycle in cycles:
        files_in_cycles.update(cycle)

    components, self_loops = find_strongly_connected_components(graph)
    components.sort(key=len, reverse=True)
    return CycleSummary(files_in_cycles=files_in_cycles, components=components, self_loops=sorted(self_loops, key=path_key))
