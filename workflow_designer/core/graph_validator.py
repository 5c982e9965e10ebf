"""Structural validation of workflow graphs."""

import logging
from typing import Dict, List, Optional, Sequence, Set

from ..models.core import (
    Edge,
    NodeKind,
    ValidationDetails,
    ValidationErrorType,
    ValidationIssue,
    ValidationResult,
    WorkflowNodeBase,
)
from .logging import get_logger, log_with_context

logger = get_logger(__name__)

WHITE, GRAY, BLACK = 0, 1, 2


def build_adjacency(nodes: Sequence[WorkflowNodeBase], edges: Sequence[Edge]) -> Dict[str, List[str]]:
    """
    Build an ID-keyed adjacency mapping from the edge list.

    Every node gets an entry, and so does every edge endpoint, even one
    that names no node. Targets keep edge-list order.
    """
    adjacency: Dict[str, List[str]] = {node.id: [] for node in nodes}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)
        adjacency.setdefault(edge.target, [])
    return adjacency


def find_reachable(start_id: str, adjacency: Dict[str, List[str]]) -> Set[str]:
    """Return the set of IDs reachable from ``start_id`` (start included)."""
    visited: Set[str] = set()
    stack = [start_id]

    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        for neighbor in adjacency.get(current, []):
            if neighbor not in visited:
                stack.append(neighbor)

    return visited


def detect_cycles(nodes: Sequence[WorkflowNodeBase], edges: Sequence[Edge]) -> List[List[str]]:
    """
    Find one example cycle per back edge using three-colour DFS.

    Nodes are mapped to integer indices so colours and parents live in flat
    lists, and the DFS keeps an explicit stack of (node index, next edge
    position) pairs instead of recursing. Edges touching an ID that names
    no node are ignored. Each cycle starts and ends with the same node ID.
    Cycles are deduplicated by their ordered ID sequence.
    """
    index = {node.id: i for i, node in enumerate(nodes)}
    ids = [node.id for node in nodes]
    adjacency: List[List[int]] = [[] for _ in ids]
    for edge in edges:
        if edge.source in index and edge.target in index:
            adjacency[index[edge.source]].append(index[edge.target])

    color = [WHITE] * len(ids)
    parent: List[Optional[int]] = [None] * len(ids)
    cycles: List[List[str]] = []

    for root in range(len(ids)):
        if color[root] != WHITE:
            continue
        parent[root] = None
        color[root] = GRAY
        stack = [(root, 0)]

        while stack:
            current, position = stack[-1]
            neighbors = adjacency[current]
            if position >= len(neighbors):
                color[current] = BLACK
                stack.pop()
                continue

            stack[-1] = (current, position + 1)
            neighbor = neighbors[position]
            if color[neighbor] == WHITE:
                parent[neighbor] = current
                color[neighbor] = GRAY
                stack.append((neighbor, 0))
            elif color[neighbor] == GRAY:
                cycles.append(_reconstruct_cycle(ids, parent, current, neighbor))

    unique: List[List[str]] = []
    seen = set()
    for cycle in cycles:
        key = tuple(cycle)
        if key not in seen:
            seen.add(key)
            unique.append(cycle)
    return unique


def _reconstruct_cycle(ids: List[str], parent: List[Optional[int]], current: int, target: int) -> List[str]:
    """Walk parent pointers from ``current`` back to ``target``."""
    chain = [target]
    on_chain = {target}
    walker: Optional[int] = current
    while walker is not None and walker != target and walker not in on_chain:
        chain.append(walker)
        on_chain.add(walker)
        walker = parent[walker]
    chain.append(target)
    chain.reverse()
    return [ids[i] for i in chain]


class GraphValidator:
    """Checks whether a node/edge graph is a legal workflow."""

    def validate(self, nodes: Sequence[WorkflowNodeBase], edges: Sequence[Edge]) -> ValidationResult:
        """
        Validate a graph for structural correctness.

        All checks run and their errors accumulate in a fixed order: start
        node checks, then unreachable nodes, then cycles.

        Args:
            nodes: Nodes of the graph
            edges: Edges of the graph; endpoints naming no node are tolerated

        Returns:
            ValidationResult: errors plus the unreachable IDs, cycles and start ID
        """
        logger.debug(f"Validating graph with {len(nodes)} nodes and {len(edges)} edges")

        errors: List[ValidationIssue] = []
        details = ValidationDetails()

        start_nodes = [node for node in nodes if node.kind == NodeKind.START]
        self._check_start(start_nodes, edges, errors, details)

        adjacency = build_adjacency(nodes, edges)
        if len(start_nodes) == 1:
            self._check_reachability(nodes, adjacency, details.start_id, errors, details)

        self._check_cycles(nodes, edges, errors, details)

        result = ValidationResult(ok=len(errors) == 0, errors=errors, details=details)
        log_with_context(
            logger, logging.DEBUG,
            f"Graph validation completed. Valid: {result.ok}, Errors: {len(result.errors)}",
            start_id=details.start_id,
            unreachable=len(details.unreachable_ids),
            cycles=len(details.cycles)
        )
        return result

    def _check_start(self, start_nodes, edges, errors: List[ValidationIssue], details: ValidationDetails):
        if not start_nodes:
            errors.append(ValidationIssue(
                type=ValidationErrorType.NO_START,
                message="No Start node found."
            ))
            return
        if len(start_nodes) > 1:
            errors.append(ValidationIssue(
                type=ValidationErrorType.MULTIPLE_START,
                message="More than one Start node found."
            ))
            return

        start = start_nodes[0]
        details.start_id = start.id
        if any(edge.target == start.id for edge in edges):
            errors.append(ValidationIssue(
                type=ValidationErrorType.START_HAS_INCOMING,
                message="Start node must not have incoming edges.",
                node_id=start.id
            ))

    def _check_reachability(self, nodes, adjacency, start_id: str, errors: List[ValidationIssue], details: ValidationDetails):
        reachable = find_reachable(start_id, adjacency)
        reported = set()

        for node in nodes:
            if node.id in reachable or node.id in reported:
                continue
            reported.add(node.id)
            details.unreachable_ids.append(node.id)
            errors.append(ValidationIssue(
                type=ValidationErrorType.UNREACHABLE_NODE,
                message=f'Node "{node.label}" is not reachable from Start.',
                node_id=node.id
            ))

    def _check_cycles(self, nodes, edges, errors: List[ValidationIssue], details: ValidationDetails):
        cycles = detect_cycles(nodes, edges)
        details.cycles = cycles
        for cycle in cycles:
            errors.append(ValidationIssue(
                type=ValidationErrorType.CYCLE,
                message=f"Cycle detected: {' → '.join(cycle)}",
                node_id=cycle[0]
            ))


def validate_graph(nodes: Sequence[WorkflowNodeBase], edges: Sequence[Edge]) -> ValidationResult:
    """Validate ``(nodes, edges)`` with a fresh GraphValidator."""
    return GraphValidator().validate(nodes, edges)
