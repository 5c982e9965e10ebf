"""Deterministic simulation of workflow graphs."""

import json
from typing import Callable, Dict, List, Optional, Sequence

from ..models.core import (
    ApprovalNode,
    AutomatedNode,
    Edge,
    EndNode,
    NodeKind,
    SimulationResult,
    SimulationStep,
    StartNode,
    TaskNode,
    WorkflowGraph,
    WorkflowNodeBase,
)
from .logging import get_logger

logger = get_logger(__name__)

NOT_SET = "N/A"


def _dump(value) -> str:
    """Compact JSON with insertion order kept."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _pairs(pairs) -> List[Dict[str, str]]:
    return [{"key": pair.key, "value": pair.value} for pair in pairs]


def format_start(node: StartNode) -> str:
    return f"Workflow started. Metadata: {_dump(_pairs(node.metadata))}"


def format_task(node: TaskNode) -> str:
    return (
        f"Task assigned to {node.assignee or NOT_SET}, due {node.due_date or NOT_SET}. "
        f"Custom fields: {_dump(_pairs(node.custom_fields))}"
    )


def format_approval(node: ApprovalNode) -> str:
    return f"Approval by {node.approver_role}. Auto-approve threshold = {node.auto_approve_threshold}"


def format_automated(node: AutomatedNode) -> str:
    return f"Automated Action: {node.automation_action or NOT_SET}. Params: {_dump(node.action_params)}"


def format_end(node: EndNode) -> str:
    return f"Workflow ended. Summary required: {'Yes' if node.summary else 'No'}"


MESSAGE_FORMATTERS: Dict[str, Callable] = {
    NodeKind.START.value: format_start,
    NodeKind.TASK.value: format_task,
    NodeKind.APPROVAL.value: format_approval,
    NodeKind.AUTOMATED.value: format_automated,
    NodeKind.END.value: format_end,
}


class WorkflowSimulator:
    """Walks a workflow graph and produces an execution log."""

    def __init__(self, formatters: Optional[Dict[str, Callable]] = None):
        self._formatters = dict(MESSAGE_FORMATTERS if formatters is None else formatters)

    def simulate(self, nodes: Sequence[WorkflowNodeBase], edges: Sequence[Edge]) -> SimulationResult:
        """
        Simulate a run of the workflow.

        Starts at the Start node (or the first node when there is none) and
        visits nodes depth first in edge-list order, each at most once.
        Nodes unreachable from the entry are skipped. The graph is not
        validated here; callers are expected to do that first.

        Args:
            nodes: Nodes of the graph
            edges: Edges of the graph

        Returns:
            SimulationResult: always ok, with one step per visited node of a known kind
        """
        entry = self._find_entry(nodes)
        if entry is None:
            logger.debug("Simulation requested for an empty graph")
            return SimulationResult(ok=True, steps=[])

        node_map = {}
        for node in nodes:
            node_map.setdefault(node.id, node)

        outgoing: Dict[str, List[str]] = {}
        for edge in edges:
            outgoing.setdefault(edge.source, []).append(edge.target)

        steps: List[SimulationStep] = []
        visited = {entry.id}
        self._emit(entry, steps)
        stack = [(entry.id, 0)]

        while stack:
            current, position = stack[-1]
            children = outgoing.get(current, [])
            if position >= len(children):
                stack.pop()
                continue

            stack[-1] = (current, position + 1)
            child = node_map.get(children[position])
            if child is None or child.id in visited:
                continue
            visited.add(child.id)
            self._emit(child, steps)
            stack.append((child.id, 0))

        logger.debug(f"Simulation visited {len(visited)} nodes and produced {len(steps)} steps")
        return SimulationResult(ok=True, steps=steps)

    def simulate_graph(self, graph: WorkflowGraph) -> SimulationResult:
        """Simulate a WorkflowGraph snapshot."""
        return self.simulate(graph.nodes, graph.edges)

    def _find_entry(self, nodes: Sequence[WorkflowNodeBase]) -> Optional[WorkflowNodeBase]:
        for node in nodes:
            if node.kind == NodeKind.START:
                return node
        return nodes[0] if nodes else None

    def _emit(self, node: WorkflowNodeBase, steps: List[SimulationStep]) -> None:
        kind = getattr(node.kind, "value", node.kind)
        formatter = self._formatters.get(kind)
        if formatter is None:
            # visited, but nothing to log
            logger.debug(f"No log rule for node kind '{kind}' ({node.id})")
            return
        title = node.title or str(kind)
        steps.append(SimulationStep(node_id=node.id, title=title, message=formatter(node)))
