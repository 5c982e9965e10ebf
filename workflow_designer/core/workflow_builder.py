"""Editor session holding a workflow draft."""

from typing import Any, Dict, Iterable, List, Optional

from ..models.core import (
    NODE_TYPES,
    AutomatedNode,
    Edge,
    NodeKind,
    Position,
    SimulationResult,
    ValidationResult,
    WorkflowGraph,
    WorkflowNodeBase,
)
from .automation_catalog import AutomationCatalog
from .exceptions import InvalidNodeUpdateError, NodeNotFoundError
from .graph_validator import GraphValidator
from .logging import get_logger
from .simulator import WorkflowSimulator

logger = get_logger(__name__)


class WorkflowBuilder:
    """Mutable workflow draft as edited on the canvas.

    The builder owns its own ID counters, so separate sessions never share
    ID state.
    """

    def __init__(
        self,
        catalog: Optional[AutomationCatalog] = None,
        validator: Optional[GraphValidator] = None,
        simulator: Optional[WorkflowSimulator] = None,
        node_prefix: str = "node_",
        edge_prefix: str = "edge_"
    ):
        self.catalog = catalog or AutomationCatalog()
        self.validator = validator or GraphValidator()
        self.simulator = simulator or WorkflowSimulator()
        self._node_prefix = node_prefix
        self._edge_prefix = edge_prefix
        self._node_counter = 0
        self._edge_counter = 0
        self._nodes: List[WorkflowNodeBase] = []
        self._edges: List[Edge] = []

    @property
    def nodes(self) -> List[WorkflowNodeBase]:
        return list(self._nodes)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    def get_node(self, node_id: str) -> WorkflowNodeBase:
        """Retrieve a node of the draft by ID.

        Raises:
            NodeNotFoundError: If no node has this ID
        """
        for node in self._nodes:
            if node.id == node_id:
                return node
        raise NodeNotFoundError(f"Node '{node_id}' not found", node_id=node_id)

    def add_node(
        self,
        kind: NodeKind,
        title: Optional[str] = None,
        position: Optional[Position] = None
    ) -> WorkflowNodeBase:
        """
        Create a node of the given kind with its default attributes.

        Args:
            kind: Kind of node to create
            title: Display title, defaults to "<Kind> title"
            position: Canvas position

        Returns:
            The node added to the draft
        """
        kind = NodeKind(kind)
        fields: Dict[str, Any] = {
            "id": self._next_node_id(),
            "title": title if title is not None else f"{kind.value} title",
            "position": position,
        }
        if kind == NodeKind.AUTOMATED:
            action = self.catalog.default_action()
            fields["automation_action"] = action
            fields["action_params"] = self.catalog.align_params(action)

        node = NODE_TYPES[kind](**fields)
        self._nodes.append(node)
        logger.debug(f"Added {kind.value} node '{node.id}'")
        return node

    def update_node(self, node_id: str, **changes) -> WorkflowNodeBase:
        """
        Replace a node's attributes; the result is validated like imported data.

        Attributes may be given by field name or by their camelCase alias.
        ID and kind never change.

        Raises:
            NodeNotFoundError: If no node has this ID
            InvalidNodeUpdateError: If an attribute is not defined for the node's kind
        """
        node = self.get_node(node_id)
        changes.pop("id", None)
        changes.pop("kind", None)

        by_alias = {
            info.alias: name
            for name, info in type(node).model_fields.items()
            if info.alias
        }
        unknown = sorted(
            key for key in changes
            if key not in type(node).model_fields and key not in by_alias
        )
        if unknown:
            raise InvalidNodeUpdateError(
                f"{node.kind} node '{node_id}' has no attribute(s): {', '.join(unknown)}",
                node_id=node_id,
                fields=unknown
            )

        fields = {by_alias.get(key, key): value for key, value in changes.items()}
        updated = type(node).model_validate({**node.model_dump(), **fields})
        self._replace(updated)
        return updated

    def select_automation(self, node_id: str, automation_id: str) -> AutomatedNode:
        """Point an Automated node at a catalog entry, keeping matching param values."""
        node = self.get_node(node_id)
        if not isinstance(node, AutomatedNode):
            raise InvalidNodeUpdateError(
                f"Only Automated nodes run automations; '{node_id}' is a {node.kind} node",
                node_id=node_id,
                fields=["automation_action"]
            )
        params = self.catalog.align_params(automation_id, node.action_params)
        return self.update_node(node_id, automation_action=automation_id, action_params=params)

    def connect(
        self,
        source: str,
        target: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None
    ) -> Edge:
        """
        Connect two nodes.

        A connection with the same source, source handle, target and target
        handle as an existing edge returns that edge instead of adding one.
        Self-loops are allowed here and reported by validation as cycles.
        """
        key = (source, source_handle, target, target_handle)
        for edge in self._edges:
            if edge.connection_key == key:
                logger.debug(f"Connection {source} -> {target} already exists as '{edge.id}'")
                return edge

        edge = Edge(
            id=self._next_edge_id(),
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle
        )
        self._edges.append(edge)
        return edge

    def remove_nodes(self, node_ids: Iterable[str]) -> None:
        """Delete nodes together with every edge attached to them."""
        doomed = set(node_ids)
        self._nodes = [node for node in self._nodes if node.id not in doomed]
        self._edges = [
            edge for edge in self._edges
            if edge.source not in doomed and edge.target not in doomed
        ]

    def remove_edges(self, edge_ids: Iterable[str]) -> None:
        doomed = set(edge_ids)
        self._edges = [edge for edge in self._edges if edge.id not in doomed]

    def snapshot(self) -> WorkflowGraph:
        """Current draft as an independent graph."""
        return WorkflowGraph(
            nodes=[node.model_copy(deep=True) for node in self._nodes],
            edges=[edge.model_copy(deep=True) for edge in self._edges]
        )

    def load(self, graph: WorkflowGraph) -> None:
        """Replace the draft with an imported graph."""
        self._nodes = [node.model_copy(deep=True) for node in graph.nodes]
        self._edges = [edge.model_copy(deep=True) for edge in graph.edges]
        logger.info(f"Loaded workflow with {len(self._nodes)} nodes and {len(self._edges)} edges")

    def validate(self) -> ValidationResult:
        return self.validator.validate(self._nodes, self._edges)

    def simulate(self) -> SimulationResult:
        return self.simulator.simulate(self._nodes, self._edges)

    def _replace(self, updated: WorkflowNodeBase) -> None:
        self._nodes = [updated if node.id == updated.id else node for node in self._nodes]

    def _next_node_id(self) -> str:
        taken = {node.id for node in self._nodes}
        while True:
            node_id = f"{self._node_prefix}{self._node_counter}"
            self._node_counter += 1
            if node_id not in taken:
                return node_id

    def _next_edge_id(self) -> str:
        taken = {edge.id for edge in self._edges}
        while True:
            edge_id = f"{self._edge_prefix}{self._edge_counter}"
            self._edge_counter += 1
            if edge_id not in taken:
                return edge_id
