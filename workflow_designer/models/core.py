"""Core Pydantic models for the workflow designer engine."""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model using camelCase field names on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodeKind(str, Enum):
    """Enumeration of workflow node kinds."""
    START = "Start"
    TASK = "Task"
    APPROVAL = "Approval"
    AUTOMATED = "Automated"
    END = "End"


class ValidationErrorType(str, Enum):
    """Enumeration of graph validation error categories."""
    NO_START = "no_start"
    MULTIPLE_START = "multiple_start"
    START_HAS_INCOMING = "start_has_incoming"
    UNREACHABLE_NODE = "unreachable_node"
    CYCLE = "cycle"


class KeyValuePair(CamelModel):
    """A single key/value entry of an ordered attribute list."""
    key: str = Field(default="", description="Entry key")
    value: str = Field(default="", description="Entry value")


class Position(CamelModel):
    """Canvas position of a node."""
    x: float = 0.0
    y: float = 0.0


class WorkflowNodeBase(CamelModel):
    """Attributes shared by every workflow node."""
    id: str = Field(..., description="Unique identifier for the node")
    kind: str = Field(..., description="Node kind")
    title: str = Field(default="", description="Display title used in logs and error messages")
    position: Optional[Position] = Field(None, description="Canvas position, ignored by the engine")

    @field_validator('id')
    @classmethod
    def validate_id(cls, id_value):
        """Ensure node ID is not blank."""
        if not id_value or not id_value.strip():
            raise ValueError("Node ID cannot be empty")
        return id_value

    @property
    def label(self) -> str:
        """Display label, falling back to the node ID."""
        return self.title or self.id


class StartNode(WorkflowNodeBase):
    """Workflow entry point."""
    kind: Literal["Start"] = "Start"
    metadata: List[KeyValuePair] = Field(default_factory=list, description="Workflow metadata pairs")


class TaskNode(WorkflowNodeBase):
    """Human task assigned to someone."""
    kind: Literal["Task"] = "Task"
    description: str = ""
    assignee: str = ""
    due_date: str = ""
    custom_fields: List[KeyValuePair] = Field(default_factory=list)


class ApprovalNode(WorkflowNodeBase):
    """Approval step performed by a role."""
    kind: Literal["Approval"] = "Approval"
    approver_role: str = "Manager"
    auto_approve_threshold: Union[int, float] = 0


class AutomatedNode(WorkflowNodeBase):
    """Step backed by an entry of the automation catalog."""
    kind: Literal["Automated"] = "Automated"
    automation_action: str = Field(default="", description="Automation catalog ID, or empty")
    action_params: Dict[str, str] = Field(default_factory=dict, description="Parameter values keyed by name")


class EndNode(WorkflowNodeBase):
    """Workflow terminal step."""
    kind: Literal["End"] = "End"
    end_message: str = ""
    summary: bool = False


WorkflowNode = Annotated[
    Union[StartNode, TaskNode, ApprovalNode, AutomatedNode, EndNode],
    Field(discriminator="kind"),
]

NODE_TYPES = {
    NodeKind.START: StartNode,
    NodeKind.TASK: TaskNode,
    NodeKind.APPROVAL: ApprovalNode,
    NodeKind.AUTOMATED: AutomatedNode,
    NodeKind.END: EndNode,
}


class Edge(CamelModel):
    """Directed connection between two nodes."""
    id: str = Field(..., description="Unique identifier for the edge")
    source: str = Field(..., description="Source node ID")
    target: str = Field(..., description="Target node ID")
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None

    @property
    def connection_key(self):
        return (self.source, self.source_handle, self.target, self.target_handle)


class WorkflowGraph(CamelModel):
    """Snapshot of a workflow drawn in the editor."""
    nodes: List[WorkflowNode] = Field(default_factory=list, description="Nodes in the graph")
    edges: List[Edge] = Field(default_factory=list, description="Edges connecting nodes")

    @field_validator('nodes')
    @classmethod
    def validate_unique_node_ids(cls, nodes):
        """Ensure all node IDs are unique."""
        node_ids = [node.id for node in nodes]
        if len(node_ids) != len(set(node_ids)):
            raise ValueError("All node IDs must be unique")
        return nodes


class ValidationIssue(CamelModel):
    """A single problem found while validating a graph."""
    type: ValidationErrorType
    message: str
    node_id: Optional[str] = None


class ValidationDetails(CamelModel):
    """Structured findings behind the validation errors."""
    unreachable_ids: List[str] = Field(default_factory=list)
    cycles: List[List[str]] = Field(default_factory=list)
    start_id: Optional[str] = None


class ValidationResult(CamelModel):
    """Result of graph validation."""
    ok: bool = Field(..., description="Whether the graph is a legal workflow")
    errors: List[ValidationIssue] = Field(default_factory=list, description="Errors in detection order")
    details: ValidationDetails = Field(default_factory=ValidationDetails)


class SimulationStep(CamelModel):
    """One entry of the simulated execution log."""
    node_id: str
    title: str
    message: str


class SimulationResult(CamelModel):
    """Result of a simulated workflow run."""
    ok: bool = True
    steps: List[SimulationStep] = Field(default_factory=list)


class AutomationDefinition(CamelModel):
    """Entry of the automation catalog."""
    id: str
    label: str
    params: List[str] = Field(default_factory=list)
