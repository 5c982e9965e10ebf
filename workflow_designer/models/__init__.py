"""Data models for the workflow designer engine."""

from .core import (
    NodeKind,
    ValidationErrorType,
    KeyValuePair,
    Position,
    WorkflowNodeBase,
    StartNode,
    TaskNode,
    ApprovalNode,
    AutomatedNode,
    EndNode,
    WorkflowNode,
    NODE_TYPES,
    Edge,
    WorkflowGraph,
    ValidationIssue,
    ValidationDetails,
    ValidationResult,
    SimulationStep,
    SimulationResult,
    AutomationDefinition,
)

__all__ = [
    "NodeKind",
    "ValidationErrorType",
    "KeyValuePair",
    "Position",
    "WorkflowNodeBase",
    "StartNode",
    "TaskNode",
    "ApprovalNode",
    "AutomatedNode",
    "EndNode",
    "WorkflowNode",
    "NODE_TYPES",
    "Edge",
    "WorkflowGraph",
    "ValidationIssue",
    "ValidationDetails",
    "ValidationResult",
    "SimulationStep",
    "SimulationResult",
    "AutomationDefinition",
]
