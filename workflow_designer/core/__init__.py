"""Core workflow designer components."""

from .exceptions import (
    WorkflowEngineError,
    GraphValidationError,
    GraphImportError,
    GraphTooLargeError,
    AutomationNotFoundError,
    NodeNotFoundError,
    InvalidNodeUpdateError,
    ConfigurationError,
)
from .logging import setup_logging, get_logger
from .graph_validator import GraphValidator, validate_graph
from .simulator import WorkflowSimulator
from .automation_catalog import AutomationCatalog
from .graph_io import export_graph, import_graph
from .workflow_builder import WorkflowBuilder

__all__ = [
    "WorkflowEngineError",
    "GraphValidationError",
    "GraphImportError",
    "GraphTooLargeError",
    "AutomationNotFoundError",
    "NodeNotFoundError",
    "InvalidNodeUpdateError",
    "ConfigurationError",
    "setup_logging",
    "get_logger",
    "GraphValidator",
    "validate_graph",
    "WorkflowSimulator",
    "AutomationCatalog",
    "export_graph",
    "import_graph",
    "WorkflowBuilder",
]
