"""JSON import and export of workflow graphs."""

import json

from pydantic import ValidationError

from ..models.core import WorkflowGraph
from .exceptions import GraphImportError
from .logging import get_logger

logger = get_logger(__name__)


def export_graph(graph: WorkflowGraph, indent: int = 2) -> str:
    """Serialize a graph as a ``{nodes, edges}`` JSON document."""
    return graph.model_dump_json(by_alias=True, indent=indent)


def import_graph(text: str) -> WorkflowGraph:
    """
    Read a graph back from its JSON document.

    Raises:
        GraphImportError: If the text is not JSON, lacks ``nodes``/``edges``
            arrays, or holds nodes or edges of the wrong shape
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as e:
        raise GraphImportError(f"Failed to parse JSON: {e}")

    if not isinstance(payload, dict) or not isinstance(payload.get("nodes"), list) \
            or not isinstance(payload.get("edges"), list):
        raise GraphImportError("Invalid format: JSON must contain `nodes` and `edges` arrays.")

    try:
        graph = WorkflowGraph.model_validate(payload)
    except ValidationError as e:
        raise GraphImportError(
            f"Invalid workflow: {e.error_count()} problem(s) found",
            details={"errors": json.loads(e.json(include_url=False))}
        )

    logger.info(f"Imported workflow with {len(graph.nodes)} nodes and {len(graph.edges)} edges")
    return graph
