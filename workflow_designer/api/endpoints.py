"""FastAPI REST endpoints for the workflow designer."""

import asyncio
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, status
from pydantic import BaseModel, Field

from ..config import AppConfig
from ..core.automation_catalog import AutomationCatalog
from ..core.graph_validator import GraphValidator
from ..core.simulator import WorkflowSimulator
from ..core.exceptions import (
    GraphTooLargeError,
    GraphValidationError,
    WorkflowEngineError,
    create_error_response
)
from ..models.core import (
    AutomationDefinition,
    SimulationResult,
    ValidationResult,
    WorkflowGraph
)
from ..core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["workflow"])

# Global instances (initialized by the application factory)
_validator: Optional[GraphValidator] = None
_simulator: Optional[WorkflowSimulator] = None
_catalog: Optional[AutomationCatalog] = None
_config: Optional[AppConfig] = None


def init_dependencies(
    validator: GraphValidator,
    simulator: WorkflowSimulator,
    catalog: AutomationCatalog,
    config: AppConfig
):
    """Initialize the global dependencies."""
    global _validator, _simulator, _catalog, _config
    _validator = validator
    _simulator = simulator
    _catalog = catalog
    _config = config


def _require(component, name: str):
    if component is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{name} not initialized"
        )
    return component


def get_validator() -> GraphValidator:
    """Dependency to get the graph validator."""
    return _require(_validator, "Graph validator")


def get_simulator() -> WorkflowSimulator:
    """Dependency to get the workflow simulator."""
    return _require(_simulator, "Workflow simulator")


def get_catalog() -> AutomationCatalog:
    """Dependency to get the automation catalog."""
    return _require(_catalog, "Automation catalog")


def get_app_config() -> AppConfig:
    """Dependency to get the application configuration."""
    return _require(_config, "Configuration")


class RunWorkflowResponse(BaseModel):
    """Response model for a validated simulation run."""
    validation: ValidationResult = Field(..., description="Validation performed before simulating")
    simulation: SimulationResult = Field(..., description="Simulated execution log")


async def _mock_latency(delay_ms: int) -> None:
    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)


def _check_size(graph: WorkflowGraph, config: AppConfig) -> None:
    if len(graph.nodes) > config.max_graph_nodes:
        raise GraphTooLargeError(
            f"Graph has {len(graph.nodes)} nodes, limit is {config.max_graph_nodes}",
            node_count=len(graph.nodes),
            limit=config.max_graph_nodes
        )


def _to_http_error(error: WorkflowEngineError) -> HTTPException:
    logger.warning(f"Workflow engine error: {error.error_code} - {error.message}")
    return HTTPException(status_code=error.status_code, detail=create_error_response(error))


@router.get(
    "/automations",
    response_model=List[AutomationDefinition],
    summary="List available automations",
    description="Return the mock automation catalog used by Automated nodes"
)
async def list_automations(
    catalog: AutomationCatalog = Depends(get_catalog),
    config: AppConfig = Depends(get_app_config)
) -> List[AutomationDefinition]:
    await _mock_latency(config.automations_delay_ms)
    return catalog.list_automations()


@router.post(
    "/workflow/validate",
    response_model=ValidationResult,
    summary="Validate a workflow graph",
    description="Check start node, reachability and cycles; all problems are reported together"
)
async def validate_workflow(
    graph: WorkflowGraph,
    validator: GraphValidator = Depends(get_validator),
    config: AppConfig = Depends(get_app_config)
) -> ValidationResult:
    try:
        _check_size(graph, config)
    except WorkflowEngineError as e:
        raise _to_http_error(e)

    result = validator.validate(graph.nodes, graph.edges)
    logger.info(f"Validated workflow with {len(graph.nodes)} nodes: ok={result.ok}, errors={len(result.errors)}")
    return result


@router.post(
    "/workflow/simulate",
    response_model=SimulationResult,
    summary="Simulate a workflow",
    description="Mock execution endpoint: walk the graph and return the execution log without validating it"
)
async def simulate_workflow(
    graph: WorkflowGraph,
    simulator: WorkflowSimulator = Depends(get_simulator),
    config: AppConfig = Depends(get_app_config)
) -> SimulationResult:
    try:
        _check_size(graph, config)
    except WorkflowEngineError as e:
        raise _to_http_error(e)

    await _mock_latency(config.simulate_delay_ms)
    result = simulator.simulate_graph(graph)
    logger.info(f"Simulated workflow: {len(result.steps)} steps")
    return result


@router.post(
    "/workflow/run",
    response_model=RunWorkflowResponse,
    summary="Validate, then simulate a workflow",
    description="Simulation only happens when validation reports no errors"
)
async def run_workflow(
    graph: WorkflowGraph,
    validator: GraphValidator = Depends(get_validator),
    simulator: WorkflowSimulator = Depends(get_simulator),
    config: AppConfig = Depends(get_app_config)
) -> RunWorkflowResponse:
    try:
        _check_size(graph, config)
        validation = validator.validate(graph.nodes, graph.edges)
        if not validation.ok:
            raise GraphValidationError(
                "Validation failed: fix errors before simulation.",
                validation_errors=[
                    issue.model_dump(mode="json", by_alias=True) for issue in validation.errors
                ]
            )
    except WorkflowEngineError as e:
        raise _to_http_error(e)

    await _mock_latency(config.simulate_delay_ms)
    simulation = simulator.simulate_graph(graph)
    logger.info(
        f"Workflow run completed: {len(simulation.steps)} steps"
    )
    return RunWorkflowResponse(validation=validation, simulation=simulation)
