"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from workflow_designer.config import get_testing_config, reset_config
from workflow_designer.core.automation_catalog import AutomationCatalog
from workflow_designer.core.graph_validator import GraphValidator
from workflow_designer.core.simulator import WorkflowSimulator
from workflow_designer.core.workflow_builder import WorkflowBuilder
from workflow_designer.factory import create_app


@pytest.fixture
def validator():
    """Create a GraphValidator instance for testing."""
    return GraphValidator()


@pytest.fixture
def simulator():
    """Create a WorkflowSimulator instance for testing."""
    return WorkflowSimulator()


@pytest.fixture
def catalog():
    """Create an AutomationCatalog with the default entries."""
    return AutomationCatalog()


@pytest.fixture
def builder(catalog):
    """Create a fresh editor session."""
    return WorkflowBuilder(catalog=catalog)


@pytest.fixture
def testing_config():
    """Testing configuration without mock delays."""
    return get_testing_config()


@pytest.fixture
def client(testing_config):
    """Create a test client with the application lifespan running."""
    app = create_app(testing_config)
    with TestClient(app) as test_client:
        yield test_client
    reset_config()
