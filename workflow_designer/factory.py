"""Application factory for creating FastAPI instances."""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import AppConfig, get_config, validate_config
from .core.logging import setup_logging, get_logger
from .core.automation_catalog import AutomationCatalog
from .core.graph_validator import GraphValidator
from .core.simulator import WorkflowSimulator
from .core.middleware import ErrorHandlingMiddleware, PerformanceMonitoringMiddleware
from .api.endpoints import router, init_dependencies


class ApplicationState:
    """Container for application state and components."""

    def __init__(self):
        self.config: Optional[AppConfig] = None
        self.validator: Optional[GraphValidator] = None
        self.simulator: Optional[WorkflowSimulator] = None
        self.catalog: Optional[AutomationCatalog] = None


# Global application state
app_state = ApplicationState()


def initialize_core_components(config: AppConfig, logger) -> tuple:
    """Initialize the engine components and register them with the API."""
    validator = GraphValidator()
    simulator = WorkflowSimulator()
    catalog = AutomationCatalog()

    app_state.config = config
    app_state.validator = validator
    app_state.simulator = simulator
    app_state.catalog = catalog

    init_dependencies(
        validator=validator,
        simulator=simulator,
        catalog=catalog,
        config=config
    )

    logger.info(f"Core components initialized ({len(catalog.list_automations())} automations in catalog)")
    return validator, simulator, catalog


def create_lifespan_handler(config: AppConfig):
    """Create application lifespan handler."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = get_logger(__name__)
        setup_logging(
            level=config.log_level.value,
            log_file=config.log_file,
            log_format=config.log_format,
            structured=config.structured_logging,
            max_size=config.log_max_size,
            backup_count=config.log_backup_count
        )

        logger.info(f"Starting {config.app_name} v{config.app_version}")
        try:
            initialize_core_components(config, logger)
        except Exception as e:
            logger.error(f"Application startup failed: {e}")
            raise

        logger.info("Application startup completed successfully")
        yield
        logger.info(f"Shutting down {config.app_name}")

    return lifespan


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure FastAPI application instance."""
    if config is None:
        config = get_config()

    validate_config(config)

    app = FastAPI(
        title=config.app_name,
        description="Validation and mock simulation of visually designed workflow graphs",
        version=config.app_version,
        debug=config.debug,
        lifespan=create_lifespan_handler(config)
    )

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=config.cors_methods,
            allow_headers=["*"],
        )

    if config.enable_performance_monitoring:
        app.add_middleware(PerformanceMonitoringMiddleware, slow_request_threshold=config.slow_request_threshold)
    app.add_middleware(ErrorHandlingMiddleware)

    app.include_router(router)
    add_health_endpoints(app, config)

    return app


def add_health_endpoints(app: FastAPI, config: AppConfig) -> None:
    """Add health check endpoints to the application."""

    @app.get("/")
    async def root():
        """Root endpoint for basic health check."""
        return {"message": f"{config.app_name} is running", "version": config.app_version}

    @app.get("/health")
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": config.app_name.lower().replace(" ", "-"),
            "version": config.app_version,
            "components": {
                "validator": app_state.validator is not None,
                "simulator": app_state.simulator is not None,
                "catalog": app_state.catalog is not None,
            }
        }
