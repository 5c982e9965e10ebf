"""Custom exceptions for the workflow designer with detailed error information."""

from datetime import datetime
from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for categorizing exceptions."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for better classification."""
    VALIDATION = "validation"
    EXECUTION = "execution"
    CONFIGURATION = "configuration"
    RESOURCE = "resource"


class WorkflowEngineError(Exception):
    """Base exception for all workflow designer errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.EXECUTION,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.severity = severity
        self.category = category
        self.details = details or {}
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "details": self.details,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "exception_type": self.__class__.__name__
        }

    def add_context(self, **kwargs):
        """Add additional context to the exception."""
        self.context.update(kwargs)
        return self

    def add_details(self, **kwargs):
        """Add additional details to the exception."""
        self.details.update(kwargs)
        return self


class GraphValidationError(WorkflowEngineError):
    """Raised when a graph must be valid but is not."""

    status_code = 400

    def __init__(
        self,
        message: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.VALIDATION,
            **kwargs
        )
        self.validation_errors = validation_errors or []
        if validation_errors:
            self.add_details(validation_errors=validation_errors)


class GraphImportError(WorkflowEngineError):
    """Raised when a serialized workflow cannot be read back."""

    status_code = 400

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            **kwargs
        )


class GraphTooLargeError(WorkflowEngineError):
    """Raised when a graph exceeds the configured node ceiling."""

    status_code = 413

    def __init__(
        self,
        message: str,
        node_count: Optional[int] = None,
        limit: Optional[int] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.RESOURCE,
            **kwargs
        )
        if node_count is not None and limit is not None:
            self.add_details(node_count=node_count, limit=limit)


class AutomationNotFoundError(WorkflowEngineError):
    """Raised when an automation ID is not in the catalog."""

    status_code = 404

    def __init__(self, message: str, automation_id: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.CONFIGURATION,
            **kwargs
        )
        if automation_id:
            self.add_context(automation_id=automation_id)


class NodeNotFoundError(WorkflowEngineError):
    """Raised when an editor operation names a node that does not exist."""

    status_code = 404

    def __init__(self, message: str, node_id: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            **kwargs
        )
        if node_id:
            self.add_context(node_id=node_id)


class InvalidNodeUpdateError(WorkflowEngineError):
    """Raised when an edit names attributes the node does not have."""

    status_code = 400

    def __init__(
        self,
        message: str,
        node_id: Optional[str] = None,
        fields: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            **kwargs
        )
        if node_id:
            self.add_context(node_id=node_id)
        if fields:
            self.add_details(fields=fields)


class ConfigurationError(WorkflowEngineError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.CONFIGURATION,
            **kwargs
        )
        if config_key:
            self.add_context(config_key=config_key)


def create_error_response(error: WorkflowEngineError) -> Dict[str, Any]:
    """Create a standardized error response from a WorkflowEngineError."""
    return {
        "error": error.error_code,
        "message": error.message,
        "details": {
            **error.details,
            "severity": error.severity.value,
            "category": error.category.value,
            "timestamp": error.timestamp.isoformat()
        },
        "context": error.context
    }
