"""Catalog of automations that Automated nodes can reference."""

from typing import Dict, Iterable, List, Mapping, Optional

from ..models.core import AutomationDefinition
from .exceptions import AutomationNotFoundError
from .logging import get_logger

logger = get_logger(__name__)

DEFAULT_AUTOMATIONS = [
    AutomationDefinition(id="send_email", label="Send Email", params=["to", "subject", "body"]),
    AutomationDefinition(id="generate_doc", label="Generate Document", params=["template", "recipient"]),
    AutomationDefinition(id="call_webhook", label="Call Webhook", params=["url", "payload"]),
]


class AutomationCatalog:
    """Registry of automation definitions keyed by ID."""

    def __init__(self, automations: Optional[Iterable[AutomationDefinition]] = None):
        """Initialize the catalog.

        Args:
            automations: Definitions to serve. Defaults to the built-in mock catalog.
        """
        self._automations: Dict[str, AutomationDefinition] = {}
        for automation in (DEFAULT_AUTOMATIONS if automations is None else automations):
            self.register(automation)

    def register(self, automation: AutomationDefinition) -> None:
        """Add or replace a catalog entry."""
        if automation.id in self._automations:
            logger.warning(f"Replacing automation '{automation.id}' in catalog")
        self._automations[automation.id] = automation

    def list_automations(self) -> List[AutomationDefinition]:
        """List catalog entries in registration order."""
        return list(self._automations.values())

    def has_automation(self, automation_id: str) -> bool:
        return automation_id in self._automations

    def get_automation(self, automation_id: str) -> AutomationDefinition:
        """Retrieve a catalog entry by ID.

        Raises:
            AutomationNotFoundError: If the ID is not in the catalog
        """
        try:
            return self._automations[automation_id]
        except KeyError:
            raise AutomationNotFoundError(
                f"Automation '{automation_id}' not found",
                automation_id=automation_id
            )

    def default_action(self) -> str:
        """ID preselected for new Automated nodes, or empty if the catalog is empty."""
        return next(iter(self._automations), "")

    def align_params(self, automation_id: str, current: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """
        Build a parameter mapping with exactly the automation's declared params.

        Existing values are kept for declared params, others start blank and
        undeclared keys are dropped. An empty ID yields an empty mapping.
        """
        if not automation_id:
            return {}
        current = current or {}
        automation = self.get_automation(automation_id)
        return {param: current.get(param, "") for param in automation.params}
