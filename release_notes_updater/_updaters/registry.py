"""Updater registry for managing document updater plugins."""

from typing import Any, Dict, List, Optional

from ..logging_config import logger
from .protocol import CHANNEL_SCOPE, VERSION_SCOPE, DocumentUpdater, UpdaterInput
from .result import AggregateResult, UpdateResult


def _scope_key(input: UpdaterInput) -> str:
    if input.scope == VERSION_SCOPE:
        return input.version.runtime_id
    if input.scope == CHANNEL_SCOPE:
        return input.channel or ""
    return ""


class UpdaterRegistry:
    """
    Registry for managing document updater plugins.

    The registry keeps updaters in registration order and executes the ones
    matching an input's scope.

    Example:
        registry = UpdaterRegistry()
        registry.register(RuntimeFileUpdater())
        registry.register(CveFileUpdater())

        # Run every enabled updater for a scope
        results = registry.update_all(input)

        # Run a specific updater
        result = registry.update(input, updater_name="cve_file")
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._updaters: Dict[str, DocumentUpdater] = {}

    def register(self, updater: DocumentUpdater) -> None:
        """
        Register an updater.

        Args:
            updater: DocumentUpdater implementation to register
        """
        self._updaters[updater.name] = updater
        logger.debug(f"Registered updater: {updater.name} ({updater.scope})")

    def get(self, name: str) -> Optional[DocumentUpdater]:
        """
        Get an updater by name.

        Args:
            name: Name of the updater

        Returns:
            Updater if found, None otherwise
        """
        return self._updaters.get(name)

    def get_updaters_for_scope(self, scope: str) -> List[DocumentUpdater]:
        return [u for u in self._updaters.values() if u.scope == scope]

    def get_enabled_updaters(self, input: UpdaterInput) -> List[DocumentUpdater]:
        """
        Get all updaters that are enabled for the given input.

        Args:
            input: UpdaterInput to check against

        Returns:
            List of enabled DocumentUpdater instances
        """
        return [u for u in self.get_updaters_for_scope(input.scope) if u.is_enabled(input)]

    def update(self, input: UpdaterInput, updater_name: str) -> UpdateResult:
        """
        Execute a specific updater.

        Args:
            input: UpdaterInput for the current scope
            updater_name: Name of updater to execute

        Returns:
            UpdateResult from the updater

        Raises:
            ValueError: If updater not found
        """
        updater = self._updaters.get(updater_name)
        if not updater:
            available = list(self._updaters.keys())
            raise ValueError(f"Updater '{updater_name}' not found. Available updaters: {available}")

        if updater.scope != input.scope or not updater.is_enabled(input):
            result = UpdateResult.skipped_result(
                updater_name=updater_name,
                reason=f"Updater '{updater_name}' is not enabled for this input",
            )
            result.scope_key = _scope_key(input)
            return result

        return self._execute_updater(updater, input)

    def update_all(self, input: UpdaterInput) -> AggregateResult:
        """
        Execute all enabled updaters of the input's scope.

        Args:
            input: UpdaterInput for the current scope

        Returns:
            AggregateResult with results from all updaters of that scope
        """
        aggregate = AggregateResult()

        for updater in self.get_updaters_for_scope(input.scope):
            if updater.is_enabled(input):
                result = self._execute_updater(updater, input)
            else:
                result = UpdateResult.skipped_result(
                    updater_name=updater.name,
                    reason="Not enabled for this input",
                )
                result.scope_key = _scope_key(input)
            aggregate.add(result)

        return aggregate

    def _execute_updater(self, updater: DocumentUpdater, input: UpdaterInput) -> UpdateResult:
        """Execute an updater with error handling."""
        scope_key = _scope_key(input)
        label = f"{updater.name} [{scope_key}]" if scope_key else updater.name
        logger.info(f"Executing updater: {label}")
        try:
            result = updater.update(input)
            if not result.success:
                logger.warning(f"Updater {label} failed: {result.error_message}")
            elif result.skipped:
                logger.warning(f"Updater {label} skipped: {result.metadata.get('skip_reason')}")
            else:
                logger.info(f"Updater {label} wrote {len(result.files_written)} file(s)")
        except Exception as e:
            logger.error(f"Updater {label} raised exception: {e}")
            result = UpdateResult.failure_result(
                updater_name=updater.name,
                error_message=str(e),
            )
        result.scope_key = scope_key
        return result

    def list_updaters(self) -> List[Dict[str, Any]]:
        """
        List all registered updaters.

        Returns:
            List of dicts with updater info
        """
        return [{"name": name, "scope": self._updaters[name].scope} for name in sorted(self._updaters.keys())]

    def clear(self) -> None:
        """Remove all registered updaters."""
        self._updaters.clear()
