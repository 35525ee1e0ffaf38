"""Updater orchestrator and factory functions."""

from typing import TYPE_CHECKING, List, Optional

from ..logging_config import logger
from .protocol import UpdaterInput
from .registry import UpdaterRegistry
from .result import AggregateResult
from .updaters import (
    LINUX,
    MACOS,
    WINDOWS,
    ChannelReleasesJsonUpdater,
    CveFileUpdater,
    InstallGuideUpdater,
    ReleaseNotesReadmeUpdater,
    ReleasesIndexUpdater,
    ReleasesMarkdownUpdater,
    RuntimeFileUpdater,
    RuntimeReleaseJsonUpdater,
    SdkFilesUpdater,
    VersionReadmeUpdater,
)

if TYPE_CHECKING:
    from .result import UpdateResult


def create_default_registry() -> UpdaterRegistry:
    """
    Create an UpdaterRegistry with every document updater.

    Registration order is execution order within a scope.

    Returns:
        Configured UpdaterRegistry
    """
    registry = UpdaterRegistry()

    # Per runtime version
    registry.register(RuntimeFileUpdater())
    registry.register(SdkFilesUpdater())
    registry.register(RuntimeReleaseJsonUpdater())

    # Per channel
    registry.register(VersionReadmeUpdater())
    registry.register(CveFileUpdater())
    registry.register(ChannelReleasesJsonUpdater())
    registry.register(InstallGuideUpdater(LINUX))
    registry.register(InstallGuideUpdater(MACOS))
    registry.register(InstallGuideUpdater(WINDOWS))

    # Once per run
    registry.register(ReleasesMarkdownUpdater())
    registry.register(ReleaseNotesReadmeUpdater())
    registry.register(ReleasesIndexUpdater())

    return registry


class UpdaterOrchestrator:
    """
    Main class for orchestrating document generation.

    Example:
        orchestrator = UpdaterOrchestrator()

        # Every updater of the input's scope
        results = orchestrator.run_scope(UpdaterInput(scope=VERSION_SCOPE, ...))

        # A single updater
        result = orchestrator.run(input, updater_name="cve_file")
    """

    def __init__(self, registry: Optional[UpdaterRegistry] = None) -> None:
        """
        Initialize the UpdaterOrchestrator.

        Args:
            registry: Optional custom registry (defaults to every built-in updater)
        """
        self._registry = registry or create_default_registry()

    @property
    def registry(self) -> UpdaterRegistry:
        """Get the updater registry."""
        return self._registry

    def run(self, input: UpdaterInput, updater_name: str) -> "UpdateResult":
        logger.info(f"Running updater {updater_name} ({input.scope} scope)")
        return self._registry.update(input, updater_name)

    def run_scope(self, input: UpdaterInput) -> AggregateResult:
        """
        Execute all enabled updaters of the input's scope.

        Args:
            input: UpdaterInput for the scope

        Returns:
            AggregateResult with results from all updaters of that scope
        """
        enabled = self._registry.get_enabled_updaters(input)
        logger.info(f"Running {len(enabled)} {input.scope}-scope updater(s): {[u.name for u in enabled]}")
        return self._registry.update_all(input)

    def list_all_updaters(self) -> List[str]:
        return [u["name"] for u in self._registry.list_updaters()]
