"""Document updater plugin system.

Each output document of the release documentation tree is produced by one
updater. Updaters run at version, channel or run scope.

Example:
    from release_notes_updater._updaters import UpdaterInput, UpdaterOrchestrator, VERSION_SCOPE

    orchestrator = UpdaterOrchestrator()
    results = orchestrator.run_scope(
        UpdaterInput(
            scope=VERSION_SCOPE,
            output_dir="output",
            template_dir="templates",
            reference=reference,
            reference_tree=tree,
            versions=[VersionContext("8.0.15", manifest)],
        )
    )
"""

from .files import load_template, write_json, write_text
from .orchestrator import UpdaterOrchestrator, create_default_registry
from .protocol import CHANNEL_SCOPE, RUN_SCOPE, SCOPES, VERSION_SCOPE, DocumentUpdater, UpdaterInput, VersionContext
from .registry import UpdaterRegistry
from .result import AggregateResult, UpdateResult

__all__ = [
    # Main entry points
    "UpdaterOrchestrator",
    "UpdaterInput",
    "VersionContext",
    "UpdateResult",
    "AggregateResult",
    # Registry and protocol
    "UpdaterRegistry",
    "DocumentUpdater",
    "VERSION_SCOPE",
    "CHANNEL_SCOPE",
    "RUN_SCOPE",
    "SCOPES",
    # Factory
    "create_default_registry",
    # File helpers
    "load_template",
    "write_text",
    "write_json",
]
