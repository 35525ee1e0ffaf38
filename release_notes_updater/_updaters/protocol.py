"""Document updater protocol for the release documentation plugins.

This module defines the core protocol and types for the updater plugin
system. Each updater produces one kind of output document; updaters run at
one of three scopes:

* ``version``: once per runtime version (runtime page, SDK pages, release.json)
* ``channel``: once per channel, with every configured version of that
  channel (channel README, cve.md, install guides, releases.json)
* ``run``: once per run, with every loaded version (releases.md, the
  release-notes README, releases-index.json)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol

from ..models import Release, ReleaseManifest
from ..reference_data import ReferenceConfiguration, ReferenceTree
from ..versions import channel_version, release_sort_key

if TYPE_CHECKING:
    from .result import UpdateResult

VERSION_SCOPE = "version"
CHANNEL_SCOPE = "channel"
RUN_SCOPE = "run"
SCOPES = (VERSION_SCOPE, CHANNEL_SCOPE, RUN_SCOPE)


@dataclass
class VersionContext:
    """A configured runtime version together with its loaded manifest."""

    runtime_id: str
    manifest: ReleaseManifest

    @property
    def channel(self) -> str:
        return self.manifest.channel_version or channel_version(self.runtime_id)

    @property
    def release(self) -> Optional[Release]:
        """The release shipping this runtime, falling back to the manifest's latest."""
        return self.manifest.release_for(self.runtime_id)

    @property
    def latest_sdk(self) -> Optional[str]:
        release = self.release
        if release is not None and release.sdk is not None and release.sdk.version:
            return release.sdk.version
        return self.manifest.latest_sdk


@dataclass
class UpdaterInput:
    """
    Input parameters for document updaters.

    Attributes:
        scope: One of "version", "channel" or "run"
        output_dir: Root of the generated documentation tree
        template_dir: Directory holding the markdown templates
        reference: Lookup tables from the configuration directory
        reference_tree: The previously published documentation tree
        versions: Loaded versions in scope, oldest release first
        runtime_ids: Every configured runtime ID, loaded or not
        channel: Channel being processed (channel scope only)
    """

    scope: str
    output_dir: Path
    template_dir: Path
    reference: ReferenceConfiguration
    reference_tree: ReferenceTree
    versions: List[VersionContext] = field(default_factory=list)
    runtime_ids: List[str] = field(default_factory=list)
    channel: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate input parameters."""
        if self.scope not in SCOPES:
            raise ValueError(f"Unknown updater scope: {self.scope}")
        if self.scope == VERSION_SCOPE and len(self.versions) != 1:
            raise ValueError("Version scope requires exactly one version")
        if self.scope == CHANNEL_SCOPE and not self.channel:
            raise ValueError("Channel scope requires a channel")
        self.output_dir = Path(self.output_dir)
        self.template_dir = Path(self.template_dir)
        self.versions = sorted(self.versions, key=lambda v: release_sort_key(v.runtime_id))

    @property
    def version(self) -> VersionContext:
        """The single version of a version-scoped input."""
        return self.versions[0]

    @property
    def newest(self) -> Optional[VersionContext]:
        return self.versions[-1] if self.versions else None

    def channel_dir(self, channel: str) -> Path:
        return self.output_dir / "release-notes" / channel

    def runtime_dir(self, channel: str, runtime_id: str) -> Path:
        return self.channel_dir(channel) / runtime_id


class DocumentUpdater(Protocol):
    """
    Protocol defining the interface for document updater plugins.

    Example:
        class RuntimeFileUpdater:
            name = "runtime_file"
            scope = VERSION_SCOPE

            def is_enabled(self, input: UpdaterInput) -> bool:
                return input.scope == self.scope

            def update(self, input: UpdaterInput) -> UpdateResult:
                ...
    """

    @property
    def name(self) -> str:
        """
        Name of this updater.

        Used for logging, selection, and the run summary.
        Examples: "runtime_file", "cve_file", "releases_index"
        """
        ...

    @property
    def scope(self) -> str:
        """Scope the updater runs at: "version", "channel" or "run"."""
        ...

    def is_enabled(self, input: UpdaterInput) -> bool:
        """
        Check if this updater should run for the given input.

        Args:
            input: UpdaterInput for the current scope

        Returns:
            True if the updater should run for this input
        """
        ...

    def update(self, input: UpdaterInput) -> "UpdateResult":
        """
        Produce the updater's document(s).

        Missing templates or reference sources are reported as skipped
        results; unexpected errors may propagate and are turned into failure
        results by the registry.

        Args:
            input: UpdaterInput for the current scope

        Returns:
            UpdateResult listing the files written
        """
        ...
