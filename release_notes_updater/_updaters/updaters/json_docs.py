"""JSON release documents: per-runtime ``release.json`` and per-channel ``releases.json``."""

from typing import Any, Dict

from ...logging_config import logger
from ...models import CoreRelease, CoreReleasesDocument, ReleaseManifest
from ..files import write_json
from ..protocol import CHANNEL_SCOPE, VERSION_SCOPE, UpdaterInput
from ..result import UpdateResult


class RuntimeReleaseJsonUpdater:
    """Writes ``release-notes/<channel>/<runtime>/release.json`` from the manifest release."""

    name = "runtime_json"
    scope = VERSION_SCOPE

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope

    def update(self, input: UpdaterInput) -> UpdateResult:
        version = input.version
        release = version.manifest.find_release_by_runtime(version.runtime_id)
        if release is None:
            return UpdateResult.skipped_result(self.name, f"No release found for runtime ID: {version.runtime_id}")

        document: Dict[str, Any] = {
            "channel-version": version.channel,
            "runtime-version": version.runtime_id,
            **release.to_dict(),
        }
        path = input.runtime_dir(version.channel, version.runtime_id) / "release.json"
        write_json(path, document)
        return UpdateResult.success_result(self.name, files_written=[str(path)])


def apply_manifest_header(document: CoreReleasesDocument, manifest: ReleaseManifest) -> None:
    """Copy the channel-level fields of ``manifest`` onto ``document``."""
    document.latest_release = manifest.latest_release
    document.latest_release_date = manifest.latest_release_date
    document.latest_runtime = manifest.latest_runtime
    document.latest_sdk = manifest.latest_sdk
    document.support_phase = manifest.support_phase
    document.release_type = manifest.release_type
    document.lifecycle_policy = manifest.lifecycle_policy
    if manifest.eol_date:
        document.eol_date = manifest.eol_date


class ChannelReleasesJsonUpdater:
    """
    Merges the channel's new releases into ``release-notes/<channel>/releases.json``.

    The published document is the starting point when the reference tree has
    one; otherwise a new document is created from the newest manifest. Each
    release is replaced in place by version or prepended.
    """

    name = "channel_json"
    scope = CHANNEL_SCOPE

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope and bool(input.versions)

    def update(self, input: UpdaterInput) -> UpdateResult:
        channel = input.channel
        newest = input.newest

        document = input.reference_tree.channel_releases(channel)
        if document is None:
            logger.info(f"Creating new releases.json structure for channel {channel}")
            document = CoreReleasesDocument.from_manifest(newest.manifest)
            document.channel_version = channel
        apply_manifest_header(document, newest.manifest)

        added = replaced = 0
        for version in input.versions:
            release = version.release
            if release is None:
                logger.warning(f"No releases in manifest for {version.runtime_id}")
                continue
            if document.upsert_release(CoreRelease.from_release(release)):
                replaced += 1
            else:
                added += 1

        path = input.channel_dir(channel) / "releases.json"
        write_json(path, document.to_dict())
        logger.info(f"Channel {channel} releases.json: {added} release(s) added, {replaced} updated")
        return UpdateResult.success_result(
            self.name, files_written=[str(path)], metadata={"added": added, "replaced": replaced}
        )
