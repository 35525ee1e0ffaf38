import json
import os
import sys
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import click
import sentry_sdk

from .. import __version__
from .._updaters import (
    CHANNEL_SCOPE,
    RUN_SCOPE,
    VERSION_SCOPE,
    AggregateResult,
    UpdaterInput,
    UpdaterOrchestrator,
    VersionContext,
)
from ..artifacts import AZURE_DEVOPS_BASE_URL, ArtifactDownloader, download_artifact
from ..console import (
    gha_warning,
    print_banner,
    print_final_failure,
    print_final_success,
    print_step_end,
    print_step_header,
    print_summary_table,
    print_sync_summary,
    print_update_summary,
)
from ..exceptions import ConfigurationError, ManifestParseError, SyncError
from ..logging_config import add_file_handler, logger, set_log_level
from ..manifest import DEFAULT_ARTIFACT_NAME, ManifestLoader
from ..reference_data import ReferenceConfiguration, ReferenceTree, load_reference_configuration
from ..sync import CoreDirectorySync, default_backup_root

RELEASE_NOTES_UPDATER_VERSION = __version__
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_ORGANIZATION = "dnceng"
DEFAULT_PROJECT = "internal"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# (runtime_id, build_id); the build ID is only needed when downloading
ReleasePair = Tuple[str, Optional[str]]


@dataclass
class Config:
    """Configuration settings for a release notes update run."""

    releases: List[ReleasePair] = field(default_factory=list)
    organization: str = DEFAULT_ORGANIZATION
    project: str = DEFAULT_PROJECT
    token: Optional[str] = None
    artifact_name: str = DEFAULT_ARTIFACT_NAME
    azure_devops_url: str = AZURE_DEVOPS_BASE_URL
    template_dir: str = str(DEFAULT_TEMPLATE_DIR)
    output_dir: str = "output"
    download_dir: str = "artifacts"
    reference_dir: Optional[str] = None
    config_dir: str = "config"
    backup_dir: str = "backups"
    log_file: Optional[str] = "logfile.log"
    download: bool = False
    sync: bool = False
    log_level: str = "INFO"

    @property
    def runtime_ids(self) -> List[str]:
        return [runtime_id for runtime_id, _ in self.releases]

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.releases:
            raise ConfigurationError("No releases configured. Use --release RUNTIME_ID[:BUILD_ID] or RELEASES")

        for runtime_id, build_id in self.releases:
            if not runtime_id.strip():
                raise ConfigurationError("Runtime ID cannot be empty")
            if self.download and not build_id:
                raise ConfigurationError(f"Release '{runtime_id}' has no build ID; downloads need RUNTIME_ID:BUILD_ID")

        if self.download:
            if not self.token:
                raise ConfigurationError("Azure DevOps token is not defined (--token or AZDO_TOKEN)")
            if not self.organization or not self.project:
                raise ConfigurationError("Azure DevOps organization and project are required for downloads")

        if self.sync and not self.reference_dir:
            raise ConfigurationError("--sync requires a reference directory (--reference-dir or REFERENCE_DIR)")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level '{self.log_level}'. Expected one of {', '.join(LOG_LEVELS)}")

        if not Path(self.template_dir).is_dir():
            logger.warning(f"Template directory not found: {self.template_dir}")


def parse_release(value: str) -> ReleasePair:
    """
    Parse ``RUNTIME_ID[:BUILD_ID]``.

    Raises:
        ConfigurationError: If either side of the colon is empty
    """
    text = value.strip()
    if ":" not in text:
        if not text:
            raise ConfigurationError("Release value cannot be empty")
        return text, None
    runtime_id, build_id = (part.strip() for part in text.split(":", 1))
    if not runtime_id:
        raise ConfigurationError(f"Invalid release '{value}': runtime ID cannot be empty")
    if not build_id:
        raise ConfigurationError(f"Invalid release '{value}': build ID cannot be empty")
    return runtime_id, build_id


def parse_releases_value(value: Optional[str]) -> List[str]:
    """
    Split the RELEASES environment value.

    Accepts a JSON list (``["8.0.15:2651234"]``) or a comma-separated list.
    """
    if not value or not value.strip():
        return []
    text = value.strip()
    if text.startswith("["):
        try:
            items = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON format for RELEASES: {e}")
        if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
            raise ConfigurationError('RELEASES must be a JSON list of strings like ["8.0.15:2651234"]')
        return items
    return [item for item in (part.strip() for part in text.split(",")) if item]


def parse_releases(values: Iterable[str]) -> List[ReleasePair]:
    """Parse release values, dropping repeated runtime IDs (first one wins)."""
    pairs: "OrderedDict[str, Optional[str]]" = OrderedDict()
    for value in values:
        runtime_id, build_id = parse_release(value)
        if runtime_id in pairs:
            logger.warning(f"Release {runtime_id} listed more than once; using the first entry")
            continue
        pairs[runtime_id] = build_id
    return list(pairs.items())


def build_config(
    releases: Sequence[str] = (),
    organization: str = DEFAULT_ORGANIZATION,
    project: str = DEFAULT_PROJECT,
    token: Optional[str] = None,
    artifact_name: str = DEFAULT_ARTIFACT_NAME,
    template_dir: Optional[str] = None,
    output_dir: str = "output",
    download_dir: str = "artifacts",
    reference_dir: Optional[str] = None,
    config_dir: str = "config",
    backup_dir: str = "backups",
    log_file: Optional[str] = "logfile.log",
    download: bool = False,
    sync: bool = False,
    log_level: str = "INFO",
) -> Config:
    """
    Build a Config from CLI or environment values (not yet validated).

    Raises:
        ConfigurationError: If a release value is malformed
    """
    return Config(
        releases=parse_releases(releases),
        organization=organization,
        project=project,
        token=token or None,
        artifact_name=artifact_name,
        template_dir=template_dir or str(DEFAULT_TEMPLATE_DIR),
        output_dir=output_dir,
        download_dir=download_dir,
        reference_dir=reference_dir or None,
        config_dir=config_dir,
        backup_dir=backup_dir,
        log_file=log_file or None,
        download=download,
        sync=sync,
        log_level=log_level.upper(),
    )


def _before_send(event, hint):
    """
    Filter events before sending to Sentry.

    Configuration errors are user errors and are never reported.
    """
    if "exc_info" in hint:
        exc_type, exc_value, tb = hint["exc_info"]
        if isinstance(exc_value, ConfigurationError):
            return None
    return event


def initialize_sentry() -> bool:
    """
    Initialize Sentry for error tracking.

    Sentry stays off unless SENTRY_DSN is set, and TELEMETRY=false always
    disables it.

    Returns:
        True if Sentry was initialized
    """
    if os.getenv("TELEMETRY", "true").lower() == "false":
        logger.debug("Telemetry disabled")
        return False
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=sentry_dsn,
        release=f"release-notes-updater@{RELEASE_NOTES_UPDATER_VERSION}",
        traces_sample_rate=0.0,
        before_send=_before_send,
    )
    return True


def _download_artifacts(config: Config) -> int:
    downloader = ArtifactDownloader(
        organization=config.organization,
        project=config.project,
        token=config.token,
        artifact_name=config.artifact_name,
        download_dir=config.download_dir,
        base_url=config.azure_devops_url,
    )
    downloaded = 0
    for runtime_id, build_id in config.releases:
        if download_artifact(downloader, runtime_id, build_id) is not None:
            downloaded += 1
    return downloaded


def load_versions(config: Config) -> List[VersionContext]:
    """Load the manifest of every configured runtime; missing or malformed ones are logged and skipped."""
    loader = ManifestLoader(config.download_dir, config.artifact_name)
    versions: List[VersionContext] = []
    for runtime_id in config.runtime_ids:
        try:
            manifest = loader.load(runtime_id)
        except ManifestParseError as e:
            logger.error(str(e))
            continue
        if manifest is None:
            continue
        version = VersionContext(runtime_id=runtime_id, manifest=manifest)
        logger.info(f"Loaded manifest for {runtime_id} (channel {version.channel})")
        versions.append(version)
    return versions


def generate_documents(
    config: Config,
    reference: ReferenceConfiguration,
    tree: ReferenceTree,
    versions: List[VersionContext],
    orchestrator: Optional[UpdaterOrchestrator] = None,
) -> AggregateResult:
    """Run the version, channel and run scope updaters in that order."""
    orchestrator = orchestrator or UpdaterOrchestrator()
    aggregate = AggregateResult()

    def make_input(scope: str, scoped: List[VersionContext], channel: Optional[str] = None) -> UpdaterInput:
        return UpdaterInput(
            scope=scope,
            output_dir=Path(config.output_dir),
            template_dir=Path(config.template_dir),
            reference=reference,
            reference_tree=tree,
            versions=scoped,
            runtime_ids=config.runtime_ids,
            channel=channel,
        )

    for version in versions:
        aggregate.extend(orchestrator.run_scope(make_input(VERSION_SCOPE, [version])))

    by_channel: "OrderedDict[str, List[VersionContext]]" = OrderedDict()
    for version in versions:
        by_channel.setdefault(version.channel, []).append(version)
    for channel, channel_versions in by_channel.items():
        aggregate.extend(orchestrator.run_scope(make_input(CHANNEL_SCOPE, channel_versions, channel)))

    aggregate.extend(orchestrator.run_scope(make_input(RUN_SCOPE, versions)))
    return aggregate


def run_pipeline(config: Config) -> AggregateResult:
    """
    Regenerate the documentation tree for the configured releases.

    Steps: load reference data, download artifacts (optional), load manifests,
    generate documents, sync into the reference directory (optional).
    """
    step = 1
    print_step_header(step, "Load reference data")
    reference = load_reference_configuration(config.config_dir)
    tree = ReferenceTree(config.reference_dir)
    if config.reference_dir and not tree.available:
        logger.warning(f"Reference directory not found: {config.reference_dir}")
    print_step_end(step)

    if config.download:
        step += 1
        print_step_header(step, "Download release manifests")
        downloaded = _download_artifacts(config)
        logger.info(f"Downloaded {downloaded} of {len(config.releases)} artifact(s)")
        print_step_end(step, success=downloaded == len(config.releases))

    step += 1
    print_step_header(step, "Load release manifests")
    versions = load_versions(config)
    print_summary_table(
        "Manifests",
        [("Configured", len(config.releases)), ("Loaded", len(versions))],
        show_if_empty=True,
    )
    missing = len(config.releases) - len(versions)
    if missing:
        gha_warning(f"{missing} release manifest(s) could not be loaded", title="Missing manifests")
    print_step_end(step, success=bool(versions))

    step += 1
    print_step_header(step, "Generate documents")
    aggregate = generate_documents(config, reference, tree, versions)
    print_update_summary(aggregate)
    print_step_end(step, success=aggregate.all_successful)

    if config.sync:
        step += 1
        print_step_header(step, "Sync into reference directory")
        syncer = CoreDirectorySync(
            output_dir=config.output_dir,
            reference_dir=config.reference_dir,
            runtime_ids=config.runtime_ids,
            backup_root=default_backup_root(config.backup_dir),
        )
        try:
            report = syncer.sync()
        except SyncError as e:
            logger.error(f"Sync failed: {e}")
            report = syncer.report
        print_sync_summary(report)
        print_step_end(step, success=not report.has_failures)

    return aggregate


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--release",
    "releases",
    multiple=True,
    metavar="RUNTIME_ID[:BUILD_ID]",
    help="Runtime version to process, with the pipeline build ID to download it from. Repeatable. "
    "Falls back to RELEASES (JSON list or comma-separated).",
)
@click.option("--organization", envvar="AZDO_ORGANIZATION", default=DEFAULT_ORGANIZATION, show_default=True)
@click.option("--project", envvar="AZDO_PROJECT", default=DEFAULT_PROJECT, show_default=True)
@click.option("--token", envvar="AZDO_TOKEN", help="Azure DevOps personal access token.")
@click.option("--artifact-name", envvar="ARTIFACT_NAME", default=DEFAULT_ARTIFACT_NAME, show_default=True)
@click.option("--template-dir", envvar="TEMPLATE_DIR", help="Markdown template directory. [default: packaged]")
@click.option("--output-dir", envvar="OUTPUT_DIR", default="output", show_default=True)
@click.option("--download-dir", envvar="DOWNLOAD_DIR", default="artifacts", show_default=True)
@click.option("--reference-dir", envvar="REFERENCE_DIR", help="Previously published documentation tree.")
@click.option("--config-dir", envvar="CONFIG_DIR", default="config", show_default=True)
@click.option("--backup-dir", envvar="BACKUP_DIR", default="backups", show_default=True)
@click.option("--log-file", envvar="LOG_FILE", default="logfile.log", show_default=True)
@click.option(
    "--download/--no-download",
    envvar="DOWNLOAD",
    default=False,
    help="Download the release-manifests artifact of each build first.",
)
@click.option(
    "--sync/--no-sync",
    envvar="SYNC",
    default=False,
    help="Copy the generated tree into the reference directory afterwards.",
)
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    default="INFO",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
)
@click.option(
    "--telemetry/--no-telemetry",
    envvar="TELEMETRY",
    default=True,
    help="Report unexpected errors to Sentry when SENTRY_DSN is set.",
)
@click.version_option(RELEASE_NOTES_UPDATER_VERSION, prog_name="release-notes-updater")
@click.pass_context
def cli(
    ctx: click.Context,
    releases: Tuple[str, ...],
    organization: str,
    project: str,
    token: Optional[str],
    artifact_name: str,
    template_dir: Optional[str],
    output_dir: str,
    download_dir: str,
    reference_dir: Optional[str],
    config_dir: str,
    backup_dir: str,
    log_file: str,
    download: bool,
    sync: bool,
    log_level: str,
    telemetry: bool,
) -> None:
    """Regenerate .NET release notes, install guides and release indexes from release manifests."""
    release_values = list(releases)
    if not release_values:
        try:
            release_values = parse_releases_value(os.getenv("RELEASES"))
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            sys.exit(1)

    if not release_values:
        print_banner(RELEASE_NOTES_UPDATER_VERSION)
        click.echo(ctx.get_help())
        ctx.exit(0)

    set_log_level(log_level)
    if log_file:
        add_file_handler(log_file)

    if telemetry:
        initialize_sentry()

    print_banner(RELEASE_NOTES_UPDATER_VERSION)

    try:
        config = build_config(
            releases=release_values,
            organization=organization,
            project=project,
            token=token,
            artifact_name=artifact_name,
            template_dir=template_dir,
            output_dir=output_dir,
            download_dir=download_dir,
            reference_dir=reference_dir,
            config_dir=config_dir,
            backup_dir=backup_dir,
            log_file=log_file,
            download=download,
            sync=sync,
            log_level=log_level,
        )
        config.validate()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print_final_failure(str(e))
        sys.exit(1)

    aggregate = run_pipeline(config)
    if aggregate.any_failures:
        failed = ", ".join(
            f"{r.updater_name} [{r.scope_key}]" if r.scope_key else r.updater_name for r in aggregate.failed_updaters
        )
        print_final_failure(f"Some documents could not be generated: {failed}")
        sys.exit(1)
    print_final_success()


def main() -> None:
    """Console script entry point."""
    try:
        cli(standalone_mode=True)
    except SystemExit:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sentry_sdk.capture_exception(e)
        sys.exit(1)
