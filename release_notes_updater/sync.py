"""Copy the generated documentation tree into the reference directory.

Root and channel-level files are overwritten after a backup. Runtime
directories are synced in one of two modes:

* full: the directory does not exist at the destination yet, so every file
  is copied (backing up anything it replaces)
* selective: the directory already exists (an SDK-only release), so only
  files missing at the destination are added and existing files are kept
"""

import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .exceptions import SyncError
from .logging_config import logger
from .versions import channel_version

ROOT_FILES = ("README.md", "releases.md")
RELEASE_NOTES_FILES = ("README.md", "releases-index.json")
CHANNEL_FILES = (
    "README.md",
    "cve.md",
    "install-linux.md",
    "install-macos.md",
    "install-windows.md",
    "releases.json",
)


@dataclass
class SyncReport:
    """Counts and paths of what a sync run did."""

    copied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    backed_up: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


def default_backup_root(base_dir: Union[str, Path] = "backups", now: Optional[datetime] = None) -> Path:
    """``<base_dir>/<yyyy-MM-dd_HH-mm-ss>`` for the current run."""
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return Path(base_dir) / stamp


class CoreDirectorySync:
    """
    Reconciles the generated output tree with the reference documentation tree.

    Example:
        sync = CoreDirectorySync("output", "docs/core", ["8.0.15"], default_backup_root())
        report = sync.sync()
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        reference_dir: Union[str, Path],
        runtime_ids: Iterable[str],
        backup_root: Union[str, Path],
    ) -> None:
        self.output_dir = Path(output_dir)
        self.reference_dir = Path(reference_dir)
        self.runtime_ids = list(runtime_ids)
        self.backup_root = Path(backup_root)
        self.report = SyncReport()

    def sync(self) -> SyncReport:
        """
        Run the sync.

        Raises:
            SyncError: If a generated file cannot be copied into place
        """
        logger.info(f"Syncing {self.output_dir} into {self.reference_dir}")
        self.reference_dir.mkdir(parents=True, exist_ok=True)

        for name in ROOT_FILES:
            self._sync_file(self.output_dir / name, self.reference_dir / name, "root")

        source_notes = self.output_dir / "release-notes"
        dest_notes = self.reference_dir / "release-notes"
        if not source_notes.is_dir():
            logger.warning(f"Generated release-notes directory not found: {source_notes}")
            return self.report

        for name in RELEASE_NOTES_FILES:
            self._sync_file(source_notes / name, dest_notes / name, "release-notes")

        channels = list(dict.fromkeys(channel_version(rid) for rid in self.runtime_ids))
        for channel in channels:
            source_channel = source_notes / channel
            if not source_channel.is_dir():
                continue
            dest_channel = dest_notes / channel
            for name in CHANNEL_FILES:
                self._sync_file(source_channel / name, dest_channel / name, f"release-notes/{channel}")

            for runtime_id in self.runtime_ids:
                if channel_version(runtime_id) != channel:
                    continue
                source_runtime = source_channel / runtime_id
                if not source_runtime.is_dir():
                    continue
                context = f"release-notes/{channel}/{runtime_id}"
                try:
                    self.sync_runtime_directory(source_runtime, dest_channel / runtime_id, context)
                except SyncError as e:
                    logger.error(f"Sync of runtime {runtime_id} aborted: {e}")

        logger.info(
            f"Sync complete: {len(self.report.copied)} copied, {len(self.report.skipped)} skipped, "
            f"{len(self.report.backed_up)} backed up"
        )
        if self.report.backed_up:
            logger.info(f"Backup files saved to: {self.backup_root}")
        return self.report

    def _sync_file(self, source: Path, dest: Path, context: str) -> None:
        if not source.is_file():
            logger.debug(f"Generated file not present, nothing to sync: {source}")
            return
        self.copy_with_backup(source, dest, context)

    def sync_runtime_directory(self, source_dir: Path, dest_dir: Path, context: str) -> None:
        """Full sync for a new runtime directory, selective sync for an existing one."""
        if dest_dir.is_dir():
            logger.info(f"Destination exists for {source_dir.name}, performing selective sync (SDK-only release)")
            self._sync_selective(source_dir, dest_dir, context)
        else:
            logger.info(f"Full sync for new runtime directory: {source_dir.name}")
            self._sync_full(source_dir, dest_dir, context)

    def _sync_full(self, source_dir: Path, dest_dir: Path, context: str) -> None:
        for source in sorted(p for p in source_dir.rglob("*") if p.is_file()):
            self.copy_with_backup(source, dest_dir / source.relative_to(source_dir), context)

    def _sync_selective(self, source_dir: Path, dest_dir: Path, context: str) -> None:
        for source in sorted(p for p in source_dir.rglob("*") if p.is_file()):
            relative = source.relative_to(source_dir)
            dest = dest_dir / relative
            if dest.exists():
                logger.info(f"Skipped existing file: {relative}")
                self.report.skipped.append(str(dest))
                continue
            self._copy(source, dest)
            logger.info(f"Added new file: {relative}")

    def copy_with_backup(self, source: Path, dest: Path, context: str) -> None:
        """
        Copy ``source`` over ``dest``, backing up ``dest`` first when it exists.

        Raises:
            SyncError: If the copy itself fails (backup failures are only logged)
        """
        if dest.exists():
            self.create_backup(dest, context)
        self._copy(source, dest)

    def _copy(self, source: Path, dest: Path) -> None:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)
        except OSError as e:
            logger.error(f"Error copying file {source} to {dest}: {e}")
            self.report.failed.append(str(dest))
            raise SyncError(f"Failed to copy {source} to {dest}: {e}") from e
        logger.info(f"Synced file: {source} -> {dest}")
        self.report.copied.append(str(dest))

    def create_backup(self, original: Path, context: str) -> Optional[Path]:
        """
        Copy ``original`` to ``<backup_root>/<context>/<name>``.

        A name already used in this run gets an ``_HHMMSS`` suffix. Failures
        are logged and never raised.
        """
        try:
            backup_dir = self.backup_root / context
            backup_dir.mkdir(parents=True, exist_ok=True)
            backup = backup_dir / original.name
            if backup.exists():
                stamp = datetime.now().strftime("%H%M%S")
                backup = backup_dir / f"{original.stem}_{stamp}{original.suffix}"
            shutil.copy2(original, backup)
        except OSError as e:
            logger.error(f"Error creating backup for {original}: {e}")
            return None
        logger.info(f"Created backup: {original} -> {backup}")
        self.report.backed_up.append(str(backup))
        return backup
