"""Reference data: lookup tables from the config directory and the published documentation tree."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .logging_config import logger
from .models import CoreReleasesDocument, MsrcRecord, ReleaseIndex, UnsupportedVersion
from .versions import DATE_SENTINEL, sort_versions_descending

LAUNCH_DATES_FILE = "launch-dates.json"
ANNOUNCEMENT_LINKS_FILE = "announcement-links.json"
EOL_ANNOUNCEMENT_LINKS_FILE = "eol-announcement-links.json"
EOL_DATES_FILE = "eol-dates.json"
UNSUPPORTED_VERSIONS_FILE = "unsupported-versions.json"
MSRC_FILE = "msrc.json"


@dataclass
class ReferenceConfiguration:
    """
    Lookup tables loaded once at start-up and read-only afterwards.

    Absent entries resolve to sentinels: ``"TBD"`` for dates and ``""``
    (meaning "no link") for announcement URLs.
    """

    launch_dates: Dict[str, str] = field(default_factory=dict)
    announcement_links: Dict[str, str] = field(default_factory=dict)
    eol_announcement_links: Dict[str, str] = field(default_factory=dict)
    eol_dates: Dict[str, str] = field(default_factory=dict)
    unsupported_versions: Dict[str, UnsupportedVersion] = field(default_factory=dict)
    msrc_records: List[MsrcRecord] = field(default_factory=list)

    def launch_date(self, channel: str) -> str:
        return self.launch_dates.get(channel) or DATE_SENTINEL

    def announcement_link(self, channel: str) -> str:
        return self.announcement_links.get(channel, "")

    def eol_announcement_link(self, channel: str) -> str:
        return self.eol_announcement_links.get(channel, "")

    def eol_date(self, channel: str) -> Optional[str]:
        return self.eol_dates.get(channel) or None

    def unsupported(self) -> List[UnsupportedVersion]:
        """Unsupported channels, newest first."""
        return [self.unsupported_versions[v] for v in sort_versions_descending(self.unsupported_versions)]

    def msrc_for(self, runtime_id: Optional[str]) -> Optional[MsrcRecord]:
        if not runtime_id:
            return None
        for record in self.msrc_records:
            if record.runtime_id == runtime_id:
                return record
        return None


def _read_json(path: Path) -> Optional[Any]:
    """Read a JSON file; missing and malformed files are logged and yield None."""
    if not path.is_file():
        logger.warning(f"Reference data file not found: {path}")
        return None
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.error(f"Failed to read reference data file {path}: {e}")
        return None


def _string_table(path: Path) -> Dict[str, str]:
    data = _read_json(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.error(f"Reference data file {path} must contain a JSON object")
        return {}
    return {str(k): str(v) for k, v in data.items() if v is not None}


def _unsupported_table(path: Path) -> Dict[str, UnsupportedVersion]:
    data = _read_json(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.error(f"Reference data file {path} must contain a JSON object")
        return {}
    return {
        str(channel): UnsupportedVersion.from_dict(str(channel), entry)
        for channel, entry in data.items()
        if isinstance(entry, dict)
    }


def _msrc_records(path: Path) -> List[MsrcRecord]:
    data = _read_json(path)
    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        logger.error(f"Reference data file {path} must contain a JSON array")
        return []
    return [MsrcRecord.from_dict(item) for item in data if isinstance(item, dict)]


def load_reference_configuration(config_dir: Union[str, Path]) -> ReferenceConfiguration:
    """
    Load every lookup table from ``config_dir``.

    A missing or malformed file never aborts the run; its table is left empty.
    """
    config_path = Path(config_dir)
    if not config_path.is_dir():
        logger.warning(f"Reference configuration directory not found: {config_path}")

    configuration = ReferenceConfiguration(
        launch_dates=_string_table(config_path / LAUNCH_DATES_FILE),
        announcement_links=_string_table(config_path / ANNOUNCEMENT_LINKS_FILE),
        eol_announcement_links=_string_table(config_path / EOL_ANNOUNCEMENT_LINKS_FILE),
        eol_dates=_string_table(config_path / EOL_DATES_FILE),
        unsupported_versions=_unsupported_table(config_path / UNSUPPORTED_VERSIONS_FILE),
        msrc_records=_msrc_records(config_path / MSRC_FILE),
    )
    logger.info(
        f"Loaded reference data: {len(configuration.launch_dates)} launch dates, "
        f"{len(configuration.unsupported_versions)} unsupported versions, "
        f"{len(configuration.msrc_records)} MSRC records"
    )
    return configuration


class ReferenceTree:
    """
    Read access to the previously published documentation tree.

    Layout mirrors the generated output::

        releases.md
        release-notes/README.md
        release-notes/releases-index.json
        release-notes/<channel>/{README.md, cve.md, releases.json}
    """

    def __init__(self, root: Optional[Union[str, Path]]) -> None:
        self.root = Path(root) if root else None

    @property
    def available(self) -> bool:
        return self.root is not None and self.root.is_dir()

    def path(self, *parts: str) -> Optional[Path]:
        if self.root is None:
            return None
        return self.root.joinpath(*parts)

    def channel_file(self, channel: str, name: str) -> Optional[Path]:
        return self.path("release-notes", channel, name)

    def read_text(self, *parts: str) -> Optional[str]:
        """Read a text file from the tree, or None (logged) when absent or unreadable."""
        path = self.path(*parts)
        if path is None:
            logger.warning(f"No reference directory configured; cannot read {'/'.join(parts)}")
            return None
        if not path.is_file():
            logger.warning(f"Reference file not found: {path}")
            return None
        try:
            return path.read_text(encoding="utf-8-sig")
        except (UnicodeDecodeError, OSError) as e:
            logger.error(f"Failed to read reference file {path}: {e}")
            return None

    def channel_releases(self, channel: str) -> Optional[CoreReleasesDocument]:
        """The published ``release-notes/<channel>/releases.json``, if readable."""
        path = self.channel_file(channel, "releases.json")
        if path is None or not path.is_file():
            return None
        data = _read_json(path)
        if not isinstance(data, dict):
            logger.error(f"Ignoring unreadable reference releases file: {path}")
            return None
        return CoreReleasesDocument.from_dict(data)

    def release_index(self) -> Optional[ReleaseIndex]:
        path = self.path("release-notes", "releases-index.json")
        if path is None or not path.is_file():
            return None
        data = _read_json(path)
        if not isinstance(data, dict):
            logger.error(f"Ignoring unreadable reference index file: {path}")
            return None
        return ReleaseIndex.from_dict(data)
