"""Supported and unsupported release tables for ``releases.md`` and the release-notes README."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .logging_config import logger
from .models import CoreReleasesDocument, ReleaseManifest, UnsupportedVersion
from .reference_data import ReferenceConfiguration
from .versions import (
    DATE_SENTINEL,
    TEXT_SENTINEL,
    build_link_path,
    format_header_date,
    is_legacy_core_channel,
    is_preview,
    title_case,
    upper_case,
    version_sort_key,
)

SUPPORTED_HEADER = (
    "|  Version  | Release Date | Release type | Support phase | Latest Patch Version | End of Support |\n"
    "| :-- | :-- | :-- | :-- | :-- | :-- |"
)
UNSUPPORTED_HEADER = (
    "|  Version  | Release Date | Release type | Latest Patch Version | End of Support |\n| :-- | :-- | :-- | :-- | :-- |"
)


@dataclass
class ChannelRow:
    """The per-channel facts a release table row is built from."""

    channel_version: str
    latest_release: Optional[str] = None
    support_phase: Optional[str] = None
    release_type: Optional[str] = None
    eol_date: Optional[str] = None

    @classmethod
    def from_manifest(cls, manifest: ReleaseManifest) -> "ChannelRow":
        return cls(
            channel_version=manifest.channel_version,
            latest_release=manifest.latest_release,
            support_phase=manifest.support_phase,
            release_type=manifest.release_type,
            eol_date=manifest.eol_date,
        )

    @classmethod
    def from_core_releases(cls, document: CoreReleasesDocument) -> "ChannelRow":
        return cls(
            channel_version=document.channel_version,
            latest_release=document.latest_release,
            support_phase=document.support_phase,
            release_type=document.release_type,
            eol_date=document.eol_date,
        )

    @classmethod
    def from_unsupported(cls, entry: UnsupportedVersion) -> "ChannelRow":
        return cls(
            channel_version=entry.channel_version,
            latest_release=entry.latest_release,
            support_phase="eol",
            release_type=entry.release_type,
        )

    @property
    def is_eol(self) -> bool:
        return title_case(self.support_phase).lower() == "eol"


@dataclass
class TableResult:
    """A rendered markdown table with its trailing link-reference block."""

    table: str
    links: str = ""
    markdown_files: List[str] = field(default_factory=list)
    rows: int = 0

    def render(self, extra_links: Iterable[str] = ()) -> str:
        """Table, blank line, link definitions (the layout both index pages use)."""
        link_lines = [line for line in self.links.splitlines() if line]
        link_lines.extend(extra_links)
        if not link_lines:
            return self.table
        return f"{self.table}\n\n" + "\n".join(link_lines)


class TableBuilder:
    """
    Renders release tables from channel rows and the reference configuration.

    Example:
        builder = TableBuilder(reference)
        supported = builder.build_supported_table(rows)
        unsupported = builder.build_unsupported_table()
    """

    def __init__(self, reference: ReferenceConfiguration) -> None:
        self.reference = reference

    def _release_date_cell(self, channel: str) -> str:
        launch_date = self.reference.launch_date(channel)
        link = self.reference.announcement_link(channel)
        return f"[{launch_date}]({link})" if link else launch_date

    def _eol_cell(self, channel: str, eol_date: Optional[str], link_eol: bool) -> str:
        eol_text = format_header_date(eol_date or self.reference.eol_date(channel), default=DATE_SENTINEL)
        link = self.reference.eol_announcement_link(channel) if link_eol else ""
        return f"[{eol_text}]({link})" if link else eol_text

    def build_supported_table(
        self,
        rows: Iterable[ChannelRow],
        include_previews: bool = True,
        version_link_prefix: str = "release-notes",
        link_prefix: str = "release-notes",
        link_eol: bool = True,
    ) -> TableResult:
        """
        Table of channels still in support, newest first.

        Rows whose support phase is EOL never appear here. Preview releases are
        dropped when ``include_previews`` is False. A row whose preview release
        string is malformed is logged and skipped.

        Args:
            rows: Candidate channel rows (any order)
            include_previews: Keep channels whose latest release is a preview
            version_link_prefix: Prefix of the channel README link
            link_prefix: Prefix of the release page link paths
            link_eol: Link the end-of-support date to its announcement
        """
        lines = [SUPPORTED_HEADER]
        links: List[str] = []
        markdown_files: List[str] = []
        count = 0

        for row in sorted(rows, key=lambda r: version_sort_key(r.channel_version), reverse=True):
            channel = row.channel_version
            if row.is_eol:
                logger.debug(f"Excluding end-of-life channel {channel} from supported table")
                continue
            latest = row.latest_release or TEXT_SENTINEL
            if is_preview(latest) and not include_previews:
                logger.debug(f"Excluding preview release {latest} from supported table")
                continue

            link_path = build_link_path(channel, latest, link_prefix) if row.latest_release else None
            if row.latest_release and link_path is None:
                continue

            display = f"[.NET {channel}]({version_link_prefix}/{channel}/README.md)"
            lines.append(
                f"| {display} | {self._release_date_cell(channel)} | [{upper_case(row.release_type)}][policies] | "
                f"{title_case(row.support_phase)} | [{latest}][{latest}] | {self._eol_cell(channel, row.eol_date, link_eol)} |"
            )
            if link_path:
                links.append(f"[{latest}]: {link_path}")
                markdown_files.append(f"* [{channel}/{latest}/{latest}.md](./{channel}/{latest}/{latest}.md)")
            count += 1

        return TableResult(table="\n".join(lines), links="\n".join(links), markdown_files=markdown_files, rows=count)

    def build_unsupported_table(self, link_prefix: str = "release-notes") -> TableResult:
        """Table of every channel listed in the unsupported-versions reference data."""
        lines = [UNSUPPORTED_HEADER]
        links: List[str] = []
        count = 0

        for row in (ChannelRow.from_unsupported(entry) for entry in self.reference.unsupported()):
            channel = row.channel_version
            latest = row.latest_release or TEXT_SENTINEL
            link_path = build_link_path(channel, latest, link_prefix) if row.latest_release else None
            if row.latest_release and link_path is None:
                continue

            product = ".NET Core" if is_legacy_core_channel(channel) else ".NET"
            display = f"[{product} {channel}]({link_prefix}/{channel}/README.md)"
            lines.append(
                f"| {display} | {self._release_date_cell(channel)} | [{upper_case(row.release_type)}][policies] | "
                f"[{latest}][{latest}] | {self._eol_cell(channel, None, True)} |"
            )
            if link_path:
                links.append(f"[{latest}]: {link_path}")
            count += 1

        return TableResult(table="\n".join(lines), links="\n".join(links), rows=count)
