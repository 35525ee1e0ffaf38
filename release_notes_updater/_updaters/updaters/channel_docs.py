"""Channel documents merged into the published copies (``README.md`` and ``cve.md``)."""

import re
from typing import List, Optional

from ..._projection import merge_cve_references
from ...logging_config import logger
from ...models import Release
from ...versions import format_prose_date, format_table_date
from ..files import write_text
from ..protocol import CHANNEL_SCOPE, UpdaterInput, VersionContext
from ..result import UpdateResult

RELEASES_TABLE_WITH_SDK = re.compile(
    r"(## (Release notes|Releases)\s*\n\s*\|\s*Date\s*\|\s*Release\s*\|\s*SDK\s*\|\s*\n"
    r"\s*\|\s*:--\s*\|\s*:--\s*\|\s*:--\s*\|\s*\n)"
)
RELEASES_TABLE = re.compile(
    r"(## (Release notes|Releases)\s*\n\s*\|\s*Date\s*\|\s*Release\s*\|\s*\n\s*\|\s*:--\s*\|\s*:--\s*\|\s*\n)"
)
CVE_SECTION = re.compile(
    r"(## Which CVEs apply to my app\?\s*\n\s*Your app may be vulnerable to the following published security "
    r"\[CVEs\]\(https://www\.cve\.org/\) if you are using an older version\.\s*\n)"
)


def _release_label(version: VersionContext, release: Release) -> str:
    return release.runtime_version or version.runtime_id


def sdk_column(release: Release, runtime_id: str, latest_sdk: Optional[str]) -> str:
    """Comma-separated SDK links; the latest SDK links to the runtime page."""
    links = []
    for sdk_version in release.sdk_versions():
        page = runtime_id if sdk_version == latest_sdk else sdk_version
        links.append(f"[{sdk_version}](./{runtime_id}/{page}.md)")
    return ", ".join(links)


def insert_readme_row(content: str, version: VersionContext) -> str:
    """
    Insert a row for ``version`` directly under the releases table header.

    Content without a recognisable table, or already listing the runtime,
    is returned unchanged.
    """
    release = version.release
    if release is None:
        return content
    runtime_id = _release_label(version, release)
    if f"](./{runtime_id}/{runtime_id}.md)" in content:
        logger.info(f"Channel README already lists {runtime_id}; leaving it unchanged")
        return content

    with_sdk = True
    match = RELEASES_TABLE_WITH_SDK.search(content)
    if match is None:
        with_sdk = False
        match = RELEASES_TABLE.search(content)
    if match is None:
        logger.warning("Could not find the Release notes/Releases table in the channel README")
        return content

    date = format_table_date(release.release_date or version.manifest.latest_release_date)
    row = f"| {date} | [{runtime_id}](./{runtime_id}/{runtime_id}.md) |"
    if with_sdk:
        sdks = sdk_column(release, runtime_id, version.latest_sdk)
        if not sdks:
            logger.warning(f"No SDK versions found for runtime {runtime_id}")
        row += f" {sdks} |"
    logger.info(f"Added row for {runtime_id} dated {date} under '## {match.group(2)}'")
    return content[: match.end()] + row + "\n" + content[match.end() :]


def cve_items(release: Release, msrc_record) -> List[str]:
    items = []
    for cve in merge_cve_references(release.cve_list, msrc_record):
        if cve.title and cve.description:
            items.append(f"  - {cve.cve_id}: {cve.title} - {cve.description}")
        elif cve.title:
            items.append(f"  - {cve.cve_id}: {cve.title}")
        elif cve.cve_url:
            items.append(f"  - [{cve.cve_url}]({cve.cve_url})")
        elif cve.cve_id:
            items.append(f"  - {cve.cve_id}")
    return items or ["  - No new CVEs."]


def insert_cve_entry(content: str, version: VersionContext, msrc_record) -> str:
    """
    Insert ``- <release> (<Month yyyy>)`` with its CVE bullets under the CVE list header.

    Content without the header, or already listing the release, is returned unchanged.
    """
    release = version.release
    if release is None:
        return content
    label = _release_label(version, release)
    if re.search(rf"^- {re.escape(label)} \(", content, re.MULTILINE):
        logger.info(f"cve.md already lists {label}; leaving it unchanged")
        return content

    match = CVE_SECTION.search(content)
    if match is None:
        logger.warning("Could not find the CVE list section in cve.md")
        return content

    date = format_prose_date(release.release_date or version.manifest.latest_release_date)
    entry = f"- {label} ({date})\n" + "\n".join(cve_items(release, msrc_record)) + "\n"
    logger.info(f"Added CVE entry for {label} dated {date}")
    return content[: match.end()] + entry + content[match.end() :]


class VersionReadmeUpdater:
    """Adds the channel's new releases to ``release-notes/<channel>/README.md``."""

    name = "version_readme"
    scope = CHANNEL_SCOPE
    source_name = "README.md"

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope and bool(input.versions)

    def merge(self, content: str, version: VersionContext, input: UpdaterInput) -> str:
        return insert_readme_row(content, version)

    def update(self, input: UpdaterInput) -> UpdateResult:
        content = input.reference_tree.read_text("release-notes", input.channel, self.source_name)
        if content is None:
            return UpdateResult.skipped_result(
                self.name, f"No published {self.source_name} for channel {input.channel}"
            )

        # Oldest first, so the newest release ends up on top
        for version in input.versions:
            content = self.merge(content, version, input)

        path = input.channel_dir(input.channel) / self.source_name
        write_text(path, content)
        return UpdateResult.success_result(self.name, files_written=[str(path)])


class CveFileUpdater(VersionReadmeUpdater):
    """Adds the channel's new releases to ``release-notes/<channel>/cve.md``."""

    name = "cve_file"
    source_name = "cve.md"

    def merge(self, content: str, version: VersionContext, input: UpdaterInput) -> str:
        release = version.release
        runtime_id = release.runtime_version if release and release.runtime_version else version.runtime_id
        return insert_cve_entry(content, version, input.reference.msrc_for(runtime_id))
