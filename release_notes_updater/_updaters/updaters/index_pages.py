"""Run-level index documents: ``releases.md``, ``release-notes/README.md`` and ``releases-index.json``."""

from typing import Dict, List

from ..._projection import replace_section
from ...logging_config import logger
from ...models import CoreReleaseIndexEntry, ReleaseIndex
from ...tables import ChannelRow, TableBuilder
from ...versions import channel_version
from ..files import load_template, write_json, write_text
from ..protocol import RUN_SCOPE, UpdaterInput, VersionContext
from ..result import UpdateResult

RELEASES_TEMPLATE = "releases-template.md"
RN_README_TEMPLATE = "rn-readme-template.md"
POLICIES_LINK = "[policies]: ../release-policies.md"


def newest_per_channel(input: UpdaterInput) -> Dict[str, VersionContext]:
    """The newest loaded version of each channel (versions are sorted oldest first)."""
    newest: Dict[str, VersionContext] = {}
    for version in input.versions:
        newest[version.channel] = version
    return newest


def channel_rows(input: UpdaterInput) -> List[ChannelRow]:
    """
    One row per configured channel.

    A channel's row comes from its newest loaded manifest. A configured channel
    without a manifest falls back to the published ``releases.json`` in the
    reference tree, and is left out when that is missing too.
    """
    loaded = newest_per_channel(input)
    rows: List[ChannelRow] = []
    seen = set()
    channels = [channel_version(rid) for rid in input.runtime_ids] + list(loaded)
    for channel in channels:
        if channel in seen:
            continue
        seen.add(channel)
        if channel in loaded:
            rows.append(ChannelRow.from_manifest(loaded[channel].manifest))
            continue
        published = input.reference_tree.channel_releases(channel)
        if published is None:
            logger.warning(f"No manifest or published releases.json for channel {channel}; omitting its row")
            continue
        logger.info(f"Using published releases.json for channel {channel}")
        rows.append(ChannelRow.from_core_releases(published))
    return rows


class ReleasesMarkdownUpdater:
    """
    Writes the top-level ``releases.md``.

    ``SECTION-SUPPORTED`` becomes the supported table (previews included) and
    ``SECTION-UNSUPPORTED`` the unsupported table, each followed by its links.
    """

    name = "releases_markdown"
    scope = RUN_SCOPE

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope

    def update(self, input: UpdaterInput) -> UpdateResult:
        template = load_template(input.template_dir, RELEASES_TEMPLATE)
        if template is None:
            return UpdateResult.skipped_result(self.name, f"Template {RELEASES_TEMPLATE} not found")

        builder = TableBuilder(input.reference)
        supported = builder.build_supported_table(channel_rows(input))
        unsupported = builder.build_unsupported_table()

        content = replace_section(template, "SECTION-SUPPORTED", supported.render)
        content = replace_section(content, "SECTION-UNSUPPORTED", unsupported.render)

        path = input.output_dir / "releases.md"
        write_text(path, content)
        return UpdateResult.success_result(
            self.name,
            files_written=[str(path)],
            metadata={"supported_rows": supported.rows, "unsupported_rows": unsupported.rows},
        )


class ReleaseNotesReadmeUpdater:
    """
    Writes ``release-notes/README.md``.

    ``SECTION-RELEASE`` becomes the supported table without previews, linked
    relative to ``release-notes/``; ``SECTION-MARKDOWNFILES`` the list of the
    latest release pages.
    """

    name = "release_notes_readme"
    scope = RUN_SCOPE

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope

    def update(self, input: UpdaterInput) -> UpdateResult:
        template = load_template(input.template_dir, RN_README_TEMPLATE)
        if template is None:
            return UpdateResult.skipped_result(self.name, f"Template {RN_README_TEMPLATE} not found")

        table = TableBuilder(input.reference).build_supported_table(
            channel_rows(input),
            include_previews=False,
            version_link_prefix=".",
            link_prefix=".",
            link_eol=False,
        )
        content = replace_section(template, "SECTION-RELEASE", lambda: table.render([POLICIES_LINK]))
        content = replace_section(content, "SECTION-MARKDOWNFILES", lambda: "\n".join(table.markdown_files))

        path = input.output_dir / "release-notes" / "README.md"
        write_text(path, content)
        return UpdateResult.success_result(self.name, files_written=[str(path)], metadata={"rows": table.rows})


class ReleasesIndexUpdater:
    """
    Writes ``release-notes/releases-index.json``.

    The published index seeds the document; each loaded channel's entry is
    replaced (or appended) from its newest manifest, then entries are written
    newest channel first.
    """

    name = "releases_index"
    scope = RUN_SCOPE

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope and bool(input.versions)

    def update(self, input: UpdaterInput) -> UpdateResult:
        index = input.reference_tree.release_index()
        if index is None:
            logger.info("No published releases-index.json; creating a new index")
            index = ReleaseIndex()

        for channel, version in newest_per_channel(input).items():
            index.upsert(CoreReleaseIndexEntry.from_manifest(version.manifest, input.reference.eol_date(channel)))

        path = input.output_dir / "release-notes" / "releases-index.json"
        write_json(path, index.to_dict())
        return UpdateResult.success_result(self.name, files_written=[str(path)], metadata={"entries": len(index.entries)})
