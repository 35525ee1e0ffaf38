"""Runtime and SDK release pages (``<runtime>/<runtime>.md`` and ``<runtime>/<sdk>.md``)."""

from typing import Dict, List

from ..._projection import (
    DocumentProjector,
    added_sdk_list,
    channel_min_vs_version,
    component_definitions,
    csharp_version,
    packages_table,
    release_vs_version,
    sdk_definitions,
    security_section,
)
from ...logging_config import logger
from ...versions import format_blog_slug_date, format_header_date, format_prose_date
from ..files import load_template, write_text
from ..protocol import VERSION_SCOPE, UpdaterInput
from ..result import UpdateResult

RUNTIME_TEMPLATE = "runtime-template.md"
SDK_TEMPLATE = "sdk-template.md"


class RuntimeFileUpdater:
    """
    Writes the release notes page of a runtime version.

    Placeholders: {RUNTIME-VERSION} {LATEST-SDK} {ID-VERSION} {HEADER-DATE}
    {BLOGPOST-DATE} {BLOG-DATE} {VS-VERSION} {MIN-VS-VERSION} {CSHARPSDK-VERSION}.

    Sections: SECTION-ADDEDSDK, SECTION-PACKAGES and SECTION-MSRC are filled
    first; SECTION-SDKS, SECTION-RUNTIME, SECTION-WINDOWSDESKTOP, SECTION-ASP
    and SECTION-LATESTSDK then emit only the link definitions the page uses.
    """

    name = "runtime_file"
    scope = VERSION_SCOPE

    def __init__(self, projector: DocumentProjector = None) -> None:
        self._projector = projector or DocumentProjector()

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope

    def update(self, input: UpdaterInput) -> UpdateResult:
        version = input.version
        manifest = version.manifest
        release = version.release
        if release is None:
            return UpdateResult.skipped_result(self.name, f"No releases in manifest for {version.runtime_id}")
        if release.runtime_version != version.runtime_id:
            logger.warning(
                f"No release with runtime {version.runtime_id} in manifest; using {release.release_version}"
            )

        template = load_template(input.template_dir, RUNTIME_TEMPLATE)
        if template is None:
            return UpdateResult.skipped_result(self.name, f"Template {RUNTIME_TEMPLATE} not found")

        runtime_version = release.runtime_version or manifest.latest_runtime or version.runtime_id
        latest_sdk = version.latest_sdk
        release_date = release.release_date or manifest.latest_release_date
        sdk_versions = release.sdk_versions()
        msrc = input.reference.msrc_for(release.runtime_version or version.runtime_id)

        values: Dict[str, str] = {
            "RUNTIME-VERSION": runtime_version,
            "LATEST-SDK": latest_sdk or "",
            "ID-VERSION": version.channel,
            "HEADER-DATE": format_header_date(release_date),
            "BLOGPOST-DATE": format_blog_slug_date(release_date),
            "BLOG-DATE": format_prose_date(release_date),
            "VS-VERSION": release_vs_version(release),
            "MIN-VS-VERSION": channel_min_vs_version(manifest.releases),
            "CSHARPSDK-VERSION": csharp_version(release, latest_sdk),
        }
        content = self._projector.project(
            template,
            values=values,
            usage_sections={
                "SECTION-ADDEDSDK": lambda: added_sdk_list(latest_sdk, sdk_versions),
                "SECTION-PACKAGES": lambda: packages_table(release.packages),
                "SECTION-MSRC": lambda: security_section(release, msrc),
            },
            definition_sections={
                "SECTION-SDKS": lambda refs: sdk_definitions(latest_sdk, runtime_version, sdk_versions, refs),
                "SECTION-RUNTIME": lambda refs: component_definitions(
                    "Runtime", runtime_version, release.runtime, refs
                ),
                "SECTION-WINDOWSDESKTOP": lambda refs: component_definitions(
                    "WindowsDesktop", runtime_version, release.windowsdesktop, refs
                ),
                "SECTION-ASP": lambda refs: component_definitions(
                    "ASP", runtime_version, release.aspnetcore_runtime, refs
                ),
                "SECTION-LATESTSDK": lambda refs: component_definitions("SDK", latest_sdk, release.sdk, refs),
            },
        )

        path = input.runtime_dir(version.channel, version.runtime_id) / f"{version.runtime_id}.md"
        write_text(path, content)
        logger.info(f"Runtime release notes written to {path}")
        return UpdateResult.success_result(self.name, files_written=[str(path)])


class SdkFilesUpdater:
    """
    Writes one page per additional SDK of a release.

    The latest SDK is described on the runtime page; every other SDK listed
    in ``sdks`` gets ``<runtime>/<sdk>.md`` from the SDK template.
    """

    name = "sdk_files"
    scope = VERSION_SCOPE

    def __init__(self, projector: DocumentProjector = None) -> None:
        self._projector = projector or DocumentProjector()

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope

    def update(self, input: UpdaterInput) -> UpdateResult:
        version = input.version
        manifest = version.manifest
        release = version.release
        if release is None:
            return UpdateResult.skipped_result(self.name, f"No releases in manifest for {version.runtime_id}")

        latest_sdk = version.latest_sdk
        extra_sdks = [v for v in release.sdk_versions() if v != latest_sdk]
        if not extra_sdks:
            return UpdateResult.skipped_result(self.name, "Release ships no additional SDKs")

        template = load_template(input.template_dir, SDK_TEMPLATE)
        if template is None:
            return UpdateResult.skipped_result(self.name, f"Template {SDK_TEMPLATE} not found")

        runtime_version = release.runtime_version or manifest.latest_runtime or version.runtime_id
        release_date = release.release_date or manifest.latest_release_date
        written: List[str] = []

        for sdk_version in extra_sdks:
            sdk = release.find_sdk(sdk_version)
            content = self._projector.project(
                template,
                values={
                    "RUNTIME-VERSION": runtime_version,
                    "LATEST-SDK": latest_sdk or "",
                    "ID-VERSION": version.channel,
                    "SDK-VERSION": sdk_version,
                    "HEADER-DATE": format_header_date(release_date),
                },
                definition_sections={
                    "SECTION-RUNTIME": lambda refs: component_definitions(
                        "Runtime", runtime_version, release.runtime, refs
                    ),
                    "SECTION-WINDOWSDESKTOP": lambda refs: component_definitions(
                        "WindowsDesktop", runtime_version, release.windowsdesktop, refs
                    ),
                    "SECTION-ASP": lambda refs: component_definitions(
                        "ASP", runtime_version, release.aspnetcore_runtime, refs
                    ),
                    "SECTION-VERSIONSDK": lambda refs, sdk=sdk, v=sdk_version: component_definitions(
                        "SDK", v, sdk, refs
                    ),
                },
            )
            path = input.runtime_dir(version.channel, version.runtime_id) / f"{sdk_version}.md"
            write_text(path, content)
            written.append(str(path))

        logger.info(f"Wrote {len(written)} SDK page(s) for runtime {version.runtime_id}")
        return UpdateResult.success_result(self.name, files_written=written)
