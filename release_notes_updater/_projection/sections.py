"""Markdown fragments substituted for ``SECTION-*`` placeholders."""

from typing import Iterable, List, Optional, Sequence, Set

from ..models import Component, CveReference, MsrcRecord, Package, Release
from ..versions import DEFAULT_CSHARP_VERSION, minimum_vs_version

SECURITY_ADVISORY_URL = (
    "https://github.com/dotnet/announcements/issues?q=is%3Aissue%20state%3Aopen%20%20Microsoft%20Security%20Advisory"
)

MSRC_INTRO = (
    "This release includes security and non-security fixes. Details on security fixes below can be found in the "
    f"[Microsoft Security Advisory]({SECURITY_ADVISORY_URL}):\n\n"
)
CVE_LIST_INTRO = (
    "### Security\n\n"
    "This release includes security fixes. Details on security fixes below can be found in the "
    f"[Microsoft Security Advisory]({SECURITY_ADVISORY_URL}):\n\n"
)
GENERIC_SECURITY_NOTICE = (
    "### Security\n\n"
    f"This release includes security fixes. Details can be found in the [Microsoft Security Advisory]({SECURITY_ADVISORY_URL})."
)


def added_sdk_list(latest_sdk: Optional[str], sdk_versions: Sequence[str]) -> str:
    """
    Bullet list of the SDKs shipped with a release, latest first.

    Every other SDK follows in manifest order. Empty when there are no SDKs.
    """
    if not sdk_versions:
        return ""
    ordered: List[str] = []
    if latest_sdk:
        ordered.append(latest_sdk)
    ordered.extend(v for v in sdk_versions if v != latest_sdk)
    return "\n" + "\n".join(f"* [{v}][{v}]" for v in ordered)


def sdk_definitions(
    latest_sdk: Optional[str],
    latest_runtime: Optional[str],
    sdk_versions: Sequence[str],
    referenced: Set[str],
) -> str:
    """
    Link definitions for SDK pages.

    The latest SDK is documented on the runtime page itself; every other SDK
    has its own ``<sdk>.md``. Only referenced names are emitted.
    """
    lines = []
    for version in sdk_versions:
        if version not in referenced:
            continue
        if version == latest_sdk:
            lines.append(f"[{version}]: {latest_runtime}.md")
        else:
            lines.append(f"[{version}]: {version}.md")
    return "\n".join(lines)


def component_definitions(
    label: str,
    version: Optional[str],
    component: Optional[Component],
    referenced: Optional[Set[str]],
) -> str:
    """
    Commented header plus ``[file]: url`` definitions for a component's files.

    Args:
        label: Name in the header comment ("Runtime", "ASP", "SDK" ...)
        version: Version shown in the header comment
        component: Component whose files are listed; None yields ""
        referenced: Names used in the document, or None to emit every file
    """
    if component is None:
        return ""
    lines = [f"[//]: # ( {label} {version or component.version})"]
    for asset in component.files:
        if referenced is None or asset.name in referenced:
            lines.append(f"[{asset.name}]: {asset.url}")
    return "\n".join(lines)


def packages_table(packages: Sequence[Package]) -> str:
    if not packages:
        return ""
    rows = [f"| {p.name} | {p.version} |" for p in packages]
    return "## Packages\n| Name | Version |\n| ---- | ------- |\n" + "\n".join(rows)


def merge_cve_references(manifest_cves: Iterable[CveReference], msrc_record: Optional[MsrcRecord]) -> List[CveReference]:
    """
    Combine manifest CVEs with MSRC advisory text, one entry per CVE id.

    Manifest order comes first. MSRC title and description override the
    manifest entry with the same id, and MSRC-only ids are appended.
    """
    merged: List[CveReference] = []
    by_id = {}
    for cve in manifest_cves:
        key = cve.cve_id or cve.cve_url
        if key in by_id:
            continue
        entry = CveReference(cve_id=cve.cve_id, cve_url=cve.cve_url, title=cve.title, description=cve.description)
        by_id[key] = entry
        merged.append(entry)

    if msrc_record is not None:
        for advisory in msrc_record.cves:
            existing = by_id.get(advisory.cve_id)
            if existing is not None:
                existing.title = advisory.cve_title or existing.title
                existing.description = advisory.cve_description or existing.description
                continue
            entry = CveReference(
                cve_id=advisory.cve_id,
                title=advisory.cve_title,
                description=advisory.cve_description,
            )
            by_id[advisory.cve_id] = entry
            merged.append(entry)
    return merged


def security_section(release: Release, msrc_record: Optional[MsrcRecord]) -> str:
    """
    Security notes of a runtime page.

    MSRC advisories take precedence over the bare CVE URLs from the manifest;
    without either a generic notice is used. Non-security releases get "".
    """
    if not release.security:
        return ""

    if msrc_record is not None and msrc_record.cves:
        blocks = []
        for cve in merge_cve_references(release.cve_list, msrc_record):
            heading = f"### Microsoft Security Advisory {cve.cve_id}"
            if cve.title:
                heading += f" | {cve.title}"
            body = cve.description or (f"[{cve.cve_url}]({cve.cve_url})" if cve.cve_url else "")
            blocks.append(f"{heading}\n\n{body}" if body else heading)
        return MSRC_INTRO + "\n\n".join(blocks)

    urls = [c.cve_url for c in release.cve_list if c.cve_url]
    if urls:
        return CVE_LIST_INTRO + "".join(f"* [{url}]({url})\n" for url in urls)

    return GENERIC_SECURITY_NOTICE


def release_vs_version(release: Release) -> str:
    """Minimum Visual Studio (major.minor) declared by the release runtime."""
    runtime_vs = release.runtime.vs_version if release.runtime else None
    return minimum_vs_version([runtime_vs])


def channel_min_vs_version(releases: Iterable[Release]) -> str:
    """Smallest Visual Studio version declared anywhere in the given releases."""
    fields = []
    for release in releases:
        for component in (release.runtime, release.sdk, *release.sdks, release.aspnetcore_runtime):
            if component is not None and component.vs_version:
                fields.append(component.vs_version)
    return minimum_vs_version(fields)


def csharp_version(release: Release, latest_sdk: Optional[str]) -> str:
    """
    Major C# language version shipped with the release.

    Prefers the SDK matching ``latest_sdk``, then ``release.sdk``, then the
    first SDK that declares one.
    """
    candidates: List[Optional[Component]] = []
    if latest_sdk:
        candidates.append(next((s for s in release.sdks if s.version == latest_sdk), None))
    candidates.append(release.sdk)
    candidates.extend(release.sdks)
    for sdk in candidates:
        if sdk is not None and sdk.csharp_version and sdk.csharp_version.strip():
            major = sdk.csharp_version.strip().split(".")[0]
            return major or DEFAULT_CSHARP_VERSION
    return DEFAULT_CSHARP_VERSION
