"""Typed release manifest and reference document models.

Manifest JSON uses hyphenated keys (``latest-sdk``); the dataclasses use the
snake_case equivalents. ``from_dict`` never fails on a missing key: absent
scalars become ``None`` and absent lists become empty. Keys the models do not
know about are kept in ``_extra`` so documents read from the reference
directory round-trip without losing data.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .versions import extract_cve_id, is_legacy_core_channel, version_sort_key

RELEASE_METADATA_BASE_URL = "https://builds.dotnet.microsoft.com/dotnet/release-metadata"


def _key(name: str) -> str:
    return name.replace("_", "-")


def _text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _list(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _flag(data: Dict[str, Any], key: str) -> bool:
    """A JSON boolean, or the string "true" in any case; everything else is False."""
    value = data.get(key)
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def _extra(data: Dict[str, Any], known: tuple) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def _put(result: Dict[str, Any], name: str, value: Any) -> None:
    """Add ``value`` under the hyphenated key unless it is None."""
    if value is not None:
        result[_key(name)] = value


@dataclass
class FileAsset:
    """A downloadable file attached to a component."""

    name: str
    url: str = ""
    rid: Optional[str] = None
    hash: Optional[str] = None
    akams: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileAsset":
        return cls(
            name=_text(data, "name") or "",
            url=_text(data, "url") or "",
            rid=_text(data, "rid"),
            hash=_text(data, "hash"),
            akams=_text(data, "akams"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name}
        _put(result, "rid", self.rid)
        result["url"] = self.url
        _put(result, "hash", self.hash)
        _put(result, "akams", self.akams)
        return result


_COMPONENT_KEYS = (
    "version",
    "version-display",
    "vs-version",
    "vs-mac-version",
    "vs-support",
    "vs-mac-support",
    "runtime-version",
    "csharp-version",
    "fsharp-version",
    "vb-version",
    "version-aspnetcoremodule",
    "files",
)


@dataclass
class Component:
    """
    A shipped component of a release: runtime, SDK, ASP.NET Core or Windows Desktop.

    SDK-only fields (``runtime_version``, ``csharp_version`` ...) and the
    ASP.NET Core module versions are ``None`` on the other kinds.
    """

    version: str = ""
    version_display: Optional[str] = None
    vs_version: Optional[str] = None
    vs_mac_version: Optional[str] = None
    vs_support: Optional[str] = None
    vs_mac_support: Optional[str] = None
    runtime_version: Optional[str] = None
    csharp_version: Optional[str] = None
    fsharp_version: Optional[str] = None
    vb_version: Optional[str] = None
    version_aspnetcoremodule: Optional[List[str]] = None
    files: List[FileAsset] = field(default_factory=list)
    _extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Component"]:
        if not isinstance(data, dict):
            return None
        module_versions = data.get("version-aspnetcoremodule")
        if isinstance(module_versions, str):
            module_versions = [module_versions]
        return cls(
            version=_text(data, "version") or "",
            version_display=_text(data, "version-display"),
            vs_version=_text(data, "vs-version"),
            vs_mac_version=_text(data, "vs-mac-version"),
            vs_support=_text(data, "vs-support"),
            vs_mac_support=_text(data, "vs-mac-support"),
            runtime_version=_text(data, "runtime-version"),
            csharp_version=_text(data, "csharp-version"),
            fsharp_version=_text(data, "fsharp-version"),
            vb_version=_text(data, "vb-version"),
            version_aspnetcoremodule=module_versions,
            files=[FileAsset.from_dict(f) for f in _list(data, "files") if isinstance(f, dict)],
            _extra=_extra(data, _COMPONENT_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"version": self.version}
        for name in (
            "version_display",
            "runtime_version",
            "vs_version",
            "vs_mac_version",
            "vs_support",
            "vs_mac_support",
            "csharp_version",
            "fsharp_version",
            "vb_version",
            "version_aspnetcoremodule",
        ):
            _put(result, name, getattr(self, name))
        result.update(self._extra)
        result["files"] = [f.to_dict() for f in self.files]
        return result

    def find_file(self, name: str) -> Optional[FileAsset]:
        """Return the first file with the given name, if any."""
        for asset in self.files:
            if asset.name == name:
                return asset
        return None


@dataclass
class Package:
    name: str
    version: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Package":
        return cls(name=_text(data, "name") or "", version=_text(data, "version") or "")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "version": self.version}


@dataclass
class CveReference:
    """
    A CVE attached to a release.

    Manifests usually carry only ``cve-url``; the id is then derived from the
    URL. Title and description come from MSRC data when it is available.
    """

    cve_id: str = ""
    cve_url: str = ""
    title: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CveReference":
        url = _text(data, "cve-url") or ""
        return cls(cve_id=_text(data, "cve-id") or extract_cve_id(url), cve_url=url)

    def to_dict(self) -> Dict[str, Any]:
        return {"cve-id": self.cve_id, "cve-url": self.cve_url}


_RELEASE_KEYS = (
    "release-date",
    "release-version",
    "security",
    "cve-list",
    "release-notes",
    "runtime",
    "sdk",
    "sdks",
    "aspnetcore-runtime",
    "windowsdesktop",
    "packages",
)


@dataclass
class Release:
    """One patch release inside a channel manifest."""

    release_version: str = ""
    release_date: Optional[str] = None
    security: bool = False
    cve_list: List[CveReference] = field(default_factory=list)
    release_notes: Optional[str] = None
    runtime: Optional[Component] = None
    sdk: Optional[Component] = None
    sdks: List[Component] = field(default_factory=list)
    aspnetcore_runtime: Optional[Component] = None
    windowsdesktop: Optional[Component] = None
    packages: List[Package] = field(default_factory=list)
    _extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Release":
        return cls(
            release_version=_text(data, "release-version") or "",
            release_date=_text(data, "release-date"),
            security=_flag(data, "security"),
            cve_list=[CveReference.from_dict(c) for c in _list(data, "cve-list") if isinstance(c, dict)],
            release_notes=_text(data, "release-notes"),
            runtime=Component.from_dict(data.get("runtime")),
            sdk=Component.from_dict(data.get("sdk")),
            sdks=[s for s in (Component.from_dict(d) for d in _list(data, "sdks")) if s is not None],
            aspnetcore_runtime=Component.from_dict(data.get("aspnetcore-runtime")),
            windowsdesktop=Component.from_dict(data.get("windowsdesktop")),
            packages=[Package.from_dict(p) for p in _list(data, "packages") if isinstance(p, dict)],
            _extra=_extra(data, _RELEASE_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        _put(result, "release_date", self.release_date)
        result["release-version"] = self.release_version
        result["security"] = self.security
        result["cve-list"] = [c.to_dict() for c in self.cve_list]
        _put(result, "release_notes", self.release_notes)
        for name in ("runtime", "sdk"):
            component = getattr(self, name)
            if component is not None:
                result[name] = component.to_dict()
        if self.sdks:
            result["sdks"] = [s.to_dict() for s in self.sdks]
        for name in ("aspnetcore_runtime", "windowsdesktop"):
            component = getattr(self, name)
            if component is not None:
                result[_key(name)] = component.to_dict()
        if self.packages:
            result["packages"] = [p.to_dict() for p in self.packages]
        result.update(self._extra)
        return result

    @property
    def runtime_version(self) -> Optional[str]:
        return self.runtime.version if self.runtime else None

    def sdk_versions(self) -> List[str]:
        """SDK versions in manifest order, falling back to ``sdk`` when ``sdks`` is empty."""
        if self.sdks:
            return [s.version for s in self.sdks if s.version]
        if self.sdk and self.sdk.version:
            return [self.sdk.version]
        return []

    def find_sdk(self, version: str) -> Optional[Component]:
        for sdk in self.sdks:
            if sdk.version == version:
                return sdk
        if self.sdk and self.sdk.version == version:
            return self.sdk
        return None

    def components(self) -> List[Component]:
        """Every component of the release (runtime, SDKs, ASP.NET Core, Windows Desktop)."""
        items = [self.runtime, self.sdk, *self.sdks, self.aspnetcore_runtime, self.windowsdesktop]
        return [c for c in items if c is not None]


_MANIFEST_KEYS = (
    "channel-version",
    "latest-release",
    "latest-release-date",
    "latest-runtime",
    "latest-sdk",
    "support-phase",
    "release-type",
    "lifecycle-policy",
    "eol-date",
    "releases",
)


@dataclass
class ReleaseManifest:
    """A channel release manifest as published by the build pipeline."""

    channel_version: str = ""
    latest_release: Optional[str] = None
    latest_release_date: Optional[str] = None
    latest_runtime: Optional[str] = None
    latest_sdk: Optional[str] = None
    support_phase: Optional[str] = None
    release_type: Optional[str] = None
    lifecycle_policy: Optional[str] = None
    eol_date: Optional[str] = None
    releases: List[Release] = field(default_factory=list)
    _extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReleaseManifest":
        return cls(
            channel_version=_text(data, "channel-version") or "",
            latest_release=_text(data, "latest-release"),
            latest_release_date=_text(data, "latest-release-date"),
            latest_runtime=_text(data, "latest-runtime"),
            latest_sdk=_text(data, "latest-sdk"),
            support_phase=_text(data, "support-phase"),
            release_type=_text(data, "release-type"),
            lifecycle_policy=_text(data, "lifecycle-policy"),
            eol_date=_text(data, "eol-date"),
            releases=[Release.from_dict(r) for r in _list(data, "releases") if isinstance(r, dict)],
            _extra=_extra(data, _MANIFEST_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"channel-version": self.channel_version}
        for name in (
            "latest_release",
            "latest_release_date",
            "latest_runtime",
            "latest_sdk",
            "support_phase",
            "release_type",
            "eol_date",
            "lifecycle_policy",
        ):
            _put(result, name, getattr(self, name))
        result.update(self._extra)
        result["releases"] = [r.to_dict() for r in self.releases]
        return result

    def find_release_by_runtime(self, runtime_id: str) -> Optional[Release]:
        for release in self.releases:
            if release.runtime_version == runtime_id:
                return release
        return None

    def find_release_by_version(self, version: str) -> Optional[Release]:
        for release in self.releases:
            if release.release_version == version:
                return release
        return None

    def latest_release_entry(self) -> Optional[Release]:
        """The release named by ``latest-release``, else the first listed release."""
        if self.latest_release:
            release = self.find_release_by_version(self.latest_release)
            if release is not None:
                return release
        return self.releases[0] if self.releases else None

    def release_for(self, runtime_id: str) -> Optional[Release]:
        """The release shipping ``runtime_id``, else the latest release."""
        return self.find_release_by_runtime(runtime_id) or self.latest_release_entry()


@dataclass
class MsrcCve:
    cve_id: str
    cve_title: str = ""
    cve_description: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MsrcCve":
        return cls(
            cve_id=str(data.get("CveId", "")),
            cve_title=str(data.get("CveTitle", "") or ""),
            cve_description=str(data.get("CveDescription", "") or ""),
        )


@dataclass
class MsrcRecord:
    """Security advisory text published by MSRC for one runtime version."""

    runtime_id: str
    cves: List[MsrcCve] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MsrcRecord":
        return cls(
            runtime_id=str(data.get("RuntimeId", "")),
            cves=[MsrcCve.from_dict(c) for c in _list(data, "Cves") if isinstance(c, dict)],
        )


@dataclass
class UnsupportedVersion:
    """Frozen release data for a channel that is out of support."""

    channel_version: str
    latest_release: Optional[str] = None
    latest_release_date: Optional[str] = None
    release_type: Optional[str] = None

    @classmethod
    def from_dict(cls, channel: str, data: Dict[str, Any]) -> "UnsupportedVersion":
        return cls(
            channel_version=channel,
            latest_release=_text(data, "latest-release"),
            latest_release_date=_text(data, "latest-release-date"),
            release_type=_text(data, "release-type"),
        )


@dataclass
class CoreCveItem:
    cve_id: str
    cve_url: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoreCveItem":
        url = _text(data, "cve-url") or ""
        return cls(cve_id=_text(data, "cve-id") or extract_cve_id(url), cve_url=url)

    def to_dict(self) -> Dict[str, Any]:
        return {"cve-id": self.cve_id, "cve-url": self.cve_url}


_CORE_RELEASE_KEYS = ("release-date", "release-version", "security", "cve-list", "release-notes")


@dataclass
class CoreRelease:
    """A release entry of a published per-channel ``releases.json``."""

    release_version: str
    release_date: Optional[str] = None
    security: bool = False
    cve_list: List[CoreCveItem] = field(default_factory=list)
    release_notes: Optional[str] = None
    _extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoreRelease":
        return cls(
            release_version=_text(data, "release-version") or "",
            release_date=_text(data, "release-date"),
            security=_flag(data, "security"),
            cve_list=[CoreCveItem.from_dict(c) for c in _list(data, "cve-list") if isinstance(c, dict)],
            release_notes=_text(data, "release-notes"),
            _extra=_extra(data, _CORE_RELEASE_KEYS),
        )

    @classmethod
    def from_release(cls, release: Release) -> "CoreRelease":
        return cls(
            release_version=release.release_version,
            release_date=release.release_date,
            security=release.security,
            cve_list=[
                CoreCveItem(cve_id=c.cve_id or extract_cve_id(c.cve_url), cve_url=c.cve_url) for c in release.cve_list
            ],
            release_notes=release.release_notes,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        _put(result, "release_date", self.release_date)
        result["release-version"] = self.release_version
        result["security"] = self.security
        result["cve-list"] = [c.to_dict() for c in self.cve_list]
        _put(result, "release_notes", self.release_notes)
        result.update(self._extra)
        return result


@dataclass
class CoreReleasesDocument:
    """The per-channel ``releases.json`` published in the documentation tree."""

    channel_version: str
    latest_release: Optional[str] = None
    latest_release_date: Optional[str] = None
    latest_runtime: Optional[str] = None
    latest_sdk: Optional[str] = None
    support_phase: Optional[str] = None
    release_type: Optional[str] = None
    eol_date: Optional[str] = None
    lifecycle_policy: Optional[str] = None
    releases: List[CoreRelease] = field(default_factory=list)
    _extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoreReleasesDocument":
        return cls(
            channel_version=_text(data, "channel-version") or "",
            latest_release=_text(data, "latest-release"),
            latest_release_date=_text(data, "latest-release-date"),
            latest_runtime=_text(data, "latest-runtime"),
            latest_sdk=_text(data, "latest-sdk"),
            support_phase=_text(data, "support-phase"),
            release_type=_text(data, "release-type"),
            eol_date=_text(data, "eol-date"),
            lifecycle_policy=_text(data, "lifecycle-policy"),
            releases=[CoreRelease.from_dict(r) for r in _list(data, "releases") if isinstance(r, dict)],
            _extra=_extra(data, _MANIFEST_KEYS),
        )

    @classmethod
    def from_manifest(cls, manifest: ReleaseManifest) -> "CoreReleasesDocument":
        return cls(
            channel_version=manifest.channel_version,
            latest_release=manifest.latest_release,
            latest_release_date=manifest.latest_release_date,
            latest_runtime=manifest.latest_runtime,
            latest_sdk=manifest.latest_sdk,
            support_phase=manifest.support_phase,
            release_type=manifest.release_type,
            eol_date=manifest.eol_date,
            lifecycle_policy=manifest.lifecycle_policy,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"channel-version": self.channel_version}
        for name in (
            "latest_release",
            "latest_release_date",
            "latest_runtime",
            "latest_sdk",
            "support_phase",
            "release_type",
            "eol_date",
            "lifecycle_policy",
        ):
            _put(result, name, getattr(self, name))
        result.update(self._extra)
        result["releases"] = [r.to_dict() for r in self.releases]
        return result

    def upsert_release(self, release: CoreRelease) -> bool:
        """
        Replace the release with the same version, or insert it first.

        Returns:
            True if an existing entry was replaced
        """
        for index, existing in enumerate(self.releases):
            if existing.release_version == release.release_version:
                release._extra = {**existing._extra, **release._extra}
                self.releases[index] = release
                return True
        self.releases.insert(0, release)
        return False


@dataclass
class CoreReleaseIndexEntry:
    """One channel row of ``releases-index.json``."""

    channel_version: str
    latest_release: Optional[str] = None
    latest_release_date: Optional[str] = None
    security: bool = False
    latest_runtime: Optional[str] = None
    latest_sdk: Optional[str] = None
    product: str = ".NET"
    support_phase: Optional[str] = None
    eol_date: Optional[str] = None
    release_type: Optional[str] = None

    @property
    def releases_json(self) -> str:
        return f"{RELEASE_METADATA_BASE_URL}/{self.channel_version}/releases.json"

    @property
    def supported_os_json(self) -> str:
        return f"{RELEASE_METADATA_BASE_URL}/{self.channel_version}/supported-os.json"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoreReleaseIndexEntry":
        return cls(
            channel_version=_text(data, "channel-version") or "",
            latest_release=_text(data, "latest-release"),
            latest_release_date=_text(data, "latest-release-date"),
            security=_flag(data, "security"),
            latest_runtime=_text(data, "latest-runtime"),
            latest_sdk=_text(data, "latest-sdk"),
            product=_text(data, "product") or ".NET",
            support_phase=_text(data, "support-phase"),
            eol_date=_text(data, "eol-date"),
            release_type=_text(data, "release-type"),
        )

    @classmethod
    def from_manifest(cls, manifest: ReleaseManifest, eol_date: Optional[str] = None) -> "CoreReleaseIndexEntry":
        latest = manifest.latest_release_entry()
        channel = manifest.channel_version
        product = ".NET Core" if is_legacy_core_channel(channel) else ".NET"
        return cls(
            channel_version=channel,
            latest_release=manifest.latest_release,
            latest_release_date=manifest.latest_release_date,
            security=latest.security if latest else False,
            latest_runtime=manifest.latest_runtime,
            latest_sdk=manifest.latest_sdk,
            product=product,
            support_phase=manifest.support_phase,
            eol_date=manifest.eol_date or eol_date,
            release_type=manifest.release_type,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel-version": self.channel_version,
            "latest-release": self.latest_release,
            "latest-release-date": self.latest_release_date,
            "security": self.security,
            "latest-runtime": self.latest_runtime,
            "latest-sdk": self.latest_sdk,
            "product": self.product,
            "support-phase": self.support_phase,
            "eol-date": self.eol_date,
            "release-type": self.release_type,
            "releases.json": self.releases_json,
            "supported-os.json": self.supported_os_json,
        }


@dataclass
class ReleaseIndex:
    """Ordered collection of index entries keyed by channel version."""

    entries: List[CoreReleaseIndexEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReleaseIndex":
        return cls(
            entries=[CoreReleaseIndexEntry.from_dict(e) for e in _list(data, "releases-index") if isinstance(e, dict)]
        )

    def get(self, channel: str) -> Optional[CoreReleaseIndexEntry]:
        for entry in self.entries:
            if entry.channel_version == channel:
                return entry
        return None

    def upsert(self, entry: CoreReleaseIndexEntry) -> None:
        """Replace the entry for the same channel in place, or append it."""
        for index, existing in enumerate(self.entries):
            if existing.channel_version == entry.channel_version:
                self.entries[index] = entry
                return
        self.entries.append(entry)

    def sorted_entries(self) -> List[CoreReleaseIndexEntry]:
        return sorted(self.entries, key=lambda e: version_sort_key(e.channel_version), reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        return {"releases-index": [e.to_dict() for e in self.sorted_entries()]}
