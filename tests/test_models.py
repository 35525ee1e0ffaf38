"""Tests for the manifest and reference document models."""

import unittest

from release_notes_updater.models import (
    Component,
    CoreRelease,
    CoreReleaseIndexEntry,
    CoreReleasesDocument,
    CveReference,
    MsrcRecord,
    Release,
    ReleaseIndex,
    ReleaseManifest,
    UnsupportedVersion,
)

from .factories import CVE_URL, manifest_data, release_data


class TestReleaseManifest(unittest.TestCase):
    def test_hyphenated_keys_map_to_fields(self):
        manifest = ReleaseManifest.from_dict(manifest_data())

        self.assertEqual(manifest.channel_version, "8.0")
        self.assertEqual(manifest.latest_release, "8.0.15")
        self.assertEqual(manifest.latest_sdk, "8.0.100")
        self.assertEqual(manifest.support_phase, "active")
        self.assertEqual(len(manifest.releases), 1)

        release = manifest.releases[0]
        self.assertEqual(release.release_date, "2025-04-08T00:00:00")
        self.assertTrue(release.security)
        self.assertEqual(release.runtime.vs_version, "17.8.21")
        self.assertEqual(release.sdk.csharp_version, "12.0")
        self.assertEqual(release.aspnetcore_runtime.version_aspnetcoremodule, ["18.0.25074.15"])
        self.assertEqual(len(release.windowsdesktop.files), 1)

    def test_missing_keys_do_not_fail(self):
        manifest = ReleaseManifest.from_dict({"channel-version": "9.0", "releases": [{"release-version": "9.0.4"}]})

        self.assertIsNone(manifest.latest_sdk)
        release = manifest.releases[0]
        self.assertIsNone(release.runtime)
        self.assertIsNone(release.sdk)
        self.assertEqual(release.sdks, [])
        self.assertEqual(release.cve_list, [])
        self.assertFalse(release.security)

    def test_security_flag_only_true_for_true(self):
        cases = ((True, True), ("True", True), ("false", False), ("no", False), (1, False), (None, False))
        for value, expected in cases:
            self.assertEqual(Release.from_dict({"security": value}).security, expected, value)
            self.assertEqual(CoreRelease.from_dict({"security": value}).security, expected, value)
            self.assertEqual(CoreReleaseIndexEntry.from_dict({"security": value}).security, expected, value)

    def test_unknown_keys_survive_serialization(self):
        data = manifest_data()
        data["releases"][0]["unexpected-field"] = {"kept": True}
        data["channel-notes"] = "keep me"

        out = ReleaseManifest.from_dict(data).to_dict()

        self.assertEqual(out["channel-notes"], "keep me")
        self.assertEqual(out["releases"][0]["unexpected-field"], {"kept": True})
        self.assertEqual(out["releases"][0]["release-version"], "8.0.15")

    def test_find_release_by_runtime(self):
        manifest = ReleaseManifest.from_dict(
            manifest_data(releases=[release_data("8.0.15"), release_data("8.0.14", sdks=("8.0.408",))])
        )

        self.assertEqual(manifest.find_release_by_runtime("8.0.14").release_version, "8.0.14")
        self.assertIsNone(manifest.find_release_by_runtime("8.0.13"))

    def test_release_for_falls_back_to_latest(self):
        manifest = ReleaseManifest.from_dict(manifest_data())
        self.assertEqual(manifest.release_for("8.0.99").release_version, "8.0.15")

    def test_release_for_empty_manifest(self):
        self.assertIsNone(ReleaseManifest.from_dict({"channel-version": "8.0"}).release_for("8.0.15"))


class TestRelease(unittest.TestCase):
    def test_sdk_versions_prefers_sdks_list(self):
        release = Release.from_dict(release_data(sdks=("8.0.100", "8.0.101")))
        self.assertEqual(release.sdk_versions(), ["8.0.100", "8.0.101"])

    def test_sdk_versions_falls_back_to_sdk(self):
        data = release_data(sdks=("8.0.100",))
        del data["sdks"]
        self.assertEqual(Release.from_dict(data).sdk_versions(), ["8.0.100"])

    def test_find_sdk(self):
        release = Release.from_dict(release_data(sdks=("8.0.100", "8.0.101")))
        self.assertEqual(release.find_sdk("8.0.101").version, "8.0.101")
        self.assertIsNone(release.find_sdk("7.0.100"))

    def test_components(self):
        release = Release.from_dict(release_data(sdks=("8.0.100",)))
        # runtime, sdk, one entry of sdks, aspnetcore, windowsdesktop
        self.assertEqual(len(release.components()), 5)

    def test_cve_id_derived_from_url(self):
        release = Release.from_dict(release_data(cve_urls=(CVE_URL,)))
        self.assertEqual(release.cve_list[0].cve_id, "CVE-2025-26646")

    def test_component_find_file(self):
        component = Component.from_dict({"version": "8.0.15", "files": [{"name": "a.zip", "url": "https://x/a.zip"}]})
        self.assertEqual(component.find_file("a.zip").url, "https://x/a.zip")
        self.assertIsNone(component.find_file("b.zip"))
        self.assertIsNone(Component.from_dict(None))

    def test_cve_reference_keeps_explicit_id(self):
        cve = CveReference.from_dict({"cve-id": "CVE-2024-1111", "cve-url": CVE_URL})
        self.assertEqual(cve.cve_id, "CVE-2024-1111")


class TestCoreReleasesDocument(unittest.TestCase):
    def _document(self):
        return CoreReleasesDocument.from_dict(
            {
                "channel-version": "8.0",
                "latest-release": "8.0.14",
                "releases": [
                    {"release-version": "8.0.14", "security": False, "cve-list": [], "custom": "kept"},
                    {"release-version": "8.0.13", "security": True, "cve-list": []},
                ],
            }
        )

    def test_upsert_prepends_new_release(self):
        document = self._document()
        replaced = document.upsert_release(CoreRelease(release_version="8.0.15"))

        self.assertFalse(replaced)
        self.assertEqual([r.release_version for r in document.releases], ["8.0.15", "8.0.14", "8.0.13"])

    def test_upsert_replaces_in_place_and_keeps_unknown_keys(self):
        document = self._document()
        replaced = document.upsert_release(CoreRelease(release_version="8.0.14", security=True))

        self.assertTrue(replaced)
        self.assertEqual(len(document.releases), 2)
        entry = document.to_dict()["releases"][0]
        self.assertTrue(entry["security"])
        self.assertEqual(entry["custom"], "kept")

    def test_from_release_copies_cves(self):
        release = Release.from_dict(release_data())
        core = CoreRelease.from_release(release)
        self.assertEqual(core.to_dict()["cve-list"], [{"cve-id": "CVE-2025-26646", "cve-url": CVE_URL}])

    def test_from_manifest_copies_header(self):
        manifest = ReleaseManifest.from_dict(manifest_data())
        document = CoreReleasesDocument.from_manifest(manifest)
        self.assertEqual(document.latest_runtime, "8.0.15")
        self.assertEqual(document.eol_date, "2026-11-10")
        self.assertEqual(document.releases, [])


class TestReleaseIndex(unittest.TestCase):
    def test_entry_from_manifest(self):
        manifest = ReleaseManifest.from_dict(manifest_data())
        entry = CoreReleaseIndexEntry.from_manifest(manifest)

        self.assertEqual(entry.product, ".NET")
        self.assertTrue(entry.security)
        data = entry.to_dict()
        self.assertEqual(
            data["releases.json"],
            "https://builds.dotnet.microsoft.com/dotnet/release-metadata/8.0/releases.json",
        )
        self.assertEqual(data["latest-sdk"], "8.0.100")

    def test_legacy_channel_product_and_eol_fallback(self):
        manifest = ReleaseManifest.from_dict(manifest_data(channel="3.1", eol_date=None))
        entry = CoreReleaseIndexEntry.from_manifest(manifest, eol_date="2022-12-13")

        self.assertEqual(entry.product, ".NET Core")
        self.assertEqual(entry.eol_date, "2022-12-13")

    def test_upsert_and_sorted_output(self):
        index = ReleaseIndex.from_dict(
            {"releases-index": [{"channel-version": "8.0", "latest-release": "8.0.14"}, {"channel-version": "9.0"}]}
        )
        index.upsert(CoreReleaseIndexEntry(channel_version="8.0", latest_release="8.0.15"))
        index.upsert(CoreReleaseIndexEntry(channel_version="10.0"))

        self.assertEqual(len(index.entries), 3)
        self.assertEqual(index.get("8.0").latest_release, "8.0.15")
        channels = [e["channel-version"] for e in index.to_dict()["releases-index"]]
        self.assertEqual(channels, ["10.0", "9.0", "8.0"])


class TestReferenceModels(unittest.TestCase):
    def test_msrc_record(self):
        record = MsrcRecord.from_dict(
            {
                "RuntimeId": "8.0.15",
                "Cves": [{"CveId": "CVE-2025-26646", "CveTitle": "Spoofing", "CveDescription": None}],
            }
        )
        self.assertEqual(record.runtime_id, "8.0.15")
        self.assertEqual(record.cves[0].cve_title, "Spoofing")
        self.assertEqual(record.cves[0].cve_description, "")

    def test_unsupported_version(self):
        entry = UnsupportedVersion.from_dict("7.0", {"latest-release": "7.0.20", "release-type": "sts"})
        self.assertEqual(entry.channel_version, "7.0")
        self.assertEqual(entry.latest_release, "7.0.20")
        self.assertIsNone(entry.latest_release_date)


if __name__ == "__main__":
    unittest.main()
