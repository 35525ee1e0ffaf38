"""Tests for template projection, markdown fragments and link pruning."""

import re
import unittest

from release_notes_updater._projection import (
    DocumentProjector,
    added_sdk_list,
    channel_min_vs_version,
    component_definitions,
    csharp_version,
    find_referenced_links,
    merge_cve_references,
    packages_table,
    release_vs_version,
    replace_scalars,
    replace_section,
    sdk_definitions,
    security_section,
)
from release_notes_updater._projection.sections import CVE_LIST_INTRO, GENERIC_SECURITY_NOTICE, MSRC_INTRO
from release_notes_updater.models import CveReference, MsrcCve, MsrcRecord, Package, Release

from .factories import CVE_URL, release_data

DEFINITION = re.compile(r"^\[([^\]]+)\]: ", re.MULTILINE)


def defined_names(text):
    return {name for name in DEFINITION.findall(text) if name != "//"}


class TestFindReferencedLinks(unittest.TestCase):
    def test_full_reference(self):
        self.assertEqual(find_referenced_links("[x64][dotnet-sdk-win-x64.exe]"), {"dotnet-sdk-win-x64.exe"})

    def test_collapsed_and_bare_references(self):
        self.assertEqual(find_referenced_links("* [8.0.100][]\nsee [policies]"), {"8.0.100", "policies"})

    def test_inline_links_and_definitions_are_not_usages(self):
        text = "[docs](https://learn.microsoft.com)\n\n[8.0.100]: 8.0.15.md\n"
        self.assertEqual(find_referenced_links(text), set())

    def test_multiple_usages_in_a_table_row(self):
        row = "| Windows | [x86][dotnet-sdk-win-x86.exe] \\| [x64][dotnet-sdk-win-x64.exe] |"
        self.assertEqual(find_referenced_links(row), {"dotnet-sdk-win-x86.exe", "dotnet-sdk-win-x64.exe"})


class TestReplacement(unittest.TestCase):
    def test_replace_scalars_every_occurrence(self):
        content = replace_scalars("{A} and {A} but {B}", {"A": "1"})
        self.assertEqual(content, "1 and 1 but {B}")

    def test_replace_scalars_none_becomes_empty(self):
        self.assertEqual(replace_scalars("[{A}]", {"A": None}), "[]")

    def test_section_token_boundaries(self):
        content = replace_section("SECTION-SDKS\nSECTION-SDKSEXTRA\n", "SECTION-SDKS", lambda: "defs")
        self.assertEqual(content, "defs\nSECTION-SDKSEXTRA\n")

    def test_builder_not_called_without_token(self):
        def fail():
            raise AssertionError("builder must not run")

        self.assertEqual(replace_section("no tokens", "SECTION-ASP", fail), "no tokens")


class TestSdkFragments(unittest.TestCase):
    def test_added_sdk_list_latest_first(self):
        self.assertEqual(
            added_sdk_list("8.0.100", ["8.0.100", "8.0.101"]),
            "\n* [8.0.100][8.0.100]\n* [8.0.101][8.0.101]",
        )

    def test_added_sdk_list_moves_latest_to_top(self):
        fragment = added_sdk_list("8.0.200", ["8.0.100", "8.0.200"])
        self.assertEqual(fragment.strip().splitlines(), ["* [8.0.200][8.0.200]", "* [8.0.100][8.0.100]"])

    def test_added_sdk_list_empty(self):
        self.assertEqual(added_sdk_list("8.0.100", []), "")

    def test_sdk_definitions(self):
        defs = sdk_definitions("8.0.100", "8.0.15", ["8.0.100", "8.0.101"], {"8.0.100", "8.0.101"})
        self.assertEqual(defs, "[8.0.100]: 8.0.15.md\n[8.0.101]: 8.0.101.md")

    def test_sdk_definitions_pruned(self):
        defs = sdk_definitions("8.0.100", "8.0.15", ["8.0.100", "8.0.101"], {"8.0.101"})
        self.assertEqual(defs, "[8.0.101]: 8.0.101.md")


class TestComponentFragments(unittest.TestCase):
    def setUp(self):
        self.release = Release.from_dict(release_data())

    def test_component_definitions_filtered(self):
        defs = component_definitions(
            "Runtime", "8.0.15", self.release.runtime, {"dotnet-runtime-win-x64.exe", "unrelated"}
        )
        lines = defs.splitlines()
        self.assertEqual(lines[0], "[//]: # ( Runtime 8.0.15)")
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[1].startswith("[dotnet-runtime-win-x64.exe]: https://"))

    def test_component_definitions_unfiltered(self):
        defs = component_definitions("ASP", None, self.release.aspnetcore_runtime, None)
        self.assertEqual(len(defs.splitlines()), 3)
        self.assertIn("( ASP 8.0.15)", defs)

    def test_missing_component(self):
        self.assertEqual(component_definitions("WindowsDesktop", "8.0.15", None, set()), "")

    def test_packages_table(self):
        table = packages_table([Package("Microsoft.NETCore.App.Ref", "8.0.15")])
        self.assertIn("| Microsoft.NETCore.App.Ref | 8.0.15 |", table)
        self.assertEqual(packages_table([]), "")


class TestSecurity(unittest.TestCase):
    def test_merge_cve_references_union_with_msrc_text(self):
        manifest_cves = [
            CveReference(cve_id="CVE-2025-0001", cve_url="https://example.test/CVE-2025-0001"),
            CveReference(cve_id="CVE-2025-0002", cve_url="https://example.test/CVE-2025-0002"),
        ]
        msrc = MsrcRecord(
            "8.0.15",
            [
                MsrcCve("CVE-2025-0002", "B title", "B description"),
                MsrcCve("CVE-2025-0003", "C title", "C description"),
            ],
        )

        merged = merge_cve_references(manifest_cves, msrc)

        self.assertEqual([c.cve_id for c in merged], ["CVE-2025-0001", "CVE-2025-0002", "CVE-2025-0003"])
        self.assertEqual(merged[1].title, "B title")
        self.assertEqual(merged[1].cve_url, "https://example.test/CVE-2025-0002")
        self.assertIsNone(merged[0].title)

    def test_merge_drops_duplicates_and_does_not_mutate_input(self):
        cve = CveReference(cve_id="CVE-2025-0001")
        msrc = MsrcRecord("8.0.15", [MsrcCve("CVE-2025-0001", "T")])
        merged = merge_cve_references([cve, CveReference(cve_id="CVE-2025-0001")], msrc)

        self.assertEqual(len(merged), 1)
        self.assertIsNone(cve.title)

    def test_non_security_release(self):
        release = Release.from_dict(release_data(security=False, cve_urls=()))
        self.assertEqual(security_section(release, None), "")

    def test_msrc_advisories(self):
        release = Release.from_dict(release_data())
        msrc = MsrcRecord("8.0.15", [MsrcCve("CVE-2025-26646", ".NET Spoofing Vulnerability", "Details here.")])

        section = security_section(release, msrc)

        self.assertTrue(section.startswith(MSRC_INTRO))
        self.assertIn("non-security", section)
        heading = "### Microsoft Security Advisory CVE-2025-26646 | .NET Spoofing Vulnerability"
        self.assertIn(f"{heading}\n\nDetails here.", section)

    def test_cve_urls_without_msrc(self):
        release = Release.from_dict(release_data())

        section = security_section(release, None)

        self.assertTrue(section.startswith(CVE_LIST_INTRO))
        self.assertIn(f"* [{CVE_URL}]({CVE_URL})", section)

    def test_generic_notice(self):
        release = Release.from_dict(release_data(cve_urls=()))
        self.assertEqual(security_section(release, None), GENERIC_SECURITY_NOTICE)


class TestDerivedValues(unittest.TestCase):
    def test_release_vs_version(self):
        release = Release.from_dict(release_data(runtime_vs_version="17.8.21"))
        self.assertEqual(release_vs_version(release), "17.8")

    def test_channel_min_vs_version(self):
        releases = [
            Release.from_dict(release_data()),
            Release.from_dict(release_data("8.0.14", runtime_vs_version="17.10.0")),
        ]
        # SDK entries declare "17.6.5,17.9.0"
        self.assertEqual(channel_min_vs_version(releases), "17.6")

    def test_csharp_version_major(self):
        release = Release.from_dict(release_data())
        self.assertEqual(csharp_version(release, "8.0.100"), "12")

    def test_csharp_version_default(self):
        release = Release.from_dict(release_data(sdks=()))
        self.assertEqual(csharp_version(release, None), "12")


class TestDocumentProjector(unittest.TestCase):
    TEMPLATE = (
        "# .NET {RUNTIME-VERSION}\n\n"
        "| [x64][dotnet-runtime-win-x64.exe] | [SDK][dotnet-sdk-win-x64.exe] |\n\n"
        "SDKs:\nSECTION-ADDEDSDK\n\n"
        "SECTION-SDKS\n\nSECTION-RUNTIME\n\nSECTION-LATESTSDK\n"
    )

    def _project(self, template, release):
        sdk_versions = release.sdk_versions()
        return DocumentProjector().project(
            template,
            values={"RUNTIME-VERSION": "8.0.15"},
            usage_sections={"SECTION-ADDEDSDK": lambda: added_sdk_list("8.0.100", sdk_versions)},
            definition_sections={
                "SECTION-SDKS": lambda refs: sdk_definitions("8.0.100", "8.0.15", sdk_versions, refs),
                "SECTION-RUNTIME": lambda refs: component_definitions("Runtime", "8.0.15", release.runtime, refs),
                "SECTION-LATESTSDK": lambda refs: component_definitions("SDK", "8.0.100", release.sdk, refs),
            },
        )

    def test_only_used_definitions_are_emitted(self):
        release = Release.from_dict(release_data())

        content = self._project(self.TEMPLATE, release)

        self.assertNotIn("SECTION-", content)
        self.assertIn("[8.0.100]: 8.0.15.md", content)
        self.assertIn("[8.0.101]: 8.0.101.md", content)
        self.assertIn("[dotnet-runtime-win-x64.exe]: ", content)
        self.assertNotIn("[dotnet-runtime-linux-x64.tar.gz]: ", content)
        self.assertLessEqual(defined_names(content), find_referenced_links(content))

    def test_projection_is_a_fixed_point(self):
        release = Release.from_dict(release_data())

        once = self._project(self.TEMPLATE, release)

        self.assertEqual(self._project(once, release), once)
        self.assertEqual(find_referenced_links(once), find_referenced_links(self._project(once, release)))

    def test_scalars_only(self):
        content = DocumentProjector().project("v{RUNTIME-VERSION}", values={"RUNTIME-VERSION": "9.0.4"})
        self.assertEqual(content, "v9.0.4")


if __name__ == "__main__":
    unittest.main()
