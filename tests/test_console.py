"""Tests for the console module."""

import unittest
from unittest.mock import patch

from release_notes_updater import console as console_module
from release_notes_updater._updaters import AggregateResult, UpdateResult
from release_notes_updater.console import (
    BANNER_COLORS_ADAPTIVE,
    BANNER_COLORS_HEX,
    console,
    gha_error,
    gha_warning,
    print_banner,
    print_summary_table,
    print_sync_summary,
    print_update_summary,
)
from release_notes_updater.sync import SyncReport


class TestBannerColors(unittest.TestCase):
    def test_palettes_have_one_color_per_banner_line(self):
        self.assertEqual(len(BANNER_COLORS_HEX), 4)
        self.assertEqual(len(BANNER_COLORS_ADAPTIVE), 4)

    def test_hex_colors_are_valid(self):
        for color in BANNER_COLORS_HEX:
            self.assertTrue(color.startswith("#"))
            self.assertEqual(len(color), 7)


class TestConsoleOutput(unittest.TestCase):
    def capture(self, func, *args, **kwargs):
        with console.capture() as capture:
            func(*args, **kwargs)
        return capture.get()

    def test_banner_semver_gets_v_prefix(self):
        output = self.capture(print_banner, "1.2.0")
        self.assertIn("v1.2.0", output)
        self.assertIn("release documentation updater", output)

    def test_banner_non_semver_version(self):
        output = self.capture(print_banner, "unknown")
        self.assertIn(" unknown", output)
        self.assertNotIn("vunknown", output)

    def test_summary_table_hides_empty_rows(self):
        output = self.capture(print_summary_table, "Manifests", [("Loaded", 2), ("Failed", 0)])
        self.assertIn("Loaded", output)
        self.assertNotIn("Failed", output)

    def test_summary_table_nothing_to_show(self):
        self.assertEqual(self.capture(print_summary_table, "Empty", [("Failed", 0)]), "")

    def test_update_summary_lists_each_result(self):
        failed = UpdateResult.failure_result("cve_file", "disk full")
        failed.scope_key = "8.0"
        aggregate = AggregateResult(
            [
                UpdateResult.success_result("releases_markdown", files_written=["releases.md"]),
                UpdateResult.skipped_result("version_readme", "No reference"),
                failed,
            ]
        )

        output = self.capture(print_update_summary, aggregate)

        self.assertIn("releases_markdown", output)
        self.assertIn("skipped", output)
        self.assertIn("disk full", output)
        self.assertIn("8.0", output)

    def test_update_summary_without_results(self):
        self.assertIn("No updaters ran", self.capture(print_update_summary, AggregateResult()))

    def test_sync_summary_always_shown(self):
        output = self.capture(print_sync_summary, SyncReport())
        self.assertIn("Reference Sync", output)
        self.assertIn("Files copied", output)


class TestGitHubAnnotations(unittest.TestCase):
    @patch.object(console_module, "IS_GITHUB_ACTIONS", True)
    def test_warning_annotation(self):
        with patch("builtins.print") as mock_print:
            gha_warning("1 release manifest(s) could not be loaded", title="Missing manifests")
        mock_print.assert_called_once_with("::warning title=Missing manifests::1 release manifest(s) could not be loaded")

    @patch.object(console_module, "IS_GITHUB_ACTIONS", True)
    def test_error_annotation_without_title(self):
        with patch("builtins.print") as mock_print:
            gha_error("boom")
        mock_print.assert_called_once_with("::error::boom")

    @patch.object(console_module, "IS_GITHUB_ACTIONS", False)
    def test_warning_outside_github_actions(self):
        with console.capture() as capture:
            gha_warning("careful")
        self.assertIn("Warning: careful", capture.get())


if __name__ == "__main__":
    unittest.main()
