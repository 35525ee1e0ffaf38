"""Tests for the updater plugin system: results, registry and orchestrator."""

import tempfile
import unittest
from pathlib import Path

from release_notes_updater._updaters import (
    CHANNEL_SCOPE,
    RUN_SCOPE,
    VERSION_SCOPE,
    AggregateResult,
    UpdateResult,
    UpdaterInput,
    UpdaterOrchestrator,
    UpdaterRegistry,
    VersionContext,
    create_default_registry,
)
from release_notes_updater.models import ReleaseManifest
from release_notes_updater.reference_data import ReferenceConfiguration, ReferenceTree

from .factories import manifest_data, release_data


def version(runtime_id: str, channel: str = "8.0") -> VersionContext:
    manifest = ReleaseManifest.from_dict(manifest_data(channel=channel, releases=[release_data(runtime_id)]))
    return VersionContext(runtime_id, manifest)


def make_input(scope, versions=(), channel=None, output_dir="output"):
    return UpdaterInput(
        scope=scope,
        output_dir=output_dir,
        template_dir="templates",
        reference=ReferenceConfiguration(),
        reference_tree=ReferenceTree(None),
        versions=list(versions),
        channel=channel,
    )


class RecordingUpdater:
    """Minimal updater that records the inputs it was given."""

    def __init__(self, name, scope=VERSION_SCOPE, enabled=True, error=None):
        self.name = name
        self.scope = scope
        self.enabled = enabled
        self.error = error
        self.calls = []

    def is_enabled(self, input):
        return self.enabled

    def update(self, input):
        self.calls.append(input)
        if self.error:
            raise self.error
        return UpdateResult.success_result(self.name, files_written=[f"{self.name}.md"])


class TestUpdateResult(unittest.TestCase):
    def test_success_cannot_carry_error(self):
        with self.assertRaises(ValueError):
            UpdateResult(success=True, updater_name="x", error_message="oops")

    def test_failure_needs_error(self):
        with self.assertRaises(ValueError):
            UpdateResult(success=False, updater_name="x")

    def test_skipped_result(self):
        result = UpdateResult.skipped_result("cve_file", "No published cve.md")
        self.assertTrue(result.success)
        self.assertTrue(result.skipped)
        self.assertEqual(result.metadata["skip_reason"], "No published cve.md")

    def test_files_written_are_strings(self):
        result = UpdateResult.success_result("runtime_file", files_written=[Path("a") / "b.md"])
        self.assertEqual(result.files_written, [str(Path("a") / "b.md")])


class TestAggregateResult(unittest.TestCase):
    def test_partitions(self):
        aggregate = AggregateResult()
        aggregate.add(UpdateResult.success_result("runtime_file", files_written=["a.md"]))
        aggregate.add(UpdateResult.skipped_result("sdk_files"))
        aggregate.extend(AggregateResult([UpdateResult.failure_result("cve_file", "boom")]))

        self.assertFalse(aggregate.all_successful)
        self.assertTrue(aggregate.any_failures)
        self.assertEqual(aggregate.files_written, ["a.md"])
        self.assertEqual([r.updater_name for r in aggregate.failed_updaters], ["cve_file"])
        self.assertEqual([r.updater_name for r in aggregate.skipped_updaters], ["sdk_files"])
        self.assertEqual([r.updater_name for r in aggregate.enabled_updaters], ["runtime_file", "cve_file"])


class TestUpdaterInput(unittest.TestCase):
    def test_unknown_scope(self):
        with self.assertRaises(ValueError):
            make_input("weekly")

    def test_version_scope_needs_exactly_one_version(self):
        with self.assertRaises(ValueError):
            make_input(VERSION_SCOPE, [version("8.0.15"), version("8.0.16")])

    def test_channel_scope_needs_channel(self):
        with self.assertRaises(ValueError):
            make_input(CHANNEL_SCOPE, [version("8.0.15")])

    def test_versions_are_sorted_oldest_first(self):
        updater_input = make_input(
            RUN_SCOPE, [version("10.0.0-preview.3", "10.0"), version("8.0.16"), version("8.0.15")]
        )

        self.assertEqual([v.runtime_id for v in updater_input.versions], ["8.0.15", "8.0.16", "10.0.0-preview.3"])
        self.assertEqual(updater_input.newest.runtime_id, "10.0.0-preview.3")

    def test_paths(self):
        updater_input = make_input(VERSION_SCOPE, [version("8.0.15")])
        self.assertEqual(updater_input.runtime_dir("8.0", "8.0.15"), Path("output/release-notes/8.0/8.0.15"))


class TestVersionContext(unittest.TestCase):
    def test_channel_falls_back_to_runtime_id(self):
        context = VersionContext("9.0.4", ReleaseManifest())
        self.assertEqual(context.channel, "9.0")
        self.assertIsNone(context.release)
        self.assertIsNone(context.latest_sdk)

    def test_latest_sdk_from_release(self):
        self.assertEqual(version("8.0.15").latest_sdk, "8.0.100")


class TestUpdaterRegistry(unittest.TestCase):
    def setUp(self):
        self.registry = UpdaterRegistry()

    def test_update_all_runs_matching_scope_in_order(self):
        first = RecordingUpdater("first")
        disabled = RecordingUpdater("disabled", enabled=False)
        other_scope = RecordingUpdater("other", scope=RUN_SCOPE)
        for updater in (first, disabled, other_scope):
            self.registry.register(updater)

        aggregate = self.registry.update_all(make_input(VERSION_SCOPE, [version("8.0.15")]))

        self.assertEqual([r.updater_name for r in aggregate.results], ["first", "disabled"])
        self.assertTrue(aggregate.results[1].skipped)
        self.assertEqual(aggregate.results[0].scope_key, "8.0.15")
        self.assertEqual(other_scope.calls, [])

    def test_exceptions_become_failures(self):
        self.registry.register(RecordingUpdater("broken", error=OSError("disk full")))

        aggregate = self.registry.update_all(make_input(VERSION_SCOPE, [version("8.0.15")]))

        self.assertTrue(aggregate.any_failures)
        self.assertEqual(aggregate.results[0].error_message, "disk full")

    def test_update_single(self):
        updater = RecordingUpdater("cve", scope=CHANNEL_SCOPE)
        self.registry.register(updater)

        result = self.registry.update(make_input(CHANNEL_SCOPE, [version("8.0.15")], channel="8.0"), "cve")

        self.assertEqual(result.files_written, ["cve.md"])
        self.assertEqual(result.scope_key, "8.0")

    def test_update_single_wrong_scope_is_skipped(self):
        self.registry.register(RecordingUpdater("runtime"))

        result = self.registry.update(make_input(RUN_SCOPE), "runtime")

        self.assertTrue(result.skipped)

    def test_update_unknown_name(self):
        with self.assertRaises(ValueError):
            self.registry.update(make_input(RUN_SCOPE), "missing")

    def test_list_and_clear(self):
        self.registry.register(RecordingUpdater("b"))
        self.registry.register(RecordingUpdater("a", scope=RUN_SCOPE))

        self.assertEqual(self.registry.list_updaters(), [{"name": "a", "scope": "run"}, {"name": "b", "scope": "version"}])
        self.registry.clear()
        self.assertIsNone(self.registry.get("a"))


class TestDefaultRegistry(unittest.TestCase):
    def test_every_document_has_an_updater(self):
        registry = create_default_registry()

        self.assertEqual(
            [u.name for u in registry.get_updaters_for_scope(VERSION_SCOPE)],
            ["runtime_file", "sdk_files", "runtime_json"],
        )
        self.assertEqual(
            [u.name for u in registry.get_updaters_for_scope(CHANNEL_SCOPE)],
            ["version_readme", "cve_file", "channel_json", "install_linux", "install_macos", "install_windows"],
        )
        self.assertEqual(
            [u.name for u in registry.get_updaters_for_scope(RUN_SCOPE)],
            ["releases_markdown", "release_notes_readme", "releases_index"],
        )


class TestUpdaterOrchestrator(unittest.TestCase):
    def test_run_scope_with_default_registry(self):
        with tempfile.TemporaryDirectory() as tmp:
            orchestrator = UpdaterOrchestrator()

            # No templates and no reference tree: every updater skips
            aggregate = orchestrator.run_scope(make_input(VERSION_SCOPE, [version("8.0.15")], output_dir=tmp))

            self.assertTrue(aggregate.all_successful)
            self.assertEqual(
                [r.updater_name for r in aggregate.skipped_updaters], ["runtime_file", "sdk_files"]
            )
            self.assertTrue((Path(tmp) / "release-notes" / "8.0" / "8.0.15" / "release.json").is_file())

    def test_custom_registry(self):
        registry = UpdaterRegistry()
        updater = RecordingUpdater("index", scope=RUN_SCOPE)
        registry.register(updater)
        orchestrator = UpdaterOrchestrator(registry)

        result = orchestrator.run(make_input(RUN_SCOPE), "index")

        self.assertTrue(result.success)
        self.assertEqual(orchestrator.list_all_updaters(), ["index"])
        self.assertIs(orchestrator.registry, registry)


if __name__ == "__main__":
    unittest.main()
