"""Tests for downloading release manifest artifacts from Azure DevOps."""

import base64
import io
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest.mock import Mock, patch

import requests

from release_notes_updater.artifacts import ArtifactDownloader, download_artifact, extract_zip
from release_notes_updater.exceptions import ArtifactDownloadError, FileProcessingError
from release_notes_updater.http_client import USER_AGENT


def zip_bytes(members):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def listing_response(artifacts):
    response = Mock()
    response.ok = True
    response.status_code = 200
    response.json.return_value = {"count": len(artifacts), "value": artifacts}
    return response


class TestArtifactDownloader(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.download_dir = Path(self.tmp.name)
        self.downloader = ArtifactDownloader("dnceng", "internal", "secret-token", download_dir=self.download_dir)

    def tearDown(self):
        self.tmp.cleanup()

    def test_artifacts_url(self):
        self.assertEqual(
            self.downloader.artifacts_url("2651234"),
            "https://dev.azure.com/dnceng/internal/_apis/build/builds/2651234/artifacts?api-version=6.0",
        )

    @patch("release_notes_updater.artifacts.requests.get")
    def test_get_download_url_uses_basic_auth(self, mock_get):
        mock_get.return_value = listing_response(
            [
                {"name": "logs", "resource": {"downloadUrl": "https://example.test/logs"}},
                {"name": "release-manifests", "resource": {"downloadUrl": "https://example.test/manifests"}},
            ]
        )

        url = self.downloader.get_download_url("2651234")

        self.assertEqual(url, "https://example.test/manifests")
        headers = mock_get.call_args.kwargs["headers"]
        expected = base64.b64encode(b":secret-token").decode("ascii")
        self.assertEqual(headers["Authorization"], f"Basic {expected}")
        self.assertEqual(headers["User-Agent"], USER_AGENT)

    @patch("release_notes_updater.artifacts.requests.get")
    def test_missing_artifact(self, mock_get):
        mock_get.return_value = listing_response([{"name": "logs"}])

        with self.assertRaises(ArtifactDownloadError) as cm:
            self.downloader.get_download_url("2651234")
        self.assertIn("release-manifests", str(cm.exception))

    @patch("release_notes_updater.artifacts.requests.get")
    def test_http_error(self, mock_get):
        mock_get.return_value = Mock(ok=False, status_code=401, text="Unauthorized")

        with self.assertRaises(ArtifactDownloadError) as cm:
            self.downloader.get_download_url("2651234")
        self.assertEqual(cm.exception.status_code, 401)
        self.assertIn("HTTP 401", str(cm.exception))
        mock_get.return_value.close.assert_called_once()

    @patch("release_notes_updater.artifacts.requests.get")
    def test_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(ArtifactDownloadError):
            self.downloader.get_download_url("2651234")

    @patch("release_notes_updater.artifacts.requests.get")
    def test_download_extracts_per_runtime(self, mock_get):
        archive = zip_bytes({"release-manifests/releases-json-CDN-8.0.15.json": '{"channel-version": "8.0"}'})
        download = Mock(ok=True, status_code=200)
        download.iter_content.return_value = [archive]
        mock_get.side_effect = [
            listing_response([{"name": "release-manifests", "resource": {"downloadUrl": "https://example.test/zip"}}]),
            download,
        ]

        dest = self.downloader.download("8.0.15", "2651234")

        self.assertEqual(dest, self.download_dir / "release-manifests_8.0.15")
        self.assertTrue((dest / "release-manifests" / "releases-json-CDN-8.0.15.json").is_file())
        self.assertFalse((self.download_dir / "release-manifests.zip").exists())
        self.assertTrue(mock_get.call_args_list[1].kwargs["stream"])
        download.close.assert_called_once()

    @patch("release_notes_updater.artifacts.requests.get")
    def test_download_response_closed_when_write_fails(self, mock_get):
        download = Mock(ok=True, status_code=200)
        download.iter_content.return_value = [b"partial"]
        mock_get.side_effect = [
            listing_response([{"name": "release-manifests", "resource": {"downloadUrl": "https://example.test/zip"}}]),
            download,
        ]

        with patch("release_notes_updater.artifacts.open", side_effect=OSError("disk full"), create=True):
            with self.assertRaises(FileProcessingError):
                self.downloader.download("8.0.15", "2651234")
        download.close.assert_called_once()


class TestExtractZip(unittest.TestCase):
    def test_rejects_paths_outside_destination(self):
        with tempfile.TemporaryDirectory() as tmp:
            archive = Path(tmp) / "evil.zip"
            archive.write_bytes(zip_bytes({"../escaped.txt": "nope"}))

            with self.assertRaises(FileProcessingError):
                extract_zip(archive, Path(tmp) / "out")
            self.assertFalse((Path(tmp) / "escaped.txt").exists())

    def test_invalid_archive(self):
        with tempfile.TemporaryDirectory() as tmp:
            archive = Path(tmp) / "broken.zip"
            archive.write_bytes(b"not a zip")

            with self.assertRaises(FileProcessingError):
                extract_zip(archive, Path(tmp) / "out")


class TestDownloadArtifact(unittest.TestCase):
    def test_without_build_id(self):
        downloader = Mock()
        self.assertIsNone(download_artifact(downloader, "8.0.15", None))
        downloader.download.assert_not_called()

    def test_failure_is_logged_not_raised(self):
        downloader = Mock()
        downloader.download.side_effect = ArtifactDownloadError("boom", status_code=500)

        self.assertIsNone(download_artifact(downloader, "8.0.15", "123"))

    def test_success(self):
        downloader = Mock()
        downloader.download.return_value = Path("artifacts/release-manifests_8.0.15")

        self.assertEqual(download_artifact(downloader, "8.0.15", "123"), Path("artifacts/release-manifests_8.0.15"))
        downloader.download.assert_called_once_with("8.0.15", "123")


if __name__ == "__main__":
    unittest.main()
