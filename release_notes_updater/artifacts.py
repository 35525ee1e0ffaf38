"""Download release manifest artifacts from Azure DevOps pipeline builds."""

import zipfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests

from .exceptions import ArtifactDownloadError, FileProcessingError
from .http_client import get_default_headers
from .logging_config import logger
from .manifest import DEFAULT_ARTIFACT_NAME

AZURE_DEVOPS_BASE_URL = "https://dev.azure.com"
ARTIFACTS_API_VERSION = "6.0"
_CHUNK_SIZE = 1024 * 1024


class ArtifactDownloader:
    """
    Fetches a named build artifact and extracts it for the manifest loader.

    The artifact for runtime ``8.0.15`` ends up in
    ``<download_dir>/<artifact_name>_8.0.15/``.

    Example:
        downloader = ArtifactDownloader("dnceng", "internal", token, download_dir="artifacts")
        downloader.download("8.0.15", "2651234")
    """

    def __init__(
        self,
        organization: str,
        project: str,
        token: str,
        artifact_name: str = DEFAULT_ARTIFACT_NAME,
        download_dir: Union[str, Path] = "artifacts",
        base_url: str = AZURE_DEVOPS_BASE_URL,
    ) -> None:
        self.organization = organization
        self.project = project
        self.token = token
        self.artifact_name = artifact_name
        self.download_dir = Path(download_dir)
        self.base_url = base_url.rstrip("/")

    def artifacts_url(self, build_id: str) -> str:
        return (
            f"{self.base_url}/{self.organization}/{self.project}/_apis/build/builds/{build_id}/artifacts"
            f"?api-version={ARTIFACTS_API_VERSION}"
        )

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        try:
            response = requests.get(url, headers=get_default_headers(self.token), stream=stream)
        except requests.exceptions.ConnectionError as e:
            raise ArtifactDownloadError(f"Failed to connect to Azure DevOps: {e}") from e
        except requests.exceptions.Timeout as e:
            raise ArtifactDownloadError("Azure DevOps request timed out") from e

        if not response.ok:
            body = response.text
            response.close()
            raise ArtifactDownloadError(
                f"Request to {url} failed",
                status_code=response.status_code,
                response_body=body,
            )
        return response

    def get_download_url(self, build_id: str) -> str:
        """
        Resolve the download URL of the configured artifact for a build.

        Raises:
            ArtifactDownloadError: If the listing fails or the artifact is missing
        """
        response = self._get(self.artifacts_url(build_id))
        try:
            payload: Dict[str, Any] = response.json()
        except ValueError as e:
            raise ArtifactDownloadError(f"Invalid artifact listing for build {build_id}: {e}") from e

        for artifact in payload.get("value", []) or []:
            if artifact.get("name") == self.artifact_name:
                download_url = (artifact.get("resource") or {}).get("downloadUrl")
                if download_url:
                    return download_url
                break
        raise ArtifactDownloadError(f"Artifact '{self.artifact_name}' not found for build {build_id}")

    def download(self, runtime_id: str, build_id: str) -> Path:
        """
        Download and extract the artifact of ``build_id`` for ``runtime_id``.

        Returns:
            Directory the artifact was extracted into

        Raises:
            ArtifactDownloadError: On HTTP or lookup failures
            FileProcessingError: If the archive cannot be written or extracted
        """
        logger.info(f"Downloading artifact '{self.artifact_name}' of build {build_id} for runtime {runtime_id}")
        download_url = self.get_download_url(build_id)

        self.download_dir.mkdir(parents=True, exist_ok=True)
        zip_path = self.download_dir / f"{self.artifact_name}.zip"
        response = self._get(download_url, stream=True)
        try:
            with open(zip_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except OSError as e:
            raise FileProcessingError(f"Failed to write artifact archive {zip_path}: {e}") from e
        finally:
            response.close()

        dest = self.download_dir / f"{self.artifact_name}_{runtime_id}"
        try:
            extract_zip(zip_path, dest)
        finally:
            zip_path.unlink(missing_ok=True)
        logger.info(f"Artifact for runtime {runtime_id} extracted to {dest}")
        return dest


def extract_zip(archive_path: Union[str, Path], dest_dir: Union[str, Path]) -> Path:
    """
    Extract a zip archive, refusing members that would land outside ``dest_dir``.

    Raises:
        FileProcessingError: If the archive is invalid or unsafe
    """
    archive = Path(archive_path)
    dest = Path(dest_dir)
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()

    try:
        with zipfile.ZipFile(archive) as zf:
            for member in zf.namelist():
                target = (dest / member).resolve()
                if target != root and root not in target.parents:
                    raise FileProcessingError(f"Unsafe path in archive {archive.name}: {member}")
            zf.extractall(dest)
    except zipfile.BadZipFile as e:
        raise FileProcessingError(f"Failed to extract archive {archive.name}: {e}") from e
    return dest


def download_artifact(
    downloader: ArtifactDownloader,
    runtime_id: str,
    build_id: Optional[str],
) -> Optional[Path]:
    """Download one artifact, logging and swallowing per-version failures."""
    if not build_id:
        logger.warning(f"No build ID configured for runtime {runtime_id}; skipping download")
        return None
    try:
        return downloader.download(runtime_id, build_id)
    except (ArtifactDownloadError, FileProcessingError) as e:
        logger.error(f"Failed to download artifact for runtime {runtime_id}: {e}")
        return None
