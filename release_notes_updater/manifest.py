"""Locate and load the per-version release manifests extracted from pipeline artifacts."""

import json
from pathlib import Path
from typing import Optional, Union

from .exceptions import ManifestParseError
from .logging_config import logger
from .models import ReleaseManifest

DEFAULT_ARTIFACT_NAME = "release-manifests"


def manifest_file_name(runtime_id: str) -> str:
    return f"releases-json-CDN-{runtime_id}.json"


class ManifestLoader:
    """
    Reads ``releases-json-CDN-<runtime>.json`` manifests from the download directory.

    Each runtime's artifact is extracted into ``<download_dir>/<artifact>_<runtime>``;
    the manifest may sit at any depth below that directory.
    """

    def __init__(self, download_dir: Union[str, Path], artifact_name: str = DEFAULT_ARTIFACT_NAME) -> None:
        self.download_dir = Path(download_dir)
        self.artifact_name = artifact_name

    def artifact_dir(self, runtime_id: str) -> Path:
        return self.download_dir / f"{self.artifact_name}_{runtime_id}"

    def find_manifest(self, runtime_id: str) -> Optional[Path]:
        """
        Find the manifest file for a runtime version.

        Returns:
            Path of the first match in sorted order, or None when there is none
        """
        root = self.artifact_dir(runtime_id)
        if not root.is_dir():
            return None
        matches = sorted(root.rglob(manifest_file_name(runtime_id)))
        return matches[0] if matches else None

    def load(self, runtime_id: str) -> Optional[ReleaseManifest]:
        """
        Load the manifest for a runtime version.

        Returns:
            The parsed manifest, or None when no manifest file exists

        Raises:
            ManifestParseError: If the file exists but is not a JSON object
        """
        path = self.find_manifest(runtime_id)
        if path is None:
            logger.warning(f"Release manifest not found for runtime ID {runtime_id} under {self.artifact_dir(runtime_id)}")
            return None
        return load_manifest_file(path)


def load_manifest_file(path: Union[str, Path]) -> ReleaseManifest:
    """
    Parse a manifest file.

    Raises:
        ManifestParseError: If the content is not UTF-8 JSON or not a JSON object
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestParseError(str(path), str(e)) from e
    except UnicodeDecodeError as e:
        raise ManifestParseError(str(path), f"not valid UTF-8: {e}") from e
    except OSError as e:
        raise ManifestParseError(str(path), f"unable to read file: {e}") from e

    if not isinstance(data, dict):
        raise ManifestParseError(str(path), "top-level JSON value is not an object")

    manifest = ReleaseManifest.from_dict(data)
    logger.debug(f"Loaded manifest {path} (channel {manifest.channel_version}, {len(manifest.releases)} releases)")
    return manifest
