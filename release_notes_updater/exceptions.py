"""Custom exceptions for release-notes-updater."""

from typing import Optional


class ReleaseNotesError(Exception):
    """Base exception for all release-notes-updater operations."""


class ConfigurationError(ReleaseNotesError):
    """Raised when configuration validation fails."""


class ManifestParseError(ReleaseNotesError):
    """Raised when a release manifest exists but is not valid JSON."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Failed to parse release manifest '{path}': {message}")


class ArtifactDownloadError(ReleaseNotesError):
    """Raised when a pipeline artifact cannot be listed or downloaded."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
            if response_body:
                message = f"{message}: {response_body}"
        super().__init__(message)


class TemplateError(ReleaseNotesError):
    """Raised when a markdown template cannot be used."""


class FileProcessingError(ReleaseNotesError):
    """Raised when file operations fail."""


class SyncError(ReleaseNotesError):
    """Raised when a generated file cannot be copied into the reference tree."""
