"""Document updater implementations."""

from .channel_docs import CveFileUpdater, VersionReadmeUpdater
from .index_pages import ReleaseNotesReadmeUpdater, ReleasesIndexUpdater, ReleasesMarkdownUpdater
from .install_guides import LINUX, MACOS, WINDOWS, InstallGuideUpdater, InstallPlatform
from .json_docs import ChannelReleasesJsonUpdater, RuntimeReleaseJsonUpdater
from .runtime_pages import RuntimeFileUpdater, SdkFilesUpdater

__all__ = [
    "RuntimeFileUpdater",
    "SdkFilesUpdater",
    "RuntimeReleaseJsonUpdater",
    "InstallGuideUpdater",
    "InstallPlatform",
    "LINUX",
    "MACOS",
    "WINDOWS",
    "VersionReadmeUpdater",
    "CveFileUpdater",
    "ChannelReleasesJsonUpdater",
    "ReleasesMarkdownUpdater",
    "ReleaseNotesReadmeUpdater",
    "ReleasesIndexUpdater",
]
