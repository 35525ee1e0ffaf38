"""Per-channel install guides (``install-linux.md``, ``install-macos.md``, ``install-windows.md``)."""

from dataclasses import dataclass

from ..._projection import replace_scalars
from ...logging_config import logger
from ...versions import version_sort_key
from ..files import load_template, write_text
from ..protocol import CHANNEL_SCOPE, UpdaterInput
from ..result import UpdateResult

# Channels up to 8.0 use the older Linux guide layout
LEGACY_LINUX_TEMPLATE_MAX_CHANNEL = (8, 0)


@dataclass(frozen=True)
class InstallPlatform:
    """What varies between the three install guides."""

    key: str
    template: str
    sdk_file: str
    url_placeholder: str
    legacy_template: str = ""

    def template_for(self, channel: str) -> str:
        if self.legacy_template and version_sort_key(channel) <= LEGACY_LINUX_TEMPLATE_MAX_CHANNEL:
            return self.legacy_template
        return self.template


LINUX = InstallPlatform(
    key="linux",
    template="install-linux-template.md",
    legacy_template="install-linux-template8.md",
    sdk_file="dotnet-sdk-linux-x64.tar.gz",
    url_placeholder="LINUX-SDK-URL",
)
MACOS = InstallPlatform(
    key="macos",
    template="install-macos-template.md",
    sdk_file="dotnet-sdk-osx-x64.tar.gz",
    url_placeholder="MACOS-SDK-URL",
)
WINDOWS = InstallPlatform(
    key="windows",
    template="install-windows-template.md",
    sdk_file="dotnet-sdk-win-x64.exe",
    url_placeholder="WIN-SDK-URL",
)


class InstallGuideUpdater:
    """
    Writes ``release-notes/<channel>/install-<platform>.md`` for the newest
    configured version of a channel.

    Placeholders: {ID-VERSION} {LATEST-SDK} and the platform's SDK download
    URL ({LINUX-SDK-URL}, {MACOS-SDK-URL} or {WIN-SDK-URL}).
    """

    scope = CHANNEL_SCOPE

    def __init__(self, platform: InstallPlatform) -> None:
        self.platform = platform

    @property
    def name(self) -> str:
        return f"install_{self.platform.key}"

    def is_enabled(self, input: UpdaterInput) -> bool:
        return input.scope == self.scope and bool(input.versions)

    def update(self, input: UpdaterInput) -> UpdateResult:
        version = input.newest
        release = version.release
        if release is None:
            return UpdateResult.skipped_result(self.name, f"No releases in manifest for {version.runtime_id}")

        channel = input.channel
        template_name = self.platform.template_for(channel)
        template = load_template(input.template_dir, template_name)
        if template is None:
            return UpdateResult.skipped_result(self.name, f"Template {template_name} not found")

        latest_sdk = version.latest_sdk
        sdk = (release.find_sdk(latest_sdk) if latest_sdk else None) or release.sdk
        asset = sdk.find_file(self.platform.sdk_file) if sdk else None
        if asset is None:
            logger.warning(f"No {self.platform.sdk_file} in release {release.release_version}; leaving URL empty")

        content = replace_scalars(
            template,
            {
                "ID-VERSION": channel,
                "LATEST-SDK": latest_sdk or "",
                self.platform.url_placeholder: asset.url if asset else "",
            },
        )
        path = input.channel_dir(channel) / f"install-{self.platform.key}.md"
        write_text(path, content)
        logger.info(f"Install guide written to {path} (SDK {latest_sdk})")
        return UpdateResult.success_result(self.name, files_written=[str(path)])
