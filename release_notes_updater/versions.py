"""Version, date and text helpers shared by the document updaters."""

import re
from datetime import datetime
from typing import Iterable, Optional, Tuple
from urllib.parse import urlparse

from .logging_config import logger

DATE_SENTINEL = "TBD"
TEXT_SENTINEL = "TBA"
DEFAULT_VS_VERSION = "17.0"
DEFAULT_CSHARP_VERSION = "12"

LEGACY_CORE_CHANNELS = ("1.0", "1.1", "2.0", "2.1", "2.2", "3.0", "3.1")

_LEADING_VERSION = re.compile(r"(\d+)(?:\.(\d+))?")
_CVE_ID = re.compile(r"CVE-\d{4}-\d{4,}", re.IGNORECASE)
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%B %d, %Y", "%b %d, %Y")


def channel_version(runtime_id: str) -> str:
    """
    Extract the channel version ("8.0") from a runtime identifier ("8.0.15").

    Identifiers with fewer than two components are returned unchanged.
    """
    parts = runtime_id.split(".")
    if len(parts) >= 2:
        return f"{parts[0]}.{parts[1]}"
    logger.warning(f"Unable to extract channel version from runtime ID: {runtime_id}")
    return runtime_id


def version_sort_key(version: Optional[str]) -> Tuple[int, int]:
    """
    Sort key for channel versions.

    Only the leading numeric ``major[.minor]`` token counts. Anything that
    does not start with such a token sorts as ``(0, 0)``.
    """
    if not version:
        return (0, 0)
    match = _LEADING_VERSION.match(version.strip())
    if not match:
        return (0, 0)
    return (int(match.group(1)), int(match.group(2) or 0))


def release_sort_key(version: Optional[str]) -> Tuple[int, ...]:
    """
    Sort key for full release versions (``8.0.15``, ``10.0.0-preview.3``).

    Numeric components compare as integers; non-numeric ones count as zero.
    """
    if not version:
        return (0,)
    return tuple(int(part) if part.isdigit() else 0 for part in re.split(r"[.\-]", version))


def sort_versions_descending(versions: Iterable[str]) -> list:
    """Return channel versions ordered newest first (stable for equal keys)."""
    return sorted(versions, key=version_sort_key, reverse=True)


def major_minor(version: str) -> str:
    """Truncate a dotted version to ``major.minor`` (text before the second dot)."""
    version = version.strip()
    first = version.find(".")
    if first < 0:
        return version
    second = version.find(".", first + 1)
    return version if second < 0 else version[:second]


def _parse_major_minor(version: str) -> Optional[Tuple[int, int]]:
    parts = version.split(".")
    try:
        major = int(parts[0])
        minor = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    except ValueError:
        return None
    return (major, minor)


def minimum_vs_version(vs_versions: Iterable[Optional[str]], default: str = DEFAULT_VS_VERSION) -> str:
    """
    Smallest Visual Studio version across a set of ``vs-version`` fields.

    Each field may hold several comma-separated versions. Every candidate is
    normalised to ``major.minor`` and compared numerically; unparseable
    candidates are ignored so a real version always wins.

    >>> minimum_vs_version(["17.8.21", "17.6.5,17.9.0"])
    '17.6'
    """
    best: Optional[Tuple[Tuple[int, int], str]] = None
    for field in vs_versions:
        if not field:
            continue
        for candidate in field.split(","):
            candidate = major_minor(candidate)
            if not candidate:
                continue
            key = _parse_major_minor(candidate)
            if key is None:
                logger.debug(f"Ignoring unparseable Visual Studio version: {candidate}")
                continue
            if best is None or key < best[0]:
                best = (key, candidate)
    return best[1] if best else default


def parse_release_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a manifest date (ISO 8601 or a handful of common shapes)."""
    if not value:
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _format_date(value: Optional[str], fmt: str, default: str, lower: bool = False) -> str:
    parsed = parse_release_date(value)
    if parsed is None:
        if value:
            logger.warning(f"Unable to parse release date: {value}")
            return value
        return default
    formatted = parsed.strftime(fmt)
    return formatted.lower() if lower else formatted


def format_header_date(value: Optional[str], default: str = DATE_SENTINEL) -> str:
    """``2025-04-08`` -> ``April 08, 2025``."""
    return _format_date(value, "%B %d, %Y", default)


def format_blog_slug_date(value: Optional[str], default: str = DATE_SENTINEL) -> str:
    """``2025-04-08`` -> ``april-2025``."""
    return _format_date(value, "%B-%Y", default, lower=True)


def format_prose_date(value: Optional[str], default: str = DATE_SENTINEL) -> str:
    """``2025-04-08`` -> ``April 2025``."""
    return _format_date(value, "%B %Y", default)


def format_table_date(value: Optional[str], default: str = DATE_SENTINEL) -> str:
    """``2025-04-08`` -> ``2025/04/08``."""
    return _format_date(value, "%Y/%m/%d", default)


def title_case(value: Optional[str], default: str = TEXT_SENTINEL) -> str:
    """Title-case support phase text (``"active"`` -> ``"Active"``)."""
    if not value:
        return default
    return value.lower().title()


def upper_case(value: Optional[str], default: str = TEXT_SENTINEL) -> str:
    if not value:
        return default
    return value.upper()


def extract_cve_id(cve_url: Optional[str]) -> str:
    """
    Derive a CVE identifier from an advisory URL.

    A ``CVE-YYYY-NNNN`` match anywhere in the URL wins; otherwise the last
    non-empty path segment is used; otherwise the empty string.
    """
    if not cve_url:
        return ""
    match = _CVE_ID.search(cve_url)
    if match:
        return match.group(0).upper()
    path = urlparse(cve_url).path or cve_url
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else ""


def is_preview(release: Optional[str]) -> bool:
    return bool(release) and "preview" in release.lower()


def is_legacy_core_channel(channel: str) -> bool:
    """Channels 1.0 through 3.1 shipped under the ".NET Core" name."""
    return channel in LEGACY_CORE_CHANNELS


def build_link_path(channel: str, release: str, prefix: str = "release-notes") -> Optional[str]:
    """
    Relative markdown path of a release's notes page.

    ``8.0.15`` -> ``<prefix>/8.0/8.0.15/8.0.15.md``
    ``10.0.0-preview.3`` -> ``<prefix>/10.0/preview/preview3/10.0.0-preview.3.md``

    Returns ``None`` (and logs) for a preview string that does not split into
    exactly ``<version>-preview.<n>``.
    """
    base = f"{prefix}/{channel}" if prefix else channel
    if "preview" in release:
        parts = release.split("-")
        if len(parts) == 2 and parts[1].startswith("preview"):
            preview_dir = parts[1].replace("preview.", "preview")
            return f"{base}/preview/{preview_dir}/{release}.md"
        logger.error(f"Unexpected preview release format: {release}")
        return None
    return f"{base}/{release}/{release}.md"
