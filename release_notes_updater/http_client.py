"""HTTP client utilities with consistent user agent."""

import base64
from typing import Optional


def _get_package_version() -> str:
    """Get the package version for User-Agent header."""
    try:
        from importlib.metadata import version

        return version("release-notes-updater")
    except Exception:
        try:
            from pathlib import Path

            import tomllib

            pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
            if pyproject_path.exists():
                with open(pyproject_path, "rb") as f:
                    pyproject_data = tomllib.load(f)
                return pyproject_data.get("project", {}).get("version", "unknown")
        except Exception:
            pass
        return "unknown"


USER_AGENT = f"release-notes-updater/{_get_package_version()}"


def basic_auth_value(token: str) -> str:
    """
    Build the Basic authorization value used by Azure DevOps personal access tokens.

    The user name is empty, so the encoded credential is ``":" + token``.
    """
    credential = base64.b64encode(f":{token}".encode("utf-8")).decode("ascii")
    return f"Basic {credential}"


def get_default_headers(token: Optional[str] = None, content_type: Optional[str] = None) -> dict:
    """
    Get default HTTP headers with user agent.

    Args:
        token: Optional personal access token, sent as Basic authentication
        content_type: Optional Content-Type header value (e.g., "application/json")

    Returns:
        Dictionary of HTTP headers
    """
    headers = {"User-Agent": USER_AGENT}
    if token:
        headers["Authorization"] = basic_auth_value(token)
    if content_type:
        headers["Content-Type"] = content_type
    return headers
