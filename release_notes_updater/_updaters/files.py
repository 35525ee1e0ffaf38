"""Template loading and document writing shared by the updaters."""

import json
from pathlib import Path
from typing import Any, Optional

from ..exceptions import FileProcessingError, TemplateError
from ..logging_config import logger


def load_template(template_dir: Path, name: str) -> Optional[str]:
    """
    Read ``template_dir/name``; a missing template is logged and yields None.

    Raises:
        TemplateError: If the template exists but cannot be read as UTF-8
    """
    path = template_dir / name
    if not path.is_file():
        logger.warning(f"Template file not found: {path}")
        return None
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateError(f"Failed to read template {path}: {e}") from e


def write_text(path: Path, content: str) -> Path:
    """
    Create or truncate ``path`` with ``content``, creating parent directories.

    Raises:
        FileProcessingError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except OSError as e:
        raise FileProcessingError(f"Failed to write {path}: {e}") from e
    logger.debug(f"Wrote {path}")
    return path


def write_json(path: Path, data: Any) -> Path:
    """Write ``data`` as indented JSON with a trailing newline."""
    return write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
