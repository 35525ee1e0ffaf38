"""CLI module for release-notes-updater.

This module provides the command-line interface. Every option falls back to
an environment variable.
"""

from .main import (
    Config,
    build_config,
    cli,
    main,
    run_pipeline,
)

__all__ = [
    "cli",
    "main",
    "Config",
    "build_config",
    "run_pipeline",
]
