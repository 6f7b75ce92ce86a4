"""
Backend configuration, read from DIAGRAM_TOOL_* environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Optional


HOST = os.environ.get("DIAGRAM_TOOL_HOST", "127.0.0.1")
PORT = int(os.environ.get("DIAGRAM_TOOL_PORT", "8765"))
LOG_LEVEL = os.environ.get("DIAGRAM_TOOL_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def workspace_dir() -> Optional[Path]:
    """
    Directory diagram paths are confined to, if DIAGRAM_TOOL_WORKSPACE is set.

    Read on every call so tests and long-running servers pick up changes.
    """
    value = os.environ.get("DIAGRAM_TOOL_WORKSPACE")
    return Path(value).expanduser().resolve() if value else None


def configure_logging(level: Optional[str] = None):
    """Configure root logging once for the CLI / server process."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
