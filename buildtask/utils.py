"""
Utility functions for buildtask.

Includes logging setup and manifest file loading.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.logging import RichHandler


# Global console for pretty output
console = Console(stderr=True)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "pretty",
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Set up logging for the buildtask package.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "structured" (JSON) or "pretty" (human-readable)
        log_file: Optional path to a log file (always structured)
        console_output: Also log to the console (stderr)

    Returns:
        Configured logger
    """
    logger = logging.getLogger("buildtask")
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.handlers = []  # Clear existing handlers

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    if console_output:
        if log_format == "pretty":
            console_handler = RichHandler(console=console, rich_tracebacks=True, show_time=False)
        else:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(StructuredFormatter())
        logger.addHandler(console_handler)

    return logger


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "build"):
            log_data["build"] = record.build
        if hasattr(record, "stage"):
            log_data["stage"] = record.stage

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def load_manifest(path: Path) -> dict[str, Any]:
    """
    Load a single YAML or JSON manifest.

    Args:
        path: File to read (.json is parsed as JSON, anything else as YAML)

    Returns:
        The parsed mapping

    Raises:
        ValueError: If the file does not contain a mapping
    """
    with open(path, "r") as f:
        if path.suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")
    return data


def dump_manifest(data: dict[str, Any], output_format: str = "yaml") -> str:
    """Render a manifest as YAML or JSON text."""
    if output_format == "json":
        return json.dumps(data, indent=2)
    return yaml.safe_dump(data, sort_keys=False)
