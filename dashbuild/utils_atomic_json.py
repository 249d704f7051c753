#!/usr/bin/env python3
"""
Utility functions for atomic JSON file operations.

Prevents corruption by ensuring data and cache files are never left in a
half-written state.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from dashbuild.core.logging_config import get_logger
from dashbuild.utils.error_handling import log_and_return_default

logger = get_logger(__name__)


def atomic_json_save(data: dict, output_file: str | Path) -> bool:
    """
    Save JSON data to file using atomic write operations.

    1. Write to a temporary file in the target directory
    2. Validate the JSON is correct
    3. Atomically replace the final file

    Args:
        data: Dictionary to save as JSON (UTF-8, indent=2)
        output_file: Target file path; parent directories are created

    Returns:
        True if save succeeded
    """
    target = Path(output_file)
    target.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path = tempfile.mkstemp(suffix=".json", dir=target.parent, text=True)

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        with open(temp_path, encoding="utf-8") as f:
            json.load(f)

        os.replace(temp_path, target)
        return True

    except Exception:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise


def load_json_with_recovery(file_path: str | Path, default_value: dict[Any, Any] | None = None) -> dict[Any, Any]:
    """
    Load JSON file with automatic recovery from corruption.

    If the file is missing, corrupted or not a JSON object, returns
    default_value instead of crashing.

    Args:
        file_path: Path to JSON file
        default_value: Value to return if file is invalid (defaults to {})

    Returns:
        Loaded JSON data or default_value
    """
    if default_value is None:
        default_value = {}

    path = Path(file_path)
    if not path.exists():
        return default_value

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        return log_and_return_default(
            logger,
            e,
            context={"file_path": str(path)},
            default_value=default_value,
            error_type="JSON file load",
            level=logging.INFO,
        )

    if not isinstance(data, dict):
        logger.info(f"JSON file {path} does not hold an object - using default value")
        return default_value

    return data
