#!/usr/bin/env python3
"""
KUBECENSUS PRE-FLIGHT VALIDATOR
-------------------------------
The final safety gate before offline ingestion starts. A must-gather path
must exist, be a directory, be readable and be non-empty; otherwise the run
aborts before producing any partial output.

A directory without a single YAML file is accepted with a warning: the run
completes with an empty inventory.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from kubecensus.core.errors import PreflightError
from kubecensus.ingest.walker import contains_yaml

logger = logging.getLogger("kubecensus.validator")


def validate_must_gather_path(path: Optional[Union[str, Path]]) -> List[str]:
    """
    Validates a must-gather directory.

    Returns:
        Non-fatal warnings (currently only "no YAML files found").

    Raises:
        PreflightError: missing, not a directory, unreadable or empty.
    """
    if path is None or str(path) == "":
        raise PreflightError("must-gather path cannot be empty")

    root = Path(path)
    if not root.exists():
        raise PreflightError(
            f"must-gather directory not found: {root}\n"
            "Please verify the path exists and is accessible"
        )

    if not root.is_dir():
        raise PreflightError(
            f"must-gather path is not a directory: {root}\n"
            "Please provide a path to a directory, not a file"
        )

    try:
        entries = os.listdir(root)
    except OSError as e:
        raise PreflightError(
            f"cannot read must-gather directory: {root}\n"
            f"Error: {e.strerror or e}\nPlease check directory permissions"
        )

    if not entries:
        raise PreflightError(
            f"must-gather directory is empty: {root}\n"
            "Please provide a valid must-gather directory with YAML files"
        )

    warnings = []
    if not contains_yaml(root):
        msg = (f"No YAML files found in must-gather directory: {root}. "
               "The directory will be processed, but no resources may be extracted.")
        logger.warning(msg)
        warnings.append(msg)
    return warnings


def must_gather_name(path: Union[str, Path]) -> str:
    """A human-meaningful name for a bundle, used in comparison filenames."""
    name = Path(path).name
    if "must-gather" in name:
        return name

    resolved = Path(os.path.abspath(path)).name
    if resolved:
        name = resolved
    if name in ("", ".", "/"):
        name = "must-gather"
    return name
