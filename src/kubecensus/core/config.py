#!/usr/bin/env python3
"""
KUBECENSUS RUN CONFIGURATION
----------------------------
The immutable configuration value built once at startup from the CLI flags.
Every component receives what it needs from a RunConfig; nothing in the core
reads ambient global state.

Author: KubeCensus Team
Date: 2026-10-18
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from kubecensus.core.errors import ConfigError

DEFAULT_OUTPUT_DIR = "./output"
DEFAULT_SINGLE_FILE = "all-resources.yaml"
DEFAULT_TIMEOUT_SECONDS = 30


class RunMode(Enum):
    LIVE_DIRECTORY = "live-directory"
    LIVE_SINGLE_FILE = "live-single-file"
    LIVE_COMPARISON = "live-comparison"
    MUST_GATHER = "must-gather"
    MUST_GATHER_COMPARISON = "must-gather-comparison"
    IMPORT = "import"


@dataclass(frozen=True)
class RunConfig:
    """Validated, read-only settings for a single invocation."""
    mode: RunMode
    output_dir: Path
    output_file: Optional[Path] = None
    kubeconfig: Optional[Path] = None
    kubeconfig1: Optional[Path] = None
    kubeconfig2: Optional[Path] = None
    must_gather: Optional[Path] = None
    must_gather1: Optional[Path] = None
    must_gather2: Optional[Path] = None
    import_file: Optional[Path] = None
    single_file: bool = False
    clean: bool = False
    verbose: bool = False
    timeout: int = DEFAULT_TIMEOUT_SECONDS

    @property
    def comparison_dir(self) -> Path:
        return self.output_dir / "comparison"


def resolve_kubeconfig(explicit: Optional[str]) -> Path:
    """
    Priority: explicit flag > $KUBECONFIG > ~/.kube/config.
    A missing file is fatal.
    """
    if explicit:
        candidate = Path(explicit)
    elif os.environ.get("KUBECONFIG"):
        candidate = Path(os.environ["KUBECONFIG"])
    else:
        candidate = Path.home() / ".kube" / "config"

    candidate = candidate.expanduser()
    if not candidate.is_file():
        raise ConfigError(f"kubeconfig file not found at {candidate}")
    return candidate


def _check_exclusive(kubeconfig, kubeconfig1, kubeconfig2,
                     must_gather, must_gather1, must_gather2, import_file):
    if must_gather and kubeconfig:
        raise ConfigError("--must-gather and --kubeconfig are mutually exclusive; use one or the other")
    if must_gather and (kubeconfig1 or kubeconfig2):
        raise ConfigError("--must-gather cannot be used with --kubeconfig1 or --kubeconfig2")
    if (must_gather1 or must_gather2) and (kubeconfig or kubeconfig1 or kubeconfig2):
        raise ConfigError("--must-gather1/2 cannot be used with --kubeconfig flags; use one mode or the other")
    if must_gather and (must_gather1 or must_gather2):
        raise ConfigError(
            "--must-gather cannot be used with --must-gather1 or --must-gather2; "
            "use either single or comparison mode"
        )
    if import_file and any([kubeconfig, kubeconfig1, kubeconfig2, must_gather, must_gather1, must_gather2]):
        raise ConfigError("--import cannot be combined with a cluster or must-gather source")


def build_config(kubeconfig: Optional[str] = None,
                 kubeconfig1: Optional[str] = None,
                 kubeconfig2: Optional[str] = None,
                 must_gather: Optional[str] = None,
                 must_gather1: Optional[str] = None,
                 must_gather2: Optional[str] = None,
                 output: str = DEFAULT_OUTPUT_DIR,
                 file: Optional[str] = None,
                 single_file: bool = False,
                 clean: bool = False,
                 compare: bool = False,
                 import_file: Optional[str] = None,
                 verbose: bool = False,
                 timeout: int = DEFAULT_TIMEOUT_SECONDS) -> RunConfig:
    """
    Resolves the run mode from raw flag values and validates them.

    Raises:
        ConfigError: contradictory flags, incomplete comparison input or an
            unusable kubeconfig path.
    """
    _check_exclusive(kubeconfig, kubeconfig1, kubeconfig2,
                     must_gather, must_gather1, must_gather2, import_file)

    if timeout <= 0:
        raise ConfigError(f"--timeout must be a positive number of seconds, got {timeout}")

    output_dir = Path(output)
    common = dict(output_dir=output_dir, clean=clean, verbose=verbose, timeout=timeout)

    if import_file:
        return RunConfig(mode=RunMode.IMPORT, import_file=Path(import_file), **common)

    if must_gather1 and must_gather2:
        return RunConfig(mode=RunMode.MUST_GATHER_COMPARISON,
                         must_gather1=Path(must_gather1), must_gather2=Path(must_gather2), **common)
    if must_gather1 or must_gather2:
        raise ConfigError("must-gather comparison mode requires both --must-gather1 and --must-gather2")

    # Single-file output applies to must-gather and live collection alike
    output_file = None
    if file:
        output_file = Path(file)
    elif single_file:
        output_file = output_dir / DEFAULT_SINGLE_FILE
    wants_single = output_file is not None

    if must_gather:
        return RunConfig(mode=RunMode.MUST_GATHER, must_gather=Path(must_gather),
                         output_file=output_file, single_file=wants_single, **common)

    if compare or (kubeconfig1 and kubeconfig2):
        if not (kubeconfig1 and kubeconfig2):
            raise ConfigError("comparison mode requires both --kubeconfig1 and --kubeconfig2 to be specified")
        return RunConfig(mode=RunMode.LIVE_COMPARISON,
                         kubeconfig1=resolve_kubeconfig(kubeconfig1),
                         kubeconfig2=resolve_kubeconfig(kubeconfig2), **common)

    # kubeconfig1 stands in for kubeconfig when only it was given
    config_path = resolve_kubeconfig(kubeconfig or kubeconfig1)
    if wants_single:
        return RunConfig(mode=RunMode.LIVE_SINGLE_FILE, kubeconfig=config_path,
                         output_file=output_file, single_file=True, **common)
    return RunConfig(mode=RunMode.LIVE_DIRECTORY, kubeconfig=config_path, **common)
