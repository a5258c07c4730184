#!/usr/bin/env python3
"""
KUBECENSUS ENGINE - The Orchestrator
------------------------------------
The CollectorEngine drives one invocation end to end: it prepares the
output location, produces inventories (live or from must-gather bundles),
hands them to the exporter and, in comparison mode, to the diff engine.

Fatal problems (bad configuration, unusable bundle, unreachable cluster)
propagate as KubeCensusError subclasses before anything is written.
Per-unit problems are only ever counted in the returned summary.

Author: KubeCensus Team
Date: 2026-10-18
"""

import logging
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from kubecensus.cluster.collector import CollectionResult, LiveCollector
from kubecensus.cluster.version import detect_cluster_version
from kubecensus.core.config import RunConfig, RunMode
from kubecensus.core.errors import ConfigError, KubeCensusError, VersionDetectionError
from kubecensus.core.keys import sanitize_cluster_name
from kubecensus.diff.engine import DiffEngine
from kubecensus.ingest.parser import IngestResult, MustGatherParser
from kubecensus.output.exporter import KubeExporter
from kubecensus.output.importer import import_capture
from kubecensus.rules.deprecation import PolicyEngine
from kubecensus.validator.preflight import must_gather_name, validate_must_gather_path

logger = logging.getLogger("kubecensus.engine")


def capture_stems(names: List[str]) -> List[str]:
    """
    Filename stems for the comparison captures. Names that sanitize to the
    same string get a positional suffix so neither capture overwrites the
    other.
    """
    stems = [sanitize_cluster_name(name) for name in names]
    if len(set(stems)) < len(stems):
        stems = [f"{stem}-{i}" for i, stem in enumerate(stems, 1)]
    return stems


def _default_cluster_factory(kubeconfig: Path) -> Any:
    from kubecensus.cluster.client import KubeClusterClient
    return KubeClusterClient.from_kubeconfig(kubeconfig)


def _default_cluster_namer(kubeconfig: Path) -> str:
    from kubecensus.cluster.client import get_cluster_name
    return get_cluster_name(kubeconfig)


class CollectorEngine:
    """
    Principal orchestrator. Every mode returns a summary dictionary that the
    CLI renders; nothing here prints.
    """

    def __init__(self, config: RunConfig,
                 cluster_factory: Optional[Callable[[Path], Any]] = None,
                 cluster_namer: Optional[Callable[[Path], str]] = None,
                 policy: Optional[PolicyEngine] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.config = config
        self.cluster_factory = cluster_factory or _default_cluster_factory
        self.cluster_namer = cluster_namer or _default_cluster_namer
        self.policy = policy or PolicyEngine()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.exporter = KubeExporter()
        self.parser = MustGatherParser()

    def run(self) -> Dict[str, Any]:
        """Dispatches to the handler of the configured mode."""
        handlers = {
            RunMode.LIVE_DIRECTORY: self.run_live_directory,
            RunMode.LIVE_SINGLE_FILE: self.run_live_single_file,
            RunMode.LIVE_COMPARISON: self.run_live_comparison,
            RunMode.MUST_GATHER: self.run_must_gather,
            RunMode.MUST_GATHER_COMPARISON: self.run_must_gather_comparison,
            RunMode.IMPORT: self.run_import,
        }
        return handlers[self.config.mode]()

    # --- Output preparation ---

    def clean_directory(self, path: Path) -> int:
        """Removes everything inside `path`; returns the number of entries removed."""
        if not path.exists():
            return 0
        removed = 0
        for entry in sorted(path.iterdir()):
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                raise KubeCensusError(f"failed to remove {entry}: {e}")
            logger.debug(f"Removed: {entry}")
            removed += 1
        return removed

    def _prepare_directory(self, path: Path):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise KubeCensusError(f"failed to create output directory {path}: {e}")
        if self.config.clean:
            self.clean_directory(path)

    def _prepare_file(self, path: Path):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if self.config.clean and path.exists():
                path.unlink()
        except OSError as e:
            raise KubeCensusError(f"failed to prepare output file {path}: {e}")

    # --- Inventory producers ---

    def collect_live(self, kubeconfig: Path) -> CollectionResult:
        """Connects, detects the version (fail-open) and collects."""
        cluster = self.cluster_factory(kubeconfig)
        try:
            cluster_version = detect_cluster_version(cluster)
        except VersionDetectionError as e:
            logger.warning(f"Warning: failed to detect cluster version: {e}")
            cluster_version = None

        collector = LiveCollector(cluster, policy=self.policy, timeout=self.config.timeout)
        return collector.collect(cluster_version)

    def ingest_must_gather(self, path: Path) -> IngestResult:
        """Ingests a bundle that already passed pre-flight validation."""
        logger.debug(f"Processing must-gather directory: {path}")
        return self.parser.ingest(path)

    # --- Modes ---

    def run_live_directory(self) -> Dict[str, Any]:
        output_dir = self.config.output_dir
        self._prepare_directory(output_dir)
        result = self.collect_live(self.config.kubeconfig)
        written = self.exporter.write_directory(result.inventory, output_dir, generated_at=self.clock())

        return self.generate_summary(
            "Collection Summary", collected=len(written.written), skipped=result.skipped_count,
            errors=result.errors + written.errors, output=output_dir, duration=result.duration,
            cluster_version=result.cluster_version,
        )

    def run_live_single_file(self) -> Dict[str, Any]:
        output_file = self.config.output_file
        self._prepare_file(output_file)
        result = self.collect_live(self.config.kubeconfig)
        self.exporter.write_single_file(result.inventory, output_file)

        return self.generate_summary(
            "Collection Summary", collected=result.collected, skipped=result.skipped_count,
            errors=result.errors, output=output_file, duration=result.duration,
            cluster_version=result.cluster_version,
        )

    def run_must_gather(self) -> Dict[str, Any]:
        started = time.monotonic()
        path = self.config.must_gather
        # Validate before touching the output location
        warnings = validate_must_gather_path(path)

        if self.config.single_file:
            self._prepare_file(self.config.output_file)
        else:
            self._prepare_directory(self.config.output_dir)

        result = self.ingest_must_gather(path)
        errors = [(str(p), msg) for p, msg in result.errors]

        if self.config.single_file:
            output = self.exporter.write_single_file(result.inventory, self.config.output_file)
            collected = len(result.inventory)
        else:
            output = self.config.output_dir
            written = self.exporter.write_directory(result.inventory, output, generated_at=self.clock())
            collected = len(written.written)
            errors += written.errors

        return self.generate_summary(
            "Must-Gather Processing Summary", collected=collected, skipped=result.documents_dropped,
            errors=errors, output=output, duration=time.monotonic() - started,
            warnings=warnings, documents=result.documents_accepted,
        )

    def _compare(self, title: str, sources: List[Tuple[str, Callable[[Path], Dict[str, Any]]]]) -> Dict[str, Any]:
        """
        Shared comparison flow: both captures are produced one after the
        other into comparison/, then diffed from their rendered form.
        """
        started = time.monotonic()
        compare_dir = self.config.comparison_dir
        try:
            compare_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise KubeCensusError(f"failed to create comparison directory: {e}")

        stems = capture_stems([name for name, _ in sources])
        captures = []
        for (name, produce), stem in zip(sources, stems):
            target = compare_dir / f"{stem}-resources.yaml"
            logger.info(f"Capturing {name} into {target}")
            summary = produce(target)
            captures.append((name, target, summary))

        (name1, file1, summary1), (name2, file2, summary2) = captures
        diff_file = compare_dir / f"diff-{stems[0]}-vs-{stems[1]}.txt"
        report = DiffEngine(title).diff_files(file1, file2, diff_file, name1, name2, generated_at=self.clock())

        return {
            "title": title,
            "mode": self.config.mode.value,
            "sources": [summary1, summary2],
            "names": [name1, name2],
            "outputs": [str(file1), str(file2)],
            "diff_file": str(diff_file),
            "diff": report,
            "duration": time.monotonic() - started,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def run_live_comparison(self) -> Dict[str, Any]:
        kubeconfigs = [self.config.kubeconfig1, self.config.kubeconfig2]
        names = []
        for path in kubeconfigs:
            try:
                names.append(self.cluster_namer(path))
            except KubeCensusError as e:
                raise ConfigError(f"failed to get cluster name from {path}: {e}")

        def producer(kubeconfig: Path) -> Callable[[Path], Dict[str, Any]]:
            def produce(target: Path) -> Dict[str, Any]:
                result = self.collect_live(kubeconfig)
                self.exporter.write_single_file(result.inventory, target)
                return self.generate_summary(
                    "Collection Summary", collected=result.collected, skipped=result.skipped_count,
                    errors=result.errors, output=target, duration=result.duration,
                    cluster_version=result.cluster_version,
                )
            return produce

        return self._compare("Cluster Comparison Report",
                             [(name, producer(path)) for name, path in zip(names, kubeconfigs)])

    def run_must_gather_comparison(self) -> Dict[str, Any]:
        bundles = list(zip(("must-gather1", "must-gather2"), [self.config.must_gather1, self.config.must_gather2]))
        # Both bundles are validated before either is processed
        warnings_by_label = {}
        for label, path in bundles:
            try:
                warnings_by_label[label] = validate_must_gather_path(path)
            except KubeCensusError as e:
                raise type(e)(f"invalid {label}: {e}")

        def producer(path: Path, warnings: List[str]) -> Callable[[Path], Dict[str, Any]]:
            def produce(target: Path) -> Dict[str, Any]:
                result = self.ingest_must_gather(path)
                self.exporter.write_single_file(result.inventory, target)
                return self.generate_summary(
                    "Must-Gather Processing Summary", collected=len(result.inventory),
                    skipped=result.documents_dropped,
                    errors=[(str(p), msg) for p, msg in result.errors], output=target,
                    duration=result.duration, warnings=warnings, documents=result.documents_accepted,
                )
            return produce

        return self._compare("Must-Gather Comparison Report",
                             [(must_gather_name(path), producer(path, warnings_by_label[label]))
                              for label, path in bundles])

    def run_import(self) -> Dict[str, Any]:
        started = time.monotonic()
        input_file = self.config.import_file
        if not input_file.is_file():
            raise ConfigError(f"input file does not exist: {input_file}")

        output_dir = self.config.output_dir
        self._prepare_directory(output_dir)
        result = import_capture(input_file, output_dir, generated_at=self.clock())

        return self.generate_summary(
            "Import Summary", collected=len(result.written), errors=result.errors,
            output=output_dir, duration=time.monotonic() - started,
        )

    # --- Reporting ---

    def generate_summary(self, title: str, collected: int, errors: List[Tuple[str, str]],
                         output: Path, duration: float, skipped: int = 0,
                         **extra: Any) -> Dict[str, Any]:
        """SRE-style run metrics shared by every mode."""
        summary = {
            "title": title,
            "mode": self.config.mode.value,
            "successful": collected,
            "skipped": skipped,
            "errors": len(errors),
            "error_details": list(errors),
            "output": str(output),
            "duration": duration,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }
        summary.update(extra)
        return summary
