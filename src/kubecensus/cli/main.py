#!/usr/bin/env python3
"""
KUBECENSUS CLI - Collector Front Door
-------------------------------------
Parses the command line into a RunConfig, hands it to the CollectorEngine
and renders the returned summaries with rich.

Exit status is 1 for fatal errors (configuration, pre-flight, cluster
connection) and 0 whenever the step completed, even if individual resource
types or files were recorded as errors.

Author: KubeCensus Team
Date: 2026-10-18
"""

import sys
import logging
import argparse
from typing import Any, Dict, List, Optional

# Rich library components for high-fidelity terminal UI
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from kubecensus.cli.formatter import KubeFormatter
from kubecensus.core.config import DEFAULT_OUTPUT_DIR, DEFAULT_TIMEOUT_SECONDS, RunConfig, RunMode, build_config
from kubecensus.core.engine import CollectorEngine
from kubecensus.core.errors import KubeCensusError

VERSION = "1.0.0"

# Global console for consistent styling across the application
console = Console()

logger = logging.getLogger("kubecensus.cli")

_MODE_TITLES = {
    RunMode.LIVE_DIRECTORY: "Live Collection",
    RunMode.LIVE_SINGLE_FILE: "Live Collection (single file)",
    RunMode.LIVE_COMPARISON: "Cluster Comparison",
    RunMode.MUST_GATHER: "Must-Gather Processing",
    RunMode.MUST_GATHER_COMPARISON: "Must-Gather Comparison",
    RunMode.IMPORT: "Capture Import",
}


class KubeCensusCLI:
    """
    CLI wrapper that translates flags into Engine actions and renders the
    results.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubecensus",
            description="KubeCensus - Kubernetes resource inventory collector and comparator",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                "Examples:\n"
                "  kubecensus --kubeconfig ~/.kube/config --output ./output\n"
                "  kubecensus --single-file\n"
                "  kubecensus --kubeconfig1 a.yaml --kubeconfig2 b.yaml\n"
                "  kubecensus --must-gather ./must-gather.local.123\n"
                "  kubecensus --must-gather1 ./mg-a --must-gather2 ./mg-b\n"
                "  kubecensus --import ./output/all-resources.yaml --output ./split"
            )
        )
        self.formatter = KubeFormatter(console)
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags."""
        p = self.parser
        p.add_argument("--version", action="version", version=f"kubecensus v{VERSION}")

        live = p.add_argument_group("live collection")
        live.add_argument("--kubeconfig", help="Path to kubeconfig (default: $KUBECONFIG or ~/.kube/config)")
        live.add_argument("--kubeconfig1", help="Kubeconfig of the first cluster (comparison mode)")
        live.add_argument("--kubeconfig2", help="Kubeconfig of the second cluster (comparison mode)")
        live.add_argument("--compare", action="store_true", help="Compare two clusters (needs --kubeconfig1/2)")
        live.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT_SECONDS,
                          help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT_SECONDS})")

        offline = p.add_argument_group("offline sources")
        offline.add_argument("--must-gather", help="Process a must-gather directory instead of a live cluster")
        offline.add_argument("--must-gather1", help="First must-gather directory (comparison mode)")
        offline.add_argument("--must-gather2", help="Second must-gather directory (comparison mode)")
        offline.add_argument("--import", dest="import_file", metavar="FILE",
                             help="Split a single-file capture into one file per resource type")

        out = p.add_argument_group("output")
        out.add_argument("--output", default=DEFAULT_OUTPUT_DIR,
                         help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})")
        out.add_argument("--file", help="Write everything to this single file")
        out.add_argument("--single-file", action="store_true",
                         help="Write everything to <output>/all-resources.yaml")
        out.add_argument("--clean", action="store_true", help="Clean the output location before writing")
        out.add_argument("--verbose", action="store_true", help="Enable debug logging")

    def print_header(self, subtitle: str):
        """Renders the KubeCensus splash header."""
        console.print(Panel.fit(
            f"[bold cyan]KubeCensus v{VERSION}[/bold cyan]\n"
            "══════════════════════════════════════════════════════════════════",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def build_config(self, args: argparse.Namespace) -> RunConfig:
        return build_config(
            kubeconfig=args.kubeconfig,
            kubeconfig1=args.kubeconfig1,
            kubeconfig2=args.kubeconfig2,
            must_gather=args.must_gather,
            must_gather1=args.must_gather1,
            must_gather2=args.must_gather2,
            output=args.output,
            file=args.file,
            single_file=args.single_file,
            clean=args.clean,
            compare=args.compare,
            import_file=args.import_file,
            verbose=args.verbose,
            timeout=args.timeout,
        )

    def _run_engine(self, config: RunConfig) -> Dict[str, Any]:
        """Runs the engine behind a spinner; the engine itself never prints."""
        engine = CollectorEngine(config)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True
        ) as progress:
            progress.add_task(f"{_MODE_TITLES[config.mode]}...", total=None)
            return engine.run()

    def _render(self, result: Dict[str, Any], verbose: bool):
        summaries: List[Dict[str, Any]] = result.get("sources", [result])
        for summary in summaries:
            self.formatter.print_summary(summary)
            if verbose:
                self.formatter.print_errors(summary["error_details"])

        if "diff" in result:
            self.formatter.print_diff(result["diff"], result["diff_file"])

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point; returns the process exit status."""
        args = self.parser.parse_args(argv)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        try:
            config = self.build_config(args)
            self.print_header(_MODE_TITLES[config.mode])
            result = self._run_engine(config)
        except (KubeCensusError, OSError) as e:
            logger.debug("Fatal error", exc_info=True)
            console.print(f"[bold red]Error:[/bold red] {e}")
            return 1

        self._render(result, config.verbose)
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeCensusCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
