# src/kubecensus/cli/formatter.py
from typing import Any, Dict, List, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kubecensus.core.models import DiffReport

# Initialize the Rich console for high-quality terminal output
console = Console()


class KubeFormatter:
    """
    KubeFormatter: the visual side of the CLI.
    Responsible for rendering run summaries, error tables and diff reports.
    """

    def __init__(self, out: Console = None):
        self.console = out or console

    def print_summary(self, summary: Dict[str, Any]):
        """
        The metrics panel shown at the end of every collection, ingestion
        or import step.
        """
        lines = [
            f"[bold white]{summary['title']}[/bold white]",
            "════════════════════════════════════════",
        ]
        if summary.get("cluster_version") is not None:
            lines.append(f"Cluster Version: {summary['cluster_version']}")
        if summary.get("documents") is not None:
            lines.append(f"Documents:       {summary['documents']}")
        lines += [
            f"Collected:       [green]{summary['successful']}[/green]",
            f"Skipped:         [yellow]{summary['skipped']}[/yellow]",
            f"Errors:          [red]{summary['errors']}[/red]",
            f"Output:          [cyan]{summary['output']}[/cyan]",
            f"Duration:        {summary['duration']:.2f}s",
        ]
        self.console.print(Panel("\n".join(lines), border_style="dim"))

        for warning in summary.get("warnings", []):
            self.console.print(f"[bold yellow]⚠️  Warning:[/bold yellow] {warning}")

    def print_errors(self, errors: List[Tuple[str, str]]):
        """Per-unit failures, only shown in verbose mode."""
        if not errors:
            return

        table = Table(title="Recorded Errors", show_lines=True, header_style="bold magenta")
        table.add_column("Unit", style="cyan")
        table.add_column("Reason", style="white")
        for unit, reason in errors:
            table.add_row(unit, reason)
        self.console.print(table)

    def print_diff(self, report: DiffReport, diff_file: str):
        """
        Side-by-side view of the type-level differences between the two
        sources, followed by the totals.
        """
        table = Table(title="Resource Type Differences", show_lines=False, header_style="bold magenta")
        table.add_column(f"Only in {report.name_first}", style="red")
        table.add_column(f"Only in {report.name_second}", style="green")

        rows = max(len(report.only_in_first), len(report.only_in_second))
        for i in range(rows):
            left = report.only_in_first[i] if i < len(report.only_in_first) else ""
            right = report.only_in_second[i] if i < len(report.only_in_second) else ""
            table.add_row(left, right)

        if rows:
            self.console.print(table)
        else:
            self.console.print("[dim]ℹ Both sources expose the same resource types.[/dim]")

        self.console.print(Panel(
            f"[bold white]Comparison Summary[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total in {report.name_first}: {report.total_first}\n"
            f"Total in {report.name_second}: {report.total_second}\n"
            f"Only in {report.name_first}: [red]{len(report.only_in_first)}[/red]\n"
            f"Only in {report.name_second}: [green]{len(report.only_in_second)}[/green]\n"
            f"Common to both: {len(report.common)}\n"
            f"Report: [cyan]{diff_file}[/cyan]",
            border_style="dim"
        ))
