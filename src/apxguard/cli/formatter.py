# src/apxguard/cli/formatter.py
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from apxguard.core.models import AggregateReport
from apxguard.rules.labels import ScanSummary

# Initialize the Rich console for high-quality terminal output
console = Console()


class GuardFormatter:
    """
    GuardFormatter: the visual side of the CLI.
    Renders Config Guard reports and derived labels for the terminal.
    """

    def __init__(self, out: Console = console):
        self.console = out

    def print_report_table(self, report: AggregateReport):
        """
        Builds the per-pack table, most severe packs first.
        """
        table = Table(title="Config Guard Lite Report", show_header=True, header_style="bold magenta")
        table.add_column("Pack", style="cyan")
        table.add_column("Version", style="dim")
        table.add_column("Namespace")
        table.add_column("Environment")
        table.add_column("Missing Env", justify="right")
        table.add_column("Stale Secrets", justify="right")
        table.add_column("Result", justify="center")

        for pack in report.packs:
            table.add_row(
                pack.id,
                pack.version,
                pack.namespace or "-",
                pack.environment or "-",
                f"{pack.missing_env}/{pack.env_count}",
                f"{pack.stale_secrets}/{pack.secrets_count}",
                "❌" if pack.severity else "✅",
            )

        self.console.print(table)

    def print_totals(self, report: AggregateReport):
        color = "red" if report.missing_env or report.stale_secrets else "green"
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Packs:    {report.total_packs}\n"
            f"Missing Env:    [{color}]{report.missing_env}[/{color}]\n"
            f"Stale Secrets:  [{color}]{report.stale_secrets}[/{color}]",
            border_style="dim"
        ))

    def print_labels(self, labels: list, blocking: bool):
        if not labels:
            self.console.print("[dim]ℹ No labels derived from the semantic diff.[/dim]")
        for label in labels:
            self.console.print(f"[bold cyan]🏷  {label}[/bold cyan]")
        if blocking:
            self.console.print("[bold red]⚠️  Security semantic debt detected (blocking)[/bold red]")

    def print_scan_summary(self, scan: ScanSummary):
        """
        Prints the semantic-debt headline and the top conflicts, when present.
        """
        if scan.debt_score is not None:
            headline = f"Semantic Debt Score: {scan.debt_score:.1f}%"
            if scan.annual_cost is not None:
                headline += f" (est. ${scan.annual_cost:,.0f}/yr)"
            self.console.print(f"[bold yellow]📉 {headline}[/bold yellow]")
        if scan.conflicts:
            conflicts = ", ".join(f"{key} ({severity})" for key, severity in scan.conflicts)
            self.console.print(f"[bold]Top conflicts:[/bold] {conflicts}")
