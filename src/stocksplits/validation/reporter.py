"""
Console reporter for integrity results.

Formats integrity reports using Rich for clear, colored output.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from stocksplits.validation.integrity import FileReport, IntegrityReport


class ConsoleReporter:
    """Formats and displays integrity reports to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_report(self, report: IntegrityReport, *, index_expected: bool = True) -> None:
        """
        Print an integrity report as a formatted table.

        Args:
            report: Report to display.
            index_expected: Mention a missing index when no index report exists.
        """
        table = Table(title="Stock Split Data Validation", show_header=True)
        table.add_column("File", style="cyan", no_wrap=True)
        table.add_column("Kind")
        table.add_column("Status", justify="center")
        table.add_column("Findings", justify="right")

        for result in report.files:
            table.add_row(
                result.file, "year", self._format_status(result), str(len(result.findings))
            )
        if report.index is not None:
            table.add_row(
                report.index.file,
                "index",
                self._format_status(report.index),
                str(len(report.index.findings)),
            )

        self.console.print(table)

        if report.index is None and index_expected:
            self.console.print(
                "[yellow]Index file: not found (run build-index first)[/yellow]"
            )

        self._print_detailed_errors(report)
        self._print_summary(report)

    def _format_status(self, result: FileReport) -> str:
        """
        Format validation status with color.

        Args:
            result: File report.

        Returns:
            Formatted status string with color markup.
        """
        if result.valid:
            return "[green]✓ Pass[/green]"
        return "[red]✗ Fail[/red]"

    def _print_summary(self, report: IntegrityReport) -> None:
        """
        Print summary statistics.

        Args:
            report: Integrity report.
        """
        total = len(report.reports)
        failed = sum(1 for r in report.reports if not r.valid)

        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print(f"  Files checked: {total}")
        self.console.print(f"  [green]Passed: {total - failed}[/green]")
        self.console.print(f"  [red]Failed: {failed}[/red]")
        self.console.print(f"  Findings: {report.finding_count}")
        self.console.print()

        if report.has_errors:
            self.console.print("[bold red]Validation failed![/bold red]")
        else:
            self.console.print("[bold green]All validations passed![/bold green]")

    def _print_detailed_errors(self, report: IntegrityReport) -> None:
        """
        Print findings for every invalid file.

        Args:
            report: Integrity report.
        """
        failed = [r for r in report.reports if not r.valid]

        if not failed:
            return

        self.console.print()
        self.console.print("[bold red]Validation Errors:[/bold red]")

        for result in failed:
            self.console.print()
            self.console.print(f"[bold]{escape(result.file)}[/bold]:")
            for finding in result.findings:
                self.console.print(
                    f"  [dim]{finding.kind.value}[/dim] {escape(finding.message)}"
                )
