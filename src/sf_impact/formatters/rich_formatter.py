"""Rich terminal formatter for sf-impact."""

from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..api import ImpactReport
from ..batch.models import BatchReport
from ..diff.models import ADDED, MODIFIED, REMOVED, DiffRepresentation
from ..impact.models import DetectedConflict, RiskAssessment
from .base import BaseFormatter, Result

_STATUS_STYLE = {
    ADDED: "[green]added[/green]",
    MODIFIED: "[yellow]modified[/yellow]",
    REMOVED: "[red]removed[/red]",
}


def _severity_label(severity: str) -> str:
    if severity == "critical":
        return "[red bold]critical[/red bold]"
    elif severity == "high":
        return "[red]high[/red]"
    elif severity == "medium":
        return "[yellow]medium[/yellow]"
    else:
        return "[green]low[/green]"


def _changed_properties(comparison) -> str:
    return ", ".join(d.property for d in comparison.differences)


class RichFormatter(BaseFormatter):
    """Rich terminal output: summary panel, then one table per finding kind."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render(self, result: Result) -> None:
        if isinstance(result, ImpactReport):
            self._print_report(result)
        elif isinstance(result, DiffRepresentation):
            self._print_diff(result)
        elif isinstance(result, RiskAssessment):
            self._print_risk(result)
        elif isinstance(result, BatchReport):
            self._print_batch(result)
        else:
            raise TypeError(f"Cannot render {type(result).__name__}")

    def format(self, result: Result) -> str:
        # Rich output goes directly to console; return empty string
        self.render(result)
        return ""

    # ── Diff ──────────────────────────────────────────────────────────────

    def _print_diff(self, diff: DiffRepresentation) -> None:
        s = diff.summary
        self.console.print(
            Panel(
                f"Fields:  [green]+{s.fields_added}[/green]  [yellow]~{s.fields_modified}[/yellow]  "
                f"[red]-{s.fields_removed}[/red]  ({s.fields_unchanged} unchanged)\n"
                f"Rules:   [green]+{s.rules_added}[/green]  [yellow]~{s.rules_modified}[/yellow]  "
                f"[red]-{s.rules_removed}[/red]  ({s.rules_unchanged} unchanged)\n"
                f"Changed: [bold]{diff.change_percentage}%[/bold]",
                title=f"[bold cyan]{escape(diff.object_name)}[/bold cyan]",
                expand=False,
            )
        )

        changed = [c for c in diff.fields if c.is_change] + [
            c for c in diff.validation_rules if c.is_change
        ]
        if not changed:
            self.console.print("[green]No changes.[/green]")
            return

        table = Table(show_header=True, show_lines=False, pad_edge=True)
        table.add_column("Kind")
        table.add_column("Name", style="bold")
        table.add_column("Status")
        table.add_column("Changed properties")
        for c in diff.fields:
            if c.is_change:
                table.add_row("field", escape(c.name), _STATUS_STYLE[c.status], _changed_properties(c))
        for c in diff.validation_rules:
            if c.is_change:
                table.add_row("rule", escape(c.name), _STATUS_STYLE[c.status], _changed_properties(c))
        self.console.print(table)

    # ── Risk ──────────────────────────────────────────────────────────────

    def _print_risk(self, risk: RiskAssessment) -> None:
        body = [f"Score: [bold]{risk.score}[/bold]/100   Level: {_severity_label(risk.level)}"]
        if risk.factors:
            body.append("")
            body.extend(f"  - {escape(f)}" for f in risk.factors)
        self.console.print(Panel("\n".join(body), title="[bold cyan]Risk[/bold cyan]", expand=False))
        for rec in risk.recommendations:
            self.console.print(f"  [cyan]>[/cyan] {escape(rec)}")

    # ── Full report ───────────────────────────────────────────────────────

    def _print_report(self, report: ImpactReport) -> None:
        self._print_diff(report.diff)

        if report.field_impacts:
            table = Table(title="Field impacts", show_header=True)
            table.add_column("Field", style="bold")
            table.add_column("Type")
            table.add_column("Severity")
            table.add_column("Description")
            for impact in report.field_impacts:
                table.add_row(
                    escape(impact.field_name),
                    impact.impact_type,
                    _severity_label(impact.severity),
                    escape(impact.description),
                )
            self.console.print(table)

        if report.rule_conflicts:
            table = Table(title="Validation rule conflicts", show_header=True)
            table.add_column("Rule", style="bold")
            table.add_column("Type")
            table.add_column("Severity")
            table.add_column("Description")
            for conflict in report.rule_conflicts:
                table.add_row(
                    escape(conflict.rule_name),
                    conflict.conflict_type,
                    _severity_label(conflict.severity),
                    escape(conflict.description),
                )
            self.console.print(table)

        if report.conflicts:
            self._print_conflicts(report.conflicts)

        if report.removed_field_dependencies:
            table = Table(title="Still referencing removed fields", show_header=True)
            table.add_column("Removed field", style="bold")
            table.add_column("Referenced by")
            table.add_column("Kind")
            for dep in report.removed_field_dependencies:
                table.add_row(
                    escape(dep.target_component), escape(dep.source_component), dep.dependency_type
                )
            self.console.print(table)

        if report.risk is not None:
            self._print_risk(report.risk)

    def _print_conflicts(self, conflicts: List[DetectedConflict]) -> None:
        table = Table(title="Conflicts", show_header=True)
        table.add_column("Severity")
        table.add_column("Type")
        table.add_column("Component", style="bold")
        table.add_column("Description")
        table.add_column("Risk", justify="right")
        for conflict in conflicts:
            table.add_row(
                _severity_label(conflict.severity),
                conflict.type,
                escape(conflict.conflicting_component),
                escape(conflict.description),
                str(conflict.risk_score),
            )
        self.console.print(table)

    # ── Batch ─────────────────────────────────────────────────────────────

    def _print_batch(self, report: BatchReport) -> None:
        analysis, validation = report.analysis, report.validation
        status = "[green]valid[/green]" if validation.is_valid else "[red]invalid[/red]"
        self.console.print(
            Panel(
                f"Status: {status}\n"
                f"Execution order: {escape(' -> '.join(analysis.execution_order)) or '(empty)'}",
                title="[bold cyan]Batch[/bold cyan]",
                expand=False,
            )
        )
        for error in validation.errors:
            self.console.print(f"[red]Error:[/red] {escape(error)}")
        for warning in validation.warnings:
            self.console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
        if analysis.common_changes:
            self.console.print("[bold]Common changes:[/bold]")
            for change in analysis.common_changes:
                self.console.print(f"  - {escape(change)}")
