"""Rich-based console rendering of validation reports and loop results.

:class:`ConsoleDashboard` renders tables with colour through ``rich``.  With
``use_rich=False`` it writes the same information as plain text, which is
what CI logs and the ``summary`` output format use.
"""

from __future__ import annotations

import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from quality_gates.domain.aggregates import LoopResult, ValidationReport
from quality_gates.domain.enums import RecommendationPriority, Status

_STATUS_STYLE = {
    Status.PASS: "green",
    Status.WARNING: "yellow",
    Status.FAIL: "red",
}

_PRIORITY_STYLE = {
    RecommendationPriority.CRITICAL: "bold red",
    RecommendationPriority.HIGH: "red",
    RecommendationPriority.MEDIUM: "yellow",
    RecommendationPriority.LOW: "dim",
}


def format_summary(report: ValidationReport) -> str:
    """Plain-text summary of *report*, one line per category."""
    lines = [
        f"Validation {report.run_id}: {report.overall.status.value.upper()} "
        f"({report.overall.score}/100, {report.overall.duration:.1f}s)"
    ]
    for result in report.categories:
        lines.append(
            f"  {result.category.label:<24} {result.score:>3}/100  "
            f"{result.status.value:<4}  {len(result.issues)} issues"
        )
    if report.blockers:
        lines.append("Blockers:")
        lines.extend(f"  - {b}" for b in report.blockers)
    if report.recommendations:
        lines.append("Recommendations:")
        lines.extend(
            f"  [{r.priority.value}] {r.action}: {r.description}"
            for r in report.recommendations
        )
    return "\n".join(lines)


def format_loop_summary(result: LoopResult) -> str:
    """Plain-text summary of *result*."""
    verdict = "SUCCESS" if result.success else "ESCALATED"
    lines = [
        f"Loop {result.loop_id}: {verdict} ({result.stop_reason.value}) "
        f"score {result.final_score}/100 after {result.total_iterations} iteration(s) "
        f"in {result.total_duration:.1f}s"
    ]
    for it in result.iterations:
        lines.append(
            f"  #{it.iteration}: {it.score}/100 "
            f"{'pass' if it.success else 'fail'}, "
            f"{len(it.applied_corrections)}/{len(it.corrections)} corrections applied"
        )
        lines.extend(f"      {line}" for line in it.improvements)
    if result.escalation_reason:
        lines.append(f"Escalation: {result.escalation_reason}")
    lines.extend(f"  - {r}" for r in result.final_recommendations)
    return "\n".join(lines)


class ConsoleDashboard:
    """Console presentation layer for reports and loop results.

    Parameters
    ----------
    use_rich:
        Render tables with ``rich`` (default) or print plain text.
    file:
        Output stream.  Defaults to ``sys.stdout``.
    """

    def __init__(self, use_rich: bool = True, file: Any = None) -> None:
        self._file = file or sys.stdout
        self._use_rich = use_rich
        self._console = Console(file=self._file) if use_rich else None

    def _plain_print(self, *args: Any) -> None:
        print(*args, file=self._file)

    # -- public API --------------------------------------------------------

    def print_report(self, report: ValidationReport) -> None:
        """Print a validation report."""
        if self._console is None:
            self._plain_print(format_summary(report))
            return

        status = report.overall.status
        table = Table(
            title=(
                f"Validation {report.run_id}: "
                f"[{_STATUS_STYLE[status]}]{status.value.upper()}[/] "
                f"{report.overall.score}/100"
            ),
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Category", style="bold")
        table.add_column("Score", justify="right")
        table.add_column("Status", justify="center")
        table.add_column("Issues", justify="right")
        table.add_column("Details")

        for result in report.categories:
            style = _STATUS_STYLE[result.status]
            table.add_row(
                result.category.label,
                f"[{style}]{result.score}[/{style}]",
                f"[{style}]{result.status.value}[/{style}]",
                str(len(result.issues)),
                "; ".join(result.details),
            )

        self._console.print()
        self._console.print(table)
        if report.blockers:
            self._console.print("[bold red]Blockers[/bold red]")
            for blocker in report.blockers:
                self._console.print(f"  - {blocker}", markup=False)
        if report.recommendations:
            self._console.print("[bold]Recommendations[/bold]")
            for rec in report.recommendations:
                style = _PRIORITY_STYLE[rec.priority]
                self._console.print(
                    f"  [{style}]{rec.priority.value:<8}[/{style}] "
                    f"{rec.action} [dim]({rec.description})[/dim]"
                )
        self._console.print(
            f"[dim]duration {report.overall.duration:.1f}s, {report.overall.timestamp}[/dim]"
        )
        self._console.print()

    def print_loop_result(self, result: LoopResult) -> None:
        """Print a loop result with one row per iteration."""
        if self._console is None:
            self._plain_print(format_loop_summary(result))
            return

        verdict = "[green]SUCCESS[/green]" if result.success else "[red]ESCALATED[/red]"
        table = Table(
            title=f"Loop {result.loop_id}: {verdict} ({result.stop_reason.value})",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("#", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Success", justify="center")
        table.add_column("Corrections", justify="right")
        table.add_column("Improvements")

        for it in result.iterations:
            table.add_row(
                str(it.iteration),
                str(it.score),
                "[green]yes[/green]" if it.success else "[red]no[/red]",
                f"{len(it.applied_corrections)}/{len(it.corrections)}",
                "\n".join(it.improvements),
            )

        self._console.print()
        self._console.print(table)
        if result.escalation_reason:
            self._console.print(f"[bold red]Escalation:[/bold red] {result.escalation_reason}")
        for rec in result.final_recommendations:
            self._console.print(f"  - {rec}", markup=False)
        self._console.print(
            f"[dim]final score {result.final_score}/100, "
            f"{result.total_iterations} iteration(s), {result.total_duration:.1f}s[/dim]"
        )
        self._console.print()
