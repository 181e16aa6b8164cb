"""Iteration evaluation for the correction loop.

Pure functions that judge one validation report against the loop's success
thresholds and describe how it changed relative to the previous iteration.
"""

from __future__ import annotations

from quality_gates.domain.aggregates import ValidationReport
from quality_gates.domain.enums import Category
from quality_gates.infrastructure.config import CategoryThresholds


def meets_success_threshold(report: ValidationReport, thresholds: CategoryThresholds) -> bool:
    """Return ``True`` only if every category **and** the overall score pass.

    A high overall score never compensates for a single category below its
    threshold.
    """
    for result in report.categories:
        if result.score < thresholds.for_category(result.category):
            return False
    return report.overall.score >= thresholds.overall


def failing_categories(
    report: ValidationReport, thresholds: CategoryThresholds
) -> list[Category]:
    """Categories of *report* scoring below their threshold."""
    return [
        r.category
        for r in report.categories
        if r.score < thresholds.for_category(r.category)
    ]


def calculate_improvements(
    current: ValidationReport,
    previous: ValidationReport | None,
) -> list[str]:
    """Describe score changes from *previous* to *current*.

    Parameters
    ----------
    current:
        Report of the iteration being recorded.
    previous:
        Report of the preceding iteration, or ``None`` for the first one.

    Returns
    -------
    list[str]
        Human-readable lines, overall first, then per category in category
        order.  Only used for reporting.
    """
    if previous is None:
        return ["Initial implementation generated"]

    lines: list[str] = []
    delta = current.overall.score - previous.overall.score
    if delta > 0:
        lines.append(
            f"Overall score improved by {delta} points "
            f"({previous.overall.score} -> {current.overall.score})"
        )
    elif delta < 0:
        lines.append(
            f"Overall score decreased by {-delta} points "
            f"({previous.overall.score} -> {current.overall.score})"
        )

    before = previous.scores
    for category, score in current.scores.items():
        change = score - before[category]
        if change > 0:
            lines.append(f"{category.label} improved by {change} points")
        elif change < 0:
            lines.append(f"{category.label} decreased by {-change} points")

    return lines or ["No score change from previous iteration"]
