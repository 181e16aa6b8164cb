"""Tests for ValidationReport, IterationResult and LoopResult."""

from __future__ import annotations

import pytest

from quality_gates.domain.aggregates import (
    IterationResult,
    LoopResult,
    OverallResult,
    ValidationReport,
)
from quality_gates.domain.enums import Category, CorrectionType, Severity, Status, StopReason
from quality_gates.domain.values import CategoryResult, CorrectionAction


def _overall(status: Status = Status.PASS, score: int = 100) -> OverallResult:
    return OverallResult(status=status, score=score, timestamp="t", duration=0.0)


def _categories() -> tuple[CategoryResult, ...]:
    return tuple(CategoryResult.scored(c, 100, 80) for c in Category)


class TestValidationReport:

    def test_requires_every_category_in_order(self) -> None:
        with pytest.raises(ValueError, match="one result per category"):
            ValidationReport(
                run_id="r",
                overall=_overall(),
                categories=tuple(reversed(_categories())),
            )

    def test_missing_category_rejected(self) -> None:
        with pytest.raises(ValueError):
            ValidationReport(run_id="r", overall=_overall(), categories=_categories()[:4])

    def test_blockers_imply_fail(self) -> None:
        with pytest.raises(ValueError, match="blockers"):
            ValidationReport(
                run_id="r",
                overall=_overall(Status.PASS),
                categories=_categories(),
                blockers=("Image missing alt text",),
            )

    def test_category_lookup(self, make_report) -> None:
        report = make_report({Category.PERFORMANCE: 72})
        assert report.category(Category.PERFORMANCE).score == 72
        assert report.scores[Category.ACCESSIBILITY] == 100

    def test_issues_with_severity(self, make_report) -> None:
        report = make_report(errors={Category.ACCESSIBILITY: ["Image missing alt text"]})
        errors = report.issues_with(Severity.ERROR)
        assert [i.message for i in errors] == ["Image missing alt text"]
        assert report.issues_with(Severity.WARNING) == []
        assert report.overall.status == Status.FAIL


class TestIterationResult:

    def test_deferred_corrections(self, make_report) -> None:
        applied = CorrectionAction(
            type=CorrectionType.TOKEN_REPLACEMENT, file_path="a.tsx", description="applied",
            before="#fff", after="var(--x)", confidence=0.8, automated=True,
        )
        manual = CorrectionAction(
            type=CorrectionType.FILE_EDIT, file_path="a.tsx", description="manual",
            confidence=0.6,
        )
        it = IterationResult(
            iteration=1,
            success=False,
            score=80,
            improvements=("Initial implementation generated",),
            corrections=(applied, manual),
            validation_report=make_report(),
            duration=0.1,
            timestamp="t",
            applied_corrections=(applied,),
        )
        assert it.deferred_corrections == [manual]


class TestLoopResult:

    def test_total_iterations_must_match(self) -> None:
        with pytest.raises(ValueError, match="total_iterations"):
            LoopResult(
                loop_id="l",
                success=False,
                final_score=0,
                total_iterations=2,
                total_duration=0.0,
                escalation_reason="x",
            )

    def test_failure_needs_escalation_reason(self) -> None:
        with pytest.raises(ValueError, match="escalation_reason"):
            LoopResult(
                loop_id="l",
                success=False,
                final_score=0,
                total_iterations=0,
                total_duration=0.0,
            )

    def test_last_iteration_none_when_empty(self) -> None:
        result = LoopResult(
            loop_id="l",
            success=False,
            final_score=0,
            total_iterations=0,
            total_duration=0.0,
            escalation_reason="timeout",
            stop_reason=StopReason.TIMEOUT,
        )
        assert result.last_iteration is None
