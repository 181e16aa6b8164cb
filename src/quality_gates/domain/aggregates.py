"""Aggregates for the quality-gate pipeline.

:class:`ValidationReport` bundles the five category results of one pipeline
run; :class:`IterationResult` and :class:`LoopResult` record the history of
an iterative correction loop.  All three are immutable once built and are
the units persisted by the report store.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import Category, Severity, Status, StopReason
from .values import CategoryResult, CorrectionAction, PrioritizedRecommendation, ValidationIssue


@dataclass(frozen=True)
class OverallResult:
    """Aggregate verdict of a validation run.

    ``duration`` is in seconds; ``timestamp`` is an ISO-8601 UTC string.
    """

    status: Status
    score: int
    timestamp: str
    duration: float


@dataclass(frozen=True)
class ValidationMetadata:
    """What a validation run looked at."""

    version: str
    environment: str
    base_url: str
    tested_urls: tuple[str, ...] = ()
    changed_files: tuple[str, ...] = ()
    themes_tested: tuple[str, ...] = ()
    viewports_tested: tuple[str, ...] = ()
    categories_run: tuple[Category, ...] = ()


@dataclass(frozen=True)
class ValidationReport:
    """Result of one :class:`~quality_gates.services.pipeline.ValidationPipeline` run.

    Invariants
    ----------
    * ``categories`` holds exactly one result per :class:`Category`, in
      enumeration order.
    * ``overall.status`` is ``fail`` whenever ``blockers`` is non-empty.
    """

    run_id: str
    overall: OverallResult
    categories: tuple[CategoryResult, ...]
    recommendations: tuple[PrioritizedRecommendation, ...] = ()
    blockers: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    metadata: ValidationMetadata | None = None

    def __post_init__(self) -> None:
        order = tuple(r.category for r in self.categories)
        if order != tuple(Category):
            raise ValueError(
                "categories must contain one result per category in order, "
                f"got {[c.value for c in order]}"
            )
        if self.blockers and self.overall.status != Status.FAIL:
            raise ValueError("a report with blockers must have overall status 'fail'")

    def category(self, category: Category) -> CategoryResult:
        """Return the result for *category*."""
        return self.categories[list(Category).index(category)]

    @property
    def scores(self) -> dict[Category, int]:
        return {r.category: r.score for r in self.categories}

    def all_issues(self) -> list[ValidationIssue]:
        """Every issue across all categories, in category order."""
        return [issue for result in self.categories for issue in result.issues]

    def issues_with(self, severity: Severity) -> list[ValidationIssue]:
        return [i for i in self.all_issues() if i.severity == severity]


@dataclass(frozen=True)
class IterationResult:
    """One generate -> validate -> (correct) cycle of the iterative loop."""

    iteration: int
    success: bool
    score: int
    improvements: tuple[str, ...]
    corrections: tuple[CorrectionAction, ...]
    validation_report: ValidationReport
    duration: float
    timestamp: str
    applied_corrections: tuple[CorrectionAction, ...] = ()

    @property
    def deferred_corrections(self) -> list[CorrectionAction]:
        """Proposed corrections that were not applied automatically."""
        applied = set(self.applied_corrections)
        return [c for c in self.corrections if c not in applied]


@dataclass(frozen=True)
class LoopResult:
    """Outcome of one :meth:`IterativeAgenticLoop.execute_loop` invocation.

    Invariant: ``total_iterations == len(iterations)``.
    """

    loop_id: str
    success: bool
    final_score: int
    total_iterations: int
    total_duration: float
    iterations: tuple[IterationResult, ...] = ()
    final_recommendations: tuple[str, ...] = ()
    escalation_reason: str | None = None
    stop_reason: StopReason = StopReason.EXHAUSTED
    request: str = ""
    metadata: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.total_iterations != len(self.iterations):
            raise ValueError(
                f"total_iterations ({self.total_iterations}) must equal "
                f"len(iterations) ({len(self.iterations)})"
            )
        if not self.success and not self.escalation_reason:
            raise ValueError("an unsuccessful loop result needs an escalation_reason")

    @property
    def last_iteration(self) -> IterationResult | None:
        return self.iterations[-1] if self.iterations else None
