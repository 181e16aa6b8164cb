"""Validation pipeline: run the five category validators and aggregate.

:class:`ValidationPipeline` is the single entry point used by the CLI and
by the iterative loop.  A run always returns a complete
:class:`~quality_gates.domain.aggregates.ValidationReport`, even when one
validator fails or the run exceeds its wall-clock budget.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from datetime import datetime, timezone

import numpy as np

from quality_gates.domain.aggregates import (
    OverallResult,
    ValidationMetadata,
    ValidationReport,
)
from quality_gates.domain.enums import (
    Category,
    Effort,
    RecommendationPriority,
    Severity,
    Status,
)
from quality_gates.domain.values import (
    CATEGORY_WEIGHTS,
    CategoryResult,
    PrioritizedRecommendation,
    clamp_score,
)
from quality_gates.infrastructure.audit import AuditSession, BaseVisualAuditor
from quality_gates.infrastructure.commands import CommandRunner
from quality_gates.infrastructure.config import CategoryThresholds, ValidationConfig
from quality_gates.infrastructure.report_store import ReportStore, new_id
from quality_gates.services.discovery import discover_recent_files
from quality_gates.services.static_analysis import StaticAnalyzer
from quality_gates.services.validators import BaseCategoryValidator, default_validators

logger = logging.getLogger(__name__)

WARNING_FLOOR = 70
RECOMMENDATION_CEILING = 85

_WEIGHT_VECTOR = np.array([CATEGORY_WEIGHTS[c] for c in Category], dtype=float)


# ===================================================================== #
#  Aggregation helpers                                                   #
# ===================================================================== #


def weighted_score(categories: Sequence[CategoryResult]) -> int:
    """Weighted sum of the category scores, rounded half-up."""
    scores = np.array([r.score for r in categories], dtype=float)
    return clamp_score(float(np.dot(_WEIGHT_VECTOR, scores)))


def determine_status(score: int, blockers: Sequence[str], thresholds: CategoryThresholds) -> Status:
    if blockers:
        return Status.FAIL
    if score >= thresholds.overall:
        return Status.PASS
    if score >= WARNING_FLOOR:
        return Status.WARNING
    return Status.FAIL


def generate_recommendations(
    categories: Sequence[CategoryResult],
) -> list[PrioritizedRecommendation]:
    """One recommendation per category scoring below 85, most urgent first."""
    recommendations: list[PrioritizedRecommendation] = []
    for result in categories:
        if result.score >= RECOMMENDATION_CEILING:
            continue
        if result.score < 60:
            priority = RecommendationPriority.CRITICAL
        elif result.score < 75:
            priority = RecommendationPriority.HIGH
        else:
            priority = RecommendationPriority.MEDIUM

        count = len(result.issues)
        if count > 10:
            effort = Effort.HIGH
        elif count > 5:
            effort = Effort.MEDIUM
        else:
            effort = Effort.LOW

        recommendations.append(
            PrioritizedRecommendation(
                category=result.category,
                priority=priority,
                action=f"Improve {result.category.label.lower()}",
                description=(
                    f"Current score: {result.score}/100. "
                    f"Focus on addressing {count} issues."
                ),
                estimated_effort=effort,
                impact=Effort.HIGH if priority == RecommendationPriority.CRITICAL else Effort.MEDIUM,
            )
        )
    # sorted() is stable, so category order is kept within a tier
    return sorted(recommendations, key=lambda r: r.priority.rank)


def _messages(categories: Sequence[CategoryResult], severity: Severity) -> list[str]:
    return list(
        dict.fromkeys(
            issue.message
            for result in categories
            for issue in result.issues
            if issue.severity == severity
        )
    )


# ===================================================================== #
#  Pipeline                                                              #
# ===================================================================== #


class ValidationPipeline:
    """Run all category validators over a changeset and build a report.

    Parameters
    ----------
    config:
        Validation policy.  Defaults to :class:`ValidationConfig`.
    auditor:
        Visual/audit collaborator.  ``None`` (or
        ``config.skip_screenshots``) restricts validators to static
        inspection.
    command_runner:
        Runner for the lint, type-check and bundle commands.
    validators:
        Override the default validator set.  Results are still reported in
        category order.
    store:
        Where finished reports are persisted.  Defaults to a
        :class:`ReportStore` on ``config.reports_dir``.
    persist:
        Set to ``False`` to skip persistence entirely.
    """

    def __init__(
        self,
        config: ValidationConfig | None = None,
        auditor: BaseVisualAuditor | None = None,
        command_runner: CommandRunner | None = None,
        validators: Sequence[BaseCategoryValidator] | None = None,
        store: ReportStore | None = None,
        persist: bool = True,
    ) -> None:
        self._config = config or ValidationConfig()
        self._config.validate()
        self._auditor = auditor
        if validators is None:
            analyzer = None
            if self._config.run_static_analysis:
                analyzer = StaticAnalyzer(self._config, command_runner)
            validators = default_validators(self._config, analyzer)
        self._validators = list(validators)
        self._store = store if store is not None else ReportStore(self._config.reports_dir)
        self._persist = persist

    @property
    def config(self) -> ValidationConfig:
        return self._config

    @property
    def store(self) -> ReportStore:
        return self._store

    async def run_complete_validation(
        self,
        changed_files: Sequence[str] | None = None,
    ) -> ValidationReport:
        """Validate *changed_files* (or recently modified sources) and report.

        Never raises for validator failures or timeouts; both are expressed
        in the returned report.
        """
        run_id = new_id("validation")
        started = time.monotonic()
        files = list(changed_files or [])
        results: dict[Category, CategoryResult] = {}
        timed_out = False

        logger.info("ValidationPipeline: run %s started (%d files)", run_id, len(files))
        try:
            await asyncio.wait_for(
                self._run_validators(files, results), timeout=self._config.max_duration
            )
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning(
                "ValidationPipeline: run %s timed out after %.1fs with %d of %d categories",
                run_id,
                self._config.max_duration,
                len(results),
                len(Category),
            )

        report = self._build_report(run_id, files, results, started, timed_out)
        logger.info(
            "ValidationPipeline: run %s finished: %s (%d/100)",
            run_id,
            report.overall.status.value,
            report.overall.score,
        )
        if self._persist:
            try:
                self._store.save_report(report)
            except OSError:
                logger.exception("ValidationPipeline: could not persist report %s", run_id)
        return report

    async def _run_validators(
        self,
        files: list[str],
        results: dict[Category, CategoryResult],
    ) -> None:
        if not files:
            discovered = await asyncio.to_thread(
                discover_recent_files,
                self._config.source_root,
                self._config.source_extensions,
                self._config.discovery_limit,
            )
            files.extend(discovered)

        audit = None
        if self._auditor is not None and not self._config.skip_screenshots:
            audit = AuditSession(self._auditor, list(self._config.urls))

        for validator in self._validators:
            try:
                results[validator.category] = await validator.validate(files, audit)
            except Exception as exc:
                logger.exception(
                    "ValidationPipeline: %s raised", type(validator).__name__
                )
                results[validator.category] = validator.failure_result(exc)

    def _build_report(
        self,
        run_id: str,
        files: list[str],
        results: dict[Category, CategoryResult],
        started: float,
        timed_out: bool,
    ) -> ValidationReport:
        categories = tuple(results.get(c) or CategoryResult.empty(c) for c in Category)
        score = weighted_score(categories)

        blockers = _messages(categories, Severity.ERROR)
        if timed_out:
            blockers.append(
                f"Validation timed out after {self._config.max_duration:g}s"
            )
        warnings = _messages(categories, Severity.WARNING)

        thresholds = self._config.thresholds
        audited = self._auditor is not None and not self._config.skip_screenshots
        return ValidationReport(
            run_id=run_id,
            overall=OverallResult(
                status=determine_status(score, blockers, thresholds),
                score=score,
                timestamp=datetime.now(timezone.utc).isoformat(),
                duration=round(time.monotonic() - started, 3),
            ),
            categories=categories,
            recommendations=tuple(generate_recommendations(categories)),
            blockers=tuple(blockers),
            warnings=tuple(warnings),
            metadata=ValidationMetadata(
                version=self._config.version,
                environment=self._config.environment,
                base_url=self._config.base_url,
                tested_urls=() if not audited else tuple(self._config.urls),
                changed_files=tuple(files),
                themes_tested=() if not audited else tuple(self._config.themes),
                viewports_tested=() if not audited else tuple(self._config.viewports),
                categories_run=tuple(c for c in Category if c in results),
            ),
        )
