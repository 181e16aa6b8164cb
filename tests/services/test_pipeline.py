"""Tests for the validation pipeline and report aggregation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from quality_gates.domain.enums import Category, RecommendationPriority, Severity, Status
from quality_gates.domain.values import CategoryResult, VisualAuditResult
from quality_gates.infrastructure.config import CategoryThresholds
from quality_gates.infrastructure.report_store import ReportStore
from quality_gates.services.pipeline import (
    ValidationPipeline,
    determine_status,
    generate_recommendations,
    weighted_score,
)
from quality_gates.services.validators import BaseCategoryValidator, default_validators
from quality_gates.testing import StaticVisualAuditor


def _results(*scores: int) -> list[CategoryResult]:
    return [CategoryResult.scored(c, s, 80) for c, s in zip(Category, scores)]


class TestAggregation:

    def test_weighted_score(self) -> None:
        # 0.25*100 + 0.25*90 + 0.20*85 + 0.15*80 + 0.15*70
        assert weighted_score(_results(100, 90, 85, 80, 70)) == 87

    def test_weighted_score_bounds(self) -> None:
        assert weighted_score(_results(0, 0, 0, 0, 0)) == 0
        assert weighted_score(_results(100, 100, 100, 100, 100)) == 100

    @pytest.mark.parametrize(
        ("score", "blockers", "expected"),
        [
            (90, [], Status.PASS),
            (85, [], Status.PASS),
            (75, [], Status.WARNING),
            (70, [], Status.WARNING),
            (69, [], Status.FAIL),
            (99, ["Image missing alt text"], Status.FAIL),
        ],
    )
    def test_determine_status(self, score, blockers, expected) -> None:
        assert determine_status(score, blockers, CategoryThresholds()) == expected

    def test_recommendations_ordered_by_urgency(self) -> None:
        recs = generate_recommendations(_results(80, 50, 90, 70, 55))
        assert [(r.category, r.priority) for r in recs] == [
            (Category.BRAND_CONSISTENCY, RecommendationPriority.CRITICAL),
            (Category.CODE_QUALITY, RecommendationPriority.CRITICAL),
            (Category.PERFORMANCE, RecommendationPriority.HIGH),
            (Category.STRUCTURAL_COMPLIANCE, RecommendationPriority.MEDIUM),
        ]
        assert recs[0].action == "Improve brand consistency"
        assert recs[0].description == "Current score: 50/100. Focus on addressing 0 issues."

    def test_no_recommendations_at_or_above_85(self) -> None:
        assert generate_recommendations(_results(85, 90, 100, 95, 85)) == []


class TestValidationPipeline:

    @pytest.mark.asyncio
    async def test_clean_changeset_passes(self, static_config, clean_file) -> None:
        pipeline = ValidationPipeline(static_config, persist=False)
        report = await pipeline.run_complete_validation([clean_file])
        assert report.overall.score == 100
        assert report.overall.status == Status.PASS
        assert report.blockers == ()
        assert report.recommendations == ()
        assert all(r.score == 100 for r in report.categories)
        assert report.metadata.changed_files == (clean_file,)
        assert report.metadata.tested_urls == ()
        assert report.metadata.categories_run == tuple(Category)

    @pytest.mark.asyncio
    async def test_image_without_alt_fails(self, static_config, image_file) -> None:
        pipeline = ValidationPipeline(static_config, persist=False)
        report = await pipeline.run_complete_validation([image_file])
        accessibility = report.category(Category.ACCESSIBILITY)
        assert accessibility.score <= 85
        assert any(i.severity == Severity.ERROR for i in accessibility.issues)
        assert "Image missing alt text in Hero.tsx" in report.blockers
        assert report.overall.status == Status.FAIL

    @pytest.mark.asyncio
    async def test_revalidation_is_idempotent(self, static_config, hard_coded_file) -> None:
        pipeline = ValidationPipeline(static_config, persist=False)
        first = await pipeline.run_complete_validation([hard_coded_file])
        second = await pipeline.run_complete_validation([hard_coded_file])
        assert first.run_id != second.run_id
        assert first.categories == second.categories
        assert first.blockers == second.blockers
        assert first.overall.score == second.overall.score

    @pytest.mark.asyncio
    async def test_discovers_files_when_none_given(self, static_config, image_file) -> None:
        pipeline = ValidationPipeline(static_config, persist=False)
        report = await pipeline.run_complete_validation()
        assert report.metadata.changed_files == (image_file,)
        assert report.category(Category.ACCESSIBILITY).issues

    @pytest.mark.asyncio
    async def test_timeout_produces_failing_report(self, static_config, clean_file) -> None:
        config = replace(static_config, skip_screenshots=False, max_duration=0.05)
        auditor = StaticVisualAuditor(VisualAuditResult(), delay=2.0)
        pipeline = ValidationPipeline(config, auditor=auditor, persist=False)
        report = await pipeline.run_complete_validation([clean_file])
        assert report.overall.status == Status.FAIL
        assert report.blockers[-1] == "Validation timed out after 0.05s"
        assert len(report.categories) == len(Category)
        assert report.category(Category.STRUCTURAL_COMPLIANCE).score == 0

    @pytest.mark.asyncio
    async def test_auditor_queried_once_per_run(self, static_config, clean_file) -> None:
        config = replace(static_config, skip_screenshots=False)
        auditor = StaticVisualAuditor(VisualAuditResult())
        pipeline = ValidationPipeline(config, auditor=auditor, persist=False)
        report = await pipeline.run_complete_validation([clean_file])
        assert auditor.visual_calls == 1
        assert auditor.theme_calls == ["/", "/services"]
        assert report.metadata.tested_urls == config.urls
        assert report.metadata.themes_tested == config.themes

    @pytest.mark.asyncio
    async def test_skip_screenshots_never_calls_auditor(self, static_config, clean_file) -> None:
        auditor = StaticVisualAuditor(VisualAuditResult())
        pipeline = ValidationPipeline(static_config, auditor=auditor, persist=False)
        await pipeline.run_complete_validation([clean_file])
        assert auditor.visual_calls == 0

    @pytest.mark.asyncio
    async def test_audit_failure_isolated_per_category(self, static_config, clean_file) -> None:
        config = replace(static_config, skip_screenshots=False)
        pipeline = ValidationPipeline(config, auditor=StaticVisualAuditor(None), persist=False)
        report = await pipeline.run_complete_validation([clean_file])
        assert report.category(Category.CODE_QUALITY).score == 100
        assert report.category(Category.ACCESSIBILITY).score == 0
        assert report.overall.status == Status.FAIL

    @pytest.mark.asyncio
    async def test_validator_exception_isolated(self, static_config, clean_file) -> None:
        class Raising(BaseCategoryValidator):
            category = Category.PERFORMANCE

            async def _inspect(self, files, audit, card):
                raise ValueError("analyzer crashed")

            async def validate(self, files, audit=None):
                raise ValueError("analyzer crashed")

        validators = [
            v if v.category != Category.PERFORMANCE else Raising(static_config)
            for v in default_validators(static_config)
        ]
        pipeline = ValidationPipeline(static_config, validators=validators, persist=False)
        report = await pipeline.run_complete_validation([clean_file])
        assert report.category(Category.PERFORMANCE).score == 0
        assert report.category(Category.ACCESSIBILITY).score == 100
        assert "Performance validation error: analyzer crashed" in report.blockers

    @pytest.mark.asyncio
    async def test_report_persisted(self, static_config, clean_file, tmp_path) -> None:
        store = ReportStore(tmp_path / "store")
        pipeline = ValidationPipeline(static_config, store=store)
        report = await pipeline.run_complete_validation([clean_file])
        assert store.list_ids() == [report.run_id]
        assert store.load_report(report.run_id) == report

    def test_invalid_config_rejected(self, static_config) -> None:
        with pytest.raises(ValueError):
            ValidationPipeline(replace(static_config, max_duration=0))
