"""Tests for the five category validators."""

from __future__ import annotations

import json

import pytest

from quality_gates.domain.enums import Category, Severity, Status
from quality_gates.domain.values import (
    AccessibilityViolation,
    PerformanceMetrics,
    VisualAuditResult,
)
from quality_gates.infrastructure.audit import AuditSession
from quality_gates.infrastructure.commands import CommandResult
from quality_gates.infrastructure.config import ValidationConfig
from quality_gates.services.static_analysis import StaticAnalyzer
from quality_gates.services.validators import (
    AccessibilityValidator,
    BaseCategoryValidator,
    BrandConsistencyValidator,
    CodeQualityValidator,
    PerformanceValidator,
    StructuralComplianceValidator,
    default_validators,
)
from quality_gates.testing import StaticVisualAuditor, StubCommandRunner


def _session(result: VisualAuditResult | None, **kwargs) -> AuditSession:
    return AuditSession(StaticVisualAuditor(result, **kwargs), ["/", "/services", "/work"])


class _ExplodingValidator(BaseCategoryValidator):
    category = Category.CODE_QUALITY

    async def _inspect(self, files, audit, card):
        raise RuntimeError("boom")


class TestBaseValidator:

    @pytest.mark.asyncio
    async def test_internal_failure_becomes_issue(self) -> None:
        result = await _ExplodingValidator(ValidationConfig()).validate([])
        assert result.score == 0
        assert result.status == Status.FAIL
        [issue] = result.issues
        assert issue.severity == Severity.ERROR
        assert issue.message == "Code Quality validation error: boom"

    @pytest.mark.asyncio
    async def test_unreadable_file_is_contained(self, tmp_path) -> None:
        validator = AccessibilityValidator(ValidationConfig())
        result = await validator.validate([str(tmp_path / "Missing.tsx")])
        assert result.score == 0
        assert result.issues[0].rule == "validator-error"

    @pytest.mark.asyncio
    async def test_files_without_matching_rules_are_skipped(self, tmp_path) -> None:
        path = tmp_path / "README.md"
        path.write_text("<img src='x.png'>")
        result = await AccessibilityValidator(ValidationConfig()).validate([str(path)])
        assert result.score == 100
        assert result.metrics["checked_files"] == 0

    def test_default_validators_cover_categories(self) -> None:
        validators = default_validators(ValidationConfig())
        assert [v.category for v in validators] == list(Category)


class TestStructuralCompliance:

    @pytest.mark.asyncio
    async def test_hard_coded_values(self, hard_coded_file) -> None:
        result = await StructuralComplianceValidator(ValidationConfig()).validate(
            [hard_coded_file]
        )
        warnings = result.issues_with(Severity.WARNING)
        errors = result.issues_with(Severity.ERROR)
        assert len(warnings) == 5
        assert [i.rule for i in errors] == ["token-density"]
        assert result.score == 60
        assert result.status == Status.FAIL

    @pytest.mark.asyncio
    async def test_visual_score_caps(self, clean_file) -> None:
        result = await StructuralComplianceValidator(ValidationConfig()).validate(
            [clean_file], _session(VisualAuditResult(structural_score=72))
        )
        assert result.score == 72
        assert result.metrics["visual_score"] == 72
        assert result.issues[0].message == "Visual structural compliance below threshold"

    @pytest.mark.asyncio
    async def test_audit_failure_zeroes_category(self, clean_file) -> None:
        result = await StructuralComplianceValidator(ValidationConfig()).validate(
            [clean_file], _session(None)
        )
        assert result.score == 0
        assert "audit backend unavailable" in result.issues[0].message


class TestBrandConsistency:

    @pytest.mark.asyncio
    async def test_forbidden_terms(self, off_brand_file) -> None:
        result = await BrandConsistencyValidator(ValidationConfig()).validate([off_brand_file])
        assert result.score == 70
        assert {i.evidence for i in result.issues} == {"revolutionary", "magical"}

    @pytest.mark.asyncio
    async def test_theme_checks_first_two_urls(self, clean_file) -> None:
        session = _session(VisualAuditResult(), failed_themes={"/": ["dark", "maximal"]})
        result = await BrandConsistencyValidator(ValidationConfig()).validate(
            [clean_file], session
        )
        assert result.score == 80
        assert result.metrics["theme_compatibility"] == 50
        [issue] = result.issues
        assert issue.message == "Theme compatibility issues on /: dark, maximal"
        assert issue.location == "/"


class TestAccessibility:

    @pytest.mark.asyncio
    async def test_image_without_alt(self, image_file) -> None:
        result = await AccessibilityValidator(ValidationConfig()).validate([image_file])
        [issue] = result.issues
        assert issue.severity == Severity.ERROR
        assert issue.message == "Image missing alt text in Hero.tsx"
        assert issue.evidence == '<img src="hero.png">'
        assert result.score <= 85

    @pytest.mark.asyncio
    async def test_audit_violations(self, clean_file) -> None:
        audit = VisualAuditResult(
            accessibility_violations=(
                AccessibilityViolation("color-contrast", "critical", "Low contrast"),
                AccessibilityViolation("region", "moderate", "Missing landmark"),
            ),
            accessibility_score=70,
        )
        result = await AccessibilityValidator(ValidationConfig()).validate(
            [clean_file], _session(audit)
        )
        assert result.score == 70
        assert [i.severity for i in result.issues] == [Severity.ERROR, Severity.WARNING]
        assert result.issues[0].priority == 1


class TestPerformance:

    @pytest.mark.asyncio
    async def test_web_vitals(self, clean_file) -> None:
        audit = VisualAuditResult(performance=PerformanceMetrics(lcp=3200, cls=0.25, score=60))
        result = await PerformanceValidator(ValidationConfig()).validate(
            [clean_file], _session(audit)
        )
        assert result.score == 65
        assert [i.rule for i in result.issues] == ["lcp-slow", "cls-high"]
        assert result.issues[0].message == "LCP exceeds 2.5s: 3200ms"

    @pytest.mark.asyncio
    async def test_bundle_size(self, clean_file) -> None:
        config = ValidationConfig()
        runner = StubCommandRunner(
            {"du -sk dist": CommandResult("du -sk dist", 0, "10240\tdist", "")}
        )
        validator = PerformanceValidator(config, analyzer=StaticAnalyzer(config, runner))
        result = await validator.validate([clean_file])
        assert result.score == 90
        assert result.metrics["bundle_size"] == 10.0
        assert result.issues[0].message == "Large bundle size: 10.0MB"

    @pytest.mark.asyncio
    async def test_bundle_check_failure_is_not_an_issue(self, clean_file) -> None:
        config = ValidationConfig()
        validator = PerformanceValidator(
            config, analyzer=StaticAnalyzer(config, StubCommandRunner())
        )
        result = await validator.validate([clean_file])
        assert result.score == 100
        assert result.metrics["bundle_size"] == "unknown"

    @pytest.mark.asyncio
    async def test_interval_leak(self, tmp_path) -> None:
        path = tmp_path / "Ticker.tsx"
        path.write_text("useEffect(() => { setInterval(tick, 1000) }, [])")
        result = await PerformanceValidator(ValidationConfig()).validate([str(path)])
        assert result.score == 75
        assert result.issues[0].severity == Severity.ERROR


class TestCodeQuality:

    @pytest.fixture
    def config(self) -> ValidationConfig:
        return ValidationConfig()

    def _runner(self, config: ValidationConfig, eslint: str, tsc: str) -> StubCommandRunner:
        return StubCommandRunner(
            {
                config.lint_command: CommandResult(config.lint_command, 1, eslint, ""),
                config.typecheck_command: CommandResult(config.typecheck_command, 2, tsc, ""),
            }
        )

    @pytest.mark.asyncio
    async def test_lint_and_types(self, config, clean_file) -> None:
        eslint = json.dumps(
            [{"filePath": "a.ts", "messages": [], "errorCount": 2, "warningCount": 3}]
        )
        tsc = "src/a.ts(1,1): error TS2304: Cannot find name 'x'.\n"
        analyzer = StaticAnalyzer(config, self._runner(config, eslint, tsc))
        result = await CodeQualityValidator(config, analyzer=analyzer).validate([clean_file])
        # 100 - 10 (errors) - 6 (warnings) - 20 (types)
        assert result.score == 64
        assert [i.rule for i in result.issues] == [
            "eslint-errors",
            "eslint-warnings",
            "typescript-errors",
        ]
        assert result.issues[2].location == "src/a.ts"

    @pytest.mark.asyncio
    async def test_lint_penalty_is_capped(self, config, clean_file) -> None:
        eslint = json.dumps(
            [{"filePath": "a.ts", "messages": [], "errorCount": 40, "warningCount": 40}]
        )
        analyzer = StaticAnalyzer(config, self._runner(config, eslint, ""))
        result = await CodeQualityValidator(config, analyzer=analyzer).validate([clean_file])
        assert result.score == 55

    @pytest.mark.asyncio
    async def test_missing_tools_are_reported_unavailable(self, config, clean_file) -> None:
        analyzer = StaticAnalyzer(config, StubCommandRunner())
        result = await CodeQualityValidator(config, analyzer=analyzer).validate([clean_file])
        assert result.score == 100
        assert result.metrics["eslint"] == "unavailable"
        assert result.metrics["typescript"] == "unavailable"

    @pytest.mark.asyncio
    async def test_any_and_todo(self, config, tmp_path) -> None:
        path = tmp_path / "util.ts"
        path.write_text("// TODO tighten\nexport const f = (x: any) => x\n")
        result = await CodeQualityValidator(config).validate([str(path)])
        assert result.score == 95
        assert {i.severity for i in result.issues} == {Severity.INFO, Severity.WARNING}
