"""Category validators.

Implements one validator per :class:`~quality_gates.domain.enums.Category`.
Every validator follows the same contract: start at 100, subtract a fixed
penalty per detected issue, clamp to ``[0, 100]`` and compare against the
category threshold.  Failures inside a validator never propagate: they are
logged and converted into a single ``error`` issue with score 0.

Classes
-------
BaseCategoryValidator
    Template: file reading, rule application, failure isolation.
StructuralComplianceValidator
    Hard-coded values and visual layout compliance.
BrandConsistencyValidator
    Design-token usage, brand voice and theme compatibility.
AccessibilityValidator
    Audit violations and markup-level checks.
PerformanceValidator
    Core Web Vitals, code anti-patterns and bundle size.
CodeQualityValidator
    Lint, type-check and source-level checks.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from quality_gates.domain.enums import Category, Severity
from quality_gates.domain.exceptions import CommandError
from quality_gates.domain.values import CategoryResult, ValidationIssue, make_issue_id
from quality_gates.infrastructure.audit import AuditSession
from quality_gates.infrastructure.config import ValidationConfig
from quality_gates.services.rules import ContentRule, default_rules
from quality_gates.services.static_analysis import StaticAnalyzer

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Score card                                                            #
# ===================================================================== #


class ScoreCard:
    """Mutable accumulator used while a validator runs."""

    def __init__(self, category: Category) -> None:
        self.category = category
        self.score: float = 100.0
        self.issues: list[ValidationIssue] = []
        self.metrics: dict[str, Any] = {}
        self.details: list[str] = []

    def add(self, issue: ValidationIssue, penalty: float) -> None:
        self.issues.append(issue)
        self.score -= penalty

    def cap(self, ceiling: float) -> None:
        """Lower the score to *ceiling* if it is currently higher."""
        self.score = min(self.score, ceiling)

    def issue(
        self,
        rule: str,
        severity: Severity,
        message: str,
        penalty: float,
        fix: str = "",
        priority: int = 2,
        location: str = "",
        evidence: str = "",
    ) -> None:
        """Build an issue for this category and record it with *penalty*."""
        self.add(
            ValidationIssue(
                issue_id=make_issue_id(self.category, rule, location, evidence),
                severity=severity,
                category=self.category,
                message=message,
                location=location,
                rule=rule,
                fix=fix,
                priority=priority,
                evidence=evidence,
            ),
            penalty,
        )

    def result(self, threshold: float) -> CategoryResult:
        return CategoryResult.scored(
            self.category,
            max(0.0, self.score),
            threshold,
            issues=self.issues,
            metrics=self.metrics,
            details=self.details,
        )


# ===================================================================== #
#  Base validator                                                        #
# ===================================================================== #


class BaseCategoryValidator(ABC):
    """Abstract base class for category validators.

    Subclasses set :attr:`category` and implement :meth:`_inspect`.

    Parameters
    ----------
    config:
        Validation policy (thresholds, commands, limits).
    rules:
        Content rules to apply to every file.  Defaults to
        :func:`~quality_gates.services.rules.default_rules` for the
        validator's category.
    """

    category: Category

    def __init__(
        self,
        config: ValidationConfig,
        rules: Sequence[ContentRule] | None = None,
    ) -> None:
        self._config = config
        self._rules = list(rules) if rules is not None else default_rules(self.category, config)

    @property
    def threshold(self) -> float:
        return self._config.thresholds.for_category(self.category)

    @property
    def rules(self) -> list[ContentRule]:
        return list(self._rules)

    async def validate(
        self,
        files: Sequence[str],
        audit: AuditSession | None = None,
    ) -> CategoryResult:
        """Score *files* (and the audit results, when given) for this category.

        Never raises: an internal failure yields a zero-score result with one
        ``error`` issue describing it.
        """
        card = ScoreCard(self.category)
        try:
            await self._inspect(files, audit, card)
        except Exception as exc:
            logger.exception("%s: validation failed", type(self).__name__)
            return self.failure_result(exc)
        logger.debug(
            "%s: score=%.1f issues=%d", type(self).__name__, card.score, len(card.issues)
        )
        return card.result(self.threshold)

    @abstractmethod
    async def _inspect(
        self,
        files: Sequence[str],
        audit: AuditSession | None,
        card: ScoreCard,
    ) -> None:
        """Populate *card* with issues, penalties, metrics and details."""

    async def _apply_rules(self, files: Sequence[str], card: ScoreCard) -> int:
        """Run the content rules over *files*; return the number inspected."""
        inspected = 0
        for path in files:
            rules = [r for r in self._rules if r.applies_to(path)]
            if not rules:
                continue
            content = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
            inspected += 1
            for rule in rules:
                for issue in rule.check(path, content):
                    card.add(issue, rule.penalty)
        return inspected

    def failure_result(self, exc: Exception) -> CategoryResult:
        """Zero-score result describing *exc*."""
        message = f"{self.category.label} validation error: {exc}"
        issue = ValidationIssue(
            issue_id=make_issue_id(self.category, "validator-error", "", type(exc).__name__),
            severity=Severity.ERROR,
            category=self.category,
            message=message,
            rule="validator-error",
            priority=1,
        )
        return CategoryResult.scored(
            self.category, 0, self.threshold, issues=(issue,), details=(message,)
        )


# ===================================================================== #
#  Concrete validators                                                   #
# ===================================================================== #


class StructuralComplianceValidator(BaseCategoryValidator):
    """Design-system compliance: literal values and visual layout score."""

    category = Category.STRUCTURAL_COMPLIANCE

    async def _inspect(self, files, audit, card):
        card.metrics["checked_files"] = await self._apply_rules(files, card)
        card.metrics["token_compliance"] = max(0.0, card.score)

        if audit is not None:
            visual = await audit.visual()
            card.metrics["visual_score"] = visual.structural_score
            if visual.structural_score < self.threshold:
                card.issue(
                    "visual-structure",
                    Severity.ERROR,
                    "Visual structural compliance below threshold",
                    penalty=0,
                    fix="Review component implementation against the design system",
                    priority=1,
                )
                card.cap(visual.structural_score)

        card.details.append(f"Checked {card.metrics['checked_files']} files")
        card.details.append(f"Token compliance: {card.metrics['token_compliance']:.0f}/100")


class BrandConsistencyValidator(BaseCategoryValidator):
    """Brand alignment: tokens, voice, visual brand score, theme modes."""

    category = Category.BRAND_CONSISTENCY

    async def _inspect(self, files, audit, card):
        card.metrics["checked_files"] = await self._apply_rules(files, card)
        card.metrics["token_usage"] = max(0.0, card.score)

        failed_urls = 0
        if audit is not None:
            visual = await audit.visual()
            card.metrics["visual_score"] = visual.brand_score
            if visual.brand_score < self.threshold:
                card.issue(
                    "visual-brand",
                    Severity.ERROR,
                    "Visual brand compliance below threshold",
                    penalty=0,
                    fix="Review design token integration",
                    priority=1,
                )
                card.cap(visual.brand_score)

            checked = audit.urls[:2]
            for url in checked:
                compat = await audit.theme(url)
                if not compat.compatible:
                    failed_urls += 1
                    card.issue(
                        "theme-compat",
                        Severity.ERROR,
                        f"Theme compatibility issues on {url}: {', '.join(compat.failed_themes)}",
                        penalty=20,
                        fix="Fix theme mode support",
                        priority=1,
                        location=url,
                        evidence=",".join(compat.failed_themes),
                    )
            if checked:
                card.metrics["theme_compatibility"] = round(
                    100 * (len(checked) - failed_urls) / len(checked)
                )

        card.details.append(f"Token usage: {card.metrics['token_usage']:.0f}/100")
        card.details.append(
            f"Theme compatibility: {card.metrics.get('theme_compatibility', 'not checked')}"
        )


class AccessibilityValidator(BaseCategoryValidator):
    """WCAG compliance from audit violations and markup inspection."""

    category = Category.ACCESSIBILITY

    async def _inspect(self, files, audit, card):
        if audit is not None:
            visual = await audit.visual()
            for violation in visual.accessibility_violations:
                critical = violation.is_critical
                card.issue(
                    violation.id,
                    Severity.ERROR if critical else Severity.WARNING,
                    violation.description,
                    penalty=20 if critical else 10,
                    fix=violation.help,
                    priority=1 if critical else 2,
                    evidence=violation.id,
                )
            card.metrics["axe_score"] = visual.accessibility_score
            card.metrics["wcag_level"] = visual.wcag_level

        card.metrics["checked_files"] = await self._apply_rules(files, card)
        card.details.append(f"WCAG level: {card.metrics.get('wcag_level', 'unknown')}")
        card.details.append(f"Axe score: {card.metrics.get('axe_score', 'not audited')}")


class PerformanceValidator(BaseCategoryValidator):
    """Core Web Vitals, runtime anti-patterns and bundle size.

    Parameters
    ----------
    analyzer:
        Runs the bundle-size check.  ``None`` skips the check.
    """

    category = Category.PERFORMANCE

    LCP_LIMIT_MS = 2500
    CLS_LIMIT = 0.1

    def __init__(
        self,
        config: ValidationConfig,
        rules: Sequence[ContentRule] | None = None,
        analyzer: StaticAnalyzer | None = None,
    ) -> None:
        super().__init__(config, rules)
        self._analyzer = analyzer

    async def _inspect(self, files, audit, card):
        if audit is not None:
            perf = (await audit.visual()).performance
            if perf.lcp > self.LCP_LIMIT_MS:
                card.issue(
                    "lcp-slow",
                    Severity.WARNING,
                    f"LCP exceeds 2.5s: {perf.lcp:.0f}ms",
                    penalty=15,
                    fix="Optimize critical resources and images",
                )
            if perf.cls > self.CLS_LIMIT:
                card.issue(
                    "cls-high",
                    Severity.ERROR,
                    f"CLS exceeds 0.1: {perf.cls}",
                    penalty=20,
                    fix="Stabilize layout shifts",
                    priority=1,
                )
            card.metrics["core_web_vitals"] = perf.score

        card.metrics["checked_files"] = await self._apply_rules(files, card)

        if self._analyzer is not None:
            try:
                size = await self._analyzer.bundle_size_mb()
            except CommandError as exc:
                logger.warning("PerformanceValidator: bundle size check failed: %s", exc)
                card.metrics["bundle_size"] = "unknown"
            else:
                card.metrics["bundle_size"] = round(size, 2)
                if size > self._config.bundle_limit_mb:
                    card.issue(
                        "bundle-large",
                        Severity.WARNING,
                        f"Large bundle size: {size:.1f}MB",
                        penalty=10,
                        fix="Consider code splitting and tree shaking",
                    )

        card.details.append(
            f"Core Web Vitals: {card.metrics.get('core_web_vitals', 'not audited')}"
        )
        card.details.append(f"Bundle: {card.metrics.get('bundle_size', 'not measured')}")


class CodeQualityValidator(BaseCategoryValidator):
    """Lint, type-check and source-level code quality.

    Parameters
    ----------
    analyzer:
        Runs the lint and type-check commands.  ``None`` skips them.
    """

    category = Category.CODE_QUALITY

    def __init__(
        self,
        config: ValidationConfig,
        rules: Sequence[ContentRule] | None = None,
        analyzer: StaticAnalyzer | None = None,
    ) -> None:
        super().__init__(config, rules)
        self._analyzer = analyzer

    async def _inspect(self, files, audit, card):
        if self._analyzer is not None:
            await self._lint(card)
            await self._typecheck(card)

        card.metrics["checked_files"] = await self._apply_rules(files, card)
        card.details.append(f"ESLint: {card.metrics.get('eslint', 'not run')}")
        card.details.append(f"TypeScript: {card.metrics.get('typescript', 'not run')}")

    async def _lint(self, card: ScoreCard) -> None:
        if self._analyzer is None:
            return
        try:
            summary = await self._analyzer.lint()
        except CommandError as exc:
            logger.warning("CodeQualityValidator: lint failed: %s", exc)
            card.metrics["eslint"] = "unavailable"
            return

        if summary.errors:
            card.issue(
                "eslint-errors",
                Severity.ERROR,
                f"{summary.errors} ESLint errors found",
                penalty=min(summary.errors * 5, 30),
                fix="Run the linter with --fix and address the remaining errors",
                priority=1,
                evidence=str(summary.errors),
            )
        if summary.warnings:
            card.issue(
                "eslint-warnings",
                Severity.WARNING,
                f"{summary.warnings} ESLint warnings found",
                penalty=min(summary.warnings * 2, 15),
                fix="Address ESLint warnings",
                evidence=str(summary.warnings),
            )
        card.metrics["eslint"] = f"{summary.errors} errors, {summary.warnings} warnings"

    async def _typecheck(self, card: ScoreCard) -> None:
        if self._analyzer is None:
            return
        try:
            result = await self._analyzer.typecheck()
        except CommandError as exc:
            logger.warning("CodeQualityValidator: type check failed: %s", exc)
            card.metrics["typescript"] = "unavailable"
            return

        if result.diagnostics:
            first = result.diagnostics[0]
            card.issue(
                "typescript-errors",
                Severity.ERROR,
                f"{len(result.diagnostics)} TypeScript compilation errors found",
                penalty=20,
                fix=f"Fix TypeScript errors, starting with {first}",
                priority=1,
                location=first.file,
                evidence=str(len(result.diagnostics)),
            )
        card.metrics["typescript"] = f"{len(result.diagnostics)} errors"


def default_validators(
    config: ValidationConfig,
    analyzer: StaticAnalyzer | None = None,
) -> list[BaseCategoryValidator]:
    """One validator per category, in category order."""
    return [
        StructuralComplianceValidator(config),
        BrandConsistencyValidator(config),
        AccessibilityValidator(config),
        PerformanceValidator(config, analyzer=analyzer),
        CodeQualityValidator(config, analyzer=analyzer),
    ]
