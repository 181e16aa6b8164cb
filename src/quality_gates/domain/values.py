"""Value objects for the quality-gate pipeline.

All types here are frozen dataclasses: immutable, compared by value.  They
represent detected issues, per-category scores, recommendations, proposed
corrections and the raw measurements supplied by the visual/audit
collaborator.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .enums import Category, CorrectionType, Effort, RecommendationPriority, Severity, Status

# ---------------------------------------------------------------------------
# Category weights
# ---------------------------------------------------------------------------

CATEGORY_WEIGHTS: Mapping[Category, float] = {
    Category.STRUCTURAL_COMPLIANCE: 0.25,
    Category.BRAND_CONSISTENCY: 0.25,
    Category.ACCESSIBILITY: 0.20,
    Category.PERFORMANCE: 0.15,
    Category.CODE_QUALITY: 0.15,
}

if abs(sum(CATEGORY_WEIGHTS.values()) - 1.0) > 1e-9:  # pragma: no cover
    raise RuntimeError("CATEGORY_WEIGHTS must sum to 1.0")

MAX_SCORE = 100
MIN_SCORE = 0


def clamp_score(score: float) -> int:
    """Round *score* half-up and clamp it to ``[0, 100]``."""
    return max(MIN_SCORE, min(MAX_SCORE, math.floor(score + 0.5)))


def make_issue_id(category: Category, rule: str, location: str, evidence: str) -> str:
    """Stable identifier for an issue.

    The same finding on an unchanged file always gets the same id, so two
    validation runs over the same workspace produce identical reports.
    """
    raw = "|".join((category.value, rule, location, evidence))
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:12]
    return f"{rule or category.value}-{digest}"


# ---------------------------------------------------------------------------
# ValidationIssue
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationIssue:
    """A single problem detected by a category validator.

    ``priority`` is 1 for the most urgent issues.  ``evidence`` holds the
    matched text fragment (a hard-coded value, an offending tag) so that
    corrections can target it precisely.
    """

    issue_id: str
    severity: Severity
    category: Category
    message: str
    location: str = ""
    rule: str = ""
    fix: str = ""
    priority: int = 2
    evidence: str = ""

    def __post_init__(self) -> None:
        if self.priority < 1:
            raise ValueError(f"priority must be >= 1, got {self.priority}")


# ---------------------------------------------------------------------------
# CategoryResult
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CategoryResult:
    """Score and findings for one category in one validation run."""

    category: Category
    score: int
    status: Status
    issues: tuple[ValidationIssue, ...] = ()
    metrics: Mapping[str, Any] = field(default_factory=dict)
    details: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(f"score must be in [0, 100], got {self.score}")
        if self.status == Status.WARNING:
            raise ValueError("category status must be pass or fail")

    @classmethod
    def scored(
        cls,
        category: Category,
        score: float,
        threshold: float,
        issues: tuple[ValidationIssue, ...] | list[ValidationIssue] = (),
        metrics: Mapping[str, Any] | None = None,
        details: tuple[str, ...] | list[str] = (),
    ) -> CategoryResult:
        """Build a result, clamping *score* and deriving pass/fail from *threshold*."""
        final = clamp_score(score)
        return cls(
            category=category,
            score=final,
            status=Status.PASS if final >= threshold else Status.FAIL,
            issues=tuple(issues),
            metrics=dict(metrics or {}),
            details=tuple(details),
        )

    @classmethod
    def empty(cls, category: Category) -> CategoryResult:
        """Placeholder for a category that has not completed."""
        return cls(
            category=category,
            score=0,
            status=Status.FAIL,
            details=("Validation did not complete",),
        )

    def issues_with(self, severity: Severity) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == severity]


# ---------------------------------------------------------------------------
# PrioritizedRecommendation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PrioritizedRecommendation:
    """Recommendation derived deterministically from a category score."""

    category: Category
    priority: RecommendationPriority
    action: str
    description: str
    estimated_effort: Effort
    impact: Effort


# ---------------------------------------------------------------------------
# CorrectionAction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CorrectionAction:
    """A proposed, confidence-scored edit to one file targeting one issue.

    Never mutated after creation: a failed application is recorded by the
    applier, not retried in place.
    """

    type: CorrectionType
    file_path: str
    description: str
    before: str = ""
    after: str = ""
    confidence: float = 0.5
    automated: bool = False
    issue_id: str = ""

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")

    @property
    def has_substitution(self) -> bool:
        """True when the action carries a concrete ``before -> after`` edit."""
        return bool(self.before) and self.before != self.after


# ---------------------------------------------------------------------------
# Visual / audit collaborator measurements
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AccessibilityViolation:
    """An axe-style accessibility violation reported by the audit collaborator."""

    id: str
    impact: str
    description: str
    help: str = ""

    @property
    def is_critical(self) -> bool:
        return self.impact == "critical"


@dataclass(frozen=True)
class PerformanceMetrics:
    """Core Web Vitals: ``lcp`` in milliseconds, ``cls`` unitless."""

    lcp: float = 0.0
    cls: float = 0.0
    score: float = 100.0


@dataclass(frozen=True)
class VisualAuditResult:
    """Aggregated audit results across the audited URLs."""

    structural_score: float = 100.0
    brand_score: float = 100.0
    accessibility_violations: tuple[AccessibilityViolation, ...] = ()
    accessibility_score: float = 100.0
    wcag_level: str = "AA"
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)


@dataclass(frozen=True)
class ThemeCompatibility:
    """Result of checking one URL across all theme modes."""

    url: str
    compatible: bool
    failed_themes: tuple[str, ...] = ()
