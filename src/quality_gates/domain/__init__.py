"""Domain layer: the closed vocabularies, value objects and aggregates."""

from quality_gates.domain.aggregates import (
    IterationResult,
    LoopResult,
    OverallResult,
    ValidationMetadata,
    ValidationReport,
)
from quality_gates.domain.enums import (
    Category,
    CorrectionType,
    Effort,
    RecommendationPriority,
    Severity,
    Status,
    StopReason,
)
from quality_gates.domain.exceptions import (
    AuditError,
    CommandError,
    CorrectionError,
    QualityGateError,
)
from quality_gates.domain.values import (
    CATEGORY_WEIGHTS,
    AccessibilityViolation,
    CategoryResult,
    CorrectionAction,
    PerformanceMetrics,
    PrioritizedRecommendation,
    ThemeCompatibility,
    ValidationIssue,
    VisualAuditResult,
)

__all__ = [
    # Enums
    "Category",
    "CorrectionType",
    "Effort",
    "RecommendationPriority",
    "Severity",
    "Status",
    "StopReason",
    # Values
    "CATEGORY_WEIGHTS",
    "AccessibilityViolation",
    "CategoryResult",
    "CorrectionAction",
    "PerformanceMetrics",
    "PrioritizedRecommendation",
    "ThemeCompatibility",
    "ValidationIssue",
    "VisualAuditResult",
    # Aggregates
    "IterationResult",
    "LoopResult",
    "OverallResult",
    "ValidationMetadata",
    "ValidationReport",
    # Exceptions
    "AuditError",
    "CommandError",
    "CorrectionError",
    "QualityGateError",
]
