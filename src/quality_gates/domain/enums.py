"""Domain enumerations for the quality-gate pipeline.

These enums capture the closed vocabularies used across the domain layer:
issue severities, the five quality categories, statuses, recommendation
tiers, correction types and loop stop reasons.
"""

from enum import Enum


class Severity(Enum):
    """Severity of a detected validation issue."""

    ERROR = "error"  # becomes a report blocker
    WARNING = "warning"
    INFO = "info"


class Category(Enum):
    """The five fixed quality dimensions, in report order."""

    STRUCTURAL_COMPLIANCE = "structural-compliance"
    BRAND_CONSISTENCY = "brand-consistency"
    ACCESSIBILITY = "accessibility"
    PERFORMANCE = "performance"
    CODE_QUALITY = "code-quality"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. ``"Brand Consistency"``."""
        return self.value.replace("-", " ").title()


class Status(Enum):
    """Outcome status of a category or of a whole report."""

    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"  # overall report only


class RecommendationPriority(Enum):
    """Urgency tier of a prioritized recommendation."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    RecommendationPriority.CRITICAL: 0,
    RecommendationPriority.HIGH: 1,
    RecommendationPriority.MEDIUM: 2,
    RecommendationPriority.LOW: 3,
}


class Effort(Enum):
    """Estimated effort or impact level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CorrectionType(Enum):
    """Kind of edit a correction action performs."""

    TOKEN_REPLACEMENT = "token-replacement"
    ACCESSIBILITY_ADD = "accessibility-add"
    STRUCTURE_FIX = "structure-fix"
    FILE_EDIT = "file-edit"


class StopReason(Enum):
    """Reason the iterative loop terminated."""

    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"  # max iterations reached
    TIMEOUT = "timeout"
