"""Service layer for the quality-gate pipeline.

Re-exports public service types for convenient top-level access::

    from quality_gates.services import (
        ValidationPipeline, IterativeAgenticLoop,
        CorrectionPlanner, CorrectionApplier,
        BaseCategoryValidator, ContentRule,
        BaseGenerator, TemplateGenerator, LLMGenerator,
    )
"""

from quality_gates.services.corrections import (
    CorrectionApplier,
    CorrectionPlanner,
    CorrectionRule,
    default_correction_rules,
    suggest_token,
)
from quality_gates.services.discovery import discover_recent_files
from quality_gates.services.evaluation import (
    calculate_improvements,
    failing_categories,
    meets_success_threshold,
)
from quality_gates.services.generation import (
    BaseGenerator,
    LLMGenerator,
    TemplateGenerator,
    extract_learnings,
)
from quality_gates.services.loop import IterativeAgenticLoop
from quality_gates.services.pipeline import (
    ValidationPipeline,
    determine_status,
    generate_recommendations,
    weighted_score,
)
from quality_gates.services.rules import ContentRule, default_rules
from quality_gates.services.static_analysis import (
    LintSummary,
    StaticAnalyzer,
    TypeDiagnostic,
    parse_eslint_output,
    parse_tsc_output,
)
from quality_gates.services.validators import (
    AccessibilityValidator,
    BaseCategoryValidator,
    BrandConsistencyValidator,
    CodeQualityValidator,
    PerformanceValidator,
    StructuralComplianceValidator,
    default_validators,
)

__all__ = [
    # corrections
    "CorrectionApplier",
    "CorrectionPlanner",
    "CorrectionRule",
    "default_correction_rules",
    "suggest_token",
    # discovery
    "discover_recent_files",
    # evaluation
    "calculate_improvements",
    "failing_categories",
    "meets_success_threshold",
    # generation
    "BaseGenerator",
    "LLMGenerator",
    "TemplateGenerator",
    "extract_learnings",
    # loop
    "IterativeAgenticLoop",
    # pipeline
    "ValidationPipeline",
    "determine_status",
    "generate_recommendations",
    "weighted_score",
    # rules
    "ContentRule",
    "default_rules",
    # static analysis
    "LintSummary",
    "StaticAnalyzer",
    "TypeDiagnostic",
    "parse_eslint_output",
    "parse_tsc_output",
    # validators
    "AccessibilityValidator",
    "BaseCategoryValidator",
    "BrandConsistencyValidator",
    "CodeQualityValidator",
    "PerformanceValidator",
    "StructuralComplianceValidator",
    "default_validators",
]
