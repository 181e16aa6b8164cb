"""Serialization utilities for the quality-gate pipeline.

Provides ``to_dict`` / ``from_dict`` round-trip conversion for issues,
category results, reports, corrections and loop results.  Every ``to_dict``
output is JSON-serializable (enums become their ``.value``, tuples become
lists); ``from_dict`` reconstructors accept permissive input and raise
``ValueError`` / ``KeyError`` for truly unrecoverable data.  YAML is
supported when ``pyyaml`` is installed.
"""

from __future__ import annotations

import json
from typing import Any

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
from quality_gates.domain.values import (
    CategoryResult,
    CorrectionAction,
    PrioritizedRecommendation,
    ValidationIssue,
)

try:
    import yaml as _yaml  # type: ignore[import-untyped]

    _HAS_YAML = True
except ImportError:  # pragma: no cover
    _yaml = None  # type: ignore[assignment]
    _HAS_YAML = False


def _enum_val(v: Any) -> Any:
    """Return the ``.value`` if *v* is an enum member, else *v* unchanged."""
    if hasattr(v, "value"):
        return v.value
    return v


# =========================================================================== #
#  Value objects                                                               #
# =========================================================================== #

def issue_to_dict(issue: ValidationIssue) -> dict[str, Any]:
    return {
        "id": issue.issue_id,
        "severity": _enum_val(issue.severity),
        "category": _enum_val(issue.category),
        "message": issue.message,
        "location": issue.location,
        "rule": issue.rule,
        "fix": issue.fix,
        "priority": issue.priority,
        "evidence": issue.evidence,
    }


def issue_from_dict(data: dict[str, Any]) -> ValidationIssue:
    return ValidationIssue(
        issue_id=str(data["id"]),
        severity=Severity(data["severity"]),
        category=Category(data["category"]),
        message=str(data["message"]),
        location=str(data.get("location", "")),
        rule=str(data.get("rule", "")),
        fix=str(data.get("fix", "")),
        priority=int(data.get("priority", 2)),
        evidence=str(data.get("evidence", "")),
    )


def category_result_to_dict(result: CategoryResult) -> dict[str, Any]:
    return {
        "category": _enum_val(result.category),
        "score": result.score,
        "status": _enum_val(result.status),
        "issues": [issue_to_dict(i) for i in result.issues],
        "metrics": dict(result.metrics),
        "details": list(result.details),
    }


def category_result_from_dict(data: dict[str, Any]) -> CategoryResult:
    return CategoryResult(
        category=Category(data["category"]),
        score=int(data["score"]),
        status=Status(data["status"]),
        issues=tuple(issue_from_dict(i) for i in data.get("issues", [])),
        metrics=dict(data.get("metrics", {})),
        details=tuple(data.get("details", [])),
    )


def recommendation_to_dict(rec: PrioritizedRecommendation) -> dict[str, Any]:
    return {
        "category": _enum_val(rec.category),
        "priority": _enum_val(rec.priority),
        "action": rec.action,
        "description": rec.description,
        "estimated_effort": _enum_val(rec.estimated_effort),
        "impact": _enum_val(rec.impact),
    }


def recommendation_from_dict(data: dict[str, Any]) -> PrioritizedRecommendation:
    return PrioritizedRecommendation(
        category=Category(data["category"]),
        priority=RecommendationPriority(data["priority"]),
        action=str(data["action"]),
        description=str(data.get("description", "")),
        estimated_effort=Effort(data.get("estimated_effort", "low")),
        impact=Effort(data.get("impact", "medium")),
    )


def correction_to_dict(action: CorrectionAction) -> dict[str, Any]:
    return {
        "type": _enum_val(action.type),
        "file_path": action.file_path,
        "description": action.description,
        "before": action.before,
        "after": action.after,
        "confidence": action.confidence,
        "automated": action.automated,
        "issue_id": action.issue_id,
    }


def correction_from_dict(data: dict[str, Any]) -> CorrectionAction:
    return CorrectionAction(
        type=CorrectionType(data["type"]),
        file_path=str(data["file_path"]),
        description=str(data.get("description", "")),
        before=str(data.get("before", "")),
        after=str(data.get("after", "")),
        confidence=float(data.get("confidence", 0.5)),
        automated=bool(data.get("automated", False)),
        issue_id=str(data.get("issue_id", "")),
    )


# =========================================================================== #
#  Aggregates                                                                  #
# =========================================================================== #

def report_to_dict(report: ValidationReport) -> dict[str, Any]:
    metadata = report.metadata
    return {
        "run_id": report.run_id,
        "overall": {
            "status": _enum_val(report.overall.status),
            "score": report.overall.score,
            "timestamp": report.overall.timestamp,
            "duration": report.overall.duration,
        },
        "categories": [category_result_to_dict(r) for r in report.categories],
        "recommendations": [recommendation_to_dict(r) for r in report.recommendations],
        "blockers": list(report.blockers),
        "warnings": list(report.warnings),
        "metadata": None if metadata is None else {
            "version": metadata.version,
            "environment": metadata.environment,
            "base_url": metadata.base_url,
            "tested_urls": list(metadata.tested_urls),
            "changed_files": list(metadata.changed_files),
            "themes_tested": list(metadata.themes_tested),
            "viewports_tested": list(metadata.viewports_tested),
            "categories_run": [_enum_val(c) for c in metadata.categories_run],
        },
    }


def report_from_dict(data: dict[str, Any]) -> ValidationReport:
    overall = data["overall"]
    raw_meta = data.get("metadata")
    metadata = None
    if raw_meta:
        metadata = ValidationMetadata(
            version=str(raw_meta.get("version", "")),
            environment=str(raw_meta.get("environment", "")),
            base_url=str(raw_meta.get("base_url", "")),
            tested_urls=tuple(raw_meta.get("tested_urls", [])),
            changed_files=tuple(raw_meta.get("changed_files", [])),
            themes_tested=tuple(raw_meta.get("themes_tested", [])),
            viewports_tested=tuple(raw_meta.get("viewports_tested", [])),
            categories_run=tuple(Category(c) for c in raw_meta.get("categories_run", [])),
        )
    return ValidationReport(
        run_id=str(data.get("run_id", "")),
        overall=OverallResult(
            status=Status(overall["status"]),
            score=int(overall["score"]),
            timestamp=str(overall.get("timestamp", "")),
            duration=float(overall.get("duration", 0.0)),
        ),
        categories=tuple(category_result_from_dict(c) for c in data["categories"]),
        recommendations=tuple(
            recommendation_from_dict(r) for r in data.get("recommendations", [])
        ),
        blockers=tuple(data.get("blockers", [])),
        warnings=tuple(data.get("warnings", [])),
        metadata=metadata,
    )


def iteration_to_dict(it: IterationResult) -> dict[str, Any]:
    return {
        "iteration": it.iteration,
        "success": it.success,
        "score": it.score,
        "improvements": list(it.improvements),
        "corrections": [correction_to_dict(c) for c in it.corrections],
        "applied_corrections": [correction_to_dict(c) for c in it.applied_corrections],
        "validation_report": report_to_dict(it.validation_report),
        "duration": it.duration,
        "timestamp": it.timestamp,
    }


def iteration_from_dict(data: dict[str, Any]) -> IterationResult:
    return IterationResult(
        iteration=int(data["iteration"]),
        success=bool(data["success"]),
        score=int(data["score"]),
        improvements=tuple(data.get("improvements", [])),
        corrections=tuple(correction_from_dict(c) for c in data.get("corrections", [])),
        validation_report=report_from_dict(data["validation_report"]),
        duration=float(data.get("duration", 0.0)),
        timestamp=str(data.get("timestamp", "")),
        applied_corrections=tuple(
            correction_from_dict(c) for c in data.get("applied_corrections", [])
        ),
    )


def loop_result_to_dict(result: LoopResult) -> dict[str, Any]:
    return {
        "loop_id": result.loop_id,
        "request": result.request,
        "success": result.success,
        "final_score": result.final_score,
        "total_iterations": result.total_iterations,
        "total_duration": result.total_duration,
        "stop_reason": _enum_val(result.stop_reason),
        "escalation_reason": result.escalation_reason,
        "final_recommendations": list(result.final_recommendations),
        "iterations": [iteration_to_dict(i) for i in result.iterations],
        "metadata": dict(result.metadata),
    }


def loop_result_from_dict(data: dict[str, Any]) -> LoopResult:
    iterations = tuple(iteration_from_dict(i) for i in data.get("iterations", []))
    return LoopResult(
        loop_id=str(data.get("loop_id", "")),
        request=str(data.get("request", "")),
        success=bool(data["success"]),
        final_score=int(data.get("final_score", 0)),
        total_iterations=int(data.get("total_iterations", len(iterations))),
        total_duration=float(data.get("total_duration", 0.0)),
        stop_reason=StopReason(data.get("stop_reason", "exhausted")),
        escalation_reason=data.get("escalation_reason"),
        final_recommendations=tuple(data.get("final_recommendations", [])),
        iterations=iterations,
        metadata=dict(data.get("metadata", {})),
    )


# =========================================================================== #
#  Unified serializer                                                          #
# =========================================================================== #

# Maps type -> (to_dict_fn, from_dict_fn)
_SERIALIZERS: dict[type, tuple[Any, Any]] = {
    ValidationIssue: (issue_to_dict, issue_from_dict),
    CategoryResult: (category_result_to_dict, category_result_from_dict),
    PrioritizedRecommendation: (recommendation_to_dict, recommendation_from_dict),
    CorrectionAction: (correction_to_dict, correction_from_dict),
    ValidationReport: (report_to_dict, report_from_dict),
    IterationResult: (iteration_to_dict, iteration_from_dict),
    LoopResult: (loop_result_to_dict, loop_result_from_dict),
}


def serialize(obj: Any) -> dict[str, Any]:
    """Serialize a known domain object to a dict.

    Raises ``TypeError`` for unsupported types.
    """
    ser = _SERIALIZERS.get(type(obj))
    if ser is None:
        raise TypeError(f"No serializer registered for {type(obj).__name__}")
    to_fn, _ = ser
    return to_fn(obj)


def deserialize(data: dict[str, Any], target_type: type) -> Any:
    """Deserialize a dict into *target_type*."""
    ser = _SERIALIZERS.get(target_type)
    if ser is None:
        raise TypeError(f"No deserializer registered for {target_type.__name__}")
    _, from_fn = ser
    return from_fn(data)


def to_json(obj: Any, *, indent: int | None = 2) -> str:
    """Serialize a domain object to a JSON string."""
    return json.dumps(serialize(obj), indent=indent, default=str)


def from_json(json_str: str, target_type: type) -> Any:
    """Deserialize a JSON string into *target_type*."""
    return deserialize(json.loads(json_str), target_type)


def to_yaml(obj: Any) -> str:
    """Serialize a domain object to a YAML string.

    Raises ``RuntimeError`` if PyYAML is not installed.
    """
    if not _HAS_YAML:
        raise RuntimeError(
            "PyYAML is not installed. Install it with: pip install pyyaml"
        )
    return _yaml.safe_dump(serialize(obj), default_flow_style=False, sort_keys=False)


def from_yaml(yaml_str: str, target_type: type) -> Any:
    """Deserialize a YAML string into *target_type*.

    Raises ``RuntimeError`` if PyYAML is not installed.
    """
    if not _HAS_YAML:
        raise RuntimeError(
            "PyYAML is not installed. Install it with: pip install pyyaml"
        )
    return deserialize(_yaml.safe_load(yaml_str), target_type)


def yaml_available() -> bool:
    """Return ``True`` if PyYAML is importable."""
    return _HAS_YAML
