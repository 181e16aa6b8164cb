"""Shared fixtures for the quality-gates test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from quality_gates.domain.aggregates import OverallResult, ValidationReport
from quality_gates.domain.enums import Category, Severity
from quality_gates.domain.values import CategoryResult, ValidationIssue, make_issue_id
from quality_gates.infrastructure.config import CategoryThresholds, ValidationConfig
from quality_gates.services.pipeline import (
    determine_status,
    generate_recommendations,
    weighted_score,
)

# ---------------------------------------------------------------------------
# Source fixtures
# ---------------------------------------------------------------------------

CLEAN_COMPONENT = """\
export const Hero = () => (
  <section style={{ color: "var(--lss-sunset-coral)" }}>
    <h1>Welcome</h1>
  </section>
);
"""

IMAGE_WITHOUT_ALT = """\
export const Hero = () => (
  <section style={{ color: "var(--lss-sunset-coral)" }}>
    <img src="hero.png">
  </section>
);
"""

HARD_CODED_COMPONENT = """\
export const Hero = () => (
  <section
    style={{
      color: "#FF6F61",
      background: "#FAF9F6",
      borderColor: "#55C2FF",
      outlineColor: "#0B0F1A",
      padding: "16px",
    }}
  >
    Welcome
  </section>
);
"""

OFF_BRAND_COMPONENT = """\
export const Hero = () => (
  <section style={{ color: "var(--lss-sunset-coral)" }}>
    A revolutionary and magical experience
  </section>
);
"""


def write_source(directory: Path, name: str, content: str) -> str:
    """Write *content* to ``directory/name`` and return the path as a string."""
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return str(path)


@pytest.fixture
def clean_file(tmp_path: Path) -> str:
    return write_source(tmp_path, "Hero.tsx", CLEAN_COMPONENT)


@pytest.fixture
def image_file(tmp_path: Path) -> str:
    return write_source(tmp_path, "Hero.tsx", IMAGE_WITHOUT_ALT)


@pytest.fixture
def hard_coded_file(tmp_path: Path) -> str:
    return write_source(tmp_path, "Hero.tsx", HARD_CODED_COMPONENT)


@pytest.fixture
def off_brand_file(tmp_path: Path) -> str:
    return write_source(tmp_path, "Hero.tsx", OFF_BRAND_COMPONENT)


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def static_config(tmp_path: Path) -> ValidationConfig:
    """Static inspection only: no audit, no external commands."""
    return ValidationConfig(
        skip_screenshots=True,
        run_static_analysis=False,
        source_root=str(tmp_path),
        reports_dir=str(tmp_path / "reports"),
    )


# ---------------------------------------------------------------------------
# Report factory
# ---------------------------------------------------------------------------


def build_report(
    scores: dict[Category, int] | None = None,
    errors: dict[Category, list[str]] | None = None,
    run_id: str = "validation-test",
    thresholds: CategoryThresholds | None = None,
) -> ValidationReport:
    """Build a consistent report from per-category scores.

    Categories missing from *scores* get 100.  *errors* adds error issues
    (and hence blockers) to the named categories.
    """
    thresholds = thresholds or CategoryThresholds()
    scores = scores or {}
    errors = errors or {}
    categories = []
    for category in Category:
        issues = [
            ValidationIssue(
                issue_id=make_issue_id(category, "test", "", message),
                severity=Severity.ERROR,
                category=category,
                message=message,
                rule="test",
            )
            for message in errors.get(category, [])
        ]
        categories.append(
            CategoryResult.scored(
                category,
                scores.get(category, 100),
                thresholds.for_category(category),
                issues=issues,
            )
        )
    blockers = tuple(m for c in Category for m in errors.get(c, []))
    overall = weighted_score(categories)
    return ValidationReport(
        run_id=run_id,
        overall=OverallResult(
            status=determine_status(overall, blockers, thresholds),
            score=overall,
            timestamp="2026-01-01T00:00:00+00:00",
            duration=0.1,
        ),
        categories=tuple(categories),
        recommendations=tuple(generate_recommendations(categories)),
        blockers=blockers,
    )


@pytest.fixture
def make_report():
    """Factory fixture wrapping :func:`build_report`."""
    return build_report
