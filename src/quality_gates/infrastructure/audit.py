"""Visual/audit collaborator interface.

The pipeline never drives a browser itself.  Layout scores, axe-style
accessibility violations, Core Web Vitals and theme compatibility are
supplied by a :class:`BaseVisualAuditor`.  This module provides the
interface, a file-backed implementation that reads results exported by a
browser-automation harness, and :class:`AuditSession`, which makes sure the
collaborator is asked at most once per validation run.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from quality_gates.domain.exceptions import AuditError
from quality_gates.domain.values import (
    AccessibilityViolation,
    PerformanceMetrics,
    ThemeCompatibility,
    VisualAuditResult,
)

logger = logging.getLogger(__name__)


# ===================================================================== #
#  Interface                                                             #
# ===================================================================== #


class BaseVisualAuditor(ABC):
    """Abstract visual/audit collaborator."""

    @abstractmethod
    async def run_visual_validation(self, urls: list[str]) -> VisualAuditResult:
        """Audit *urls* and return results aggregated across them.

        Raises
        ------
        AuditError
            If no results can be produced.
        """

    @abstractmethod
    async def validate_theme_compatibility(self, url: str) -> ThemeCompatibility:
        """Check *url* across every theme mode."""


# ===================================================================== #
#  File-backed auditor                                                   #
# ===================================================================== #


class _ViolationModel(BaseModel):
    id: str
    impact: str = "moderate"
    description: str = ""
    help: str = ""


class _AccessibilityModel(BaseModel):
    violations: list[_ViolationModel] = Field(default_factory=list)
    score: float = Field(default=100.0, ge=0, le=100)
    wcag_level: str = "AA"


class _PerformanceModel(BaseModel):
    lcp: float = Field(default=0.0, ge=0)
    cls: float = Field(default=0.0, ge=0)
    score: float = Field(default=100.0, ge=0, le=100)


class _PageAuditModel(BaseModel):
    structural_score: float = Field(default=100.0, ge=0, le=100)
    brand_score: float = Field(default=100.0, ge=0, le=100)
    accessibility: _AccessibilityModel = Field(default_factory=_AccessibilityModel)
    performance: _PerformanceModel = Field(default_factory=_PerformanceModel)


class _ThemeModel(BaseModel):
    compatible: bool = True
    failed_themes: list[str] = Field(default_factory=list)


class AuditDocument(BaseModel):
    """Schema of an exported audit file.

    Example::

        {
          "pages": {
            "/": {
              "structural_score": 92,
              "brand_score": 95,
              "accessibility": {"violations": [...], "score": 90},
              "performance": {"lcp": 1800, "cls": 0.05, "score": 92}
            }
          },
          "themes": {"/": {"compatible": false, "failed_themes": ["dark"]}}
        }
    """

    pages: dict[str, _PageAuditModel] = Field(default_factory=dict)
    themes: dict[str, _ThemeModel] = Field(default_factory=dict)


def aggregate_pages(pages: list[_PageAuditModel]) -> VisualAuditResult:
    """Combine per-URL audits, keeping the worst value of every measurement."""
    violations: dict[str, AccessibilityViolation] = {}
    for page in pages:
        for v in page.accessibility.violations:
            violations.setdefault(
                v.id,
                AccessibilityViolation(
                    id=v.id, impact=v.impact, description=v.description, help=v.help
                ),
            )

    return VisualAuditResult(
        structural_score=min(p.structural_score for p in pages),
        brand_score=min(p.brand_score for p in pages),
        accessibility_violations=tuple(violations.values()),
        accessibility_score=min(p.accessibility.score for p in pages),
        wcag_level=pages[0].accessibility.wcag_level,
        performance=PerformanceMetrics(
            lcp=max(p.performance.lcp for p in pages),
            cls=max(p.performance.cls for p in pages),
            score=min(p.performance.score for p in pages),
        ),
    )


class JsonFileAuditor(BaseVisualAuditor):
    """Serve audit results from a JSON file exported by a browser harness.

    Parameters
    ----------
    path:
        Path to a file matching :class:`AuditDocument`.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._document: AuditDocument | None = None

    def _load(self) -> AuditDocument:
        if self._document is None:
            try:
                raw: Any = json.loads(self._path.read_text(encoding="utf-8"))
                self._document = AuditDocument.model_validate(raw)
            except (OSError, json.JSONDecodeError, ValidationError) as exc:
                raise AuditError(f"cannot read audit file {self._path}: {exc}") from exc
        return self._document

    async def run_visual_validation(self, urls: list[str]) -> VisualAuditResult:
        document = self._load()
        pages = [document.pages[u] for u in urls if u in document.pages]
        if not pages:
            raise AuditError(
                f"audit file {self._path} has no results for {', '.join(urls)}"
            )
        missing = [u for u in urls if u not in document.pages]
        if missing:
            logger.warning("JsonFileAuditor: no audit results for %s", missing)
        return aggregate_pages(pages)

    async def validate_theme_compatibility(self, url: str) -> ThemeCompatibility:
        theme = self._load().themes.get(url)
        if theme is None:
            return ThemeCompatibility(url=url, compatible=True)
        return ThemeCompatibility(
            url=url,
            compatible=theme.compatible,
            failed_themes=tuple(theme.failed_themes),
        )


# ===================================================================== #
#  Audit session                                                         #
# ===================================================================== #


class AuditSession:
    """Memoising wrapper so one pipeline run queries the auditor once.

    A collaborator failure is remembered and re-raised to every caller, so
    each category validator handles it independently.

    Parameters
    ----------
    auditor:
        The collaborator to query.
    urls:
        URLs to audit.
    """

    def __init__(self, auditor: BaseVisualAuditor, urls: list[str]) -> None:
        self._auditor = auditor
        self._urls = list(urls)
        self._lock = asyncio.Lock()
        self._visual: VisualAuditResult | None = None
        self._visual_error: Exception | None = None
        self._themes: dict[str, ThemeCompatibility] = {}

    @property
    def urls(self) -> list[str]:
        return list(self._urls)

    async def visual(self) -> VisualAuditResult:
        """Return the aggregated visual audit, querying the collaborator once."""
        async with self._lock:
            if self._visual is None and self._visual_error is None:
                try:
                    self._visual = await self._auditor.run_visual_validation(self._urls)
                except Exception as exc:
                    logger.warning("AuditSession: visual audit failed: %s", exc)
                    self._visual_error = exc
            if self._visual_error is not None:
                raise self._visual_error
            if self._visual is None:
                raise AuditError("visual audit returned no result")
            return self._visual

    async def theme(self, url: str) -> ThemeCompatibility:
        """Return the theme-compatibility result for *url*."""
        async with self._lock:
            if url not in self._themes:
                self._themes[url] = await self._auditor.validate_theme_compatibility(url)
            return self._themes[url]
