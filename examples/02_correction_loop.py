#!/usr/bin/env python3
"""Example 02: Iterative correction loop with an audited site.

Demonstrates:
- Feeding canned audit results through StaticVisualAuditor
- Running IterativeAgenticLoop until the thresholds are met
- Automated token replacement and alt-text corrections between iterations

Run:
    PYTHONPATH=src python examples/02_correction_loop.py
"""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

from quality_gates.domain.values import PerformanceMetrics, VisualAuditResult
from quality_gates.infrastructure.config import LoopConfiguration, ValidationConfig
from quality_gates.infrastructure.report_store import ReportStore
from quality_gates.presentation.console import ConsoleDashboard
from quality_gates.services.loop import IterativeAgenticLoop
from quality_gates.testing import StaticVisualAuditor

COMPONENT = """\
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
    <img src="hero.png">
  </section>
);
"""


def main() -> None:
    with tempfile.TemporaryDirectory() as workdir:
        path = Path(workdir) / "Hero.tsx"
        path.write_text(COMPONENT, encoding="utf-8")

        auditor = StaticVisualAuditor(
            VisualAuditResult(
                structural_score=95,
                brand_score=96,
                performance=PerformanceMetrics(lcp=1900, cls=0.03, score=94),
            )
        )
        validation = ValidationConfig(
            urls=("/",),
            run_static_analysis=False,
            reports_dir=str(Path(workdir) / "reports"),
        )
        loop = IterativeAgenticLoop(
            LoopConfiguration(max_iterations=3),
            validation_config=validation,
            auditor=auditor,
            store=ReportStore(Path(workdir) / "loops"),
        )
        result = asyncio.run(loop.execute_loop("Add a hero section", [str(path)]))

        ConsoleDashboard().print_loop_result(result)
        print("Corrected component:")
        print(path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    main()
