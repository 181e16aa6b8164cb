#!/usr/bin/env python3
"""Example 01: One validation run over a small changeset.

Demonstrates:
- Writing a component with a missing alt attribute and literal colours
- Running the ValidationPipeline with static inspection only
- Inspecting category scores, blockers and recommendations

Run:
    PYTHONPATH=src python examples/01_basic_validation.py
"""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

from quality_gates.infrastructure.config import ValidationConfig
from quality_gates.presentation.console import ConsoleDashboard
from quality_gates.services.pipeline import ValidationPipeline

COMPONENT = """\
export const Hero = () => (
  <section style={{ color: "#FF6F61", padding: "16px" }}>
    <img src="hero.png">
    <button>Go</button>
  </section>
);
"""


def main() -> None:
    with tempfile.TemporaryDirectory() as workdir:
        path = Path(workdir) / "Hero.tsx"
        path.write_text(COMPONENT, encoding="utf-8")

        config = ValidationConfig(
            skip_screenshots=True,
            run_static_analysis=False,
            reports_dir=str(Path(workdir) / "reports"),
        )
        pipeline = ValidationPipeline(config)
        report = asyncio.run(pipeline.run_complete_validation([str(path)]))

        ConsoleDashboard().print_report(report)
        print(f"Persisted reports: {pipeline.store.list_ids()}")


if __name__ == "__main__":
    main()
