#!/usr/bin/env python3
"""Example 03: LLM-backed implementation generator.

Demonstrates:
- Plugging a LangChain chat model into the loop through LLMGenerator
- Learnings from failed iterations flowing into the next prompt
- Escalation when the thresholds are never met

Uses MockChatModel so it runs without an API key; swap in any
``BaseChatModel`` (e.g. ``ChatAnthropic``) for real generation.

Run:
    PYTHONPATH=src python examples/03_llm_generator.py
"""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

from quality_gates.infrastructure.config import LoopConfiguration, ValidationConfig
from quality_gates.presentation.console import ConsoleDashboard
from quality_gates.services.generation import LLMGenerator
from quality_gates.services.loop import IterativeAgenticLoop
from quality_gates.testing import MockChatModel

COMPONENT = """\
export const Banner = () => (
  <p style={{ color: "var(--lss-ion-blue)" }}>A revolutionary new experience</p>
);
"""


def main() -> None:
    model = MockChatModel(
        responses=[
            "export const Banner = () => <p>A revolutionary new experience</p>",
            "export const Banner = () => <p>A clearer new experience</p>",
        ]
    )
    with tempfile.TemporaryDirectory() as workdir:
        path = Path(workdir) / "Banner.tsx"
        path.write_text(COMPONENT, encoding="utf-8")

        loop = IterativeAgenticLoop(
            LoopConfiguration(max_iterations=2),
            validation_config=ValidationConfig(
                skip_screenshots=True,
                run_static_analysis=False,
                reports_dir=str(Path(workdir) / "reports"),
            ),
            generator=LLMGenerator(model),
            persist=False,
        )
        result = asyncio.run(loop.execute_loop("Write a launch banner", [str(path)]))

    ConsoleDashboard(use_rich=False).print_loop_result(result)
    print()
    print("Prompt sent for iteration 2:")
    print(model.prompts[-1])


if __name__ == "__main__":
    main()
