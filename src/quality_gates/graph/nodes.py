"""LangGraph node factories for the correction loop.

Each factory closes over the collaborator it needs and returns a node
function that takes a ``CorrectionLoopState`` and returns a partial update
dict.  Nodes delegate to the service classes rather than reimplementing
any logic.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from quality_gates.domain.aggregates import IterationResult
from quality_gates.domain.enums import StopReason
from quality_gates.infrastructure.config import CategoryThresholds
from quality_gates.services.corrections import CorrectionApplier, CorrectionPlanner
from quality_gates.services.evaluation import calculate_improvements, meets_success_threshold
from quality_gates.services.generation import BaseGenerator
from quality_gates.services.pipeline import ValidationPipeline

logger = logging.getLogger(__name__)


def make_generate_node(
    generator: BaseGenerator,
    initial_implementation: str | None = None,
) -> Any:
    """Create the node that starts an iteration and produces the implementation.

    Writes ``iteration`` (incremented), ``iteration_started`` and
    ``implementation``, and clears the per-iteration fields.  When
    *initial_implementation* is given it is used for iteration 1 instead of
    calling the generator.
    """

    async def generate_node(state: dict[str, Any]) -> dict[str, Any]:
        iteration = state.get("iteration", 0) + 1
        started = time.monotonic()
        if iteration == 1 and initial_implementation is not None:
            implementation = initial_implementation
        else:
            implementation = await generator.generate(
                state["request"], iteration, list(state.get("iterations", []))
            )
        logger.info("generate_node: iteration %d (%d chars)", iteration, len(implementation))
        return {
            "iteration": iteration,
            "iteration_started": started,
            "implementation": implementation,
            "report": None,
            "success": False,
            "corrections": [],
            "applied_corrections": [],
        }

    return generate_node


def make_validate_node(pipeline: ValidationPipeline, thresholds: CategoryThresholds) -> Any:
    """Create the node that runs the validation pipeline.

    Writes ``report`` and ``success`` (the conjunctive threshold check).
    """

    async def validate_node(state: dict[str, Any]) -> dict[str, Any]:
        report = await pipeline.run_complete_validation(state.get("files") or None)
        success = meets_success_threshold(report, thresholds)
        logger.info(
            "validate_node: iteration %d score=%d success=%s",
            state.get("iteration", 0),
            report.overall.score,
            success,
        )
        return {"report": report, "success": success}

    return validate_node


def make_correct_node(
    planner: CorrectionPlanner,
    applier: CorrectionApplier,
    auto_fix: bool = True,
) -> Any:
    """Create the node that plans and (optionally) applies corrections.

    Writes ``corrections``, ``applied_corrections`` and ``files``; files
    touched by applied corrections join the working set.
    """

    async def correct_node(state: dict[str, Any]) -> dict[str, Any]:
        report = state["report"]
        files = list(state.get("files") or ())
        if not files and report.metadata is not None:
            files = list(report.metadata.changed_files)

        corrections = planner.generate_corrections(report, files)
        applied = []
        if auto_fix:
            # the applier writes sequentially, in planner order
            applied = await asyncio.to_thread(applier.apply_corrections, corrections)
        for action in applied:
            if action.file_path not in files:
                files.append(action.file_path)

        logger.info(
            "correct_node: %d corrections planned, %d applied",
            len(corrections),
            len(applied),
        )
        return {"corrections": corrections, "applied_corrections": applied, "files": files}

    return correct_node


def record_node(state: dict[str, Any]) -> dict[str, Any]:
    """Append the finished iteration to history and decide whether to stop.

    Writes one :class:`IterationResult` to ``iterations`` and sets
    ``stop_reason`` on success or when the iteration limit is reached.
    """
    history = state.get("iterations", [])
    report = state["report"]
    iteration = state["iteration"]
    success = bool(state.get("success"))
    previous = history[-1].validation_report if history else None

    result = IterationResult(
        iteration=iteration,
        success=success,
        score=report.overall.score,
        improvements=tuple(calculate_improvements(report, previous)),
        corrections=tuple(state.get("corrections", [])),
        validation_report=report,
        duration=round(time.monotonic() - state.get("iteration_started", time.monotonic()), 3),
        timestamp=datetime.now(timezone.utc).isoformat(),
        applied_corrections=tuple(state.get("applied_corrections", [])),
    )

    stop_reason = ""
    if success:
        stop_reason = StopReason.SUCCEEDED.value
    elif iteration >= state.get("max_iterations", 1):
        stop_reason = StopReason.EXHAUSTED.value

    logger.debug("record_node: iteration %d recorded, stop_reason=%r", iteration, stop_reason)
    return {"iterations": [result], "stop_reason": stop_reason}
