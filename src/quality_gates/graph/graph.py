"""Build the correction-loop StateGraph.

``build_correction_graph()`` wires the generate, validate, correct and record
nodes with conditional edges into a compiled LangGraph::

    START -> generate -> validate -+-> correct -> record -+-> generate
                                   +------------> record -+-> END
"""

from typing import Any

from langgraph.graph import END, START, StateGraph

from quality_gates.graph.edges import route_after_validate, should_continue
from quality_gates.graph.nodes import (
    make_correct_node,
    make_generate_node,
    make_validate_node,
    record_node,
)
from quality_gates.graph.state import CorrectionLoopState
from quality_gates.infrastructure.config import CategoryThresholds
from quality_gates.services.corrections import CorrectionApplier, CorrectionPlanner
from quality_gates.services.generation import BaseGenerator
from quality_gates.services.pipeline import ValidationPipeline


def build_correction_graph(
    generator: BaseGenerator,
    pipeline: ValidationPipeline,
    thresholds: CategoryThresholds,
    planner: CorrectionPlanner | None = None,
    applier: CorrectionApplier | None = None,
    auto_fix: bool = True,
    initial_implementation: str | None = None,
    checkpointer: Any | None = None,
) -> Any:
    """Build and compile the correction-loop StateGraph.

    Parameters
    ----------
    generator:
        Produces the implementation at the start of each iteration.
    pipeline:
        Validates the working file set.
    thresholds:
        Success thresholds for the conjunctive success check.
    planner:
        Correction planner.  Defaults to :class:`CorrectionPlanner`.
    applier:
        Correction applier.  Defaults to :class:`CorrectionApplier`.
    auto_fix:
        If ``False`` corrections are planned but never applied.
    initial_implementation:
        Use this artifact for iteration 1 instead of calling *generator*.
    checkpointer:
        Optional LangGraph checkpointer for persistence.

    Returns
    -------
    CompiledStateGraph
        A compiled graph ready for ``.ainvoke()`` or ``.astream()``.  The
        initial state must provide ``request`` and ``max_iterations``.
    """
    graph = StateGraph(CorrectionLoopState)

    graph.add_node("generate", make_generate_node(generator, initial_implementation))
    graph.add_node("validate", make_validate_node(pipeline, thresholds))
    graph.add_node(
        "correct",
        make_correct_node(planner or CorrectionPlanner(), applier or CorrectionApplier(), auto_fix),
    )
    graph.add_node("record", record_node)

    graph.add_edge(START, "generate")
    graph.add_edge("generate", "validate")
    graph.add_conditional_edges(
        "validate",
        route_after_validate,
        {"correct": "correct", "record": "record"},
    )
    graph.add_edge("correct", "record")
    graph.add_conditional_edges(
        "record",
        should_continue,
        {"generate": "generate", "__end__": END},
    )

    compile_kwargs: dict[str, Any] = {}
    if checkpointer is not None:
        compile_kwargs["checkpointer"] = checkpointer
    return graph.compile(**compile_kwargs)


def recursion_limit(max_iterations: int) -> int:
    """Graph super-step budget for *max_iterations* cycles (four nodes each)."""
    return max_iterations * 4 + 10
