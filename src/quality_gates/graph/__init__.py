"""LangGraph-native correction loop.

Public API
----------
build_correction_graph
    Build and compile the generate-validate-correct-record graph.
CorrectionLoopState
    The TypedDict state flowing through the graph.

Node factories (for advanced customisation):
    make_generate_node, make_validate_node, make_correct_node, record_node

Edge functions:
    route_after_validate, should_continue
"""

from quality_gates.graph.edges import route_after_validate, should_continue
from quality_gates.graph.graph import build_correction_graph, recursion_limit
from quality_gates.graph.nodes import (
    make_correct_node,
    make_generate_node,
    make_validate_node,
    record_node,
)
from quality_gates.graph.state import CorrectionLoopState

__all__ = [
    "CorrectionLoopState",
    "build_correction_graph",
    "make_correct_node",
    "make_generate_node",
    "make_validate_node",
    "recursion_limit",
    "record_node",
    "route_after_validate",
    "should_continue",
]
