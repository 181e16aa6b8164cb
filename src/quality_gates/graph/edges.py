"""Conditional edge functions for the correction-loop graph."""

from __future__ import annotations

from typing import Any, Literal


def route_after_validate(state: dict[str, Any]) -> Literal["correct", "record"]:
    """After validate, plan corrections unless the iteration is final.

    A successful iteration, or the last permitted one, goes straight to
    ``record``.
    """
    if state.get("success"):
        return "record"
    if state.get("iteration", 0) < state.get("max_iterations", 1):
        return "correct"
    return "record"


def should_continue(state: dict[str, Any]) -> Literal["generate", "__end__"]:
    """After record, loop back to ``generate`` until a stop reason is set."""
    if state.get("stop_reason"):
        return "__end__"
    return "generate"
