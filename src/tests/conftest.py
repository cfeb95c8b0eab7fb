"""Shared fixtures for workflow tests.

Builders are returned unbuilt so tests can add steps or flows before
calling ``build()`` or ``build_async()``.
"""

import pytest

from stepgraph.core.workflow import WorkflowBuilder


@pytest.fixture
def basic_builder() -> WorkflowBuilder:
    """a -> b."""
    return (
        WorkflowBuilder()
        .add_step("a", [], lambda deps: "a-data")
        .add_step("b", ["a"], lambda deps: f"b-{deps['a']}")
    )


@pytest.fixture
def three_step_builder() -> WorkflowBuilder:
    """a -> b -> c."""
    return (
        WorkflowBuilder()
        .add_step("a", [], lambda deps: "a-data")
        .add_step("b", ["a"], lambda deps: f"b-{deps['a']}")
        .add_step("c", ["b"], lambda deps: f"c-{deps['b']}")
    )


@pytest.fixture
def diamond_builder() -> WorkflowBuilder:
    """a -> (b, c) -> d."""
    return (
        WorkflowBuilder()
        .add_step("a", [], lambda deps: "a")
        .add_step("b", ["a"], lambda deps: f"b-{deps['a']}")
        .add_step("c", ["a"], lambda deps: f"c-{deps['a']}")
        .add_step("d", ["b", "c"], lambda deps: f"d-{deps['b']}-{deps['c']}")
    )


@pytest.fixture
def diamond_graph():
    """Plain dependency graph of the diamond workflow."""
    return {"a": [], "b": ["a"], "c": ["a"], "d": ["b", "c"]}
