"""Tests for blocking execution: build, execute and refresh."""

import pytest

from stepgraph.core.errors import ExecutionError, ModeViolationError, UnknownFlowError
from stepgraph.core.workflow import ExecutionResult, WorkflowBuilder, WorkflowInstance


class TestBuildExecution:
    """Test suite for the blocking build flow."""

    def test_basic_workflow(self, basic_builder: WorkflowBuilder):
        """Test a -> b containers."""
        workflow = basic_builder.build()
        assert workflow.containers == {"a": "a-data", "b": "b-a-data"}

    def test_chain(self, three_step_builder: WorkflowBuilder):
        """Test a -> b -> c containers."""
        workflow = three_step_builder.build()
        assert workflow.containers["c"] == "c-b-a-data"

    def test_diamond(self, diamond_builder: WorkflowBuilder):
        """Test the diamond concatenates dependencies in declared order."""
        workflow = (
            diamond_builder
            .add_step("e", ["d"], lambda deps: f"e-{deps['d']}")
            .build()
        )
        assert workflow.containers["a"] == "a"
        assert workflow.containers["b"] == "b-a"
        assert workflow.containers["c"] == "c-a"
        assert workflow.containers["d"] == "d-b-a-c-a"
        assert workflow.containers["e"] == "e-d-b-a-c-a"

    def test_dependency_order(self):
        """Test every step runs after its dependencies, in a stable order."""
        def run_once():
            order = []
            builder = WorkflowBuilder()
            for name, deps in [("a", []), ("b", ["a"]), ("c", ["a"]), ("d", ["b", "c"])]:
                builder.add_step(name, deps, lambda d, name=name: order.append(name) or name)
            builder.build()
            return order

        first = run_once()
        assert first == run_once()
        assert first.index("a") < first.index("b") < first.index("d")
        assert first.index("a") < first.index("c") < first.index("d")

    def test_inputs_hold_only_dependencies(self, diamond_builder: WorkflowBuilder):
        """Test a step receives exactly its dependencies' containers."""
        seen = {}
        diamond_builder.add_step("e", ["b"], lambda deps: seen.update(deps))
        diamond_builder.build()
        assert seen == {"b": "b-a"}

    def test_async_step_rejected(self):
        """Test a coroutine implementation cannot run in blocking mode."""
        async def fetch(deps):
            return "async data"

        builder = WorkflowBuilder().add_step("async_step", [], fetch)
        with pytest.raises(ModeViolationError, match="returned an awaitable") as exc_info:
            builder.build()
        assert exc_info.value.step == "async_step"
        assert exc_info.value.operation == "build"
        assert "Use build_async instead" in str(exc_info.value)

    def test_mode_violation_keeps_earlier_containers(self):
        """Test containers written before the violation stay committed."""
        async def later(deps):
            return "never"

        builder = (
            WorkflowBuilder()
            .add_step("first", [], lambda deps: {"count": 1})
            .add_step("second", ["first"], later)
        )
        workflow = WorkflowInstance(steps=builder.steps)
        with pytest.raises(ModeViolationError, match="refresh_async"):
            workflow.refresh()
        assert workflow.containers == {"first": {"count": 1}}

    def test_step_error(self):
        """Test a raising step aborts the build with its message."""
        def broken(deps):
            raise RuntimeError("Test error in step")

        builder = WorkflowBuilder().add_step("error_step", [], broken)
        with pytest.raises(ExecutionError, match="Test error in step") as exc_info:
            builder.build()
        assert exc_info.value.step == "error_step"
        assert isinstance(exc_info.value.original_error, RuntimeError)
        assert exc_info.value.__cause__ is exc_info.value.original_error
        assert 'Step "error_step" failed' in str(exc_info.value)


class TestRefresh:
    """Test suite for refresh."""

    def test_refresh_recomputes(self):
        """Test refresh re-runs every step instead of caching."""
        counter = {"value": 0}

        def count(deps):
            counter["value"] += 1
            return {"counter": counter["value"]}

        workflow = WorkflowBuilder().add_step("refresh_test", [], count).build()
        assert workflow.containers["refresh_test"]["counter"] == 1

        workflow.refresh()
        assert workflow.containers["refresh_test"]["counter"] == 2

        workflow.refresh()
        assert workflow.containers["refresh_test"]["counter"] == 3

    def test_refresh_propagates_new_values(self):
        """Test dependents see the recomputed values."""
        version = {"value": 1}
        workflow = (
            WorkflowBuilder()
            .add_step("source", [], lambda deps: version["value"])
            .add_step("double", ["source"], lambda deps: deps["source"] * 2)
            .build()
        )
        version["value"] = 5
        workflow.refresh()
        assert workflow.containers == {"source": 5, "double": 10}

    def test_failed_refresh_is_partial(self):
        """Test a failing refresh leaves earlier containers updated, later ones stale."""
        state = {"run": 0}

        def source(deps):
            state["run"] += 1
            return state["run"]

        def middle(deps):
            if deps["source"] > 1:
                raise ValueError("middle failed")
            return f"middle-{deps['source']}"

        workflow = (
            WorkflowBuilder()
            .add_step("source", [], source)
            .add_step("middle", ["source"], middle)
            .add_step("sink", ["middle"], lambda deps: f"sink-{deps['middle']}")
            .build()
        )
        assert workflow.containers == {"source": 1, "middle": "middle-1", "sink": "sink-middle-1"}

        with pytest.raises(ExecutionError, match="middle failed"):
            workflow.refresh()
        assert workflow.containers == {"source": 2, "middle": "middle-1", "sink": "sink-middle-1"}


class TestFlowExecution:
    """Test suite for blocking flow execution."""

    def test_execute_returns_results(self, basic_builder: WorkflowBuilder):
        """Test execute returns each action's result."""
        workflow = (
            basic_builder
            .define_flow("test")
            .add_step("a", [], lambda a, context: f"modified-{a}")
            .end_flow()
            .build()
        )
        result = workflow.execute("test")
        assert isinstance(result, ExecutionResult)
        assert result.success is True
        assert result.results == {"a": "modified-a-data"}
        assert result["a"] == "modified-a-data"
        assert workflow.containers["a"] == "a-data"

    def test_context_is_passed(self):
        """Test later actions see earlier results."""
        workflow = (
            WorkflowBuilder()
            .add_step("a", [], lambda deps: "a-value")
            .add_step("b", [], lambda deps: "b-value")
            .define_flow("test")
            .add_step("a", [], lambda a, context: f"modified-{a}")
            .add_step("b", ["a"], lambda b, context: f"{b}-after-{context['a']}")
            .end_flow()
            .build()
        )
        result = workflow.execute("test")
        assert result.results["a"] == "modified-a-value"
        assert result.results["b"] == "b-value-after-modified-a-value"

    def test_flow_graph_overrides_base_order(self, basic_builder: WorkflowBuilder):
        """Test a flow may reverse the base dependency direction."""
        order = []
        workflow = (
            basic_builder
            .define_flow("reverse")
            .add_step("b", [], lambda b, context: order.append("b") or "b")
            .add_step("a", ["b"], lambda a, context: order.append("a") or context["b"])
            .end_flow()
            .build()
        )
        assert workflow.execute("reverse").results == {"b": "b", "a": "b"}
        assert order == ["b", "a"]

    def test_action_error(self, basic_builder: WorkflowBuilder):
        """Test a raising action names the step and the message, containers unchanged."""
        def fail(a, context):
            raise ValueError("Flow action error")

        workflow = basic_builder.define_flow("error_flow").add_step("a", [], fail).end_flow().build()
        before = dict(workflow.containers)

        with pytest.raises(ExecutionError, match="Flow action error") as exc_info:
            workflow.execute("error_flow")
        assert exc_info.value.step == "a"
        assert exc_info.value.flow == "error_flow"
        assert '"a"' in str(exc_info.value)
        assert workflow.containers == before

    def test_error_stops_later_steps(self, three_step_builder: WorkflowBuilder):
        """Test no step runs after a failure."""
        calls = []

        def fail(b, context):
            raise RuntimeError("boom")

        workflow = (
            three_step_builder
            .define_flow("stop")
            .add_step("a", [], lambda a, ctx: calls.append("a"))
            .add_step("b", ["a"], fail)
            .add_step("c", ["b"], lambda c, ctx: calls.append("c"))
            .end_flow()
            .build()
        )
        with pytest.raises(ExecutionError):
            workflow.execute("stop")
        assert calls == ["a"]

    def test_async_action_rejected(self, basic_builder: WorkflowBuilder):
        """Test an async action cannot run in blocking mode."""
        async def action(a, context):
            return a

        workflow = basic_builder.define_flow("async").add_step("a", [], action).end_flow().build()
        with pytest.raises(ModeViolationError, match="execute_async"):
            workflow.execute("async")

    def test_unknown_flow(self, basic_builder: WorkflowBuilder):
        """Test executing an undeclared flow."""
        workflow = basic_builder.build()
        with pytest.raises(UnknownFlowError, match="does not exist") as exc_info:
            workflow.execute("missing")
        assert exc_info.value.flow == "missing"

    def test_flows_do_not_write_containers(self, basic_builder: WorkflowBuilder):
        """Test action results never replace container values."""
        workflow = (
            basic_builder
            .define_flow("replace")
            .add_step("a", [], lambda a, context: "replacement")
            .end_flow()
            .build()
        )
        workflow.execute("replace")
        assert workflow.containers["a"] == "a-data"

    def test_validation_flow(self):
        """Test a flow that validates then saves a form."""
        state = {"valid": True, "saved": False}

        class Form:
            def validate(self):
                return state["valid"]

            def save(self):
                state["saved"] = True
                return True

        def save(form, context):
            if form.validate():
                return form.save()
            raise ValueError("Form validation failed")

        workflow = (
            WorkflowBuilder()
            .add_step("form", [], lambda deps: Form())
            .define_flow("save")
            .add_step("form", [], save)
            .end_flow()
            .build()
        )
        result = workflow.execute("save")
        assert result.success is True
        assert result.results["form"] is True
        assert state["saved"] is True

        state.update(valid=False, saved=False)
        with pytest.raises(ExecutionError, match="Form validation failed"):
            workflow.execute("save")
        assert state["saved"] is False
