"""
Data Pipeline Flows Example

This example demonstrates:
1. Long-lived containers built once
2. Named flows re-traversing them with their own actions
3. Results threaded between flow steps through the context
4. Error handling for a failing flow action
"""

import asyncio
from typing import List

from stepgraph import ExecutionError, WorkflowBuilder, configure_logging
from stepgraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.WORKFLOW)


class DataSource:
    """In-memory source of numbers."""

    def __init__(self):
        self.data = [1, 2, 3, 4, 5]

    def get_data(self) -> List[int]:
        return list(self.data)


class Processor:
    def process(self, data: List[int]) -> List[int]:
        return [x * 2 for x in data]


class Aggregator:
    def aggregate(self, data: List[int]) -> int:
        return sum(data)


class Reporter:
    async def report(self, total: int) -> str:
        await asyncio.sleep(0)
        return f"Total: {total}"


def build_builder() -> WorkflowBuilder:
    builder = (
        WorkflowBuilder()
        .add_step("source", [], lambda deps: DataSource())
        .add_step("processor", ["source"], lambda deps: Processor())
        .add_step("aggregator", ["processor"], lambda deps: Aggregator())
        .add_step("reporter", ["aggregator"], lambda deps: Reporter())
    )

    process = builder.define_flow("process")

    @process.action("source")
    def read(source, context):
        return source.get_data()

    @process.action("processor", ["source"])
    def double(processor, context):
        return processor.process(context["source"])

    @process.action("aggregator", ["processor"])
    def total(aggregator, context):
        return aggregator.aggregate(context["processor"])

    @process.action("reporter", ["aggregator"])
    async def report(reporter, context):
        return await reporter.report(context["aggregator"])

    def reject(source, context):
        raise ValueError("source is read-only")

    builder.define_flow("overwrite").add_step("source", [], reject)
    return builder


async def main():
    """Build the pipeline, run its flows and show a failing flow."""
    configure_logging()
    workflow = build_builder().build()

    result = await workflow.execute_async("process")
    logger.info(result["reporter"])

    try:
        workflow.execute("overwrite")
    except ExecutionError as e:
        logger.warning(f"Flow failed at step '{e.step}': {e.original_error}")


if __name__ == "__main__":
    asyncio.run(main())
