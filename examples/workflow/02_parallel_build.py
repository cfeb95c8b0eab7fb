"""
Parallel Build Example

This example demonstrates:
1. Async step implementations
2. Independent steps of one level running concurrently
3. A join step waiting for the whole level
"""

import asyncio
import time

from stepgraph import WorkflowBuilder, WorkflowConfig, configure_logging
from stepgraph.core.config import StepLoggingConfig
from stepgraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.WORKFLOW)


def fetch(name: str, delay: float):
    async def run(deps):
        await asyncio.sleep(delay)
        return {"source": name, "rows": int(delay * 100)}
    return run


async def main():
    """Build three slow sources concurrently and join them."""
    configure_logging()
    config = WorkflowConfig(
        name="parallel-build",
        logging=StepLoggingConfig(show_transitions=True),
    )

    builder = (
        WorkflowBuilder(config=config)
        .add_step("orders", [], fetch("orders", 0.3))
        .add_step("customers", [], fetch("customers", 0.2))
        .add_step("products", [], fetch("products", 0.1))
        .add_step(
            "summary",
            ["orders", "customers", "products"],
            lambda deps: sum(source["rows"] for source in deps.values()),
        )
    )

    started = time.perf_counter()
    workflow = await builder.build_async()
    elapsed = time.perf_counter() - started

    # Sources overlap, so the build takes about as long as the slowest one.
    logger.info(f"Total rows: {workflow.containers['summary']} in {elapsed:.2f}s")


if __name__ == "__main__":
    asyncio.run(main())
