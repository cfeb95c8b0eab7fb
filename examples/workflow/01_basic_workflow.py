"""
Basic Workflow Example

This example demonstrates:
1. Declaring steps with chained calls and decorators
2. Building the workflow in blocking mode
3. Refreshing containers after their inputs change
"""

from stepgraph import WorkflowBuilder, configure_logging
from stepgraph.core.logging import LogComponent, get_logger

logger = get_logger(LogComponent.WORKFLOW)

SETTINGS = {"greeting": "Hello"}


def main():
    """Build a small greeting workflow and refresh it."""
    configure_logging()

    builder = (
        WorkflowBuilder()
        .add_step("settings", [], lambda deps: dict(SETTINGS))
        .add_step("user", [], lambda deps: {"name": "Ada"})
    )

    @builder.step("greeting", ["settings", "user"])
    def greeting(deps):
        return f"{deps['settings']['greeting']}, {deps['user']['name']}!"

    workflow = builder.build()
    logger.info(f"Greeting: {workflow.containers['greeting']}")

    SETTINGS["greeting"] = "Goodbye"
    workflow.refresh()
    logger.info(f"After refresh: {workflow.containers['greeting']}")


if __name__ == "__main__":
    main()
