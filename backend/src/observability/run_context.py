"""Run ID management for log correlation.

Every picklist assembly gets its own run ID so that all log lines emitted
while matching one batch of order items can be grouped together.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for run_id (thread and async safe)
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def generate_run_id() -> str:
    """Generate a new unique run ID.

    Returns:
        str: UUID v4 run ID
    """
    return str(uuid.uuid4())


def get_run_id() -> str:
    """Get current run ID from context.

    Returns:
        str: Current run ID or "no-run-id" if not set
    """
    return run_id_var.get() or "no-run-id"


def set_run_id(run_id: str):
    """Set run ID in current context.

    Args:
        run_id: Run ID to set

    Returns:
        Token that can be passed to reset_run_id()
    """
    return run_id_var.set(run_id)


def reset_run_id(token) -> None:
    """Restore the run ID that was active before set_run_id()."""
    run_id_var.reset(token)
