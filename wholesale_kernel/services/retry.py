"""
Conflict retry for orchestrated workflows.

Responsibility:
    Re-runs a workflow whose transaction lost a race (optimistic version
    mismatch or a lock abort).  Each attempt is a fresh transaction, so
    the retried command re-reads current state and re-validates.

Architecture position:
    Kernel > Services -- wraps ``OrderOrchestrator`` calls.  Not applied
    automatically; callers opt in.

Failure modes:
    After ``max_attempts`` conflicting attempts the last conflict result is
    returned unchanged.  Non-conflict failures are never retried.

Usage:
    result = retry_on_conflict(
        lambda: orchestrator.place_order(command),
        max_attempts=3,
        backoff_seconds=0.05,
    )
"""

from __future__ import annotations

import time
from collections.abc import Callable

from wholesale_kernel.logging_config import get_logger
from wholesale_kernel.services.order_orchestrator import WorkflowResult

logger = get_logger("services.retry")

RETRYABLE_ERROR_CODES = frozenset({"OPTIMISTIC_LOCK_CONFLICT", "LOCK_CONFLICT"})


def retry_on_conflict(
    operation: Callable[[], WorkflowResult],
    max_attempts: int = 3,
    backoff_seconds: float = 0.05,
) -> WorkflowResult:
    """Run ``operation`` until it stops failing on a concurrency conflict."""
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    attempt = 1
    while True:
        result = operation()
        if result.error_code not in RETRYABLE_ERROR_CODES or attempt >= max_attempts:
            return result
        logger.warning(
            "workflow_conflict_retry",
            extra={
                "workflow_command": result.command,
                "error_code": result.error_code,
                "attempt": attempt,
                "max_attempts": max_attempts,
            },
        )
        time.sleep(backoff_seconds * attempt)
        attempt += 1
