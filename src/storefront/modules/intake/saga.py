"""Ordered multi-step writes with compensation.

A :class:`Saga` runs its steps in order. Each step's action receives the
results of the steps before it. When a step fails:

* before any pivot step has succeeded, the completed steps are
  compensated in reverse order;
* after a pivot step has succeeded, the earlier writes stand and only
  the failing step's ``recover`` runs.

Compensation and recovery are best effort. Their own failures are
logged for manual reconciliation and never replace the original error.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog


logger = structlog.get_logger()

Results = dict[str, Any]


@dataclass(frozen=True)
class SagaStep:
    """One durable write.

    Attributes:
        name: Key under which the action's result is stored
        action: Performs the write, given earlier results
        compensate: Undoes this step, given all results so far
        recover: Runs when this step fails after a pivot has succeeded
        pivot: Once this step succeeds, earlier steps are never undone
    """

    name: str
    action: Callable[[Results], Awaitable[Any]]
    compensate: Callable[[Results], Awaitable[None]] | None = None
    recover: Callable[[Results, Exception], Awaitable[None]] | None = None
    pivot: bool = False


class SagaFailedError(Exception):
    """Raised when a step fails; wraps the step's original exception."""

    def __init__(self, step: str, cause: Exception) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"saga step {step!r} failed: {cause}")


class Saga:
    """Run a list of :class:`SagaStep` objects.

    Usage:
        saga = Saga("order", [
            SagaStep("order", insert_order, compensate=delete_order),
            SagaStep("items", insert_items, pivot=True),
        ], context={"website_id": str(tenant.id)})
        results = await saga.execute()
    """

    def __init__(
        self,
        name: str,
        steps: list[SagaStep],
        context: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.steps = steps
        self.context = context or {}

    async def execute(self) -> Results:
        """Run every step, returning their results by step name.

        Raises:
            SagaFailedError: If any step's action raised
        """
        results: Results = {}
        completed: list[SagaStep] = []
        pivoted = False

        for step in self.steps:
            try:
                results[step.name] = await step.action(results)
            except Exception as exc:
                logger.warning(
                    "saga_step_failed",
                    saga=self.name,
                    step=step.name,
                    error=str(exc),
                    **self.context,
                )
                if pivoted:
                    await self._recover(step, results, exc)
                else:
                    await self._compensate(completed, results)
                raise SagaFailedError(step.name, exc) from exc

            completed.append(step)
            pivoted = pivoted or step.pivot

        return results

    async def _compensate(self, completed: list[SagaStep], results: Results) -> None:
        for step in reversed(completed):
            if step.compensate is None:
                continue
            try:
                await step.compensate(results)
            except Exception as exc:
                logger.error(
                    f"{step.name}_rollback_failed",
                    saga=self.name,
                    step=step.name,
                    error=str(exc),
                    **self.context,
                )

    async def _recover(self, step: SagaStep, results: Results, cause: Exception) -> None:
        if step.recover is None:
            return
        try:
            await step.recover(results, cause)
        except Exception as exc:
            logger.error(
                f"{step.name}_recovery_failed",
                saga=self.name,
                step=step.name,
                error=str(exc),
                **self.context,
            )
