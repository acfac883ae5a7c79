import asyncio

import structlog

from shared.observability import ecomm_compensation_failures_total, ecomm_saga_compensation_total

logger = structlog.get_logger(__name__)

class SagaStep:
    def __init__(self, name, action, compensation=None, label=None):
        self.name = name
        self.action = action
        self.compensation = compensation
        # Low-cardinality name used for metrics; `name` may carry ids
        self.label = label or name

class SagaOrchestrator:
    def __init__(self):
        self.steps = []

    def add_step(self, name: str, action, compensation=None, label: str | None = None):
        """Builder pattern to add a step and its rollback compensation."""
        self.steps.append(SagaStep(name, action, compensation, label))
        return self

    async def execute(self, ctx: dict):
        """Executes steps sequentially. Triggers rollback on any exception, cancellation included."""
        executed_steps = []
        step = None
        try:
            for step in self.steps:
                await step.action(ctx)
                executed_steps.append(step)
            return True
        except (Exception, asyncio.CancelledError) as e:
            logger.error("saga_step_failed", step=step.name if step else None, error=repr(e))
            await self._rollback(executed_steps, ctx)
            raise

    async def _rollback(self, executed_steps: list, ctx: dict):
        """Executes compensations in reverse order. A failing compensation does not stop the others."""
        logger.info("saga_rollback_started", steps=len(executed_steps))
        failures = ctx.setdefault("compensation_failures", [])
        for step in reversed(executed_steps):
            if step.compensation:
                try:
                    await step.compensation(ctx)
                    logger.info("saga_compensation_succeeded", step=step.name)
                    ecomm_saga_compensation_total.labels(step_name=step.label).inc()
                except Exception as ce:
                    failures.append(step.name)
                    ecomm_compensation_failures_total.labels(step_name=step.label).inc()
                    logger.critical(
                        "saga_compensation_failed",
                        step=step.name,
                        error=repr(ce),
                        action="manual reconciliation required",
                    )
