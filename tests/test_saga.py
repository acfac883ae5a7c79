import asyncio

import pytest

from services.order_service.saga import SagaOrchestrator


def _recorder(log, name, fail=False, exc=RuntimeError):
    async def step(ctx):
        log.append(name)
        if fail:
            raise exc(name)
    return step


async def test_runs_every_step_in_order():
    log = []
    saga = (
        SagaOrchestrator()
        .add_step("a", _recorder(log, "a"), _recorder(log, "undo a"))
        .add_step("b", _recorder(log, "b"), _recorder(log, "undo b"))
    )
    assert await saga.execute({}) is True
    assert log == ["a", "b"]


async def test_failure_compensates_completed_steps_in_reverse():
    log = []
    saga = (
        SagaOrchestrator()
        .add_step("a", _recorder(log, "a"), _recorder(log, "undo a"))
        .add_step("b", _recorder(log, "b"), _recorder(log, "undo b"))
        .add_step("c", _recorder(log, "c", fail=True), _recorder(log, "undo c"))
    )
    with pytest.raises(RuntimeError):
        await saga.execute({})
    # The failing step itself is not compensated
    assert log == ["a", "b", "c", "undo b", "undo a"]


async def test_failing_compensation_does_not_block_the_rest():
    log = []
    ctx = {}
    saga = (
        SagaOrchestrator()
        .add_step("a", _recorder(log, "a"), _recorder(log, "undo a"))
        .add_step("b", _recorder(log, "b"), _recorder(log, "undo b", fail=True))
        .add_step("c", _recorder(log, "c", fail=True))
    )
    with pytest.raises(RuntimeError):
        await saga.execute(ctx)
    assert log == ["a", "b", "c", "undo b", "undo a"]
    assert ctx["compensation_failures"] == ["b"]


async def test_cancellation_also_compensates():
    log = []
    saga = (
        SagaOrchestrator()
        .add_step("a", _recorder(log, "a"), _recorder(log, "undo a"))
        .add_step("b", _recorder(log, "b", fail=True, exc=asyncio.CancelledError))
    )
    with pytest.raises(asyncio.CancelledError):
        await saga.execute({})
    assert log == ["a", "b", "undo a"]
