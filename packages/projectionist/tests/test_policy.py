"""Tests for ExceptionPolicy and the dispatch state machine."""

from __future__ import annotations

import logging
from typing import Any

import pytest
from bank_account import (
    AccountStore,
    BalanceProjector,
    MoneyAdded,
    ProjectorThatThrowsAnException,
)

from cqrs_ddd_projectionist import DispatchExecutor, EventHandlerRegistry
from cqrs_ddd_projectionist.policy import (
    DispatchState,
    ExceptionPolicy,
    InvocationResult,
)
from cqrs_ddd_projectionist.primitives.exceptions import HandlerInvocationError
from cqrs_ddd_projectionist.routing import DispatchRecord


def _failed_result(handler: Any) -> InvocationResult:
    record = DispatchRecord(
        event=MoneyAdded(account_id=1, amount=1),
        handler=handler,
        method="on_money_added",
    )
    return InvocationResult.failure(record, RuntimeError("boom"))


def test_fail_fast_aborts_on_failure() -> None:
    policy = ExceptionPolicy()
    result = _failed_result(BalanceProjector())

    assert policy.should_abort(result) is True
    assert policy.should_abort(InvocationResult.success(result.record)) is False


def test_catch_mode_never_aborts() -> None:
    policy = ExceptionPolicy(catch_exceptions=True)

    assert policy.should_abort(_failed_result(BalanceProjector())) is False


def test_to_exception_carries_context() -> None:
    handler = BalanceProjector()
    result = _failed_result(handler)

    error = ExceptionPolicy().to_exception(result)

    assert isinstance(error, HandlerInvocationError)
    assert error.handler is handler
    assert error.method == "on_money_added"
    assert error.original is result.error
    assert "Failed to invoke BalanceProjector.on_money_added for MoneyAdded" in str(
        error
    )


@pytest.mark.asyncio
async def test_contain_logs_and_calls_hook(caplog) -> None:
    handler = ProjectorThatThrowsAnException()
    result = _failed_result(handler)

    with caplog.at_level(logging.ERROR):
        await ExceptionPolicy(catch_exceptions=True).contain(result)

    assert handler.handled_exceptions == [(result.record.event, result.error)]
    assert "continuing dispatch" in caplog.text


@pytest.mark.asyncio
async def test_contain_awaits_async_hooks() -> None:
    calls: list[Exception] = []

    class AsyncHookProjector(BalanceProjector):
        async def on_handler_exception(self, event: Any, error: Exception) -> None:
            calls.append(error)

    result = _failed_result(AsyncHookProjector())

    await ExceptionPolicy(catch_exceptions=True).contain(result)

    assert calls == [result.error]


@pytest.mark.asyncio
async def test_contain_without_hook_only_logs(caplog) -> None:
    with caplog.at_level(logging.ERROR):
        await ExceptionPolicy(catch_exceptions=True).contain(
            _failed_result(BalanceProjector())
        )

    assert "BalanceProjector.on_money_added failed" in caplog.text


@pytest.mark.asyncio
async def test_failing_exception_hook_propagates(accounts: AccountStore) -> None:
    class BrokenHookProjector(ProjectorThatThrowsAnException):
        def on_handler_exception(self, event: Any, error: Exception) -> None:
            raise ValueError("hook is broken")

    registry = EventHandlerRegistry()
    registry.add_projector(BrokenHookProjector)
    registry.add_projector(BalanceProjector)
    executor = DispatchExecutor(
        registry, policy=ExceptionPolicy(catch_exceptions=True)
    )

    with pytest.raises(ValueError, match="hook is broken"):
        await executor.dispatch(MoneyAdded(account_id=1, amount=5))

    assert accounts.get(1).amount == 0


@pytest.mark.asyncio
async def test_fail_fast_pass_state_is_aborted(accounts: AccountStore) -> None:
    registry = EventHandlerRegistry()
    registry.add_projector(ProjectorThatThrowsAnException)
    registry.add_projector(BalanceProjector)
    executor = DispatchExecutor(registry)

    with pytest.raises(HandlerInvocationError) as exc_info:
        await executor.dispatch(MoneyAdded(account_id=1, amount=5))

    report = exc_info.value.report
    assert report.state is DispatchState.ABORTED
    assert [r.record.handler_name for r in report.results] == [
        "ProjectorThatThrowsAnException"
    ]
    assert accounts.get(1).amount == 0


@pytest.mark.asyncio
async def test_catch_mode_pass_state_is_completed(accounts: AccountStore) -> None:
    registry = EventHandlerRegistry()
    registry.add_projector(ProjectorThatThrowsAnException)
    registry.add_projector(BalanceProjector)
    executor = DispatchExecutor(
        registry, policy=ExceptionPolicy(catch_exceptions=True)
    )

    report = await executor.dispatch(MoneyAdded(account_id=1, amount=1000))

    assert report.state is DispatchState.COMPLETED
    assert [r.succeeded for r in report.results] == [False, True]
    assert [r.record.handler_name for r in report.invoked] == [
        "ProjectorThatThrowsAnException",
        "BalanceProjector",
    ]
    assert accounts.get(1).amount == 1000
