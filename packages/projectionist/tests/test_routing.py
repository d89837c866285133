"""Tests for EventRouter."""

from __future__ import annotations

from typing import Any

import pytest
from bank_account import (
    BalanceProjector,
    InvalidProjectorThatDoesNotHaveTheRightEventHandlingMethod,
    LargeMoneyAdded,
    MoneyAdded,
    MoneyAddedCountProjector,
    MoneySubtracted,
)

from cqrs_ddd_projectionist import Projector, Reactor
from cqrs_ddd_projectionist.primitives.exceptions import InvalidEventHandlerError
from cqrs_ddd_projectionist.routing import (
    DispatchRecord,
    EventRouter,
    default_method_name,
)


@pytest.fixture
def router() -> EventRouter:
    return EventRouter()


def test_resolves_declared_method(router: EventRouter) -> None:
    handler = BalanceProjector()

    assert (
        router.resolve(handler, MoneyAdded(account_id=1, amount=1)) == "on_money_added"
    )
    assert (
        router.resolve(handler, MoneySubtracted(account_id=1, amount=1))
        == "on_money_subtracted"
    )


def test_unhandled_event_is_no_match(router: EventRouter) -> None:
    handler = MoneyAddedCountProjector()

    assert router.resolve(handler, MoneySubtracted(account_id=1, amount=1)) is None
    assert router.record(handler, MoneySubtracted(account_id=1, amount=1)) is None


def test_empty_declaration_ignores_everything(router: EventRouter) -> None:
    class Silent(Reactor):
        pass

    assert router.resolve(Silent(), MoneyAdded(account_id=1, amount=1)) is None


def test_missing_method_raises(router: EventRouter) -> None:
    handler = InvalidProjectorThatDoesNotHaveTheRightEventHandlingMethod()

    with pytest.raises(InvalidEventHandlerError) as exc_info:
        router.resolve(handler, MoneyAdded(account_id=1, amount=1))

    assert exc_info.value.method == "on_money_added"
    assert exc_info.value.event_type == MoneyAdded.event_type_id()


def test_non_callable_attribute_raises(router: EventRouter) -> None:
    class Misconfigured(Projector):
        handles_events = {MoneyAdded: "amount"}
        amount = 10

    with pytest.raises(InvalidEventHandlerError):
        router.resolve(Misconfigured(), MoneyAdded(account_id=1, amount=1))


def test_missing_method_only_raises_for_matching_events(router: EventRouter) -> None:
    handler = InvalidProjectorThatDoesNotHaveTheRightEventHandlingMethod()

    assert router.resolve(handler, MoneySubtracted(account_id=1, amount=1)) is None


def test_sequence_declaration_derives_method_names(router: EventRouter) -> None:
    assert router.handled_event_types(MoneyAddedCountProjector()) == {
        MoneyAdded.event_type_id(): "on_money_added"
    }


def test_sequence_declaration_uses_handle_event(router: EventRouter) -> None:
    class CatchAll(Projector):
        handles_events = [MoneyAdded, MoneySubtracted]
        handle_event = "apply"

        def apply(self, event: Any) -> None:
            pass

    handler = CatchAll()
    assert router.resolve(handler, MoneyAdded(account_id=1, amount=1)) == "apply"
    assert router.resolve(handler, MoneySubtracted(account_id=1, amount=1)) == "apply"


def test_function_values_resolve_to_their_name(router: EventRouter) -> None:
    class ByReference(Projector):
        def added(self, event: MoneyAdded) -> None:
            pass

        handles_events = {MoneyAdded: added}

    assert router.resolve(ByReference(), MoneyAdded(account_id=1, amount=1)) == "added"


def test_string_keys_match_qualified_and_bare_names(router: EventRouter) -> None:
    class ByName(Projector):
        handles_events = {
            MoneyAdded.event_type_id(): "added",
            "MoneySubtracted": "subtracted",
        }

        def added(self, event: Any) -> None:
            pass

        def subtracted(self, event: Any) -> None:
            pass

    handler = ByName()
    assert router.resolve(handler, MoneyAdded(account_id=1, amount=1)) == "added"
    assert (
        router.resolve(handler, MoneySubtracted(account_id=1, amount=1)) == "subtracted"
    )


def test_subclass_events_are_no_match(router: EventRouter) -> None:
    handler = BalanceProjector()

    assert router.resolve(handler, LargeMoneyAdded(account_id=1, amount=1)) is None


def test_bare_name_keys_only_match_the_event_class_itself(
    router: EventRouter,
) -> None:
    class ByBaseName(Projector):
        handles_events = {"MoneyAdded": "added", "DomainEvent": "anything"}

        def added(self, event: Any) -> None:
            pass

        def anything(self, event: Any) -> None:
            pass

    handler = ByBaseName()
    assert router.resolve(handler, MoneyAdded(account_id=1, amount=1)) == "added"
    assert router.resolve(handler, LargeMoneyAdded(account_id=1, amount=1)) is None
    assert router.resolve(handler, MoneySubtracted(account_id=1, amount=1)) is None


def test_each_subclass_needs_its_own_entry(router: EventRouter) -> None:
    class Specific(Projector):
        handles_events = {MoneyAdded: "added", LargeMoneyAdded: "large_added"}

        def added(self, event: Any) -> None:
            pass

        def large_added(self, event: Any) -> None:
            pass

    handler = Specific()
    assert router.resolve(handler, MoneyAdded(account_id=1, amount=1)) == "added"
    assert (
        router.resolve(handler, LargeMoneyAdded(account_id=1, amount=1))
        == "large_added"
    )


def test_sequence_declaration_with_handle_event_method(router: EventRouter) -> None:
    class Generic(Projector):
        handles_events = [LargeMoneyAdded]

        def handle_event(self, event: Any) -> None:
            pass

    handler = Generic()
    assert (
        router.resolve(handler, LargeMoneyAdded(account_id=1, amount=1))
        == "handle_event"
    )
    assert router.record(
        handler, LargeMoneyAdded(account_id=1, amount=1)
    ).bound_method() == handler.handle_event


def test_sequence_declaration_with_unusable_handle_event_raises(
    router: EventRouter,
) -> None:
    class Misconfigured(Projector):
        handles_events = [MoneyAdded]
        handle_event = 42

    with pytest.raises(InvalidEventHandlerError) as exc_info:
        router.resolve(Misconfigured(), MoneyAdded(account_id=1, amount=1))

    assert exc_info.value.event_type == MoneyAdded.event_type_id()


def test_record_binds_the_handler_method(router: EventRouter) -> None:
    handler = BalanceProjector()
    event = MoneyAdded(account_id=1, amount=1)

    record = router.record(handler, event)

    assert record == DispatchRecord(
        event=event, handler=handler, method="on_money_added"
    )
    assert record.bound_method() == handler.on_money_added
    assert record.handler_name == "BalanceProjector"
    assert record.event_name == "MoneyAdded"


@pytest.mark.parametrize(
    ("event_key", "expected"),
    [
        ("MoneyAdded", "on_money_added"),
        ("bank_account.MoneySubtracted", "on_money_subtracted"),
        ("HTTPRequestSent", "on_http_request_sent"),
        ("Account2Closed", "on_account2_closed"),
    ],
)
def test_default_method_name(event_key: str, expected: str) -> None:
    assert default_method_name(event_key) == expected
