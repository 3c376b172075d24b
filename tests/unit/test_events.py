"""Unit tests for subscriptions and listener sets."""

from __future__ import annotations

from workflow_designer.events import ListenerSet


def test_listeners_fire_in_subscription_order() -> None:
    listeners: ListenerSet[int] = ListenerSet("test")
    seen: list[tuple[str, int]] = []
    listeners.subscribe(lambda v: seen.append(("a", v)))
    listeners.subscribe(lambda v: seen.append(("b", v)))

    listeners.emit(1)

    assert seen == [("a", 1), ("b", 1)]


def test_callback_may_unsubscribe_itself_during_emit() -> None:
    listeners: ListenerSet[int] = ListenerSet("test")
    seen: list[int] = []

    def once(value: int) -> None:
        seen.append(value)
        subscription.unsubscribe()

    subscription = listeners.subscribe(once)
    listeners.emit(1)
    listeners.emit(2)

    assert seen == [1]
    assert len(listeners) == 0


def test_subscription_context_manager_releases() -> None:
    listeners: ListenerSet[str] = ListenerSet("test")
    seen: list[str] = []

    with listeners.subscribe(seen.append) as subscription:
        listeners.emit("inside")
    listeners.emit("outside")

    assert seen == ["inside"]
    assert not subscription.active


def test_clear_deactivates_all_subscriptions() -> None:
    listeners: ListenerSet[str] = ListenerSet("test")
    first = listeners.subscribe(lambda _v: None)
    second = listeners.subscribe(lambda _v: None)

    listeners.clear()

    assert len(listeners) == 0
    assert not first.active and not second.active
