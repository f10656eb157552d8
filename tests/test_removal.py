"""
Unit tests for off() and clean().

Tests verify that removing subscribers keeps the channel itself, that pruning
discards nested channels, and that both are no-ops on unknown channels.
"""

from typing import Any

import pytest

import mediator


def test_off_clears_channel_subscribers() -> None:
    """Test that off() stops the channel's subscribers from running."""
    m = mediator.Mediator()
    calls: list[str] = []

    m.on("a:b", lambda data: calls.append("a:b"))
    m.off("a:b")
    m.trigger("a:b")

    assert calls == []
    assert m.has("a:b") is True


def test_off_keeps_nested_channels() -> None:
    """Test that off() without pruning leaves nested channels reachable."""
    m = mediator.Mediator()
    calls: list[str] = []

    m.on("a:b", lambda data: calls.append("a:b"))
    m.on("a:b:c", lambda data: calls.append("a:b:c"))
    m.off("a:b")

    assert m.has("a:b:c") is True

    m.broadcast("a:b")
    m.trigger("a:b:c")

    assert calls == ["a:b:c", "a:b:c"]


def test_off_with_nested_prunes_subtree() -> None:
    """Test that off(with_nested=True) discards every nested channel."""
    m = mediator.Mediator()
    calls: list[str] = []

    m.on("a:b", lambda data: calls.append("a:b"))
    m.on("a:b:c", lambda data: calls.append("a:b:c"))
    m.on("a:b:c:d", lambda data: calls.append("a:b:c:d"))
    m.off("a:b", with_nested=True)

    assert m.has("a:b") is True
    assert m.has("a:b:c") is False
    assert m.has("a:b:c:d") is False

    m.broadcast("a")

    assert calls == []


def test_off_with_nested_leaves_siblings() -> None:
    """Test that pruning one channel does not touch its siblings."""
    m = mediator.Mediator()
    calls: list[str] = []

    m.on("a:b:c", lambda data: calls.append("a:b:c"))
    m.on("a:x:y", lambda data: calls.append("a:x:y"))
    m.off("a:b", True)
    m.broadcast("a")

    assert calls == ["a:x:y"]


def test_pruned_channel_accepts_new_subscribers() -> None:
    """Test that a pruned channel can be registered to again."""
    m = mediator.Mediator()
    calls: list[str] = []

    m.on("a:b:c", lambda data: calls.append("old"))
    m.off("a", with_nested=True)
    m.on("a:b:c", lambda data: calls.append("new"))
    m.broadcast("a")

    assert calls == ["new"]


def test_off_unknown_channel_is_noop() -> None:
    """Test that removing from a missing channel neither raises nor creates."""
    m = mediator.Mediator()
    m.on("a", lambda data: None)

    m.off("a:b:c")
    m.off("a:b:c", with_nested=True)
    m.off("")

    assert m.has("a:b") is False
    assert m.get_channels() == ["a"]


def test_off_returns_mediator_for_chaining() -> None:
    """Test that off() returns the mediator itself, found or not."""
    m = mediator.Mediator()
    m.on("a", lambda data: None)

    assert m.off("a") is m
    assert m.off("missing") is m


def test_off_during_trigger_finishes_current_pass() -> None:
    """Test that removing mid-dispatch takes effect from the next dispatch."""
    m = mediator.Mediator()
    calls: list[str] = []

    def removes_all(data: Any) -> None:
        calls.append("first")
        m.off("test:off")

    m.on("test:off", removes_all)
    m.on("test:off", lambda data: calls.append("second"))
    m.trigger("test:off")

    assert calls == ["first", "second"]

    calls.clear()
    m.trigger("test:off")

    assert calls == []


def test_clean_removes_every_channel() -> None:
    """Test that clean() makes every channel disappear."""
    m = mediator.Mediator()
    channels = ["a", "a:b", "a:b:c", "x:y"]
    for channel in channels:
        m.on(channel, lambda data: None)

    assert m.clean() is m

    for channel in channels:
        assert m.has(channel) is False

    assert m.get_channels() == []

    with pytest.raises(mediator.ChannelNotFoundError):
        m.broadcast("a")


def test_clean_then_register_again() -> None:
    """Test that a cleaned mediator is fully usable."""
    m = mediator.Mediator()
    received: list[Any] = []

    m.on("a", received.append).clean().on("a", received.append).trigger("a", 1)

    assert received == [1]
