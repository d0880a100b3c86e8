"""Request lifecycle tests."""

import pytest

from fastapi_reverselog.exceptions import InvalidTransitionError
from fastapi_reverselog.status import (
    ALLOWED_TRANSITIONS,
    FAILED_DELIVERY_REASONS,
    RequestStatus,
    can_transition,
    ensure_transition,
    is_terminal,
)


def test_terminal_states() -> None:
    assert is_terminal(RequestStatus.DELIVERED)
    assert is_terminal("failed_delivery")
    assert not is_terminal(RequestStatus.ERROR)
    assert not is_terminal(RequestStatus.USED)


@pytest.mark.parametrize(
    ("current", "new"),
    [
        ("created", "used"),
        ("used", "delivered"),
        ("used", "failed_delivery"),
        ("used", "error"),
        ("error", "used"),
        ("error", "error"),
        ("error", "delivered"),
    ],
)
def test_allowed_transitions(current: str, new: str) -> None:
    assert can_transition(current, new)
    ensure_transition(current, new)


@pytest.mark.parametrize(
    ("current", "new"),
    [
        ("delivered", "used"),
        ("failed_delivery", "error"),
        ("created", "delivered"),
        ("bogus", "used"),
    ],
)
def test_rejected_transitions(current: str, new: str) -> None:
    assert not can_transition(current, new)
    with pytest.raises(InvalidTransitionError, match=current):
        ensure_transition(current, new)


def test_tables_are_immutable() -> None:
    with pytest.raises(TypeError):
        FAILED_DELIVERY_REASONS["99"] = "whatever"  # type: ignore
    with pytest.raises(TypeError):
        ALLOWED_TRANSITIONS[RequestStatus.USED] = frozenset()  # type: ignore


def test_failed_delivery_reasons_are_not_empty() -> None:
    assert all(FAILED_DELIVERY_REASONS.values())
