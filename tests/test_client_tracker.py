"""Unit tests for the in-memory fixed-window client tracker."""

import threading
import time
from datetime import timedelta
from unittest.mock import Mock

import pytest

from gateway.adapters.rate_limit.in_memory import ClientTracker
from gateway.core.errors import ConfigurationAppError


def test_allows_up_to_limit_in_same_window() -> None:
    clock = Mock(return_value=1000.0)
    tracker = ClientTracker(3, timedelta(seconds=60), clock=clock)

    assert tracker.admit("a") is True
    assert tracker.admit("a") is True
    result = tracker.consume("a")
    assert result.allowed is True
    assert result.count == 3
    assert result.window_end == 1060.0


def test_denies_when_saturated_without_incrementing() -> None:
    clock = Mock(return_value=1000.0)
    tracker = ClientTracker(2, timedelta(seconds=60), clock=clock)

    assert tracker.admit("a") is True
    assert tracker.admit("a") is True

    for _ in range(3):
        denied = tracker.consume("a")
        assert denied.allowed is False
        assert denied.count == 2

    clock.return_value = 1045.5
    denied = tracker.consume("a")
    assert denied.retry_after_seconds == 15


def test_first_request_opens_window() -> None:
    clock = Mock(return_value=500.0)
    tracker = ClientTracker(5, timedelta(seconds=10), clock=clock)

    first = tracker.consume("a")
    second = tracker.consume("a")

    assert first.reset is True
    assert first.count == 1
    assert first.window_end == 510.0
    assert second.reset is False
    assert second.window_end == 510.0


def test_resets_lazily_after_window_end() -> None:
    clock = Mock(return_value=1000.0)
    tracker = ClientTracker(2, timedelta(seconds=10), clock=clock)

    assert [tracker.admit("a") for _ in range(3)] == [True, True, False]

    # Window end itself is still inside the window
    clock.return_value = 1010.0
    assert tracker.admit("a") is False

    clock.return_value = 1010.001
    result = tracker.consume("a")
    assert result.allowed is True
    assert result.reset is True
    assert result.count == 1
    assert result.window_end == pytest.approx(1020.001)


def test_window_reset_with_real_clock() -> None:
    tracker = ClientTracker(2, timedelta(milliseconds=100))

    assert tracker.admit("a") is True
    assert tracker.admit("a") is True
    assert tracker.admit("a") is False

    time.sleep(0.11)

    result = tracker.consume("a")
    assert result.allowed is True
    assert result.count == 1


def test_boundary_burst_allows_twice_the_limit() -> None:
    clock = Mock(return_value=0.0)
    tracker = ClientTracker(3, timedelta(seconds=60), clock=clock)

    tracker.admit("a")
    clock.return_value = 59.9
    assert tracker.admit("a") is True
    assert tracker.admit("a") is True

    clock.return_value = 60.1
    assert [tracker.admit("a") for _ in range(4)] == [True, True, True, False]


def test_clients_have_independent_buckets() -> None:
    clock = Mock(return_value=1000.0)
    tracker = ClientTracker(1, timedelta(seconds=60), clock=clock)

    assert tracker.admit("a") is True
    assert tracker.admit("a") is False
    assert tracker.admit("b") is True
    assert tracker.admit("b") is False


def test_windows_are_anchored_per_client() -> None:
    clock = Mock(return_value=1000.0)
    tracker = ClientTracker(1, timedelta(seconds=10), clock=clock)

    tracker.admit("a")
    clock.return_value = 1005.0
    tracker.admit("b")

    clock.return_value = 1012.0
    assert tracker.admit("a") is True
    assert tracker.admit("b") is False


def test_empty_identity_is_a_regular_bucket() -> None:
    tracker = ClientTracker(1, timedelta(seconds=60))

    assert tracker.admit("") is True
    assert tracker.admit("") is False


def test_separate_instances_do_not_share_state() -> None:
    first = ClientTracker(1, timedelta(seconds=60))
    second = ClientTracker(1, timedelta(seconds=60))

    assert first.admit("a") is True
    assert first.admit("a") is False
    assert second.admit("a") is True


def test_records_are_retained_after_expiry() -> None:
    clock = Mock(return_value=0.0)
    tracker = ClientTracker(1, timedelta(seconds=1), clock=clock)

    for identity in ("a", "b", "c"):
        tracker.admit(identity)
    clock.return_value = 100.0

    assert len(tracker) == 3


def test_concurrent_admits_never_exceed_limit() -> None:
    limit = 10
    workers = 64
    tracker = ClientTracker(limit, timedelta(minutes=1))
    barrier = threading.Barrier(workers)
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        allowed = tracker.admit("shared")
        with results_lock:
            results.append(allowed)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == limit
    assert results.count(False) == workers - limit


@pytest.mark.parametrize(
    ("max_requests", "window"),
    [
        (0, timedelta(seconds=60)),
        (-1, timedelta(seconds=60)),
        (1, timedelta(0)),
        (1, timedelta(seconds=-5)),
    ],
)
def test_invalid_constructor_args(max_requests: int, window: timedelta) -> None:
    with pytest.raises(ConfigurationAppError) as exc_info:
        ClientTracker(max_requests, window)

    assert exc_info.value.code == "invalid_rate_limit"
