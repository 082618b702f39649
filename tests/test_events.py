from __future__ import annotations

import threading
from typing import List

import pytest

from run_reporter.task.events import EventChannel, TaskDone, TaskStart, TestRunDone, TestRunStart

from conftest import Harness, make_plan


def test_drain_dispatches_in_post_order() -> None:
    channel = EventChannel()
    seen: List[object] = []
    events = [TaskStart(), TaskDone()]

    channel.post_all(events)
    channel.close()

    assert channel.drain(seen.append) == 2
    assert seen == events


def test_post_after_close_raises() -> None:
    channel = EventChannel()
    channel.close()
    with pytest.raises(RuntimeError):
        channel.post(TaskStart())


def test_handler_error_stops_drain() -> None:
    channel = EventChannel()
    channel.post_all([TaskStart(), TaskDone()])
    channel.close()
    seen: List[object] = []

    def handler(event) -> None:
        seen.append(event)
        raise ValueError("boom")

    with pytest.raises(ValueError):
        channel.drain(handler)
    assert len(seen) == 1


def test_drain_times_out_without_events() -> None:
    channel = EventChannel()
    with pytest.raises(TimeoutError):
        channel.drain(lambda event: None, timeout=0.01)


def test_lanes_posting_from_threads_keep_queue_order() -> None:
    h = Harness(make_plan([("A", ["a1", "a2"]), ("B", ["b1", "b2"])], ["chrome", "firefox"]))
    channel = EventChannel()
    channel.post(TaskStart())

    # Each lane runs the tests one by one; a lane may not start the next test
    # until every lane has finished the previous one.
    barriers = [threading.Barrier(2) for _ in h.plan.tests]

    def run_lane(label: str) -> None:
        for test, barrier in zip(h.plan.tests, barriers):
            channel.post(TestRunStart(test, label))
            channel.post(TestRunDone(test, label))
            barrier.wait(timeout=5)

    lanes = [threading.Thread(target=run_lane, args=(label,)) for label in h.plan.lane_labels]

    consumer_error: List[BaseException] = []

    def consume() -> None:
        try:
            channel.drain(h.aggregator.handle, timeout=5)
        except BaseException as e:  # surfaced by the assertion below
            consumer_error.append(e)

    consumer = threading.Thread(target=consume)
    consumer.start()
    for lane in lanes:
        lane.start()
    for lane in lanes:
        lane.join()
    channel.post(TaskDone())
    channel.close()
    consumer.join(timeout=5)

    assert consumer_error == []
    assert [c[1] for c in h.plugin.test_done()] == ["a1", "a2", "b1", "b2"]
    assert [c[1] for c in h.plugin.calls if c[0] == "fixture_start"] == ["A", "B"]
    assert h.plugin.calls[-1][2] == 4


def test_close_racing_posts_never_drops_accepted_events() -> None:
    channel = EventChannel()
    accepted: List[object] = []
    accepted_lock = threading.Lock()
    start = threading.Barrier(5)

    def post_until_closed() -> None:
        start.wait(timeout=5)
        while True:
            event = TaskStart()
            try:
                channel.post(event)
            except RuntimeError:
                return
            with accepted_lock:
                accepted.append(event)

    def close_soon() -> None:
        start.wait(timeout=5)
        channel.close()

    threads = [threading.Thread(target=post_until_closed) for _ in range(4)]
    threads.append(threading.Thread(target=close_soon))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    seen: List[object] = []
    assert channel.drain(seen.append, timeout=1) == len(accepted)
    assert sorted(map(id, seen)) == sorted(map(id, accepted))
    with pytest.raises(RuntimeError):
        channel.post(TaskDone())
