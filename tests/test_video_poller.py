"""Contains the tests for the class VideoPoller."""

import time
from threading import Thread

import pytest

import ytpoll
from tests import (
    CHANNEL_ID,
    GrowingFetcher,
    RecordingSink,
    ScriptedFetcher,
    get_video,
    wait_until_sync,
)
from ytpoll import ConfigurationError, FirstCyclePolicy, Video, VideoPoller

v1, v2 = get_video("video_1"), get_video("video_2")


def test_start() -> None:
    """Test that start returns immediately with a running background thread."""
    fetcher = ScriptedFetcher([v1], [v1, v2])
    sink = RecordingSink()
    poller = VideoPoller(CHANNEL_ID, interval=0.05, fetcher=fetcher, sink=sink)

    thread = poller.start()

    try:
        assert isinstance(thread, Thread)
        assert thread.is_alive()
        assert poller.is_running

        wait_until_sync(lambda: fetcher.calls >= 3)
    finally:
        poller.stop()

    assert not thread.is_alive(), "Should wait for the thread to finish"
    assert not poller.is_running
    assert sink.ids == [v2.id]


@pytest.mark.parametrize("interval", [0, -0.5])
def test_start_with_non_positive_interval(interval: float) -> None:
    """Test that a non-positive interval fails before any thread is started."""
    fetcher = ScriptedFetcher([v1])
    poller = VideoPoller(CHANNEL_ID, interval=interval, fetcher=fetcher)

    with pytest.raises(ConfigurationError):
        poller.start()

    time.sleep(0.05)

    assert poller._thread is None
    assert fetcher.calls == 0


def test_stop_is_idempotent() -> None:
    """Test that stop can be called before starting and more than once."""
    poller = VideoPoller(CHANNEL_ID, interval=60, fetcher=ScriptedFetcher())
    poller.stop()
    poller.stop()

    poller = VideoPoller(CHANNEL_ID, interval=60, fetcher=ScriptedFetcher())
    thread = poller.start()
    poller.stop()
    poller.stop()

    assert not thread.is_alive()


def test_no_notification_after_stop() -> None:
    """Test that nothing is notified once stop has returned."""
    sink = RecordingSink()
    poller = VideoPoller(
        CHANNEL_ID,
        interval=0.01,
        fetcher=GrowingFetcher(),
        sink=sink,
        first_cycle_policy=FirstCyclePolicy.NOTIFY,
    )

    with poller.run_in_background():
        wait_until_sync(lambda: len(sink.videos) >= 3)

    count = len(sink.videos)
    time.sleep(0.1)

    assert len(sink.videos) == count
    assert sink.ids == [f"video_{i}" for i in range(count)]


def test_stop_from_listener() -> None:
    """Test that a listener can stop the poller it is called by."""
    poller = VideoPoller(
        CHANNEL_ID,
        interval=0.01,
        fetcher=ScriptedFetcher([v1, v2]),
        first_cycle_policy=FirstCyclePolicy.NOTIFY,
    )
    delivered: list[str] = []

    @poller.listener()
    def listener(video: Video) -> None:
        delivered.append(video.id)
        poller.stop()

    thread = poller.start()
    thread.join(timeout=2)

    assert not thread.is_alive()
    assert delivered == [v1.id]


def test_poll() -> None:
    """Test running single cycles synchronously."""
    sink = RecordingSink()
    poller = VideoPoller(
        CHANNEL_ID, interval=60, fetcher=ScriptedFetcher([v1], [v1, v2]), sink=sink
    )

    assert poller.poll().baseline
    assert poller.poll().dispatched == [v2]
    assert sink.ids == [v2.id]


def test_module_start() -> None:
    """Test the start function with a plain function as the sink."""
    delivered: list[Video] = []

    poller = ytpoll.start(
        CHANNEL_ID,
        0.05,
        ScriptedFetcher([v1]),
        delivered.append,
        first_cycle_policy=FirstCyclePolicy.NOTIFY,
    )

    try:
        assert isinstance(poller, VideoPoller)
        wait_until_sync(lambda: len(delivered) >= 1)
    finally:
        poller.stop()

    assert delivered == [v1]


def test_module_start_with_invalid_interval() -> None:
    """Test that the start function raises ConfigurationError."""
    with pytest.raises(ConfigurationError):
        ytpoll.start(CHANNEL_ID, 0, ScriptedFetcher(), RecordingSink())
