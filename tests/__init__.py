"""Contains fixtures and utility functions."""

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime

from ytpoll import Channel, NotificationSink, Video, VideoFetcher

CHANNEL_ID = "mock_channel_id"


def get_channel() -> Channel:
    """Create a mock channel."""
    return Channel(
        id=CHANNEL_ID,
        name="Mock Channel",
        url="https://www.youtube.com/channel/mock_channel")


def get_video(video_id: str = "mock_video_id", title: str = "Mock Video") -> Video:
    """Create a mock video."""
    return Video(
        id=video_id,
        title=title,
        url=f"https://www.youtube.com/watch?v={video_id}",
        published=datetime(2023, 1, 1, 12, 0, 0, tzinfo=UTC),
        channel=get_channel(),
    )


class ScriptedFetcher(VideoFetcher):
    """A fetcher that returns or raises the given results in order and then keeps
    returning the last one.
    """

    def __init__(self, *results: list[Video] | Exception, delay: float = 0) -> None:
        self.results = list(results) or [[]]
        self.delay = delay
        self.calls = 0
        self.call_times: list[float] = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, channel_id: str) -> list[Video]:
        self.call_times.append(asyncio.get_running_loop().time())
        self.active += 1
        self.max_active = max(self.max_active, self.active)

        try:
            if self.delay:
                await asyncio.sleep(self.delay)

            result = self.results[min(self.calls, len(self.results) - 1)]
            self.calls += 1

            if isinstance(result, Exception):
                raise result

            return list(result)
        finally:
            self.active -= 1


class GrowingFetcher(VideoFetcher):
    """A fetcher that finds one more video on every call."""

    def __init__(self) -> None:
        self.calls = 0

    async def fetch(self, channel_id: str) -> list[Video]:
        self.calls += 1
        return [get_video(f"video_{i}") for i in range(self.calls)]


class RecordingSink(NotificationSink):
    """A sink that records every video it receives, failing for some of them."""

    def __init__(self, *, fail_on: set[str] | None = None) -> None:
        self.videos: list[Video] = []
        self.fail_on = fail_on or set()

    @property
    def ids(self) -> list[str]:
        return [video.id for video in self.videos]

    async def notify(self, video: Video) -> None:
        self.videos.append(video)

        if video.id in self.fail_on:
            raise RuntimeError(f"Sink failed for {video.id}")


async def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    """Wait in the running event loop until the predicate returns True."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        assert asyncio.get_running_loop().time() < deadline, "Timed out waiting"
        await asyncio.sleep(0.01)


def wait_until_sync(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    """Block the current thread until the predicate returns True."""
    deadline = time.monotonic() + timeout
    while not predicate():
        assert time.monotonic() < deadline, "Timed out waiting"
        time.sleep(0.01)
