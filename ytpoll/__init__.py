"""Contains the VideoPoller classes which are used to watch a channel and get
notified once for every video uploaded after the watch started.
"""

__all__ = [
    "AsyncVideoPoller",
    "CallbackSink",
    "Channel",
    "ConfigurationError",
    "FanOutSink",
    "FetchError",
    "FirstCyclePolicy",
    "LoggingSink",
    "NotificationSink",
    "PollCycle",
    "PollerConfig",
    "SinkError",
    "Thumbnail",
    "Video",
    "VideoFetcher",
    "VideoPoller",
    "YouTubeFeedFetcher",
    "start",
]

import asyncio
import inspect
import logging
import threading
from asyncio import Task
from collections.abc import AsyncIterator, Callable, Coroutine, Iterator
from contextlib import asynccontextmanager, contextmanager, suppress
from datetime import timedelta
from threading import Thread
from typing import Any, Self

from ytpoll.enums import FirstCyclePolicy
from ytpoll.errors import ConfigurationError, FetchError, SinkError
from ytpoll.fetchers import VideoFetcher, YouTubeFeedFetcher
from ytpoll.models import PollerConfig
from ytpoll.models.cycle import PollCycle
from ytpoll.models.seen import SeenStore
from ytpoll.models.video import Channel, Thumbnail, Video
from ytpoll.sinks import CallbackSink, FanOutSink, LoggingSink, NotificationSink
from ytpoll.types import ErrorHandler, NotificationListener, T


class AsyncVideoPoller:
    """A class that periodically fetches the videos of a channel and notifies its
    sinks exactly once for each video it has not seen before.
    """

    def __init__(
        self,
        channel_id: str,
        *,
        interval: timedelta | float,
        fetcher: VideoFetcher | None = None,
        sink: NotificationSink | None = None,
        first_cycle_policy: FirstCyclePolicy = FirstCyclePolicy.SUPPRESS,
    ) -> None:
        """Set up the poller instance. Nothing is fetched until it is started.

        :param channel_id: The ID of the channel to watch.
        :param interval: The time between two fetches, as a timedelta or a number of
            seconds. It must be positive, which is checked when the poller starts.
        :param fetcher: The fetcher to list the videos of the channel.
            If not provided, a YouTubeFeedFetcher will be created and used.
        :param sink: The sink to notify of new videos. More sinks and listeners can
            be added later.
        :param first_cycle_policy: Whether the videos found by the first successful
            fetch are notified or only marked as seen.
        """
        self._logger = logging.getLogger(self.__class__.__name__)

        self._config = PollerConfig(channel_id, interval, first_cycle_policy)
        self._fetcher = fetcher or YouTubeFeedFetcher()
        self._sink = FanOutSink() if sink is None else FanOutSink(sink)
        self._error_handlers: list[ErrorHandler] = []

        self._seen = SeenStore()
        self._has_baseline = False
        self._cycle_count = 0

        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event: asyncio.Event | None = None
        self._started = False
        self._stopping = False
        self._running = False

    @classmethod
    def from_config(cls, config: PollerConfig, **kwargs: Any) -> Self:
        """Create a poller from a configuration.

        :param config: The configuration of the poller.
        :param kwargs: Additional arguments for the constructor, such as the fetcher
            and the sink.
        :return: The new poller.
        """
        return cls(
            config.channel_id,
            interval=config.interval,
            first_cycle_policy=config.first_cycle_policy,
            **kwargs,
        )

    @property
    def channel_id(self) -> str:
        """Get the ID of the watched channel."""
        return self._config.channel_id

    @property
    def interval(self) -> timedelta:
        """Get the time between two fetches."""
        return self._config.interval

    @property
    def first_cycle_policy(self) -> FirstCyclePolicy:
        """Get the policy applied to the first successful fetch."""
        return self._config.first_cycle_policy

    @property
    def is_running(self) -> bool:
        """Check if the polling loop is running.

        :return: True if the loop is running, False otherwise.
        """
        return self._running

    @property
    def seen_count(self) -> int:
        """Get the number of videos that have been seen so far."""
        return len(self._seen)

    def listener(self) -> Callable[[NotificationListener], NotificationListener]:
        """Decorate the function to call it for every new video.

        :return: The decorator function.
        """

        def decorator(func: NotificationListener) -> NotificationListener:
            self.add_listener(func)

            return func

        return decorator

    def add_listener(self, func: NotificationListener) -> Self:
        """Add a function to call for every new video.

        :param func: The function or coroutine function to add.
        :return: The current instance for method chaining.
        """
        self._sink.add(CallbackSink(func))
        self._logger.debug(
            "Added listener (%s) for channel: %s",
            getattr(func, "__name__", func),
            self.channel_id,
        )
        return self

    def add_sink(self, sink: NotificationSink) -> Self:
        """Add a sink to notify of every new video.

        :param sink: The sink to add.
        :return: The current instance for method chaining.
        """
        self._sink.add(sink)
        return self

    def error_handler(self) -> Callable[[ErrorHandler], ErrorHandler]:
        """Decorate the function to call it for every fetch or sink error.

        :return: The decorator function.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self.add_error_handler(func)

            return func

        return decorator

    def add_error_handler(self, func: ErrorHandler) -> Self:
        """Add a function to call with every FetchError and SinkError, and with any
        unexpected error that interrupted a poll cycle.

        :param func: The function or coroutine function to add.
        :return: The current instance for method chaining.
        """
        self._error_handlers.append(func)
        return self

    def _mark_started(self) -> None:
        """Check that the poller can be started and mark it as running.

        :raises ConfigurationError: If the configuration is invalid.
        :raises RuntimeError: If the poller was already started.
        """
        self._config.validate()

        if self._started:
            raise RuntimeError("The poller has already been started")

        self._started = True
        self._running = True

    def start(self) -> Task:
        """Start polling in the background of the running event loop and return
        immediately.

        :return: The task running the polling loop.
        :raises ConfigurationError: If the configuration is invalid.
        :raises RuntimeError: If the poller was already started or no event loop is
            running.
        """
        # Raises before the poller is marked as started if no loop is running
        asyncio.get_running_loop()
        self._mark_started()

        return asyncio.create_task(
            self._run_loop(), name=f"poller-{self.channel_id}"
        )

    async def run(self) -> None:
        """Poll the channel in the current event loop until the poller is stopped.

        :raises ConfigurationError: If the configuration is invalid.
        :raises RuntimeError: If the poller was already started.
        """
        self._mark_started()

        await self._run_loop()

    async def _run_loop(self) -> None:
        """Run poll cycles at a fixed rate until the poller is stopped."""
        self._stop_event = asyncio.Event()
        self._loop = asyncio.get_running_loop()

        self._logger.info(
            "Polling channel %s every %ss",
            self.channel_id,
            self.interval.total_seconds(),
        )

        next_tick = self._loop.time()
        try:
            while not self._stopping:
                try:
                    await self._poll()
                except Exception as ex:
                    self._logger.exception(
                        "Poll cycle of channel %s failed", self.channel_id
                    )
                    await self._report(ex)

                if self._stopping:
                    break

                next_tick = self._get_next_tick(next_tick)
                await self._sleep_until(next_tick)
        finally:
            self._running = False
            self._logger.info("Stopped polling channel %s", self.channel_id)

    @asynccontextmanager
    async def run_in_background(self) -> AsyncIterator[Task]:
        """Poll in the background of the running event loop while in the context.

        :return: The task running the polling loop.
        """
        task = self.start()
        try:
            yield task
        finally:
            self.stop()
            await task

    def stop(self) -> None:
        """Request the polling loop to stop at the next tick boundary.

        A fetch or sink call in progress is not interrupted, but the remaining new
        videos of the current cycle are not delivered. Calling this method more
        than once has no additional effect. It is safe to call from any thread.
        """
        if self._stopping:
            return

        self._stopping = True
        self._logger.debug("Stopping poller for channel: %s", self.channel_id)

        loop, event = self._loop, self._stop_event
        if loop is None or event is None or loop.is_closed():
            return

        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        if running_loop is loop:
            event.set()
        else:
            with suppress(RuntimeError):
                loop.call_soon_threadsafe(event.set)

    async def poll(self) -> PollCycle:
        """Run one fetch-diff-dispatch cycle now.

        :return: The outcome of the cycle.
        :raises RuntimeError: If the polling loop is running.
        """
        if self._running:
            raise RuntimeError("Cannot poll manually while the poller is running")

        return await self._poll()

    async def _poll(self) -> PollCycle:
        """Fetch the videos, find the new ones and notify the sink of each of them.

        :return: The outcome of the cycle.
        """
        self._cycle_count += 1
        cycle = PollCycle(number=self._cycle_count)

        try:
            cycle.videos = await self._fetch()
        except FetchError as ex:
            cycle.error = ex
            self._logger.warning("Cycle %d: %s", cycle.number, ex)
            await self._report(ex)
            return cycle

        new_videos = self._seen.diff(cycle.videos)

        if not self._has_baseline:
            self._has_baseline = True

            if self.first_cycle_policy == FirstCyclePolicy.SUPPRESS:
                for video in new_videos:
                    self._seen.insert(video.id)

                cycle.baseline = True
                self._logger.info(
                    "Marked %d existing video(s) of channel %s as seen",
                    len(new_videos),
                    self.channel_id,
                )
                return cycle

        cycle.new_videos = new_videos
        self._logger.debug(
            "Cycle %d: fetched %d video(s), %d new",
            cycle.number,
            len(cycle.videos),
            len(new_videos),
        )

        for video in new_videos:
            if self._stopping:
                self._logger.debug(
                    "Abandoning %d undelivered video(s) of cycle %d",
                    len(new_videos) - len(cycle.dispatched),
                    cycle.number,
                )
                break

            await self._dispatch(video, cycle)
            self._seen.insert(video.id)

        return cycle

    async def _fetch(self) -> list[Video]:
        """Get the current videos of the channel.

        :return: The fetched videos.
        :raises FetchError: If the fetcher failed for any reason.
        """
        try:
            videos = list(await self._fetcher.fetch(self.channel_id))
        except FetchError:
            raise
        except Exception as ex:
            raise FetchError(
                f"Failed to fetch videos of channel: {self.channel_id}",
                channel_id=self.channel_id,
            ) from ex

        for video in videos:
            if not isinstance(video, Video):
                raise FetchError(
                    f"Fetcher returned {type(video).__name__} instead of Video "
                    f"for channel: {self.channel_id}",
                    channel_id=self.channel_id,
                )

        return videos

    async def _dispatch(self, video: Video, cycle: PollCycle) -> None:
        """Notify the sink of a new video and report its failures.

        :param video: The new video.
        :param cycle: The cycle the video was found in.
        """
        self._logger.debug("Notifying new video (%s): %s", video.id, video.title)
        cycle.dispatched.append(video)

        try:
            await self._sink.notify(video)
            return
        except ExceptionGroup as group:
            causes = list(group.exceptions)
        except Exception as ex:  # noqa: BLE001
            causes = [ex]

        for cause in causes:
            error = SinkError(video, cause)
            cycle.sink_errors.append(error)
            self._logger.error("Cycle %d: %s", cycle.number, error, exc_info=cause)
            await self._report(error)

    async def _report(self, error: Exception) -> None:
        """Pass an error to every error handler.

        :param error: The FetchError or SinkError to report.
        """
        for func in self._error_handlers:
            try:
                result = func(error)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self._logger.exception(
                    "Error handler (%s) failed", getattr(func, "__name__", func)
                )

    def _get_next_tick(self, scheduled: float) -> float:
        """Get the time of the next tick, one interval after the previous scheduled
        tick. If that time has already passed, the next tick is now.

        :param scheduled: The loop time the previous tick was scheduled at.
        :return: The loop time of the next tick.
        """
        next_tick = scheduled + self.interval.total_seconds()
        now = self._loop.time()

        if next_tick < now:
            self._logger.warning(
                "Poll cycle of channel %s overran the interval by %.3fs",
                self.channel_id,
                now - next_tick,
            )
            return now

        return next_tick

    async def _sleep_until(self, deadline: float) -> None:
        """Wait until the deadline or until the poller is stopped.

        :param deadline: The loop time to wait until.
        """
        delay = deadline - self._loop.time()
        if delay <= 0 or self._stopping:
            return

        with suppress(TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), delay)


class VideoPoller(AsyncVideoPoller):
    """A class that periodically fetches the videos of a channel from a background
    thread and notifies its sinks exactly once for each video it has not seen
    before.
    """

    def __init__(
        self,
        channel_id: str,
        *,
        interval: timedelta | float,
        fetcher: VideoFetcher | None = None,
        sink: NotificationSink | None = None,
        first_cycle_policy: FirstCyclePolicy = FirstCyclePolicy.SUPPRESS,
    ) -> None:
        """Create a new VideoPoller instance. Nothing is fetched until it is started.

        :param channel_id: The ID of the channel to watch.
        :param interval: The time between two fetches, as a timedelta or a number of
            seconds. It must be positive, which is checked when the poller starts.
        :param fetcher: The fetcher to list the videos of the channel.
            If not provided, a YouTubeFeedFetcher will be created and used.
        :param sink: The sink to notify of new videos. More sinks and listeners can
            be added later.
        :param first_cycle_policy: Whether the videos found by the first successful
            fetch are notified or only marked as seen.
        """
        super().__init__(
            channel_id,
            interval=interval,
            fetcher=fetcher,
            sink=sink,
            first_cycle_policy=first_cycle_policy,
        )
        self._thread: Thread | None = None

    def start(self) -> Thread:
        """Start polling in a separate thread and return immediately.

        :return: The thread running the polling loop.
        :raises ConfigurationError: If the configuration is invalid.
        :raises RuntimeError: If the poller was already started.
        """
        self._mark_started()

        self._thread = Thread(
            target=self._run_in_thread, name=f"poller-{self.channel_id}", daemon=True
        )
        self._thread.start()
        return self._thread

    def run(self) -> None:
        """Poll the channel in the current thread until the poller is stopped.

        :raises ConfigurationError: If the configuration is invalid.
        :raises RuntimeError: If the poller was already started.
        """
        self._mark_started()

        self._run_in_thread()

    def _run_in_thread(self) -> None:
        """Run the polling loop in a new event loop of the current thread."""
        try:
            self._run_coroutine(self._run_loop())
        except KeyboardInterrupt:  # pragma: no cover
            pass
        finally:
            self._on_exit()

    @contextmanager
    def run_in_background(self) -> Iterator[Thread]:
        """Poll in a separate thread while in the context.

        :return: The thread running the polling loop.
        """
        thread = self.start()
        try:
            yield thread
        finally:
            self.stop()

    def stop(self) -> None:
        """Request the polling loop to stop and wait for the cycle in progress to
        finish. When called from a sink or an error handler, it returns without
        waiting. Calling this method more than once has no additional effect.
        """
        super().stop()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def poll(self) -> PollCycle:  # noqa: D102
        return self._run_coroutine(super().poll())

    def _on_exit(self) -> None:
        """Perform a task after the polling loop has exited."""
        self._stopping = True
        self._running = False

    @staticmethod
    def _run_coroutine(coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine in a new event loop.

        :param coro: The coroutine to run.
        :return: The result of the coroutine.
        """
        return asyncio.run(coro)


def start(
    channel_id: str,
    interval: timedelta | float,
    fetcher: VideoFetcher | None = None,
    sink: NotificationSink | NotificationListener | None = None,
    **kwargs: Any,
) -> VideoPoller:
    """Start watching a channel in a background thread.

    :param channel_id: The ID of the channel to watch.
    :param interval: The time between two fetches, as a timedelta or a number of
        seconds.
    :param fetcher: The fetcher to list the videos of the channel.
        If not provided, a YouTubeFeedFetcher will be used.
    :param sink: The sink, or a plain function, to notify of new videos.
    :param kwargs: Additional arguments for VideoPoller, such as first_cycle_policy.
    :return: The started poller, whose stop() method cancels the polling.
    :raises ConfigurationError: If the interval is not positive or the channel ID
        is invalid.
    """
    if sink is not None and not isinstance(sink, NotificationSink):
        sink = CallbackSink(sink)

    poller = VideoPoller(
        channel_id, interval=interval, fetcher=fetcher, sink=sink, **kwargs
    )
    poller.start()
    return poller
