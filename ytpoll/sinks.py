"""This module contains the sinks that receive new videos from a poller."""

__all__ = ["CallbackSink", "FanOutSink", "LoggingSink", "NotificationSink"]

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Self

from ytpoll.models.video import Video
from ytpoll.types import NotificationListener


class NotificationSink(ABC):
    """Represents a receiver of new video notifications."""

    @abstractmethod
    async def notify(self, video: Video) -> None:
        """Handle a newly discovered video.

        :param video: The new video.
        """


class CallbackSink(NotificationSink):
    """A sink that calls a function for every new video.

    The function can be a plain function or a coroutine function.
    """

    def __init__(self, func: NotificationListener) -> None:
        """Create a new CallbackSink instance.

        :param func: The function to call with each new video.
        """
        self._func = func

    @property
    def func(self) -> NotificationListener:
        """Get the wrapped function."""
        return self._func

    async def notify(self, video: Video) -> None:
        result = self._func(video)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        name = getattr(self._func, "__name__", self._func)
        return f"{self.__class__.__name__}({name})"


class LoggingSink(NotificationSink):
    """A sink that logs every new video."""

    def __init__(
        self, logger: logging.Logger | None = None, level: int = logging.INFO
    ) -> None:
        """Create a new LoggingSink instance.

        :param logger: The logger to use. If not provided, a logger named after the
            class will be used.
        :param level: The level to log new videos at.
        """
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self._level = level

    async def notify(self, video: Video) -> None:
        channel = "unknown channel" if video.channel is None else video.channel.name
        self._logger.log(
            self._level, "New video from %s: %s (%s)", channel, video.title, video.id
        )


class FanOutSink(NotificationSink):
    """A sink that delivers every video to each of its sinks in order.

    A failing sink does not prevent the remaining sinks from being notified.
    Once all of them were called, the failures are raised together.
    """

    def __init__(self, *sinks: NotificationSink) -> None:
        """Create a new FanOutSink instance.

        :param sinks: The sinks to deliver to, in delivery order.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._sinks: list[NotificationSink] = list(sinks)

    @property
    def sinks(self) -> list[NotificationSink]:
        """Get a copy of the sinks this sink delivers to."""
        return list(self._sinks)

    def __len__(self) -> int:
        return len(self._sinks)

    def add(self, sink: NotificationSink) -> Self:
        """Add a sink to deliver to after the existing ones.

        :param sink: The sink to add.
        :return: The current instance for method chaining.
        """
        self._sinks.append(sink)
        self._logger.debug("Added sink: %r", sink)
        return self

    async def notify(self, video: Video) -> None:
        """Deliver the video to every sink.

        :param video: The new video.
        :raises ExceptionGroup: If one or more sinks failed.
        """
        errors: list[Exception] = []

        for sink in self._sinks:
            try:
                await sink.notify(video)
            except Exception as ex:  # noqa: BLE001
                errors.append(ex)

        if errors:
            raise ExceptionGroup(
                f"{len(errors)} sink(s) failed to handle video ({video.id})", errors
            )
