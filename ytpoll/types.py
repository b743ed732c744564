"""Contains type hints for the library."""

__all__ = [
    "ErrorHandler",
    "NotificationListener",
    "T",
]

from collections.abc import Awaitable, Callable
from typing import TypeVar

from ytpoll.models.video import Video

T = TypeVar("T")

NotificationListener = Callable[[Video], Awaitable[None] | None]
ErrorHandler = Callable[[Exception], Awaitable[None] | None]
