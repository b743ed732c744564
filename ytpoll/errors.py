"""Contains custom exceptions for the ytpoll package."""

__all__ = ["ConfigurationError", "FetchError", "SinkError"]

import sys
from http import HTTPStatus
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ytpoll.models.video import Video

if sys.version_info >= (3, 12):  # pragma: no cover
    from typing import override  # novm
else:
    from typing_extensions import override


class ConfigurationError(ValueError):
    """Exception raised when the poller is given invalid parameters."""


class FetchError(Exception):
    """Exception raised when the videos of a channel could not be fetched."""

    @override
    def __init__(
        self,
        message: str,
        *,
        channel_id: str | None = None,
        status_code: int | HTTPStatus | None = None,
    ) -> None:
        """Initialize the FetchError object.

        :param message: The error message
        :param channel_id: The ID of the channel that failed to be fetched
        :param status_code: The HTTP status code of the response, if any
        """
        super().__init__(message)
        self.message = message
        self.channel_id = channel_id
        self.status_code = (
            status_code
            if status_code is None or isinstance(status_code, HTTPStatus)
            else HTTPStatus(status_code)
        )

    @override
    def __str__(self) -> str:
        """Return a string representation of the FetchError object."""
        if self.status_code is None:
            return self.message

        return f"Status code: {self.status_code}: {self.message}"


class SinkError(Exception):
    """Exception raised when a sink failed to handle a new video."""

    @override
    def __init__(self, video: "Video", cause: BaseException) -> None:
        """Initialize the SinkError object.

        :param video: The video that failed to be delivered
        :param cause: The exception raised by the sink
        """
        super().__init__(video, cause)
        self.video = video
        self.__cause__ = cause

    @override
    def __str__(self) -> str:
        """Return a string representation of the SinkError object."""
        return f"Failed to notify video ({self.video.id}): {self.__cause__!r}"
