"""Contains the dataclasses for the video model."""

__all__ = ["Channel", "Thumbnail", "Video"]


from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Channel:
    """Represents a YouTube channel."""

    id: str
    """The unique ID of the channel"""

    name: str
    """The name of the channel"""

    url: str
    """The URL of the channel"""


@dataclass(frozen=True)
class Thumbnail:
    """Represents a thumbnail of a video."""

    url: str
    """The URL of the thumbnail"""

    width: int | None = None
    """The width of the thumbnail, if known"""

    height: int | None = None
    """The height of the thumbnail, if known"""


@dataclass(frozen=True)
class Video:
    """Represents a video of a channel.

    Two videos are equal when their IDs are equal, whatever their other fields are.
    """

    id: str
    """The unique ID of the video"""

    title: str = field(compare=False)
    """The title of the video"""

    url: str | None = field(default=None, compare=False)
    """The URL of the video"""

    published: datetime | None = field(default=None, compare=False)
    """The published time of the video, if known"""

    channel: Channel | None = field(default=None, compare=False)
    """The channel of the video, if known"""

    thumbnail: Thumbnail | None = field(default=None, compare=False)
    """The thumbnail of the video, if available"""
