"""This module contains the store of already notified videos."""

__all__ = ["SeenStore"]

import logging
from collections.abc import Iterable

from ytpoll.models.video import Video


class SeenStore:
    """Represents an in-memory set of video IDs that have already been notified.

    IDs are never removed, so the store grows for the whole lifetime of its poller.
    It is not thread-safe; the owning poller serializes every access.
    """

    def __init__(self) -> None:
        """Create a new empty SeenStore instance."""
        self._logger = logging.getLogger(self.__class__.__name__)
        self._video_ids: set[str] = set()

    def __contains__(self, video_id: object) -> bool:
        return video_id in self._video_ids

    def __len__(self) -> int:
        return len(self._video_ids)

    def contains(self, video_id: str) -> bool:
        """Check if a video ID is in the store.

        :param video_id: The video ID to check.
        :return: True if the video ID is in the store, False otherwise.
        """
        return video_id in self._video_ids

    def insert(self, video_id: str) -> None:
        """Add a video ID to the store. Adding an existing ID does nothing.

        :param video_id: The video ID to add.
        """
        if video_id in self._video_ids:
            return

        self._logger.debug("Adding video (%s) to seen store", video_id)
        self._video_ids.add(video_id)

    def diff(self, videos: Iterable[Video]) -> list[Video]:
        """Get the videos that are not in the store yet, in the given order.

        A video ID repeated in ``videos`` is only returned once, at its first
        position.

        :param videos: The fetched videos.
        :return: The new videos.
        """
        new_videos = []
        new_ids: set[str] = set()

        for video in videos:
            if video.id in self._video_ids or video.id in new_ids:
                continue

            new_ids.add(video.id)
            new_videos.append(video)

        return new_videos
