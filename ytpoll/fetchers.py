"""This module contains the fetchers that list the videos of a channel."""

__all__ = ["VideoFetcher", "YouTubeFeedFetcher"]

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime
from http import HTTPStatus
from pyexpat import ExpatError

import xmltodict
from httpx import AsyncClient, HTTPError

from ytpoll.errors import FetchError
from ytpoll.models.video import Channel, Thumbnail, Video


class VideoFetcher(ABC):
    """Represents a source of the current videos of a channel."""

    @abstractmethod
    async def fetch(self, channel_id: str) -> list[Video]:
        """Get the current videos of a channel, oldest first.

        :param channel_id: The ID of the channel.
        :return: The videos of the channel.
        :raises FetchError: If the videos could not be fetched.
        """


class YouTubeFeedFetcher(VideoFetcher):
    """A fetcher that reads the public Atom feed of a YouTube channel."""

    FEED_URL = "https://www.youtube.com/feeds/videos.xml"

    def __init__(
        self, *, client: AsyncClient | None = None, timeout: float = 10.0
    ) -> None:
        """Create a new YouTubeFeedFetcher instance.

        :param client: The HTTP client to reuse for every request. If not provided,
            a new client is created for each fetch.
        :param timeout: The timeout in seconds of each request when no client is
            provided.
        """
        self._logger = logging.getLogger(self.__class__.__name__)
        self._client = client
        self._timeout = timeout

    async def fetch(self, channel_id: str) -> list[Video]:
        self._logger.debug("Fetching feed for channel: %s", channel_id)

        try:
            if self._client is not None:
                response = await self._client.get(
                    self.FEED_URL, params={"channel_id": channel_id}
                )
            else:
                async with AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(
                        self.FEED_URL, params={"channel_id": channel_id}
                    )
        except HTTPError as ex:
            raise FetchError(
                f"Failed to request feed of channel: {channel_id}",
                channel_id=channel_id,
            ) from ex

        if response.status_code != HTTPStatus.OK:
            raise FetchError(
                f"Failed to fetch feed of channel: {channel_id}",
                channel_id=channel_id,
                status_code=response.status_code,
            )

        try:
            body = xmltodict.parse(response.content)
        except ExpatError as ex:
            raise FetchError(
                f"Received invalid feed of channel: {channel_id}",
                channel_id=channel_id,
            ) from ex

        try:
            videos = self._parse_feed(body)
        except (TypeError, KeyError, ValueError) as ex:
            raise FetchError(
                f"Failed to parse feed of channel: {channel_id}",
                channel_id=channel_id,
            ) from ex

        self._logger.debug(
            "Fetched %d video(s) for channel: %s", len(videos), channel_id
        )
        return videos

    def _parse_feed(self, body: dict) -> list[Video]:
        """Parse the videos of a feed.

        :param body: The feed parsed by xmltodict.
        :return: The videos, oldest first.
        """
        feed = body["feed"]

        # entry is missing for an empty channel, and a dict for a single video
        entries = feed.get("entry") or []
        if isinstance(entries, dict):
            entries = [entries]

        videos = []
        for entry in entries:
            channel = Channel(
                id=entry["yt:channelId"],
                name=entry["author"]["name"],
                url=entry["author"]["uri"],
            )

            url = (
                entry["link"][0]["@href"]
                if isinstance(entry["link"], list)
                else entry["link"]["@href"]
            )

            videos.append(
                Video(
                    id=entry["yt:videoId"],
                    title=entry["title"] or "",
                    url=url,
                    published=self._parse_timestamp(entry["published"]),
                    channel=channel,
                    thumbnail=self._parse_thumbnail(entry),
                )
            )

        # The feed lists the newest video first
        videos.reverse()
        return videos

    @staticmethod
    def _parse_thumbnail(entry: dict) -> Thumbnail | None:
        # media:group can be missing from an entry
        thumbnail = (entry.get("media:group") or {}).get("media:thumbnail")
        if not thumbnail:
            return None

        width, height = thumbnail.get("@width"), thumbnail.get("@height")
        return Thumbnail(
            url=thumbnail["@url"],
            width=None if width is None else int(width),
            height=None if height is None else int(height),
        )

    @staticmethod
    def _parse_timestamp(timestamp: str) -> datetime:
        # Remove fractional seconds if exists
        return datetime.fromisoformat(re.sub(r"\.\d+", "", timestamp, count=1))
