"""Test class SeenStore."""

import pytest

from tests import get_video
from ytpoll.models.seen import SeenStore


@pytest.fixture
def store() -> SeenStore:
    """Create an empty SeenStore instance."""
    return SeenStore()


def test_insert(store: SeenStore) -> None:
    """Test the insert and contains methods of the SeenStore class."""
    assert not store.contains("video_1")
    assert len(store) == 0

    store.insert("video_1")
    store.insert("video_1")

    assert store.contains("video_1")
    assert "video_1" in store
    assert len(store) == 1


def test_grows_monotonically(store: SeenStore) -> None:
    """Test that no video ID is ever evicted."""
    for i in range(10_000):
        store.insert(str(i))

    assert len(store) == 10_000
    assert all(store.contains(str(i)) for i in range(10_000))


def test_diff(store: SeenStore) -> None:
    """Test the diff method of the SeenStore class."""
    videos = [get_video(f"video_{i}") for i in range(4)]
    store.insert(videos[1].id)

    assert store.diff(videos) == [videos[0], videos[2], videos[3]]
    assert store.diff([]) == []
    assert len(store) == 1, "Should not insert anything"


def test_diff_duplicates(store: SeenStore) -> None:
    """Test that diff keeps only the first occurrence of a video ID."""
    first = get_video("video_1", "First")
    again = get_video("video_1", "Again")
    other = get_video("video_2")

    new_videos = store.diff([first, other, again])

    assert [video.title for video in new_videos] == ["First", other.title]
