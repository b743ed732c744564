"""Contains the dataclass describing one poll cycle."""

__all__ = ["PollCycle"]

from dataclasses import dataclass, field

from ytpoll.errors import FetchError, SinkError
from ytpoll.models.video import Video


@dataclass
class PollCycle:
    """Represents the outcome of one fetch-diff-dispatch pass."""

    number: int
    """The 1-based number of the cycle within its poller"""

    videos: list[Video] = field(default_factory=list)
    """The videos returned by the fetcher"""

    new_videos: list[Video] = field(default_factory=list)
    """The videos that were not seen before this cycle"""

    dispatched: list[Video] = field(default_factory=list)
    """The videos handed to the sink, in dispatch order"""

    error: FetchError | None = None
    """The error that prevented fetching, if any"""

    sink_errors: list[SinkError] = field(default_factory=list)
    """The errors raised by the sink during this cycle"""

    baseline: bool = False
    """Whether this cycle only seeded the seen store without notifying"""

    @property
    def succeeded(self) -> bool:
        """Check if the fetch of this cycle succeeded."""
        return self.error is None
