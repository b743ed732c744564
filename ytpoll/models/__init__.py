"""Contains the dataclasses used to configure a poller."""

__all__ = ["PollerConfig"]

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Self

from ytpoll.enums import FirstCyclePolicy
from ytpoll.errors import ConfigurationError


@dataclass
class PollerConfig:
    """Represents the configuration of a poller."""

    channel_id: str
    """The ID of the channel to watch"""

    interval: timedelta
    """The cadence between two fetch attempts"""

    first_cycle_policy: FirstCyclePolicy = FirstCyclePolicy.SUPPRESS
    """Whether to suppress notifications on the initial baseline fetch"""

    ENV_PREFIX = "YTPOLL_"
    DEFAULT_INTERVAL = timedelta(minutes=5)

    def __post_init__(self) -> None:
        if isinstance(self.interval, int | float) and not isinstance(
            self.interval, bool
        ):
            seconds = self.interval
            try:
                interval = timedelta(seconds=seconds)
            except (ValueError, OverflowError):
                # Left as a number for validate() to reject
                return

            # Positive intervals below the resolution of timedelta round to zero
            if seconds > 0 and not interval:
                interval = timedelta.resolution

            self.interval = interval

    def validate(self) -> None:
        """Check that the configuration can be used to start a poller.

        :raises ConfigurationError: If any of the values is invalid.
        """
        if not isinstance(self.channel_id, str) or not self.channel_id.strip():
            raise ConfigurationError(f"Invalid channel ID: {self.channel_id!r}")

        if isinstance(self.interval, int | float) and not isinstance(
            self.interval, bool
        ):
            raise ConfigurationError(
                f"Interval must be a finite number of seconds, got {self.interval!r}"
            )

        if not isinstance(self.interval, timedelta):
            raise ConfigurationError(
                f"Interval must be a timedelta or a number of seconds, "
                f"not {type(self.interval).__name__}"
            )

        if self.interval <= timedelta(0):
            raise ConfigurationError(
                f"Interval must be positive, got {self.interval.total_seconds()}s"
            )

        if not isinstance(self.first_cycle_policy, FirstCyclePolicy):
            raise ConfigurationError(
                f"Invalid first cycle policy: {self.first_cycle_policy!r}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Create a configuration from environment variables.

        Reads ``YTPOLL_CHANNEL_ID``, ``YTPOLL_INTERVAL`` (in seconds) and
        ``YTPOLL_FIRST_CYCLE`` (``suppress`` or ``notify``).

        :param environ: The mapping to read from. Defaults to ``os.environ``.
        :return: The validated configuration.
        :raises ConfigurationError: If a variable is missing or invalid.
        """
        environ = os.environ if environ is None else environ

        channel_id = environ.get(f"{cls.ENV_PREFIX}CHANNEL_ID")
        if channel_id is None:
            raise ConfigurationError(f"{cls.ENV_PREFIX}CHANNEL_ID is not set")

        raw_interval = environ.get(f"{cls.ENV_PREFIX}INTERVAL")
        try:
            interval = (
                cls.DEFAULT_INTERVAL
                if raw_interval is None
                else float(raw_interval)
            )
        except ValueError as ex:
            raise ConfigurationError(
                f"{cls.ENV_PREFIX}INTERVAL must be a number: {raw_interval!r}"
            ) from ex

        raw_policy = environ.get(f"{cls.ENV_PREFIX}FIRST_CYCLE", "suppress")
        try:
            policy = FirstCyclePolicy(raw_policy.strip().lower())
        except ValueError as ex:
            raise ConfigurationError(
                f"{cls.ENV_PREFIX}FIRST_CYCLE must be one of "
                f"{[policy.value for policy in FirstCyclePolicy]}: {raw_policy!r}"
            ) from ex

        config = cls(channel_id, interval, policy)
        config.validate()
        return config
