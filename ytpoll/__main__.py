"""Script for watching a channel configured through environment variables."""

import logging

from dotenv import load_dotenv

from ytpoll import LoggingSink, PollerConfig, VideoPoller

if __name__ == "__main__":  # pragma: no cover
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    poller = VideoPoller.from_config(PollerConfig.from_env(), sink=LoggingSink())
    poller.run()
