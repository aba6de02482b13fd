"""Lifecycle of the background board tasks."""

import asyncio
import logging
from dataclasses import dataclass, field

from plex_board.domain.errors import ConfigurationError
from plex_board.services.aggregator import UpdateAggregator
from plex_board.services.session_source import SessionSource

_logger = logging.getLogger(__name__)


@dataclass
class BoardRuntime:
    """Start and stop one task per source plus the update loop."""

    sources: list[SessionSource]
    aggregator: UpdateAggregator
    cancel: asyncio.Event = field(default_factory=asyncio.Event)
    tasks: list[asyncio.Task[None]] = field(default_factory=list)

    async def start(self) -> None:
        """Resolve every server and spawn the background tasks."""
        if not self.sources:
            raise ConfigurationError(
                "No Plex servers configured; run `plex-board auth` first"
            )
        if self.tasks:
            return
        await asyncio.gather(
            *(source.fetch_server_identity() for source in self.sources)
        )
        _logger.info("Monitoring %s Plex server(s)", len(self.sources))
        self.tasks.append(
            asyncio.create_task(self.aggregator.run(self.cancel), name="update-loop")
        )
        for index, source in enumerate(self.sources):
            self.tasks.append(
                asyncio.create_task(source.run(self.cancel), name=f"source-{index}")
            )

    async def stop(self) -> None:
        """Signal cancellation and wait for every task to finish."""
        self.cancel.set()
        results = await asyncio.gather(*self.tasks, return_exceptions=True)
        for task, result in zip(self.tasks, results, strict=True):
            if isinstance(result, Exception):
                _logger.error("Task %s failed: %s", task.get_name(), result)
        self.tasks.clear()
        _logger.info("Shutdown complete")
