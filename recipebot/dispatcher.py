"""Route each inbound update to its handler, each on its own task.

The dispatcher never waits for one update before taking the next, and a
failing handler is logged and forgotten. On shutdown it stops taking updates
and gives in-flight handling a grace period to finish.
"""

import asyncio
import logging

from recipebot.bot import RecipeBot
from recipebot.transport import Transport
from recipebot.updates import (
    CallbackUpdate,
    CommandUpdate,
    PhotoUpdate,
    RawUpdate,
    TextUpdate,
    classify,
)


logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(
        self,
        bot: RecipeBot,
        transport: Transport,
        *,
        grace_period: float = 3.0,
    ) -> None:
        self.bot = bot
        self.transport = transport
        self.grace_period = grace_period
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def handle(self, raw: RawUpdate) -> None:
        update = classify(raw)
        match update:
            case CommandUpdate():
                await self.bot.on_command(update)
            case PhotoUpdate():
                await self.bot.on_photo(update)
            case CallbackUpdate():
                await self.bot.on_callback(update)
            case TextUpdate():
                await self.bot.on_text(update)
            case None:
                logger.debug("Ignoring update %s", raw.update_id)

    async def _handle_logged(self, raw: RawUpdate) -> None:
        try:
            await self.handle(raw)
        except Exception:
            logger.exception("Failed to handle update %s", raw.update_id)

    def submit(self, raw: RawUpdate) -> asyncio.Task[None]:
        task = asyncio.create_task(self._handle_logged(raw), name=f"update-{raw.update_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _consume(self) -> None:
        async for raw in self.transport.updates():
            self.submit(raw)

    async def drain(self) -> None:
        """Wait up to the grace period for in-flight updates. Never cancels them."""
        if not self._tasks:
            return
        logger.info(
            "Waiting up to %ss for %d in-flight updates", self.grace_period, len(self._tasks)
        )
        _, pending = await asyncio.wait(set(self._tasks), timeout=self.grace_period)
        if pending:
            logger.warning("%d updates still in flight after grace period", len(pending))

    async def run(self, stop: asyncio.Event) -> None:
        """Dispatch until `stop` is set or the transport gives out."""
        logger.info("Dispatcher started")
        consumer = asyncio.create_task(self._consume(), name="consume-updates")
        stopped = asyncio.create_task(stop.wait(), name="stop-signal")
        try:
            await asyncio.wait({consumer, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            consumer.cancel()
            stopped.cancel()
            error, _ = await asyncio.gather(consumer, stopped, return_exceptions=True)
            await self.drain()
            logger.info("Dispatcher stopped")

        if isinstance(error, Exception):
            raise error
