import asyncio
import contextlib
import logging
import signal
from typing import AsyncIterator

import httpx
import telegram

import config
import db
from recipebot import texts
from recipebot.aopenai import openai_client_factory
from recipebot.bot import RecipeBot
from recipebot.dispatcher import Dispatcher
from recipebot.logs import setup_logging
from recipebot.pipeline import RecipePipeline
from recipebot.recipes import RecipeGenerator
from recipebot.repository import Repository
from recipebot.transport import TelegramTransport
from recipebot.vision import ItemRecognizer


logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(cfg: config.Config) -> AsyncIterator[Dispatcher]:
    """Open every shared client once and wire the bot together."""
    database = db.database(cfg.db_url)
    await database.connect()
    await db.create_db(database)

    openai_client = openai_client_factory(
        cfg.openai_api_key, base_url=cfg.openai_base_url, timeout=cfg.request_timeout
    )
    vision_client = openai_client_factory(
        cfg.vision_api_key or cfg.openai_api_key,
        base_url=cfg.vision_base_url,
        timeout=cfg.request_timeout,
    )

    try:
        async with (
            httpx.AsyncClient(timeout=cfg.request_timeout) as http_client,
            telegram.Bot(cfg.telegram_token) as tg_bot,
        ):
            transport = TelegramTransport(
                tg_bot, http_client=http_client, poll_timeout=cfg.poll_timeout
            )
            await transport.set_commands(texts.BOT_COMMANDS)

            repository = Repository(database)
            pipeline = RecipePipeline(
                transport=transport,
                repository=repository,
                recognizer=ItemRecognizer(
                    vision_client,
                    model=cfg.vision_model,
                    max_tokens=cfg.vision_max_tokens,
                    timeout=cfg.request_timeout,
                ),
                generator=RecipeGenerator(
                    openai_client,
                    model=cfg.recipe_model,
                    max_tokens=cfg.recipe_max_tokens,
                    timeout=cfg.request_timeout,
                ),
            )
            bot = RecipeBot(
                transport=transport,
                repository=repository,
                pipeline=pipeline,
                max_recipes=cfg.max_recipes_per_user,
            )
            yield Dispatcher(bot, transport, grace_period=cfg.shutdown_grace_period)
    finally:
        await openai_client.close()
        await vision_client.close()
        await database.disconnect()


async def main() -> None:
    cfg = config.Config()
    setup_logging(cfg)
    logger.info("Starting the recipe bot (%s)", cfg.env.value)

    stop = asyncio.Event()

    def on_signal(sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down", sig.name)
        stop.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, on_signal, sig)

    async with lifespan(cfg) as dispatcher:
        await dispatcher.run(stop)

    logger.info("Bot stopped")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
