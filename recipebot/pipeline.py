"""Photo in, recipe out.

Each stage is gated on the one before it and tells the user how it went. A
failed stage ends the run for that photo; nothing is retried. Saving is the
exception: the user already paid for the recipe, so they see it even if the
save fails.
"""

import logging

from recipebot import texts
from recipebot.errors import (
    CapabilityError,
    EmptyRecognitionError,
    ImageFetchError,
    PersistenceError,
    StructuredOutputError,
)
from recipebot.identity import resolve_user
from recipebot.models import Recipe
from recipebot.recipes import RecipeGenerator, format_recipe
from recipebot.repository import Repository
from recipebot.transport import Transport
from recipebot.updates import PhotoUpdate
from recipebot.vision import ItemRecognizer


logger = logging.getLogger(__name__)


def format_items(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))


class RecipePipeline:
    def __init__(
        self,
        *,
        transport: Transport,
        repository: Repository,
        recognizer: ItemRecognizer,
        generator: RecipeGenerator,
    ) -> None:
        self.transport = transport
        self.repository = repository
        self.recognizer = recognizer
        self.generator = generator

    async def run(self, update: PhotoUpdate) -> None:
        chat_id = update.chat_id

        try:
            user = await resolve_user(self.repository, update.sender)
        except PersistenceError:
            logger.exception("Could not resolve user %s", update.sender.id)
            await self.transport.send_message(chat_id, texts.GENERIC_ERROR)
            return

        status_id = await self.transport.send_message(chat_id, texts.PROCESSING)

        try:
            image = await self.transport.fetch_file(update.largest.file_id)
        except ImageFetchError as e:
            logger.warning("Update %s: %s", update.update_id, e)
            await self.transport.send_message(chat_id, texts.PHOTO_DOWNLOAD_FAILED)
            return

        items = await self._recognize(update, image)
        if items is None:
            return

        await self.transport.send_message(
            chat_id, texts.RECOGNIZED.format(items=format_items(items))
        )

        recipe = await self._generate(update, items)
        if recipe is None:
            return

        content = format_recipe(recipe)

        try:
            stored = await self.repository.save_recipe(
                user_id=user.id, recipe=recipe, content=content
            )
        except PersistenceError:
            logger.exception("Could not save recipe for user %s", user.id)
        else:
            logger.info("Saved recipe %s for user %s", stored.id, user.id)

        await self.transport.delete_message(chat_id, status_id)
        await self.transport.send_message(chat_id, content, markdown=True)

    async def _recognize(self, update: PhotoUpdate, image: bytes) -> list[str] | None:
        try:
            return await self.recognizer.recognize(image)
        except EmptyRecognitionError as e:
            logger.info("Update %s: nothing recognized in %r", update.update_id, e.raw)
            message = texts.NOTHING_RECOGNIZED
        except StructuredOutputError as e:
            logger.warning("Update %s: %s. Raw output: %r", update.update_id, e, e.raw)
            message = texts.UNREADABLE_RESULT
        except CapabilityError as e:
            logger.warning("Update %s: %s", update.update_id, e)
            message = texts.RECOGNITION_FAILED
        await self.transport.send_message(update.chat_id, message)
        return None

    async def _generate(self, update: PhotoUpdate, items: list[str]) -> Recipe | None:
        try:
            return await self.generator.generate(items)
        except StructuredOutputError as e:
            logger.warning("Update %s: %s. Raw output: %r", update.update_id, e, e.raw)
            message = texts.UNREADABLE_RESULT
        except CapabilityError as e:
            logger.warning("Update %s: %s", update.update_id, e)
            message = texts.GENERATION_FAILED
        await self.transport.send_message(update.chat_id, message)
        return None
