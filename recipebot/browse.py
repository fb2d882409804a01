"""List, view and delete saved recipes.

    List --ViewRecipe(id)--> View --DeleteRecipe(id)--> (deleted)
      ^                        |
      +------ListRecipes-------+

The current state is whatever button the user pressed. The user is always
re-derived from the sender of the press and every lookup is owner filtered,
so someone else's recipe looks exactly like one that does not exist.
"""

import logging

from recipebot import callbacks, texts
from recipebot.callbacks import DeleteRecipe, ListRecipes, ViewRecipe
from recipebot.errors import CallbackDecodeError, PersistenceError, RecipeNotFound
from recipebot.identity import resolve_user
from recipebot.repository import Repository
from recipebot.transport import Button, Transport
from recipebot.updates import CallbackUpdate, Sender


logger = logging.getLogger(__name__)


class BrowseFlow:
    def __init__(
        self,
        *,
        transport: Transport,
        repository: Repository,
        max_recipes: int,
    ) -> None:
        self.transport = transport
        self.repository = repository
        self.max_recipes = max_recipes

    async def handle(self, update: CallbackUpdate) -> None:
        """Act on a button press. The press is answered exactly once."""
        notice: str | None = None
        try:
            try:
                action = callbacks.decode(update.data)
            except CallbackDecodeError as e:
                logger.warning("Update %s: %s", update.update_id, e)
                notice = texts.UNKNOWN_ACTION
                return

            match action:
                case ViewRecipe(id=recipe_id):
                    await self.view(update, recipe_id)
                case DeleteRecipe(id=recipe_id):
                    await self.delete(update, recipe_id)
                case ListRecipes():
                    await self.show_list(update.chat_id, update.sender)
        finally:
            await self.transport.answer_callback(update.callback_id, text=notice)

    async def show_list(self, chat_id: int, sender: Sender) -> None:
        try:
            user = await resolve_user(self.repository, sender)
            recipes = await self.repository.list_recipes(user.id, limit=self.max_recipes)
        except PersistenceError:
            logger.exception("Could not list recipes for %s", sender.id)
            await self.transport.send_message(chat_id, texts.BROWSE_FAILED)
            return

        if not recipes:
            await self.transport.send_message(chat_id, texts.NO_RECIPES)
            return

        keyboard = [
            [Button(recipe.title, callbacks.encode(ViewRecipe(recipe.id)))]
            for recipe in recipes
        ]
        await self.transport.send_message(
            chat_id, texts.RECIPE_LIST, inline_keyboard=keyboard
        )

    async def view(self, update: CallbackUpdate, recipe_id: int) -> None:
        try:
            user = await resolve_user(self.repository, update.sender)
            recipe = await self.repository.get_recipe(recipe_id, user_id=user.id)
        except RecipeNotFound:
            logger.info("Recipe %s not found for %s", recipe_id, update.sender.id)
            await self.transport.send_message(update.chat_id, texts.RECIPE_NOT_FOUND)
            return
        except PersistenceError:
            logger.exception("Could not load recipe %s", recipe_id)
            await self.transport.send_message(update.chat_id, texts.BROWSE_FAILED)
            return

        keyboard = [
            [
                Button(texts.DELETE_BUTTON, callbacks.encode(DeleteRecipe(recipe.id))),
                Button(texts.BACK_BUTTON, callbacks.encode(ListRecipes())),
            ]
        ]
        await self.transport.send_message(
            update.chat_id, recipe.content, markdown=True, inline_keyboard=keyboard
        )

    async def delete(self, update: CallbackUpdate, recipe_id: int) -> None:
        try:
            user = await resolve_user(self.repository, update.sender)
            deleted = await self.repository.delete_recipe(recipe_id, user_id=user.id)
        except PersistenceError:
            logger.exception("Could not delete recipe %s", recipe_id)
            await self.transport.send_message(update.chat_id, texts.BROWSE_FAILED)
            return

        if not deleted:
            logger.info("Recipe %s already gone for %s", recipe_id, update.sender.id)

        if update.message_id is not None:
            await self.transport.delete_message(update.chat_id, update.message_id)
        await self.transport.send_message(update.chat_id, texts.RECIPE_DELETED)
