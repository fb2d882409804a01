import logging
from typing import Awaitable, Callable, TypeAlias

from recipebot import texts
from recipebot.browse import BrowseFlow
from recipebot.errors import PersistenceError
from recipebot.identity import resolve_user
from recipebot.pipeline import RecipePipeline
from recipebot.repository import Repository
from recipebot.transport import Transport
from recipebot.updates import CallbackUpdate, CommandUpdate, PhotoUpdate, TextUpdate


logger = logging.getLogger(__name__)


CommandHandler: TypeAlias = Callable[[CommandUpdate], Awaitable[None]]


class RecipeBot:
    """Handlers for each kind of update."""

    def __init__(
        self,
        *,
        transport: Transport,
        repository: Repository,
        pipeline: RecipePipeline,
        max_recipes: int,
    ) -> None:
        self.transport = transport
        self.repository = repository
        self.pipeline = pipeline
        self.browse = BrowseFlow(
            transport=transport, repository=repository, max_recipes=max_recipes
        )
        self.commands: dict[str, CommandHandler] = {
            "start": self.start,
            "help": self.help,
            "recipes": self.recipes,
        }

    async def on_command(self, update: CommandUpdate) -> None:
        handler = self.commands.get(update.name, self.unknown_command)
        await handler(update)

    async def on_photo(self, update: PhotoUpdate) -> None:
        await self.pipeline.run(update)

    async def on_callback(self, update: CallbackUpdate) -> None:
        await self.browse.handle(update)

    async def on_text(self, update: TextUpdate) -> None:
        match update.text.strip():
            case texts.HELP_BUTTON:
                await self.transport.send_message(update.chat_id, texts.HELP, markdown=True)
            case texts.RECIPES_BUTTON:
                await self.browse.show_list(update.chat_id, update.sender)
            case _:
                await self.transport.send_message(update.chat_id, texts.TEXT_HINT)

    async def start(self, update: CommandUpdate) -> None:
        try:
            await resolve_user(self.repository, update.sender)
        except PersistenceError:
            logger.exception("Could not register user %s", update.sender.id)

        await self.transport.send_message(
            update.chat_id,
            texts.WELCOME.format(name=update.sender.first_name),
            reply_keyboard=[[texts.HELP_BUTTON, texts.RECIPES_BUTTON]],
        )

    async def help(self, update: CommandUpdate) -> None:
        await self.transport.send_message(update.chat_id, texts.HELP, markdown=True)

    async def recipes(self, update: CommandUpdate) -> None:
        await self.browse.show_list(update.chat_id, update.sender)

    async def unknown_command(self, update: CommandUpdate) -> None:
        logger.debug("Unknown command /%s", update.name)
        await self.transport.send_message(update.chat_id, texts.UNKNOWN_COMMAND)
