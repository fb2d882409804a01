import pytest

from fakes import ALICE, FakeOpenAI, FakeTransport
from recipebot import texts
from recipebot.bot import RecipeBot
from recipebot.pipeline import RecipePipeline
from recipebot.recipes import RecipeGenerator
from recipebot.repository import Repository
from recipebot.updates import CommandUpdate, TextUpdate
from recipebot.vision import ItemRecognizer


@pytest.fixture
def bot(transport: FakeTransport, repository: Repository) -> RecipeBot:
    pipeline = RecipePipeline(
        transport=transport,
        repository=repository,
        recognizer=ItemRecognizer(FakeOpenAI(), model="vision"),  # type: ignore[arg-type]
        generator=RecipeGenerator(FakeOpenAI(), model="gpt"),  # type: ignore[arg-type]
    )
    return RecipeBot(
        transport=transport, repository=repository, pipeline=pipeline, max_recipes=10
    )


def command(name: str, args: str = "") -> CommandUpdate:
    return CommandUpdate(1, ALICE, ALICE.id, name, args)


def text(value: str) -> TextUpdate:
    return TextUpdate(1, ALICE, ALICE.id, value)


@pytest.mark.asyncio
async def test_start_registers_and_greets(
    bot: RecipeBot, transport: FakeTransport, repository: Repository
) -> None:
    await bot.on_command(command("start"))

    (message,) = transport.sent
    assert message.text == texts.WELCOME.format(name="Alice")
    assert message.reply_keyboard == [[texts.HELP_BUTTON, texts.RECIPES_BUTTON]]
    assert await repository.get_user_by_telegram_id(ALICE.id) is not None


@pytest.mark.asyncio
async def test_start_twice_keeps_one_user(bot: RecipeBot, repository: Repository) -> None:
    await bot.on_command(command("start"))
    first = await repository.get_user_by_telegram_id(ALICE.id)
    await bot.on_command(command("start", "again"))
    assert await repository.get_user_by_telegram_id(ALICE.id) == first


@pytest.mark.asyncio
async def test_help(bot: RecipeBot, transport: FakeTransport) -> None:
    await bot.on_command(command("help"))
    (message,) = transport.sent
    assert message.text == texts.HELP
    assert message.markdown


@pytest.mark.asyncio
async def test_recipes_when_empty(bot: RecipeBot, transport: FakeTransport) -> None:
    await bot.on_command(command("recipes"))
    assert transport.texts == [texts.NO_RECIPES]


@pytest.mark.asyncio
async def test_unknown_command(bot: RecipeBot, transport: FakeTransport) -> None:
    await bot.on_command(command("settings"))
    assert transport.texts == [texts.UNKNOWN_COMMAND]


@pytest.mark.asyncio
async def test_help_button(bot: RecipeBot, transport: FakeTransport) -> None:
    await bot.on_text(text(texts.HELP_BUTTON))
    assert transport.texts == [texts.HELP]


@pytest.mark.asyncio
async def test_recipes_button(bot: RecipeBot, transport: FakeTransport) -> None:
    await bot.on_text(text(f" {texts.RECIPES_BUTTON} "))
    assert transport.texts == [texts.NO_RECIPES]


@pytest.mark.asyncio
async def test_free_text_gets_hint(bot: RecipeBot, transport: FakeTransport) -> None:
    await bot.on_text(text("what can I cook?"))
    assert transport.texts == [texts.TEXT_HINT]
