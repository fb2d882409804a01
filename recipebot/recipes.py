import logging

import openai
from telegram.helpers import escape_markdown

from recipebot.aopenai import Chat, capability_errors
from recipebot.models import Recipe
from recipebot.parsing import decode
from recipebot.prompts import RECIPE_SYSTEM_PROMPT, CreateRecipePrompt


logger = logging.getLogger(__name__)


class RecipeGenerator:
    capability = "recipe generation"

    def __init__(
        self,
        client: openai.AsyncClient,
        *,
        model: str,
        max_tokens: int = 1000,
        timeout: float = 60.0,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def generate(self, items: list[str], *, timeout: float | None = None) -> Recipe:
        if not items:
            raise ValueError("Provide at least one item.")
        timeout = self.timeout if timeout is None else timeout

        chat = Chat.from_system_prompt(
            RECIPE_SYSTEM_PROMPT,
            client=self.client,
            model=self.model,
            max_tokens=self.max_tokens,
        )
        with capability_errors(self.capability, timeout):
            text = await chat.chat(str(CreateRecipePrompt(items)), timeout=timeout)
        logger.debug("Recipe response: %s", text)

        return decode(text, Recipe)


def _md(text: str) -> str:
    return escape_markdown(text, version=1)


def format_recipe(recipe: Recipe) -> str:
    """Telegram Markdown: title, numbered ingredients, instructions."""
    lines = [f"🍳 *{_md(recipe.title)}*", "", "*Ingredients:*"]
    lines += [f"{i}. {_md(ingredient)}" for i, ingredient in enumerate(recipe.ingredients, 1)]
    lines += ["", "*Instructions:*", _md(recipe.instructions)]
    return "\n".join(lines)
