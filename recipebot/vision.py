import logging

import openai

from recipebot.aopenai import (
    Chat,
    ChatMsg,
    Content,
    ImgContent,
    TextContent,
    capability_errors,
)
from recipebot.errors import (
    EmptyRecognitionError,
    IncompleteOutputError,
    NoUsableContentError,
)
from recipebot.parsing import decode_items
from recipebot.prompts import RECOGNIZE_ITEMS_PROMPT


logger = logging.getLogger(__name__)


class ItemRecognizer:
    """Image bytes in, ordered list of food item names out."""

    capability = "vision"

    def __init__(
        self,
        client: openai.AsyncClient,
        *,
        model: str,
        max_tokens: int = 300,
        timeout: float = 60.0,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def recognize(self, image: bytes, *, timeout: float | None = None) -> list[str]:
        timeout = self.timeout if timeout is None else timeout
        logger.debug("Recognizing items in %d byte image", len(image))

        content: list[Content] = [
            TextContent(RECOGNIZE_ITEMS_PROMPT),
            ImgContent.from_bytes(image),
        ]
        chat = Chat(client=self.client, model=self.model, max_tokens=self.max_tokens)

        with capability_errors(self.capability, timeout):
            text = await chat.chat(ChatMsg(role="user", content=content), timeout=timeout)
        logger.debug("Vision response: %s", text)

        try:
            items = decode_items(text)
        except (IncompleteOutputError, NoUsableContentError) as e:
            raise EmptyRecognitionError(text) from e

        logger.info("Recognized %d items", len(items))
        return items
