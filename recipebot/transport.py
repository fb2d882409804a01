import asyncio
from dataclasses import dataclass
from datetime import timedelta
import logging
from typing import AsyncIterator, Protocol, Sequence, TypeAlias

import httpx
import telegram
from telegram.constants import ParseMode
from telegram.error import Conflict, NetworkError, RetryAfter, TelegramError

from recipebot.errors import ImageFetchError
from recipebot.updates import PhotoSize, RawUpdate, Sender


logger = logging.getLogger(__name__)


ALLOWED_UPDATES = ["message", "callback_query"]


@dataclass(frozen=True)
class Button:
    text: str
    data: str


InlineKeyboard: TypeAlias = Sequence[Sequence[Button]]
ReplyKeyboard: TypeAlias = Sequence[Sequence[str]]


class Transport(Protocol):
    def updates(self) -> AsyncIterator[RawUpdate]:
        ...

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        markdown: bool = False,
        inline_keyboard: InlineKeyboard | None = None,
        reply_keyboard: ReplyKeyboard | None = None,
    ) -> int:
        ...

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        ...

    async def answer_callback(self, callback_id: str, text: str | None = None) -> None:
        ...

    async def fetch_file(self, file_id: str) -> bytes:
        ...

    async def set_commands(self, commands: Sequence[tuple[str, str]]) -> None:
        ...


def _sender(user: telegram.User) -> Sender:
    return Sender(
        id=user.id,
        username=user.username or "",
        first_name=user.first_name or "",
        last_name=user.last_name or "",
    )


def _seconds(retry_after: int | float | timedelta) -> float:
    if isinstance(retry_after, timedelta):
        return retry_after.total_seconds()
    return float(retry_after)


def to_raw_update(update: telegram.Update) -> RawUpdate:
    query = update.callback_query
    if query is not None:
        hosting = query.message
        return RawUpdate(
            update_id=update.update_id,
            sender=_sender(query.from_user),
            # Inline-mode buttons have no hosting message; reply in private.
            chat_id=hosting.chat.id if hosting is not None else query.from_user.id,
            message_id=hosting.message_id if hosting is not None else None,
            callback_id=query.id,
            callback_data=query.data,
        )

    message = update.message
    if message is None:
        return RawUpdate(update_id=update.update_id)

    return RawUpdate(
        update_id=update.update_id,
        sender=_sender(message.from_user) if message.from_user is not None else None,
        chat_id=message.chat_id,
        message_id=message.message_id,
        text=message.text or "",
        photos=tuple(PhotoSize(p.file_id, p.width, p.height) for p in message.photo),
    )


class TelegramTransport:
    """Long polling and delivery through the Bot API."""

    def __init__(
        self,
        bot: telegram.Bot,
        *,
        http_client: httpx.AsyncClient,
        poll_timeout: int = 60,
        retry_delay: float = 5.0,
    ) -> None:
        self.bot = bot
        self.http_client = http_client
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay

    async def updates(self) -> AsyncIterator[RawUpdate]:
        offset: int | None = None
        while True:
            try:
                batch = await self.bot.get_updates(
                    offset=offset,
                    timeout=self.poll_timeout,
                    allowed_updates=ALLOWED_UPDATES,
                )
            except RetryAfter as e:
                delay = _seconds(e.retry_after)
                logger.warning("Flood control, polling again in %ss", delay)
                await asyncio.sleep(delay)
                continue
            except (NetworkError, Conflict) as e:
                logger.warning("Polling failed, retrying in %ss: %s", self.retry_delay, e)
                await asyncio.sleep(self.retry_delay)
                continue

            for update in batch:
                offset = update.update_id + 1
                yield to_raw_update(update)

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        markdown: bool = False,
        inline_keyboard: InlineKeyboard | None = None,
        reply_keyboard: ReplyKeyboard | None = None,
    ) -> int:
        markup: telegram.InlineKeyboardMarkup | telegram.ReplyKeyboardMarkup | None = None
        if inline_keyboard:
            markup = telegram.InlineKeyboardMarkup(
                [
                    [telegram.InlineKeyboardButton(b.text, callback_data=b.data) for b in row]
                    for row in inline_keyboard
                ]
            )
        elif reply_keyboard:
            markup = telegram.ReplyKeyboardMarkup(
                [list(row) for row in reply_keyboard], resize_keyboard=True
            )

        message = await self.bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=ParseMode.MARKDOWN if markdown else None,
            reply_markup=markup,
        )
        return message.message_id

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        """Best effort. Telegram refuses for messages already gone or over 48h old."""
        try:
            return await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as e:
            logger.warning("Could not delete message %s in chat %s: %s", message_id, chat_id, e)
            return False

    async def answer_callback(self, callback_id: str, text: str | None = None) -> None:
        await self.bot.answer_callback_query(callback_id, text=text)

    async def fetch_file(self, file_id: str) -> bytes:
        try:
            tg_file = await self.bot.get_file(file_id)
            if not tg_file.file_path:
                raise ImageFetchError(file_id, "no file path")
            resp = await self.http_client.get(tg_file.file_path)
            resp.raise_for_status()
        except TelegramError as e:
            raise ImageFetchError(file_id, str(e)) from e
        except httpx.HTTPStatusError as e:
            raise ImageFetchError(file_id, f"download returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            # The file url embeds the bot token, so keep it out of the reason.
            raise ImageFetchError(file_id, f"download failed: {type(e).__name__}") from e
        return resp.content

    async def set_commands(self, commands: Sequence[tuple[str, str]]) -> None:
        await self.bot.set_my_commands(
            [telegram.BotCommand(name, description) for name, description in commands]
        )
