from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

import httpx
import pytest
import telegram
from telegram.constants import ParseMode
from telegram.error import BadRequest, Conflict, NetworkError, RetryAfter

from fakes import ALICE
from recipebot.errors import ImageFetchError
from recipebot.transport import Button, TelegramTransport, to_raw_update
from recipebot.updates import CallbackUpdate, PhotoSize, RawUpdate, classify


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
TG_ALICE = telegram.User(
    id=ALICE.id, first_name="Alice", is_bot=False, last_name="A", username="alice"
)
CHAT = telegram.Chat(id=ALICE.id, type="private")


def message(**kwargs: Any) -> telegram.Message:
    return telegram.Message(message_id=10, date=NOW, chat=CHAT, from_user=TG_ALICE, **kwargs)


def test_text_message() -> None:
    raw = to_raw_update(telegram.Update(update_id=3, message=message(text="/start")))
    assert raw == RawUpdate(
        update_id=3, sender=ALICE, chat_id=ALICE.id, message_id=10, text="/start"
    )


def test_photo_message() -> None:
    photos = (
        telegram.PhotoSize("small", "u1", width=90, height=90),
        telegram.PhotoSize("large", "u2", width=1280, height=960),
    )
    raw = to_raw_update(telegram.Update(update_id=3, message=message(photo=photos)))
    assert raw.photos == (PhotoSize("small", 90, 90), PhotoSize("large", 1280, 960))
    assert raw.text == ""


def test_callback_query() -> None:
    query = telegram.CallbackQuery(
        id="cb", from_user=TG_ALICE, chat_instance="ci", data="list_recipes", message=message()
    )
    raw = to_raw_update(telegram.Update(update_id=4, callback_query=query))
    assert raw == RawUpdate(
        update_id=4,
        sender=ALICE,
        chat_id=ALICE.id,
        message_id=10,
        callback_id="cb",
        callback_data="list_recipes",
    )


def test_other_update_is_empty() -> None:
    assert to_raw_update(telegram.Update(update_id=9)) == RawUpdate(update_id=9)


class FakeBot:
    def __init__(self, file_path: str | None = "https://files.example/photo.jpg") -> None:
        self.file_path = file_path
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def send_message(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(("send_message", kwargs))
        return SimpleNamespace(message_id=555)

    async def delete_message(self, *, chat_id: int, message_id: int) -> bool:
        if message_id == 1:
            raise BadRequest("Message to delete not found")
        return True

    async def get_file(self, file_id: str) -> SimpleNamespace:
        if file_id == "gone":
            raise BadRequest("Wrong file_id specified")
        return SimpleNamespace(file_path=self.file_path)


class PollingBot:
    """Replays scripted polls. Exceptions are raised, batches returned."""

    def __init__(self, *replies: list[telegram.Update] | Exception) -> None:
        self.replies = list(replies)
        self.offsets: list[int | None] = []

    async def get_updates(self, *, offset: int | None, **kwargs: Any) -> list[telegram.Update]:
        self.offsets.append(offset)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def transport(bot: FakeBot, status: int = 200) -> TelegramTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=b"jpeg-bytes")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramTransport(bot, http_client=client)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_fetch_file() -> None:
    assert await transport(FakeBot()).fetch_file("large") == b"jpeg-bytes"


@pytest.mark.parametrize(
    "bot,status,file_id",
    (
        (FakeBot(), 200, "gone"),
        (FakeBot(), 404, "large"),
        (FakeBot(file_path=None), 200, "large"),
    ),
)
@pytest.mark.asyncio
async def test_fetch_file_failure(bot: FakeBot, status: int, file_id: str) -> None:
    with pytest.raises(ImageFetchError) as exc_info:
        await transport(bot, status).fetch_file(file_id)
    assert exc_info.value.file_id == file_id


@pytest.mark.asyncio
async def test_send_message_with_inline_keyboard() -> None:
    bot = FakeBot()
    message_id = await transport(bot).send_message(
        1, "*hi*", markdown=True, inline_keyboard=[[Button("Back", "list_recipes")]]
    )

    assert message_id == 555
    ((_, kwargs),) = bot.calls
    assert kwargs["parse_mode"] == ParseMode.MARKDOWN
    markup = kwargs["reply_markup"]
    assert isinstance(markup, telegram.InlineKeyboardMarkup)
    (row,) = markup.inline_keyboard
    assert row[0].text == "Back" and row[0].callback_data == "list_recipes"


@pytest.mark.asyncio
async def test_send_message_with_reply_keyboard() -> None:
    bot = FakeBot()
    await transport(bot).send_message(1, "hello", reply_keyboard=[["Help", "My recipes"]])

    ((_, kwargs),) = bot.calls
    assert kwargs["parse_mode"] is None
    markup = kwargs["reply_markup"]
    assert isinstance(markup, telegram.ReplyKeyboardMarkup)
    assert [b.text for b in markup.keyboard[0]] == ["Help", "My recipes"]


def test_callback_query_without_hosting_message() -> None:
    query = telegram.CallbackQuery(
        id="cb", from_user=TG_ALICE, chat_instance="ci", data="list_recipes"
    )
    raw = to_raw_update(telegram.Update(update_id=4, callback_query=query))
    assert raw.chat_id == ALICE.id
    assert raw.message_id is None
    assert classify(raw) == CallbackUpdate(4, ALICE, ALICE.id, "cb", "list_recipes", None)


@pytest.mark.asyncio
async def test_delete_message() -> None:
    assert await transport(FakeBot()).delete_message(1, 2) is True


@pytest.mark.asyncio
async def test_delete_message_already_gone() -> None:
    assert await transport(FakeBot()).delete_message(1, 1) is False


@pytest.mark.asyncio
async def test_fetch_failure_keeps_token_out_of_reason() -> None:
    bot = FakeBot(file_path="https://api.telegram.org/file/bot123:SECRET/photos/a.jpg")
    with pytest.raises(ImageFetchError) as exc_info:
        await transport(bot, status=502).fetch_file("large")
    assert "SECRET" not in str(exc_info.value)
    assert "502" in exc_info.value.reason


@pytest.mark.asyncio
async def test_polling_survives_flood_control_and_conflicts() -> None:
    bot = PollingBot(
        RetryAfter(0),
        NetworkError("connection reset"),
        Conflict("terminated by other getUpdates request"),
        [telegram.Update(update_id=41, message=message(text="hi"))],
        [telegram.Update(update_id=42, message=message(text="again"))],
    )
    polling = TelegramTransport(
        bot, http_client=httpx.AsyncClient(), retry_delay=0  # type: ignore[arg-type]
    )
    updates = polling.updates()

    first = await anext(updates)
    second = await anext(updates)
    await updates.aclose()

    assert (first.update_id, first.text) == (41, "hi")
    assert second.update_id == 42
    assert bot.offsets == [None, None, None, None, 42]
