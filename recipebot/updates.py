from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True)
class Sender:
    id: int
    username: str = ""
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True)
class PhotoSize:
    file_id: str
    width: int = 0
    height: int = 0

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class RawUpdate:
    """An inbound event as the transport sees it, before classification."""

    update_id: int
    sender: Sender | None = None
    chat_id: int | None = None
    message_id: int | None = None
    text: str = ""
    photos: tuple[PhotoSize, ...] = ()
    callback_id: str | None = None
    callback_data: str | None = None


@dataclass(frozen=True)
class CommandUpdate:
    update_id: int
    sender: Sender
    chat_id: int
    name: str
    args: str = ""


@dataclass(frozen=True)
class PhotoUpdate:
    update_id: int
    sender: Sender
    chat_id: int
    photos: tuple[PhotoSize, ...]

    @property
    def largest(self) -> PhotoSize:
        # Telegram lists sizes smallest first; on a tie keep the later one.
        return max(reversed(self.photos), key=lambda p: p.area)


@dataclass(frozen=True)
class CallbackUpdate:
    update_id: int
    sender: Sender
    chat_id: int
    callback_id: str
    data: str
    message_id: int | None = None


@dataclass(frozen=True)
class TextUpdate:
    update_id: int
    sender: Sender
    chat_id: int
    text: str


Update: TypeAlias = CommandUpdate | PhotoUpdate | CallbackUpdate | TextUpdate


def _command(text: str) -> tuple[str, str] | None:
    if not text.startswith("/") or len(text) < 2 or text[1].isspace():
        return None
    parts = text[1:].split(maxsplit=1)
    if not parts:
        return None
    name = parts[0].split("@", 1)[0].lower()
    if not name:
        return None
    return name, parts[1].strip() if len(parts) > 1 else ""


def classify(raw: RawUpdate) -> Update | None:
    """Command, then photo, then callback, then text. Anything else is None."""
    if raw.sender is None or raw.chat_id is None:
        return None

    command = _command(raw.text)
    if command is not None:
        name, args = command
        return CommandUpdate(raw.update_id, raw.sender, raw.chat_id, name, args)

    if raw.photos:
        return PhotoUpdate(raw.update_id, raw.sender, raw.chat_id, raw.photos)

    if raw.callback_id is not None:
        return CallbackUpdate(
            raw.update_id,
            raw.sender,
            raw.chat_id,
            raw.callback_id,
            raw.callback_data or "",
            raw.message_id,
        )

    if raw.text.strip():
        return TextUpdate(raw.update_id, raw.sender, raw.chat_id, raw.text)

    return None
