import base64
import contextlib
from enum import Enum
from typing import Any, Iterator, Protocol, Self

import openai

from recipebot.errors import CapabilityError, CapabilityTimeoutError


MAX_TOKENS = 1000
TIMEOUT = 60


def openai_client_factory(
    api_key: str,
    *,
    base_url: str | None = None,
    timeout: float = TIMEOUT,
) -> openai.AsyncClient:
    # Failed stages are reported to the user, not retried.
    return openai.AsyncClient(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_retries=0,
    )


def encode_image(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


class Content(Protocol):
    def to_dict(self) -> dict[str, Any]:
        ...


class ContentType(Enum):
    text = "text"
    image_url = "image_url"


class TextContent:
    type = ContentType.text

    def __init__(self, text: str) -> None:
        self.text = text

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "text": self.text}


class ImgContent:
    type = ContentType.image_url

    @classmethod
    def from_bytes(cls, data: bytes, *, mime_type: str = "image/jpeg") -> Self:
        return cls(url=f"data:{mime_type};base64,{encode_image(data)}")

    def __init__(self, url: str) -> None:
        self.url = url

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "image_url": {"url": self.url}}


class ChatMsg:
    def __init__(self, *, role: str, content: str | list[Content]) -> None:
        self.role = role
        self.content = content

    def to_dict(self) -> dict[str, Any]:
        content = (
            self.content
            if isinstance(self.content, str)
            else [c.to_dict() for c in self.content]
        )
        return {"role": self.role, "content": content}


class Chat:
    """One conversation. Cheap to build; the client underneath is shared."""

    @classmethod
    def from_system_prompt(
        cls,
        prompt: str,
        *,
        client: openai.AsyncClient,
        model: str,
        max_tokens: int = MAX_TOKENS,
    ) -> Self:
        messages: list[ChatMsg] = [ChatMsg(role="system", content=prompt)]
        return cls(client=client, model=model, messages=messages, max_tokens=max_tokens)

    def __init__(
        self,
        *,
        client: openai.AsyncClient,
        model: str,
        messages: list[ChatMsg] | None = None,
        max_tokens: int = MAX_TOKENS,
    ) -> None:
        self.model = model
        self._messages: list[ChatMsg] = [] if messages is None else messages
        self.max_tokens = max_tokens
        self._client = client

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [m.to_dict() for m in self._messages],
            "max_tokens": self.max_tokens,
        }

    async def send_messages(self, *, timeout: float | None = None) -> list[ChatMsg]:
        data = self.to_dict()
        if timeout is not None:
            data["timeout"] = timeout
        resp = await self._client.chat.completions.create(**data)
        return [
            ChatMsg(role=c.message.role, content=c.message.content or "")
            for c in resp.choices
        ]

    async def chat(self, msg: str | ChatMsg, *, timeout: float | None = None) -> str:
        chat_msg = ChatMsg(role="user", content=msg) if isinstance(msg, str) else msg
        self._messages.append(chat_msg)
        chat_msgs = await self.send_messages(timeout=timeout)
        if not chat_msgs:
            raise ValueError("Completion returned no choices.")
        self._messages.extend(chat_msgs)
        s = ""
        for part in chat_msgs:
            if isinstance(part.content, str):
                s += "\n" + part.content
            else:
                raise RuntimeError("Non-string response content not supported.")
        return s.strip()


@contextlib.contextmanager
def capability_errors(capability: str, timeout: float | None) -> Iterator[None]:
    """Turn client failures into `CapabilityError`s."""
    try:
        yield
    except openai.APITimeoutError as e:
        raise CapabilityTimeoutError(capability, timeout) from e
    except openai.APIError as e:
        raise CapabilityError(capability, str(e)) from e
    except ValueError as e:
        raise CapabilityError(capability, str(e)) from e
