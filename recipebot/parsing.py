"""Coerce free-form model output into typed data.

Models are asked for JSON but do not always comply. Two tiers:

1. The text between the first ``{`` and the last ``}`` is decoded strictly
   against a pydantic schema. Missing or blank required fields are an
   `IncompleteOutputError`, never a partially filled value.
2. Only for a flat list of strings (`decode_items`): when there is no
   bracketed region at all, every non-empty line without a brace is an item.
"""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from recipebot.errors import (
    IncompleteOutputError,
    NoUsableContentError,
    StructuredOutputError,
)
from recipebot.models import RecognizedItems


logger = logging.getLogger(__name__)


ModelT = TypeVar("ModelT", bound=BaseModel)


def find_object(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start : end + 1]


def fallback_lines(text: str) -> list[str]:
    lines = (line.strip() for line in text.splitlines())
    return [line for line in lines if line and "{" not in line and "}" not in line]


def _is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return not value or any(_is_blank(v) for v in value)
    return value is None


def decode(text: str, schema: type[ModelT]) -> ModelT:
    candidate = find_object(text)
    if candidate is None:
        raise NoUsableContentError(text)

    try:
        value = schema.model_validate_json(candidate, strict=True)
    except ValidationError as e:
        missing = [
            str(err["loc"][0])
            for err in e.errors()
            if err["loc"]
            and (err["type"] == "missing" or err.get("input", ...) is None)
        ]
        if missing:
            raise IncompleteOutputError(missing, text) from e
        raise StructuredOutputError(
            f"Could not decode {schema.__name__}: {e.error_count()} errors", text
        ) from e

    blank = [name for name in schema.model_fields if _is_blank(getattr(value, name))]
    if blank:
        raise IncompleteOutputError(blank, text)

    return value


def decode_items(text: str) -> list[str]:
    """Item list from a `{"items": [...]}` object, else from the lines."""
    if find_object(text) is None:
        logger.info("No JSON object in response, falling back to lines")
        items = fallback_lines(text)
        if not items:
            raise NoUsableContentError(text)
        return items

    return [item.strip() for item in decode(text, RecognizedItems).items]
