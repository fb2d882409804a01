"""Browse flow state carried on inline buttons.

Nothing about where a user is in the flow is stored server side. Each button
carries the action it triggers:

    recipe:<id>     view one recipe
    delete:<id>     delete one recipe
    list_recipes    back to the list

Tokens never carry an owner. The owner is always the user pressing the button.
"""

from dataclasses import dataclass
from typing import TypeAlias
import re

from recipebot.errors import CallbackDecodeError


MAX_ID = 2**63 - 1

VIEW_PREFIX = "recipe"
DELETE_PREFIX = "delete"
LIST_TOKEN = "list_recipes"

_TOKEN_RE = re.compile(rf"({VIEW_PREFIX}|{DELETE_PREFIX}):(0|[1-9][0-9]*)")


@dataclass(frozen=True)
class ViewRecipe:
    id: int


@dataclass(frozen=True)
class DeleteRecipe:
    id: int


@dataclass(frozen=True)
class ListRecipes:
    pass


CallbackAction: TypeAlias = ViewRecipe | DeleteRecipe | ListRecipes


def _check_id(id: int) -> int:
    if not 0 <= id <= MAX_ID:
        raise ValueError(f"Recipe id out of range: {id}")
    return id


def encode(action: CallbackAction) -> str:
    match action:
        case ViewRecipe(id=id):
            return f"{VIEW_PREFIX}:{_check_id(id)}"
        case DeleteRecipe(id=id):
            return f"{DELETE_PREFIX}:{_check_id(id)}"
        case ListRecipes():
            return LIST_TOKEN
        case _:
            raise TypeError(f"Not a callback action: {action!r}")


def decode(token: str) -> CallbackAction:
    if token == LIST_TOKEN:
        return ListRecipes()

    match = _TOKEN_RE.fullmatch(token)
    if match is None:
        raise CallbackDecodeError(token)

    prefix, digits = match.groups()
    if len(digits) > len(str(MAX_ID)) or int(digits) > MAX_ID:
        raise CallbackDecodeError(token)

    id = int(digits)
    return ViewRecipe(id) if prefix == VIEW_PREFIX else DeleteRecipe(id)
