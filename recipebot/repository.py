"""Persistence gateway.

Every recipe query filters on both the recipe id and the owning user id, so
ownership is enforced by the database rather than by callers.
"""

import contextlib
from datetime import datetime
import json
from typing import Any, AsyncIterator

from databases import Database
from databases.interfaces import Record

from recipebot.errors import PersistenceError, RecipeNotFound
from recipebot.models import Recipe, StoredRecipe, User


USER_COLUMNS = "id, telegram_id, username, first_name, last_name, created_at, updated_at"

RECIPE_COLUMNS = "id, user_id, title, content, ingredients, created_at"


GET_USER_BY_TELEGRAM_ID = f"SELECT {USER_COLUMNS} FROM users WHERE telegram_id = :telegram_id"


CREATE_USER = f"""
INSERT INTO users (telegram_id, username, first_name, last_name)
VALUES (:telegram_id, :username, :first_name, :last_name)
ON CONFLICT (telegram_id) DO NOTHING
RETURNING {USER_COLUMNS}
"""


UPDATE_USER = f"""
UPDATE users
SET username = :username, first_name = :first_name, last_name = :last_name,
    updated_at = CURRENT_TIMESTAMP
WHERE telegram_id = :telegram_id
RETURNING {USER_COLUMNS}
"""


SAVE_RECIPE = f"""
INSERT INTO recipes (user_id, title, content, ingredients)
VALUES (:user_id, :title, :content, :ingredients)
RETURNING {RECIPE_COLUMNS}
"""


LIST_USER_RECIPES = f"""
SELECT {RECIPE_COLUMNS} FROM recipes
WHERE user_id = :user_id
ORDER BY created_at DESC, id DESC
LIMIT :limit
"""


GET_RECIPE = f"SELECT {RECIPE_COLUMNS} FROM recipes WHERE id = :id AND user_id = :user_id"


DELETE_RECIPE = "DELETE FROM recipes WHERE id = :id AND user_id = :user_id RETURNING id"


def _timestamp(value: Any) -> datetime:
    # SQLite hands back CURRENT_TIMESTAMP as text.
    return datetime.fromisoformat(value) if isinstance(value, str) else value


def _user(row: Record) -> User:
    return User(
        id=row["id"],
        telegram_id=row["telegram_id"],
        username=row["username"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        created_at=_timestamp(row["created_at"]),
        updated_at=_timestamp(row["updated_at"]),
    )


def _recipe(row: Record) -> StoredRecipe:
    return StoredRecipe(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        content=row["content"],
        ingredients=json.loads(row["ingredients"]),
        created_at=_timestamp(row["created_at"]),
    )


@contextlib.asynccontextmanager
async def _errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except (PersistenceError, RecipeNotFound):
        raise
    except Exception as e:
        raise PersistenceError(operation, repr(e)) from e


class Repository:
    """Users and their recipes."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def _fetch_one(self, query: str, values: dict[str, Any]) -> Record | None:
        return await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            query, values=values
        )

    async def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        async with _errors("get_user_by_telegram_id"):
            row = await self._fetch_one(
                GET_USER_BY_TELEGRAM_ID, {"telegram_id": telegram_id}
            )
        return None if row is None else _user(row)

    async def create_user(
        self,
        *,
        telegram_id: int,
        username: str,
        first_name: str,
        last_name: str,
    ) -> User | None:
        """None if the user already exists, e.g. created by a concurrent update."""
        async with _errors("create_user"):
            row = await self._fetch_one(
                CREATE_USER,
                {
                    "telegram_id": telegram_id,
                    "username": username,
                    "first_name": first_name,
                    "last_name": last_name,
                },
            )
        return None if row is None else _user(row)

    async def update_user(
        self,
        *,
        telegram_id: int,
        username: str,
        first_name: str,
        last_name: str,
    ) -> User:
        async with _errors("update_user"):
            row = await self._fetch_one(
                UPDATE_USER,
                {
                    "telegram_id": telegram_id,
                    "username": username,
                    "first_name": first_name,
                    "last_name": last_name,
                },
            )
            if row is None:
                raise PersistenceError("update_user", f"no user {telegram_id}")
        return _user(row)

    async def save_recipe(self, *, user_id: int, recipe: Recipe, content: str) -> StoredRecipe:
        async with _errors("save_recipe"):
            row = await self._fetch_one(
                SAVE_RECIPE,
                {
                    "user_id": user_id,
                    "title": recipe.title,
                    "content": content,
                    "ingredients": json.dumps(recipe.ingredients, ensure_ascii=False),
                },
            )
            if row is None:
                raise PersistenceError("save_recipe", "insert returned no row")
        return _recipe(row)

    async def list_recipes(self, user_id: int, *, limit: int) -> list[StoredRecipe]:
        """Most recent first, at most `limit`."""
        async with _errors("list_recipes"):
            rows = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
                LIST_USER_RECIPES, values={"user_id": user_id, "limit": limit}
            )
        return [_recipe(r) for r in rows]

    async def get_recipe(self, recipe_id: int, *, user_id: int) -> StoredRecipe:
        async with _errors("get_recipe"):
            row = await self._fetch_one(GET_RECIPE, {"id": recipe_id, "user_id": user_id})
        if row is None:
            raise RecipeNotFound(recipe_id)
        return _recipe(row)

    async def delete_recipe(self, recipe_id: int, *, user_id: int) -> bool:
        """Whether a row went. Deleting twice, or someone else's, is False."""
        async with _errors("delete_recipe"):
            row = await self._fetch_one(DELETE_RECIPE, {"id": recipe_id, "user_id": user_id})
        return row is not None
