from databases import Database

import config


CONFIG = config.Config()


CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    telegram_id BIGINT NOT NULL UNIQUE,
    username VARCHAR(256) NOT NULL DEFAULT '',
    first_name VARCHAR(256) NOT NULL DEFAULT '',
    last_name VARCHAR(256) NOT NULL DEFAULT '',
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS recipes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title VARCHAR(256) NOT NULL,
    content TEXT NOT NULL,
    ingredients TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
)
"""


CREATE_RECIPES_USER_INDEX = """
CREATE INDEX IF NOT EXISTS recipes_user_id ON recipes (user_id, created_at)
"""


def database(url: str | None = None) -> Database:
    return Database(CONFIG.db_url if url is None else url)


async def create_db(db: Database) -> None:
    for query in (CREATE_USERS_TABLE, CREATE_RECIPES_TABLE, CREATE_RECIPES_USER_INDEX):
        await db.execute(query=query)  # pyright: ignore[reportUnknownMemberType]
