from datetime import datetime

from pydantic import BaseModel


class RecognizedItems(BaseModel):
    items: list[str]


class Recipe(BaseModel):
    title: str
    ingredients: list[str]
    instructions: str


class User(BaseModel):
    id: int
    telegram_id: int
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    created_at: datetime
    updated_at: datetime

    def display_fields(self) -> tuple[str, str, str]:
        return (self.username, self.first_name, self.last_name)


class StoredRecipe(BaseModel):
    id: int
    user_id: int
    title: str
    ingredients: list[str]
    content: str
    created_at: datetime

    def __repr__(self) -> str:
        return f"<StoredRecipe(id={self.id}, title={self.title})>"
