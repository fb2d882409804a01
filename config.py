from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file="app.env", extra="ignore")

    env: Env = Env.local
    log_level: str = "INFO"

    telegram_token: str = ""
    poll_timeout: int = 60
    shutdown_grace_period: float = 3.0

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    recipe_model: str = "gpt-4"
    recipe_max_tokens: int = 1000

    # Vision goes through OpenRouter unless told otherwise.
    vision_api_key: str | None = None
    vision_base_url: str = "https://openrouter.ai/api/v1"
    vision_model: str = "qwen/qwen-2.5-vl-7b-instruct:free"
    vision_max_tokens: int = 300

    request_timeout: float = 60.0

    db_url: str = "sqlite+aiosqlite:///recipebot.db"
    max_recipes_per_user: int = Field(default=50, gt=0)
