from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


class Settings(BaseModel):
    redis_url: str = Field(default="redis://127.0.0.1:6379/0")
    redis_socket_timeout: float = Field(default=5.0, gt=0)
    timezone: str = Field(default="UTC")
    flush_on_startup: bool = Field(default=False)


@lru_cache
def get_settings() -> Settings:
    return Settings(
        redis_url=os.getenv("REDIS_URL", Settings.model_fields["redis_url"].default),
        redis_socket_timeout=float(
            os.getenv("REDIS_SOCKET_TIMEOUT", Settings.model_fields["redis_socket_timeout"].default)
        ),
        timezone=os.getenv("TIMEZONE", Settings.model_fields["timezone"].default),
        flush_on_startup=bool(int(os.getenv("FLUSH_ON_STARTUP", "0"))),
    )
