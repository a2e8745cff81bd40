from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..constants import DEFAULT_USER_AGENT


class BotConfig(BaseModel):
    """Represents the bot's runtime configuration.

    Attributes:
        nickname: Nickname to register with; also the address prefix.
        username: IRC ident sent with USER.
        realname: IRC real name sent with USER.
        server: IRC server host.
        port: IRC server port (plain TCP).
        channels: Channels to join after registration.
        database: Path of the SQLite database file.
        weather_api_key: OpenWeatherMap API key; weather is disabled without it.
        user_agent: User-Agent header for every outbound HTTP request.
        games: Enables bare single-letter hangman guesses.
        word_list: Newline separated word list used by hangman.
    """

    nickname: str = Field(default="boot", min_length=1, max_length=30)
    username: str = "boot"
    realname: str = "boot"
    server: str = Field(min_length=1)
    port: int = Field(default=6667, ge=1, le=65535)
    channels: list[str] = Field(default_factory=list)
    database: str = "./database.sqlite"
    weather_api_key: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    games: bool = True
    word_list: str = "/usr/share/dict/words"

    @field_validator("nickname")
    @classmethod
    def validate_nickname(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped or any(ch.isspace() for ch in stripped):
            raise ValueError("nickname must be a single non-empty token")
        return stripped

    @field_validator("channels", mode="before")
    @classmethod
    def validate_channels(cls, v: Any) -> list[str]:
        """Validate and normalize channels.

        Strips whitespace, lower-cases, ensures a single leading '#',
        filters empty strings and deduplicates while keeping order.
        """
        if not isinstance(v, list):
            raise ValueError("channels must be a list")
        validated = []
        for c in v:
            if isinstance(c, str):
                stripped = c.strip().lstrip("#").lower()
                if stripped:
                    validated.append(f"#{stripped}")
        return list(dict.fromkeys(validated))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BotConfig:
        return cls.model_validate(dict(data))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
