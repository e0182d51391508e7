import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Self

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from stockfighter.exceptions import SettingsError

__all__ = ("Settings",)

_ENV_PREFIX = "STOCKFIGHTER_"


class Settings(BaseModel):
    """
    Connection settings shared by the HTTP and WebSocket clients.
    """

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    api_url: str = "https://api.stockfighter.io/ob/api/"
    gm_url: str = "https://api.stockfighter.io/gm/"
    ws_url: str = "wss://api.stockfighter.io/ob/api/ws/"
    timeout: float = Field(default=20.0, gt=0)

    @field_validator("api_key")
    @classmethod
    def api_key_validator(cls, value: SecretStr) -> SecretStr:
        key = value.get_secret_value().strip()

        if not key:
            raise ValueError("API key can't be empty.")

        return SecretStr(key)

    @field_validator("api_url", "gm_url", "ws_url")
    @classmethod
    def base_url_validator(cls, value: str) -> str:
        return value if value.endswith("/") else f"{value}/"

    @property
    def api_headers(self) -> Mapping[str, str]:
        return {"X-Starfighter-Authorization": self.api_key.get_secret_value()}

    @property
    def gm_headers(self) -> Mapping[str, str]:
        return {"Cookie": f"api_key={self.api_key.get_secret_value()}"}

    @classmethod
    def from_key_file(cls, path: str | Path, **overrides: Any) -> Self:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise SettingsError(f"Can't read API key file `{path}`.") from exc

        try:
            key = data.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise SettingsError(f"API key file `{path}` isn't valid UTF-8.") from exc

        if not key:
            raise SettingsError(f"API key file `{path}` is empty.")

        return cls(api_key=SecretStr(key), **overrides)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> Self:
        load_dotenv(env_file)
        overrides = {
            name: value
            for name in ("api_url", "gm_url", "ws_url", "timeout")
            if (value := os.getenv(f"{_ENV_PREFIX}{name.upper()}"))
        }

        if key := os.getenv(f"{_ENV_PREFIX}API_KEY"):
            return cls(api_key=SecretStr(key), **overrides)

        if key_file := os.getenv(f"{_ENV_PREFIX}KEY_FILE"):
            return cls.from_key_file(key_file, **overrides)

        raise SettingsError(
            f"Set `{_ENV_PREFIX}API_KEY` or `{_ENV_PREFIX}KEY_FILE` to configure the API key."
        )
