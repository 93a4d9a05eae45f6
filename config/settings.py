"""Settings loader for the jackpot keeper.

Configuration is read with :mod:`pydantic-settings` from the environment and an
optional ``.env`` file at the repository root.  The variable names follow the
Anchor tooling conventions (``ANCHOR_PROVIDER_URL``/``ANCHOR_WALLET``) so the
same shell environment drives both the keeper and the Anchor CLI.

Unlike a process-wide singleton, :func:`load_settings` returns a fresh
:class:`Settings` object that callers pass explicitly into the components they
construct.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
DEFAULT_BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_PROGRAM_ID = "HtbKartrbcGdW3wfhV2WsZVE4ybHhkKqWUr7V6PwEgfZ"


class Settings(BaseSettings):
    """Keeper configuration values."""

    model_config = SettingsConfigDict(env_file=ENV_PATH, extra="ignore")

    BASE_DIR: Path = DEFAULT_BASE_DIR
    ANCHOR_PROVIDER_URL: str = "https://api.devnet.solana.com"
    ANCHOR_WALLET: Path = Path("~/.config/solana/id.json")
    PROGRAM_ID: str = DEFAULT_PROGRAM_ID
    POT_SEED: str = "pot"

    ACTIVE_DURATION: int = Field(120, ge=0)
    COOLDOWN_DURATION: int = Field(360, ge=0)
    POLL_INTERVAL: float = Field(5.0, gt=0)
    RPC_TIMEOUT: float = Field(10.0, gt=0)
    CONFIRM_TIMEOUT: float = Field(30.0, gt=0)
    COMMITMENT: Literal["processed", "confirmed", "finalized"] = "confirmed"

    BUYBACK_ADDRESS: Optional[str] = None
    """Base58 recipient of the buyback share when rewards are distributed."""

    FEE_ADDRESS: Optional[str] = None
    """Base58 recipient of the protocol fee share and of admin withdrawals."""

    LOG_LEVEL: str = "INFO"

    @field_validator("ANCHOR_WALLET", mode="after")
    @classmethod
    def _expand_wallet(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("BUYBACK_ADDRESS", "FEE_ADDRESS", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def logs_dir(self) -> Path:
        return Path(self.BASE_DIR) / "logs"


def load_settings(env_file: Path | str | None = None, **overrides: Any) -> Settings:
    """Build :class:`Settings` from the environment.

    Parameters
    ----------
    env_file:
        Alternative ``.env`` file.  Its values are loaded into the process
        environment (without overriding variables that are already set) before
        the settings object is created.
    overrides:
        Explicit field values which take precedence over the environment.
        Mostly useful in tests.
    """

    if env_file is not None:
        path = Path(env_file).expanduser()
        load_dotenv(path)
        return Settings(_env_file=path, **overrides)
    return Settings(**overrides)


__all__ = ["Settings", "load_settings", "ENV_PATH", "DEFAULT_PROGRAM_ID"]
