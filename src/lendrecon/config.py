import os
import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import BaseModel, Field, HttpUrl, PlainSerializer, WebsocketUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lendrecon.logging import logger
from lendrecon.validation.bulk import DEFAULT_MAX_CONCURRENCY
from lendrecon.validation.classifier import (
    DEFAULT_ABSOLUTE_FLOOR,
    DEFAULT_RELATIVE_FLOOR,
    TolerancePolicy,
)

CONFIG_FILE = Path(
    os.environ.get(
        "LENDRECON_CONFIG_FILE",
        Path.home() / ".config" / "lendrecon" / "config.toml",
    )
).expanduser()
CONFIG_DIR = CONFIG_FILE.parent
DB_PATH = CONFIG_DIR / "lendrecon.db"


class DatabaseSettings(BaseModel):
    # Serialize the path as a string representation of the absolute path
    path: Annotated[
        Path,
        PlainSerializer(lambda path: str(path.absolute()), return_type=str),
    ]


class ChainSettings(BaseModel):
    chain_id: int = 1
    rpc: HttpUrl | WebsocketUrl | Path | None = None
    pool_address: str | None = None

    @field_validator("rpc", mode="after")
    def validate_path(
        cls,  # noqa: N805
        endpoint: HttpUrl | WebsocketUrl | Path | None,
    ) -> HttpUrl | WebsocketUrl | Path | None:
        """
        Convert an IPC file path to an absolute reference, leaving HTTP and WS URLs as-is.
        """

        return endpoint.expanduser().absolute() if isinstance(endpoint, Path) else endpoint


class ValidationSettings(BaseModel):
    absolute_floor: int = Field(default=DEFAULT_ABSOLUTE_FLOOR, ge=0)
    relative_floor: float = Field(default=DEFAULT_RELATIVE_FLOOR, ge=0)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)
    rpc_timeout: float = Field(default=10.0, gt=0)
    rpc_max_attempts: int = Field(default=3, ge=1)

    def tolerance_policy(self) -> TolerancePolicy:
        return TolerancePolicy(
            absolute_floor=self.absolute_floor,
            relative_floor=self.relative_floor,
        )


class Settings(BaseSettings):
    model_config = SettingsConfigDict()

    database: DatabaseSettings
    chain: ChainSettings = Field(default_factory=ChainSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    # TOML has no null, so unset optional values are left out of the file
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(mode="json", exclude_none=True),
        ),
    )


if not CONFIG_DIR.exists():
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    logger.info(f"Created a configuration directory at {CONFIG_DIR}.")

if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
else:
    settings = Settings(
        database=DatabaseSettings(
            path=DB_PATH,
        ),
    )

    save_config_to_file(settings)
    logger.info(f"Created a configuration file at {CONFIG_FILE}.")

    if not settings.database.path.exists():
        from lendrecon.database.operations import create_new_sqlite_database

        create_new_sqlite_database(db_path=settings.database.path)
