# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
import yaml
import os
import logging

logger = logging.getLogger(__name__)

# Ensure .env from parent directory is loaded for local CLI runs
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

DEFAULT_PORT = 9700


class FileConfig(BaseModel):
    # HTTP listener
    listen_address: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)

    # What to report
    depth: Optional[int] = Field(default=None, ge=0)
    full_path: Optional[bool] = None

    # Pool data source
    from_json: Optional[str] = None
    source_command: Optional[str] = None
    source_timeout: Optional[float] = Field(default=None, gt=0)

    # Logging
    log_level: Optional[str] = None
    log_file: Optional[str] = None

    model_config = ConfigDict(extra='ignore')


class EnvConfig(BaseSettings):
    LISTEN_ADDRESS: str = Field(default="0.0.0.0")
    PORT: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    # 0 is the pool, 1 is top level vdevs, 2 is devices too
    DEPTH: int = Field(default=1, ge=0)
    FULL_PATH: bool = Field(default=False)

    FROM_JSON: Optional[str] = Field(default=None)
    SOURCE_COMMAND: Optional[str] = Field(default=None)
    SOURCE_TIMEOUT: Optional[float] = Field(default=None, gt=0)

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix='ZPOOL_EXPORTER_',
        env_file=".env",
        case_sensitive=False,
        extra='ignore',  # Ignore extra fields in .env that aren't defined in the model
    )


class Settings:
    """
    Resolved exporter settings.

    Environment variables (ZPOOL_EXPORTER_*) and .env provide the base values;
    a YAML config file, when given, overrides them. Command line flags are
    applied on top by main().
    """

    def __init__(self, config_file: Optional[str] = None):
        logger.debug("Loading configuration from environment variables")
        env = EnvConfig()

        self.listen_address = env.LISTEN_ADDRESS
        self.port = env.PORT
        self.depth = env.DEPTH
        self.full_path = env.FULL_PATH
        self.from_json = env.FROM_JSON
        self.source_command = env.SOURCE_COMMAND
        self.source_timeout = env.SOURCE_TIMEOUT
        self.log_level = env.LOG_LEVEL
        self.log_file = env.LOG_FILE

        if config_file:
            self._load_from_file(config_file)

    def _load_from_file(self, config_file: str) -> None:
        """Override settings with the non-empty values of a YAML config file."""
        if not os.path.exists(config_file):
            logger.warning(f"Config file not found: {config_file}")
            return

        logger.debug(f"Loading configuration from file: {config_file}")
        with open(config_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        file_config = FileConfig(**data)

        for key, value in file_config.model_dump(exclude_none=True).items():
            setattr(self, key, value)
        logger.info(f"Loaded configuration from {config_file}")
