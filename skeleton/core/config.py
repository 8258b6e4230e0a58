import json
import logging
import tomllib
from pathlib import Path

import yaml
from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skeleton.core.exceptions import ConfigError

SUPPORTED_SCHEMES = ("sqlite://", "postgres://")
CONFIG_EXTENSIONS = (".json", ".toml", ".yaml", ".yml", ".env")


class Settings(BaseSettings):
    PROJECT_NAME: str = "API Skeleton"
    PROJECT_VERSION: str = "0.1.0"
    PROJECT_DESCRIPTION: str = "REST service skeleton with a database health check"
    DSN: str = Field(..., description="Database connection string, sqlite:// or postgres://")
    PORT: str = Field(default=":8080", description="Listen address like :8080 or 127.0.0.1:8080")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")
    ECHO_SQL: bool = Field(default=False, description="Log every SQL statement")

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    @field_validator("DSN")
    @classmethod
    def check_scheme(cls, value: str) -> str:
        if not value.startswith(SUPPORTED_SCHEMES):
            raise ValueError(f"DSN must start with one of {', '.join(SUPPORTED_SCHEMES)}")
        return value

    @property
    def host(self) -> str:
        host, _, _ = self.PORT.rpartition(":")
        return host or "0.0.0.0"

    @property
    def port_number(self) -> int:
        _, _, port = self.PORT.rpartition(":")
        return int(port)

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("PORT", mode="before")
    @classmethod
    def check_port(cls, value) -> str:
        value = str(value)
        _, _, port = value.rpartition(":")
        if not port.isdigit():
            raise ValueError(f"invalid listen address: {value}")
        return value


def find_config_file(name: str = "config", search_path: str | Path = ".") -> Path | None:
    for ext in CONFIG_EXTENSIONS:
        candidate = Path(search_path) / f"{name}{ext}"
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> dict:
    """Decode a config file by extension. Keys are upper-cased to match Settings fields."""
    text = path.read_text(encoding="utf-8")
    ext = path.suffix
    if ext == ".json":
        data = json.loads(text)
    elif ext == ".toml":
        data = tomllib.loads(text)
    elif ext in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    elif ext == ".env":
        data = dotenv_values(path)
    else:
        raise ConfigError(f"unsupported config file type: {path.name}")

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return {str(key).upper(): value for key, value in data.items()}


def load_settings(name: str = "config", search_path: str | Path = ".") -> Settings:
    """
    Read `<name>.{json,toml,yaml,yml,env}` from search_path into Settings.
    Values in the file win; environment variables fill keys the file leaves out.
    """
    path = find_config_file(name, search_path)
    if path is None:
        raise ConfigError(f'config file "{name}" not found in {Path(search_path).resolve()}')

    try:
        values = read_config_file(path)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to decode {path}: {e}") from e

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration in {path}: {e}") from e
