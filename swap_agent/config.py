"""Application configuration management."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment or `.env`."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    quicknode_subdomain: str = Field(..., alias="QUICKNODE_SUBDOMAIN")
    quicknode_api_key: str = Field(..., alias="QUICKNODE_API_KEY")

    mcp_swap_server_cmd: str = Field(
        default="node ../ember-mcp-tool-server/dist/index.js",
        alias="MCP_SWAP_SERVER_CMD",
    )
    swap_tool_name: str = Field(default="swapTokens", alias="SWAP_TOOL_NAME")

    tokens_json: Optional[Path] = Field(default=None, alias="TOKENS_JSON")
    chains_json: Optional[Path] = Field(default=None, alias="CHAINS_JSON")

    user_address: Optional[str] = Field(default=None, alias="USER_ADDRESS")

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(
        default="gemini-1.5-flash-latest",
        alias="GEMINI_MODEL",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("user_address", "gemini_api_key", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Return cached Settings instance, raising a helpful message on failure."""
    try:
        return Settings()
    except (
        ValidationError
    ) as exc:  # pragma: no cover - configuration failure visible on boot
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


__all__ = ["Settings", "load_settings"]
