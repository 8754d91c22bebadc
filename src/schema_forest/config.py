"""Configuration management for schema-forest.

This module provides a pydantic-based configuration system that loads settings
from environment variables and provides convenient access to the type registry.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from schema_forest.typology.json_source import JsonTypeRuleSource
from schema_forest.typology.registry import TypeRegistry


class Config(BaseSettings):
    """Configuration settings for schema-forest.

    This class uses pydantic-settings to automatically load configuration
    from environment variables (or a ``.env`` file). All settings can be
    overridden by setting the corresponding environment variable.

    Environment Variables:
        SCHEMA_FOREST_TYPES_FILE: JSON file with the node type rules
        SCHEMA_FOREST_FOREST_FILE: JSON file with the project forest
        SCHEMA_FOREST_CAPTION_SEPARATOR: Replacement for whitespace in captions
        SCHEMA_FOREST_ID_PREFIX: Prefix of generated node ids
        SCHEMA_FOREST_LOG_LEVEL: Logging level used by the CLI

    Example:
        >>> config = Config(types_file="settings/types.json")
        >>> registry = config.get_registry()
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_FOREST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    types_file: Optional[Path] = Field(
        default=None,
        description="JSON file holding the node type rules",
    )

    forest_file: Optional[Path] = Field(
        default=None,
        description="JSON file holding the project forest",
    )

    caption_separator: str = Field(
        default="_",
        min_length=1,
        description="Replacement for whitespace runs in captions",
    )

    id_prefix: str = Field(
        default="node",
        description="Prefix of generated node ids",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level for the command line interface",
    )

    def get_registry(self) -> TypeRegistry:
        """Load the type registry from ``types_file``.

        Returns:
            A TypeRegistry over the configured rule table.

        Raises:
            ValueError: If no types file is configured.
            TypeRuleSourceError: If the file cannot be read or parsed.
        """
        if self.types_file is None:
            raise ValueError(
                "No node types file configured. "
                "Set SCHEMA_FOREST_TYPES_FILE or pass --types."
            )
        return JsonTypeRuleSource(path=self.types_file).fetch_registry()

    def validate_config(self) -> dict[str, bool]:
        """Report which settings are explicitly configured.

        Returns:
            Dictionary with validation status for each setting:
            {
                "types_configured": bool,
                "forest_configured": bool,
            }
        """
        return {
            "types_configured": self.types_file is not None,
            "forest_configured": self.forest_file is not None,
        }

    def __repr__(self) -> str:
        return (
            f"Config("
            f"types_file={self.types_file!r}, "
            f"forest_file={self.forest_file!r}, "
            f"caption_separator={self.caption_separator!r}, "
            f"id_prefix={self.id_prefix!r}, "
            f"log_level={self.log_level!r}"
            f")"
        )


def load_config() -> Config:
    """Load configuration from environment variables.

    Returns:
        A Config instance with settings loaded from environment.
    """
    return Config()
