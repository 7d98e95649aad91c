"""
Configuration: which PHP files to analyze and the fat-interface threshold.

A config file is YAML:

    directories:
      - src
    exclude_directories:
      - src/Legacy
    files:
      - bootstrap/Kernel.php
    exclude_files:
      - src/Generated/Proxy.php
    isp_threshold: 5

Relative paths are taken relative to the config file's directory.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from php_solid.errors import ConfigError
from php_solid.logging import get_logger
from php_solid.logging_tags import CONFIG

logger = get_logger(__name__)


class SolidConfig(BaseModel):
    directories: List[str] = Field(default_factory=list, description="Directories scanned recursively.")
    exclude_directories: List[str] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list, description="Individual files to analyze.")
    exclude_files: List[str] = Field(default_factory=list)
    isp_threshold: Optional[int] = Field(None, description="Fat interface method threshold.")

    @field_validator("isp_threshold")
    @classmethod
    def ensure_positive_threshold(cls, v):
        if v is not None and v < 1:
            raise ValueError("isp_threshold must be >= 1")
        return v

    def add_directory(self, path: str) -> "SolidConfig":
        return self.model_copy(update={"directories": [*self.directories, path]})

    def resolved(self, base_dir: os.PathLike) -> "SolidConfig":
        """Returns a copy with every relative path anchored at ``base_dir``."""
        base = Path(base_dir)

        def anchor(paths: List[str]) -> List[str]:
            return [str(p if Path(p).is_absolute() else base / p) for p in paths]

        return self.model_copy(update={
            "directories": anchor(self.directories),
            "exclude_directories": anchor(self.exclude_directories),
            "files": anchor(self.files),
            "exclude_files": anchor(self.exclude_files),
        })


def _load_yaml_file(path: Path) -> dict:
    if not path.is_file():
        raise ConfigError(f"Config file '{path}' not found or not readable.")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read YAML config: {path}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {path}")

    return data


def load_config(path: os.PathLike) -> SolidConfig:
    """
    Loads and validates a YAML config file. Raises ConfigError when the file
    is missing, is not valid YAML, or does not match the schema.
    """
    config_path = Path(path)
    data = _load_yaml_file(config_path)
    try:
        config = SolidConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file '{config_path}': {e}") from e

    logger.info(
        f"{CONFIG} Loaded {config_path}: {len(config.directories)} directories, "
        f"{len(config.files)} files"
    )
    return config.resolved(config_path.parent)
