# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes settings for descriptors, search metric, index location, worker pools, and logging.

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ris.errors import InvalidArgument

DEFAULT_CONFIG_PATH = Path("ris.yaml")


class DescriptorSettings(BaseModel):
    """Settings describing which descriptor extractor to use and how it is parameterised."""

    name: str = Field(default="cedd", description="Identifier of the descriptor extractor implementation.")
    grid: int = Field(default=40, ge=1, description="Maximum number of blocks per image side for the cedd descriptor.")
    quantize: bool = Field(default=True, description="Quantize cedd histogram bins to eight levels.")
    bins: int = Field(default=32, ge=2, le=256, description="Buckets per channel for the color_histogram descriptor.")
    max_image_dimension: Optional[int] = Field(
        default=1024, ge=1, description="Downscale images whose longest side exceeds this before extraction."
    )

    @field_validator("name")
    @classmethod
    def _known_descriptor(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {"cedd", "color_histogram"}:
            raise ValueError(f"unknown descriptor {value!r}")
        return value


class SearchSettings(BaseModel):
    """Settings controlling how probe descriptors are compared with indexed ones."""

    metric: str = Field(default="tanimoto", description="Distance metric used to rank hits.")

    @field_validator("metric")
    @classmethod
    def _known_metric(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {"tanimoto", "euclidean", "chi_square"}:
            raise ValueError(f"unknown metric {value!r}")
        return value


class AppSettings(BaseModel):
    """Top-level application settings shared by the CLI, the API, and the core services."""

    index_dir: Path = Field(default=Path("index"), description="Directory holding the on-disk index.")
    image_extensions: Tuple[str, ...] = Field(
        default=("jpg", "jpeg", "png"), description="Recognized image file extensions (case-insensitive)."
    )
    workers: int = Field(default=6, ge=1, description="Worker threads used while indexing a directory.")
    search_workers: int = Field(default=1, ge=1, description="Worker threads used for batch directory searches.")
    max_hits: int = Field(default=3, ge=1, description="Number of nearest images returned per probe.")
    recursive: bool = Field(default=True, description="Descend into subdirectories when indexing.")
    progress: bool = Field(default=True, description="Show a progress bar while indexing.")
    scan_batch_size: int = Field(default=512, ge=1, description="Descriptors compared per numpy batch during search.")
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file.")
    descriptor: DescriptorSettings = Field(default_factory=DescriptorSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)

    @field_validator("image_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        extensions = tuple(str(ext).strip().lower().lstrip(".") for ext in value)
        extensions = tuple(ext for ext in extensions if ext)
        if not extensions:
            raise ValueError("at least one image extension is required")
        return extensions

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return value

    @classmethod
    def from_env(cls, **overrides) -> "AppSettings":
        """Instantiate settings, letting RIS_* environment variables override the defaults."""

        values = dict(overrides)
        if os.environ.get("RIS_INDEX_DIR"):
            values.setdefault("index_dir", os.environ["RIS_INDEX_DIR"])
        if os.environ.get("RIS_LOG_LEVEL"):
            values.setdefault("log_level", os.environ["RIS_LOG_LEVEL"])
        return cls._validate(values)

    @classmethod
    def load(cls, path: Optional[Path | str] = None) -> "AppSettings":
        """Load settings from a YAML file when it exists, falling back to defaults.

        Environment variables take precedence over the file.
        """

        config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
        if not config_path.exists():
            if path is not None:
                raise InvalidArgument(f"Configuration file not found: {config_path}")
            return cls.from_env()

        try:
            payload = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise InvalidArgument(f"Cannot parse configuration file {config_path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise InvalidArgument(f"Configuration file {config_path} must contain a mapping.")

        if os.environ.get("RIS_INDEX_DIR"):
            payload["index_dir"] = os.environ["RIS_INDEX_DIR"]
        if os.environ.get("RIS_LOG_LEVEL"):
            payload["log_level"] = os.environ["RIS_LOG_LEVEL"]
        return cls._validate(payload)

    def with_overrides(self, **overrides) -> "AppSettings":
        """Return a validated copy with the non-None overrides applied."""

        payload = self.model_dump()
        payload.update({key: value for key, value in overrides.items() if value is not None})
        return self._validate(payload)

    def save(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        """Write the settings to a YAML file readable by :meth:`load`."""

        Path(path).write_text(
            yaml.safe_dump(self.model_dump(mode="json"), default_flow_style=False, indent=2),
            encoding="utf-8",
        )

    @classmethod
    def _validate(cls, payload: dict) -> "AppSettings":
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise InvalidArgument(f"Invalid settings: {exc}") from exc


__all__ = ["AppSettings", "DescriptorSettings", "SearchSettings", "DEFAULT_CONFIG_PATH"]
