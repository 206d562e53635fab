"""
Process-wide configuration for the fill service.

Settings are read once from the environment (prefix ``EXCEL_FILL_``) and an
optional ``.env`` file. The core never reads them directly: the transport
layers call ``Settings.to_fill_config()`` and pass the resulting FillConfig
into the service.

Example:
    EXCEL_FILL_DEFAULT_START_ROW=20 uvicorn excel_fill.main:app
"""

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COLUMNS: Mapping[str, str] = MappingProxyType(
    {"pos": "A", "title": "B", "desc": "C", "qty": "D", "dim": "E"}
)
DEFAULT_START_ROW = 15
DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024
DEFAULT_OUTPUT_FILENAME = "filled.xlsx"


@dataclass(frozen=True)
class FillConfig:
    """
    Read-only configuration injected into the fill pipeline.

    Attributes:
        default_columns: Field-to-column mapping used when a payload has no
            ``columns`` object.
        default_start_row: First row of the position block when the payload
            has no usable ``positionStartRow``.
        max_upload_bytes: Largest accepted template or payload upload.
        output_filename: Suggested filename of the filled document.
    """

    default_columns: Mapping[str, str] = field(default_factory=lambda: DEFAULT_COLUMNS)
    default_start_row: int = DEFAULT_START_ROW
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    output_filename: str = DEFAULT_OUTPUT_FILENAME

    def __post_init__(self) -> None:
        if self.default_start_row < 1:
            raise ValueError("default_start_row must be >= 1")
        if self.max_upload_bytes < 1:
            raise ValueError("max_upload_bytes must be >= 1")
        object.__setattr__(
            self, "default_columns", MappingProxyType(dict(self.default_columns))
        )


class Settings(BaseSettings):
    # Environment variables override values from the optional .env file.
    model_config = SettingsConfigDict(
        env_prefix="EXCEL_FILL_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    default_start_row: int = Field(default=DEFAULT_START_ROW, ge=1)
    default_columns: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COLUMNS))
    max_upload_bytes: int = Field(default=DEFAULT_MAX_UPLOAD_BYTES, ge=1)
    output_filename: str = DEFAULT_OUTPUT_FILENAME

    host: str = "0.0.0.0"
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("EXCEL_FILL_PORT", "PORT"),
    )

    log_level: str = "INFO"
    # When set, logs are also written to a rotating file in this directory.
    log_dir: str | None = None

    @field_validator("default_columns")
    @classmethod
    def validate_columns(cls, v: dict[str, str]) -> dict[str, str]:
        """Ensure every mapped column is made of letters only."""
        for name, column in v.items():
            if not column.isalpha():
                raise ValueError(f"column for '{name}' must be letters, got {column!r}")
        return {name: column.upper() for name, column in v.items()}

    def to_fill_config(self) -> FillConfig:
        """Build the immutable FillConfig handed to the fill pipeline."""
        return FillConfig(
            default_columns=self.default_columns,
            default_start_row=self.default_start_row,
            max_upload_bytes=self.max_upload_bytes,
            output_filename=self.output_filename,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the cached process settings."""
    return Settings()
