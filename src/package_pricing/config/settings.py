"""Runtime configuration for the pricing engine.

Relies on pydantic-settings so that environment variables (prefixed with ``PRICING_``)
can override defaults. See `.env.example` for common values.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Captures runtime configuration for quoting and price sync."""

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"), description="Directory for pricing.log")

    catalog_path: Path = Field(
        default=Path("data/packages/catalog.json"),
        description="JSON export of Super Offer Packages used when no catalog URL is set",
    )
    catalog_url: Optional[str] = Field(
        default=None,
        description="Base URL of the internal packages endpoint; takes precedence over catalog_path",
    )
    catalog_timeout_s: float = Field(default=10.0, description="HTTP timeout for catalog requests")
    lookup_timeout_s: Optional[float] = Field(
        default=30.0,
        description="Upper bound on one package lookup during price sync; unset to wait indefinitely",
    )
    debounce_ms: int = Field(
        default=300, description="Quiet period after a parameter edit before the price is recalculated"
    )

    model_config = SettingsConfigDict(
        env_prefix="PRICING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @field_validator("log_dir", "catalog_path", mode="before")
    def _expand_path(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    @field_validator("catalog_url", mode="before")
    def _blank_url(cls, value: str | None) -> Optional[str]:
        if value in (None, ""):
            return None
        return str(value).strip()

    @field_validator("lookup_timeout_s", mode="before")
    def _parse_lookup_timeout(cls, value: object) -> Optional[float]:
        if value in (None, "", "none", "None"):
            return None
        timeout = float(value)  # type: ignore[arg-type]
        if timeout <= 0:
            raise ValueError("lookup_timeout_s must be positive")
        return timeout

    @field_validator("debounce_ms")
    def _validate_debounce(cls, value: int) -> int:
        if value < 0:
            raise ValueError("debounce_ms must not be negative")
        return value

    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
