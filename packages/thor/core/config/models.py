"""Configuration models for thor."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Write JSON log lines instead of text")


class ColourConfig(BaseModel):
    """Settings for colouring a reference set of sketches (``thor colour``)."""

    model_config = ConfigDict(extra="forbid")

    max_workers: int = Field(default=4, ge=1, description="Concurrent sketch encoding tasks")
    recursive: bool = Field(default=False, description="Search the sketch directory recursively")
    store_csv: bool = Field(
        default=False, description="Also write the colour sketches to a plain text CSV file"
    )
    csv_hex: bool = Field(
        default=True, description="Render CSV colours as #RRGGBBAA (False: rgba(r,g,b,a))"
    )


class HammerConfig(BaseModel):
    """Settings for rendering OTU tables into images (``thor hammer``)."""

    model_config = ConfigDict(extra="forbid")

    table_format: str = Field(default="qiime", pattern="^(qiime)$")
    top_n: int | None = Field(
        default=None,
        ge=1,
        description="OTUs kept per sample (default: sketch length, capped at the table's OTUs)",
    )
    pad: bool = Field(
        default=True,
        description="Fill unused image rows with the padding colour (False: trim the image)",
    )
    alpha_abundance: bool = Field(
        default=False,
        description="Replace the alpha channel with each OTU's relative abundance",
    )


class ThorConfig(BaseModel):
    """Top-level configuration, passed explicitly to each command."""

    model_config = ConfigDict(extra="ignore")

    output_dir: str = "."
    logging: LoggingConfig = LoggingConfig()
    colour: ColourConfig = ColourConfig()
    hammer: HammerConfig = HammerConfig()

    @classmethod
    def default_path(cls) -> Path:
        """Default path for the thor config file."""
        return Path("thor.yaml")
