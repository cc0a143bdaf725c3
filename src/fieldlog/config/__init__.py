"""
Pydantic configuration schemas for fieldlog.

Every field has a sensible default; an empty YAML document yields the
same setup as Logger(): INFO threshold, text formatter, stderr output.

Usage:
    config = LoggerConfig.from_yaml("logging.yaml")
    logger = Logger.from_config(config)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from fieldlog.formatters import Formatter, JsonFormatter, TextFormatter
from fieldlog.records import Level


# ═══════════════════════════════════════════════════════════════════
#  Enums
# ═══════════════════════════════════════════════════════════════════

class FormatterType(str, Enum):
    TEXT = "text"
    JSON = "json"


class OutputStream(str, Enum):
    STDERR = "stderr"
    STDOUT = "stdout"


# ═══════════════════════════════════════════════════════════════════
#  Sections
# ═══════════════════════════════════════════════════════════════════

class FormatterConfig(BaseModel):
    type: FormatterType = FormatterType.TEXT
    timestamp_format: Optional[str] = None    # strftime; None = RFC 3339
    disable_timestamp: bool = False
    field_map: Optional[dict[str, str]] = None
    colors: Optional[bool] = None             # text only; None = auto-detect
    sort_keys: Optional[bool] = None
    pretty_print: bool = False                # json only

    def build(self) -> Formatter:
        if self.type == FormatterType.JSON:
            return JsonFormatter(
                timestamp_format=self.timestamp_format,
                disable_timestamp=self.disable_timestamp,
                field_map=self.field_map,
                pretty_print=self.pretty_print,
                sort_keys=bool(self.sort_keys),
            )
        return TextFormatter(
            timestamp_format=self.timestamp_format,
            disable_timestamp=self.disable_timestamp,
            field_map=self.field_map,
            colors=self.colors,
            sort_keys=True if self.sort_keys is None else self.sort_keys,
        )


class RotationConfig(BaseModel):
    base_path: str = ""
    name_template: str
    time_format: str = "%Y-%m-%d"
    keep_previous: bool = False

    @field_validator("name_template")
    @classmethod
    def _has_time_token(cls, value: str) -> str:
        if "${time}" not in value:
            raise ValueError("name_template must contain the ${time} token")
        return value


# ═══════════════════════════════════════════════════════════════════
#  Top-Level Logger Config
# ═══════════════════════════════════════════════════════════════════

class LoggerConfig(BaseModel):
    level: str = "info"
    report_caller: bool = False
    no_lock: bool = False
    output: Optional[OutputStream] = None    # None = keep the current sink
    formatter: FormatterConfig = Field(default_factory=FormatterConfig)
    rotation: Optional[RotationConfig] = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: int | str | Level) -> str:
        """Accept any level text or value; store the canonical text."""
        return Level.from_value(value).text

    @property
    def level_value(self) -> Level:
        return Level.parse(self.level)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LoggerConfig":
        """Load and validate from a YAML file."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.from_yaml_string(raw)

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "LoggerConfig":
        """Load and validate from a YAML string."""
        data = yaml.safe_load(yaml_string) or {}
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: dict) -> "LoggerConfig":
        return cls.model_validate(data)

    def to_dict(self, exclude_none: bool = True) -> dict:
        return self.model_dump(mode="json", exclude_none=exclude_none)
