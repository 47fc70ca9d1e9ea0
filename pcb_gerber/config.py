# pcb_gerber/config.py

from __future__ import annotations

from pathlib import Path
from typing import List, Union
import json

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError

PathLike = Union[str, Path]


class AnalysisSettings(BaseModel):
    """
    Tunables for one analysis run.

    Defaults match what the quote form expects; a JSON file can override
    any subset of fields.
    """
    max_workers: int = Field(default=8, ge=1, le=64)
    text_encoding: str = "utf-8"
    archive_suffixes: List[str] = Field(default_factory=lambda: [".zip"])
    unsupported_archive_suffixes: List[str] = Field(default_factory=lambda: [".rar", ".7z"])
    max_token_errors: int = Field(default=50, ge=1)
    layer_count_floor: int = Field(default=2, ge=1)

    @field_validator("archive_suffixes", "unsupported_archive_suffixes")
    @classmethod
    def _normalize_suffixes(cls, v: List[str]) -> List[str]:
        out: List[str] = []
        for s in v:
            s = s.strip().lower()
            if not s:
                continue
            if not s.startswith("."):
                s = "." + s
            out.append(s)
        return out

    def is_archive_name(self, filename: str) -> bool:
        return filename.lower().endswith(tuple(self.archive_suffixes))

    def is_unsupported_archive_name(self, filename: str) -> bool:
        return filename.lower().endswith(tuple(self.unsupported_archive_suffixes))


def load_settings(path: PathLike) -> AnalysisSettings:
    """
    Load settings from a JSON file.

    A missing file yields the defaults. Malformed JSON or values that fail
    validation raise ConfigError.
    """
    path = Path(path)
    if not path.exists():
        return AnalysisSettings()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")

    try:
        return AnalysisSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e
