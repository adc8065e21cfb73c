"""
Runtime settings for the statement renderer, read from the environment.

A ``.env`` file next to this module is loaded first so local overrides
(``WEASYPRINT_BIN`` pointing at a virtualenv, a shorter timeout) do not have to
be exported by hand.
"""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

STATEMENT_DIR = Path(__file__).resolve().parent

load_dotenv(STATEMENT_DIR / ".env")


class RendererSettings(BaseModel):
    """Where inputs live and how the external renderer is invoked."""
    base_dir: Path = STATEMENT_DIR
    weasyprint_bin: str | None = None
    weasyprint_python: str | None = None
    render_timeout: float | None = Field(default=120.0, description="Seconds per renderer call; None waits forever")
    inline_styles: bool = False
    log_level: str = "INFO"

    @field_validator("weasyprint_bin", "weasyprint_python")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("render_timeout")
    @classmethod
    def zero_disables_timeout(cls, v: float | None) -> float | None:
        if v is None or v <= 0:
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    @property
    def data_path(self) -> Path:
        return self.base_dir / "data.json"

    @property
    def template_path(self) -> Path:
        return self.base_dir / "templates" / "statement.html"

    @property
    def styles_dir(self) -> Path:
        return self.base_dir / "styles"

    @property
    def assets_dir(self) -> Path:
        return self.base_dir / "assets"

    @property
    def output_dir(self) -> Path:
        return self.base_dir / "dist"


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in ("1", "true", "yes", "on")


def get_settings() -> RendererSettings:
    """Build settings from the current environment (re-read on every call)."""
    values: dict = {
        "weasyprint_bin": os.getenv("WEASYPRINT_BIN"),
        "weasyprint_python": os.getenv("WEASYPRINT_PYTHON"),
        "inline_styles": _env_flag("STATEMENT_INLINE_STYLES"),
        "log_level": os.getenv("STATEMENT_LOG_LEVEL", "INFO"),
    }
    base_dir = (os.getenv("STATEMENT_BASE_DIR") or "").strip()
    if base_dir:
        values["base_dir"] = Path(base_dir).resolve()
    timeout = (os.getenv("STATEMENT_RENDER_TIMEOUT") or "").strip()
    if timeout:
        values["render_timeout"] = float(timeout)
    return RendererSettings(**values)
