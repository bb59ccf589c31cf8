"""Configuration management using pydantic-settings."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ncxbacklight.backends.backlight import PROPERTY_NAMES


def default_state_dir(app_name: str = "ncxbacklight") -> Path:
    """Return $XDG_STATE_HOME/<app>, falling back to ~/.local/state/<app>."""
    base = os.environ.get("XDG_STATE_HOME")
    root = Path(base) if base else Path.home() / ".local" / "state"
    return root / app_name


class DisplaySettings(BaseModel):
    """X server connection settings."""

    name: Optional[str] = Field(default=None, description="X display, e.g. ':0'")
    property_names: list[str] = Field(default_factory=lambda: list(PROPERTY_NAMES), min_length=1)


class InterfaceSettings(BaseModel):
    """Terminal interface settings."""

    ascii_glyphs: bool = False


class AppSettings(BaseModel):
    """Application behavior settings."""

    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = None  # interactive mode only

    def resolved_log_file(self) -> Path:
        if self.log_file is not None:
            return self.log_file.expanduser()
        return default_state_dir() / "ncxbacklight.log"


class Settings(BaseSettings):
    """Root configuration combining all settings."""

    model_config = SettingsConfigDict(
        env_prefix="NCXB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    display: DisplaySettings = Field(default_factory=DisplaySettings)
    interface: InterfaceSettings = Field(default_factory=InterfaceSettings)
    app: AppSettings = Field(default_factory=AppSettings)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from env vars and optional YAML file.

        Priority: Environment variables override YAML file values.
        """
        yaml_data: dict = {}

        if config_path and config_path.exists():
            with open(config_path) as f:
                yaml_data = yaml.safe_load(f) or {}
        else:
            default_paths = [
                Path.home() / ".config" / "ncxbacklight" / "config.yaml",
                Path.home() / ".config" / "ncxbacklight" / "config.yml",
                Path("config.yaml"),
                Path("config.yml"),
            ]
            for path in default_paths:
                if path.exists():
                    with open(path) as f:
                        yaml_data = yaml.safe_load(f) or {}
                    break

        # Init kwargs win over env vars in pydantic-settings, so fold the
        # fields the environment did set back over the YAML values.
        env_settings = cls()
        merged = {}
        for key in ("display", "interface", "app"):
            data = dict(yaml_data.get(key) or {})
            section = getattr(env_settings, key)
            data.update(section.model_dump(include=section.model_fields_set))
            merged[key] = data

        return cls(**merged)
