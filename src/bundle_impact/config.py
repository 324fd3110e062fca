"""Configuration management for bundle-impact."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from bundle_impact.exceptions import ConfigError

CONFIG_FILE = ".bundle-impact.json"
SECTION_TITLE = "Bundle impact"


class ReportConfig(BaseModel):
    """What gets weighed and how."""

    base: str = "main"
    include: list[str] = Field(default_factory=lambda: ["src/**"])
    exclude: list[str] = Field(
        default_factory=lambda: [
            "*.test.*",
            "*.spec.*",
            "*.d.ts",
            "**/__tests__/**",
            "**/tests/**",
            "*.md",
        ]
    )
    compression: Literal["gzip", "none"] = "gzip"
    show_unchanged: bool = False
    git_timeout: int = 30


class SectionConfig(BaseModel):
    """Where the report goes in the PR description."""

    title: str = SECTION_TITLE


class GitHubConfig(BaseModel):
    """GitHub access configuration."""

    token_env: str = "GITHUB_TOKEN"
    timeout: int = 15

    @property
    def token(self) -> str | None:
        return os.environ.get(self.token_env) or os.environ.get("GH_TOKEN")


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    root_path: str = "."
    report: ReportConfig = Field(default_factory=ReportConfig)
    section: SectionConfig = Field(default_factory=SectionConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a config file or a git checkout."""
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / CONFIG_FILE).is_file() or (current / ".git").exists():
            return current
        if current == current.parent:
            return None
        current = current.parent


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from <root>/.bundle-impact.json."""
    config_path = root / CONFIG_FILE
    if not config_path.exists():
        return ProjectConfig(name=root.name, root_path=str(root))
    try:
        data = json.loads(config_path.read_text())
        return ProjectConfig(**data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to <root>/.bundle-impact.json."""
    root.mkdir(parents=True, exist_ok=True)
    config_path = root / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2) + "\n")


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'report.base')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    try:
        return ProjectConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
