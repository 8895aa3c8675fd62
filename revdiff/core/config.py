"""Configuration management for Revdiff.

Global preferences live in ``~/.revdiff.json``; a project may override the
revision store and default space in ``.revdiff/config.json``.
"""

import json
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from revdiff.core.hunks import DEFAULT_CONTEXT_LINES, HunkHeaderStyle
from revdiff.utils.colorizer import DiffColors
from revdiff.utils.log import get_logger


logger = get_logger()

ColorMode = Literal["auto", "always", "never"]


class GlobalConfig(BaseModel):
    """Global configuration stored in ~/.revdiff.json"""

    # Output
    unified: bool = False
    color: ColorMode = "auto"
    context_lines: int = DEFAULT_CONTEXT_LINES
    hunk_header_style: HunkHeaderStyle = "canonical"
    colors: DiffColors = Field(default_factory=DiffColors)

    # Revision lookup
    default_space: Optional[str] = None
    store_path: Optional[str] = None

    @field_validator("context_lines")
    @classmethod
    def check_context_lines(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("context_lines must be >= 0")
        return value


class ProjectConfig(BaseModel):
    """Project-specific configuration stored in .revdiff/config.json"""

    default_space: Optional[str] = None
    store_path: Optional[str] = None
    context_lines: Optional[int] = None

    @field_validator("context_lines")
    @classmethod
    def check_context_lines(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("context_lines must be >= 0")
        return value


class ConfigManager:
    """Manages global and project-specific configuration."""

    def __init__(self) -> None:
        self.global_config_path = Path.home() / ".revdiff.json"
        self.current_project_path: Optional[Path] = None
        self._global_config: Optional[GlobalConfig] = None
        self._project_config: Optional[ProjectConfig] = None

    def get_global_config(self) -> GlobalConfig:
        """Load and return global configuration."""
        if self._global_config is None:
            if self.global_config_path.exists():
                try:
                    data = json.loads(self.global_config_path.read_text(encoding="utf-8"))
                    self._global_config = GlobalConfig(**data)
                    logger.debug(
                        "[config] Loaded global configuration",
                        extra={"path": str(self.global_config_path)},
                    )
                except (
                    json.JSONDecodeError,
                    OSError,
                    UnicodeDecodeError,
                    ValueError,
                    TypeError,
                ) as e:
                    logger.warning(
                        "Error loading global config: %s: %s",
                        type(e).__name__,
                        e,
                        extra={"path": str(self.global_config_path)},
                    )
                    self._global_config = GlobalConfig()
            else:
                self._global_config = GlobalConfig()
                logger.debug(
                    "[config] Global config not found; using defaults",
                    extra={"path": str(self.global_config_path)},
                )
        return self._global_config

    def save_global_config(self, config: GlobalConfig) -> None:
        """Save global configuration."""
        self._global_config = config
        self.global_config_path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        logger.debug(
            "[config] Saved global configuration",
            extra={"path": str(self.global_config_path)},
        )

    def get_project_config(self, project_path: Optional[Path] = None) -> ProjectConfig:
        """Load and return project configuration."""
        if project_path is not None:
            # Reset cached project config when switching projects
            if self.current_project_path != project_path:
                self._project_config = None
            self.current_project_path = project_path

        if self.current_project_path is None:
            return ProjectConfig()

        config_path = self.current_project_path / ".revdiff" / "config.json"

        if self._project_config is None:
            if config_path.exists():
                try:
                    data = json.loads(config_path.read_text(encoding="utf-8"))
                    self._project_config = ProjectConfig(**data)
                    logger.debug(
                        "[config] Loaded project config",
                        extra={"path": str(config_path)},
                    )
                except (
                    json.JSONDecodeError,
                    OSError,
                    UnicodeDecodeError,
                    ValueError,
                    TypeError,
                ) as e:
                    logger.warning(
                        "Error loading project config: %s: %s",
                        type(e).__name__,
                        e,
                        extra={"path": str(config_path)},
                    )
                    self._project_config = ProjectConfig()
            else:
                self._project_config = ProjectConfig()

        return self._project_config

    def save_project_config(
        self, config: ProjectConfig, project_path: Optional[Path] = None
    ) -> None:
        """Save project configuration."""
        if project_path is not None:
            self.current_project_path = project_path

        if self.current_project_path is None:
            return

        config_dir = self.current_project_path / ".revdiff"
        config_dir.mkdir(exist_ok=True)

        config_path = config_dir / "config.json"
        self._project_config = config
        config_path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("[config] Saved project config", extra={"path": str(config_path)})

    def get_effective_config(self, project_path: Optional[Path] = None) -> GlobalConfig:
        """Global configuration with project overrides applied."""
        global_config = self.get_global_config()
        project_config = self.get_project_config(project_path)
        overrides = project_config.model_dump(exclude_none=True)
        if not overrides:
            return global_config
        return global_config.model_copy(update=overrides)


# Global instance
config_manager = ConfigManager()


def get_global_config() -> GlobalConfig:
    """Get global configuration."""
    return config_manager.get_global_config()


def save_global_config(config: GlobalConfig) -> None:
    """Save global configuration."""
    config_manager.save_global_config(config)


def get_project_config(project_path: Optional[Path] = None) -> ProjectConfig:
    """Get project configuration."""
    return config_manager.get_project_config(project_path)


def get_effective_config(project_path: Optional[Path] = None) -> GlobalConfig:
    """Get global configuration merged with the project's overrides."""
    return config_manager.get_effective_config(project_path)
