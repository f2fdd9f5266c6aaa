"""Configuration models for TransitionKit."""

from __future__ import annotations

from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ConfigBase(BaseModel):
    """Base class for all TransitionKit configurations.

    Provides common functionality for loading from files with defaults.
    Subclasses must implement default_path() to specify their default location.
    """

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    @classmethod
    def default_path(cls) -> Path:
        """Return the default config file path for this config type.

        Subclasses must override this to provide their default location.

        Returns:
            Path to the default config file
        """
        raise NotImplementedError(f"{cls.__name__} must implement default_path()")

    @classmethod
    def load_or_default(cls, path: Path | str | None = None) -> Self:
        """Load config from path, or defaults when the file does not exist.

        Args:
            path: Path to config file, or None to use default

        Returns:
            Loaded config instance

        Raises:
            ValidationError: If config is invalid
        """
        from transitionkit.core.config.loader import load_config

        if path is None:
            path = cls.default_path()
        if not Path(path).exists():
            return cls()
        raw = load_config(path)
        return cls.model_validate(raw)


class KeyframeLabels(BaseModel):
    """Keyframe label values used as fade-kind tags on driver keys.

    Attributes:
        exit: Label written on fade-out keys (blue).
        enter: Label written on fade-in keys (purple).
        legacy_exit: Label older versions wrote on fade-out keys (green).
            Read as exit, never written.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    exit: int = Field(default=8, ge=0, le=16)
    enter: int = Field(default=10, ge=0, le=16)
    legacy_exit: int = Field(default=9, ge=0, le=16)

    @model_validator(mode="after")
    def _validate_distinct(self) -> KeyframeLabels:
        """Enter label must not collide with either exit label."""
        if self.enter in (self.exit, self.legacy_exit):
            raise ValueError("enter label must differ from exit labels")
        return self


class EngineConfig(BaseModel):
    """Tunables for the transition engine.

    Immutable after creation; the defaults reproduce the panel's behavior.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    controller_name: str = Field(
        default="Slide and fade - Controller",
        min_length=1,
        description="Reserved display name of the per-composition controller layer",
    )

    slide_duration_s: float = Field(
        default=0.5, gt=0.0, description="Length of the controller slide in seconds"
    )

    reference_width: float = Field(
        default=786.0,
        gt=0.0,
        description="Composition width at which slide distances are used unscaled",
    )

    movement_tolerance: float = Field(
        default=0.0001,
        gt=0.0,
        description="Per-axis displacement between frames that counts as movement",
    )

    gap_threshold_s: float = Field(
        default=0.1,
        gt=0.0,
        description="Pause in movement that separates two transitions",
    )

    playhead_tolerance_s: float = Field(
        default=0.001,
        ge=0.0,
        description="Slack around transition bounds when locating the playhead",
    )

    labels: KeyframeLabels = Field(default_factory=KeyframeLabels)

    diagnostics_level: str = Field(
        default="DEBUG",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
        description="Lowest level captured into the per-call diagnostic log",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON lines instead of text")
    filename: str | None = Field(default=None, description="Log file path (stdout if unset)")


class AppConfig(ConfigBase):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")

    engine: EngineConfig = Field(default_factory=EngineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("transitionkit.yaml")
