"""
Configuration module using Pydantic Settings for environment variable management.

Service settings come from the environment (or a `.env` file). The lip tracking
options have defaults that can be overridden through the environment and, per
request, through the API.
"""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LipTrackOptions(BaseModel):
    """Options recognized by the lip tracker."""

    min_speaker_span: int = Field(
        default=1000,
        ge=0,
        description="Minimum duration of a scene window in milliseconds",
    )
    iou_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="IoU cut used for face matching and speaker change detection",
    )
    variance_history: int = Field(
        default=10,
        ge=1,
        description="Maximum number of lip statistics kept per face",
    )
    mean_history: int = Field(
        default=3,
        ge=1,
        description="Number of recent lip statistics averaged into the short-term mean",
    )
    lip_mean_threshold_big_mouth: float = Field(default=0.3, ge=0.0)
    lip_variance_threshold_big_mouth: float = Field(default=0.005, ge=0.0)
    lip_mean_threshold_small_mouth: float = Field(default=0.1, ge=0.0)
    lip_variance_threshold_small_mouth: float = Field(default=0.001, ge=0.0)
    min_shot_span: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum seconds between two speaker change signals",
    )
    output_shot_boundary: bool = Field(
        default=True, description="Whether to emit the speaker change signal"
    )
    output_shot_boundary_only_on_change: bool = Field(
        default=False, description="Emit the speaker change signal only when it is true"
    )
    output_contour_frames: bool = Field(
        default=False,
        description="Render lip contour overlays for frames that carry an image",
    )


class Settings(BaseSettings):
    """
    Application settings.

    Tracker defaults share their names with LipTrackOptions, so
    e.g. MIN_SPEAKER_SPAN=2000 changes the default scene window.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "speakertrack"
    debug: bool = False
    log_level: str = "INFO"

    # Security - API authentication
    speakertrack_api_key: Optional[str] = None
    api_key_header: str = "X-Speakertrack-API-Key"

    # Performance tuning
    max_workers: int = 4  # Max concurrent tracking requests

    # Lip tracker defaults
    min_speaker_span: int = 1000
    iou_threshold: float = 0.3
    variance_history: int = 10
    mean_history: int = 3
    lip_mean_threshold_big_mouth: float = 0.3
    lip_variance_threshold_big_mouth: float = 0.005
    lip_mean_threshold_small_mouth: float = 0.1
    lip_variance_threshold_small_mouth: float = 0.001
    min_shot_span: float = 1.0
    output_shot_boundary: bool = True
    output_shot_boundary_only_on_change: bool = False

    @property
    def max_concurrent_jobs(self) -> int:
        return self.max_workers

    def get_lip_track_options(self, **overrides) -> LipTrackOptions:
        """Build tracker options from settings, applying per-call overrides."""
        values = {
            name: getattr(self, name)
            for name in LipTrackOptions.model_fields
            if hasattr(self, name)
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return LipTrackOptions(**values)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
