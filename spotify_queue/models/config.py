"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from .track import DEFAULT_PACING_INTERVAL


class QueueConfig(BaseModel):
    """A validated configuration model for the application."""

    # API credentials
    youtube_api_key: str = ""
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # Queue behaviour
    playlist_length_limit: int = 100
    pacing_interval: float = DEFAULT_PACING_INTERVAL
    allowed_groups: list[str] = Field(default_factory=list)
    m3u_path: str = ""

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("playlist_length_limit")
    @classmethod
    def validate_length_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Playlist length limit must be at least 1.")
        return v

    @field_validator("pacing_interval")
    @classmethod
    def validate_pacing_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Pacing interval must be a positive number of seconds.")
        return v

    @field_validator("allowed_groups")
    @classmethod
    def strip_groups(cls, v: list[str]) -> list[str]:
        """Drops blank group entries left over from trailing commas."""
        return [g.strip() for g in v if g and g.strip()]

    @model_validator(mode="after")
    def validate_credentials(self) -> "QueueConfig":
        """Validates that both API providers are configured."""
        if not self.spotify_client_id or not self.spotify_client_secret:
            raise ValueError(
                "Spotify credentials are incomplete. "
                "'spotify_client_id' and 'spotify_client_secret' are required."
            )
        if not self.youtube_api_key:
            raise ValueError("'youtube_api_key' is required.")
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
