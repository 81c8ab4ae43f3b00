"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (CADENCE_ prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Invariant violations raise instead of being clamped (enable in tests)
    strict_invariants: bool = False

    # Timeline windowing
    window_turns: int = Field(default=20, gt=0)  # Turns covered by one generated window
    lookahead_threshold: int = Field(default=10, ge=1)  # Regenerate when this close to the end

    # Cadence
    attack_speed_floor: float = Field(default=0.1, gt=0)
    haste_cap: float = Field(default=500.0, ge=0)

    # Combat defaults when a stat snapshot or ability leaves them unset
    default_critical_damage: float = 200.0
    default_attack_range: int = 125
    default_spell_range: int = 500

    # Battlefield
    flee_bound: int = 500  # |position| beyond this means the actor fled
    primary_start_position: int = 50
    opponent_start_position: int = -50

    # Seed for the CLI's random source (None = nondeterministic)
    rng_seed: int | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
