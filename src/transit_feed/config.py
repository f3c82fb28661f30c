"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NYCT_FEED_BASE_URL = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds/nyct%2Fgtfs"


class DecoderConfig(BaseModel):
    """Options recognized by a single decode call."""

    model_config = ConfigDict(frozen=True)

    # Legacy group-encoded fields are skipped when true, and fail the
    # enclosing message when false.
    ignore_groups: bool = False
    max_message_bytes: Optional[int] = Field(default=None, ge=1)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "transit-feed"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Decoder
    feed_ignore_groups: bool = Field(
        default=False,
        validation_alias=AliasChoices("IGNORE_GROUPS", "FEED_IGNORE_GROUPS"),
    )
    feed_max_message_bytes: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("MAX_MESSAGE_BYTES", "FEED_MAX_MESSAGE_BYTES"),
    )

    # NYCT API
    nyct_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("MTA_API_KEY", "NYCT_API_KEY"),
    )

    # Subway feed URLs, one per line group
    feed_url_ace: str = f"{NYCT_FEED_BASE_URL}-ace"
    feed_url_bdfm: str = f"{NYCT_FEED_BASE_URL}-bdfm"
    feed_url_g: str = f"{NYCT_FEED_BASE_URL}-g"
    feed_url_jz: str = f"{NYCT_FEED_BASE_URL}-jz"
    feed_url_nqrw: str = f"{NYCT_FEED_BASE_URL}-nqrw"
    feed_url_l: str = f"{NYCT_FEED_BASE_URL}-l"
    feed_url_1234567: str = NYCT_FEED_BASE_URL
    feed_url_si: str = f"{NYCT_FEED_BASE_URL}-si"

    # Fetching
    fetch_timeout_sec: int = 30
    fetch_max_retries: int = Field(default=3, ge=1)
    fetch_backoff_base: float = 2.0

    def decoder_config(self) -> DecoderConfig:
        """Build the per-call decoder configuration from settings."""
        return DecoderConfig(
            ignore_groups=self.feed_ignore_groups,
            max_message_bytes=self.feed_max_message_bytes,
        )

    @property
    def feed_urls(self) -> dict[str, str]:
        """Feed URL per subway line group."""
        return {
            "ace": self.feed_url_ace,
            "bdfm": self.feed_url_bdfm,
            "g": self.feed_url_g,
            "jz": self.feed_url_jz,
            "nqrw": self.feed_url_nqrw,
            "l": self.feed_url_l,
            "1234567": self.feed_url_1234567,
            "si": self.feed_url_si,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
