"""
Pydantic Settings configuration for pop-courier.

Loads connection and account settings from POP3_* environment variables
(or a .env file) with validation.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pop_courier.exceptions import ConfigurationError

POP3_PORT = 110
POP3_TLS_PORT = 995


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server settings
    # Hostname chars only: [a-zA-Z0-9.-]
    host: str = Field(..., pattern=r"^[a-zA-Z0-9.-]+$")
    # None picks the well-known port for the chosen transport
    port: int | None = Field(None, ge=1, le=65535)
    use_tls: bool = Field(True)
    # Seconds; applied to the socket, the protocol engine has no timeouts of its own
    timeout: float = Field(30.0, gt=0, le=600)

    # Account settings
    user: str = Field(..., min_length=1)
    password: SecretStr = Field(...)

    # Protocol settings
    dot_unstuffing: bool = Field(True)
    # RFC 1939 caps replies at 512 octets but message lines can be far longer
    max_line_length: int = Field(8192, ge=512, le=1_048_576)

    # Logging settings
    log_format: str = Field("console", pattern=r"^(console|json)$")
    debug: bool = Field(False)

    model_config = SettingsConfigDict(
        env_prefix="POP3_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def effective_port(self) -> int:
        """Configured port, or 995/110 depending on use_tls."""
        if self.port is not None:
            return self.port
        return POP3_TLS_PORT if self.use_tls else POP3_PORT


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure only one Settings instance is created,
    avoiding repeated environment variable parsing.

    Raises:
        ConfigurationError: Required POP3_* variables are missing or invalid.
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid POP3 settings: {e}") from e
