"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use EMBTEXT_ prefix (e.g., EMBTEXT_DEFAULT_ENCODING=latin-1).

Settings can also be loaded from a .env file in the working directory.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Examples:
        EMBTEXT_DEFAULT_ENCODING=cp1252
        EMBTEXT_LOG_SOURCE=true
        EMBTEXT_STRICT_BLOCKS=false
    """

    model_config = SettingsConfigDict(
        env_prefix="EMBTEXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Loading
    default_encoding: str = Field(
        default="utf-8",
        description="Encoding used when reading template files without an explicit encoding",
    )

    # Compilation
    default_filename: str = Field(
        default="(embtext)",
        description="Template name reported in errors for templates built from strings",
    )

    strict_blocks: bool = Field(
        default=True,
        description="Raise when a block statement is never closed; when false, close it at end of input",
    )

    log_source: bool = Field(
        default=False,
        description="Log generated Python source at debug verbosity on every compile",
    )

    @field_validator("default_encoding")
    @classmethod
    def encoding_check(cls, value: str) -> str:
        """Reject encoding names the codecs registry does not know"""
        import codecs

        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {value}") from e
        return value


# Singleton instance - import this in your code
appsettings = AppSettings()
