from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fastmvc.logging_config import get_logger

logger = get_logger(__name__)

BASE_DIR = Path(__file__).resolve().parent  # fastmvc/

DEFAULT_VIEW_FOLDER = "/WEB-INF/views/"
DEFAULT_ENTRY_POINT_GROUP = "fastmvc.view_engines"


class Settings(BaseSettings):
    """Application settings with validation.

    Every field has a working default; values can be overridden through
    FASTMVC_* environment variables or a .env file.

    Uses Pydantic v2 API:
    - model_config with SettingsConfigDict
    - @field_validator decorator
    """

    # Server settings
    api_host: str = Field(default="127.0.0.1", min_length=1, description="Server host")
    api_port: int = Field(ge=1, le=65535, default=8000, description="Server port")

    # View resolution
    web_root: Path = Field(default=BASE_DIR / "webapp", description="Directory that absolute view paths are rooted at")
    view_folder: str = Field(default=DEFAULT_VIEW_FOLDER, description="Base folder for relative view names")
    default_view_extension: str | None = Field(
        default=None, description="Extension appended to view names that have none (e.g. '.html')"
    )

    # View engines
    template_extensions: list[str] = Field(
        default_factory=lambda: [".html", ".jinja", ".j2"],
        description="View extensions handled by the Jinja2 engine",
    )
    engine_priorities: dict[str, int] = Field(
        default_factory=dict, description="Priority overrides keyed by engine name"
    )
    engine_entry_point_group: str = Field(
        default=DEFAULT_ENTRY_POINT_GROUP, description="Entry point group scanned for view engines"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: Path | None = Field(default=None, description="Directory for JSON logs (console only when unset)")

    model_config = SettingsConfigDict(
        env_prefix="FASTMVC_",
        env_file=Path(BASE_DIR.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,  # Validate defaults too
    )

    @field_validator("view_folder", mode="after")
    @classmethod
    def validate_view_folder(cls, v: str) -> str:
        """Ensure the view folder is absolute and ends with a separator."""
        v = v.strip()
        if not v.startswith("/"):
            raise ValueError("view_folder must start with '/'")
        if not v.endswith("/"):
            v = v + "/"
        return v

    @field_validator("default_view_extension", mode="after")
    @classmethod
    def validate_default_view_extension(cls, v: str | None) -> str | None:
        """Ensure the default extension starts with a dot."""
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith("."):
            raise ValueError("default_view_extension must start with '.'")
        return v

    @field_validator("template_extensions", mode="after")
    @classmethod
    def validate_template_extensions(cls, v: list[str]) -> list[str]:
        """Normalise template extensions to lower-case dotted suffixes."""
        normalised = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext.startswith("."):
                raise ValueError(f"template extension {ext!r} must start with '.'")
            normalised.append(ext)
        return normalised

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard logging level."""
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Returns:
        Cached Settings instance
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
