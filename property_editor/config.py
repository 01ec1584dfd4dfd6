"""Configuration management for property-editor."""

import os
from dataclasses import dataclass, field

from property_editor.exceptions import ConfigurationError

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@dataclass
class ApiConfig:
    """Remote property API configuration."""

    base_url: str = "http://localhost:3000/api"
    token: str | None = None
    timeout_seconds: float = 10.0

    @property
    def headers(self) -> dict[str, str]:
        """Default request headers."""
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


@dataclass
class UploadConfig:
    """Upload limits and accepted asset types."""

    max_bytes: int = MAX_UPLOAD_BYTES
    image_types: tuple[str, ...] = ("image/jpeg", "image/png", "image/gif", "image/webp")
    document_extensions: tuple[str, ...] = (
        "pdf",
        "doc",
        "docx",
        "txt",
        "xls",
        "xlsx",
        "ppt",
        "pptx",
    )
    image_category: str = "properties"
    document_category: str = "properties"


@dataclass
class DraftConfig:
    """Draft retention configuration."""

    ttl_seconds: float = 30 * 60


@dataclass
class EditorConfig:
    """Main configuration for property-editor."""

    api: ApiConfig = field(default_factory=ApiConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    draft: DraftConfig = field(default_factory=DraftConfig)
    organization_limit: int = 100
    seed: int | None = None
    locale: str = "en_US"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "EditorConfig":
        """Create config from environment variables."""
        api = ApiConfig(
            base_url=os.getenv("PROPERTY_API_URL", "http://localhost:3000/api").rstrip("/"),
            token=os.getenv("PROPERTY_API_TOKEN") or None,
            timeout_seconds=_env_number("PROPERTY_API_TIMEOUT", 10.0),
        )
        draft = DraftConfig(ttl_seconds=_env_number("DRAFT_TTL_SECONDS", 30 * 60))

        seed_raw = os.getenv("SEED")
        return cls(
            api=api,
            draft=draft,
            organization_limit=int(_env_number("ORGANIZATION_LIMIT", 100)),
            seed=int(_env_number("SEED", 0)) if seed_raw else None,
            locale=os.getenv("FAKER_LOCALE", "en_US"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
