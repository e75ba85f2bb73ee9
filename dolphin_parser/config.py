from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Dict, List, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from dolphin_parser.core.errors import ConfigurationError

DATA_DIR = Path("data")


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    """Environment-backed defaults for the parser client."""

    model_config = SettingsConfigDict(
        env_prefix="DOLPHIN_PARSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    endpoint: str = ""
    api_key: str = ""
    excluded_labels: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["foot", "header"])
    excluded_tags: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["author", "meta_pub_date"])
    callback_url: str | None = None

    timeout: float = 300
    retries: int = 3
    retry_delay: float = 2

    storage_disk: str = "local"
    storage_path: str = "dolphin-parser"
    storage_root: Path = DATA_DIR / "storage"
    storage_server_endpoint: str = Field(
        "",
        validation_alias=AliasChoices("DOLPHIN_STORAGE_ENDPOINT", "storage_server_endpoint"),
    )
    storage_server_api_key: str = Field(
        "",
        validation_alias=AliasChoices("DOLPHIN_STORAGE_API_KEY", "storage_server_api_key"),
    )

    minio_endpoint: str = "http://localhost:9000"
    minio_access_key: str | None = None
    minio_secret_key: str | None = None
    minio_bucket: str = "dolphin-parser"

    log_level: str = "INFO"
    logs_dir: Path = DATA_DIR / "logs"

    @field_validator("excluded_labels", "excluded_tags", mode="before")
    @classmethod
    def _parse_csv(cls, value: Any) -> Any:
        return _split_csv(value)


settings = Settings()


class ClientConfig(BaseModel):
    """Resolved, read-only configuration of one client instance."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    api_key: str
    timeout: float = 300
    retries: int = 3
    retry_delay: float = 2
    excluded_labels: List[str] = Field(default_factory=list)
    excluded_tags: List[str] = Field(default_factory=list)
    callback_url: Optional[str] = None
    storage_disk: str = "local"
    storage_path: str = "dolphin-parser"
    storage_root: Path = DATA_DIR / "storage"
    storage_server_endpoint: str = ""
    storage_server_api_key: str = ""

    @classmethod
    def resolve(
        cls,
        overrides: Mapping[str, Any] | None = None,
        source: Settings | None = None,
    ) -> "ClientConfig":
        """Merge call-site overrides over environment defaults and validate.

        An override wins when its key is present and not ``None``. Raises
        :class:`ConfigurationError` for an unknown override key, or when the
        endpoint or API key ends up empty.
        """
        source = source or settings
        overrides = overrides or {}
        unknown = sorted(set(overrides) - set(cls.model_fields))
        if unknown:
            raise ConfigurationError.unknown_options(unknown)
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            override = overrides.get(name)
            if override is not None:
                values[name] = override
            else:
                values[name] = getattr(source, name)
        for name in ("excluded_labels", "excluded_tags"):
            values[name] = _split_csv(values[name])

        if not values["endpoint"]:
            raise ConfigurationError.missing_endpoint()
        if not values["api_key"]:
            raise ConfigurationError.missing_api_key()
        values["endpoint"] = str(values["endpoint"]).rstrip("/")
        return cls(**values)

    def public_view(self) -> Dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "timeout": self.timeout,
            "retries": self.retries,
            "excluded_labels": list(self.excluded_labels),
            "excluded_tags": list(self.excluded_tags),
            "callback_url": self.callback_url,
        }
