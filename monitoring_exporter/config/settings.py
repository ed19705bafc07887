"""
Configuration module using pydantic-settings for type-safe environment variable management.
"""
from typing import Dict, List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Scrape authorization settings"""
    model_config = SettingsConfigDict(env_prefix="AUTH_")

    backend: str = Field(default="static", description="Secret store backend: 'static' or 'vault'")
    tag_tokens: Dict[str, str] = Field(
        default_factory=dict,
        description="Per-tag scrape tokens as a JSON object, used by the static backend",
    )
    allow_bearer_header: bool = Field(
        default=True,
        description="Accept 'Authorization: Bearer' when no token query parameter is given",
    )


class VaultSettings(BaseSettings):
    """HashiCorp Vault settings"""
    model_config = SettingsConfigDict(env_prefix="VAULT_")

    url: str = Field(default="http://localhost:8200", description="Vault address")
    token: str = Field(default="dev-root-token", description="Vault client token")
    mount_point: str = Field(default="secret", description="KV v2 mount point")
    path_prefix: str = Field(default="monitoring/tags", description="Secret path prefix, one secret per tag")
    token_field: str = Field(default="token", description="Key holding the scrape token inside the secret")
    cache_ttl_seconds: int = Field(default=300, ge=0, description="How long a fetched tag token, or its absence, is reused")
    cache_max_entries: int = Field(default=10000, ge=1, description="Cached tags kept before the oldest entries are evicted")
    max_retry_seconds: int = Field(default=5, ge=0, description="Total time budget for retrying a Vault read")


class CollectionSettings(BaseSettings):
    """Collection pass settings"""
    model_config = SettingsConfigDict(env_prefix="COLLECTION_")

    timeout_seconds: Optional[float] = Field(
        default=10.0,
        gt=0,
        description="Budget for one collection pass; unset to let producers run unbounded",
    )
    disabled_metrics: List[str] = Field(
        default_factory=list,
        description="Metric names removed from every scrape",
    )


class RateLimitSettings(BaseSettings):
    """Rate limiting settings"""
    model_config = SettingsConfigDict(env_prefix="RATE_LIMIT_")

    enabled: bool = Field(default=True)
    default_limits: List[str] = Field(default_factory=lambda: ["1000/hour", "100/minute"])


class LoggingSettings(BaseSettings):
    """Logging settings"""
    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="json", description="'json' or 'console'")


class Settings(BaseSettings):
    """Main application settings"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    environment: str = Field(default="development")
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)

    # Component settings
    auth: AuthSettings = Field(default_factory=AuthSettings)
    vault: VaultSettings = Field(default_factory=VaultSettings)
    collection: CollectionSettings = Field(default_factory=CollectionSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance
settings = Settings()
