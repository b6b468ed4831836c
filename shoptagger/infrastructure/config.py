"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from dataclasses import dataclass

from pydantic_settings import BaseSettings

from shoptagger.domain.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://shoptagger:shoptagger_dev_password@db:5432/shoptagger"

    # Authentication
    shoptagger_api_key: str = "dev-api-key-change-in-production"

    # Shopify
    shopify_shop_domain: str = ""
    shopify_access_token: str = ""
    shopify_api_version: str = "2024-10"
    shopify_request_timeout: float = 30.0
    shopify_max_retries: int = 3
    shopify_throttle_low_water_mark: int = 100
    shopify_default_retry_after: float = 2.0

    # Paging and caps
    search_page_size: int = 50
    collections_page_size: int = 250
    preview_limit: int = 1000
    delete_limit: int = 250

    # Deferred tagging
    tag_job_tries: int = 3
    tag_job_timeout: float = 300.0
    tag_worker_count: int = 4

    # Audit log: "database" or "memory"
    audit_store: str = "database"

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


@dataclass(frozen=True)
class ShopifyConfig:
    """Immutable connection settings for the Shopify Admin GraphQL API."""

    shop_domain: str
    access_token: str
    api_version: str = "2024-10"
    timeout: float = 30.0
    max_retries: int = 3
    throttle_low_water_mark: int = 100
    default_retry_after: float = 2.0
    search_page_size: int = 50
    collections_page_size: int = 250

    def __post_init__(self) -> None:
        missing = []
        if not self.shop_domain:
            missing.append("SHOPIFY_SHOP_DOMAIN")
        if not self.access_token:
            missing.append("SHOPIFY_ACCESS_TOKEN")
        if missing:
            raise ConfigurationError(
                f"Shopify credentials not configured: {', '.join(missing)}",
                details={"missing": missing},
            )
        if self.max_retries < 1:
            raise ConfigurationError(
                "Retry budget must allow at least one attempt",
                details={"max_retries": self.max_retries},
            )

    @property
    def endpoint(self) -> str:
        """GraphQL endpoint URL for the configured shop."""
        return f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "ShopifyConfig":
        """Freeze the Shopify subset of application settings.

        Args:
            source: Settings to read (uses global settings if not provided).

        Returns:
            ShopifyConfig instance.

        Raises:
            ConfigurationError: If the shop domain or access token is missing.
        """
        source = source or settings
        return cls(
            shop_domain=source.shopify_shop_domain,
            access_token=source.shopify_access_token,
            api_version=source.shopify_api_version,
            timeout=source.shopify_request_timeout,
            max_retries=source.shopify_max_retries,
            throttle_low_water_mark=source.shopify_throttle_low_water_mark,
            default_retry_after=source.shopify_default_retry_after,
            search_page_size=source.search_page_size,
            collections_page_size=source.collections_page_size,
        )
