from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Cardsurfer Deck Builder API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/cardsurfer"

    # Shopify Dev Dashboard app (client credentials grant)
    shopify_client_id: str = ""
    shopify_client_secret: str = ""
    shopify_store_domain: str = ""
    shopify_api_version: str = "2026-01"

    # Public storefront base URL for product links.
    # Empty: derived from the store domain ("shop.myshopify.com" -> "https://shop.com")
    storefront_url: str = ""

    frontend_url: str = "*"

    # Inventory sync schedule (0 disables the periodic loop)
    sync_interval_minutes: int = 15
    sync_on_startup: bool = True
    sync_page_delay_seconds: float = 0.5

    # Refresh the access token this long before it actually expires
    token_refresh_margin_seconds: int = 300


settings = Settings()


# =============================================================================
# UPSTREAM QUERY LIMITS
# =============================================================================

# Products per GraphQL page (Shopify maximum)
PRODUCTS_PAGE_SIZE = 250

# Variants fetched per product
VARIANTS_PER_PRODUCT = 100

# Default lifetime when the token response omits expires_in (~24h)
DEFAULT_TOKEN_LIFETIME_SECONDS = 86399
