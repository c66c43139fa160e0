"""Application configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="iheadshot-backend", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins",
    )

    # Public URLs
    app_url: str = Field(
        default="http://localhost:8080",
        description="Public base URL of this API, used for provider callback URLs",
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Frontend application URL for checkout redirects and email links",
    )

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")
    storage_bucket: str = Field(default="headshots", description="Supabase Storage bucket for photos")

    # Stripe
    stripe_secret_key: str = Field(default="", description="Stripe secret API key")
    stripe_webhook_secret: str = Field(default="", description="Stripe webhook signing secret")
    stripe_publishable_key: str = Field(default="", description="Stripe publishable key (for frontend)")
    currency: str = Field(default="usd", description="Checkout currency")

    # Email (Resend)
    resend_api_key: str = Field(default="", description="Resend API key for sending emails")
    email_from_address: str = Field(
        default="iHeadshot <onboarding@resend.dev>",
        description="From address for transactional emails",
    )

    # Astria (face training + prompt generation)
    astria_api_key: str = Field(default="", description="Astria API key")
    astria_api_url: str = Field(default="https://api.astria.ai", description="Astria API base URL")
    astria_base_tune_id: str = Field(default="", description="Base model tune id; empty uses the Astria default")
    astria_images_per_prompt: int = Field(default=4, description="Images Astria renders per prompt")

    # Replicate (identity-preserving instant generation)
    replicate_api_token: str = Field(default="", description="Replicate API token")
    replicate_api_url: str = Field(default="https://api.replicate.com/v1", description="Replicate API base URL")
    replicate_standard_model: str = Field(
        default="black-forest-labs/flux-kontext-pro",
        description="Model used for standard quality headshots",
    )
    replicate_premium_model: str = Field(
        default="black-forest-labs/flux-kontext-max",
        description="Model used for premium quality headshots",
    )

    # OpenAI (fallback image provider)
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_image_model: str = Field(default="gpt-image-1", description="OpenAI image edit model")

    # Google Gemini (identity lock and gender detection)
    google_ai_api_key: str = Field(default="", description="Google AI Studio API key")
    gemini_image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Image model for character sheets and identity-locked headshots",
    )
    gemini_text_model: str = Field(default="gemini-2.0-flash", description="Model used to classify gender")

    # Topaz (upscaling)
    topaz_api_key: str = Field(default="", description="Topaz Labs API key")
    topaz_api_url: str = Field(default="https://api.topazlabs.com/v1", description="Topaz API base URL")

    # Uploads
    min_training_uploads: int = Field(default=10, description="Minimum photos required to start training")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, description="Maximum size of a proxied upload")
    allowed_upload_types: str = Field(
        default="image/jpeg,image/png,image/webp",
        description="Comma-separated list of accepted upload content types",
    )
    max_request_body_size: int = Field(
        default=12 * 1024 * 1024,
        description="Maximum request body size in bytes",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def allowed_upload_types_list(self) -> list[str]:
        """Parse accepted upload content types into a list."""
        return [t.strip() for t in self.allowed_upload_types.split(",") if t.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_stripe_test_mode(self) -> bool:
        """Check if using Stripe test keys."""
        return self.stripe_secret_key.startswith("sk_test_")

    @property
    def astria_callback_url(self) -> str:
        """Webhook URL registered with Astria for tune and prompt callbacks."""
        return f"{self.app_url.rstrip('/')}/api/v1/webhooks/astria"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
