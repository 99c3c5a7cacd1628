"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from linkgate.domain.errors import LinkGateError


class SettingsLoadError(LinkGateError, RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for the share gateway runtime.

    Environment variable names map directly to field names in uppercase.
    Example: `registry_fullnode_url` reads from `REGISTRY_FULLNODE_URL`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Minimum loguru level for the stderr sink.
        base_url: Public base URL used for canonical share URLs.
        host_domain: Domain serving universal/app links and the web fallback.
        product_name: Host app product name used in titles and copy.
        product_scheme: Custom URI scheme registered by the host app.
        app_store_url: iOS store page for the host app.
        play_store_url: Android store page for the host app.
        registry_fullnode_url: Fullnode REST base URL backing the app registry.
        registry_contract_address: Account address publishing the registry module.
        registry_module_name: Registry Move module name.
        registry_request_timeout_seconds: HTTP timeout for registry calls.
        deeplink_visibility_timeout_ms: Race timer before falling back.
        default_robots_directive: Site-wide `X-Robots-Tag` directive.
        share_robots_directive: Directive for the share route family.
        extra_crawler_user_agents: Additional crawler user-agent substrings.
        twitter_handle: Handle emitted as `twitter:site`.
        ios_team_id: Apple team id for the app-site-association file.
        ios_bundle_id: iOS bundle id for the app-site-association file.
        android_package_name: Android package for the asset links file.
        android_sha256_fingerprints: Signing certificate fingerprints for asset links.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    base_url: str = Field(default="https://mini-app-sharing.vercel.app")
    host_domain: str = Field(default="mini-app-sharing.vercel.app")
    product_name: str = Field(default="Move Everything", min_length=1)
    product_scheme: str = Field(default="moveeverything", min_length=1)
    app_store_url: str = Field(default="https://apps.apple.com/app/move-everything")
    play_store_url: str = Field(default="https://play.google.com/store/apps/details?id=com.moveeverything.app")
    registry_fullnode_url: str = Field(default="https://testnet.movementnetwork.xyz/v1")
    registry_contract_address: str = Field(
        default="0xba8a509e05730d3025d6d63e4974cf3296f7af78b6bb9c1e26d9e7d0fc1d8d63"
    )
    registry_module_name: str = Field(default="app_registry", min_length=1)
    registry_request_timeout_seconds: float = Field(default=10.0, gt=0)
    deeplink_visibility_timeout_ms: int = Field(default=600, ge=50, le=10000)
    default_robots_directive: str = Field(default="noindex, nofollow")
    share_robots_directive: str = Field(default="index, follow")
    extra_crawler_user_agents: list[str] = Field(default_factory=list)
    twitter_handle: str = Field(default="@moveeverything")
    ios_team_id: str = Field(default="")
    ios_bundle_id: str = Field(default="com.moveeverything.app")
    android_package_name: str = Field(default="com.moveeverything.app")
    android_sha256_fingerprints: list[str] = Field(default_factory=list)

    @field_validator(
        "base_url",
        "host_domain",
        "registry_fullnode_url",
        "registry_contract_address",
        "app_store_url",
        "play_store_url",
    )
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("base_url", "registry_fullnode_url")
    @classmethod
    def _validate_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("value must be an http(s) URL")
        return value.rstrip("/")

    @field_validator("host_domain")
    @classmethod
    def _validate_bare_domain(cls, value: str) -> str:
        if "://" in value or "/" in value:
            raise ValueError("host_domain must be a bare domain without scheme or path")
        return value.lower()

    @field_validator("product_scheme")
    @classmethod
    def _validate_scheme(cls, value: str) -> str:
        normalized_scheme = value.strip().lower().removesuffix("://")
        if not normalized_scheme.isalnum():
            raise ValueError("product_scheme must be alphanumeric")
        return normalized_scheme

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_level = value.strip().upper()
        if normalized_level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_level


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
