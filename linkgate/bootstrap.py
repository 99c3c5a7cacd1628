"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from linkgate.adapters import FullnodeAppRegistryAdapter
from linkgate.api import create_api_application
from linkgate.config import AppSettings, config_configure_logging, config_load_settings


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    config_configure_logging(resolved_settings)
    registry_adapter = bootstrap_create_registry_adapter(resolved_settings)
    application = create_api_application(
        settings=resolved_settings,
        registry=registry_adapter,
        registry_health=registry_adapter,
    )
    return application


def bootstrap_create_registry_adapter(settings: AppSettings) -> FullnodeAppRegistryAdapter:
    """Build the fullnode registry adapter for HTTP and CLI surfaces.

    Args:
        settings: Validated runtime settings.

    Returns:
        FullnodeAppRegistryAdapter: Adapter holding one pooled HTTP client.

    Raises:
        ValueError: Raised when registry settings are invalid.
    """

    return FullnodeAppRegistryAdapter(
        fullnode_url=settings.registry_fullnode_url,
        contract_address=settings.registry_contract_address,
        module_name=settings.registry_module_name,
        request_timeout_seconds=settings.registry_request_timeout_seconds,
    )
