"""Adapter layer package for the external app registry boundary."""

from .app_registry import (
    AppRegistryGateway,
    registry_app_status_label,
    registry_build_canonical_url,
    registry_format_app_rating,
    registry_is_app_approved,
)
from .fullnode_registry import FullnodeAppRegistryAdapter, registry_decode_app_struct, registry_decode_rating
from .interfaces import AppRegistryPort, RegistryHealthPort

__all__ = [
	"AppRegistryGateway",
	"AppRegistryPort",
	"FullnodeAppRegistryAdapter",
	"RegistryHealthPort",
	"registry_app_status_label",
	"registry_build_canonical_url",
	"registry_decode_app_struct",
	"registry_decode_rating",
	"registry_format_app_rating",
	"registry_is_app_approved",
]
