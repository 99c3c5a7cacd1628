"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol

from linkgate.domain import AppMetadata, HealthStatus


class AppRegistryPort(Protocol):
    """Port definition for reading mini-app metadata from the external registry."""

    def registry_source_name(self) -> str:
        """Return registry source identifier for diagnostics.

        Returns:
            str: Human-readable upstream source identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    def registry_get_app(self, app_id: str) -> AppMetadata | None:
        """Resolve one app id to its registry record.

        Args:
            app_id: Opaque app id (registry slug).

        Returns:
            AppMetadata | None: Registry record, or None when not found.

        Raises:
            RegistryUnavailableError: Raised when the registry cannot answer.
        """

    def registry_list_apps(self) -> list[AppMetadata]:
        """Return every publicly active app.

        Returns:
            list[AppMetadata]: Active registry records.

        Raises:
            RegistryUnavailableError: Raised when the registry cannot answer.
        """


class RegistryHealthPort(Protocol):
    """Port definition for registry connectivity checks."""

    def registry_check_health(self) -> HealthStatus:
        """Check upstream registry connectivity.

        Returns:
            HealthStatus: Connectivity status.

        Raises:
            ConnectionError: Raised when the registry cannot be reached.
        """

    def registry_connection_label(self) -> str:
        """Return a safe label for the registry target.

        Returns:
            str: Target label.

        Raises:
            RuntimeError: Raised when target metadata is unavailable.
        """
