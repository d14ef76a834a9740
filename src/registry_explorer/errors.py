"""Exception hierarchy raised by registry clients."""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for registry failures.

    ``user_message`` is the text suitable for a placeholder or status line;
    ``str(error)`` keeps the technical detail.
    """

    code = "REGISTRY_ERROR"

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class NotConnectedError(RegistryError):
    code = "NOT_CONNECTED"

    def __init__(self) -> None:
        super().__init__("Not connected to registry. Please connect first.")


class NetworkError(RegistryError):
    code = "NETWORK_ERROR"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, _network_user_message(message, status_code))
        self.status_code = status_code


class NotFoundError(RegistryError):
    code = "NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            f"The {resource_type} '{resource_id}' was not found. It may have been deleted or you may not have access.",
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class AuthenticationError(RegistryError):
    code = "AUTH_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message, "Authentication failed. Please check your credentials and try again.")


def _network_user_message(message: str, status_code: int | None) -> str:
    if status_code == 401:
        return "Authentication failed. Please check your credentials and try again."
    if status_code == 403:
        return "You do not have permission to perform this operation."
    if status_code == 404:
        return "The requested resource was not found."
    if status_code is not None and status_code >= 500:
        return "The server encountered an error. Please try again later."
    return message
