"""Python client for the www.scoop.it REST API."""

__version__ = "0.1.0"

from .client import (  # noqa: E402
    ScoopitClient,
    ScoopitError,
    ConfigurationError,
    TransportError,
    TransportTimeoutError,
    ApiError,
    RemoteError,
    AuthenticationError,
    AuthorizationError,
    ProtocolError,
    DecodeError,
)

__all__ = [
    "__version__",
    "ScoopitClient",
    "ScoopitError",
    "ConfigurationError",
    "TransportError",
    "TransportTimeoutError",
    "ApiError",
    "RemoteError",
    "AuthenticationError",
    "AuthorizationError",
    "ProtocolError",
    "DecodeError",
]
