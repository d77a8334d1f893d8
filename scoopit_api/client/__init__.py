"""Client package for the Scoop.it API."""

from .scoopit_client import ScoopitClient
from .auth import Credentials, HS256Signer, Signer, Token, TokenCache, TokenMinter
from .builder import RequestDescriptor
from .errors import (
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
    "ScoopitClient",
    "Credentials",
    "HS256Signer",
    "Signer",
    "Token",
    "TokenCache",
    "TokenMinter",
    "RequestDescriptor",
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
