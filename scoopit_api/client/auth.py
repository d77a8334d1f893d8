"""Authentication management for the Scoop.it API client.

Mints HS256-signed JWT assertions from the application credentials and keeps
one valid token per client, renewing it slightly before it expires.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import jwt

from ..config import TOKEN_ALGORITHM
from .errors import ConfigurationError


logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class Credentials:
    """Application key/secret and the user the tokens are minted for."""

    app_key: str
    app_secret: str = field(repr=False)
    user_identifier: str

    def __post_init__(self):
        for name in ('app_key', 'app_secret', 'user_identifier'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"{name} must be a non-empty string.", field=name)


@dataclass(frozen=True)
class Token:
    """A signed bearer token and its validity window (unix seconds)."""

    signed_value: str = field(repr=False)
    issued_at: int
    expires_at: int

    def expires_within(self, margin: float, now: float) -> bool:
        """True when the token is expired or will be within ``margin`` seconds."""
        return now >= self.expires_at - margin


class Signer(Protocol):
    """Turns a claims mapping into a signed token string."""

    def sign(self, claims: dict, secret: str) -> str:
        ...


class HS256Signer:
    """Signs claims as a compact JWT using HMAC-SHA256."""

    algorithm = TOKEN_ALGORITHM

    def sign(self, claims: dict, secret: str) -> str:
        try:
            return jwt.encode(claims, secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Failed to sign token: {e}") from e


class TokenMinter:
    """Builds and signs the claims for a credentials set."""

    def __init__(self, credentials: Credentials, signer: Optional[Signer] = None,
                 clock: Clock = time.time):
        self.credentials = credentials
        self.signer = signer or HS256Signer()
        self.clock = clock

    def build_claims(self, lifetime: int) -> dict:
        """Claims for a token issued now and valid for ``lifetime`` seconds."""
        if lifetime <= 0:
            raise ConfigurationError("Token lifetime must be positive.", field='token_lifetime')

        issued_at = int(self.clock())
        return {
            "iss": self.credentials.app_key,
            "sub": self.credentials.user_identifier,
            "iat": issued_at,
            "exp": issued_at + int(lifetime),
        }

    def mint(self, lifetime: int) -> Token:
        """Sign a new token.

        Args:
            lifetime: Validity of the token in seconds

        Returns:
            The signed token

        Raises:
            ConfigurationError: If the lifetime is not positive or signing fails
        """
        claims = self.build_claims(lifetime)
        signed = self.signer.sign(claims, self.credentials.app_secret)
        if not isinstance(signed, str) or not signed:
            raise ConfigurationError("Signer returned an empty token.")
        return Token(signed_value=signed, issued_at=claims["iat"], expires_at=claims["exp"])


class TokenCache:
    """Keeps the current token of a client and renews it when needed.

    The cached ``Token`` is immutable and replaced in a single assignment,
    so callers holding a still-valid token read it without taking the lock.
    Renewal happens under the lock and re-checks the token, so concurrent
    callers trigger a single mint. Minting never awaits while the lock is held.
    """

    def __init__(self, minter: TokenMinter, lifetime: int, safety_margin: float,
                 clock: Clock = time.time):
        self.minter = minter
        self.lifetime = lifetime
        self.safety_margin = safety_margin
        self.clock = clock
        self.mint_count = 0
        self._token: Optional[Token] = None
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[Token]:
        """The cached token, without renewing it."""
        return self._token

    def _is_usable(self, token: Optional[Token]) -> bool:
        return token is not None and not token.expires_within(self.safety_margin, self.clock())

    def get_token(self) -> Token:
        """Return a token valid for at least the safety margin.

        Raises:
            ConfigurationError: If a new token cannot be minted
        """
        token = self._token
        if self._is_usable(token):
            return token

        with self._lock:
            token = self._token
            if not self._is_usable(token):
                token = self.minter.mint(self.lifetime)
                self.mint_count += 1
                self._token = token
                logger.debug(
                    "Minted token for %s, expires at %s",
                    self.minter.credentials.user_identifier,
                    token.expires_at,
                )
            return token

    def invalidate(self):
        """Drop the cached token so the next call mints a fresh one."""
        with self._lock:
            self._token = None
