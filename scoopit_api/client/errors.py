"""Exception classes for the Scoop.it API client.

Every failure of the request pipeline surfaces as one of these classes:

    ScoopitError
    ├── ConfigurationError       bad credentials/configuration, signing failure
    ├── TransportError           connection, DNS, TLS failure
    │   └── TransportTimeoutError
    └── ApiError                 the server answered with a usable status
        ├── RemoteError          structured error payload
        ├── AuthenticationError  401
        │   └── AuthorizationError  403
        ├── ProtocolError        unstructured non-2xx body
        └── DecodeError          2xx body of the wrong shape
"""

from ..config import RETRYABLE_ERROR_CODES


class ScoopitError(Exception):
    """Base exception for all Scoop.it client errors."""

    retryable = False

    def __init__(self, message, suggestion=None, **kwargs):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.metadata = kwargs

    def to_dict(self):
        """Convert error to dictionary for JSON output."""
        result = {
            'error': self.__class__.__name__,
            'message': self.message
        }
        if self.suggestion:
            result['suggestion'] = self.suggestion
        result.update(self.metadata)
        return result


class ConfigurationError(ScoopitError):
    """Invalid credentials, configuration value, or token signing failure."""

    def __init__(self, message='Invalid client configuration', field=None):
        super().__init__(
            message=message,
            suggestion="Check the application key, secret and user identifier "
                       "passed to the client.",
            field=field
        )
        self.field = field


class TransportError(ScoopitError):
    """The HTTP exchange could not be completed."""

    retryable = True

    def __init__(self, message='Transport failure', url=None):
        super().__init__(
            message=message,
            suggestion="Check network connectivity and retry.",
            url=url
        )
        self.url = url


class TransportTimeoutError(TransportError):
    """No complete response was received within the request timeout."""

    def __init__(self, message='Request timed out', url=None, timeout=None):
        super().__init__(message=message, url=url)
        self.timeout = timeout
        self.metadata['timeout'] = timeout


class ApiError(ScoopitError):
    """The API answered but the call did not produce the expected value."""

    def __init__(self, message, status, suggestion=None, **kwargs):
        super().__init__(message=message, suggestion=suggestion, status=status, **kwargs)
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_forbidden(self) -> bool:
        return self.status == 403


class RemoteError(ApiError):
    """Non-2xx response carrying a structured error payload."""

    def __init__(self, status, error_code, message):
        super().__init__(
            message=f"{status}: {message}",
            status=status,
            error_code=error_code
        )
        self.error_code = error_code
        self.remote_message = message

    @property
    def retryable(self) -> bool:
        return self.status == 429 or self.error_code in RETRYABLE_ERROR_CODES


class AuthenticationError(ApiError):
    """Authentication failed (401) or the token was rejected."""

    def __init__(self, status=401, error_code=None, message='Authentication failed'):
        super().__init__(
            message=f"{status}: {message}",
            status=status,
            suggestion="Refresh the access token and retry once, "
                       "see ScoopitClient.request_with_auth_retry().",
            error_code=error_code
        )
        self.error_code = error_code
        self.remote_message = message


class AuthorizationError(AuthenticationError):
    """Authorization failed (403)."""

    def __init__(self, status=403, error_code=None, message='Access denied'):
        super().__init__(status=status, error_code=error_code, message=message)


class ProtocolError(ApiError):
    """Non-2xx response whose body is not a structured error."""

    def __init__(self, status, body_excerpt=''):
        super().__init__(
            message=f"{status}: unexpected response body",
            status=status,
            body_excerpt=body_excerpt
        )
        self.body_excerpt = body_excerpt

    @property
    def retryable(self) -> bool:
        return self.status == 429 or self.status >= 500


class DecodeError(ApiError):
    """2xx response whose payload does not match the expected shape."""

    def __init__(self, message='Unexpected response payload', status=200, body_excerpt=''):
        super().__init__(
            message=message,
            status=status,
            suggestion="The API response does not match the client's models; "
                       "retrying will not help.",
            body_excerpt=body_excerpt
        )
        self.body_excerpt = body_excerpt
