"""Classification of API responses into values or errors."""

import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import ERROR_EXCERPT_LENGTH
from .errors import (
    AuthenticationError,
    AuthorizationError,
    DecodeError,
    ProtocolError,
    RemoteError,
)
from .transport import RawResponse


logger = logging.getLogger(__name__)


AUTH_ERROR_MAP = {
    401: AuthenticationError,
    403: AuthorizationError,
}

_NOT_JSON = object()


class ErrorPayload(BaseModel):
    """Structured error body returned by the API on failure."""

    error_code: str
    message: str


def _excerpt(content: bytes) -> str:
    return content[:ERROR_EXCERPT_LENGTH].decode('utf-8', 'replace')


def _parse_json(content: bytes):
    try:
        return json.loads(content.decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        return _NOT_JSON


def _parse_error_payload(content: bytes) -> Optional[ErrorPayload]:
    data = _parse_json(content)
    if not isinstance(data, dict):
        return None
    try:
        return ErrorPayload.model_validate(data)
    except ValidationError:
        return None


def _classify_failure(response: RawResponse) -> Exception:
    payload = _parse_error_payload(response.content)

    auth_error = AUTH_ERROR_MAP.get(response.status)
    if auth_error is not None:
        if payload:
            return auth_error(status=response.status, error_code=payload.error_code,
                              message=payload.message)
        return auth_error(status=response.status)

    if payload:
        return RemoteError(response.status, payload.error_code, payload.message)
    return ProtocolError(response.status, _excerpt(response.content))


def interpret(response: RawResponse, model: Any = None):
    """Decode a response into ``model`` or raise the matching error.

    Args:
        response: Completed HTTP exchange
        model: Expected payload type (pydantic model or any type accepted by
            ``pydantic.TypeAdapter``). ``None`` returns the parsed JSON.

    Returns:
        The decoded value; ``None`` for an empty 2xx body when no model is expected

    Raises:
        AuthenticationError: On 401 (AuthorizationError on 403)
        RemoteError: On non-2xx with a structured error, or a 2xx error envelope
        ProtocolError: On non-2xx with an unstructured body
        DecodeError: On 2xx whose body does not match ``model``
    """
    if not response.ok:
        error = _classify_failure(response)
        logger.debug("API error %s: %s", response.status, _excerpt(response.content))
        raise error

    if not response.content.strip():
        if model is None:
            return None
        raise DecodeError("Empty response body", status=response.status)

    data = _parse_json(response.content)
    if data is _NOT_JSON:
        raise DecodeError(
            "Response body is not valid JSON",
            status=response.status,
            body_excerpt=_excerpt(response.content),
        )

    # The API reports some failures inside 2xx envelopes: {"error": "..."}
    if isinstance(data, dict) and isinstance(data.get('error'), str):
        raise RemoteError(response.status, data.get('error_code') or 'error', data['error'])

    if model is None:
        return data

    try:
        return TypeAdapter(model).validate_python(data)
    except ValidationError as e:
        raise DecodeError(
            f"Response does not match {getattr(model, '__name__', model)}: "
            f"{e.error_count()} validation error(s), first: {e.errors()[0]['msg']} "
            f"at {'.'.join(str(p) for p in e.errors()[0]['loc'])}",
            status=response.status,
            body_excerpt=_excerpt(response.content),
        ) from e
