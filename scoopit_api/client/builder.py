"""Request construction: target URLs, query strings and JSON bodies."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Tuple
from urllib.parse import quote

from pydantic import BaseModel

from ..config import API_BASE_PATH
from .errors import ConfigurationError


QueryParams = Sequence[Tuple[str, Any]]


@dataclass(frozen=True)
class RequestDescriptor:
    """One API call: method, path relative to the API root, query and body."""

    method: str
    path: str
    params: QueryParams = ()
    body: Any = None


def _to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def query_params(**kwargs) -> list:
    """Build query pairs from snake_case keyword arguments, in call order.

    Example:
        query_params(url_name='x', get_tags=True) -> [('urlName', 'x'), ('getTags', True)]
    """
    return [(_to_camel(key), value) for key, value in kwargs.items()]


def _format_value(value) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, Enum):
        value = value.value
    return str(value)


def encode_query(params: Iterable[Tuple[str, Any]]) -> str:
    """Percent-encode query pairs, keeping their order.

    ``None`` values are omitted and list values are repeated under the same
    key (``tag=a&tag=b``). Spaces are encoded as ``%20``.
    """
    parts = []
    for key, value in params:
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if item is None:
                continue
            parts.append(f"{quote(str(key), safe='')}={quote(_format_value(item), safe='')}")
    return '&'.join(parts)


def build_url(host: str, path: str, params: QueryParams = (),
              base_path: str = API_BASE_PATH) -> str:
    """Compose host, API root, relative path and query into a URL."""
    if not host:
        raise ConfigurationError("API host must not be empty.", field='host')

    segments = [host.rstrip('/'), base_path.strip('/'), path.lstrip('/')]
    url = '/'.join(segment for segment in segments if segment)
    query = encode_query(params)
    if query:
        url = f"{url}?{query}"
    return url


def serialize_body(body) -> Optional[bytes]:
    """Serialize a request body to UTF-8 JSON.

    Pydantic models are dumped with their API field names (aliases).
    """
    if body is None:
        return None
    if isinstance(body, BaseModel):
        body = body.model_dump(mode='json', by_alias=True, exclude_none=True)
    try:
        return json.dumps(body, ensure_ascii=False).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Request body is not JSON serializable: {e}") from e
