"""HTTP request and response objects seen by the inspection engine."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import parse_qs

_TOKEN_CHARS = set(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")


def canonical_header_key(key: str) -> str:
    """Canonical MIME form: Content-Type. Invalid keys are returned unchanged."""
    if not key or any(ch not in _TOKEN_CHARS for ch in key):
        return key
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


class Headers:
    """Multi-valued HTTP headers with canonical keys."""

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, List[str]] = {}
        for key, value in (data or {}).items():
            values = [value] if isinstance(value, str) else list(value)
            for item in values:
                self.add(key, item)

    def get(self, key: str) -> str:
        values = self._data.get(canonical_header_key(key))
        return values[0] if values else ""

    def get_all(self, key: str) -> List[str]:
        return list(self._data.get(canonical_header_key(key), []))

    def set(self, key: str, value: str) -> None:
        self._data[canonical_header_key(key)] = [value]

    def add(self, key: str, value: str) -> None:
        self._data.setdefault(canonical_header_key(key), []).append(value)

    def delete(self, key: str) -> None:
        self._data.pop(canonical_header_key(key), None)

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for key, values in self._data.items():
            yield key, list(values)

    def copy(self) -> "Headers":
        clone = Headers()
        clone._data = {key: list(values) for key, values in self._data.items()}
        return clone

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_header_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Headers) and self._data == other._data

    def __repr__(self) -> str:
        return f"Headers({self._data!r})"


@dataclass
class Request:
    """An incoming request together with per-request context values."""

    method: str = "GET"
    path: str = "/"
    query: str = ""
    scheme: str = ""
    host: str = ""
    url_host: str = ""
    proto: str = "HTTP/1.1"
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    client_ip: str = ""
    remote_addr: str = ""
    content_length: Optional[int] = None
    params: Dict[str, str] = field(default_factory=dict)
    values: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.content_length is None:
            self.content_length = len(self.body)

    def query_args(self) -> Dict[str, List[str]]:
        return parse_qs(self.query, keep_blank_values=True)

    def user_agent(self) -> str:
        return self.headers.get("User-Agent")

    def content_type(self) -> str:
        return self.headers.get("Content-Type").split(";", 1)[0].strip()

    def get_int(self, key: str) -> int:
        value = self.values.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    def get_string(self, key: str) -> str:
        value = self.values.get(key)
        return value if isinstance(value, str) else ""

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value


@dataclass
class Response:
    """A response from the backend."""

    status_code: int = 200
    status: str = "200 OK"
    proto: str = "HTTP/1.1"
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    content_length: Optional[int] = None
    request: Optional[Request] = None

    def __post_init__(self) -> None:
        if self.content_length is None:
            self.content_length = len(self.body)