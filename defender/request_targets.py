"""Immutable targets read from the incoming request line, URL and headers."""

from __future__ import annotations

from typing import List

from .errorlog import write_target_error
from .exchange import Request
from .models import Target
from .prompt import to_float


def _is(target: Target, alias: str, name: str) -> bool:
    return (
        target.phase == 1
        and target.alias == alias
        and target.name == name
        and target.immutable
        and target.target_id is None
    )


def _port_of(hostport: str) -> str:
    """The port part of 'host:port' or '[ipv6]:port'; ValueError if absent."""
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"address {hostport}: missing ']' in address")
        rest = hostport[end + 1:]
        if not rest.startswith(":"):
            raise ValueError(f"address {hostport}: missing port in address")
        return rest[1:]
    if ":" not in hostport:
        raise ValueError(f"address {hostport}: missing port in address")
    host, port = hostport.rsplit(":", 1)
    if ":" in host:
        raise ValueError(f"address {hostport}: too many colons in address")
    return port


def header_keys(request: Request, target: Target) -> List[str]:
    if not _is(target, "header-keys-request", "keys"):
        return []
    return [key.lower() for key, _ in request.headers.items()]


def header_values(request: Request, target: Target) -> List[str]:
    if not _is(target, "header-values-request", "value"):
        return []
    return [value for _, values in request.headers.items() for value in values]


def url_args_keys(request: Request, target: Target) -> List[str]:
    if not _is(target, "url-args-keys", "keys"):
        return []
    return [key.lower() for key in request.query_args()]


def url_args_values(request: Request, target: Target) -> List[str]:
    if not _is(target, "url-args-values", "values"):
        return []
    return [value for values in request.query_args().values() for value in values]


def header_size(request: Request, target: Target) -> float:
    if not _is(target, "header-size-request", "size"):
        return 0.0
    return float(len(request.headers))


def url_port(request: Request, target: Target) -> float:
    """Port from the Host value; 0 (and an error log entry) when it has none."""
    if not _is(target, "url-port", "port"):
        return 0.0
    try:
        return to_float(_port_of(request.host))
    except ValueError as exc:
        write_target_error(f"Target {target.id}: {exc}")
        return 0.0


def url_args_size(request: Request, target: Target) -> float:
    if not _is(target, "url-args-size", "size"):
        return 0.0
    return float(len(request.query_args()))


def client_protocol(request: Request, target: Target) -> str:
    if not _is(target, "client-protocol", "protocol"):
        return ""
    return request.proto


def client_ip(request: Request, target: Target) -> str:
    if not _is(target, "client-ip", "ip"):
        return ""
    return request.client_ip


def client_method(request: Request, target: Target) -> str:
    if not _is(target, "client-method", "method"):
        return ""
    return request.method.lower()


def url_path(request: Request, target: Target) -> str:
    if not _is(target, "url-path", "path"):
        return ""
    return request.path


def url_scheme(request: Request, target: Target) -> str:
    if not _is(target, "url-scheme", "scheme"):
        return ""
    return request.scheme


def url_host(request: Request, target: Target) -> str:
    if not _is(target, "url-host", "host"):
        return ""
    return request.url_host


def full_header(request: Request, target: Target) -> str:
    if not _is(target, "full-header-request", "raw"):
        return ""
    return "".join(
        f"{key}: {','.join(values)}\n" for key, values in request.headers.items()
    )