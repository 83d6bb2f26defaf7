"""Resolving a target id to the value a rule compares against."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from . import payloads, request_bodies, request_targets, response_targets
from .errorlog import write_target_error
from .exchange import Request, Response
from .lookup import (
    _transform,
    process_array_target,
    process_number_target,
    process_string_target,
    to_root_targets,
)
from .models import Store, Target

Context = Union[Request, Response]

_REQUEST_TARGETS: Dict[int, Dict[str, Callable[[Request, Target], Any]]] = {
    0: {"full-request": payloads.full_request},
    1: {
        "header-keys-request": request_targets.header_keys,
        "header-values-request": request_targets.header_values,
        "url-args-keys": request_targets.url_args_keys,
        "url-args-values": request_targets.url_args_values,
        "header-size-request": request_targets.header_size,
        "url-port": request_targets.url_port,
        "url-args-size": request_targets.url_args_size,
        "client-protocol": request_targets.client_protocol,
        "client-ip": request_targets.client_ip,
        "client-method": request_targets.client_method,
        "url-path": request_targets.url_path,
        "url-scheme": request_targets.url_scheme,
        "url-host": request_targets.url_host,
        "full-header-request": request_targets.full_header,
    },
    2: {
        "body-keys-request": request_bodies.body_keys,
        "file-keys-request": request_bodies.file_keys,
        "body-values-request": request_bodies.body_values,
        "file-values-request": request_bodies.file_values,
        "file-names-request": request_bodies.file_names,
        "file-extensions-request": request_bodies.file_extensions,
        "body-size-request": request_bodies.body_size,
        "file-size-request": request_bodies.file_size,
        "file-name-size-request": request_bodies.file_name_size,
        "body-length-request": request_bodies.body_length,
        "file-length-request": request_bodies.file_length,
        "body-full-request": request_bodies.full_body,
    },
}

_RESPONSE_TARGETS: Dict[int, Dict[str, Callable[[Response, Target], Any]]] = {
    3: {
        "header-keys-response": response_targets.header_keys,
        "header-values-response": response_targets.header_values,
        "header-size-response": response_targets.header_size,
        "server-status": response_targets.server_status,
        "server-protocol": response_targets.server_protocol,
        "full-header-response": response_targets.full_header,
    },
    4: {
        "body-keys-response": response_targets.body_keys,
        "body-values-response": response_targets.body_values,
        "body-size-response": response_targets.body_size,
        "body-length-response": response_targets.body_length,
        "full-body-response": response_targets.full_body,
    },
    5: {"full-response": payloads.full_response},
}

_MUTABLE_TYPES = ("getter", "header", "url.args", "body", "file")


def process_immutable_target(context: Context, target: Target) -> Any:
    """Value of a built-in target, or None when it does not apply to context."""
    if isinstance(context, Request):
        table = _REQUEST_TARGETS
    elif isinstance(context, Response):
        table = _RESPONSE_TARGETS
    else:
        return None
    reader = table.get(target.phase, {}).get(target.alias)
    return reader(context, target) if reader is not None else None


def process_mutable_target(
    context: Context, request: Request, target: Target, store: Store
) -> Any:
    """Value of a user-defined target by its datatype; None for unknown types."""
    if target.datatype == "array":
        return process_array_target(context, target, store)
    if target.datatype == "number":
        return process_number_target(context, target)
    if target.datatype == "string":
        return process_string_target(context, request, target)
    return None


def process_referer_target(
    context: Context, request: Request, target_id: int, store: Store
) -> Tuple[List[Target], Optional[Any]]:
    """Resolve the root of a target chain and apply each link's engine."""
    path = to_root_targets(target_id, store)
    if not path:
        write_target_error(f"Target {target_id}: not found Target")
        return path, None
    root = path[0]
    if root.immutable:
        value = process_immutable_target(context, root)
    else:
        value = process_mutable_target(context, request, root, store)
    if value is None:
        return path, None

    def on_error(exc: Exception) -> None:
        write_target_error(f"Target {target_id}: {exc}")

    for step in path[1:]:
        value = _transform(value, step, on_error)
    return path, value


def process_target(
    context: Context, request: Request, target_id: int, store: Store
) -> Tuple[List[Target], Optional[Any]]:
    """The targets involved and the resolved value; ([], None) if unknown."""
    target = store.targets.get(target_id)
    if target is None:
        return [], None
    if target.immutable:
        return [target], process_immutable_target(context, target)
    if target.type in _MUTABLE_TYPES:
        return [target], process_mutable_target(context, request, target, store)
    if target.type == "target":
        return process_referer_target(context, request, target_id, store)
    return [], None