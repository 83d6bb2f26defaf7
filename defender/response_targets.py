"""Immutable targets read from the backend response (headers and body)."""

from __future__ import annotations

from typing import List

from .bodies import BodyData, decode_response_body, flatten_with_values, response_body_content
from .errorlog import write_target_error
from .exchange import Response
from .models import Target


def _is(target: Target, phase: int, alias: str, name: str) -> bool:
    return (
        target.phase == phase
        and target.alias == alias
        and target.name == name
        and target.immutable
        and target.target_id is None
    )


def body_data(response: Response, target_id: int) -> BodyData:
    """Flattened keys and values of a structured response body."""
    try:
        _, data = response_body_content(response)
    except Exception as exc:  # parsers and decoders raise many error types
        write_target_error(f"Target {target_id}: {exc}")
        return BodyData()
    if isinstance(data, dict) and data:
        return BodyData.from_flat(flatten_with_values(data))
    return BodyData()


def header_keys(response: Response, target: Target) -> List[str]:
    if not _is(target, 3, "header-keys-response", "keys"):
        return []
    return [key.lower() for key, _ in response.headers.items()]


def header_values(response: Response, target: Target) -> List[str]:
    if not _is(target, 3, "header-values-response", "values"):
        return []
    return [value for _, values in response.headers.items() for value in values]


def header_size(response: Response, target: Target) -> float:
    if not _is(target, 3, "header-size-response", "size"):
        return 0.0
    return float(len(response.headers))


def server_status(response: Response, target: Target) -> float:
    if not _is(target, 3, "server-status", "status"):
        return 0.0
    return float(response.status_code)


def server_protocol(response: Response, target: Target) -> str:
    if not _is(target, 3, "server-protocol", "protocol"):
        return ""
    return response.proto


def full_header(response: Response, target: Target) -> str:
    if not _is(target, 3, "full-header-response", "raw"):
        return ""
    return "".join(
        f"{key}: {','.join(values)}\n" for key, values in response.headers.items()
    )


def body_keys(response: Response, target: Target) -> List[str]:
    if not _is(target, 4, "body-keys-response", "keys"):
        return []
    return body_data(response, target.id).keys


def body_values(response: Response, target: Target) -> List[str]:
    if not _is(target, 4, "body-values-response", "values"):
        return []
    return body_data(response, target.id).values


def body_size(response: Response, target: Target) -> float:
    if not _is(target, 4, "body-size-response", "size"):
        return 0.0
    return float(len(body_data(response, target.id).keys))


def body_length(response: Response, target: Target) -> float:
    if not _is(target, 4, "body-length-response", "length"):
        return 0.0
    return float(response.content_length or 0)


def full_body(response: Response, target: Target) -> str:
    if not _is(target, 4, "full-body-response", "raw"):
        return ""
    try:
        data = decode_response_body(response)
    except Exception as exc:  # decoders raise a variety of error types
        write_target_error(f"Target {target.id}: {exc}")
        return ""
    return data.decode("utf-8", errors="replace")