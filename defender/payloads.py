"""Raw text of a whole request or response."""

from __future__ import annotations

from typing import Union

from .bodies import decode_response_body
from .errorlog import write_target_error
from .exchange import Headers, Request, Response
from .models import Target


def _header_block(headers: Headers) -> str:
    return "".join(f"{key}: {','.join(values)}\n" for key, values in headers.items())


def full_phase(context: Union[Request, Response]) -> str:
    """Protocol line, headers and decoded body separated by newlines."""
    if isinstance(context, Request):
        body = context.body
    elif isinstance(context, Response):
        body = decode_response_body(context)
    else:
        raise TypeError(f"unsupported context: {type(context).__name__}")
    text = body.decode("utf-8", errors="replace")
    return f"{context.proto}\n{_header_block(context.headers)}\n{text}"


def _is_raw(target: Target, phase: int, alias: str) -> bool:
    return (
        target.phase == phase
        and target.alias == alias
        and target.name == "raw"
        and target.immutable
        and target.target_id is None
    )


def _raw(context: Union[Request, Response], target: Target) -> str:
    try:
        return full_phase(context)
    except Exception as exc:  # decoders raise a variety of error types
        write_target_error(f"Target {target.id}: {exc}")
        return ""


def full_request(request: Request, target: Target) -> str:
    if not _is_raw(target, 0, "full-request"):
        return ""
    return _raw(request, target)


def full_response(response: Response, target: Target) -> str:
    if not _is_raw(target, 5, "full-response"):
        return ""
    return _raw(response, target)