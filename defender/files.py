"""File reading, checking and log appending helpers."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Optional

from .prompt import Color, colorize, proxy_error

_TIMESTAMP_FORMAT = "%H:%M:%S - %d/%m/%Y"

logger = logging.getLogger(__name__)


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a moment (default: now) in the log timestamp layout."""
    return (moment or datetime.now()).strftime(_TIMESTAMP_FORMAT)


def read_file(path: str) -> bytes:
    with open(path, "rb") as handle:
        return handle.read()


def read_json(path: str) -> Any:
    return json.loads(read_file(path))


def check_file_exists(path: str) -> os.stat_result:
    """Return the stat of path; raise OSError if it does not exist."""
    return os.stat(path)


def get_extension(path: str) -> str:
    """Lower-cased extension from the last dot of the final path element."""
    name = path.rsplit("/", 1)[-1].rsplit(os.sep, 1)[-1]
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def check_and_create_default_file(path: str, error_cause_name: str) -> None:
    """Ensure the parent directory exists and create path if missing."""
    directory = os.path.dirname(path) or "."
    try:
        info = check_file_exists(directory)
    except OSError as exc:
        raise proxy_error(error_cause_name, str(exc)) from exc
    if not os.path.isdir(directory) or info is None:
        raise proxy_error(error_cause_name, f"{directory} is not a directory")
    if not os.path.exists(path):
        try:
            with open(path, "w"):
                pass
        except OSError as exc:
            raise proxy_error(error_cause_name, str(exc)) from exc


def append_to_file(path: str, data: str) -> None:
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(data)


def write_audit(audit_path: str, error_path: str, data: str) -> None:
    try:
        append_to_file(audit_path, f"{data}\n")
    except OSError as exc:
        write_error(error_path, "[Proxy][Log][Audit]", str(exc))


def write_error(path: str, error_cause_name: str, data: str) -> None:
    text = f"{format_timestamp()} {error_cause_name}: {data}\n"
    try:
        append_to_file(path, text)
    except OSError as exc:
        logger.error(colorize(f"[Defender][Log][Error]: {exc}", Color.PURPLE))