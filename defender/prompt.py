"""Coloured error prompts and small string and number parsers."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional


class Color(enum.Enum):
    """ANSI terminal colours."""

    RESET = "\033[0m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    GREEN = "\033[32m"
    BLUE = "\033[34m"
    PURPLE = "\033[35m"


class PromptError(Exception):
    """An error whose message is a formatted prompt."""


@dataclass
class Prompt:
    """A structured message of the form [Module][Field][Kind]: msg."""

    module: str
    field: str
    kind: str
    msg: str
    color: Optional[Color] = None

    def error(self) -> PromptError:
        text = f"[{self.module}][{self.field}][{self.kind}]: {self.msg}"
        if self.color is None:
            return PromptError(text)
        return PromptError(f"{self.color.value}{text}{Color.RESET.value}")


def server_error(field: str, msg: str) -> PromptError:
    return Prompt("Server", field, "Error", msg, Color.RED).error()


def proxy_error(field: str, msg: str) -> PromptError:
    return Prompt("Proxy", field, "Error", msg, Color.RED).error()


def colorize(text: str, color: Color) -> str:
    return f"{color.value}{text}{Color.RESET.value}"


def error_cause_name(*args: str) -> str:
    return "".join(f"[{cause}]" for cause in args)


def replace_if_blank(value: str, new: str) -> str:
    return value if value else new


def fallback_when_empty(value: str, new: str) -> str:
    return value if value else new


_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT_LIMIT = 4294967296


def to_boolean(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f'strconv.ParseBool: parsing "{value}": invalid syntax')


def to_int(value: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise ValueError(f'strconv.Atoi: parsing "{value}": invalid syntax')
    number = int(value)
    if number > _INT_LIMIT:
        raise ValueError("value exceeds the limit of int32")
    return number


def to_float(value: str) -> float:
    if not value or value != value.strip() or "_" in value:
        raise ValueError(f'strconv.ParseFloat: parsing "{value}": invalid syntax')
    try:
        return float(value)
    except ValueError:
        raise ValueError(
            f'strconv.ParseFloat: parsing "{value}": invalid syntax'
        ) from None