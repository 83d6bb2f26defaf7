"""Value transformations that targets can apply to what they extract."""

from __future__ import annotations

import hashlib
import math
from typing import List


def index_of(values: List[str], index: int) -> str:
    """Item at index, clamped to the list; '' for an empty list."""
    if not values:
        return ""
    if index < 0:
        return values[0]
    if index >= len(values):
        return values[-1]
    return values[index]


def addition(target: float, number: float) -> float:
    return target + number


def subtraction(target: float, number: float) -> float:
    return target - number


def multiplication(target: float, number: float) -> float:
    return target * number


def division(target: float, number: float) -> float:
    """IEEE division: dividing by zero gives an infinity or NaN."""
    if number == 0:
        if target == 0 or math.isnan(target):
            return math.nan
        return math.copysign(math.inf, target) * math.copysign(1.0, number)
    return target / number


def power_of(target: float, number: float) -> float:
    """IEEE power: overflow gives infinity, undefined results give NaN."""
    try:
        return math.pow(target, number)
    except OverflowError:
        return math.inf
    except ValueError:
        if target == 0 and number < 0:
            odd = number.is_integer() and int(number) % 2 == 1
            return math.copysign(math.inf, target) if odd else math.inf
        return math.nan


def remainder(target: float, number: float) -> float:
    """Remainder with the sign of the dividend; NaN where undefined."""
    try:
        return math.fmod(target, number)
    except ValueError:
        return math.nan


def lower(target: str) -> str:
    return target.lower()


def upper(target: str) -> str:
    return target.upper()


def capitalize(target: str) -> str:
    """Upper-case the first character only."""
    if not target:
        return target
    return target[0].upper() + target[1:]


def trim(target: str) -> str:
    return target.strip()


def trim_left(target: str) -> str:
    return target.lstrip()


def trim_right(target: str) -> str:
    return target.rstrip()


def remove_whitespace(target: str) -> str:
    return "".join(ch for ch in target if not ch.isspace())


def length(target: str) -> float:
    """Length in UTF-8 bytes."""
    return float(len(target.encode("utf-8")))


_ALGORITHMS = {
    "md5": hashlib.md5,
    "sha128": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}


def hash_value(target: str, algorithm: str) -> str:
    """Hex digest with md5, sha128 (SHA-1), sha256 or sha512; '' otherwise."""
    digest = _ALGORITHMS.get(algorithm)
    if digest is None:
        return ""
    return digest(target.encode("utf-8")).hexdigest()