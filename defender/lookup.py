"""Reading mutable targets from a request or response and applying engines."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Tuple, Union

from . import engines
from .errorlog import write_engine_error
from .exchange import Request, Response
from .models import Store, Target
from .prompt import to_float
from .request_bodies import body_data as request_body_data
from .request_bodies import file_data
from .response_targets import body_data as response_body_data

Context = Union[Request, Response]
ErrorSink = Callable[[Exception], None]

_INTEGER = re.compile(r"[+-]?[0-9]+")

_ARITHMETIC: Dict[str, Callable[[float, float], float]] = {
    "addition": engines.addition,
    "subtraction": engines.subtraction,
    "multiplication": engines.multiplication,
    "division": engines.division,
    "powerOf": engines.power_of,
    "remainder": engines.remainder,
}

_TEXT: Dict[str, Callable[[str], str]] = {
    "lower": engines.lower,
    "upper": engines.upper,
    "capitalize": engines.capitalize,
    "trim": engines.trim,
    "trimLeft": engines.trim_left,
    "trimRight": engines.trim_right,
    "removeWhitespace": engines.remove_whitespace,
}


def _atoi(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f'invalid integer "{text}"')
    return int(text)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _joined(pairs: Iterable[Tuple[str, List[str]]]) -> Dict[str, str]:
    return {key.lower(): ",".join(values) for key, values in pairs}


def _transform(value: Any, step: Target, on_error: ErrorSink) -> Any:
    """Apply the engine of step to value, chosen by the value's type."""
    engine = step.engine
    if engine is None:
        return value
    config = step.engine_configuration
    if config is not None:
        if isinstance(value, list):
            if step.final_datatype == "string" and engine == "indexOf":
                try:
                    index = _atoi(config)
                except ValueError as exc:
                    on_error(exc)
                    index = 0
                return engines.index_of(value, index)
        elif _is_number(value):
            if step.final_datatype == "number":
                try:
                    number = to_float(config)
                except ValueError as exc:
                    on_error(exc)
                    number = 0.0
                operation = _ARITHMETIC.get(engine)
                if operation is not None:
                    return operation(float(value), number)
        elif isinstance(value, str):
            if step.final_datatype == "string" and engine == "hash":
                return engines.hash_value(value, config)
        return value
    if isinstance(value, str):
        if step.final_datatype == "number" and engine == "length":
            return engines.length(value)
        if step.final_datatype == "string":
            operation = _TEXT.get(engine)
            if operation is not None:
                return operation(value)
    return value


def phase_values(context: Context, target: Target) -> Dict[str, str]:
    """Lower-cased key to value map of the part of context the target names."""
    if isinstance(context, Request):
        if target.phase == 1:
            if target.type == "header":
                return _joined(context.headers.items())
            if target.type == "url.args":
                return _joined(context.query_args().items())
        elif target.phase == 2:
            if target.type == "body":
                return dict(request_body_data(context, target.id).maps)
            if target.type == "file":
                return dict(file_data(context, target.id).maps)
    elif isinstance(context, Response):
        if target.phase == 3 and target.type == "header":
            return _joined(context.headers.items())
        if target.phase == 4 and target.type == "body":
            return dict(response_body_data(context, target.id).maps)
    return {}


def array_target(context: Context, target: Target, store: Store) -> List[str]:
    """Values whose keys are the words of the target's wordlist."""
    if target.datatype != "array" or target.wordlist_id is None:
        return []
    words = store.words_of(target.wordlist_id)
    values = phase_values(context, target)
    return [values[word] for word in words if word in values]


def number_target(context: Context, target: Target) -> float:
    """The value named by the target as a number; 0 when absent or invalid."""
    if target.datatype != "number":
        return 0.0
    values = phase_values(context, target)
    if target.name not in values:
        return 0.0
    try:
        return to_float(values[target.name])
    except ValueError as exc:
        from .errorlog import write_target_error

        write_target_error(f"Target {target.id}: {exc}")
        return 0.0


def string_target(context: Context, request: Request, target: Target) -> str:
    """The value named by the target; getters read per-request variables."""
    if target.datatype != "string":
        return ""
    if target.type == "getter":
        return request.get_string(target.name)
    return phase_values(context, target).get(target.name, "")


def to_root_targets(target_id: int, store: Store) -> List[Target]:
    """The chain of targets from the root down to target_id, cycles cut."""
    visited = set()
    path: List[Target] = []
    current = target_id
    while True:
        node = store.targets.get(current)
        if node is None:
            break
        path.append(node)
        if current in visited:
            break
        visited.add(current)
        following = node.target_id
        if following is None or following == current or following in visited:
            break
        if following not in store.targets:
            break
        current = following
    path.reverse()
    return path


def _engine_sink(target: Target) -> ErrorSink:
    return lambda exc: write_engine_error(f"Target {target.id}: {exc}")


def process_array_target(context: Context, target: Target, store: Store) -> Any:
    return _transform(array_target(context, target, store), target, _engine_sink(target))


def process_number_target(context: Context, target: Target) -> Any:
    return _transform(number_target(context, target), target, _engine_sink(target))


def process_string_target(context: Context, request: Request, target: Target) -> Any:
    return _transform(
        string_target(context, request, target), target, _engine_sink(target)
    )