"""Error history log for the proxy inspection engine."""

from __future__ import annotations

from dataclasses import dataclass

from .files import write_error
from .prompt import error_cause_name


@dataclass
class ErrorLog:
    """Appends errors to '<path>.log' when enabled."""

    enable: bool = False
    path: str = ""

    def write(self, msg: str, *args: str) -> None:
        if not self.enable:
            return
        write_error(f"{self.path}.log", error_cause_name(*args), msg)


_current = ErrorLog()


def configure(enable: bool, path: str) -> ErrorLog:
    """Set the process-wide error log and return it."""
    _current.enable = enable
    _current.path = path
    return _current


def write_target_error(msg: str) -> None:
    _current.write(msg, "Proxy", "Target")


def write_engine_error(msg: str) -> None:
    _current.write(msg, "Proxy", "Target", "Engine")


def write_comparator_error(msg: str) -> None:
    _current.write(msg, "Proxy", "Rule", "Comparator")


def write_action_error(msg: str) -> None:
    _current.write(msg, "Proxy", "Rule", "Action")


def write_logistic_error(msg: str) -> None:
    _current.write(msg, "Proxy", "Rule", "Logistic")


def write_decision_error(msg: str) -> None:
    _current.write(msg, "Proxy", "Decision")