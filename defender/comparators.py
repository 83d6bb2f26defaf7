"""Comparators that test a resolved target value against a rule."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional

from .errorlog import write_comparator_error
from .models import Rule, Store
from .prompt import to_float


def _missing_value(rule: Rule, name: str) -> bool:
    if rule.value is None:
        write_comparator_error(f"Rule {rule.id}: missing Value for {name} comparator")
        return True
    return False


def _wordlist(rule: Rule, store: Store, name: str) -> Optional[List[str]]:
    if rule.wordlist_id is None:
        write_comparator_error(
            f"Rule {rule.id}: missing Wordlist ID for {name} comparator"
        )
        return None
    return store.words_of(rule.wordlist_id)


def _number(rule: Rule, name: str) -> Optional[float]:
    if _missing_value(rule, name):
        return None
    try:
        return to_float(rule.value)
    except ValueError as exc:
        write_comparator_error(f"Rule {rule.id}: {exc}")
        return None


def _flip(result: bool, rule: Rule) -> bool:
    return not result if rule.inverse else result


def similar(targets: List[str], rule: Rule, store: Store) -> bool:
    """Some target is (or, inverted, is not) a word of the rule's wordlist."""
    words = _wordlist(rule, store, "Similar")
    if words is None:
        return False
    return any(_flip(target in words, rule) for target in targets)


def contains(targets: List[str], rule: Rule) -> bool:
    if _missing_value(rule, "Contains"):
        return False
    return _flip(rule.value in targets, rule)


def match(targets: List[str], rule: Rule) -> bool:
    """Some target matches (or, inverted, does not match) the rule's pattern."""
    if _missing_value(rule, "Match"):
        return False
    result = False
    for target in targets:
        try:
            matched = re.search(rule.value, target) is not None
        except re.error as exc:
            write_comparator_error(f"Rule {rule.id}: {exc}")
            return result
        result = _flip(matched, rule)
        if result:
            break
    return result


def search(targets: List[str], rule: Rule, store: Store) -> bool:
    """Some target matches some pattern of the rule's wordlist."""
    words = _wordlist(rule, store, "Search")
    if words is None:
        return False
    result = False
    for target in targets:
        for word in words:
            try:
                matched = re.search(word, target) is not None
            except re.error as exc:
                write_comparator_error(f"Rule {rule.id}: {exc}")
                return result
            result = _flip(matched, rule)
            if result:
                return result
    return result


def equal(target: float, rule: Rule) -> bool:
    value = _number(rule, "Equal")
    if value is None:
        return False
    return target != value if rule.inverse else target == value


def greater_than(target: float, rule: Rule) -> bool:
    value = _number(rule, "Greater Than")
    if value is None:
        return False
    return target < value if rule.inverse else target > value


def less_than(target: float, rule: Rule) -> bool:
    value = _number(rule, "Less Than")
    if value is None:
        return False
    return target > value if rule.inverse else target < value


def greater_than_or_equal(target: float, rule: Rule) -> bool:
    value = _number(rule, "Greater Than Or Equal")
    if value is None:
        return False
    return target <= value if rule.inverse else target >= value


def less_than_or_equal(target: float, rule: Rule) -> bool:
    value = _number(rule, "Less Than Or Equal")
    if value is None:
        return False
    return target >= value if rule.inverse else target <= value


def in_range(target: float, rule: Rule) -> bool:
    """Target lies within the inclusive range 'low,high' given as the value."""
    if _missing_value(rule, "In Range"):
        return False
    bounds = rule.value.split(",")
    if len(bounds) != 2:
        write_comparator_error(
            f"Rule {rule.id}: unsatisfactory value for In Range comparator"
        )
        return False
    try:
        low, high = to_float(bounds[0]), to_float(bounds[1])
    except ValueError as exc:
        write_comparator_error(f"Rule {rule.id}: {exc}")
        return False
    return _flip(low <= target <= high, rule)


def mirror(target: str, rule: Rule) -> bool:
    if _missing_value(rule, "Mirror"):
        return False
    return _flip(target == rule.value, rule)


def starts_with(target: str, rule: Rule) -> bool:
    if _missing_value(rule, "Starts With"):
        return False
    return _flip(target.startswith(rule.value), rule)


def ends_with(target: str, rule: Rule) -> bool:
    if _missing_value(rule, "End With"):
        return False
    return _flip(target.endswith(rule.value), rule)


def check(target: str, rule: Rule, store: Store) -> bool:
    words = _wordlist(rule, store, "Check")
    if words is None:
        return False
    return _flip(target in words, rule)


def regex(target: str, rule: Rule) -> bool:
    if _missing_value(rule, "Regex"):
        return False
    try:
        matched = re.search(rule.value, target) is not None
    except re.error as exc:
        write_comparator_error(f"Rule {rule.id}: {exc}")
        return False
    return _flip(matched, rule)


def check_regex(target: str, rule: Rule, store: Store) -> bool:
    words = _wordlist(rule, store, "Check Regex")
    if words is None:
        return False
    result = False
    for word in words:
        try:
            matched = re.search(word, target) is not None
        except re.error as exc:
            write_comparator_error(f"Rule {rule.id}: {exc}")
            break
        result = _flip(matched, rule)
        if result:
            break
    return result


_LIST_COMPARATORS: Dict[str, Callable[[List[str], Rule, Store], bool]] = {
    "@similar": similar,
    "@contains": lambda target, rule, store: contains(target, rule),
    "@match": lambda target, rule, store: match(target, rule),
    "@search": search,
}

_NUMBER_COMPARATORS: Dict[str, Callable[[float, Rule], bool]] = {
    "@equal": equal,
    "@greaterThan": greater_than,
    "@greaterThanOrEqual": greater_than_or_equal,
    "@lessThan": less_than,
    "@lessThanOrEqual": less_than_or_equal,
    "@inRange": in_range,
}

_STRING_COMPARATORS: Dict[str, Callable[[str, Rule, Store], bool]] = {
    "@mirror": lambda target, rule, store: mirror(target, rule),
    "@startsWith": lambda target, rule, store: starts_with(target, rule),
    "@endsWith": lambda target, rule, store: ends_with(target, rule),
    "@check": check,
    "@regex": lambda target, rule, store: regex(target, rule),
    "@checkRegex": check_regex,
}


def compare(target: Any, rule: Rule, store: Store) -> bool:
    """Dispatch on the target's type and the rule's comparator; False if none fits."""
    if isinstance(target, list):
        comparator = _LIST_COMPARATORS.get(rule.comparator)
        return comparator(target, rule, store) if comparator else False
    if isinstance(target, (int, float)) and not isinstance(target, bool):
        number = _NUMBER_COMPARATORS.get(rule.comparator)
        return number(float(target), rule) if number else False
    if isinstance(target, str):
        comparator = _STRING_COMPARATORS.get(rule.comparator)
        return comparator(target, rule, store) if comparator else False
    return False