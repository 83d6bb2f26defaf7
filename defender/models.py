"""Rule-set models and the in-memory store that holds them."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence


def _dict(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"expected an object, got {type(data).__name__}")
    return data


def _ids(data: Dict[str, Any], key: str) -> List[int]:
    return [int(item) for item in (data.get(key) or [])]


@dataclass
class Group:
    id: int = 0
    execution_order: int = 0
    level: int = 0
    name: str = ""
    rules: List[int] = field(default_factory=list)
    defender_id: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Group":
        data = _dict(data)
        return cls(
            id=int(data.get("id", 0)),
            execution_order=int(data.get("execution_order", 0)),
            level=int(data.get("level", 0)),
            name=data.get("name", ""),
            rules=_ids(data, "rules"),
            defender_id=int(data.get("defender_id", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Rule:
    id: int = 0
    name: str = ""
    alias: str = ""
    phase: int = 0
    target_id: int = 0
    comparator: str = ""
    inverse: bool = False
    value: Optional[str] = None
    action: Optional[str] = None
    action_configuration: Optional[str] = None
    severity: Optional[str] = None
    log: bool = False
    time: bool = False
    user_agent: bool = False
    client_ip: bool = False
    method: bool = False
    path: bool = False
    wordlist_id: Optional[int] = None
    output: bool = False
    target: bool = False
    rule: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        data = _dict(data)
        names = set(cls.__dataclass_fields__)
        return cls(**{key: value for key, value in data.items() if key in names})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Target:
    id: int = 0
    name: str = ""
    alias: str = ""
    type: str = ""
    engine: Optional[str] = None
    engine_configuration: Optional[str] = None
    phase: int = 0
    datatype: str = ""
    final_datatype: str = ""
    immutable: bool = False
    target_id: Optional[int] = None
    wordlist_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Target":
        data = _dict(data)
        names = set(cls.__dataclass_fields__)
        return cls(**{key: value for key, value in data.items() if key in names})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Wordlist:
    id: int = 0
    name: str = ""
    alias: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Wordlist":
        data = _dict(data)
        return cls(id=int(data.get("id", 0)), name=data.get("name", ""), alias=data.get("alias", ""))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Word:
    id: int = 0
    content: str = ""
    wordlist_id: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Word":
        data = _dict(data)
        return cls(
            id=int(data.get("id", 0)),
            content=data.get("content", ""),
            wordlist_id=int(data.get("wordlist_id", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Decision:
    id: int = 0
    name: str = ""
    phase_type: str = ""
    score: int = 0
    action: str = ""
    action_configuration: Optional[str] = None
    wordlist_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Decision":
        data = _dict(data)
        names = set(cls.__dataclass_fields__)
        return cls(**{key: value for key, value in data.items() if key in names})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Application:
    groups: List[Group] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    targets: List[Target] = field(default_factory=list)
    wordlists: List[Wordlist] = field(default_factory=list)
    words: List[Word] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Application":
        data = _dict(data)
        return cls(
            groups=[Group.from_dict(item) for item in data.get("groups") or []],
            rules=[Rule.from_dict(item) for item in data.get("rules") or []],
            targets=[Target.from_dict(item) for item in data.get("targets") or []],
            wordlists=[Wordlist.from_dict(item) for item in data.get("wordlists") or []],
            words=[Word.from_dict(item) for item in data.get("words") or []],
        )


@dataclass
class Revocation:
    groups: List[int] = field(default_factory=list)
    rules: List[int] = field(default_factory=list)
    targets: List[int] = field(default_factory=list)
    wordlists: List[int] = field(default_factory=list)
    words: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Revocation":
        data = _dict(data)
        return cls(**{name: _ids(data, name) for name in cls.__dataclass_fields__})


@dataclass
class Implementation:
    decisions: List[Decision] = field(default_factory=list)
    wordlists: List[Wordlist] = field(default_factory=list)
    words: List[Word] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Implementation":
        data = _dict(data)
        return cls(
            decisions=[Decision.from_dict(item) for item in data.get("decisions") or []],
            wordlists=[Wordlist.from_dict(item) for item in data.get("wordlists") or []],
            words=[Word.from_dict(item) for item in data.get("words") or []],
        )


@dataclass
class Suspension:
    decisions: List[int] = field(default_factory=list)
    wordlists: List[int] = field(default_factory=list)
    words: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Suspension":
        data = _dict(data)
        return cls(**{name: _ids(data, name) for name in cls.__dataclass_fields__})


_KINDS = ("groups", "rules", "targets", "wordlists", "words", "decisions")


@dataclass
class Store:
    """All loaded models keyed by id, plus groups ordered for execution."""

    groups: Dict[int, Group] = field(default_factory=dict)
    rules: Dict[int, Rule] = field(default_factory=dict)
    targets: Dict[int, Target] = field(default_factory=dict)
    wordlists: Dict[int, Wordlist] = field(default_factory=dict)
    words: Dict[int, Word] = field(default_factory=dict)
    decisions: Dict[int, Decision] = field(default_factory=dict)
    list_groups: List[Group] = field(default_factory=list)

    def _table(self, kind: str) -> Dict[int, Any]:
        if kind not in _KINDS:
            raise KeyError(f"unknown model kind: {kind}")
        return getattr(self, kind)

    def add(self, kind: str, items: Iterable[Any]) -> None:
        """Insert items whose id is not present yet."""
        table = self._table(kind)
        for item in items:
            table.setdefault(item.id, item)

    def remove(self, kind: str, ids: Iterable[int]) -> None:
        table = self._table(kind)
        for model_id in ids:
            table.pop(model_id, None)

    def words_of(self, wordlist_id: int) -> List[str]:
        return [word.content for word in self.words.values() if word.wordlist_id == wordlist_id]

    def refresh_groups(self) -> None:
        self.list_groups = list(self.groups.values())
        sort_groups(self.list_groups)


def validate_all(*args: Optional[Exception]) -> List[Exception]:
    """Collect the errors that are not None."""
    return [error for error in args if error is not None]


def sort_groups(groups: List[Group]) -> None:
    groups.sort(key=lambda group: group.execution_order)


def contains_id(models: Sequence[Any], model_id: int) -> bool:
    return any(model.id == model_id for model in models)