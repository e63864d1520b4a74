"""Data classes for the trainer domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

TABLES = range(0, 11)
DIVISION_TABLES = range(1, 11)
EXERCISE_COUNTS = (10, 20, 50, "all")
DEFAULT_EXERCISE_COUNT = 10
MAX_SCORE = 10


class Operation(Enum):
    MULTIPLICATION = "multiplication"
    DIVISION = "division"

    @property
    def symbol(self) -> str:
        return "×" if self is Operation.MULTIPLICATION else "÷"

    @property
    def valid_tables(self) -> range:
        return TABLES if self is Operation.MULTIPLICATION else DIVISION_TABLES


@dataclass(frozen=True)
class Exercise:
    a: int
    b: int
    op: Operation
    result: int
    display: Optional[str] = None
    is_challenge: bool = False

    @property
    def text(self) -> str:
        """Question as shown to the learner, without the answer."""
        if self.display:
            return self.display
        return f"{self.a} {self.op.symbol} {self.b}"

    def to_dict(self) -> dict:
        data = {"a": self.a, "b": self.b, "op": self.op.value, "result": self.result,
                "isChallenge": self.is_challenge}
        if self.display is not None:
            data["display"] = self.display
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        return cls(
            a=int(data["a"]),
            b=int(data["b"]),
            op=Operation(data["op"]),
            result=int(data["result"]),
            display=data.get("display"),
            is_challenge=bool(data.get("isChallenge", False)),
        )


def is_valid_exercise_count(value) -> bool:
    """10, 20, 50 as real ints (not bools or floats), or "all"."""
    if isinstance(value, str):
        return value == "all"
    return type(value) is int and value in EXERCISE_COUNTS


def _clean_tables(values, valid: range) -> list[int]:
    if not isinstance(values, (list, tuple, set, range)):
        return []
    tables = set()
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        if value in valid:
            tables.add(value)
    return sorted(tables)


@dataclass
class UserSettings:
    multiplication_tables: list[int] = field(default_factory=list)
    division_tables: list[int] = field(default_factory=list)
    exercise_count: Union[int, str] = DEFAULT_EXERCISE_COUNT
    player_name: str = ""

    def __post_init__(self):
        self.multiplication_tables = _clean_tables(self.multiplication_tables, TABLES)
        self.division_tables = _clean_tables(self.division_tables, DIVISION_TABLES)
        if not is_valid_exercise_count(self.exercise_count):
            self.exercise_count = DEFAULT_EXERCISE_COUNT

    @property
    def has_tables(self) -> bool:
        return bool(self.multiplication_tables or self.division_tables)

    def tables_for(self, op: Operation) -> list[int]:
        if op is Operation.MULTIPLICATION:
            return self.multiplication_tables
        return self.division_tables

    def to_dict(self) -> dict:
        return {
            "playerName": self.player_name,
            "multiplicationTables": list(self.multiplication_tables),
            "divisionTables": list(self.division_tables),
            "exerciseCount": self.exercise_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserSettings":
        name = data.get("playerName", "")
        return cls(
            multiplication_tables=data.get("multiplicationTables") or [],
            division_tables=data.get("divisionTables") or [],
            exercise_count=data.get("exerciseCount", DEFAULT_EXERCISE_COUNT),
            player_name=name if isinstance(name, str) else "",
        )


@dataclass(frozen=True)
class HistoryEntry:
    exercise: Exercise
    correct: bool


@dataclass
class SessionStats:
    correct: int = 0
    total: int = 0

    @property
    def incorrect(self) -> int:
        return self.total - self.correct

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.correct / self.total * 100, 1)


@dataclass
class SessionResult:
    id: str
    player_name: str
    correct: int
    total: int
    timestamp: int  # epoch milliseconds

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.correct / self.total * 100, 1)

    def to_dict(self) -> dict:
        return {"id": self.id, "playerName": self.player_name, "correct": self.correct,
                "total": self.total, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "SessionResult":
        return cls(
            id=str(data["id"]),
            player_name=str(data.get("playerName", "")),
            correct=int(data["correct"]),
            total=int(data["total"]),
            timestamp=int(data["timestamp"]),
        )
