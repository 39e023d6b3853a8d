"""Composite outcome type shared by phase hooks, actions and engine runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class Severity(IntEnum):
    """Outcome severities; a composite reports the highest one it contains."""

    OK = 0
    INFO = 1
    WARNING = 2
    CANCEL = 3
    ERROR = 4


@dataclass(slots=True, eq=False)
class Status:
    """Outcome of one step, optionally carrying child outcomes.

    ``level`` is the severity of this node alone. ``severity`` aggregates the
    node with all of its descendants, so a parent created as OK turns into an
    ERROR as soon as a failing child is added.
    """

    level: Severity = Severity.OK
    message: str = ""
    exception: BaseException | None = None
    children: list[Status] = field(default_factory=list["Status"])

    @classmethod
    def ok(cls, message: str = "") -> Status:
        return cls(Severity.OK, message)

    @classmethod
    def info(cls, message: str) -> Status:
        return cls(Severity.INFO, message)

    @classmethod
    def warning(cls, message: str) -> Status:
        return cls(Severity.WARNING, message)

    @classmethod
    def error(cls, message: str, exception: BaseException | None = None) -> Status:
        return cls(Severity.ERROR, message, exception)

    @classmethod
    def cancel(cls, message: str = "Operation cancelled") -> Status:
        return cls(Severity.CANCEL, message)

    @property
    def severity(self) -> Severity:
        return Severity(max([self.level, *(child.severity for child in self.children)]))

    @property
    def is_ok(self) -> bool:
        return self.severity is Severity.OK

    @property
    def is_failure(self) -> bool:
        """True for ERROR and CANCEL outcomes, the ones that stop a run."""

        return self.severity >= Severity.CANCEL

    def matches(self, *severities: Severity) -> bool:
        return self.severity in severities

    def add(self, child: Status | None) -> None:
        """Append ``child`` as-is; ``None`` is treated as an OK outcome and dropped."""

        if child is None:
            return
        self.children.append(child)

    def merge(self, other: Status | None) -> None:
        """Fold ``other`` into this status.

        Plain OK results are dropped to keep reports short. A bare container
        (OK level, no message) contributes its children directly instead of an
        extra nesting level.
        """

        if other is None:
            return
        if other.level is Severity.OK and not other.message:
            self.children.extend(other.children)
            return
        if other.is_ok and not other.children:
            return
        self.children.append(other)

    def walk(self) -> Iterator[Status]:
        """Yield this status and every descendant, depth first."""

        yield self
        for child in self.children:
            yield from child.walk()

    def failures(self) -> list[Status]:
        return [node for node in self.walk() if node.level >= Severity.CANCEL]

    def __str__(self) -> str:
        label = self.severity.name
        return f"{label}: {self.message}" if self.message else label
