"""
mimeburst/explode/events.py
---------------------------
What a run reports back, one event per leaf or aborted branch, plus the
summary a caller uses to pick an exit status.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Union


@dataclass(frozen=True)
class PartWritten:
    name: str
    byte_length: int
    depth: int = 1

    kind: ClassVar[str] = "part_written"
    fatal: ClassVar[bool] = False


@dataclass(frozen=True)
class PartFailed:
    reason: str
    name: Optional[str] = None
    depth: int = 1

    kind: ClassVar[str] = "part_failed"
    fatal: ClassVar[bool] = False


@dataclass(frozen=True)
class BranchTruncated:
    boundary: str
    depth: int

    kind: ClassVar[str] = "branch_truncated"
    fatal: ClassVar[bool] = False


@dataclass(frozen=True)
class DepthExceeded:
    boundary: str
    depth: int

    kind: ClassVar[str] = "depth_exceeded"
    fatal: ClassVar[bool] = False


Event = Union[PartWritten, PartFailed, BranchTruncated, DepthExceeded]


def event_to_dict(event: Event) -> Dict[str, Any]:
    return {"kind": event.kind, **asdict(event)}


@dataclass
class RunSummary:
    files_written: int = 0
    parts_failed: int = 0
    branches_aborted: int = 0
    written: List[str] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.parts_failed == 0 and self.branches_aborted == 0

    def add(self, event: Event) -> None:
        self.events.append(event)
        if isinstance(event, PartWritten):
            self.files_written += 1
            self.written.append(event.name)
        elif isinstance(event, PartFailed):
            self.parts_failed += 1
        else:
            self.branches_aborted += 1

    @classmethod
    def from_events(cls, events: Iterable[Event]) -> "RunSummary":
        summary = cls()
        for event in events:
            summary.add(event)
        return summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files_written": self.files_written,
            "parts_failed": self.parts_failed,
            "branches_aborted": self.branches_aborted,
            "written": list(self.written),
        }
