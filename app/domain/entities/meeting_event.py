from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time


@dataclass(frozen=True)
class StaffMember:
    id: int
    name: str
    role: str = ""
    branch: str = ""
    icon: str = ""


@dataclass(frozen=True)
class ClassAssignment:
    id: int
    name: str
    is_included: bool = True
    staff: tuple[StaffMember, ...] = ()

    @property
    def staff_names(self) -> list[str]:
        return [member.name for member in self.staff]


@dataclass(frozen=True)
class MeetingEvent:
    title: str
    dates: tuple[date, ...]
    daily_start: time
    daily_end: time
    duration_minutes: int
    buffer_minutes: int = 0
    is_active: bool = True
    classes: tuple[ClassAssignment, ...] = ()
    id: int | None = None
    created_at: datetime | None = None

    def find_class(self, class_id: int) -> ClassAssignment | None:
        for assignment in self.classes:
            if assignment.id == class_id:
                return assignment
        return None

    def included_classes(self) -> list[ClassAssignment]:
        return [c for c in self.classes if c.is_included]


@dataclass(frozen=True)
class MeetingEventStats:
    unverified: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    by_class: dict[int, int] = field(default_factory=dict)
