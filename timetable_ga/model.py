# timetable_ga/model.py
from dataclasses import dataclass, field, replace
from typing import List, Tuple

ClassroomIdx = int
DayIdx = int
SlotIdx = int


@dataclass(frozen=True)
class Course:
    id: str
    name: str
    code: str = ""


@dataclass(frozen=True)
class Cohort:
    # "standard" in the request payload
    id: str
    name: str
    courses: Tuple[Course, ...] = ()


@dataclass(frozen=True)
class Faculty:
    id: str
    name: str
    code: str = ""


@dataclass(frozen=True)
class TimeSlot:
    label: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class Assignment:
    id: str
    course_id: str
    faculty_id: str
    times_per_week: int


@dataclass
class Gene:
    # One weekly meeting of an assignment
    assignment_id: str
    course_id: str
    faculty_id: str
    instance: int
    classroom_idx: ClassroomIdx
    day_idx: DayIdx
    time_slot_idx: SlotIdx

    def copy(self) -> "Gene":
        return replace(self)


@dataclass
class Individual:
    genes: List[Gene] = field(default_factory=list)
    fitness: float = 0.0
    conflict_count: int = 0

    def clone(self) -> "Individual":
        return Individual(
            genes=[g.copy() for g in self.genes],
            fitness=self.fitness,
            conflict_count=self.conflict_count,
        )
