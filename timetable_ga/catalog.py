# timetable_ga/catalog.py
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .model import Assignment, Cohort, Course, Faculty, TimeSlot


class CatalogError(ValueError):
    """Raised when the constraint data cannot be used to build a timetable."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))


@dataclass
class Catalog:
    cohorts: List[Cohort]
    faculty: List[Faculty]
    classrooms: List[str]
    days: List[str]
    time_slots: List[TimeSlot]
    assignments: List[Assignment]

    # Derived lookups, built once
    course_cohort: Dict[str, Cohort] = field(init=False, repr=False)
    courses: Dict[str, Course] = field(init=False, repr=False)
    faculty_by_id: Dict[str, Faculty] = field(init=False, repr=False)
    faculty_index: Dict[str, int] = field(init=False, repr=False)
    cohort_index: Dict[str, int] = field(init=False, repr=False)
    classroom_identity: List[int] = field(init=False, repr=False)

    def __post_init__(self):
        self.course_cohort = {}
        self.courses = {}
        for cohort in self.cohorts:
            for course in cohort.courses:
                # first cohort listing a course owns it
                self.course_cohort.setdefault(course.id, cohort)
                self.courses.setdefault(course.id, course)

        self.faculty_by_id = {f.id: f for f in self.faculty}
        self.faculty_index = {}
        for fid in [f.id for f in self.faculty] + [a.faculty_id for a in self.assignments]:
            self.faculty_index.setdefault(fid, len(self.faculty_index))

        self.cohort_index = {}
        for cohort in self.cohorts:
            self.cohort_index.setdefault(cohort.id, len(self.cohort_index))

        first_seen: Dict[str, int] = {}
        self.classroom_identity = [
            first_seen.setdefault(label, idx) for idx, label in enumerate(self.classrooms)
        ]

    @property
    def total_demand(self) -> int:
        return sum(a.times_per_week for a in self.assignments)

    def cohort_of(self, course_id: str) -> Optional[Cohort]:
        return self.course_cohort.get(course_id)

    def course(self, course_id: str) -> Optional[Course]:
        return self.courses.get(course_id)

    def faculty_member(self, faculty_id: str) -> Optional[Faculty]:
        return self.faculty_by_id.get(faculty_id)

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> "Catalog":
        """
        Build a catalog from the request payload.

        Accepts the camelCase keys of the JSON API (``standards``,
        ``daysOfWeek``, ``timeSlots``, ``courseId`` ...) and their snake_case
        spellings.
        """
        if not isinstance(doc, dict):
            raise CatalogError(["Catalog document must be a mapping"])
        errors: List[str] = []

        cohorts = _entries(doc, ("standards", "cohorts"), "Standard", _cohort, errors)
        faculty = _entries(doc, ("faculty",), "Faculty", _faculty, errors)
        classrooms = [
            _classroom_label(raw, n) for n, raw in enumerate(_get(doc, "classrooms") or [], start=1)
        ]
        days = [str(d) for d in _get(doc, "daysOfWeek", "days_of_week", "days") or []]
        time_slots = [_time_slot(raw) for raw in _get(doc, "timeSlots", "time_slots") or []]
        assignments = _entries(doc, ("assignments",), "Assignment", _assignment, errors)

        if errors:
            raise CatalogError(errors)
        return cls(
            cohorts=cohorts,
            faculty=faculty,
            classrooms=classrooms,
            days=days,
            time_slots=time_slots,
            assignments=assignments,
        )


def _get(raw: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in raw:
            return raw[k]
    return None


def _entries(
    doc: Dict[str, Any],
    keys: Tuple[str, ...],
    kind: str,
    build: Callable[[Dict[str, Any], int, List[str]], Any],
    errors: List[str],
) -> List[Any]:
    out = []
    for n, raw in enumerate(_get(doc, *keys) or [], start=1):
        if not isinstance(raw, dict):
            errors.append(f"{kind} {n}: entry must be a mapping, got {raw!r}")
            continue
        item = build(raw, n, errors)
        if item is not None:
            out.append(item)
    return out


def _cohort(raw: Dict[str, Any], n: int, errors: List[str]) -> Optional[Cohort]:
    ok = True
    courses: List[Course] = []
    for m, c in enumerate(raw.get("courses") or [], start=1):
        if not isinstance(c, dict) or "id" not in c:
            errors.append(f"Standard {n}, course {m}: entry must be a mapping with an 'id'")
            ok = False
            continue
        courses.append(
            Course(
                id=str(c["id"]),
                name=str(c.get("name", c["id"])),
                code=str(_get(c, "courseCode", "course_code", "code") or ""),
            )
        )
    if "id" not in raw:
        errors.append(f"Standard {n}: missing field 'id'")
        return None
    if not ok:
        return None
    return Cohort(id=str(raw["id"]), name=str(raw.get("name", raw["id"])), courses=tuple(courses))


def _faculty(raw: Dict[str, Any], n: int, errors: List[str]) -> Optional[Faculty]:
    if "id" not in raw:
        errors.append(f"Faculty {n}: missing field 'id'")
        return None
    return Faculty(
        id=str(raw["id"]),
        name=str(raw.get("name", raw["id"])),
        code=str(_get(raw, "facultyCode", "faculty_code", "code") or ""),
    )


def _assignment(raw: Dict[str, Any], n: int, errors: List[str]) -> Optional[Assignment]:
    times = _get(raw, "timesPerWeek", "times_per_week")
    try:
        times = int(times if times is not None else 1)
    except (TypeError, ValueError):
        errors.append(f"Assignment {n}: timesPerWeek must be an integer")
        return None
    return Assignment(
        id=str(raw.get("id") or f"A{n}"),
        course_id=str(_get(raw, "courseId", "course_id") or ""),
        faculty_id=str(_get(raw, "facultyId", "faculty_id") or ""),
        times_per_week=times,
    )


def _classroom_label(raw: Any, n: int) -> str:
    if isinstance(raw, dict):
        label = _get(raw, "name", "label", "id")
        # unnamed rooms must not collapse into one
        return str(label) if label is not None else f"Room {n}"
    return str(raw)


def _time_slot(raw: Any) -> TimeSlot:
    if isinstance(raw, dict):
        start = str(_get(raw, "startTime", "start_time", "start") or "")
        end = str(_get(raw, "endTime", "end_time", "end") or "")
        label = str(raw.get("label") or (f"{start}-{end}" if end else start))
        return TimeSlot(label=label, start_time=start, end_time=end)
    return TimeSlot(label=str(raw), start_time=str(raw), end_time="")
