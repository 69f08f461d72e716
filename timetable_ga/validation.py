"""
Input checks run before the search.

Validation catches references the search cannot resolve; the feasibility
check rejects catalogs whose demand cannot fit in the available slots.
Neither is needed by the search itself, which tolerates both.
"""
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional

from .catalog import Catalog, CatalogError


@dataclass(frozen=True)
class FeasibilityResult:
    is_possible: bool
    reason: Optional[str] = None


def validate_catalog(catalog: Catalog) -> List[str]:
    errors: List[str] = []

    if not catalog.cohorts:
        errors.append("At least one standard is required")
    if not catalog.faculty:
        errors.append("At least one faculty member is required")
    if not catalog.assignments:
        errors.append("At least one course assignment is required")
    if not catalog.classrooms:
        errors.append("At least one classroom is required")
    if not catalog.days:
        errors.append("At least one day must be selected")
    if not catalog.time_slots:
        errors.append("At least one time slot is required")

    seen = Counter(a.id for a in catalog.assignments)
    for aid, n in seen.items():
        if n > 1:
            errors.append(f"Assignment id {aid} is used {n} times")

    for idx, a in enumerate(catalog.assignments, start=1):
        if not a.course_id:
            errors.append(f"Assignment {idx}: No course selected")
        elif catalog.cohort_of(a.course_id) is None:
            errors.append(f"Assignment {idx}: Course {a.course_id} does not belong to any standard")
        if not a.faculty_id:
            errors.append(f"Assignment {idx}: No faculty selected")
        elif catalog.faculty_member(a.faculty_id) is None:
            errors.append(f"Assignment {idx}: Unknown faculty {a.faculty_id}")
        if a.times_per_week < 1:
            errors.append(f"Assignment {idx}: timesPerWeek must be at least 1")

    return errors


def check_feasibility(catalog: Catalog) -> FeasibilityResult:
    """Compare total demand with what rooms and faculty can absorb in a week."""
    n_rooms = len(catalog.classrooms)
    n_days = len(catalog.days)
    n_slots = len(catalog.time_slots)
    per_week = n_days * n_slots
    needed = catalog.total_demand

    available = n_rooms * per_week
    if needed > available:
        return FeasibilityResult(
            False,
            f"IMPOSSIBLE TIMETABLE: Need {needed} class slots but only {available} available "
            f"({n_rooms} classrooms x {n_days} days x {n_slots} time slots). "
            "Add more classrooms, days, or time slots.",
        )

    faculty_count = len({a.faculty_id for a in catalog.assignments})
    if needed > faculty_count * per_week:
        return FeasibilityResult(
            False,
            f"IMPOSSIBLE TIMETABLE: The {faculty_count} faculty members cannot teach {needed} "
            "required classes. Faculty would need to teach overlapping classes. Add more faculty members.",
        )

    load = Counter()
    for a in catalog.assignments:
        load[a.faculty_id] += a.times_per_week
    for fid, hours in sorted(load.items()):
        if hours > per_week:
            return FeasibilityResult(
                False,
                f"IMPOSSIBLE TIMETABLE: Faculty {fid} needs {hours} classes but a week only has "
                f"{per_week} day/time-slot combinations.",
            )

    return FeasibilityResult(True)


def ensure_valid(catalog: Catalog) -> None:
    errors = validate_catalog(catalog)
    if errors:
        raise CatalogError(errors)
    feasibility = check_feasibility(catalog)
    if not feasibility.is_possible:
        raise CatalogError([feasibility.reason])
