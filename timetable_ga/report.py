# timetable_ga/report.py
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .catalog import Catalog
from .evaluation import EvaluationResult
from .model import Individual


@dataclass(frozen=True)
class ScheduledClass:
    day: str
    time_slot: str
    start_time: str
    end_time: str
    classroom: str
    standard: str
    course: str
    course_code: str
    faculty: str
    faculty_code: str
    assignment_id: str
    instance: int


def resolve_schedule(ind: Individual, catalog: Catalog) -> List[ScheduledClass]:
    """Replace the gene indices with the catalog labels they point to."""
    out: List[ScheduledClass] = []
    for g in ind.genes:
        slot = catalog.time_slots[g.time_slot_idx]
        cohort = catalog.cohort_of(g.course_id)
        course = catalog.course(g.course_id)
        fac = catalog.faculty_member(g.faculty_id)
        out.append(
            ScheduledClass(
                day=catalog.days[g.day_idx],
                time_slot=slot.label,
                start_time=slot.start_time,
                end_time=slot.end_time,
                classroom=catalog.classrooms[g.classroom_idx],
                standard=cohort.name if cohort else "",
                course=course.name if course else "",
                course_code=course.code if course else "",
                faculty=fac.name if fac else "",
                faculty_code=fac.code if fac else "",
                assignment_id=g.assignment_id,
                instance=g.instance,
            )
        )
    return out


def format_by_day(ind: Individual, catalog: Catalog) -> Dict[str, List[ScheduledClass]]:
    schedule: Dict[str, List[ScheduledClass]] = {day: [] for day in catalog.days}
    for cls in resolve_schedule(ind, catalog):
        schedule[cls.day].append(cls)
    for classes in schedule.values():
        classes.sort(key=lambda c: c.start_time)
    return schedule


def individual_to_dataframe(ind: Individual, catalog: Catalog) -> pd.DataFrame:
    day_order = {d: i for i, d in enumerate(catalog.days)}
    rows = [asdict(c) for c in resolve_schedule(ind, catalog)]
    df = pd.DataFrame(rows, columns=list(ScheduledClass.__dataclass_fields__))
    if df.empty:
        return df
    df["_day"] = df["day"].map(day_order)
    df = df.sort_values(["_day", "start_time", "standard"], kind="stable").drop(columns="_day")
    return df.reset_index(drop=True)


def timetable_grid(df: pd.DataFrame) -> pd.DataFrame:
    """
    Space-time view: one row per (day, standard), one column per start time.
    Clashing meetings of the same standard share a cell, one per line.
    """
    if df.empty:
        return pd.DataFrame()
    cells = df.assign(
        cell=df["course"] + " (" + df["faculty"] + ")\n" + df["classroom"]
    )
    grid = (
        cells.groupby(["day", "standard", "start_time"], sort=False)["cell"]
        .agg("\n".join)
        .unstack("start_time")
    )
    # keep the day order of df rather than alphabetical
    rows = pd.MultiIndex.from_tuples(
        list(dict.fromkeys(zip(df["day"], df["standard"]))), names=["day", "standard"]
    )
    return grid.reindex(index=rows, columns=sorted(grid.columns)).fillna("")


def summary(ind: Individual) -> Dict[str, object]:
    return {
        "conflicts": ind.conflict_count,
        "fitness": round(float(ind.fitness), 2),
        "class_count": len(ind.genes),
    }


def export_outputs(
    df_schedule: pd.DataFrame,
    eval_res: EvaluationResult,
    out_dir: Path,
    history: Optional[Iterable[Dict]] = None,
) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    df_schedule.to_csv(out_dir / "schedule.csv", index=False)
    conflicts = pd.DataFrame(
        [
            {"type": "faculty", "value": eval_res.faculty},
            {"type": "classroom", "value": eval_res.classroom},
            {"type": "standard", "value": eval_res.cohort},
            {"type": "total", "value": eval_res.conflicts},
            {"type": "distribution", "value": eval_res.distribution},
            {"type": "fitness", "value": eval_res.fitness},
        ]
    )
    conflicts.to_csv(out_dir / "conflicts.csv", index=False)
    with pd.ExcelWriter(out_dir / "timetable.xlsx", engine="openpyxl") as writer:
        timetable_grid(df_schedule).to_excel(writer, sheet_name="Timetable")
        df_schedule.to_excel(writer, sheet_name="Classes", index=False)
    if history:
        pd.DataFrame(list(history)).to_csv(out_dir / "history.csv", index=False)
