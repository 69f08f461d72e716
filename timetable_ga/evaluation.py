# timetable_ga/evaluation.py
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set

import numpy as np

from .catalog import Catalog
from .config import GAConfig
from .model import Gene, Individual

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    faculty: int
    classroom: int
    cohort: int
    conflicts: int
    distribution: float
    fitness: float
    # Occupancy matrices [entity][day][slot]
    faculty_occupancy: np.ndarray
    classroom_occupancy: np.ndarray
    cohort_occupancy: np.ndarray


def _occupancy(
    entity: Sequence[int],
    genes: Sequence[Gene],
    n_entities: int,
    catalog: Catalog,
) -> np.ndarray:
    occ = np.zeros((n_entities, len(catalog.days), len(catalog.time_slots)), dtype=int)
    if genes:
        days = np.fromiter((g.day_idx for g in genes), dtype=int, count=len(genes))
        slots = np.fromiter((g.time_slot_idx for g in genes), dtype=int, count=len(genes))
        np.add.at(occ, (np.asarray(entity, dtype=int), days, slots), 1)
    return occ


def _excess(occ: np.ndarray) -> int:
    # every extra occupant of a cell is one conflict
    return int(np.clip(occ - 1, 0, None).sum())


def faculty_occupancy(ind: Individual, catalog: Catalog) -> np.ndarray:
    index = dict(catalog.faculty_index)
    ids = [index.setdefault(g.faculty_id, len(index)) for g in ind.genes]
    return _occupancy(ids, ind.genes, len(index), catalog)


def classroom_occupancy(ind: Individual, catalog: Catalog) -> np.ndarray:
    ids = [catalog.classroom_identity[g.classroom_idx] for g in ind.genes]
    return _occupancy(ids, ind.genes, len(catalog.classrooms), catalog)


def cohort_occupancy(ind: Individual, catalog: Catalog) -> np.ndarray:
    ids: List[int] = []
    owned: List[Gene] = []
    for g in ind.genes:
        cohort = catalog.cohort_of(g.course_id)
        if cohort is None:
            continue
        ids.append(catalog.cohort_index[cohort.id])
        owned.append(g)
    return _occupancy(ids, owned, len(catalog.cohort_index), catalog)


def faculty_conflicts(ind: Individual, catalog: Catalog) -> int:
    return _excess(faculty_occupancy(ind, catalog))


def classroom_conflicts(ind: Individual, catalog: Catalog) -> int:
    return _excess(classroom_occupancy(ind, catalog))


def cohort_conflicts(ind: Individual, catalog: Catalog) -> int:
    return _excess(cohort_occupancy(ind, catalog))


def count_conflicts(ind: Individual, catalog: Catalog) -> int:
    return (
        faculty_conflicts(ind, catalog)
        + classroom_conflicts(ind, catalog)
        + cohort_conflicts(ind, catalog)
    )


def distribution_score(ind: Individual, catalog: Catalog, cfg: GAConfig) -> float:
    """
    Soft objective: reward each assignment for meeting on distinct days and
    for the gap between its first and last day, plus a flat bonus when the
    schedule uses enough different classrooms.
    """
    days_by_assignment: Dict[str, Set[int]] = defaultdict(set)
    for g in ind.genes:
        days_by_assignment[g.assignment_id].add(g.day_idx)

    score = 0.0
    for days in days_by_assignment.values():
        score += len(days) * cfg.day_bonus
        if len(days) > 1:
            score += (max(days) - min(days)) * cfg.spread_bonus

    used_rooms = {g.classroom_idx for g in ind.genes}
    if len(used_rooms) >= min(cfg.classroom_diversity, len(catalog.classrooms)):
        score += cfg.classroom_bonus
    return score


def max_distribution_score(catalog: Catalog, cfg: GAConfig) -> float:
    n_days = len(catalog.days)
    demand: Dict[str, int] = defaultdict(int)
    for a in catalog.assignments:
        demand[a.id] += a.times_per_week

    bound = float(cfg.classroom_bonus)
    for times in demand.values():
        distinct = min(times, n_days)
        bound += distinct * cfg.day_bonus
        if distinct > 1:
            bound += (n_days - 1) * cfg.spread_bonus
    return bound


def effective_conflict_weight(catalog: Catalog, cfg: GAConfig) -> float:
    """Conflict weight large enough that no distribution bonus can offset a conflict."""
    bound = max_distribution_score(catalog, cfg)
    if cfg.conflict_weight > bound:
        return cfg.conflict_weight
    logger.warning(
        "conflict_weight=%s does not dominate the distribution bound %.0f; using %.0f",
        cfg.conflict_weight, bound, bound + 1,
    )
    return bound + 1


def fitness_of(distribution: float, conflicts: int, weight: float) -> float:
    return distribution - weight * conflicts


def evaluate(
    ind: Individual,
    catalog: Catalog,
    cfg: GAConfig,
    conflict_weight: Optional[float] = None,
) -> EvaluationResult:
    weight = cfg.conflict_weight if conflict_weight is None else conflict_weight

    occ_faculty = faculty_occupancy(ind, catalog)
    occ_room = classroom_occupancy(ind, catalog)
    occ_cohort = cohort_occupancy(ind, catalog)
    fi, ai, ci = _excess(occ_faculty), _excess(occ_room), _excess(occ_cohort)

    conflicts = fi + ai + ci
    dist = distribution_score(ind, catalog, cfg)
    fit = fitness_of(dist, conflicts, weight)

    ind.conflict_count = conflicts
    ind.fitness = fit

    return EvaluationResult(
        faculty=fi,
        classroom=ai,
        cohort=ci,
        conflicts=conflicts,
        distribution=dist,
        fitness=fit,
        faculty_occupancy=occ_faculty,
        classroom_occupancy=occ_room,
        cohort_occupancy=occ_cohort,
    )
