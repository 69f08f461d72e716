# timetable_ga/initial_population.py
import random
from typing import List

from .catalog import Catalog
from .model import Gene, Individual


def gene_template(catalog: Catalog) -> List[Gene]:
    """
    Canonical gene order: assignments in catalog order, then instance
    0..times_per_week-1. Every individual of a run is laid out this way,
    so position i refers to the same meeting in all of them and crossover
    can splice by index.
    """
    genes: List[Gene] = []
    for a in catalog.assignments:
        for instance in range(a.times_per_week):
            genes.append(
                Gene(
                    assignment_id=a.id,
                    course_id=a.course_id,
                    faculty_id=a.faculty_id,
                    instance=instance,
                    classroom_idx=0,
                    day_idx=0,
                    time_slot_idx=0,
                )
            )
    return genes


def random_individual(catalog: Catalog, rng: random.Random) -> Individual:
    n_rooms = len(catalog.classrooms)
    n_days = len(catalog.days)
    n_slots = len(catalog.time_slots)
    genes = gene_template(catalog)
    for g in genes:
        g.classroom_idx = rng.randrange(n_rooms)
        g.day_idx = rng.randrange(n_days)
        g.time_slot_idx = rng.randrange(n_slots)
    return Individual(genes=genes)


def build_initial_population(
    catalog: Catalog,
    pop_size: int,
    rng: random.Random,
) -> List[Individual]:
    return [random_individual(catalog, rng) for _ in range(pop_size)]
