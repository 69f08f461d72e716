import random
from typing import List

from .catalog import Catalog
from .model import Individual


def tournament_selection(
    population: List[Individual],
    tournament_size: int,
    rng: random.Random,
) -> Individual:
    """Fittest of ``tournament_size`` draws with replacement; earliest draw wins ties."""
    best = None
    for _ in range(tournament_size):
        candidate = population[rng.randrange(len(population))]
        if best is None or candidate.fitness > best.fitness:
            best = candidate
    return best


def midpoint_crossover(p1: Individual, p2: Individual) -> Individual:
    """Single-point crossover: first half of p1, second half of p2, by position."""
    if len(p1.genes) != len(p2.genes):
        raise ValueError(
            f"parents differ in gene count ({len(p1.genes)} vs {len(p2.genes)})"
        )
    point = len(p1.genes) // 2
    child_genes = [g.copy() for g in p1.genes[:point]]
    child_genes.extend(g.copy() for g in p2.genes[point:])
    return Individual(genes=child_genes)


def mutate(
    ind: Individual,
    catalog: Catalog,
    mutation_rate: float,
    rng: random.Random,
) -> Individual:
    """
    Resample one field (classroom, day or time slot) of each gene with
    probability ``mutation_rate``. Returns a new individual; fitness and
    conflict_count are copied from the input and stay stale until the next
    evaluation.
    """
    mutant = ind.clone()
    for g in mutant.genes:
        if rng.random() < mutation_rate:
            field = rng.randrange(3)
            if field == 0:
                g.classroom_idx = rng.randrange(len(catalog.classrooms))
            elif field == 1:
                g.day_idx = rng.randrange(len(catalog.days))
            else:
                g.time_slot_idx = rng.randrange(len(catalog.time_slots))
    return mutant
