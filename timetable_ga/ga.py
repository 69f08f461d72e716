import logging
import random
import threading
import time
from typing import Dict, List, Optional

from .catalog import Catalog
from .config import GAConfig
from .evaluation import effective_conflict_weight, evaluate
from .initial_population import build_initial_population
from .model import Individual
from .operators import midpoint_crossover, mutate, tournament_selection

logger = logging.getLogger(__name__)


class GeneticSolver:
    def __init__(self, catalog: Catalog, cfg: GAConfig, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.cfg = cfg
        self.rng = rng if rng is not None else random.Random(cfg.seed)
        self.conflict_weight = effective_conflict_weight(catalog, cfg)
        self.history: List[Dict] = []
        self.generations_run = 0
        self.stop_reason: Optional[str] = None

    def initial_population(self) -> List[Individual]:
        return build_initial_population(self.catalog, self.cfg.population_size, self.rng)

    def select(self, population: List[Individual]) -> Individual:
        return tournament_selection(population, self.cfg.tournament_size, self.rng)

    def offspring(self, population: List[Individual]) -> Individual:
        p1 = self.select(population)
        p2 = self.select(population)
        if self.rng.random() < self.cfg.crossover_rate:
            child = midpoint_crossover(p1, p2)
        else:
            child = p1.clone()
        return mutate(child, self.catalog, self.cfg.mutation_rate, self.rng)

    def _evaluate_all(self, population: List[Individual]) -> None:
        for ind in population:
            evaluate(ind, self.catalog, self.cfg, self.conflict_weight)
        # stable: equal fitness keeps current order (the conflict weight makes
        # equal fitness imply equal conflicts)
        population.sort(key=lambda x: x.fitness, reverse=True)

    def evolve(
        self,
        population: Optional[List[Individual]] = None,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Individual:
        """
        Run the search and return the best individual seen.

        ``deadline`` is a ``time.monotonic()`` timestamp; when omitted,
        ``cfg.time_limit_sec`` (if set) is measured from now. Both the deadline
        and ``cancel_event`` are checked once per generation, after scoring.
        """
        cfg = self.cfg
        if population is None:
            population = self.initial_population()
        if deadline is None and cfg.time_limit_sec is not None:
            deadline = time.monotonic() + cfg.time_limit_sec

        self.history = []
        self.generations_run = 0
        self.stop_reason = "budget"

        best_global: Optional[Individual] = None
        best_fitness = float("-inf")
        stagnation = 0

        for gen in range(cfg.generations):
            self._evaluate_all(population)
            self.generations_run = gen + 1

            if population and population[0].fitness > best_fitness:
                best_fitness = population[0].fitness
                best_global = population[0].clone()
                stagnation = 0
            else:
                stagnation += 1

            avg_fit = sum(ind.fitness for ind in population) / len(population) if population else 0.0
            self.history.append(
                {
                    "gen": gen,
                    "best_fitness": best_fitness,
                    "best_conflicts": best_global.conflict_count if best_global else None,
                    "top_fitness": population[0].fitness if population else None,
                    "avg_fitness": avg_fit,
                }
            )
            if cfg.log_every and gen % cfg.log_every == 0:
                logger.info(
                    "Gen %d: fitness=%.2f conflicts=%s avg=%.2f",
                    gen, best_fitness, best_global.conflict_count if best_global else "-", avg_fit,
                )

            if best_global is not None and best_global.conflict_count == 0 and stagnation > cfg.max_stagnation:
                self.stop_reason = "converged"
                logger.info("Conflict-free solution held for %d generations, stopping at gen %d", stagnation, gen)
                break
            if cancel_event is not None and cancel_event.is_set():
                self.stop_reason = "cancelled"
                logger.info("Run cancelled at gen %d", gen)
                break
            if deadline is not None and time.monotonic() >= deadline:
                self.stop_reason = "deadline"
                logger.info("Time limit reached at gen %d", gen)
                break

            new_pop: List[Individual] = []
            # Elitism
            for i in range(min(cfg.elite_size, len(population))):
                new_pop.append(population[i].clone())

            while len(new_pop) < cfg.population_size:
                new_pop.append(self.offspring(population))

            population = new_pop

        if best_global is None:
            # no generation ran (or empty population): score what we have
            self._evaluate_all(population)
            best_global = population[0].clone() if population else Individual()
            if not population:
                evaluate(best_global, self.catalog, cfg, self.conflict_weight)

        logger.info(
            "GA complete (%s) after %d generations: fitness=%.2f conflicts=%d",
            self.stop_reason, self.generations_run, best_global.fitness, best_global.conflict_count,
        )
        return best_global
