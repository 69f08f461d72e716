import argparse
import logging
import sys
import time
from pathlib import Path

from timetable_ga.catalog import CatalogError
from timetable_ga.config import load_config
from timetable_ga.data_loader import load_catalog
from timetable_ga.evaluation import evaluate
from timetable_ga.ga import GeneticSolver
from timetable_ga.report import export_outputs, format_by_day, individual_to_dataframe, summary
from timetable_ga.validation import ensure_valid


def print_schedule(best, catalog):
    print("\n" + "=" * 80)
    for day, classes in format_by_day(best, catalog).items():
        print(f"{day}:")
        for c in classes:
            print(f"  {c.time_slot:<14} {c.standard:<12} {c.course:<24} {c.faculty:<20} {c.classroom}")
    print("=" * 80 + "\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate a weekly timetable with a genetic algorithm")
    parser.add_argument("--catalog", required=True, help="JSON/YAML file with standards, faculty, rooms and assignments")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML configuration file")
    parser.add_argument("--out_dir", default="outputs", help="Directory for schedule.csv, conflicts.csv and timetable.xlsx")
    parser.add_argument("--seed", type=int, default=None, help="Overrides the seed in the config file")
    parser.add_argument("--time_limit", type=float, default=None, help="Wall-clock limit in seconds")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = load_config(args.config)
    if args.seed is not None:
        cfg.seed = args.seed
    if args.time_limit is not None:
        cfg.time_limit_sec = args.time_limit

    print("Loading catalog...")
    try:
        catalog = load_catalog(args.catalog)
        ensure_valid(catalog)
    except CatalogError as exc:
        for err in exc.errors:
            print(f"error: {err}", file=sys.stderr)
        return 2

    solver = GeneticSolver(catalog, cfg)

    print(f"Generations: {cfg.generations} | Population: {cfg.population_size} | Classes: {catalog.total_demand}")
    start = time.perf_counter()
    best = solver.evolve()
    elapsed = time.perf_counter() - start

    eval_res = evaluate(best, catalog, cfg, solver.conflict_weight)

    print("\n--- BEST SOLUTION ---")
    stats = summary(best)
    print(
        f"Fitness: {stats['fitness']:.2f} | Conflicts: {stats['conflicts']} | "
        f"Classes: {stats['class_count']} | Time: {elapsed:.2f}s | Stop: {solver.stop_reason}"
    )
    print(f"faculty={eval_res.faculty} classroom={eval_res.classroom} standard={eval_res.cohort}")
    if best.conflict_count > 0:
        print("WARNING: no conflict-free timetable was found within the generation budget")
    print_schedule(best, catalog)

    out_dir = Path(args.out_dir)
    export_outputs(individual_to_dataframe(best, catalog), eval_res, out_dir, solver.history)
    print(f"Results saved to {out_dir}/schedule.csv, conflicts.csv and timetable.xlsx")
    return 0


if __name__ == "__main__":
    sys.exit(main())
