import json
import tempfile
import unittest
from pathlib import Path

import yaml

from timetable_ga.catalog import Catalog, CatalogError
from timetable_ga.config import GAConfig, load_config
from timetable_ga.data_loader import load_catalog
from timetable_ga.evaluation import evaluate
from timetable_ga.model import Gene, Individual
from timetable_ga.report import (
    export_outputs,
    format_by_day,
    individual_to_dataframe,
    summary,
    timetable_grid,
)
from timetable_ga.validation import check_feasibility, ensure_valid, validate_catalog


def request_doc(**overrides):
    doc = {
        "standards": [
            {
                "id": "S1",
                "name": "Grade 1",
                "courses": [
                    {"id": "C1", "name": "Math", "courseCode": "MA1"},
                    {"id": "C2", "name": "Art", "courseCode": "AR1"},
                ],
            },
            {"id": "S2", "name": "Grade 2", "courses": [{"id": "C1", "name": "Math"}]},
        ],
        "faculty": [
            {"id": "F1", "name": "Ada", "facultyCode": "ADA"},
            {"id": "F2", "name": "Alan", "facultyCode": "AT"},
        ],
        "classrooms": ["R1", "R2"],
        "daysOfWeek": ["Mon", "Tue"],
        "timeSlots": [
            {"startTime": "10:00", "endTime": "11:00"},
            {"startTime": "09:00", "endTime": "10:00"},
        ],
        "assignments": [
            {"id": "A1", "courseId": "C1", "facultyId": "F1", "timesPerWeek": "2"},
            {"courseId": "C2", "facultyId": "F2", "timesPerWeek": 1},
        ],
    }
    doc.update(overrides)
    return doc


class CatalogTests(unittest.TestCase):
    def test_from_request_payload(self):
        cat = Catalog.from_dict(request_doc())
        self.assertEqual(cat.total_demand, 3)
        self.assertEqual([a.id for a in cat.assignments], ["A1", "A2"])
        self.assertEqual(cat.assignments[0].times_per_week, 2)
        self.assertEqual(cat.time_slots[1].label, "09:00-10:00")
        self.assertEqual(cat.faculty_member("F1").code, "ADA")
        self.assertEqual(cat.course("C1").code, "MA1")

    def test_first_standard_owns_shared_course(self):
        cat = Catalog.from_dict(request_doc())
        self.assertEqual(cat.cohort_of("C1").id, "S1")
        self.assertIsNone(cat.cohort_of("nope"))

    def test_bad_times_per_week(self):
        doc = request_doc(assignments=[{"courseId": "C1", "facultyId": "F1", "timesPerWeek": "twice"}])
        with self.assertRaises(CatalogError) as ctx:
            Catalog.from_dict(doc)
        self.assertIn("timesPerWeek", ctx.exception.errors[0])

    def test_load_json_and_yaml(self):
        with tempfile.TemporaryDirectory() as tmp:
            jpath = Path(tmp) / "catalog.json"
            ypath = Path(tmp) / "catalog.yaml"
            jpath.write_text(json.dumps(request_doc()), encoding="utf-8")
            ypath.write_text(yaml.safe_dump(request_doc()), encoding="utf-8")
            self.assertEqual(load_catalog(str(jpath)).total_demand, 3)
            self.assertEqual(load_catalog(str(ypath)).days, ["Mon", "Tue"])
            with self.assertRaises(CatalogError):
                load_catalog(str(Path(tmp) / "missing.json"))

    def test_entries_must_be_mappings(self):
        with self.assertRaises(CatalogError) as ctx:
            Catalog.from_dict({"standards": ["S1"], "assignments": []})
        self.assertIn("Standard 1: entry must be a mapping", ctx.exception.errors[0])

        with self.assertRaises(CatalogError) as ctx:
            Catalog.from_dict(request_doc(assignments=["A1"]))
        self.assertIn("Assignment 1: entry must be a mapping", ctx.exception.errors[0])

        with self.assertRaises(CatalogError):
            Catalog.from_dict(["not", "a", "mapping"])

    def test_unparseable_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            jpath = Path(tmp) / "broken.json"
            ypath = Path(tmp) / "broken.yaml"
            jpath.write_text("{not json", encoding="utf-8")
            ypath.write_text("standards: [unclosed", encoding="utf-8")
            with self.assertRaises(CatalogError) as ctx:
                load_catalog(str(jpath))
            self.assertIn("Could not parse broken.json", ctx.exception.errors[0])
            with self.assertRaises(CatalogError):
                load_catalog(str(ypath))

    def test_unnamed_classrooms_get_positional_labels(self):
        cat = Catalog.from_dict(request_doc(classrooms=[{"capacity": 30}, {"capacity": 40}]))
        self.assertEqual(cat.classrooms, ["Room 1", "Room 2"])
        self.assertEqual(cat.classroom_identity, [0, 1])


class ValidationTests(unittest.TestCase):
    def test_valid_catalog(self):
        cat = Catalog.from_dict(request_doc())
        self.assertEqual(validate_catalog(cat), [])
        self.assertTrue(check_feasibility(cat).is_possible)
        ensure_valid(cat)

    def test_reports_missing_pieces(self):
        doc = request_doc(
            classrooms=[],
            assignments=[
                {"id": "A1", "courseId": "C9", "facultyId": "F1", "timesPerWeek": 1},
                {"id": "A1", "courseId": "C1", "facultyId": "F7", "timesPerWeek": 0},
            ],
        )
        errors = validate_catalog(Catalog.from_dict(doc))
        self.assertIn("At least one classroom is required", errors)
        self.assertTrue(any("A1 is used 2 times" in e for e in errors))
        self.assertTrue(any("C9 does not belong" in e for e in errors))
        self.assertTrue(any("Unknown faculty F7" in e for e in errors))
        self.assertTrue(any("at least 1" in e for e in errors))

    def test_not_enough_room_slots(self):
        doc = request_doc(
            classrooms=["R1"],
            assignments=[
                {"id": "A1", "courseId": "C1", "facultyId": "F1", "timesPerWeek": 3},
                {"id": "A2", "courseId": "C2", "facultyId": "F2", "timesPerWeek": 2},
            ],
        )
        res = check_feasibility(Catalog.from_dict(doc))
        self.assertFalse(res.is_possible)
        self.assertIn("Need 5 class slots but only 4 available", res.reason)

    def test_overloaded_teacher(self):
        doc = request_doc(
            classrooms=["R1", "R2", "R3"],
            assignments=[
                {"id": "A1", "courseId": "C1", "facultyId": "F1", "timesPerWeek": 5},
                {"id": "A2", "courseId": "C2", "facultyId": "F2", "timesPerWeek": 1},
            ],
        )
        cat = Catalog.from_dict(doc)
        res = check_feasibility(cat)
        self.assertFalse(res.is_possible)
        self.assertIn("Faculty F1 needs 5 classes", res.reason)
        with self.assertRaises(CatalogError):
            ensure_valid(cat)


class ConfigTests(unittest.TestCase):
    def test_defaults(self):
        cfg = GAConfig()
        self.assertEqual(
            (cfg.population_size, cfg.generations, cfg.elite_size, cfg.tournament_size),
            (100, 300, 8, 5),
        )
        self.assertEqual((cfg.mutation_rate, cfg.crossover_rate), (0.15, 0.85))

    def test_load_yaml_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("generations: 12\nseed: 5\nunknown_key: 1\n", encoding="utf-8")
            cfg = load_config(str(path))
            self.assertEqual(cfg.generations, 12)
            self.assertEqual(cfg.seed, 5)
            self.assertEqual(cfg.population_size, 100)

            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(str(path))
            self.assertEqual(load_config(str(Path(tmp) / "none.yaml")).generations, 300)


class ReportTests(unittest.TestCase):
    def setUp(self):
        self.cat = Catalog.from_dict(request_doc())
        self.best = Individual(
            [
                Gene("A1", "C1", "F1", 0, classroom_idx=0, day_idx=1, time_slot_idx=0),
                Gene("A1", "C1", "F1", 1, classroom_idx=1, day_idx=1, time_slot_idx=1),
                Gene("A2", "C2", "F2", 0, classroom_idx=0, day_idx=0, time_slot_idx=1),
            ]
        )
        self.res = evaluate(self.best, self.cat, GAConfig())

    def test_format_by_day(self):
        by_day = format_by_day(self.best, self.cat)
        self.assertEqual(list(by_day), ["Mon", "Tue"])
        self.assertEqual([c.start_time for c in by_day["Tue"]], ["09:00", "10:00"])
        first = by_day["Mon"][0]
        self.assertEqual((first.course, first.faculty, first.classroom, first.standard), ("Art", "Alan", "R1", "Grade 1"))

    def test_dataframe_and_grid(self):
        df = individual_to_dataframe(self.best, self.cat)
        self.assertEqual(len(df), 3)
        self.assertEqual(list(df["day"]), ["Mon", "Tue", "Tue"])
        grid = timetable_grid(df)
        self.assertEqual(list(grid.columns), ["09:00", "10:00"])
        self.assertEqual(grid.loc[("Tue", "Grade 1"), "10:00"], "Math (Ada)\nR1")
        self.assertEqual(grid.loc[("Mon", "Grade 1"), "10:00"], "")

    def test_summary(self):
        self.assertEqual(summary(self.best)["class_count"], 3)
        self.assertEqual(summary(self.best)["conflicts"], self.res.conflicts)

    def test_export_outputs(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "out"
            export_outputs(individual_to_dataframe(self.best, self.cat), self.res, out, [{"gen": 0, "best_fitness": 1.0}])
            for name in ("schedule.csv", "conflicts.csv", "timetable.xlsx", "history.csv"):
                self.assertTrue((out / name).exists(), name)


if __name__ == "__main__":
    unittest.main()
