# timetable_ga/data_loader.py
import json
from pathlib import Path

import yaml

from .catalog import Catalog, CatalogError


def parse_catalog(text: str, name: str) -> Catalog:
    """Parse catalog text; YAML when ``name`` ends in .yaml/.yml, JSON otherwise."""
    try:
        if name.lower().endswith((".yaml", ".yml")):
            doc = yaml.safe_load(text)
        else:
            doc = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise CatalogError([f"Could not parse {name}: {exc}"]) from exc
    return Catalog.from_dict(doc or {})


def load_catalog(path: str) -> Catalog:
    """Read a catalog document (.json, .yaml or .yml) from disk."""
    p = Path(path)
    if not p.exists():
        raise CatalogError([f"Catalog file not found: {path}"])
    return parse_catalog(p.read_text(encoding="utf-8"), p.name)
