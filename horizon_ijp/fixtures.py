"""
Static seed data for the data store.

The fixtures live in ``data/fixtures.yaml`` next to this module, one
top-level list per collection.  ``load_fixtures`` returns them as plain
dictionaries ready to be serialized into the store.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .store import STORAGE_KEYS

FIXTURES_PATH = Path(__file__).parent / "data" / "fixtures.yaml"


def load_fixtures(path: Optional[Path] = None) -> Dict[str, List[Dict[str, Any]]]:
    """Read seed records for every collection.

    Args:
        path: YAML file to read; defaults to the bundled fixtures.

    Returns:
        Mapping of collection name to a list of record dictionaries.
        Collections missing from the file map to an empty list.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid YAML or has the wrong shape.
    """
    path = Path(path) if path is not None else FIXTURES_PATH
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid fixture file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Fixture file {path} must contain a mapping of collections")

    fixtures: Dict[str, List[Dict[str, Any]]] = {}
    for name in STORAGE_KEYS:
        records = data.get(name) or []
        if not isinstance(records, list):
            raise ValueError(f"Fixture collection '{name}' must be a list")
        fixtures[name] = records
    return fixtures
