import toml
from typing import Any, Dict

from .catalog_models import StandardsCatalog, StandardSet


def parse_standards_toml(toml_str: str) -> StandardsCatalog:
    data = toml.loads(toml_str)
    raw_sets = data.get("standard_sets", [])

    return StandardsCatalog(standard_sets=[_parse_single_set(raw) for raw in raw_sets])


def _parse_single_set(raw: Dict[str, Any]) -> StandardSet:
    if "id" not in raw:
        raise ValueError(f"Standard set is missing an 'id': {raw}")
    set_id = raw["id"]
    cuts = dict(raw.get("cuts", {}))

    # levels default to the order the cuts were written in
    levels = list(raw.get("levels", cuts.keys()))

    return StandardSet(
        id=set_id,
        label=raw.get("label", set_id),
        unit=raw.get("unit", "seconds"),
        direction=raw.get("direction", "lower"),
        levels=levels,
        cuts=cuts,
        description=raw.get("description"),
    )
