import logging
import os

from standards_app.standards_catalog.catalog_parser import parse_standards_toml
from standards_app.standards_catalog.catalog_service import CatalogService

CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "config", "swim_standards.toml")

SAMPLES = {
    "100_free_scy": ["1:16.09", "1:10.59", "59.79", "57.09", 9999],
    "100_free_points": [250, 450, 800],
}

# points are not durations
OVERRIDES = {
    "100_free_points": {"format_absolute": lambda v: f"{v:g} pts"},
}


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    with open(CONFIG_PATH, "r") as f:
        toml_str = f.read()

    svc = CatalogService()
    svc.load_catalog(parse_standards_toml(toml_str))
    svc.validate_catalog()
    print("Standards catalog successfully loaded and validated!")

    for set_id, metrics in SAMPLES.items():
        print(f"== {svc.get_standard_set(set_id).label}")
        for metric in metrics:
            res = svc.evaluate(set_id, metric, **OVERRIDES.get(set_id, {}))
            print(f"metric={metric} -> label={res.label}")
            print("  diff_to_next (numeric):", res.diff_to_next.to_dict() if res.diff_to_next else None)
            print("  diff_to_next_formatted (string):",
                  res.diff_to_next_formatted.to_dict() if res.diff_to_next_formatted else None)


if __name__ == "__main__":
    main()
