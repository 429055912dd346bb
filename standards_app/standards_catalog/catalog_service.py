import logging
from typing import Dict, List, Union

from standards_app.core.exceptions import InvalidStandardReference, StandardsValidationError
from standards_app.performance_engine.data_structures import PerformanceResult
from standards_app.performance_engine.primitives.performance import compute_performance
from .catalog_models import StandardsCatalog, StandardSet

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self):
        self._catalog: StandardsCatalog = StandardsCatalog()
        self._sets_by_id: Dict[str, StandardSet] = {}

    def load_catalog(self, catalog: StandardsCatalog):
        self._catalog = catalog
        self._sets_by_id.clear()
        for s in catalog.standard_sets:
            self._sets_by_id.setdefault(s.id, s)

    def validate_catalog(self) -> bool:
        self._check_duplicate_ids()
        self._check_levels_have_cuts()
        self._check_level_ordering()
        return True

    def _check_duplicate_ids(self):
        ids = [s.id for s in self._catalog.standard_sets]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate standard set IDs found.")

    def _check_levels_have_cuts(self):
        for s in self._catalog.standard_sets:
            for level in s.levels:
                if level not in s.cuts:
                    raise InvalidStandardReference(
                        f"Standard set '{s.id}' declares level '{level}' with no cut.",
                        set_id=s.id
                    )

    def _check_level_ordering(self):
        # any schema diagnostic (bad direction, ordering, unparsable cut) fails the set;
        # the metric is irrelevant here, so use the first cut as a stand-in
        for s in self._catalog.standard_sets:
            standards = s.to_standards()
            if not standards:
                raise StandardsValidationError([f"Standard set '{s.id}' has no cuts"])
            try:
                compute_performance(standards[0].cut, standards, s.to_options(validation_mode="throw"))
            except StandardsValidationError as exc:
                logger.warning("Standard set '%s' failed validation: %s", s.id, exc)
                raise

    def get_standard_set(self, set_id: str) -> StandardSet:
        return self._sets_by_id[set_id]

    def all_standard_sets(self) -> List[StandardSet]:
        return list(self._sets_by_id.values())

    def evaluate(self, set_id: str, metric: Union[int, float, str], **overrides) -> PerformanceResult:
        """
        Grade `metric` against a catalog set, using the set's direction and levels.
        Keyword arguments override PerformanceOptions fields (e.g. formatters).
        """
        s = self.get_standard_set(set_id)
        return compute_performance(metric, s.to_standards(), s.to_options(**overrides))
