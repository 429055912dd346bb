from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from standards_app.performance_engine.data_structures import PerformanceOptions, Standard
from .transformers import transform_swimming_standards


@dataclass
class StandardSet:
    """
    A named set of standards from the TOML catalog, e.g. one event/age group.
    """
    id: str
    label: str
    unit: str = "seconds"
    direction: str = "lower"
    levels: List[str] = field(default_factory=list)  # worst -> best
    cuts: Dict[str, Any] = field(default_factory=dict)  # level -> cut, as written
    description: Optional[str] = None

    def to_standards(self) -> List[Standard]:
        return transform_swimming_standards(self.cuts, self.levels)

    def to_options(self, **overrides) -> PerformanceOptions:
        """PerformanceOptions with this set's direction and levels; kwargs override."""
        params = {"direction": self.direction, "levels": list(self.levels) or None}
        params.update(overrides)
        return PerformanceOptions(**params)


@dataclass
class StandardsCatalog:
    """
    A container for all standard sets.
    """
    standard_sets: List[StandardSet] = field(default_factory=list)
