import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

Cut = Union[int, float, str]


@dataclass
class Standard:
    """
    A single named threshold.

    The meaning of `cut` depends on the comparison direction:
    - 'lower'  : cut is a maximum (metric <= cut qualifies)
    - 'higher' : cut is a minimum (metric >= cut qualifies)
    """
    label: str
    cut: Optional[Cut]
    id: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_value(cls, value: Union["Standard", Mapping[str, Any]]) -> "Standard":
        """
        Accept either a Standard or a mapping with 'label' and 'cut' keys.
        Raises ValueError if the value can't be read as a standard.
        """
        if isinstance(value, Standard):
            return value
        if not isinstance(value, Mapping) or not isinstance(value.get("label"), str) or not value.get("label"):
            raise ValueError(f"Not a valid standard: {value!r}")
        return cls(
            label=value["label"],
            cut=value.get("cut"),
            id=value.get("id"),
            description=value.get("description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"label": self.label, "cut": self.cut}
        if self.id is not None:
            out["id"] = self.id
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass
class PerformanceOptions:
    """
    Options for compute_performance. Callables left as None fall back to
    the duration parser / formatters in primitives.time_format.
    """
    direction: str = "lower"  # 'higher' | 'lower' | 'auto'
    levels: Optional[List[str]] = None  # worst -> best
    parser: Optional[Callable[[Cut], float]] = None
    format_absolute: Optional[Callable[[float], str]] = None
    format_relative: Optional[Callable[[float], str]] = None
    validation_mode: str = "warn"  # 'warn' | 'throw'

    _ALIASES = {
        "formatAbsolute": "format_absolute",
        "formatRelative": "format_relative",
        "validationMode": "validation_mode",
    }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PerformanceOptions":
        """Unrecognized keys are ignored."""
        kwargs = {}
        for key, value in data.items():
            name = cls._ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                logger.debug("Ignoring unknown performance option: %s", key)
                continue
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def coerce(cls, options: Union["PerformanceOptions", Mapping[str, Any], None]) -> "PerformanceOptions":
        """
        Accept None (defaults), a PerformanceOptions, or a plain dict.
        Raises TypeError for anything else.
        """
        if options is None:
            return cls()
        if isinstance(options, PerformanceOptions):
            return options
        if isinstance(options, Mapping):
            return cls.from_dict(options)
        raise TypeError(f"options must be PerformanceOptions or a dict, got {type(options).__name__}")


@dataclass
class DiffToNext:
    absolute: float
    relative: float  # percent

    def to_dict(self) -> Dict[str, float]:
        return {"absolute": self.absolute, "relative": self.relative}


@dataclass
class FormattedDiff:
    absolute: str
    relative: str

    def to_dict(self) -> Dict[str, str]:
        return {"absolute": self.absolute, "relative": self.relative}


@dataclass
class NextCut:
    """Label of the next standard plus a display string for its cut."""
    label: str
    cut: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "cut": self.cut}


@dataclass
class ValidationReport:
    valid: bool = True
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


@dataclass
class PerformanceResult:
    """
    Outcome of compute_performance.

    `index` points into the caller's original standards sequence, or is -1
    when no standard matched (label is then 'unknown' and `standard` is None).
    """
    label: str
    index: int
    standard: Optional[Standard] = None
    next_standard: Optional[Standard] = None
    next_cut: Optional[NextCut] = None
    diff_to_next: Optional[DiffToNext] = None
    diff_to_next_formatted: Optional[FormattedDiff] = None
    validation: ValidationReport = field(default_factory=ValidationReport)

    @property
    def matched(self) -> bool:
        return self.index >= 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this object to a Python dict (e.g., for JSON serialization).
        """
        return {
            "label": self.label,
            "index": self.index,
            "standard": self.standard.to_dict() if self.standard else None,
            "next_standard": self.next_standard.to_dict() if self.next_standard else None,
            "next_cut": self.next_cut.to_dict() if self.next_cut else None,
            "diff_to_next": self.diff_to_next.to_dict() if self.diff_to_next else None,
            "diff_to_next_formatted": (
                self.diff_to_next_formatted.to_dict() if self.diff_to_next_formatted else None
            ),
            "validation": self.validation.to_dict(),
        }


@dataclass
class PatternOutput:
    """
    A generic container for the result of a Pattern.
    """
    pattern_name: str
    pattern_version: str
    metric_id: str
    analysis_window: Dict[str, str]  # e.g. {"start_date": "...", "end_date": "..."}
    results: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern_name": self.pattern_name,
            "pattern_version": self.pattern_version,
            "metric_id": self.metric_id,
            "analysis_window": self.analysis_window,
            "results": self.results
        }
