"""
Performance

Map a single metric onto an ordered set of threshold standards and report how far
it is from the next better one.

    compute_performance(metric, standards, options) -> PerformanceResult

Flow: resolve direction (explicit or inferred from `levels`) -> validate the
levels schema -> parse metric and cuts -> pick the tightest matching standard ->
look up the next better standard -> absolute/relative diff + formatting.

Schema and parse problems are collected as diagnostics in `result.validation`
unless validation_mode='throw', in which case StandardsValidationError is raised.
Exceptions from a custom parser are trapped and reported; exceptions from custom
formatters are not.
"""

import logging
import numbers
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from standards_app.core.exceptions import StandardsValidationError
from ..data_structures import (
    DiffToNext,
    FormattedDiff,
    NextCut,
    PerformanceOptions,
    PerformanceResult,
    Standard,
    ValidationReport,
)
from .time_format import format_duration, format_percent, parse_duration

logger = logging.getLogger(__name__)

HIGHER = "higher"
LOWER = "lower"
AUTO = "auto"
UNKNOWN_LABEL = "unknown"


class _StandardsView:
    """
    Read-only view over the caller's standards for one call.

    Each cut is parsed at most once; parser exceptions become diagnostics and
    the value is treated as NaN.
    """

    def __init__(self, standards: Sequence[Any], parser, errors: List[str]):
        self.parser = parser
        self.errors = errors
        self.entries: List[Optional[Standard]] = []
        self.by_label: Dict[str, int] = {}
        self._cuts: Dict[int, float] = {}

        for i, raw in enumerate(standards):
            try:
                self.entries.append(Standard.from_value(raw))
            except ValueError:
                errors.append(f"Standard at index {i} is not a valid standard")
                self.entries.append(None)

        # first occurrence wins for label lookups
        for i, std in enumerate(self.entries):
            if std is not None and std.label not in self.by_label:
                self.by_label[std.label] = i

    def parse(self, value) -> float:
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            return float(value)
        try:
            parsed = self.parser(value)
        except Exception as exc:
            self.errors.append(f"Parser error: {exc}")
            return np.nan
        try:
            return float(parsed)
        except (TypeError, ValueError):
            return np.nan

    def cut(self, idx: int) -> float:
        if idx not in self._cuts:
            std = self.entries[idx]
            self._cuts[idx] = np.nan if std is None else self.parse(std.cut)
        return self._cuts[idx]

    def cut_for_label(self, label: str) -> Optional[float]:
        idx = self.by_label.get(label)
        return None if idx is None else self.cut(idx)

    def parsed(self):
        """Yield (index, standard, cut) for every readable standard."""
        for idx, std in enumerate(self.entries):
            if std is not None:
                yield idx, std, self.cut(idx)


def _fmt_num(value: float) -> str:
    if np.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _resolve_direction(direction: Optional[str], levels: Optional[Sequence[str]], view: _StandardsView) -> str:
    if direction is None or direction == LOWER:
        return LOWER
    if direction == HIGHER:
        return HIGHER
    if direction != AUTO:
        view.errors.append(f"Unknown direction '{direction}'; defaulting to \"lower\"")
        return LOWER

    if not levels:
        view.errors.append('Auto-direction inference requires `levels`; defaulting to "lower"')
        return LOWER

    cuts = []
    for label in levels:
        cut = view.cut_for_label(label)
        if cut is None or np.isnan(cut):
            view.errors.append(
                'Auto-direction inference failed: missing/invalid cuts for some levels; defaulting to "lower"'
            )
            return LOWER
        cuts.append(cut)

    pairs = list(zip(cuts, cuts[1:]))
    increasing = bool(pairs) and all(b > a for a, b in pairs)
    decreasing = bool(pairs) and all(b < a for a, b in pairs)
    if increasing:
        return HIGHER
    if decreasing:
        return LOWER
    view.errors.append('Auto-direction inference failed: levels cuts are not monotonic; defaulting to "lower"')
    return LOWER


def _validate_levels(levels: Sequence[str], direction: str, view: _StandardsView) -> None:
    seen = set()
    for std in view.entries:
        if std is None:
            continue
        if std.label in seen:
            view.errors.append(f"Duplicate standard label '{std.label}' in standards")
        seen.add(std.label)

    for label in levels:
        if label not in view.by_label:
            view.errors.append(f"Level '{label}' is declared in levels but missing from standards")

    # levels run worst -> best, so every earlier level must be strictly easier
    for i, low_label in enumerate(levels):
        for high_label in levels[i + 1:]:
            low_cut = view.cut_for_label(low_label)
            high_cut = view.cut_for_label(high_label)
            if low_cut is None or high_cut is None:
                continue
            if np.isnan(low_cut) or np.isnan(high_cut):
                view.errors.append(f"Unable to parse cuts for levels '{low_label}' or '{high_label}'")
                continue
            if direction == LOWER and not low_cut > high_cut:
                view.errors.append(
                    f"Ordering violation: level '{low_label}' (cut={_fmt_num(low_cut)}) should be > "
                    f"'{high_label}' (cut={_fmt_num(high_cut)}) for direction 'lower'"
                )
            elif direction == HIGHER and not low_cut < high_cut:
                view.errors.append(
                    f"Ordering violation: level '{low_label}' (cut={_fmt_num(low_cut)}) should be < "
                    f"'{high_label}' (cut={_fmt_num(high_cut)}) for direction 'higher'"
                )


def _select_match(view: _StandardsView, metric: float, direction: str) -> Optional[int]:
    """Index of the tightest standard the metric clears, lowest index on ties."""
    if np.isnan(metric):
        return None
    if direction == HIGHER:
        matches = [(-cut, idx) for idx, _, cut in view.parsed() if not np.isnan(cut) and metric >= cut]
    else:
        matches = [(cut, idx) for idx, _, cut in view.parsed() if not np.isnan(cut) and metric <= cut]
    return min(matches)[1] if matches else None


def _find_next(view: _StandardsView, reference: float, direction: str) -> Optional[int]:
    """
    Index of the next strictly better standard relative to `reference`
    (the matched cut, or the metric itself when nothing matched).
    """
    if np.isnan(reference):
        return None
    if direction == HIGHER:
        candidates = [(cut, idx) for idx, _, cut in view.parsed() if np.isfinite(cut) and cut > reference]
    else:
        candidates = [(-cut, idx) for idx, _, cut in view.parsed() if np.isfinite(cut) and cut < reference]
    return min(candidates)[1] if candidates else None


def _diff_to_next(metric: float, next_cut: float, direction: str) -> Optional[DiffToNext]:
    if not (np.isfinite(metric) and np.isfinite(next_cut)):
        return None
    gap = next_cut - metric if direction == HIGHER else metric - next_cut
    absolute = max(0.0, gap)
    denom = abs(next_cut) if next_cut != 0 else 1.0
    return DiffToNext(absolute=absolute, relative=(absolute / denom) * 100.0)


def _next_cut(std: Standard, cut: float, format_absolute) -> NextCut:
    if isinstance(std.cut, str):
        return NextCut(label=std.label, cut=std.cut)
    if np.isfinite(cut):
        return NextCut(label=std.label, cut=format_absolute(cut))
    return NextCut(label=std.label, cut=str(std.cut))


def _raise_if_throw(opts: PerformanceOptions, errors: List[str]) -> None:
    if opts.validation_mode == "throw" and errors:
        raise StandardsValidationError(errors)


def parse_value(value, parser=None) -> float:
    """
    Parse one metric or cut the way compute_performance does: numbers pass
    through, anything else goes to `parser` (durations by default). Parser
    exceptions and unreadable values give NaN.
    """
    return _StandardsView([], parser or parse_duration, []).parse(value)


def resolve_direction(
    direction: Optional[str],
    standards: Sequence[Any],
    levels: Optional[Sequence[str]] = None,
    parser=None
) -> Tuple[str, List[str]]:
    """
    Resolve 'higher' / 'lower' / 'auto' into a concrete direction.

    With 'auto', the cuts of `levels` (worst -> best) are looked up and must be
    strictly increasing ('higher') or strictly decreasing ('lower'). Anything else
    falls back to 'lower' with a diagnostic.

    Returns
    -------
    (direction, diagnostics)
    """
    errors: List[str] = []
    view = _StandardsView(standards, parser or parse_duration, errors)
    return _resolve_direction(direction, levels, view), errors


def validate_levels(
    standards: Sequence[Any],
    levels: Sequence[str],
    direction: str = LOWER,
    parser=None
) -> List[str]:
    """
    Check a levels schema against the standards and return the diagnostics:
    duplicate labels, levels without a standard, and pairwise ordering
    violations for the given direction.
    """
    errors: List[str] = []
    view = _StandardsView(standards, parser or parse_duration, errors)
    _validate_levels(list(levels), direction, view)
    return errors


def compute_performance(
    metric: Union[int, float, str],
    standards: Sequence[Union[Standard, Mapping[str, Any]]],
    options: Optional[Union[PerformanceOptions, Mapping[str, Any]]] = None
) -> PerformanceResult:
    """
    Find the standard a metric achieves and the distance to the next better one.

    Parameters
    ----------
    metric : int, float or str
        The observed value. Strings go through the parser (durations by default).
    standards : sequence of Standard or dict
        Entries with 'label' and 'cut'. Never modified.
    options : PerformanceOptions or dict, optional
        direction ('lower' default, 'higher', 'auto'), levels, parser,
        format_absolute, format_relative, validation_mode ('warn' or 'throw').

    Returns
    -------
    PerformanceResult
        label / index of the tightest matching standard ('unknown' / -1 if none),
        the next better standard and the diff to it, plus validation diagnostics.

    Raises
    ------
    StandardsValidationError
        Only when validation_mode='throw' and at least one diagnostic was produced.
    """
    opts = PerformanceOptions.coerce(options)
    errors: List[str] = []

    if not isinstance(standards, (list, tuple)) or len(standards) == 0:
        errors.append("`standards` must be a non-empty list")
        _raise_if_throw(opts, errors)
        return PerformanceResult(
            label=UNKNOWN_LABEL,
            index=-1,
            validation=ValidationReport(valid=False, errors=errors)
        )

    format_absolute = opts.format_absolute or format_duration
    format_relative = opts.format_relative or format_percent
    view = _StandardsView(standards, opts.parser or parse_duration, errors)

    direction = _resolve_direction(opts.direction, opts.levels, view)
    logger.debug("Resolved direction '%s' (requested '%s')", direction, opts.direction)

    if opts.levels:
        _validate_levels(list(opts.levels), direction, view)
    _raise_if_throw(opts, errors)

    metric_num = view.parse(metric)
    if np.isnan(metric_num):
        errors.append("Unable to parse metric into a numeric value")
    for idx, std, cut in view.parsed():
        if np.isnan(cut):
            errors.append(f"Unable to parse cut value for standard '{std.label}'")
    _raise_if_throw(opts, errors)

    match_idx = _select_match(view, metric_num, direction)
    reference = view.cut(match_idx) if match_idx is not None else metric_num
    next_idx = _find_next(view, reference, direction)

    result = PerformanceResult(label=UNKNOWN_LABEL, index=-1)
    if match_idx is not None:
        result.label = view.entries[match_idx].label
        result.index = match_idx
        result.standard = view.entries[match_idx]

    if next_idx is not None:
        next_std = view.entries[next_idx]
        next_cut = view.cut(next_idx)
        result.next_standard = next_std
        result.next_cut = _next_cut(next_std, next_cut, format_absolute)
        result.diff_to_next = _diff_to_next(metric_num, next_cut, direction)
        if result.diff_to_next is None:
            errors.append("Unable to compute diff to next standard")
        else:
            result.diff_to_next_formatted = FormattedDiff(
                absolute=format_absolute(result.diff_to_next.absolute),
                relative=format_relative(result.diff_to_next.relative)
            )

    logger.debug("Metric %r -> label '%s' (index %d)", metric, result.label, result.index)
    if errors:
        logger.warning("Performance computed with %d validation issue(s): %s", len(errors), "; ".join(errors))
    result.validation = ValidationReport(valid=not errors, errors=errors)
    return result
