# performance_engine/patterns/standard_level.py

"""
Standard Level Pattern

Grades every value in a metric series against a set of standards and summarizes
where the series stands now: the level achieved by the latest value, the gap to the
next better level, how often the level flipped, and the best level reached.

Output Format:
{
  "final_level": str,               // 'unknown' if the latest value matches nothing
  "final_value": float | str,
  "next_level": str | None,
  "diff_to_next": {"absolute": float, "relative": float} | None,
  "diff_to_next_formatted": {"absolute": str, "relative": str} | None,
  "level_changes": int,
  "level_counts": {level: int},
  "best_level": str | None,         // None when no value matched any standard
  "validation": {"valid": bool, "errors": [str]}
}
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import pandas as pd

from standards_app.performance_engine.data_structures import PatternOutput, PerformanceOptions, Standard
from standards_app.performance_engine.primitives.performance import (
    HIGHER,
    compute_performance,
    parse_value,
    resolve_direction,
)
from standards_app.performance_engine.primitives.series import grade_metric_series, detect_level_changes
from .base_pattern import Pattern

logger = logging.getLogger(__name__)


class StandardLevelPattern(Pattern):
    """
    Grades a metric series against standards and reports the current level,
    the distance to the next level, and level flips across the window.
    """

    PATTERN_NAME = "standard_level"
    PATTERN_VERSION = "1.0"

    def run(
        self,
        metric_id: str,
        data: pd.DataFrame,
        analysis_window: Dict[str, str],
        standards: Sequence[Union[Standard, Mapping[str, Any]]] = (),
        options: Optional[Union[PerformanceOptions, Mapping[str, Any]]] = None
    ) -> PatternOutput:
        """
        Parameters
        ----------
        metric_id : str
            The ID of the metric being analyzed.
        data : pd.DataFrame
            Columns: date, value. Values may be numbers or duration strings.
        analysis_window : Dict[str, str]
            Dictionary with 'start_date' and 'end_date'.
        standards : sequence of Standard or dict
            The thresholds every value is graded against.
        options : PerformanceOptions or dict, optional
            Passed through to compute_performance.
        """
        try:
            self.validate_data(data, ["date", "value"])
            self.validate_analysis_window(analysis_window)

            if data.empty:
                return self.handle_empty_data(metric_id, analysis_window)

            df = data.copy()
            df["date"] = pd.to_datetime(df["date"], errors="coerce")
            df.sort_values("date", inplace=True)
            df.reset_index(drop=True, inplace=True)

            # full result for the latest value, including diagnostics
            final_value = df["value"].iloc[-1]
            final = compute_performance(final_value, list(standards), options)

            graded = detect_level_changes(grade_metric_series(df, list(standards), options))
            matched = graded[graded["level_index"] >= 0]
            best_level = self._best_level(matched, list(standards), options)

            results = {
                "final_level": final.label,
                "final_value": final_value,
                "next_level": final.next_standard.label if final.next_standard else None,
                "diff_to_next": final.diff_to_next.to_dict() if final.diff_to_next else None,
                "diff_to_next_formatted": (
                    final.diff_to_next_formatted.to_dict() if final.diff_to_next_formatted else None
                ),
                "level_changes": int(graded["level_flip"].sum()),
                "level_counts": {str(k): int(v) for k, v in graded["level"].value_counts().items()},
                "best_level": best_level,
                "validation": final.validation.to_dict(),
            }
            return self._output(metric_id, analysis_window, results)

        except Exception as ex:
            logger.warning("StandardLevelPattern failed for metric '%s': %s", metric_id, ex)
            return self._output(metric_id, analysis_window, {"error": str(ex)})

    def _best_level(self, matched: pd.DataFrame, standards: Sequence[Any], options) -> Optional[str]:
        """Label of the tightest cut reached anywhere in the series."""
        if matched.empty:
            return None
        opts = PerformanceOptions.coerce(options)
        direction, _ = resolve_direction(opts.direction, standards, opts.levels, opts.parser)
        reached = [int(i) for i in matched["level_index"].unique()]
        cut_of = {i: parse_value(Standard.from_value(standards[i]).cut, opts.parser) for i in reached}
        if direction == HIGHER:
            best = min(reached, key=lambda i: (-cut_of[i], i))
        else:
            best = min(reached, key=lambda i: (cut_of[i], i))
        return Standard.from_value(standards[best]).label
