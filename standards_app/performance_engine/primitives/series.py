# =============================================================================
# Series
#
#   - grade_metric_series  => compute_performance for every row of a DataFrame
#   - detect_level_changes => flag rows where the achieved level flips
#
# Dependencies:
#   - pandas as pd
#   - numpy as np
# =============================================================================

import numpy as np
import pandas as pd

from .performance import compute_performance

GRADE_COLUMNS = ['level', 'level_index', 'next_level', 'abs_diff_to_next', 'pct_diff_to_next']


def grade_metric_series(df, standards, options=None, value_col='value'):
    """
    Purpose: Grade every row's metric against the same standards.

    Returns a copy of df with added (or replaced) columns:
      level, level_index, next_level, abs_diff_to_next, pct_diff_to_next
    Rows that match nothing get level='unknown' and level_index=-1.
    Diagnostics are not carried per row; call compute_performance directly
    when they are needed.
    """
    if value_col not in df.columns:
        raise ValueError(f"Missing required column: {value_col}")

    def _grade(metric):
        res = compute_performance(metric, standards, options)
        diff = res.diff_to_next
        return {
            'level': res.label,
            'level_index': res.index,
            'next_level': res.next_standard.label if res.next_standard else None,
            'abs_diff_to_next': diff.absolute if diff else np.nan,
            'pct_diff_to_next': diff.relative if diff else np.nan,
        }

    graded = pd.DataFrame(
        [_grade(metric) for metric in df[value_col]],
        index=df.index,
        columns=GRADE_COLUMNS
    )
    # regrading replaces the previous grade columns
    return pd.concat([df.drop(columns=GRADE_COLUMNS, errors='ignore'), graded], axis=1)


def detect_level_changes(df, level_col='level'):
    """
    Add 'prev_level' and 'level_flip' columns. The first row never flips.
    """
    df = df.copy()
    df['prev_level'] = df[level_col].shift(1)
    df['level_flip'] = (df[level_col] != df['prev_level']) & df['prev_level'].notna()
    return df
