"""
Base Pattern Class

Defines the base Pattern class that analysis patterns over a metric series
inherit from. It provides the standard output structure plus input validation.
"""

from typing import Dict, List

import pandas as pd

from standards_app.performance_engine.data_structures import PatternOutput


class Pattern:
    """
    Base class for all analysis patterns.

    Subclasses implement `run` and return a PatternOutput.
    """

    PATTERN_NAME = "base_pattern"
    PATTERN_VERSION = "1.0"

    def run(self,
            metric_id: str,
            data: pd.DataFrame,
            analysis_window: Dict[str, str],
            **kwargs) -> PatternOutput:
        """
        Execute the pattern analysis and return a standardized PatternOutput.

        Parameters
        ----------
        metric_id : str
            The ID of the metric being analyzed
        data : pd.DataFrame
            DataFrame containing the metric data
        analysis_window : Dict[str, str]
            Dictionary with 'start_date' and 'end_date' ('YYYY-MM-DD')
        **kwargs
            Additional pattern-specific parameters
        """
        return self._output(metric_id, analysis_window, {})

    def _output(self, metric_id: str, analysis_window: Dict[str, str], results: Dict) -> PatternOutput:
        return PatternOutput(
            pattern_name=self.PATTERN_NAME,
            pattern_version=self.PATTERN_VERSION,
            metric_id=metric_id,
            analysis_window=analysis_window,
            results=results
        )

    def validate_data(self, data: pd.DataFrame, required_columns: List[str]) -> bool:
        """
        Validate that the input DataFrame contains all required columns.

        Raises
        ------
        ValueError
            If any required column is missing
        """
        missing_columns = [col for col in required_columns if col not in data.columns]
        if missing_columns:
            raise ValueError(f"Missing required columns: {missing_columns}")
        return True

    def validate_analysis_window(self, analysis_window: Dict[str, str]) -> bool:
        """
        Validate that the analysis window contains start_date and end_date.

        Raises
        ------
        ValueError
            If required fields are missing
        """
        required_fields = ['start_date', 'end_date']
        missing_fields = [f for f in required_fields if f not in analysis_window]
        if missing_fields:
            raise ValueError(f"Missing required fields in analysis_window: {missing_fields}")
        return True

    def handle_empty_data(self, metric_id: str, analysis_window: Dict[str, str]) -> PatternOutput:
        return self._output(metric_id, analysis_window, {"error": "Insufficient data for analysis"})
