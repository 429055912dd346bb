import copy
import math

import pytest
from standards_app.performance_engine.data_structures import PerformanceOptions, Standard
from standards_app.performance_engine.primitives.performance import compute_performance
from standards_app.standards_catalog.transformers import transform_swimming_standards

THRESHOLDS = [
    {"label": "Excellent", "cut": 90},
    {"label": "Good", "cut": 75},
    {"label": "Average", "cut": 50},
    {"label": "Poor", "cut": 0},
]

TIME_STANDARDS = [
    {"label": "Fast", "cut": 30},
    {"label": "Moderate", "cut": 60},
    {"label": "Slow", "cut": math.inf},
]

SWIM_CUTS = {
    "AAAA": "57.09",
    "AAA": "59.79",
    "AA": "1:02.49",
    "A": "1:05.19",
    "BB": "1:10.59",
    "B": "1:16.09",
}
SWIM_LEVELS = ["B", "BB", "A", "AA", "AAA", "AAAA"]


def test_higher_direction_matches_tightest_minimum():
    res = compute_performance(82, THRESHOLDS, {"direction": "higher"})
    assert res.label == "Good"
    assert res.index == 1
    assert res.standard == Standard(label="Good", cut=75)
    assert res.next_standard.label == "Excellent"
    assert res.diff_to_next.absolute == pytest.approx(8)
    assert res.diff_to_next.relative == pytest.approx(8 / 90 * 100)
    assert res.validation.valid is True
    assert res.validation.errors == []


def test_best_level_has_no_next_standard():
    res = compute_performance(95, THRESHOLDS, {"direction": "higher"})
    assert res.label == "Excellent"
    assert res.index == 0
    assert res.next_standard is None
    assert res.next_cut is None
    assert res.diff_to_next is None
    assert res.diff_to_next_formatted is None


def test_lower_direction_default():
    # lower is better unless told otherwise
    res = compute_performance(45, TIME_STANDARDS)
    assert res.label == "Moderate"
    assert res.next_standard.label == "Fast"
    assert res.diff_to_next.absolute == pytest.approx(15)
    assert res.diff_to_next.relative == pytest.approx(50)


def test_duration_metric_against_infinite_cut():
    res = compute_performance("2:30.00", TIME_STANDARDS)
    # 2:30.00 -> 150s, only the open-ended Slow cut qualifies
    assert res.label == "Slow"
    assert res.index == 2
    assert res.next_standard.label == "Moderate"
    assert res.diff_to_next.absolute == pytest.approx(90)
    assert res.diff_to_next_formatted.absolute == "1:30.00"
    assert res.diff_to_next_formatted.relative == "150.0%"


def test_seconds_only_metric_string():
    res = compute_performance("75.5", TIME_STANDARDS)
    assert res.label == "Slow"
    assert res.diff_to_next.absolute == pytest.approx(15.5)
    assert res.diff_to_next_formatted.absolute == "15.50"
    assert res.diff_to_next_formatted.relative == "25.8%"


def test_hour_long_diff_is_formatted_with_hours():
    # 1:01:30 = 3690s; next better is Moderate (60) => 3630s
    res = compute_performance("1:01:30", TIME_STANDARDS)
    assert res.label == "Slow"
    assert res.diff_to_next_formatted.absolute == "1:00:30.00"


def test_no_match_still_reports_next_achievable_standard():
    res = compute_performance(-1000, [{"label": "Positive", "cut": 0}], {"direction": "higher"})
    assert res.label == "unknown"
    assert res.index == -1
    assert res.standard is None
    assert res.matched is False
    assert res.next_standard.label == "Positive"
    assert res.diff_to_next.absolute == pytest.approx(1000)
    # next cut is zero => relative diff is measured against 1
    assert res.diff_to_next.relative == pytest.approx(100000)


def test_no_match_lower_direction_points_at_easiest_standard():
    standards = transform_swimming_standards(SWIM_CUTS, SWIM_LEVELS)
    res = compute_performance(9999, standards, {"direction": "lower", "levels": SWIM_LEVELS})
    assert res.label == "unknown"
    assert res.next_standard.label == "B"
    assert res.diff_to_next.absolute == pytest.approx(9999 - 76.09)
    assert res.validation.valid is True


def test_exact_cut_matches_that_level():
    standards = [
        {"label": "Low", "cut": "50"},
        {"label": "Mid", "cut": "75"},
        {"label": "High", "cut": "100"},
    ]
    assert compute_performance(75, standards, {"direction": "higher"}).label == "Mid"
    assert compute_performance("100", standards, {"direction": "higher"}).label == "High"

    standards = [
        {"label": "Fast", "cut": "30"},
        {"label": "Moderate", "cut": "60"},
        {"label": "Slow", "cut": "120"},
    ]
    assert compute_performance("60.00", standards, {"direction": "lower"}).label == "Moderate"
    assert compute_performance(30, standards, {"direction": "lower"}).label == "Fast"


def test_swim_levels_from_no_cut_to_fastest():
    standards = transform_swimming_standards(SWIM_CUTS, SWIM_LEVELS)
    metrics = [9999, "1:16.09", "1:10.59", "1:05.19", "1:02.49", "59.79", "57.09", "56"]
    expected = ["unknown", "B", "BB", "A", "AA", "AAA", "AAAA", "AAAA"]

    for metric, label in zip(metrics, expected):
        res = compute_performance(metric, standards, {"direction": "lower", "levels": SWIM_LEVELS})
        assert res.label == label, f"{metric} -> {res.label}"
        assert res.validation.valid is True


def test_next_cut_keeps_string_cuts_and_formats_numbers():
    standards = transform_swimming_standards(SWIM_CUTS, SWIM_LEVELS)
    res = compute_performance("1:04.00", standards)
    assert res.label == "A"
    assert res.next_cut.label == "AA"
    assert res.next_cut.cut == "1:02.49"

    res = compute_performance(82, THRESHOLDS, {"direction": "higher"})
    # numeric cuts go through the absolute formatter
    assert res.next_cut.cut == "1:30.00"


def test_custom_parser_and_formatters():
    standards = [
        {"label": "High", "cut": "100x"},
        {"label": "Low", "cut": "50x"},
    ]

    def parser(value):
        return float(str(value).rstrip("x"))

    options = PerformanceOptions(
        direction="higher",
        parser=parser,
        format_absolute=lambda n: f"{n:g}s",
        format_relative=lambda p: f"{p:.1f} pct",
    )
    res = compute_performance("75", standards, options)
    assert res.label == "Low"
    assert res.diff_to_next_formatted.absolute == "25s"
    assert res.diff_to_next_formatted.relative == "25.0 pct"
    assert res.next_cut.cut == "100x"


def test_ties_resolve_to_lowest_original_index():
    standards = [
        {"label": "Low", "cut": 10},
        {"label": "First", "cut": 50},
        {"label": "Second", "cut": 50},
        {"label": "Top", "cut": 80},
        {"label": "AlsoTop", "cut": 80},
    ]
    res = compute_performance(60, standards, {"direction": "higher"})
    assert res.label == "First"
    assert res.index == 1
    assert res.next_standard.label == "Top"


def test_infinite_metric_has_next_standard_but_no_diff():
    res = compute_performance(math.inf, TIME_STANDARDS)
    assert res.label == "Slow"
    assert res.next_standard.label == "Moderate"
    assert res.diff_to_next is None
    assert res.diff_to_next_formatted is None
    assert "Unable to compute diff to next standard" in res.validation.errors


def test_unparsable_metric_is_unknown_without_next():
    res = compute_performance("not-a-time", TIME_STANDARDS)
    assert res.label == "unknown"
    assert res.index == -1
    assert res.next_standard is None
    assert res.diff_to_next is None
    assert res.validation.valid is False
    assert any("Unable to parse metric" in e for e in res.validation.errors)


def test_standard_objects_and_dicts_are_interchangeable():
    as_objects = [Standard(label=s["label"], cut=s["cut"]) for s in THRESHOLDS]
    assert compute_performance(82, as_objects, {"direction": "higher"}) == \
        compute_performance(82, THRESHOLDS, {"direction": "higher"})


def test_repeated_calls_are_identical_and_do_not_mutate_input():
    standards = copy.deepcopy(THRESHOLDS)
    first = compute_performance("80", standards, {"direction": "higher"})
    second = compute_performance("80", standards, {"direction": "higher"})
    assert first == second
    assert first.to_dict() == second.to_dict()
    assert standards == THRESHOLDS


def test_to_dict_shape():
    out = compute_performance(82, THRESHOLDS, {"direction": "higher"}).to_dict()
    assert out["label"] == "Good"
    assert out["standard"] == {"label": "Good", "cut": 75}
    assert out["next_standard"] == {"label": "Excellent", "cut": 90}
    assert out["diff_to_next"]["absolute"] == pytest.approx(8)
    assert out["diff_to_next_formatted"] == {"absolute": "08.00", "relative": "8.9%"}
    assert out["validation"] == {"valid": True, "errors": []}
