import pytest

from cubequality.schemas.report import ReportAnalysis, TestResults
from cubequality.services.strength import (
    average_strength,
    calculate_strength,
    parse_float,
    reconstruct_results,
    report_results,
)


def test_strength_from_load_and_cube_edge():
    assert calculate_strength("450", "150") == pytest.approx(20.0)
    assert calculate_strength(680, 150) == pytest.approx(30.2222, rel=1e-4)
    assert calculate_strength("100", "100") == pytest.approx(10.0)


@pytest.mark.parametrize(
    ("load", "edge"),
    [(None, "150"), ("", "150"), ("abc", "150"), ("0", "150"), ("450", "0"), ("450", None), ("nan", "150")],
)
def test_invalid_or_zero_inputs_give_zero(load, edge):
    assert calculate_strength(load, edge) == 0


def test_leading_number_is_parsed():
    assert parse_float("450 kN") == 450.0
    assert parse_float("  12.5mm") == 12.5
    assert parse_float("kN 450") is None
    assert calculate_strength("450 kN", "150mm") == pytest.approx(20.0)


def test_average_ignores_non_positive_values():
    assert average_strength([20.0, 0.0, 22.0]) == pytest.approx(21.0)
    assert average_strength([0.0, 0.0, 0.0]) == 0
    assert average_strength([]) == 0


def test_reconstructed_results_default_to_150mm_cube(make_report):
    report = make_report("R-1", cube_size=None, seven_days_load1="450", seven_days_load2="", seven_days_load3=None)

    results = reconstruct_results(report, "seven")

    assert results.strengths == [pytest.approx(20.0), 0.0, 0.0]
    assert results.average_strength == pytest.approx(20.0)
    assert results.status == "N/A"


def test_report_results_prefer_stored_analysis(make_report):
    analysis = ReportAnalysis(
        summary="ok",
        quality_score=90,
        seven_days_results=TestResults(strengths=[1, 2, 3], average_strength=2.0, status="Fail"),
        twenty_eight_days_results=TestResults(average_strength=31.5, status="Pass"),
    )
    report = make_report("R-2", analysis=analysis)

    assert report_results(report, "seven").average_strength == 2.0
    assert report_results(report, "twentyEight").status == "Pass"
    assert report_results(make_report("R-3"), "twentyEight").average_strength == 0
