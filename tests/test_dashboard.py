import pytest

from cubequality.schemas.report import ReportAnalysis, TestResults
from cubequality.services.dashboard import summarize_reports


def _analysis(score, status, strength):
    return ReportAnalysis(
        summary="",
        quality_score=score,
        seven_days_results=TestResults(),
        twenty_eight_days_results=TestResults(average_strength=strength, status=status),
    )


def test_summary_of_empty_store():
    summary = summarize_reports([])

    assert summary.total_reports == 0
    assert summary.average_quality_score == 0
    assert summary.pass_rate == 0
    assert summary.client_scores == []
    assert summary.strength_trend == []


def test_summary_aggregates_analyzed_reports(make_report):
    reports = [
        make_report("A", client_name="Acme", date_of_casting="2024-07-28", analysis=_analysis(90, "Pass", 31.0)),
        make_report("B", client_name="Acme", date_of_casting="2024-07-01", analysis=_analysis(70, "Fail", 22.5)),
        make_report("C", client_name="Beta", date_of_casting="", analysis=_analysis(80, "Pass", 30.0)),
        make_report("D", client_name="Beta"),
    ]

    summary = summarize_reports(reports)

    assert summary.total_reports == 4
    assert summary.analyzed_reports == 3
    assert summary.average_quality_score == pytest.approx(80.0)
    assert summary.pass_rate == pytest.approx(66.67)
    assert (summary.pass_count, summary.fail_count) == (2, 1)
    scores = {item.client_name: item.average_score for item in summary.client_scores}
    assert scores == {"Acme": 80.0, "Beta": 80.0}
    assert [point.unique_ref_no for point in summary.strength_trend] == ["B", "A"]
