"""Quality dashboard aggregates over the stored reports."""

from collections import defaultdict

from cubequality.schemas.dashboard import ClientScore, DashboardSummary, StrengthPoint
from cubequality.schemas.report import ConcreteReport
from cubequality.services.dates import parse_date


def summarize_reports(reports: list[ConcreteReport]) -> DashboardSummary:
    """Headline figures, per-client scores, the 28-day strength trend and pass/fail counts.

    Scores and the pass rate only consider analyzed reports; an empty or
    unanalyzed store yields zeros rather than dividing by zero.
    """
    analyzed = [report for report in reports if report.analysis is not None]
    pass_count = sum(1 for report in analyzed if report.analysis.twenty_eight_days_results.status == "Pass")
    fail_count = sum(1 for report in analyzed if report.analysis.twenty_eight_days_results.status == "Fail")

    average_score = 0.0
    pass_rate = 0.0
    if analyzed:
        average_score = sum(report.analysis.quality_score for report in analyzed) / len(analyzed)
        pass_rate = pass_count / len(analyzed) * 100

    return DashboardSummary(
        total_reports=len(reports),
        analyzed_reports=len(analyzed),
        average_quality_score=round(average_score, 2),
        pass_rate=round(pass_rate, 2),
        pass_count=pass_count,
        fail_count=fail_count,
        client_scores=_client_scores(analyzed),
        strength_trend=_strength_trend(analyzed),
    )


def _client_scores(reports: list[ConcreteReport]) -> list[ClientScore]:
    scores: dict[str, list[int]] = defaultdict(list)
    for report in reports:
        # a zero score counts as "no score"
        if report.client_name and report.analysis.quality_score:
            scores[report.client_name].append(report.analysis.quality_score)
    return [
        ClientScore(client_name=name, average_score=round(sum(values) / len(values), 2), report_count=len(values))
        for name, values in scores.items()
    ]


def _strength_trend(reports: list[ConcreteReport]) -> list[StrengthPoint]:
    points = []
    for report in reports:
        casting = parse_date(report.date_of_casting)
        strength = report.analysis.twenty_eight_days_results.average_strength
        if casting is None or strength <= 0:
            continue
        point = StrengthPoint(
            date_of_casting=casting.isoformat(),
            average_strength=strength,
            unique_ref_no=report.unique_ref_no,
        )
        points.append((casting, point))
    points.sort(key=lambda item: item[0])
    return [point for _, point in points]
