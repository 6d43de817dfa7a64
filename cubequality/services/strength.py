"""Compressive strength arithmetic shared by the form preview, list views and import.

Every caller goes through :func:`calculate_strength` and :func:`average_strength`
so rounding and edge cases stay identical across the application.
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

from cubequality.schemas.report import Batch, ConcreteReport, MediaBlob, ReportFormData, TestResults

DEFAULT_CUBE_SIZE = "150"
BATCH_PREFIX = {"seven": "seven_days", "twentyEight": "twenty_eight_days"}

_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass(slots=True)
class TestBatch:
    __test__ = False

    test_date: str | None
    weights: list[str | None]
    loads: list[str | None]
    media: MediaBlob | None


def parse_float(value: object) -> float | None:
    """Parse the leading number of a value ("450 kN" -> 450.0); None when there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER_RE.match(str(value))
        if not match:
            return None
        number = float(match.group(0))
    return number if math.isfinite(number) else None


def safe_float(value: object) -> float:
    number = parse_float(value)
    return 0.0 if number is None else number


def calculate_strength(load: object, edge_length: object) -> float:
    """Strength in N/mm² for a load in kN on a cube of the given edge in mm.

    Returns 0 when either input is missing, non-numeric or zero.
    """
    load_kn = parse_float(load)
    edge_mm = parse_float(edge_length)
    if load_kn is None or edge_mm is None or load_kn == 0 or edge_mm == 0:
        return 0.0
    return (load_kn * 1000) / (edge_mm * edge_mm)


def average_strength(strengths: Iterable[float]) -> float:
    valid = [value for value in strengths if value > 0]
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


def measurement_batch(report: ReportFormData, batch: Batch) -> TestBatch:
    prefix = BATCH_PREFIX[batch]
    return TestBatch(
        test_date=getattr(report, f"{prefix}_test_date"),
        weights=[getattr(report, f"{prefix}_weight{i}") for i in (1, 2, 3)],
        loads=[getattr(report, f"{prefix}_load{i}") for i in (1, 2, 3)],
        media=report.media(batch),
    )


def batch_strengths(report: ReportFormData, batch: Batch) -> list[float]:
    cube_size = report.cube_size or DEFAULT_CUBE_SIZE
    return [calculate_strength(load, cube_size) for load in measurement_batch(report, batch).loads]


def reconstruct_results(report: ReportFormData, batch: Batch) -> TestResults:
    strengths = batch_strengths(report, batch)
    return TestResults(strengths=strengths, average_strength=average_strength(strengths), status="N/A")


def report_results(report: ConcreteReport, batch: Batch) -> TestResults:
    """Analysed results when the report has them, otherwise recomputed from the loads."""
    if report.analysis is not None:
        if batch == "seven":
            return report.analysis.seven_days_results
        return report.analysis.twenty_eight_days_results
    return reconstruct_results(report, batch)
