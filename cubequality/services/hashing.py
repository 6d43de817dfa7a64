"""Canonical form and SHA-256 fingerprint of a report's business content.

The fingerprint is public and unkeyed: it shows whether a stored report still
matches the content it was generated from, nothing more.
"""

import asyncio
import hashlib
import hmac
import json
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel

from cubequality.schemas.report import ConcreteReport

EXCLUDED_FIELDS = frozenset({"hash", "timestamp", "signedReportPdf"})
EXCLUDED_SUFFIXES = ("Blob", "Media")


def is_hashed_field(name: str) -> bool:
    return name not in EXCLUDED_FIELDS and not name.endswith(EXCLUDED_SUFFIXES)


def canonical_report_string(report: Mapping[str, Any]) -> str:
    """Sorted, filtered, whitespace-free JSON of the hashed fields.

    Keys are ordered by code point at every level, so insertion order of the
    input never changes the output.
    """
    ordered = {}
    for key in sorted(report, key=str):
        name = str(key)
        if is_hashed_field(name):
            ordered[name] = _normalize(report[key])
    return json.dumps(ordered, ensure_ascii=False, separators=(",", ":"), sort_keys=True, default=_encode_value)


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


async def calculate_sha256(text: str) -> str:
    return await asyncio.to_thread(sha256_hex, text)


def report_fingerprint(report: ConcreteReport) -> str:
    return sha256_hex(canonical_report_string(report.business_fields()))


def verify_report(report: ConcreteReport) -> bool:
    if not report.hash:
        return False
    return hmac.compare_digest(report.hash, report_fingerprint(report))


def _normalize(value: Any) -> Any:
    """Nested models become plain mappings and every mapping key becomes a string."""
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, Mapping):
        return {str(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value


def _encode_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    return str(value)
