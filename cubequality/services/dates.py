from datetime import date, datetime, timedelta, timezone

from openpyxl.utils.datetime import from_excel

SEVEN_DAY_OFFSET = timedelta(days=7)
TWENTY_EIGHT_DAY_OFFSET = timedelta(days=28)

DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d %b %Y",
    "%d-%b-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
]
INSTANT_FORMATS = [
    "%m/%d/%Y, %I:%M:%S %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y, %H:%M:%S",
    "%d/%m/%Y, %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
]
# Excel serial day numbers between 1900-01-01 and 9999-12-31.
_SERIAL_RANGE = (1, 2958465)


def parse_date(value: object) -> date | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        serial = _from_serial(value)
        return serial.date() if serial else None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def parse_instant(value: object) -> datetime | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        serial = _from_serial(value)
        return _as_utc(serial) if serial else None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return _as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in INSTANT_FORMATS:
        try:
            return _as_utc(datetime.strptime(raw, fmt))
        except ValueError:
            continue
    day = parse_date(raw)
    if day is None:
        return None
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def to_iso_instant(value: datetime) -> str:
    """ISO-8601 UTC instant with millisecond precision and a trailing Z."""
    return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso_instant(datetime.now(timezone.utc))


def derive_test_dates(casting: date) -> tuple[str, str]:
    return (casting + SEVEN_DAY_OFFSET).isoformat(), (casting + TWENTY_EIGHT_DAY_OFFSET).isoformat()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_serial(value: float) -> datetime | None:
    if not (_SERIAL_RANGE[0] <= value <= _SERIAL_RANGE[1]):
        return None
    return from_excel(value)
