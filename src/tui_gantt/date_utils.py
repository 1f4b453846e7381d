"""Calendar arithmetic on naive datetimes."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone

from tui_gantt.errors import FormatError

YEAR = "year"
MONTH = "month"
DAY = "day"
HOUR = "hour"
MINUTE = "minute"
SECOND = "second"
MILLISECOND = "millisecond"

_MS_PER_UNIT: dict[str, int] = {
    MILLISECOND: 1,
    SECOND: 1_000,
    MINUTE: 60_000,
    HOUR: 3_600_000,
    DAY: 86_400_000,
    MONTH: 30 * 86_400_000,  # a month is 30 days
    YEAR: 12 * 30 * 86_400_000,  # a year is 12 such months
}

# Finer units first; start_of() resets everything below the given unit.
_UNIT_ORDER = [MILLISECOND, SECOND, MINUTE, HOUR, DAY, MONTH, YEAR]

_DATE_RE = re.compile(
    r"^(\d{1,4})-(\d{1,2})-(\d{1,2})"
    r"(?:[ T](\d{1,2})(?:[:.](\d{1,2})(?:[:.](\d{1,2})(?:[:.](\d{1,6}))?)?)?"
    r"\s*(Z|[+-]\d{2}(?::?\d{2})?)?)?$",
    re.IGNORECASE,
)

_FORMAT_TOKEN_RE = re.compile(r"YYYY|MMMM|SSS|MMM|MM|DD|HH|mm|ss|D")

_DAYS_IN_MONTH = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]

MONTH_NAMES: dict[str, list[str]] = {
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
    "es": [
        "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
        "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
    ],
    "ru": [
        "Январь", "Февраль", "Март", "Апрель", "Май", "Июнь",
        "Июль", "Август", "Сентябрь", "Октябрь", "Ноябрь", "Декабрь",
    ],
    "pt-br": [
        "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
        "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
    ],
    "fr": [
        "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
        "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
    ],
    "tr": [
        "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
        "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
    ],
    "zh": [
        "一月", "二月", "三月", "四月", "五月", "六月",
        "七月", "八月", "九月", "十月", "十一月", "十二月",
    ],
    "de": [
        "Januar", "Februar", "März", "April", "Mai", "Juni",
        "Juli", "August", "September", "Oktober", "November", "Dezember",
    ],
    "hu": [
        "Január", "Február", "Március", "Április", "Május", "Június",
        "Július", "Augusztus", "Szeptember", "Október", "November", "December",
    ],
}


def _unit(unit: str) -> str:
    unit = unit.lower()
    if unit.endswith("s"):
        unit = unit[:-1]
    if unit not in _MS_PER_UNIT:
        raise ValueError(f"Unknown time unit: {unit!r}")
    return unit


def _to_local_naive(d: datetime) -> datetime:
    """Offset-aware values become naive local time; naive values pass through."""
    if d.tzinfo is None:
        return d
    return d.astimezone().replace(tzinfo=None)


def _parse_offset(text: str) -> timezone:
    if text.upper() == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:] or 0)
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse(value: str | date | datetime) -> datetime:
    """Parse ``YYYY-MM-DD[ HH:mm:ss[.sss][Z|±HH:MM]]`` (or a date/datetime).

    Always returns a naive datetime in local time. Raises FormatError for
    anything else, including out-of-range fields.
    """
    if isinstance(value, datetime):
        return _to_local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise FormatError(value)

    m = _DATE_RE.match(value.strip())
    if not m:
        raise FormatError(value)

    year, month, day, hour, minute, second, fraction, offset = m.groups()
    # ".5" is half a second, as in "10:30:00.5"
    micros = int(fraction.ljust(3, "0")[:3]) * 1000 if fraction else 0
    try:
        tzinfo = _parse_offset(offset) if offset else None
        return _to_local_naive(datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0), micros,
            tzinfo=tzinfo,
        ))
    except ValueError as e:
        raise FormatError(value) from e


def to_string(d: datetime, with_time: bool = False) -> str:
    """Serialize to ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:mm:ss.SSS``."""
    if with_time:
        return format(d, "YYYY-MM-DD HH:mm:ss.SSS")
    return format(d, "YYYY-MM-DD")


def month_name(month: int, locale: str = "en") -> str:
    """Capitalized full month name (1-based month) for a locale tag."""
    key = locale.lower().replace("_", "-")
    names = MONTH_NAMES.get(key) or MONTH_NAMES.get(key.split("-")[0]) or MONTH_NAMES["en"]
    name = names[month - 1]
    return name[:1].upper() + name[1:]


def format(d: datetime, pattern: str = "YYYY-MM-DD HH:mm:ss.SSS", locale: str = "en") -> str:
    """Substitute date tokens in *pattern*, longest token first."""
    full_month = month_name(d.month, locale)
    values = {
        "YYYY": f"{d.year:04d}",
        "MMMM": full_month,
        "MMM": full_month[:3],
        "MM": f"{d.month:02d}",
        "DD": f"{d.day:02d}",
        "D": str(d.day),
        "HH": f"{d.hour:02d}",
        "mm": f"{d.minute:02d}",
        "ss": f"{d.second:02d}",
        "SSS": f"{d.microsecond // 1000:03d}",
    }
    return _FORMAT_TOKEN_RE.sub(lambda m: values[m.group(0)], pattern)


def diff(a: datetime, b: datetime, unit: str = DAY) -> int:
    """Floor of ``(a - b)`` expressed in *unit*."""
    ms = (a - b) // timedelta(milliseconds=1)
    return ms // _MS_PER_UNIT[_unit(unit)]


def add(d: datetime, qty: int | float | str, unit: str) -> datetime:
    """Add *qty* units to *d*; day overflow rolls into the next month."""
    qty = int(qty)
    unit = _unit(unit)
    if unit in (YEAR, MONTH):
        months = d.month - 1 + (qty if unit == MONTH else qty * 12)
        year, month0 = divmod(months, 12)
        first = d.replace(year=d.year + year, month=month0 + 1, day=1)
        return first + timedelta(days=d.day - 1)
    return d + timedelta(milliseconds=qty * _MS_PER_UNIT[unit])


def start_of(d: datetime, unit: str) -> datetime:
    """Zero every field finer than *unit*."""
    level = _UNIT_ORDER.index(_unit(unit))

    def reset(field_unit: str) -> bool:
        return _UNIT_ORDER.index(field_unit) < level

    return datetime(
        d.year,
        1 if reset(MONTH) else d.month,
        1 if reset(DAY) else d.day,
        0 if reset(HOUR) else d.hour,
        0 if reset(MINUTE) else d.minute,
        0 if reset(SECOND) else d.second,
        0 if reset(MILLISECOND) else d.microsecond,
    )


def days_in_month(d: date) -> int:
    if d.month != 2:
        return _DAYS_IN_MONTH[d.month - 1]
    year = d.year
    if (year % 4 == 0 and year % 100 != 0) or year % 400 == 0:
        return 29
    return 28


def today() -> datetime:
    """Midnight of the current local day."""
    return start_of(datetime.now(), DAY)
