from __future__ import annotations

import re
from typing import Any

from .metrics import MetricDefinition, MetricFormat


SEASON_TOKEN_RE = re.compile(r"^(20\d{2})\s*[/-]\s*(\d{2})$")
UK_DATE_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2}|\d{4})$")
ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

SEASON_START_MONTH_DAY = "09-01"


def as_number(value: Any) -> float | int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def format_value(definition: MetricDefinition, value: Any) -> str:
    if definition.format == MetricFormat.STRING:
        return "" if value is None else str(value)

    number = as_number(value)
    if number is None:
        return "" if value is None else str(value)

    if definition.format == MetricFormat.INTEGER:
        return str(int(round(number)))
    if definition.format == MetricFormat.DECIMAL1:
        return f"{float(number):.1f}"
    if definition.format == MetricFormat.DECIMAL2:
        return f"{float(number):.2f}"

    return f"{float(number):.{definition.decimals}f}%"


def normalize_season(token: str) -> str | None:
    match = SEASON_TOKEN_RE.match(token.strip())
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"


def season_start_date(season: str) -> str:
    return f"{season[:4]}-{SEASON_START_MONTH_DAY}"


def since_year_start_date(year: int) -> str:
    return f"{year + 1}-01-01"


def to_iso_date(text: str) -> str | None:
    match = UK_DATE_RE.match(text.strip())
    if not match:
        return None

    day, month, year = (int(part) for part in match.groups())
    if year < 100:
        year += 2000
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def display_date(value: str) -> str:
    match = ISO_DATE_RE.match(value)
    if not match:
        return value
    year, month, day = match.groups()
    return f"{day}/{month}/{year}"
