"""Resolve stay dates mentioned in an utterance to ISO check-in/check-out."""

import logging
import re
from datetime import date, datetime, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import FR, MO, relativedelta

from .extraction import MONTH_ABBREVIATIONS, MONTHS

logger = logging.getLogger(__name__)

_MONTH_LOOKUP = {name: index for index, name in enumerate(MONTHS, start=1)}
_MONTH_LOOKUP.update(MONTH_ABBREVIATIONS)
_MONTH_ALTERNATION = "|".join(sorted(_MONTH_LOOKUP, key=len, reverse=True))

_ISO_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_SLASH_DATE = re.compile(r"(?<![\d.])\d{1,2}/\d{1,2}(/\d{2,4})?(?![\d.]|\s*stars)")
_MONTH_DAY_RANGE = re.compile(
    rf"\b({_MONTH_ALTERNATION})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?"
    r"(?:\s*(?:-|–|to|through|until)\s*"
    rf"(?:({_MONTH_ALTERNATION})\.?\s+)?(\d{{1,2}})(?:st|nd|rd|th)?)?\b",
    re.IGNORECASE,
)
_PART_OF_MONTH = re.compile(
    rf"\b(early|mid|late|end of)[\s-]+({_MONTH_ALTERNATION})\b",
    re.IGNORECASE,
)
_WEEKEND = re.compile(r"\b(this|next|coming)\s+weekend\b", re.IGNORECASE)
_LABOR_DAY = re.compile(
    r"\b(?:(week after|post|after)\s+)?labor day(?:\s+(weekend|week))?\b",
    re.IGNORECASE,
)

# (first day, last day) of each part-of-month window; None means month end
_MONTH_WINDOWS = {
    "early": (1, 10),
    "mid": (10, 20),
    "late": (21, None),
    "end of": (21, None),
}


def first_monday_of_september(year: int) -> date:
    return date(year, 1, 1) + relativedelta(month=9, day=1, weekday=MO(1))


def parse_stay_day(fragment: str, today: date, year_given: bool = False) -> date:
    """Parse a single calendar day such as "July 10", "7/4" or "2025-07-01".

    Without an explicit year the day is taken as the next occurrence on or
    after ``today``.

    Raises:
        ValueError: If the fragment does not name a real calendar day
            (e.g. "Feb 29" with no leap year ahead)
    """
    if year_given:
        return date_parser.parse(fragment).date()

    error = None
    for year in (today.year, today.year + 1):
        try:
            parsed = date_parser.parse(fragment, default=datetime(year, 1, 1)).date()
        except (ValueError, OverflowError) as e:
            error = e
            continue
        if parsed >= today:
            return parsed
    raise ValueError(f"No upcoming {fragment!r}: {error}")


def _span(checkin: date | None, checkout: date | None, nights: int | None):
    if checkin is None:
        return None, None
    if checkout is None and nights:
        checkout = checkin + timedelta(days=nights)
    if checkout is not None and checkout <= checkin:
        checkout = None
    return checkin.isoformat(), checkout.isoformat() if checkout else None


def _parse_all(fragments, today: date) -> list[date]:
    days = []
    for fragment, year_given in fragments:
        try:
            days.append(parse_stay_day(fragment, today, year_given))
        except (ValueError, OverflowError) as e:
            logger.warning(f"Ignoring date {fragment!r}: {e}")
    return days


def _month_day_range(match: re.Match, today: date) -> tuple[date | None, date | None]:
    month = MONTHS[_MONTH_LOOKUP[match.group(1).lower()] - 1]
    try:
        checkin = parse_stay_day(f"{month} {match.group(2)}", today)
    except ValueError as e:
        logger.warning(f"Ignoring date {match.group(0)!r}: {e}")
        return None, None
    if not match.group(4):
        return checkin, None

    end_month = MONTHS[_MONTH_LOOKUP[match.group(3).lower()] - 1] if match.group(3) else month
    try:
        checkout = parse_stay_day(f"{end_month} {match.group(4)}", checkin + timedelta(days=1))
    except ValueError as e:
        logger.warning(f"Ignoring check-out in {match.group(0)!r}: {e}")
        checkout = None
    return checkin, checkout


def resolve_stay_dates(
    text: str,
    today: date | None = None,
    nights: int | None = None,
) -> tuple[str | None, str | None]:
    """Resolve check-in and check-out dates from free text.

    The first matching rule wins: ISO dates, numeric m/d dates, month-day
    ranges, part-of-month windows ("mid July"), weekends and Labor Day. When
    only a check-in is found and ``nights`` is known, check-out is derived.
    Days that do not exist on the calendar are logged and skipped.

    Args:
        text: Utterance to scan
        today: Reference date (defaults to ``date.today()``)
        nights: Explicit stay length, if any

    Returns:
        Tuple of ISO date strings (checkin, checkout); either may be None
    """
    today = today or date.today()

    iso = _parse_all(((m.group(0), True) for m in _ISO_DATE.finditer(text)), today)
    if iso:
        return _span(iso[0], iso[1] if len(iso) > 1 else None, nights)

    slashed = _parse_all(
        ((m.group(0), bool(m.group(1))) for m in _SLASH_DATE.finditer(text)), today
    )
    if slashed:
        return _span(slashed[0], slashed[1] if len(slashed) > 1 else None, nights)

    match = _MONTH_DAY_RANGE.search(text)
    if match:
        checkin, checkout = _month_day_range(match, today)
        if checkin:
            return _span(checkin, checkout, nights)

    match = _PART_OF_MONTH.search(text)
    if match:
        month = _MONTH_LOOKUP[match.group(2).lower()]
        first, last = _MONTH_WINDOWS[match.group(1).lower()]
        checkin = today + relativedelta(month=month, day=first)
        if checkin < today:
            checkin += relativedelta(years=1)
        # day=31 clamps to the last day of the month
        checkout = checkin + relativedelta(day=last or 31)
        if nights:
            checkout = None
        return _span(checkin, checkout, nights)

    match = _WEEKEND.search(text)
    if match:
        weeks_ahead = 1 if match.group(1).lower() == "next" else 0
        friday = today + relativedelta(weeks=weeks_ahead, weekday=FR)
        return _span(friday, friday + relativedelta(days=2), None)

    match = _LABOR_DAY.search(text)
    if match:
        labor_day = first_monday_of_september(today.year)
        if labor_day < today:
            labor_day = first_monday_of_september(today.year + 1)
        qualifier = (match.group(1) or "").lower()
        if qualifier == "week after":
            checkin = labor_day + relativedelta(weeks=1)
        elif qualifier in ("post", "after"):
            checkin = labor_day + relativedelta(days=1)
        else:
            # The long weekend itself: Friday through Monday
            return _span(labor_day + relativedelta(weekday=FR(-1)), labor_day, None)
        return _span(checkin, None, nights)

    return None, None
