"""Recurrence rule building and occurrence enumeration for whole-day chores.

A recurrence is stored as a canonical two-line encoding::

    DTSTART:20260120T000000Z
    RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE,FR;COUNT=10

Everything here is pure: no clock reads, no I/O and no logging.
"""

from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache

from dateutil import parser as dateutil_parser
from dateutil.rrule import DAILY, FR, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, rrule, weekday

from chorecal.core.errors import InvalidRecurrenceError
from chorecal.domain.chore import EndType, RecurrenceRule, RecurrenceSpec, RecurrenceType


_STAMP_FORMAT = "%Y%m%dT000000Z"

_FREQ_NAMES: dict[RecurrenceType, str] = {
    RecurrenceType.DAILY: "DAILY",
    RecurrenceType.WEEKLY: "WEEKLY",
    RecurrenceType.MONTHLY: "MONTHLY",
}

_DATEUTIL_FREQ: dict[str, int] = {
    "DAILY": DAILY,
    "WEEKLY": WEEKLY,
    "MONTHLY": MONTHLY,
}

# Ordered Monday first; the order is also the canonical BYDAY order.
_WEEKDAYS: dict[str, weekday] = {
    "MO": MO,
    "TU": TU,
    "WE": WE,
    "TH": TH,
    "FR": FR,
    "SA": SA,
    "SU": SU,
}

_SET_POSITIONS = frozenset({-1, 1, 2, 3, 4, 5})

_WEEKDAY_NAMES = {
    "MO": "Monday",
    "TU": "Tuesday",
    "WE": "Wednesday",
    "TH": "Thursday",
    "FR": "Friday",
    "SA": "Saturday",
    "SU": "Sunday",
}

_UNIT_NAMES = {"DAILY": "day", "WEEKLY": "week", "MONTHLY": "month"}

_SET_POS_NAMES = {1: "first", 2: "second", 3: "third", 4: "fourth", 5: "fifth", -1: "last"}


def as_date(value: date | datetime | str) -> date:
    """Normalize a date, datetime or ISO string to a whole day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return dateutil_parser.isoparse(value).date()


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:  # noqa: PLR2004
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


@dataclass(frozen=True)
class RecurrenceEncoding:
    """Parsed form of a canonical recurrence encoding."""

    dtstart: date
    freq: str
    interval: int = 1
    by_day: tuple[str, ...] = ()
    by_month_day: tuple[int, ...] = ()
    by_set_pos: int | None = None
    until: date | None = None
    count: int | None = None

    def to_string(self) -> str:
        """Render the canonical two-line text form."""
        parts = [f"FREQ={self.freq}", f"INTERVAL={self.interval}"]
        if self.by_day:
            parts.append(f"BYDAY={','.join(self.by_day)}")
        if self.by_month_day:
            parts.append(f"BYMONTHDAY={','.join(str(day) for day in self.by_month_day)}")
        if self.by_set_pos is not None:
            parts.append(f"BYSETPOS={self.by_set_pos}")
        if self.until is not None:
            parts.append(f"UNTIL={self.until.strftime(_STAMP_FORMAT)}")
        elif self.count is not None:
            parts.append(f"COUNT={self.count}")
        return f"DTSTART:{self.dtstart.strftime(_STAMP_FORMAT)}\nRRULE:{';'.join(parts)}"

    @classmethod
    def parse(cls, text: str) -> "RecurrenceEncoding":
        """Parse the canonical text form.

        Raises:
            InvalidRecurrenceError: If the text does not follow the grammar
        """
        try:
            return cls._parse(text)
        except InvalidRecurrenceError:
            raise
        except (ValueError, KeyError) as e:
            msg = f"Invalid recurrence encoding: {text!r}"
            raise InvalidRecurrenceError(msg) from e

    @classmethod
    def _parse(cls, text: str) -> "RecurrenceEncoding":
        fields: dict[str, str] = {}
        for raw_line in text.strip().splitlines():
            name, _, value = raw_line.strip().partition(":")
            fields[name.upper()] = value.strip()

        if set(fields) != {"DTSTART", "RRULE"}:
            msg = f"Recurrence encoding needs exactly DTSTART and RRULE lines: {text!r}"
            raise InvalidRecurrenceError(msg)

        params: dict[str, str] = {}
        for part in fields["RRULE"].split(";"):
            key, sep, value = part.partition("=")
            if not sep:
                msg = f"Malformed RRULE part {part!r}"
                raise InvalidRecurrenceError(msg)
            params[key.strip().upper()] = value.strip()

        freq = params.pop("FREQ")
        if freq not in _DATEUTIL_FREQ:
            msg = f"Unsupported frequency {freq!r}"
            raise InvalidRecurrenceError(msg)

        by_day = tuple(code.upper() for code in params.pop("BYDAY", "").split(",") if code)
        if any(code not in _WEEKDAYS for code in by_day):
            msg = f"Unknown weekday code in {by_day!r}"
            raise InvalidRecurrenceError(msg)

        encoding = cls(
            dtstart=_parse_stamp(fields["DTSTART"]),
            freq=freq,
            interval=int(params.pop("INTERVAL", "1")),
            by_day=by_day,
            by_month_day=tuple(int(day) for day in params.pop("BYMONTHDAY", "").split(",") if day),
            by_set_pos=int(params["BYSETPOS"]) if "BYSETPOS" in params else None,
            until=_parse_stamp(params["UNTIL"]) if "UNTIL" in params else None,
            count=int(params["COUNT"]) if "COUNT" in params else None,
        )
        params.pop("BYSETPOS", None)
        params.pop("UNTIL", None)
        params.pop("COUNT", None)

        if params:
            msg = f"Unsupported RRULE parts: {sorted(params)}"
            raise InvalidRecurrenceError(msg)
        if encoding.until is not None and encoding.count is not None:
            msg = "UNTIL and COUNT are mutually exclusive"
            raise InvalidRecurrenceError(msg)
        if encoding.interval < 1:
            msg = f"INTERVAL must be positive, got {encoding.interval}"
            raise InvalidRecurrenceError(msg)
        if any(not 1 <= day <= 31 for day in encoding.by_month_day):
            msg = f"BYMONTHDAY values must be within 1-31, got {encoding.by_month_day}"
            raise InvalidRecurrenceError(msg)
        if encoding.by_set_pos is not None and encoding.by_set_pos not in _SET_POSITIONS:
            msg = f"BYSETPOS must be -1 or 1-5, got {encoding.by_set_pos}"
            raise InvalidRecurrenceError(msg)
        if encoding.count is not None and encoding.count < 1:
            msg = f"COUNT must be positive, got {encoding.count}"
            raise InvalidRecurrenceError(msg)
        return encoding

    def to_rrule(self) -> rrule:
        """Build the dateutil rule that enumerates this encoding.

        Raises:
            InvalidRecurrenceError: If dateutil rejects the rule parameters
        """
        try:
            return rrule(
                _DATEUTIL_FREQ[self.freq],
                dtstart=_midnight(self.dtstart),
                interval=self.interval,
                byweekday=[_WEEKDAYS[code] for code in self.by_day] or None,
                bymonthday=list(self.by_month_day) or None,
                bysetpos=self.by_set_pos,
                until=_midnight(self.until) if self.until is not None else None,
                count=self.count,
            )
        except ValueError as e:
            msg = f"Invalid recurrence encoding: {e}"
            raise InvalidRecurrenceError(msg) from e


def _parse_stamp(value: str) -> date:
    """Parse ``YYYYMMDD`` optionally followed by a ``THHMMSS[Z]`` time part."""
    return datetime.strptime(value[:8], "%Y%m%d").date()


# Builder


def build_encoding(spec: RecurrenceSpec, anchor: date | datetime | str) -> RecurrenceEncoding:
    """Compile a recurrence spec and anchor due date into an encoding.

    The spec is assumed to be validated already (see ``RecurrenceSpec``).
    Weekdays and month days are sorted and de-duplicated so equal specs always
    produce the same text.
    """
    by_day: tuple[str, ...] = ()
    by_month_day: tuple[int, ...] = ()
    by_set_pos: int | None = None
    requested_days = {str(day) for day in spec.by_week_day or []}
    week_days = tuple(code for code in _WEEKDAYS if code in requested_days)

    if spec.type == RecurrenceType.WEEKLY and week_days:
        by_day = week_days

    if spec.type == RecurrenceType.MONTHLY:
        # nth weekday wins over fixed days of month
        if week_days and spec.by_set_pos is not None:
            by_day = week_days
            by_set_pos = spec.by_set_pos
        elif spec.by_month_day:
            by_month_day = tuple(sorted(set(spec.by_month_day)))

    until = spec.end_date if spec.end_type == EndType.DATE else None
    count = spec.end_after_occurrences if spec.end_type == EndType.AFTER else None

    return RecurrenceEncoding(
        dtstart=as_date(anchor),
        freq=_FREQ_NAMES[RecurrenceType(spec.type)],
        interval=spec.interval,
        by_day=by_day,
        by_month_day=by_month_day,
        by_set_pos=by_set_pos,
        until=until,
        count=count,
    )


def build_rrule_string(spec: RecurrenceSpec, anchor: date | datetime | str) -> str:
    """Return the canonical encoding text for a spec anchored at a due date."""
    return build_encoding(spec, anchor).to_string()


def create_recurrence_rule(spec: RecurrenceSpec, anchor: date | datetime | str) -> RecurrenceRule:
    """Convert a spec into the stored rule shape with its derived ``rrule_string``."""
    fields = spec.model_dump(exclude={"rrule_string"})
    return RecurrenceRule(**fields, rrule_string=build_rrule_string(spec, anchor))


# Enumerator


@lru_cache(maxsize=512)
def _compile(rrule_string: str) -> rrule:
    return RecurrenceEncoding.parse(rrule_string).to_rrule()


def occurrences_between(rrule_string: str, start: date | str, end: date | str) -> list[date]:
    """Return every occurrence in ``[start, end]`` in ascending order.

    Termination (UNTIL/COUNT) is counted from the rule's DTSTART, not from ``start``.
    An empty encoding yields no occurrences.

    Raises:
        ValueError: If ``start`` is after ``end``
        InvalidRecurrenceError: If the encoding cannot be parsed
    """
    if not rrule_string:
        return []

    start_day = as_date(start)
    end_day = as_date(end)
    if start_day > end_day:
        msg = f"Range start {start_day} is after range end {end_day}"
        raise ValueError(msg)

    rule = _compile(rrule_string)
    return [occurrence.date() for occurrence in rule.between(_midnight(start_day), _midnight(end_day), inc=True)]


def next_occurrence(rrule_string: str, after: date | str) -> date | None:
    """Return the first occurrence strictly after ``after``, or None when the rule has ended."""
    if not rrule_string:
        return None

    occurrence = _compile(rrule_string).after(_midnight(as_date(after)), inc=False)
    return occurrence.date() if occurrence is not None else None


def describe_rrule(rrule_string: str) -> str:
    """Convert an encoding to human-readable text.

    Returns:
        Description such as "every 2 weeks on Monday, Friday until 2026-03-31"
    """
    encoding = RecurrenceEncoding.parse(rrule_string)
    unit = _UNIT_NAMES[encoding.freq]

    if encoding.interval == 1:
        text = "daily" if encoding.freq == "DAILY" else f"every {unit}"
    else:
        text = f"every {encoding.interval} {unit}s"

    day_names = [_WEEKDAY_NAMES[code] for code in encoding.by_day]
    if encoding.by_set_pos is not None and day_names:
        position = _SET_POS_NAMES.get(encoding.by_set_pos, _ordinal(encoding.by_set_pos))
        text += f" on the {position} {' or '.join(day_names)}"
    elif day_names:
        text += f" on {', '.join(day_names)}"
    elif encoding.by_month_day:
        text += f" on the {', '.join(_ordinal(day) for day in encoding.by_month_day)}"

    if encoding.until is not None:
        text += f" until {encoding.until.isoformat()}"
    elif encoding.count is not None:
        text += f" for {encoding.count} occurrence{'s' if encoding.count != 1 else ''}"

    return text
