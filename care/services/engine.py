"""
Appointment scheduling engine.

The engine owns the appointment collection for one session (one API
request): it loads the rows once from an injected data store,
validates and appends new appointments, narrows the collection by view
window and attribute filters, and hands day columns to
:mod:`care.services.layout` for geometry.

Ordering contract: every filtering path returns appointments sorted
ascending by ``start``; ties keep collection order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable, Iterable, Mapping, Optional

from care.exceptions import AppointmentValidationError, StoreError
from care.models import new_appointment_id
from care.services import layout
from care.services.datetimes import (
    DateLike,
    add_months,
    combine,
    days_of_week,
    is_valid_time,
    local_date,
    parse_german_date,
    parse_instant,
    session_tz,
    week_bounds,
)
from care.services.store import DataStore

logger = logging.getLogger(__name__)

VIEWS = ('week', 'month', 'all')
TIME_RANGES = ('', 'morning', 'afternoon')
REQUIRED_FIELDS = ('date', 'title', 'startTime', 'endTime', 'location')


@dataclass(frozen=True)
class Appointment:
    id: str
    title: str
    start: datetime
    end: datetime
    location: str = ''
    notes: Optional[str] = None
    patient: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping, tz: Optional[tzinfo] = None) -> "Appointment":
        """Build from a store row; raises ``ValueError`` on malformed rows."""
        if not record.get('id') or not record.get('title'):
            raise ValueError("appointment record without id or title")
        return cls(
            id=str(record['id']),
            title=str(record['title']),
            start=parse_instant(record.get('start'), tz),
            end=parse_instant(record.get('end'), tz),
            location=record.get('location') or '',
            notes=record.get('notes'),
            patient=record.get('patient'),
            category=record.get('category'),
        )

    def to_record(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'location': self.location,
            'notes': self.notes,
            'patient': self.patient,
            'category': self.category,
        }


@dataclass(frozen=True)
class AttributeFilter:
    """Conjunctive predicate set; empty values match everything."""
    term: str = ''
    category: str = ''
    client: str = ''
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    time_range: str = ''

    def __post_init__(self):
        if self.time_range not in TIME_RANGES:
            raise ValueError(f"unknown time range {self.time_range!r}")

    @property
    def is_empty(self) -> bool:
        return self == AttributeFilter()

    def matches(self, appt: Appointment, tz: Optional[tzinfo] = None) -> bool:
        tz = session_tz(tz)
        local_start = appt.start.astimezone(tz)

        term = self.term.lower()
        if term and term not in appt.title.lower() and term not in (appt.notes or '').lower():
            return False
        if self.category and appt.category != self.category:
            return False
        if self.client and self.client.lower() not in (appt.patient or '').lower():
            return False
        if self.start_date and local_start.date() < self.start_date:
            return False
        if self.end_date and local_start.date() > self.end_date:
            return False
        if self.time_range == 'morning' and local_start.hour >= 12:
            return False
        if self.time_range == 'afternoon' and local_start.hour < 12:
            return False
        return True


@dataclass(frozen=True)
class AppointmentDraft:
    title: str
    start: datetime
    end: datetime
    location: str
    notes: Optional[str] = None
    patient: Optional[str] = None
    category: Optional[str] = None


def validate_appointment_form(form: Mapping, tz: Optional[tzinfo] = None) -> AppointmentDraft:
    """Check an appointment form and return the normalised draft.

    Missing required fields are reported before any format check so the
    client can tell "incomplete" apart from "malformed".
    """
    values = {k: (form.get(k) or '').strip() for k in (*REQUIRED_FIELDS, 'notes', 'patient', 'category')}

    missing = [k for k in REQUIRED_FIELDS if not values[k]]
    if missing:
        raise AppointmentValidationError('missing_fields', 'Bitte alle Pflichtfelder ausfüllen!', missing)

    day = parse_german_date(values['date'])
    if day is None:
        raise AppointmentValidationError(
            'invalid_date',
            'Bitte gib das Datum im Format TT.MM.JJJJ ein. Das eingegebene Datum ist ungültig.',
            ['date'],
        )

    bad_times = [k for k in ('startTime', 'endTime') if not is_valid_time(values[k])]
    if bad_times:
        raise AppointmentValidationError('invalid_time', 'Bitte gib die Uhrzeit im Format HH:mm ein.', bad_times)

    start = combine(day, values['startTime'], tz)
    end = combine(day, values['endTime'], tz)
    if start >= end:
        raise AppointmentValidationError(
            'invalid_range',
            'Die eingegebene Uhrzeit ist ungültig. Die Startzeit muss vor der Endzeit liegen.',
            ['startTime', 'endTime'],
        )

    return AppointmentDraft(
        title=values['title'],
        start=start,
        end=end,
        location=values['location'],
        notes=values['notes'] or None,
        patient=values['patient'] or None,
        category=values['category'] or None,
    )


def sort_by_start(appointments: Iterable[Appointment]) -> list[Appointment]:
    return sorted(appointments, key=lambda a: a.start)


def window_filter(appointments: Iterable[Appointment], view: str, ref: DateLike,
                  tz: Optional[tzinfo] = None) -> list[Appointment]:
    """Restrict to the week or month around ``ref`` (``all`` keeps everything)."""
    tz = session_tz(tz)
    if view == 'week':
        lower, upper = week_bounds(ref, tz)
        picked = [a for a in appointments if lower <= a.start <= upper]
    elif view == 'month':
        anchor = local_date(ref, tz)
        picked = [a for a in appointments if _same_month(a.start.astimezone(tz), anchor)]
    elif view == 'all':
        picked = list(appointments)
    else:
        raise ValueError(f"unknown view {view!r}")
    return sort_by_start(picked)


def attribute_filter(appointments: Iterable[Appointment], flt: AttributeFilter,
                     view: str = 'all', ref: Optional[DateLike] = None,
                     tz: Optional[tzinfo] = None) -> list[Appointment]:
    """Apply the filter panel; in ``month`` view only the shown month counts."""
    tz = session_tz(tz)
    items: Iterable[Appointment] = appointments
    if view == 'month' and ref is not None:
        items = window_filter(items, 'month', ref, tz)
    return sort_by_start(a for a in items if flt.matches(a, tz))


def filter_appointments(appointments: Iterable[Appointment], view: str, ref: DateLike,
                        flt: Optional[AttributeFilter] = None,
                        tz: Optional[tzinfo] = None) -> list[Appointment]:
    """Window filter followed by the attribute filter, sorted by start."""
    picked = window_filter(appointments, view, ref, tz)
    if flt is None or flt.is_empty:
        return picked
    return [a for a in picked if flt.matches(a, tz)]


def appointments_on(appointments: Iterable[Appointment], day: date,
                    tz: Optional[tzinfo] = None) -> list[Appointment]:
    """Appointments whose interval overlaps the local calendar day.

    An appointment running past midnight shows up on both days.
    """
    tz = session_tz(tz)
    day_start = datetime.combine(day, time.min, tzinfo=tz)
    day_end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return [a for a in appointments if a.start < day_end and a.end > day_start]


def navigate(view: str, ref: date, step: int) -> date:
    """Move the reference date one page back (``-1``) or forward (``+1``)."""
    if view == 'week':
        return date.fromordinal(ref.toordinal() + 7 * step)
    if view == 'month':
        return add_months(ref, step)
    if view == 'all':
        return ref
    raise ValueError(f"unknown view {view!r}")


def _same_month(dt: datetime, anchor: date) -> bool:
    return dt.year == anchor.year and dt.month == anchor.month


@dataclass
class AppointmentEngine:
    """Session-scoped owner of the appointment collection."""
    store: DataStore
    tz: Optional[tzinfo] = None
    id_factory: Callable[[], str] = new_appointment_id
    table: str = 'appointments'
    _items: list[Appointment] = field(default_factory=list, init=False, repr=False)
    _loaded: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self.tz = session_tz(self.tz)

    @property
    def appointments(self) -> tuple[Appointment, ...]:
        return tuple(self._items)

    def load(self) -> tuple[Appointment, ...]:
        """Read all rows once; a failing store leaves the collection empty."""
        if self._loaded:
            return self.appointments
        self._loaded = True
        try:
            rows = self.store.select(self.table)
        except StoreError as exc:
            logger.error("loading %s failed: %s", self.table, exc)
            self._items = []
            return self.appointments
        items = []
        for row in rows:
            try:
                items.append(Appointment.from_record(row, self.tz))
            except ValueError as exc:
                logger.warning("skipping malformed appointment %r: %s", row.get('id'), exc)
        self._items = items
        logger.debug("loaded %d appointments", len(items))
        return self.appointments

    def add(self, form: Mapping) -> Appointment:
        """Validate, persist, then append.

        The in-memory collection only changes after the store confirms
        the insert; a :class:`StoreError` propagates to the caller.
        """
        draft = validate_appointment_form(form, self.tz)
        appt = Appointment(
            id=self.id_factory(),
            title=draft.title,
            start=draft.start,
            end=draft.end,
            location=draft.location,
            notes=draft.notes,
            patient=draft.patient,
            category=draft.category,
        )
        self.store.insert(self.table, appt.to_record())
        self._items.append(appt)
        logger.info("appointment %s created for %s", appt.id, appt.start.isoformat())
        return appt

    def visible(self, view: str, ref: DateLike, flt: Optional[AttributeFilter] = None) -> list[Appointment]:
        return filter_appointments(self._items, view, ref, flt, self.tz)

    def filtered(self, flt: AttributeFilter, view: str = 'all', ref: Optional[DateLike] = None) -> list[Appointment]:
        return attribute_filter(self._items, flt, view, ref, self.tz)

    def day_layout(self, day: date, config: layout.GridConfig = layout.DEFAULT_GRID,
                   columns: bool = False) -> list[layout.Block]:
        todays = appointments_on(sort_by_start(self._items), day, self.tz)
        blocks = layout.layout_day(todays, day, config, self.tz)
        return layout.assign_columns(blocks) if columns else blocks

    def week_layout(self, ref: DateLike, config: layout.GridConfig = layout.DEFAULT_GRID,
                    columns: bool = False) -> list[tuple[date, list[layout.Block]]]:
        return [(day, self.day_layout(day, config, columns)) for day in days_of_week(ref, self.tz)]
