"""
Revenue reports.

Both reports take an inclusive ``from``/``to`` calendar range.  A
missing or unreadable bound falls back to 1970-01-01 and today.  The
session report lists every session in the range; the medicine report
only counts medicines on paid sessions.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from django.utils import timezone

from clinic.models import Session, SessionMedicine

from .billing import ZERO, money

EPOCH = dt.date(1970, 1, 1)


@dataclass
class DateRange:
    start: dt.date
    end: dt.date

    def bounds(self):
        """Aware ``[start, end + 1 day)`` datetimes in the current time zone."""
        tz = timezone.get_current_timezone()
        lower = dt.datetime.combine(self.start, dt.time.min, tzinfo=tz)
        upper = dt.datetime.combine(self.end + dt.timedelta(days=1), dt.time.min, tzinfo=tz)
        return lower, upper


def _lenient_day(value):
    try:
        return dt.datetime.strptime((value or '').strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def parse_range(params) -> DateRange:
    return DateRange(
        start=_lenient_day(params.get('from')) or EPOCH,
        end=_lenient_day(params.get('to')) or timezone.localdate(),
    )


def sessions_report(period: DateRange) -> list[dict]:
    lower, upper = period.bounds()
    qs = (Session.objects.select_related('patient')
          .filter(date__gte=lower, date__lt=upper)
          .order_by('date', 'id'))
    return [
        {
            'id': s.id,
            'date': timezone.localtime(s.date).date().isoformat(),
            'patientName': s.patient.name if s.patient_id else 'Unknown',
            'description': s.description or '',
            'total': money(s.total),
        }
        for s in qs
    ]


def medicines_report(period: DateRange) -> list[dict]:
    lower, upper = period.bounds()
    lines = (SessionMedicine.objects.select_related('medicine__type')
             .filter(session__is_paid=True, session__date__gte=lower, session__date__lt=upper))
    by_medicine: dict[int, dict] = {}
    for line in lines:
        row = by_medicine.get(line.medicine_id)
        if row is None:
            medicine = line.medicine
            row = by_medicine[line.medicine_id] = {
                'id': medicine.id,
                'code': medicine.code,
                'name': medicine.name,
                'typeName': medicine.type.name if medicine.type_id else '',
                'quantity': 0,
                'revenue': ZERO,
            }
        row['quantity'] += line.quantity
        row['revenue'] += money(line.total)
    return sorted(by_medicine.values(), key=lambda r: r['name'].lower())
