"""
Appointment queries.

Appointments are listed in calendar order.  The list accepts a free
text ``query`` matched against the patient's name and phone and the
appointment notes, plus exact ``date``, a ``from``/``to`` range and a
``status`` filter.
"""
from __future__ import annotations

import datetime as dt

from django.db.models import Q
from rest_framework.exceptions import ValidationError

from clinic.models import Appointment

DATE_FILTER_ERROR = 'Invalid date filter. Use YYYY-MM-DD format.'


def parse_day(value, *, message: str = DATE_FILTER_ERROR) -> dt.date | None:
    """Parse an optional YYYY-MM-DD query value; blank means no filter."""
    value = (value or '').strip()
    if not value:
        return None
    try:
        return dt.datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(message)


def search_appointments(params, query: str = ''):
    qs = Appointment.objects.select_related('patient')
    if query:
        qs = qs.filter(
            Q(patient__name__icontains=query)
            | Q(patient__phone__icontains=query)
            | Q(notes__icontains=query)
        )
    day = parse_day(params.get('date'))
    start = parse_day(params.get('from'))
    end = parse_day(params.get('to'))
    if day:
        qs = qs.filter(date=day)
    if start:
        qs = qs.filter(date__gte=start)
    if end:
        qs = qs.filter(date__lte=end)
    status = (params.get('status') or '').strip().upper()
    if status:
        qs = qs.filter(status=status)
    return qs.order_by('date', 'time', 'id')


def save_appointment(appointment: Appointment | None, *, patient, date, time, status=None, notes=None) -> Appointment:
    if appointment is None:
        appointment = Appointment()
    appointment.patient = patient
    appointment.date = date
    appointment.time = time
    appointment.status = status or appointment.status or Appointment.STATUS_PENDING
    appointment.notes = notes
    appointment.save()
    return appointment


def save_appointment_payload(appointment: Appointment | None, vd: dict) -> Appointment:
    """Save from validated :class:`~clinic.serializers.appointment.AppointmentSerializer` data."""
    return save_appointment(
        appointment,
        patient=vd['patient'],
        date=vd['date'],
        time=vd['time'],
        status=vd.get('status'),
        notes=vd.get('notes'),
    )
