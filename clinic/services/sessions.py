"""
Billing session workflow.

Creating a session stores the priced line items and the computed total
in one transaction.  Marking a session paid settles it: the patient
earns loyalty points and the consumed medicine quantities leave stock.
Settlement is recorded in ``Session.settled_at`` and happens at most
once, so toggling the paid flag back and forth never awards points or
decrements stock twice.
"""
from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.models import MedicineStock, Patient, Session, SessionMedicine, SessionTreatment

from .audit import log_action
from .billing import ZERO, decrement_stock, loyalty_points_for

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND = 'Session not found.'


def with_lines(qs):
    return qs.select_related('patient').prefetch_related('items__treatment', 'medicine_items__medicine')


def search_sessions(query: str = ''):
    qs = with_lines(Session.objects.all())
    if query:
        cond = Q(description__icontains=query) | Q(patient__name__icontains=query)
        if query.isdigit():
            cond |= Q(id=int(query))
        qs = qs.filter(cond)
    return qs.order_by('-date', '-created_at', '-id')


def load_session(session_id) -> Session:
    session = with_lines(Session.objects.filter(id=session_id)).first()
    if session is None:
        raise NotFound(SESSION_NOT_FOUND)
    return session


def create_session(*, admin, patient, treatment_lines, medicine_lines, totals,
                   date=None, description=None) -> Session:
    """Persist a validated session.

    ``treatment_lines`` and ``medicine_lines`` are ``(catalog_row, LineItem)``
    pairs and ``totals`` the matching :class:`~clinic.services.billing.SessionTotals`.
    """
    with transaction.atomic():
        session = Session.objects.create(
            patient=patient,
            date=date or timezone.now(),
            description=description,
            discount=totals.discount,
            total=totals.total,
        )
        SessionTreatment.objects.bulk_create([
            SessionTreatment(
                session=session, treatment=treatment, quantity=line.quantity,
                unit_price=line.unit_price, discount=line.discount, total=line.total,
            )
            for treatment, line in treatment_lines
        ])
        SessionMedicine.objects.bulk_create([
            SessionMedicine(
                session=session, medicine=medicine, quantity=line.quantity,
                unit_price=line.unit_price, discount=line.discount, total=line.total,
            )
            for medicine, line in medicine_lines
        ])
        log_action(admin=admin, action='session_create', object_type='session', object_id=session.id,
                   detail={'patientId': patient.id, 'total': str(session.total)})
    logger.info('Session %s created for patient %s, total %s', session.id, patient.id, session.total)
    return load_session(session.id)


def create_session_payload(vd: dict, *, admin) -> Session:
    """Create from validated :class:`~clinic.serializers.session.SessionCreateSerializer` data."""
    return create_session(
        admin=admin,
        patient=vd['patient'],
        treatment_lines=vd['treatment_lines'],
        medicine_lines=vd['medicine_lines'],
        totals=vd['totals'],
        date=vd.get('date'),
        description=vd.get('description'),
    )


def set_paid(session_id, is_paid: bool, *, admin=None) -> Session:
    with transaction.atomic():
        session = Session.objects.select_for_update().filter(id=session_id).first()
        if session is None:
            raise NotFound(SESSION_NOT_FOUND)
        if session.is_paid == is_paid:
            return load_session(session.id)
        session.is_paid = is_paid
        if is_paid and session.settled_at is None:
            _settle(session)
        session.save(update_fields=['is_paid', 'settled_at', 'updated_at'])
        log_action(admin=admin, action='session_paid' if is_paid else 'session_unpaid',
                   object_type='session', object_id=session.id,
                   detail={'settledAt': session.settled_at.isoformat() if session.settled_at else None})
    logger.info('Session %s marked %s', session.id, 'paid' if is_paid else 'unpaid')
    return load_session(session.id)


def _settle(session: Session):
    patient = Patient.objects.select_for_update().get(id=session.patient_id)
    points = loyalty_points_for(session.total or ZERO)
    patient.loyalty_points += points
    patient.save(update_fields=['loyalty_points', 'updated_at'])

    consumed = defaultdict(int)
    for line in SessionMedicine.objects.filter(session_id=session.id):
        consumed[line.medicine_id] += line.quantity
    stocks = MedicineStock.objects.select_for_update().filter(id__in=list(consumed)).order_by('id')
    for stock in stocks:
        before = stock.quantity
        stock.quantity = decrement_stock(before, consumed[stock.id])
        stock.save(update_fields=['quantity', 'updated_at'])
        logger.info('Stock %s decremented %s -> %s by session %s', stock.code, before, stock.quantity, session.id)

    session.settled_at = timezone.now()
    logger.info('Session %s settled: %s loyalty points to patient %s', session.id, points, patient.id)
