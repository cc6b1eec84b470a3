"""
Billing session endpoints.

``POST /api/sessions`` creates an invoice from treatment and medicine
lines.  ``PATCH /api/sessions/<id>`` only toggles the paid flag; the
first transition to paid settles loyalty points and stock.  The
invoice is available as a PDF.
"""
from __future__ import annotations

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Session
from ..serializers.session import SessionCreateSerializer, SessionPaidSerializer
from ..services.billing import ZERO, as_number, money
from ..services.listing import paginate, parse_pagination
from ..services.pdf import render_invoice
from ..services.sessions import create_session_payload, load_session, search_sessions, set_paid
from .common import iso, parse_id


def _line(line, catalog: dict) -> dict:
    return {
        'id': line.id,
        'quantity': line.quantity,
        'unitPrice': as_number(line.unit_price),
        'discount': as_number(line.discount or ZERO),
        'total': as_number(line.total),
        **catalog,
    }


def serialize_session(session: Session) -> dict:
    patient = session.patient
    items = [
        _line(i, {
            'treatmentId': i.treatment_id,
            'treatment': {'id': i.treatment.id, 'name': i.treatment.name, 'code': i.treatment.code},
        })
        for i in session.items.all()
    ]
    medicine_items = [
        _line(m, {
            'medicineId': m.medicine_id,
            'medicine': {
                'id': m.medicine.id,
                'name': m.medicine.name,
                'code': m.medicine.code,
                'sellingPrice': as_number(m.medicine.selling_price),
            },
        })
        for m in session.medicine_items.all()
    ]
    return {
        'id': session.id,
        'isPaid': session.is_paid,
        'patientId': session.patient_id,
        'patient': {'id': patient.id, 'name': patient.name, 'phone': patient.phone, 'email': patient.email},
        'date': iso(session.date),
        'description': session.description,
        'discount': as_number(session.discount),
        'total': as_number(session.total),
        'settledAt': iso(session.settled_at),
        'createdAt': iso(session.created_at),
        'updatedAt': iso(session.updated_at),
        'items': items,
        'medicineItems': medicine_items,
        'itemsTotal': as_number(sum((money(i.total) for i in session.items.all()), ZERO)),
        'medicinesTotal': as_number(sum((money(m.total) for m in session.medicine_items.all()), ZERO)),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sessions_list(request):
    if request.method == 'GET':
        params = parse_pagination(request.query_params)
        rows, meta = paginate(search_sessions(params.query), params)
        return Response({'data': [serialize_session(s) for s in rows], 'meta': meta})
    s = SessionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    session = create_session_payload(s.validated_data, admin=request.user)
    return Response({'data': serialize_session(session)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def session_detail(request, pk):
    session_id = parse_id(pk, 'session')
    if request.method == 'GET':
        return Response({'data': serialize_session(load_session(session_id))})
    s = SessionPaidSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    session = set_paid(session_id, s.validated_data['isPaid'], admin=request.user)
    return Response({'data': serialize_session(session)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def session_invoice(request, pk):
    session = load_session(parse_id(pk, 'session'))
    pdf = render_invoice(session)
    response = HttpResponse(pdf, content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="session-{session.id}.pdf"'
    return response
