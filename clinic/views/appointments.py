"""
Appointment endpoints.

Besides the usual ``page``/``pageSize``/``query`` parameters the list
accepts ``date``, ``from`` and ``to`` (YYYY-MM-DD) and ``status``.
Appointments are the only records that can be deleted.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Appointment
from ..serializers.appointment import AppointmentSerializer
from ..services.appointments import save_appointment_payload, search_appointments
from ..services.listing import paginate, parse_pagination
from .common import get_row, iso


def _serialize(appointment: Appointment) -> dict:
    patient = appointment.patient
    return {
        'id': appointment.id,
        'patientId': appointment.patient_id,
        'patient': {
            'id': patient.id,
            'name': patient.name,
            'phone': patient.phone,
            'email': patient.email,
        },
        'date': appointment.date.isoformat(),
        'time': appointment.time.strftime('%H:%M'),
        'status': appointment.status,
        'notes': appointment.notes,
        'createdAt': iso(appointment.created_at),
        'updatedAt': iso(appointment.updated_at),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def appointments_list(request):
    if request.method == 'GET':
        params = parse_pagination(request.query_params)
        qs = search_appointments(request.query_params, params.query)
        rows, meta = paginate(qs, params)
        meta.update({
            'date': request.query_params.get('date') or None,
            'from': request.query_params.get('from') or None,
            'to': request.query_params.get('to') or None,
            'status': (request.query_params.get('status') or '').upper() or None,
        })
        return Response({'data': [_serialize(a) for a in rows], 'meta': meta})
    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = save_appointment_payload(None, s.validated_data)
    return Response({'data': _serialize(appointment)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, pk):
    appointment = get_row(Appointment.objects.select_related('patient'), pk, 'appointment')
    if request.method == 'GET':
        return Response({'data': _serialize(appointment)})
    if request.method == 'DELETE':
        appointment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
    s = AppointmentSerializer(appointment, data=request.data)
    s.is_valid(raise_exception=True)
    appointment = save_appointment_payload(appointment, s.validated_data)
    return Response({'data': _serialize(appointment)})
