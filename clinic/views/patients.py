"""
Patient endpoints.

Patients are listed oldest first and can be searched by name, phone
or email.  Phone numbers are unique; creating or updating a patient
with a phone that already belongs to someone else yields 409.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Patient
from ..serializers.patient import PatientSerializer
from ..services.listing import paginate, parse_pagination
from ..services.patients import create_patient, search_patients, update_patient
from .common import get_row, iso


def _serialize(patient: Patient) -> dict:
    return {
        'id': patient.id,
        'name': patient.name,
        'phone': patient.phone,
        'email': patient.email,
        'address': patient.address,
        'loyaltyPoints': patient.loyalty_points,
        'createdAt': iso(patient.created_at),
        'updatedAt': iso(patient.updated_at),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def patients_list(request):
    if request.method == 'GET':
        params = parse_pagination(request.query_params)
        rows, meta = paginate(search_patients(params.query), params)
        return Response({'data': [_serialize(p) for p in rows], 'meta': meta})
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = create_patient(**s.validated_data)
    return Response({'data': _serialize(patient)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def patient_detail(request, pk):
    patient = get_row(Patient.objects.all(), pk, 'patient')
    if request.method == 'GET':
        return Response({'data': _serialize(patient)})
    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = update_patient(patient, **s.validated_data)
    return Response({'data': _serialize(patient)})
