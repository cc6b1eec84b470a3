from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Treatment
from ..serializers.treatment import TreatmentSerializer
from ..services.billing import as_number
from ..services.listing import paginate, parse_pagination
from ..services.treatments import save_treatment, search_treatments
from .common import get_row, iso


def _serialize(treatment: Treatment) -> dict:
    return {
        'id': treatment.id,
        'code': treatment.code,
        'name': treatment.name,
        'price': as_number(treatment.price),
        'createdAt': iso(treatment.created_at),
        'updatedAt': iso(treatment.updated_at),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def treatments_list(request):
    if request.method == 'GET':
        params = parse_pagination(request.query_params)
        rows, meta = paginate(search_treatments(params.query), params)
        return Response({'data': [_serialize(t) for t in rows], 'meta': meta})
    s = TreatmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    treatment = save_treatment(None, **s.validated_data)
    return Response({'data': _serialize(treatment)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def treatment_detail(request, pk):
    treatment = get_row(Treatment.objects.all(), pk, 'treatment')
    if request.method == 'GET':
        return Response({'data': _serialize(treatment)})
    s = TreatmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    treatment = save_treatment(treatment, **s.validated_data)
    return Response({'data': _serialize(treatment)})
