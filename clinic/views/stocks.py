"""
Medicine stock endpoints.

The list can be narrowed to one medicine type with ``typeId``.  Its
``meta`` block also carries the inventory value and expected revenue
of all matching rows, not only the current page.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import MedicineStock, MedicineType
from ..serializers.stock import MedicineTypeSerializer, StockSerializer
from ..services.billing import as_number
from ..services.listing import paginate, parse_pagination
from ..services.stocks import inventory_totals, medicine_types, save_medicine_type, save_stock_payload, search_stocks
from .common import get_row, iso


def _serialize(stock: MedicineStock) -> dict:
    return {
        'id': stock.id,
        'code': stock.code,
        'name': stock.name,
        'quantity': stock.quantity,
        'incomingPrice': as_number(stock.incoming_price),
        'sellingPrice': as_number(stock.selling_price),
        'medicineTypeId': stock.type_id,
        'type': {'id': stock.type.id, 'name': stock.type.name},
        'createdAt': iso(stock.created_at),
        'updatedAt': iso(stock.updated_at),
    }


def _serialize_type(medicine_type: MedicineType, stock_count=None) -> dict:
    return {
        'id': medicine_type.id,
        'name': medicine_type.name,
        'stockCount': stock_count if stock_count is not None else getattr(medicine_type, 'stock_count', 0),
        'createdAt': iso(medicine_type.created_at),
        'updatedAt': iso(medicine_type.updated_at),
    }


def _type_filter(raw):
    try:
        type_id = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return type_id if type_id > 0 else None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stocks_list(request):
    if request.method == 'GET':
        params = parse_pagination(request.query_params)
        type_id = _type_filter(request.query_params.get('typeId'))
        qs = search_stocks(params.query, type_id)
        rows, meta = paginate(qs, params)
        totals = inventory_totals(qs)
        meta.update({
            'typeId': type_id,
            'inventoryValue': as_number(totals['inventoryValue']),
            'expectedRevenue': as_number(totals['expectedRevenue']),
        })
        return Response({'data': [_serialize(s) for s in rows], 'meta': meta})
    s = StockSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    stock = save_stock_payload(None, s.validated_data)
    return Response({'data': _serialize(stock)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def stock_detail(request, pk):
    stock = get_row(MedicineStock.objects.select_related('type'), pk, 'stock')
    if request.method == 'GET':
        return Response({'data': _serialize(stock)})
    s = StockSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    stock = save_stock_payload(stock, s.validated_data)
    return Response({'data': _serialize(stock)})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stock_types_list(request):
    if request.method == 'GET':
        return Response({'data': [_serialize_type(t) for t in medicine_types()]})
    s = MedicineTypeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    medicine_type = save_medicine_type(None, **s.validated_data)
    return Response({'data': _serialize_type(medicine_type, 0)}, status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def stock_type_detail(request, pk):
    medicine_type = get_row(MedicineType.objects.all(), pk, 'medicine type')
    s = MedicineTypeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    medicine_type = save_medicine_type(medicine_type, **s.validated_data)
    return Response({'data': _serialize_type(medicine_type, medicine_type.stocks.count())})
