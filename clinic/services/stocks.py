"""
Medicine inventory.

Stock items belong to a medicine type.  The list reports two
inventory figures over the filtered rows: ``inventoryValue`` (what
the stock cost) and ``expectedRevenue`` (what it sells for).
"""
from __future__ import annotations

from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum

from clinic.exceptions import Conflict
from clinic.models import MedicineStock, MedicineType

from .billing import ZERO, money

CODE_CONFLICT = 'A stock item with that code already exists.'
TYPE_CONFLICT = 'A medicine type with that name already exists.'


def search_stocks(query: str = '', type_id: int | None = None):
    qs = MedicineStock.objects.select_related('type')
    if query:
        qs = qs.filter(Q(code__icontains=query) | Q(name__icontains=query))
    if type_id:
        qs = qs.filter(type_id=type_id)
    return qs.order_by('name', 'id')


def inventory_totals(qs) -> dict:
    money_field = DecimalField(max_digits=14, decimal_places=2)
    agg = qs.order_by().aggregate(
        inventory=Sum(ExpressionWrapper(F('quantity') * F('incoming_price'), output_field=money_field)),
        revenue=Sum(ExpressionWrapper(F('quantity') * F('selling_price'), output_field=money_field)),
    )
    return {
        'inventoryValue': money(agg['inventory'] or ZERO),
        'expectedRevenue': money(agg['revenue'] or ZERO),
    }


def save_stock(stock: MedicineStock | None, *, code, name, quantity, incoming_price, selling_price, type) -> MedicineStock:
    clash = MedicineStock.objects.filter(code=code)
    if stock is not None:
        clash = clash.exclude(id=stock.id)
    if clash.exists():
        raise Conflict(CODE_CONFLICT)
    if stock is None:
        stock = MedicineStock()
    stock.code = code
    stock.name = name
    stock.quantity = quantity
    stock.incoming_price = incoming_price
    stock.selling_price = selling_price
    stock.type = type
    stock.save()
    return stock


def medicine_types():
    return MedicineType.objects.annotate(stock_count=Count('stocks')).order_by('name')


def save_medicine_type(medicine_type: MedicineType | None, *, name) -> MedicineType:
    clash = MedicineType.objects.filter(name__iexact=name)
    if medicine_type is not None:
        clash = clash.exclude(id=medicine_type.id)
    if clash.exists():
        raise Conflict(TYPE_CONFLICT)
    if medicine_type is None:
        medicine_type = MedicineType()
    medicine_type.name = name
    medicine_type.save()
    return medicine_type


def save_stock_payload(stock: MedicineStock | None, vd: dict) -> MedicineStock:
    return save_stock(
        stock,
        code=vd['code'],
        name=vd['name'],
        quantity=vd['quantity'],
        incoming_price=vd['incomingPrice'],
        selling_price=vd['sellingPrice'],
        type=vd['type'],
    )
