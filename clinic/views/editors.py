"""
Back office data entry pages.

Every form posts back to its own URL.  Input goes through the same DRF
serializers and services as the JSON API, so the rules and messages
match.  A successful save redirects to the list page; a rejected one
renders the form again with the messages, answering 400 for invalid
input and 409 for a uniqueness conflict.
"""
from __future__ import annotations

import logging

from django.http import Http404, HttpResponseRedirect
from django.shortcuts import get_object_or_404, render
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from rest_framework.exceptions import NotFound

from ..auth import session_admin
from ..exceptions import Conflict, flatten_errors
from ..models import Appointment, MedicineStock, MedicineType, Patient, Treatment
from ..serializers.appointment import AppointmentSerializer
from ..serializers.patient import PatientSerializer
from ..serializers.session import SessionCreateSerializer
from ..serializers.stock import MedicineTypeSerializer, StockSerializer
from ..serializers.treatment import TreatmentSerializer
from ..services.appointments import save_appointment_payload
from ..services.patients import create_patient, update_patient
from ..services.sessions import create_session_payload, set_paid
from ..services.stocks import medicine_types, save_medicine_type, save_stock_payload
from ..services.treatments import save_treatment

logger = logging.getLogger(__name__)

SESSION_LINE_ROWS = 3


def _field(name, label, kind='text', choices=None, required=True):
    return {'name': name, 'label': label, 'kind': kind, 'choices': choices, 'required': required}


def _bind(fields, values):
    bound = []
    for field in fields:
        value = values.get(field['name'])
        value = '' if value is None else str(value)
        options = None
        if field['choices'] is not None:
            options = [
                {'value': str(v), 'label': text, 'selected': str(v) == value}
                for v, text in field['choices']
            ]
        bound.append({**field, 'value': value, 'options': options})
    return bound


def _form_page(request, *, title, fields, serializer_class, save, initial, back_url, instance=None):
    values, errors, status = initial, [], 200
    if request.method == 'POST':
        values = request.POST
        s = serializer_class(instance=instance, data=request.POST)
        if s.is_valid():
            try:
                save(s.validated_data)
            except Conflict as exc:
                errors, status = [str(exc.detail)], 409
            else:
                return HttpResponseRedirect(back_url)
        else:
            errors, status = flatten_errors(s.errors), 400
    return render(request, 'clinic/form.html', {
        'title': title,
        'fields': _bind(fields, values),
        'errors': errors,
        'back_url': back_url,
    }, status=status)


# ---------------------------------------------------------------------
# Patients and treatments
# ---------------------------------------------------------------------
PATIENT_FIELDS = [
    _field('name', 'Name'),
    _field('phone', 'Phone', 'tel'),
    _field('email', 'Email', 'email', required=False),
    _field('address', 'Address', required=False),
]

TREATMENT_FIELDS = [
    _field('code', 'Code'),
    _field('name', 'Name'),
    _field('price', 'Price'),
]


@require_http_methods(['GET', 'POST'])
def patient_create_page(request):
    return _form_page(
        request, title='New patient', fields=PATIENT_FIELDS, serializer_class=PatientSerializer,
        save=lambda vd: create_patient(**vd), initial={}, back_url='/patients',
    )


@require_http_methods(['GET', 'POST'])
def patient_edit_page(request, pk):
    patient = get_object_or_404(Patient, id=pk)
    return _form_page(
        request, title=f'Edit {patient.name}', fields=PATIENT_FIELDS, serializer_class=PatientSerializer,
        save=lambda vd: update_patient(patient, **vd),
        initial={'name': patient.name, 'phone': patient.phone, 'email': patient.email, 'address': patient.address},
        back_url='/patients',
    )


@require_http_methods(['GET', 'POST'])
def treatment_create_page(request):
    return _form_page(
        request, title='New treatment', fields=TREATMENT_FIELDS, serializer_class=TreatmentSerializer,
        save=lambda vd: save_treatment(None, **vd), initial={}, back_url='/treatments',
    )


@require_http_methods(['GET', 'POST'])
def treatment_edit_page(request, pk):
    treatment = get_object_or_404(Treatment, id=pk)
    return _form_page(
        request, title=f'Edit {treatment.code}', fields=TREATMENT_FIELDS, serializer_class=TreatmentSerializer,
        save=lambda vd: save_treatment(treatment, **vd),
        initial={'code': treatment.code, 'name': treatment.name, 'price': treatment.price},
        back_url='/treatments',
    )


# ---------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------
def _appointment_fields():
    patients = [(p.id, f'{p.name} ({p.phone})') for p in Patient.objects.order_by('name')]
    return [
        _field('patientId', 'Patient', choices=patients),
        _field('date', 'Date', 'date'),
        _field('time', 'Time', 'time'),
        _field('status', 'Status', choices=Appointment.STATUS_CHOICES, required=False),
        _field('notes', 'Notes', 'textarea', required=False),
    ]


@require_http_methods(['GET', 'POST'])
def appointment_create_page(request):
    return _form_page(
        request, title='New appointment', fields=_appointment_fields(), serializer_class=AppointmentSerializer,
        save=lambda vd: save_appointment_payload(None, vd),
        initial={'patientId': request.GET.get('patientId'), 'status': Appointment.STATUS_PENDING},
        back_url='/appointments',
    )


@require_http_methods(['GET', 'POST'])
def appointment_edit_page(request, pk):
    appointment = get_object_or_404(Appointment.objects.select_related('patient'), id=pk)
    return _form_page(
        request, title='Edit appointment', fields=_appointment_fields(), serializer_class=AppointmentSerializer,
        instance=appointment,
        save=lambda vd: save_appointment_payload(appointment, vd),
        initial={
            'patientId': appointment.patient_id,
            'date': appointment.date.isoformat(),
            'time': appointment.time.strftime('%H:%M'),
            'status': appointment.status,
            'notes': appointment.notes,
        },
        back_url='/appointments',
    )


@require_POST
def appointment_delete_page(request, pk):
    appointment = get_object_or_404(Appointment, id=pk)
    appointment.delete()
    logger.info('Appointment %s deleted', pk)
    return HttpResponseRedirect('/appointments')


# ---------------------------------------------------------------------
# Stock and medicine types
# ---------------------------------------------------------------------
MEDICINE_TYPE_FIELDS = [_field('name', 'Name')]


def _stock_fields():
    types = [(t.id, t.name) for t in MedicineType.objects.order_by('name')]
    return [
        _field('medicineTypeId', 'Type', choices=types),
        _field('code', 'Code'),
        _field('name', 'Name'),
        _field('quantity', 'Quantity', 'number'),
        _field('incomingPrice', 'Incoming price'),
        _field('sellingPrice', 'Selling price'),
    ]


@require_http_methods(['GET', 'POST'])
def stock_create_page(request):
    return _form_page(
        request, title='New stock item', fields=_stock_fields(), serializer_class=StockSerializer,
        save=lambda vd: save_stock_payload(None, vd), initial={}, back_url='/stocks',
    )


@require_http_methods(['GET', 'POST'])
def stock_edit_page(request, pk):
    stock = get_object_or_404(MedicineStock, id=pk)
    return _form_page(
        request, title=f'Edit {stock.code}', fields=_stock_fields(), serializer_class=StockSerializer,
        save=lambda vd: save_stock_payload(stock, vd),
        initial={
            'medicineTypeId': stock.type_id,
            'code': stock.code,
            'name': stock.name,
            'quantity': stock.quantity,
            'incomingPrice': stock.incoming_price,
            'sellingPrice': stock.selling_price,
        },
        back_url='/stocks',
    )


@require_GET
def stock_types_page(request):
    return render(request, 'clinic/stock_types.html', {'rows': medicine_types()})


@require_http_methods(['GET', 'POST'])
def stock_type_create_page(request):
    return _form_page(
        request, title='New medicine type', fields=MEDICINE_TYPE_FIELDS, serializer_class=MedicineTypeSerializer,
        save=lambda vd: save_medicine_type(None, **vd), initial={}, back_url='/stocks/types',
    )


@require_http_methods(['GET', 'POST'])
def stock_type_edit_page(request, pk):
    medicine_type = get_object_or_404(MedicineType, id=pk)
    return _form_page(
        request, title=f'Edit {medicine_type.name}', fields=MEDICINE_TYPE_FIELDS,
        serializer_class=MedicineTypeSerializer,
        save=lambda vd: save_medicine_type(medicine_type, **vd),
        initial={'name': medicine_type.name}, back_url='/stocks/types',
    )


# ---------------------------------------------------------------------
# Billing sessions
# ---------------------------------------------------------------------
def _nth(values, index):
    return values[index].strip() if index < len(values) else ''


def _session_lines(post, prefix: str, ref_field: str, catalog_prices: dict):
    """Turn the repeated line inputs of the session form into API line dicts.

    Rows without a selection are skipped.  A blank unit price takes the
    catalog price of the selected row.
    """
    refs = post.getlist(f'{prefix}Id')
    quantities = post.getlist(f'{prefix}Quantity')
    unit_prices = post.getlist(f'{prefix}UnitPrice')
    discounts = post.getlist(f'{prefix}Discount')
    lines, rows = [], []
    for i, ref in enumerate(refs):
        row = {
            'ref': ref.strip(),
            'quantity': _nth(quantities, i),
            'unitPrice': _nth(unit_prices, i),
            'discount': _nth(discounts, i),
        }
        rows.append(row)
        if not row['ref']:
            continue
        line = {
            ref_field: row['ref'],
            'quantity': row['quantity'] or 1,
            'unitPrice': row['unitPrice'] or catalog_prices.get(row['ref'], ''),
        }
        if row['discount']:
            line['discount'] = row['discount']
        lines.append(line)
    return lines, rows


def _padded(rows):
    return rows + [{} for _ in range(max(0, SESSION_LINE_ROWS - len(rows)))]


@require_http_methods(['GET', 'POST'])
def session_create_page(request):
    treatments = list(Treatment.objects.order_by('name'))
    medicines = list(MedicineStock.objects.select_related('type').order_by('name'))
    values, errors, status = {'patientId': request.GET.get('patientId', '')}, [], 200
    treatment_rows, medicine_rows = [], []

    if request.method == 'POST':
        post = request.POST
        values = post
        items, treatment_rows = _session_lines(
            post, 'treatment', 'treatmentId', {str(t.id): str(t.price) for t in treatments})
        medicine_lines, medicine_rows = _session_lines(
            post, 'medicine', 'medicineId', {str(m.id): str(m.selling_price) for m in medicines})
        s = SessionCreateSerializer(data={
            'patientId': post.get('patientId') or None,
            'date': post.get('date') or None,
            'description': post.get('description', ''),
            'discount': post.get('discount') or None,
            'items': items,
            'medicines': medicine_lines,
        })
        if s.is_valid():
            session = create_session_payload(s.validated_data, admin=session_admin(request.admin_claims))
            logger.info('Session %s created from the billing form', session.id)
            return HttpResponseRedirect('/sessions')
        errors, status = flatten_errors(s.errors), 400

    return render(request, 'clinic/session_form.html', {
        'values': values,
        'errors': errors,
        'patients': Patient.objects.order_by('name'),
        'treatments': treatments,
        'medicines': medicines,
        'treatment_rows': _padded(treatment_rows),
        'medicine_rows': _padded(medicine_rows),
    }, status=status)


@require_POST
def session_paid_page(request, pk):
    is_paid = request.POST.get('isPaid') == 'true'
    try:
        set_paid(pk, is_paid, admin=session_admin(request.admin_claims))
    except NotFound:
        raise Http404('Session not found.')
    return HttpResponseRedirect('/sessions')
