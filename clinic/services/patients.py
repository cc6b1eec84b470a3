from django.db.models import Q

from clinic.exceptions import Conflict
from clinic.models import Patient

PHONE_CONFLICT = 'A patient with that phone already exists.'


def search_patients(query: str = ''):
    qs = Patient.objects.all()
    if query:
        qs = qs.filter(Q(name__icontains=query) | Q(phone__icontains=query) | Q(email__icontains=query))
    return qs.order_by('created_at', 'id')


def _ensure_unique_phone(phone: str, *, exclude_id=None):
    qs = Patient.objects.filter(phone=phone)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise Conflict(PHONE_CONFLICT)


def create_patient(*, name, phone, email=None, address=None) -> Patient:
    _ensure_unique_phone(phone)
    return Patient.objects.create(name=name, phone=phone, email=email, address=address)


def update_patient(patient: Patient, *, name, phone, email=None, address=None) -> Patient:
    _ensure_unique_phone(phone, exclude_id=patient.id)
    patient.name = name
    patient.phone = phone
    patient.email = email
    patient.address = address
    patient.save()
    return patient
