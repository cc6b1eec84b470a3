import datetime as dt
from decimal import Decimal

import pytest
from django.test import Client
from django.utils import timezone

from clinic.auth import issue_session_token
from clinic.models import (
    Admin,
    Appointment,
    AuditEvent,
    MedicineStock,
    MedicineType,
    Patient,
    Session,
    Treatment,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def admin():
    return Admin.objects.create_user(username='admin', password='admin123')


@pytest.fixture
def client(admin):
    client = Client()
    client.cookies['mcms_session'] = issue_session_token(admin)
    return client


@pytest.fixture
def catalog():
    herbal = MedicineType.objects.create(name='Herbal oil')
    return {
        'patient': Patient.objects.create(name='Nimal Perera', phone='0771234567'),
        'treatment': Treatment.objects.create(code='ABH', name='Abhyanga', price=Decimal('1000')),
        'herbal': herbal,
        'medicine': MedicineStock.objects.create(code='KSH-01', name='Ksheerabala', quantity=10,
                                                 incoming_price=Decimal('400'), selling_price=Decimal('550'),
                                                 type=herbal),
    }


def tomorrow():
    return (timezone.localdate() + dt.timedelta(days=1)).isoformat()


# ---------------------------------------------------------------------
# Patients and treatments
# ---------------------------------------------------------------------
def test_patient_form_creates_patient(client):
    assert client.get('/patients/new').status_code == 200
    r = client.post('/patients/new', {'name': ' Sunethra ', 'phone': '077-100 2000', 'email': '', 'address': ''})
    assert r.status_code == 302
    assert r['Location'] == '/patients'
    patient = Patient.objects.get(phone='0771002000')
    assert patient.name == 'Sunethra'
    assert patient.email is None


def test_patient_form_shows_validation_errors(client, catalog):
    r = client.post('/patients/new', {'name': 'Ruwan', 'phone': '12345', 'email': 'ruwan@clinic'})
    assert r.status_code == 400
    assert b'Phone number must be a valid Sri Lankan 10 digit number.' in r.content
    assert b'Email address is invalid.' in r.content
    assert b'value="Ruwan"' in r.content

    r = client.post('/patients/new', {'name': 'Ruwan', 'phone': '0771234567'})
    assert r.status_code == 409
    assert b'A patient with that phone already exists.' in r.content
    assert Patient.objects.count() == 1


def test_patient_edit_form(client, catalog):
    patient = catalog['patient']
    r = client.get(f'/patients/{patient.id}/edit')
    assert r.status_code == 200
    assert b'value="0771234567"' in r.content
    r = client.post(f'/patients/{patient.id}/edit', {'name': 'Nimal P.', 'phone': '0771234567',
                                                     'email': 'nimal@clinic.lk', 'address': 'Galle'})
    assert r.status_code == 302
    patient.refresh_from_db()
    assert (patient.name, patient.email, patient.address) == ('Nimal P.', 'nimal@clinic.lk', 'Galle')
    assert client.get('/patients/99999/edit').status_code == 404


def test_treatment_forms(client, catalog):
    r = client.post('/treatments/new', {'code': 'shi', 'name': 'Shirodhara', 'price': '2,500'})
    assert r.status_code == 302
    treatment = Treatment.objects.get(code='SHI')
    assert treatment.price == Decimal('2500.00')

    r = client.post(f'/treatments/{treatment.id}/edit', {'code': 'ABH', 'name': 'Shirodhara', 'price': '2500'})
    assert r.status_code == 409
    assert b'A treatment with that code already exists.' in r.content

    r = client.post(f'/treatments/{treatment.id}/edit', {'code': 'SHI', 'name': 'Shirodhara', 'price': '0'})
    assert r.status_code == 400
    assert b'Price must be a positive number.' in r.content


# ---------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------
def test_appointment_form_books_and_edits(client, catalog):
    patient = catalog['patient']
    r = client.get('/appointments/new', {'patientId': patient.id})
    assert r.status_code == 200
    assert f'<option value="{patient.id}" selected>'.encode() in r.content

    r = client.post('/appointments/new', {'patientId': patient.id, 'date': tomorrow(), 'time': '09:30',
                                          'status': '', 'notes': ''})
    assert r.status_code == 302
    appointment = Appointment.objects.get()
    assert appointment.status == Appointment.STATUS_PENDING
    assert appointment.notes is None

    r = client.get(f'/appointments/{appointment.id}/edit')
    assert b'value="09:30"' in r.content
    r = client.post(f'/appointments/{appointment.id}/edit', {'patientId': patient.id, 'date': tomorrow(),
                                                             'time': '10:00', 'status': 'confirmed'})
    assert r.status_code == 302
    appointment.refresh_from_db()
    assert appointment.status == Appointment.STATUS_CONFIRMED
    assert appointment.time == dt.time(10, 0)


def test_appointment_form_rejects_past_date(client, catalog):
    yesterday = (timezone.localdate() - dt.timedelta(days=1)).isoformat()
    r = client.post('/appointments/new', {'patientId': catalog['patient'].id, 'date': yesterday, 'time': '09:30'})
    assert r.status_code == 400
    assert b'Appointment date cannot be in the past.' in r.content
    assert not Appointment.objects.exists()


def test_appointment_delete(client, catalog):
    appointment = Appointment.objects.create(patient=catalog['patient'], date=timezone.localdate(),
                                             time=dt.time(9, 0))
    assert client.get(f'/appointments/{appointment.id}/delete').status_code == 405
    r = client.post(f'/appointments/{appointment.id}/delete')
    assert r.status_code == 302
    assert r['Location'] == '/appointments'
    assert not Appointment.objects.exists()
    assert client.post(f'/appointments/{appointment.id}/delete').status_code == 404


# ---------------------------------------------------------------------
# Stock and medicine types
# ---------------------------------------------------------------------
def test_stock_forms(client, catalog):
    payload = {'medicineTypeId': catalog['herbal'].id, 'code': 'avi', 'name': 'Avipathi churna',
               'quantity': '5', 'incomingPrice': '100', 'sellingPrice': '150'}
    r = client.post('/stocks/new', payload)
    assert r.status_code == 302
    stock = MedicineStock.objects.get(code='AVI')
    assert stock.type == catalog['herbal']

    r = client.post(f'/stocks/{stock.id}/edit', {**payload, 'incomingPrice': '200'})
    assert r.status_code == 400
    assert b'Selling price should be greater than or equal to incoming price.' in r.content

    r = client.post(f'/stocks/{stock.id}/edit', {**payload, 'code': 'KSH-01'})
    assert r.status_code == 409

    r = client.get(f'/stocks/{stock.id}/edit')
    assert b'value="AVI"' in r.content


def test_medicine_type_pages(client, catalog):
    r = client.get('/stocks/types')
    assert r.status_code == 200
    assert b'Herbal oil' in r.content

    r = client.post('/stocks/types/new', {'name': 'Gulika'})
    assert r.status_code == 302
    assert r['Location'] == '/stocks/types'
    gulika = MedicineType.objects.get(name='Gulika')

    r = client.post(f'/stocks/types/{gulika.id}/edit', {'name': 'HERBAL OIL'})
    assert r.status_code == 409
    assert b'A medicine type with that name already exists.' in r.content


# ---------------------------------------------------------------------
# Billing sessions
# ---------------------------------------------------------------------
def session_form(catalog, **overrides):
    data = {
        'patientId': catalog['patient'].id,
        'date': '',
        'description': 'Back pain',
        'discount': '100',
        'treatmentId': [catalog['treatment'].id, ''],
        'treatmentQuantity': ['2', ''],
        'treatmentUnitPrice': ['', ''],
        'treatmentDiscount': ['', ''],
        'medicineId': [catalog['medicine'].id],
        'medicineQuantity': ['0'],
        'medicineUnitPrice': ['500'],
        'medicineDiscount': ['50'],
    }
    data.update(overrides)
    return data


def test_session_form_creates_invoice(client, admin, catalog):
    r = client.get('/sessions/new', {'patientId': catalog['patient'].id})
    assert r.status_code == 200
    assert b'Ksheerabala' in r.content

    r = client.post('/sessions/new', session_form(catalog))
    assert r.status_code == 302
    assert r['Location'] == '/sessions'
    session = Session.objects.get()
    # 2 x 1000 at catalog price, plus 1 x 500 less 50, less 100
    assert session.total == Decimal('2350.00')
    assert session.discount == Decimal('100.00')
    assert not session.is_paid
    assert [(i.quantity, i.unit_price) for i in session.items.all()] == [(2, Decimal('1000.00'))]
    assert [(m.quantity, m.total) for m in session.medicine_items.all()] == [(1, Decimal('450.00'))]
    assert AuditEvent.objects.get(action='session_create').admin == admin


def test_session_form_shows_errors(client, catalog):
    r = client.post('/sessions/new', session_form(catalog, treatmentId=['', ''], medicineId=['']))
    assert r.status_code == 400
    assert b'Add at least one treatment or medicine to the session.' in r.content

    r = client.post('/sessions/new', session_form(catalog, medicineDiscount=['600']))
    assert r.status_code == 400
    assert b'Discount cannot exceed subtotal for medicine item 1.' in r.content
    assert b'Back pain' in r.content
    assert not Session.objects.exists()


def test_mark_paid_button_settles_session(client, admin, catalog):
    client.post('/sessions/new', session_form(catalog, discount=''))
    session = Session.objects.get()

    r = client.post(f'/sessions/{session.id}/paid', {'isPaid': 'true'})
    assert r.status_code == 302
    session.refresh_from_db()
    assert session.is_paid
    assert session.settled_at is not None
    patient = Patient.objects.get(id=catalog['patient'].id)
    assert patient.loyalty_points == 2450
    assert MedicineStock.objects.get(id=catalog['medicine'].id).quantity == 9
    assert AuditEvent.objects.get(action='session_paid').admin == admin

    client.post(f'/sessions/{session.id}/paid', {'isPaid': 'false'})
    client.post(f'/sessions/{session.id}/paid', {'isPaid': 'true'})
    assert Patient.objects.get(id=patient.id).loyalty_points == 2450
    assert MedicineStock.objects.get(id=catalog['medicine'].id).quantity == 9

    assert client.post('/sessions/99999/paid', {'isPaid': 'true'}).status_code == 404


def test_list_pages_link_to_forms(client, catalog):
    r = client.get('/patients')
    assert f'/patients/{catalog["patient"].id}/edit'.encode() in r.content
    r = client.get('/stocks')
    assert b'/stocks/types' in r.content
    client.post('/sessions/new', session_form(catalog))
    r = client.get('/sessions')
    assert b'Mark paid' in r.content
