import datetime as dt
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.test import Client
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.auth import issue_session_token
from clinic.models import (
    Admin,
    MedicineStock,
    MedicineType,
    Patient,
    Session,
    SessionMedicine,
    SessionTreatment,
    Treatment,
)
from clinic.services.pdf import format_currency

pytestmark = pytest.mark.django_db


def at(day: dt.date, hour: int = 10):
    return timezone.make_aware(dt.datetime.combine(day, dt.time(hour)))


@pytest.fixture
def admin():
    return Admin.objects.create_user(username='admin', password='admin123')


@pytest.fixture
def api(admin):
    client = APIClient()
    client.force_authenticate(user=admin)
    return client


@pytest.fixture
def billing_data():
    patient = Patient.objects.create(name='Nimal Perera', phone='0771234567', email='nimal@example.com')
    treatment = Treatment.objects.create(code='ABH', name='Abhyanga', price=Decimal('1000'))
    oils = MedicineType.objects.create(name='Herbal oil')
    oil = MedicineStock.objects.create(code='KSH', name='Ksheerabala', quantity=10, incoming_price=Decimal('400'),
                                       selling_price=Decimal('550'), type=oils)
    powder = MedicineStock.objects.create(code='AVI', name='Avipathi churna', quantity=5,
                                          incoming_price=Decimal('100'), selling_price=Decimal('150'), type=oils)

    paid = Session.objects.create(patient=patient, date=at(dt.date(2024, 3, 10)), description='Back & neck',
                                  discount=Decimal('100'), total=Decimal('2550'), is_paid=True)
    SessionTreatment.objects.create(session=paid, treatment=treatment, quantity=1, unit_price=Decimal('1000'),
                                    discount=None, total=Decimal('1000'))
    SessionMedicine.objects.create(session=paid, medicine=oil, quantity=3, unit_price=Decimal('550'),
                                   discount=Decimal('0'), total=Decimal('1650'))

    unpaid = Session.objects.create(patient=patient, date=at(dt.date(2024, 3, 31), 18), total=Decimal('150'))
    SessionMedicine.objects.create(session=unpaid, medicine=powder, quantity=1, unit_price=Decimal('150'),
                                   total=Decimal('150'))

    outside = Session.objects.create(patient=patient, date=at(dt.date(2024, 4, 2)), total=Decimal('550'),
                                     is_paid=True)
    SessionMedicine.objects.create(session=outside, medicine=oil, quantity=1, unit_price=Decimal('550'),
                                   total=Decimal('550'))
    return {'paid': paid, 'unpaid': unpaid, 'outside': outside}


MARCH = {'from': '2024-03-01', 'to': '2024-03-31'}


def test_sessions_report_range_is_inclusive(api, billing_data):
    r = api.get(reverse('sessions_report'), MARCH)
    assert r.status_code == 200
    rows = r.data['data']
    assert [row['id'] for row in rows] == [billing_data['paid'].id, billing_data['unpaid'].id]
    assert rows[0] == {
        'id': billing_data['paid'].id,
        'date': '2024-03-10',
        'patientName': 'Nimal Perera',
        'description': 'Back & neck',
        'total': 2550.0,
    }
    assert r.data['meta'] == MARCH


def test_sessions_report_defaults_cover_everything(api, billing_data):
    r = api.get(reverse('sessions_report'), {'from': 'garbage'})
    assert len(r.data['data']) == 3
    assert r.data['meta']['from'] == '1970-01-01'
    assert r.data['meta']['to'] == timezone.localdate().isoformat()


def test_medicines_report_counts_paid_sessions_only(api, billing_data):
    r = api.get(reverse('medicines_report'), MARCH)
    assert r.status_code == 200
    assert r.data['data'] == [{
        'id': billing_data['paid'].medicine_items.get().medicine_id,
        'code': 'KSH',
        'name': 'Ksheerabala',
        'typeName': 'Herbal oil',
        'quantity': 3,
        'revenue': 1650.0,
    }]


def test_medicines_report_aggregates_and_sorts_by_name(api, billing_data):
    Session.objects.filter(id=billing_data['unpaid'].id).update(is_paid=True)
    r = api.get(reverse('medicines_report'))
    assert [(row['code'], row['quantity'], row['revenue']) for row in r.data['data']] == [
        ('AVI', 1, 150.0),
        ('KSH', 4, 2200.0),
    ]


@pytest.mark.parametrize('name,filename', [
    ('sessions_report_pdf', 'session-report.pdf'),
    ('medicines_report_pdf', 'medicine-report.pdf'),
])
def test_report_pdfs(api, billing_data, name, filename):
    r = api.get(reverse(name), MARCH)
    assert r.status_code == 200
    assert r['Content-Type'] == 'application/pdf'
    assert r['Content-Disposition'] == f'inline; filename="{filename}"'
    assert r.content.startswith(b'%PDF')


def test_invoice_pdf(api, billing_data):
    session = billing_data['paid']
    r = api.get(reverse('session_invoice', args=[session.id]))
    assert r.status_code == 200
    assert r['Content-Type'] == 'application/pdf'
    assert r['Content-Disposition'] == f'inline; filename="session-{session.id}.pdf"'
    assert r.content.startswith(b'%PDF')


def test_invoice_for_unknown_session(api):
    r = api.get(reverse('session_invoice', args=[424242]))
    assert r.status_code == 404


def test_currency_format(settings):
    settings.CURRENCY_CODE = 'LKR'
    assert format_currency(Decimal('1234')) == 'LKR 1,234.00'
    assert format_currency(None) == 'LKR 0.00'


def test_pages_render_lists(admin, billing_data):
    client = Client()
    client.cookies['mcms_session'] = issue_session_token(admin)
    for path in ('/dashboard', '/patients', '/treatments', '/appointments', '/sessions', '/stocks'):
        r = client.get(path)
        assert r.status_code == 200, path
    r = client.get('/patients', {'query': 'nimal'})
    assert b'Nimal Perera' in r.content
    r = client.get('/appointments', {'from': 'bad'})
    assert b'Invalid date filter. Use YYYY-MM-DD format.' in r.content
    r = client.get('/reporting', MARCH)
    assert r.status_code == 200
    assert b'/api/reports/sessions/pdf?from=2024-03-01&amp;to=2024-03-31' in r.content


# ---------------------------------------------------------------------
# Management commands
# ---------------------------------------------------------------------
def test_ensure_admin_is_idempotent(monkeypatch):
    monkeypatch.setenv('ADMIN_USERNAME', 'owner')
    monkeypatch.setenv('ADMIN_PASSWORD', 'first-pass')
    call_command('ensure_admin', stdout=StringIO())
    monkeypatch.setenv('ADMIN_PASSWORD', 'second-pass')
    call_command('ensure_admin', stdout=StringIO())
    owner = Admin.objects.get(username='owner')
    assert Admin.objects.count() == 1
    assert owner.check_password('first-pass')


def test_seed_patients_is_idempotent():
    call_command('seed_patients', stdout=StringIO())
    call_command('seed_patients', stdout=StringIO())
    assert Patient.objects.count() == 10


def test_clear_sessions_keeps_catalog(billing_data):
    out = StringIO()
    call_command('clear_sessions', stdout=out)
    assert Session.objects.count() == 0
    assert SessionMedicine.objects.count() == 0
    assert Patient.objects.count() == 1
    assert MedicineStock.objects.count() == 2
    assert 'Deleted sessions: 3' in out.getvalue()
