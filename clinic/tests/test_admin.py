from decimal import Decimal

import pytest
from django.contrib import admin as django_admin
from django.test import RequestFactory
from django.utils import timezone

from clinic.admin import SessionAdmin
from clinic.models import Admin, Patient, Session, SessionTreatment, Treatment

pytestmark = pytest.mark.django_db


@pytest.fixture
def request_as_superuser():
    request = RequestFactory().get('/admin/clinic/session/')
    request.user = Admin.objects.create_superuser(username='root', password='root1234')
    return request


@pytest.fixture
def session():
    patient = Patient.objects.create(name='Nimal Perera', phone='0771234567')
    treatment = Treatment.objects.create(code='ABH', name='Abhyanga', price=Decimal('1000'))
    session = Session.objects.create(patient=patient, date=timezone.now(), total=Decimal('1000'))
    SessionTreatment.objects.create(session=session, treatment=treatment, quantity=1,
                                    unit_price=Decimal('1000'), total=Decimal('1000'))
    return session


def test_session_billing_fields_are_read_only(request_as_superuser, session):
    model_admin = SessionAdmin(Session, django_admin.site)
    readonly = set(model_admin.get_readonly_fields(request_as_superuser, session))
    assert {'patient', 'date', 'discount', 'total', 'is_paid', 'settled_at'} <= readonly
    form_fields = model_admin.get_form(request_as_superuser, session).base_fields
    assert 'is_paid' not in form_fields
    assert 'total' not in form_fields
    assert 'discount' not in form_fields
    assert not model_admin.has_add_permission(request_as_superuser)


def test_session_lines_cannot_be_edited_from_admin(request_as_superuser, session):
    model_admin = SessionAdmin(Session, django_admin.site)
    inlines = model_admin.get_inline_instances(request_as_superuser, session)
    assert len(inlines) == 2
    for inline in inlines:
        assert not inline.has_add_permission(request_as_superuser, session)
        assert not inline.has_change_permission(request_as_superuser, session)
        assert not inline.has_delete_permission(request_as_superuser, session)
        assert {'quantity', 'unit_price', 'discount', 'total'} <= set(inline.get_readonly_fields(request_as_superuser, session))
