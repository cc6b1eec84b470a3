"""
Server-rendered back office pages.

Access control happens in :class:`clinic.middleware.SessionGuardMiddleware`
before these views run.  The list pages share the listing helpers of
the JSON API and accept the same ``page``, ``pageSize`` and ``query``
parameters.  Data entry forms live in :mod:`clinic.views.editors`.
"""
from __future__ import annotations

import logging
import math

from django.http import HttpResponseRedirect
from django.shortcuts import render
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from rest_framework.exceptions import ValidationError

from ..auth import clear_session_cookie, issue_session_token, set_session_cookie
from ..exceptions import flatten_errors
from ..models import Appointment, MedicineType
from ..services.appointments import search_appointments
from ..services.dashboard import summary
from ..services.listing import paginate, parse_pagination
from ..services.patients import search_patients
from ..services.reports import medicines_report, parse_range, sessions_report
from ..services.sessions import search_sessions
from ..services.stocks import inventory_totals, search_stocks
from ..services.treatments import search_treatments
from .auth import MISSING_CREDENTIALS, TOO_MANY_ATTEMPTS, check_credentials, login_attempt_wait

logger = logging.getLogger(__name__)


def _page_links(request, meta: dict) -> dict:
    def link(page):
        params = request.GET.copy()
        params['page'] = page
        return '?' + params.urlencode()

    return {
        'prev_url': link(meta['page'] - 1) if meta['page'] > 1 else None,
        'next_url': link(meta['page'] + 1) if meta['page'] < meta['totalPages'] else None,
    }


def _list_page(request, template: str, qs, params, **extra):
    rows, meta = paginate(qs, params)
    context = {'rows': rows, 'meta': meta, **_page_links(request, meta), **extra}
    return render(request, template, context)


@require_GET
def home(request):
    return HttpResponseRedirect('/dashboard')


@require_http_methods(['GET', 'POST'])
def login_page(request):
    error = None
    username = ''
    if request.method == 'POST':
        username = (request.POST.get('username') or '').strip()
        wait = login_attempt_wait(request)
        if wait is not None:
            logger.warning('Login form throttled for %s', request.META.get('REMOTE_ADDR'))
            response = render(request, 'clinic/login.html', {'error': TOO_MANY_ATTEMPTS, 'username': username},
                              status=429)
            response['Retry-After'] = str(math.ceil(wait))
            return response
        admin, error = check_credentials(request, request.POST)
        if admin is not None:
            return set_session_cookie(HttpResponseRedirect('/dashboard'), issue_session_token(admin))
    status = {None: 200, MISSING_CREDENTIALS: 400}.get(error, 401)
    return render(request, 'clinic/login.html', {'error': error, 'username': username}, status=status)


@require_POST
def logout_page(request):
    return clear_session_cookie(HttpResponseRedirect('/login'))


@require_GET
def dashboard_page(request):
    return render(request, 'clinic/dashboard.html', {'summary': summary()})


@require_GET
def patients_page(request):
    params = parse_pagination(request.GET)
    return _list_page(request, 'clinic/patients.html', search_patients(params.query), params)


@require_GET
def treatments_page(request):
    params = parse_pagination(request.GET)
    return _list_page(request, 'clinic/treatments.html', search_treatments(params.query), params)


@require_GET
def appointments_page(request):
    params = parse_pagination(request.GET)
    errors = []
    try:
        qs = search_appointments(request.GET, params.query)
    except ValidationError as exc:
        errors = flatten_errors(exc.detail)
        qs = search_appointments({}, params.query)
    return _list_page(
        request, 'clinic/appointments.html', qs, params,
        errors=errors,
        statuses=[c[0] for c in Appointment.STATUS_CHOICES],
        filters={k: request.GET.get(k, '') for k in ('date', 'from', 'to', 'status')},
    )


@require_GET
def sessions_page(request):
    params = parse_pagination(request.GET)
    return _list_page(request, 'clinic/sessions.html', search_sessions(params.query), params)


@require_GET
def stocks_page(request):
    params = parse_pagination(request.GET)
    try:
        type_id = int(request.GET.get('typeId') or 0) or None
    except ValueError:
        type_id = None
    qs = search_stocks(params.query, type_id)
    return _list_page(
        request, 'clinic/stocks.html', qs, params,
        totals=inventory_totals(qs),
        types=MedicineType.objects.order_by('name'),
        type_id=type_id,
    )


@require_GET
def reporting_page(request):
    period = parse_range(request.GET)
    session_rows = sessions_report(period)
    medicine_rows = medicines_report(period)
    query = f'?from={period.start:%Y-%m-%d}&to={period.end:%Y-%m-%d}'
    return render(request, 'clinic/reporting.html', {
        'period': period,
        'session_rows': session_rows,
        'session_total': sum(r['total'] for r in session_rows),
        'medicine_rows': medicine_rows,
        'medicine_revenue': sum(r['revenue'] for r in medicine_rows),
        'sessions_pdf_url': '/api/reports/sessions/pdf' + query,
        'medicines_pdf_url': '/api/reports/medicines/pdf' + query,
    })
