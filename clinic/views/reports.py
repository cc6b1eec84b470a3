"""
Reporting endpoints.

Both reports accept an inclusive ``from``/``to`` date range and are
available as JSON and as a PDF rendered with reportlab.
"""
from __future__ import annotations

from django.http import HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services.billing import as_number
from ..services.pdf import render_medicines_report, render_sessions_report
from ..services.reports import medicines_report, parse_range, sessions_report


def _meta(period) -> dict:
    return {'from': period.start.isoformat(), 'to': period.end.isoformat()}


def _pdf(content: bytes, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="{filename}"'
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sessions_report_view(request):
    period = parse_range(request.query_params)
    rows = [{**r, 'total': as_number(r['total'])} for r in sessions_report(period)]
    return Response({'data': rows, 'meta': _meta(period)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sessions_report_pdf(request):
    period = parse_range(request.query_params)
    return _pdf(render_sessions_report(sessions_report(period), period), 'session-report.pdf')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def medicines_report_view(request):
    period = parse_range(request.query_params)
    rows = [{**r, 'revenue': as_number(r['revenue'])} for r in medicines_report(period)]
    return Response({'data': rows, 'meta': _meta(period)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def medicines_report_pdf(request):
    period = parse_range(request.query_params)
    return _pdf(render_medicines_report(medicines_report(period), period), 'medicine-report.pdf')
