"""
PDF documents built with reportlab's platypus layout engine.

Three documents are produced: the invoice for a single billing
session, and the session and medicine reports for a date range.  Each
renderer returns the finished PDF as ``bytes``.
"""
from __future__ import annotations

import logging
from io import BytesIO
from xml.sax.saxutils import escape

from django.conf import settings
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from clinic.models import Session

from .billing import ZERO, money
from .reports import DateRange

logger = logging.getLogger(__name__)

INK = colors.HexColor('#0f172a')
MUTED = colors.HexColor('#64748b')
RULE = colors.HexColor('#e2e8f0')
STRIPE = colors.HexColor('#f8fafc')

FOOTER = 'Generated by Medical Center Management System.'


def format_currency(value) -> str:
    return f"{settings.CURRENCY_CODE} {money(value or ZERO):,.2f}"


def _styles():
    styles = getSampleStyleSheet()
    return {
        'title': ParagraphStyle('ClinicTitle', parent=styles['Heading1'], fontSize=22, textColor=INK, spaceAfter=4),
        'subtitle': ParagraphStyle('ClinicSubtitle', parent=styles['Normal'], fontSize=10, textColor=MUTED),
        'heading': ParagraphStyle('ClinicHeading', parent=styles['Heading2'], fontSize=12, textColor=INK,
                                  spaceBefore=12, spaceAfter=4),
        'body': ParagraphStyle('ClinicBody', parent=styles['Normal'], fontSize=10, textColor=INK),
        'footer': ParagraphStyle('ClinicFooter', parent=styles['Normal'], fontSize=9, textColor=MUTED,
                                 alignment=1),
    }


def _table(rows, col_widths=None, numeric_from: int = 1) -> Table:
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('TEXTCOLOR', (0, 0), (-1, 0), MUTED),
        ('LINEBELOW', (0, 0), (-1, 0), 1, RULE),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 9),
        ('TEXTCOLOR', (0, 1), (-1, -1), INK),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, STRIPE]),
        ('ALIGN', (numeric_from, 0), (-1, -1), 'RIGHT'),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
    ]))
    return table


def _build(story, *, title: str) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=50, rightMargin=50, topMargin=50, bottomMargin=50,
                            title=title)
    try:
        doc.build(story)
    except Exception:
        logger.exception('Failed to render PDF %r', title)
        raise
    return buffer.getvalue()


def _line_rows(lines, label):
    rows = [['Item', 'Qty', 'Unit Price', 'Discount', 'Total']]
    for line in lines:
        rows.append([
            label(line),
            str(line.quantity),
            format_currency(line.unit_price),
            format_currency(line.discount),
            format_currency(line.total),
        ])
    return rows


def render_invoice(session: Session) -> bytes:
    s = _styles()
    items = list(session.items.all())
    medicine_items = list(session.medicine_items.all())
    story = [
        Paragraph(escape(settings.CLINIC_NAME), s['title']),
        Paragraph('Billing Session Invoice', s['subtitle']),
        Paragraph('Invoice Details', s['heading']),
        Paragraph(f'Session ID: {session.id}', s['body']),
        Paragraph(f'Session Date: {timezone.localtime(session.date):%Y-%m-%d}', s['body']),
        Paragraph(f'Created: {timezone.localtime(session.created_at):%Y-%m-%d %H:%M}', s['body']),
        Paragraph('Patient', s['heading']),
        Paragraph(f'Name: {escape(session.patient.name)}', s['body']),
    ]
    if session.patient.phone:
        story.append(Paragraph(f'Phone: {escape(session.patient.phone)}', s['body']))
    if session.patient.email:
        story.append(Paragraph(f'Email: {escape(session.patient.email)}', s['body']))

    widths = [200, 40, 85, 85, 85]
    if items:
        story.append(Paragraph('Treatments', s['heading']))
        story.append(_table(_line_rows(items, lambda line: line.treatment.name), widths))
    if medicine_items:
        story.append(Paragraph('Medicines', s['heading']))
        story.append(_table(_line_rows(medicine_items, lambda line: line.medicine.name), widths))

    # Gross amounts, before line discounts
    treatment_subtotal = sum((money(i.total) + money(i.discount) for i in items), ZERO)
    medicine_subtotal = sum((money(i.total) + money(i.discount) for i in medicine_items), ZERO)
    story.append(Paragraph('Summary', s['heading']))
    if treatment_subtotal > 0:
        story.append(Paragraph(f'Treatment Subtotal: {format_currency(treatment_subtotal)}', s['body']))
    if medicine_subtotal > 0:
        story.append(Paragraph(f'Medicine Subtotal: {format_currency(medicine_subtotal)}', s['body']))
    story += [
        Paragraph(f'Subtotal: {format_currency(treatment_subtotal + medicine_subtotal)}', s['body']),
        Paragraph(f'Session Discount: {format_currency(session.discount)}', s['body']),
        Paragraph(f'<b>Total Due: {format_currency(session.total)}</b>', s['body']),
    ]
    if session.description:
        story.append(Paragraph('Notes', s['heading']))
        story.append(Paragraph(escape(session.description), s['body']))
    story += [Spacer(1, 30), Paragraph(FOOTER, s['footer'])]
    return _build(story, title=f'Session {session.id} invoice')


def _period_line(period: DateRange) -> str:
    return f'{period.start:%Y-%m-%d} to {period.end:%Y-%m-%d}'


def render_sessions_report(rows: list[dict], period: DateRange) -> bytes:
    s = _styles()
    table_rows = [['Session #', 'Date', 'Patient', 'Description', 'Total']]
    for r in rows:
        table_rows.append([
            f"#{r['id']:04d}",
            r['date'],
            Paragraph(escape(r['patientName']), s['body']),
            Paragraph(escape(r['description']), s['body']),
            format_currency(r['total']),
        ])
    grand_total = sum((money(r['total']) for r in rows), ZERO)
    story = [
        Paragraph('Session Report', s['title']),
        Paragraph(_period_line(period), s['subtitle']),
        Spacer(1, 12),
        _table(table_rows, [60, 70, 120, 150, 95], numeric_from=4),
        Spacer(1, 12),
        Paragraph(f'<b>Total: {format_currency(grand_total)}</b>', s['body']),
        Spacer(1, 30),
        Paragraph(FOOTER, s['footer']),
    ]
    return _build(story, title='Session Report')


def render_medicines_report(rows: list[dict], period: DateRange) -> bytes:
    s = _styles()
    table_rows = [['Code', 'Medicine', 'Type', 'Qty Sold', 'Revenue']]
    for r in rows:
        table_rows.append([
            r['code'],
            Paragraph(escape(r['name']), s['body']),
            r['typeName'],
            str(r['quantity']),
            format_currency(r['revenue']),
        ])
    story = [
        Paragraph('Medicine Stock Report', s['title']),
        Paragraph(_period_line(period), s['subtitle']),
        Spacer(1, 12),
        _table(table_rows, [70, 150, 100, 60, 95], numeric_from=3),
        Spacer(1, 30),
        Paragraph(FOOTER, s['footer']),
    ]
    return _build(story, title='Medicine Stock Report')
