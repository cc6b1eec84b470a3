"""
URL mappings for the clinic.

JSON endpoints live under ``/api/``; the back office pages sit at the
root.  Trailing slashes are deliberately omitted.
"""
from django.urls import path, include

from .views import health
from .views import editors
from .views import pages
from .views.auth import login_view, logout_view
from .views.appointments import appointments_list, appointment_detail
from .views.dashboard import dashboard_view
from .views.patients import patients_list, patient_detail
from .views.reports import (
    sessions_report_view,
    sessions_report_pdf,
    medicines_report_view,
    medicines_report_pdf,
)
from .views.sessions import sessions_list, session_detail, session_invoice
from .views.stocks import stocks_list, stock_detail, stock_types_list, stock_type_detail
from .views.treatments import treatments_list, treatment_detail

api_patterns = [
    path('auth/login', login_view, name='login_view'),
    path('auth/logout', logout_view, name='logout_view'),
    path('dashboard', dashboard_view, name='dashboard_api'),
    path('patients', patients_list, name='patients_list'),
    path('patients/<str:pk>', patient_detail, name='patient_detail'),
    path('treatments', treatments_list, name='treatments_list'),
    path('treatments/<str:pk>', treatment_detail, name='treatment_detail'),
    path('appointments', appointments_list, name='appointments_list'),
    path('appointments/<str:pk>', appointment_detail, name='appointment_detail'),
    path('sessions', sessions_list, name='sessions_list'),
    path('sessions/<str:pk>/invoice', session_invoice, name='session_invoice'),
    path('sessions/<str:pk>', session_detail, name='session_detail'),
    path('stocks', stocks_list, name='stocks_list'),
    path('stocks/<str:pk>', stock_detail, name='stock_detail'),
    path('stock-types', stock_types_list, name='stock_types_list'),
    path('stock-types/<str:pk>', stock_type_detail, name='stock_type_detail'),
    path('reports/sessions', sessions_report_view, name='sessions_report'),
    path('reports/sessions/pdf', sessions_report_pdf, name='sessions_report_pdf'),
    path('reports/medicines', medicines_report_view, name='medicines_report'),
    path('reports/medicines/pdf', medicines_report_pdf, name='medicines_report_pdf'),
]

urlpatterns = [
    path('api/', include(api_patterns)),
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    path('', pages.home, name='home'),
    path('login', pages.login_page, name='login_page'),
    path('logout', pages.logout_page, name='logout_page'),
    path('dashboard', pages.dashboard_page, name='dashboard_page'),
    path('patients', pages.patients_page, name='patients_page'),
    path('patients/new', editors.patient_create_page, name='patient_create_page'),
    path('patients/<int:pk>/edit', editors.patient_edit_page, name='patient_edit_page'),
    path('treatments', pages.treatments_page, name='treatments_page'),
    path('treatments/new', editors.treatment_create_page, name='treatment_create_page'),
    path('treatments/<int:pk>/edit', editors.treatment_edit_page, name='treatment_edit_page'),
    path('appointments', pages.appointments_page, name='appointments_page'),
    path('appointments/new', editors.appointment_create_page, name='appointment_create_page'),
    path('appointments/<int:pk>/edit', editors.appointment_edit_page, name='appointment_edit_page'),
    path('appointments/<int:pk>/delete', editors.appointment_delete_page, name='appointment_delete_page'),
    path('sessions', pages.sessions_page, name='sessions_page'),
    path('sessions/new', editors.session_create_page, name='session_create_page'),
    path('sessions/<int:pk>/paid', editors.session_paid_page, name='session_paid_page'),
    path('stocks', pages.stocks_page, name='stocks_page'),
    path('stocks/new', editors.stock_create_page, name='stock_create_page'),
    path('stocks/<int:pk>/edit', editors.stock_edit_page, name='stock_edit_page'),
    path('stocks/types', editors.stock_types_page, name='stock_types_page'),
    path('stocks/types/new', editors.stock_type_create_page, name='stock_type_create_page'),
    path('stocks/types/<int:pk>/edit', editors.stock_type_edit_page, name='stock_type_edit_page'),
    path('reporting', pages.reporting_page, name='reporting_page'),
]
