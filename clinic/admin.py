"""
Django admin registrations for the clinic models.

Superusers can inspect and correct clinic data through ``/admin/``.
Billing sessions show their line items inline.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import (
    Admin,
    Patient,
    Treatment,
    Appointment,
    MedicineType,
    MedicineStock,
    Session,
    SessionTreatment,
    SessionMedicine,
    AuditEvent,
)


@admin.register(Admin)
class AdminAccountAdmin(UserAdmin):
    list_display = ('username', 'is_staff', 'is_superuser', 'last_login')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'phone', 'email', 'loyalty_points', 'created_at')
    search_fields = ('name', 'phone', 'email')


@admin.register(Treatment)
class TreatmentAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'price')
    search_fields = ('code', 'name')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'date', 'time', 'status')
    list_filter = ('status', 'date')
    search_fields = ('patient__name', 'patient__phone', 'notes')


@admin.register(MedicineType)
class MedicineTypeAdmin(admin.ModelAdmin):
    list_display = ('id', 'name')
    search_fields = ('name',)


@admin.register(MedicineStock)
class MedicineStockAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'type', 'quantity', 'incoming_price', 'selling_price')
    list_filter = ('type',)
    search_fields = ('code', 'name')


class SessionLineInline(admin.TabularInline):
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class SessionTreatmentInline(SessionLineInline):
    model = SessionTreatment
    readonly_fields = ('treatment', 'quantity', 'unit_price', 'discount', 'total')


class SessionMedicineInline(SessionLineInline):
    model = SessionMedicine
    readonly_fields = ('medicine', 'quantity', 'unit_price', 'discount', 'total')


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    """Sessions are created and settled by the billing views; the admin only shows them."""
    list_display = ('id', 'patient', 'date', 'total', 'is_paid', 'settled_at')
    list_filter = ('is_paid',)
    search_fields = ('id', 'patient__name', 'description')
    readonly_fields = ('patient', 'date', 'discount', 'total', 'is_paid', 'settled_at')
    inlines = [SessionTreatmentInline, SessionMedicineInline]

    def has_add_permission(self, request):
        return False


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'admin', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('object_type', 'admin__username')
