"""
Database models for the clinic.

These models cover the administrative side of a small ayurvedic
clinic: patients and their appointments, the treatment catalog,
medicine inventory and billing sessions.  A billing session is an
invoice for one visit and owns its treatment and medicine line items;
each line stores the price it was sold at so that later catalog edits
do not rewrite history.
"""
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models


class TimestampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Admin(AbstractUser):
    """Staff account allowed to sign in to the back office.

    Only the username and the hashed password are used by the
    application; the remaining ``AbstractUser`` fields keep the Django
    admin site and ``createsuperuser`` working.
    """

    def __str__(self) -> str:
        return self.username


class Patient(TimestampedModel):
    name = models.CharField(max_length=191)
    # Stored as digits only, e.g. 0771234567
    phone = models.CharField(max_length=20, unique=True)
    email = models.EmailField(max_length=191, blank=True, null=True)
    address = models.CharField(max_length=255, blank=True, null=True)
    # Whole points, see services.billing.loyalty_points_for
    loyalty_points = models.PositiveIntegerField(default=0)

    class Meta:
        indexes = [models.Index(fields=['name'], name='patient_name_idx')]

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"


class Treatment(TimestampedModel):
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=191)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    def __str__(self) -> str:
        return f"{self.code} {self.name}"


class Appointment(TimestampedModel):
    STATUS_PENDING = 'PENDING'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELLED = 'CANCELLED'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    )

    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='appointments')
    date = models.DateField(db_index=True)
    time = models.TimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        indexes = [models.Index(fields=['date', 'time'], name='appointment_date_time_idx')]

    def __str__(self) -> str:
        return f"{self.patient_id} @ {self.date} {self.time:%H:%M}"


class MedicineType(TimestampedModel):
    name = models.CharField(max_length=100, unique=True)

    def __str__(self) -> str:
        return self.name


class MedicineStock(TimestampedModel):
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=191)
    quantity = models.PositiveIntegerField(default=0)
    incoming_price = models.DecimalField(max_digits=10, decimal_places=2)
    selling_price = models.DecimalField(max_digits=10, decimal_places=2)
    type = models.ForeignKey(MedicineType, on_delete=models.PROTECT, related_name='stocks')

    def __str__(self) -> str:
        return f"{self.code} {self.name} x{self.quantity}"


class Session(TimestampedModel):
    """A billing session (invoice) for one patient visit."""
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='sessions')
    date = models.DateTimeField(db_index=True)
    description = models.TextField(blank=True, null=True)
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    is_paid = models.BooleanField(default=False, db_index=True)
    # Set once loyalty points and stock were applied; never cleared
    settled_at = models.DateTimeField(blank=True, null=True)

    def __str__(self) -> str:
        return f"Session #{self.id} ({self.patient_id})"


class SessionTreatment(models.Model):
    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name='items')
    treatment = models.ForeignKey(Treatment, on_delete=models.PROTECT, related_name='session_items')
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    total = models.DecimalField(max_digits=10, decimal_places=2)

    def __str__(self) -> str:
        return f"{self.treatment_id} x{self.quantity} on {self.session_id}"


class SessionMedicine(models.Model):
    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name='medicine_items')
    medicine = models.ForeignKey(MedicineStock, on_delete=models.PROTECT, related_name='session_items')
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    total = models.DecimalField(max_digits=10, decimal_places=2)

    def __str__(self) -> str:
        return f"{self.medicine_id} x{self.quantity} on {self.session_id}"


class AuditEvent(models.Model):
    ACTION_CHOICES = (
        ("login", "login"),
        ("login_failed", "login_failed"),
        ("session_create", "session_create"),
        ("session_paid", "session_paid"),
        ("session_unpaid", "session_unpaid"),
    )
    admin = models.ForeignKey(Admin, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64, choices=ACTION_CHOICES)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.admin_id}@{self.created_at:%F %T}"
