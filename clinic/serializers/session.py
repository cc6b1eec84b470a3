"""
Billing session payloads.

A new session carries a patient, optional date and description, a
session level discount and two lists of lines: ``items`` (treatments)
and ``medicines``.  Line errors are reported with the 1-based position
of the offending line so the form can point at it.
"""
from __future__ import annotations

from rest_framework import serializers

from clinic.models import MedicineStock, Patient, Treatment
from clinic.exceptions import flatten_errors
from clinic.services.billing import BillingError, LineItem, ZERO, session_totals

from .common import MoneyField, required_messages

INVALID_REFERENCES = 'Please select a valid patient, treatments and medicines.'


class QuantityField(serializers.IntegerField):
    """Line quantity; anything that is not a positive whole number counts as 1."""

    def to_internal_value(self, data):
        try:
            value = super().to_internal_value(data)
        except serializers.ValidationError:
            return 1
        return value if value > 0 else 1


class SessionLineSerializer(serializers.Serializer):
    quantity = QuantityField(required=False, allow_null=True, default=1)
    unitPrice = MoneyField(label_text='Unit price')
    discount = MoneyField(label_text='Discount', required=False, allow_null=True)

    def to_line(self) -> LineItem:
        vd = self.validated_data
        return LineItem(vd.get('quantity') or 1, vd['unitPrice'], vd.get('discount') or ZERO)


class TreatmentLineSerializer(SessionLineSerializer):
    treatmentId = serializers.IntegerField(
        min_value=1,
        error_messages={**required_messages('Treatment selection is required.'),
                        'min_value': 'Treatment selection is required.'},
    )


class MedicineLineSerializer(SessionLineSerializer):
    medicineId = serializers.IntegerField(
        min_value=1,
        error_messages={**required_messages('Medicine selection is required.'),
                        'min_value': 'Medicine selection is required.'},
    )


def _validate_lines(raw_lines, serializer_class, kind: str, ref_field: str, errors: list[str]) -> list[tuple[int, LineItem]]:
    lines = []
    for position, raw in enumerate(raw_lines, start=1):
        line = serializer_class(data=raw)
        if not line.is_valid():
            for message in flatten_errors(line.errors):
                errors.append(f"{message.rstrip('.')} for {kind} item {position}.")
            continue
        item = line.to_line()
        if item.discount_exceeds_subtotal:
            errors.append(f'Discount cannot exceed subtotal for {kind} item {position}.')
            continue
        lines.append((line.validated_data[ref_field], item))
    return lines


class SessionCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(
        min_value=1,
        error_messages={**required_messages('Patient is required.'), 'min_value': 'Patient is required.'},
    )
    date = serializers.DateTimeField(
        required=False, allow_null=True,
        input_formats=['iso-8601', '%Y-%m-%d'],
        error_messages={'invalid': 'Session date is invalid.'},
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    discount = MoneyField(label_text='Session discount', required=False, allow_null=True)
    items = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    medicines = serializers.ListField(child=serializers.DictField(), required=False, default=list)

    def validate_description(self, v):
        v = (v or '').strip()
        return v or None

    def validate(self, attrs):
        errors: list[str] = []
        treatment_lines = _validate_lines(attrs.get('items') or [], TreatmentLineSerializer, 'treatment', 'treatmentId', errors)
        medicine_lines = _validate_lines(attrs.get('medicines') or [], MedicineLineSerializer, 'medicine', 'medicineId', errors)
        if errors:
            raise serializers.ValidationError(errors)
        if not treatment_lines and not medicine_lines:
            raise serializers.ValidationError('Add at least one treatment or medicine to the session.')

        try:
            totals = session_totals(
                [item for _, item in treatment_lines],
                [item for _, item in medicine_lines],
                attrs.get('discount') or ZERO,
            )
        except BillingError as exc:
            raise serializers.ValidationError(str(exc))

        patient = Patient.objects.filter(id=attrs['patientId']).first()
        treatments = Treatment.objects.in_bulk({ref for ref, _ in treatment_lines})
        medicines = MedicineStock.objects.in_bulk({ref for ref, _ in medicine_lines})
        if (
            patient is None
            or any(ref not in treatments for ref, _ in treatment_lines)
            or any(ref not in medicines for ref, _ in medicine_lines)
        ):
            raise serializers.ValidationError(INVALID_REFERENCES)

        attrs['patient'] = patient
        attrs['treatment_lines'] = [(treatments[ref], item) for ref, item in treatment_lines]
        attrs['medicine_lines'] = [(medicines[ref], item) for ref, item in medicine_lines]
        attrs['totals'] = totals
        return attrs


class SessionPaidSerializer(serializers.Serializer):
    isPaid = serializers.BooleanField(error_messages=required_messages('isPaid boolean is required.'))

    def to_internal_value(self, data):
        # Only real JSON booleans are accepted, not "true"/1
        value = data.get('isPaid') if hasattr(data, 'get') else None
        if not isinstance(value, bool):
            raise serializers.ValidationError({'isPaid': ['isPaid boolean is required.']})
        return super().to_internal_value(data)
