from django.utils import timezone
from rest_framework import serializers

from clinic.models import Appointment, Patient

from .common import required_messages


class AppointmentSerializer(serializers.Serializer):
    """Validates appointment payloads.

    ``date`` is a calendar day (YYYY-MM-DD) and ``time`` a 24h clock
    value (HH:MM).  A date in the past is refused when creating an
    appointment or moving an existing one; updating other fields of a
    past appointment (e.g. marking it completed) is allowed.
    """
    patientId = serializers.IntegerField(
        min_value=1,
        error_messages={**required_messages('Valid patient selection is required.'),
                        'min_value': 'Valid patient selection is required.'},
    )
    date = serializers.DateField(
        input_formats=['%Y-%m-%d'],
        error_messages=required_messages('Date must be provided in YYYY-MM-DD format.'),
    )
    time = serializers.TimeField(
        input_formats=['%H:%M'],
        error_messages=required_messages('Time must follow HH:MM (24h) format.'),
    )
    status = serializers.ChoiceField(
        choices=[c[0] for c in Appointment.STATUS_CHOICES],
        required=False,
        error_messages={'invalid_choice': 'Status must be one of PENDING, CONFIRMED, COMPLETED or CANCELLED.'},
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        if hasattr(data, 'copy') and isinstance(data.get('status'), str):
            status_value = data['status'].strip().upper()
            data = data.copy()
            if status_value:
                data['status'] = status_value
            else:
                # an empty form select means "leave unchanged"
                data.pop('status')
        return super().to_internal_value(data)

    def validate_date(self, v):
        moved = self.instance is None or self.instance.date != v
        if moved and v < timezone.localdate():
            raise serializers.ValidationError('Appointment date cannot be in the past.')
        return v

    def validate_notes(self, v):
        v = (v or '').strip()
        return v or None

    def validate(self, attrs):
        patient = Patient.objects.filter(id=attrs['patientId']).first()
        if patient is None:
            raise serializers.ValidationError('Selected patient does not exist.')
        attrs['patient'] = patient
        return attrs
