import re

from rest_framework import serializers

from .common import clean_text, required_messages

PHONE_RE = re.compile(r'^0\d{9}$')


def normalize_phone(value) -> str:
    if not isinstance(value, str):
        return ''
    return re.sub(r'\D', '', value)


class PatientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=191, error_messages=required_messages('Name is required.'))
    phone = serializers.CharField(max_length=32, error_messages=required_messages('Phone number is required.'))
    email = serializers.EmailField(
        required=False, allow_blank=True, allow_null=True, max_length=191,
        error_messages={'invalid': 'Email address is invalid.'},
    )
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Name is required.')
        return v

    def validate_phone(self, v):
        phone = normalize_phone(v)
        if not phone:
            raise serializers.ValidationError('Phone number is required.')
        if not PHONE_RE.match(phone):
            raise serializers.ValidationError('Phone number must be a valid Sri Lankan 10 digit number.')
        return phone

    def validate_email(self, v):
        return v or None

    def validate_address(self, v):
        return clean_text(v) or None
