from rest_framework import serializers

from .common import MoneyField, clean_text, required_messages


class TreatmentSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50, error_messages=required_messages('Treatment code is required.'))
    name = serializers.CharField(max_length=191, error_messages=required_messages('Treatment name is required.'))
    price = MoneyField(label_text='Price', positive=True)

    def validate_code(self, v):
        return v.strip().upper()

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Treatment name is required.')
        return v
