from rest_framework import serializers

from clinic.models import MedicineType

from .common import MoneyField, clean_text, required_messages


class MedicineTypeSerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=100,
        error_messages={**required_messages('Medicine type name is required.'),
                        'max_length': 'Medicine type name must be 100 characters or less.'},
    )

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Medicine type name is required.')
        return v


class StockSerializer(serializers.Serializer):
    medicineTypeId = serializers.IntegerField(
        min_value=1,
        error_messages={**required_messages('Medicine type is required.'), 'min_value': 'Medicine type is required.'},
    )
    code = serializers.CharField(max_length=50, error_messages=required_messages('Medicine code is required.'))
    name = serializers.CharField(max_length=191, error_messages=required_messages('Medicine name is required.'))
    quantity = serializers.IntegerField(
        min_value=1,
        error_messages={**required_messages('Quantity must be a positive whole number.'),
                        'min_value': 'Quantity must be a positive whole number.'},
    )
    incomingPrice = MoneyField(label_text='Incoming price', positive=True)
    sellingPrice = MoneyField(label_text='Selling price', positive=True)

    def validate_code(self, v):
        return v.strip().upper()

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Medicine name is required.')
        return v

    def validate(self, attrs):
        if attrs['incomingPrice'] > attrs['sellingPrice']:
            raise serializers.ValidationError('Selling price should be greater than or equal to incoming price.')
        medicine_type = MedicineType.objects.filter(id=attrs['medicineTypeId']).first()
        if medicine_type is None:
            raise serializers.ValidationError('Please select a valid medicine type.')
        attrs['type'] = medicine_type
        return attrs
