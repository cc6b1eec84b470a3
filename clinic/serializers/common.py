import html
from decimal import Decimal

import bleach
from rest_framework import serializers


def clean_text(value) -> str:
    """Strip markup from free text while keeping the literal characters."""
    cleaned = bleach.clean((value or '').strip(), tags=set(), strip=True)
    return html.unescape(cleaned).strip()


class MoneyField(serializers.DecimalField):
    """Two-decimal currency amount that tolerates thousands separators."""

    def __init__(self, label_text='Value', positive=False, **kwargs):
        kwargs.setdefault('max_digits', 10)
        kwargs.setdefault('decimal_places', 2)
        kwargs.setdefault('min_value', Decimal('0.01') if positive else Decimal('0'))
        sign = 'a positive number' if positive else 'zero or a positive number'
        messages = {
            'required': f'{label_text} is required.',
            'null': f'{label_text} is required.',
            'invalid': f'{label_text} must be {sign}.',
            'min_value': f'{label_text} must be {sign}.',
            'max_decimal_places': f'{label_text} can only have up to two decimal places.',
            'max_digits': f'{label_text} is too large.',
            'max_whole_digits': f'{label_text} is too large.',
            'max_string_length': f'{label_text} is too large.',
        }
        messages.update(kwargs.pop('error_messages', {}))
        super().__init__(error_messages=messages, **kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.replace(',', '').strip()
            if data == '':
                self.fail('required')
        if isinstance(data, bool):
            self.fail('invalid')
        return super().to_internal_value(data)


def required_messages(text: str) -> dict:
    return {'required': text, 'blank': text, 'null': text, 'invalid': text}
