from django import template

from clinic.services.pdf import format_currency

register = template.Library()


@register.filter
def currency(value):
    return format_currency(value)
