from django.conf import settings


def clinic(request):
    claims = getattr(request, 'admin_claims', None)
    return {
        'clinic_name': settings.CLINIC_NAME,
        'currency_code': settings.CURRENCY_CODE,
        'admin_username': claims.get('username') if claims is not None else None,
    }
