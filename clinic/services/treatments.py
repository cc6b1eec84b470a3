from django.db.models import Q

from clinic.exceptions import Conflict
from clinic.models import Treatment

CODE_CONFLICT = 'A treatment with that code already exists.'


def search_treatments(query: str = ''):
    qs = Treatment.objects.all()
    if query:
        qs = qs.filter(Q(code__icontains=query) | Q(name__icontains=query))
    return qs.order_by('name', 'id')


def save_treatment(treatment: Treatment | None, *, code, name, price) -> Treatment:
    """Create a treatment, or update ``treatment`` when given."""
    clash = Treatment.objects.filter(code=code)
    if treatment is not None:
        clash = clash.exclude(id=treatment.id)
    if clash.exists():
        raise Conflict(CODE_CONFLICT)
    if treatment is None:
        treatment = Treatment(code=code)
    treatment.code = code
    treatment.name = name
    treatment.price = price
    treatment.save()
    return treatment
